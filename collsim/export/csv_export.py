"""CSV export — flat placement table of a built geometry.

BOM UTF-8 encoding for Excel compatibility.
"""

from __future__ import annotations

import csv

from collsim.constants import GEOMETRY_SCHEMA_VERSION
from collsim.core.placement_engine import PlacementEngine
from collsim.core.serializers import placement_rows


class CsvExporter:
    """CSV file export operations."""

    def export_placements(
        self, engine: PlacementEngine, output_path: str,
    ) -> None:
        """Export every placement reached from the world root.

        Columns: Path, Placement, Volume, Material, Shape, Copy, Depth,
        global X/Y/Z (mm). A leading comment row carries the schema version.

        Args:
            engine: Placement engine of a constructed geometry.
            output_path: Destination file path (.csv).
        """
        headers = [
            "Path", "Placement", "Volume", "Material", "Shape", "Copy", "Depth",
            "X (mm)", "Y (mm)", "Z (mm)",
        ]
        with open(output_path, "w", newline="", encoding="utf-8-sig") as f:
            writer = csv.writer(f)
            writer.writerow([f"# schema_version={GEOMETRY_SCHEMA_VERSION}"])
            writer.writerow(headers)
            for r in placement_rows(engine):
                writer.writerow([
                    r["path"],
                    r["name"],
                    r["volume"],
                    r["material"],
                    r["shape"],
                    r["copy_index"],
                    r["depth"],
                    f"{r['global_x_mm']:.6f}",
                    f"{r['global_y_mm']:.6f}",
                    f"{r['global_z_mm']:.6f}",
                ])
