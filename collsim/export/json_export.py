"""JSON configuration import and geometry export."""

from __future__ import annotations

import json

from collsim.core.placement_engine import PlacementEngine
from collsim.core.serializers import (
    dict_to_setup_config,
    geometry_to_dict,
    setup_config_to_dict,
)
from collsim.models.setup import SetupConfig


class JsonExporter:
    """JSON file operations."""

    def export_geometry(
        self, engine: PlacementEngine, output_path: str,
    ) -> None:
        """Write the built geometry tree as formatted JSON.

        Args:
            engine: Placement engine of a constructed geometry.
            output_path: Destination file path (.json).
        """
        data = geometry_to_dict(engine)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def export_config(
        self, config: SetupConfig, output_path: str, units: str = "mm",
    ) -> None:
        """Write a setup configuration, lengths in *units*."""
        data = setup_config_to_dict(config, units=units)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def import_config(self, input_path: str) -> SetupConfig:
        """Read a setup configuration from a JSON file.

        Args:
            input_path: Source file path (.json).

        Returns:
            Configuration with lengths converted to mm.
        """
        with open(input_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return dict_to_setup_config(data)
