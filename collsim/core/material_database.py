"""Material catalog — resolves NIST material names to shared Material objects.

Loads the catalog JSON from ``collsim/data/nist_materials.json`` on the
first lookup. Each resolved material is created once and handed out by
reference afterwards; repeated resolution never rebuilds it.
"""

from __future__ import annotations

import json
import logging
import pathlib

from collsim.errors import UnknownMaterial
from collsim.models.material import (
    Composition,
    Material,
    MaterialCategory,
    MaterialState,
)

logger = logging.getLogger(__name__)

_DEFAULT_CATALOG = pathlib.Path(__file__).resolve().parents[1] / "data" / "nist_materials.json"


class MaterialCatalog:
    """Lookup of the supported material catalog.

    Usage::

        catalog = MaterialCatalog()
        iron = catalog.resolve("G4_Fe")
        assert catalog.resolve("G4_Fe") is iron

    Args:
        catalog_path: Path to the catalog JSON. If *None*, the packaged
                      ``nist_materials.json`` is used.
    """

    def __init__(self, catalog_path: str | pathlib.Path | None = None) -> None:
        self._path = pathlib.Path(catalog_path) if catalog_path else _DEFAULT_CATALOG
        self._raw: dict[str, dict] | None = None
        self._materials: dict[str, Material] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(self, name: str) -> Material:
        """Return the shared material for *name*.

        Raises:
            UnknownMaterial: If *name* is not in the catalog.
        """
        material = self._materials.get(name)
        if material is not None:
            return material

        raw = self._catalog().get(name)
        if raw is None:
            raise UnknownMaterial(name)
        material = self._build(name, raw)
        self._materials[name] = material
        logger.info(
            "Resolved material %s (%s, %.6g g/cm3)",
            material.id, material.name, material.density,
        )
        return material

    def available(self) -> list[str]:
        """Sorted ids of every material the catalog can resolve."""
        return sorted(self._catalog())

    def resolved(self) -> list[Material]:
        """Materials resolved so far, in resolution order."""
        return list(self._materials.values())

    def is_resolved(self, name: str) -> bool:
        return name in self._materials

    def format_table(self) -> str:
        """Render the resolved materials as a fixed-width text table."""
        lines = [
            f"{'Material':<14}{'Name':<18}{'Z':>7}{'Density[g/cm3]':>16}{'I[eV]':>9}  State",
        ]
        for m in self._materials.values():
            lines.append(
                f"{m.id:<14}{m.name:<18}{m.atomic_number:>7.2f}"
                f"{m.density:>16.6g}{m.mean_excitation_eV:>9.1f}  {m.state.value}"
            )
            for comp in m.composition:
                lines.append(f"{'':<14}  {comp.element:<4}{comp.weight_fraction:>10.6f}")
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _catalog(self) -> dict[str, dict]:
        """Load the catalog file once."""
        if self._raw is None:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
            self._raw = {entry["material_id"]: entry for entry in data.get("materials", [])}
            logger.debug("Loaded %d catalog entries from %s", len(self._raw), self._path)
        return self._raw

    @staticmethod
    def _build(name: str, raw: dict) -> Material:
        """Create a Material from one catalog entry."""
        composition = tuple(
            Composition(
                element=entry["element"],
                weight_fraction=entry["weight_fraction"],
            )
            for entry in raw.get("composition", [])
        )
        category = (
            MaterialCategory.COMPOUND
            if raw.get("category") == "compound"
            else MaterialCategory.PURE_ELEMENT
        )
        return Material(
            id=name,
            name=raw.get("name", name),
            symbol=raw.get("symbol", name),
            atomic_number=raw.get("atomic_number", 0),
            density=raw.get("density_g_cm3", 0.0),
            mean_excitation_eV=raw.get("mean_excitation_eV", 0.0),
            state=MaterialState(raw.get("state", "solid")),
            category=category,
            composition=composition,
            color=raw.get("color", "#808080"),
        )
