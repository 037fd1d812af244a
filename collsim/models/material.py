"""Material data models.

Materials are immutable once resolved and shared by reference across
volumes. Reference: NIST material database as used by the transport engine.
"""

from dataclasses import dataclass, field
from enum import Enum


class MaterialCategory(Enum):
    PURE_ELEMENT = "pure_element"
    COMPOUND = "compound"


class MaterialState(Enum):
    SOLID = "solid"
    LIQUID = "liquid"
    GAS = "gas"


@dataclass(frozen=True)
class Composition:
    """Single element in a compound or mixture.

    Attributes:
        element: Element symbol (e.g. "N", "O", "Ar").
        weight_fraction: Weight fraction [0.0–1.0].
    """
    element: str
    weight_fraction: float


@dataclass(frozen=True)
class Material:
    """Material definition with bulk physical properties.

    Attributes:
        id: Catalog identifier ("G4_Fe", "G4_AIR", etc.).
        name: Display name.
        symbol: Chemical symbol or formula.
        atomic_number: Atomic number (effective Z for compounds).
        density: Density [g/cm³].
        mean_excitation_eV: Mean excitation energy I [eV].
        state: Physical state.
        category: Pure element or compound.
        composition: Element list for compounds.
        color: Hex color code, display hint for viewers.
    """
    id: str
    name: str
    symbol: str
    atomic_number: float
    density: float
    mean_excitation_eV: float
    state: MaterialState = MaterialState.SOLID
    category: MaterialCategory = MaterialCategory.PURE_ELEMENT
    composition: tuple[Composition, ...] = field(default_factory=tuple)
    color: str = "#808080"
