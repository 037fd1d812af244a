"""Unit conversion module — single conversion point for lengths and angles.

CRITICAL: All unit conversions MUST go through this module.

Internal (core) units:
    Length : mm
    Angle  : radian
    Density: g/cm³

Configuration units:
    Length : mm, cm or m
    Angle  : degree
"""

import math
from typing import NewType

# Type aliases, visible in the IDE for unit-error detection
Cm = NewType('Cm', float)
Mm = NewType('Mm', float)
Radian = NewType('Radian', float)

# Length unit name → mm factor
LENGTH_UNITS: dict[str, float] = {
    "mm": 1.0,
    "cm": 10.0,
    "m": 1000.0,
}


# ---------------------------------------------------------------------------
# Length conversions
# ---------------------------------------------------------------------------

def mm_to_cm(mm: float) -> Cm:
    """Core (mm) → cm."""
    return Cm(mm * 0.1)


def cm_to_mm(cm: float) -> Mm:
    """cm → Core (mm)."""
    return Mm(cm * 10.0)


def to_mm(value: float, unit: str) -> Mm:
    """Convert a length in *unit* to core mm.

    Raises:
        KeyError: If *unit* is not one of LENGTH_UNITS.
    """
    try:
        factor = LENGTH_UNITS[unit]
    except KeyError:
        raise KeyError(f"Unknown length unit: {unit!r}")
    return Mm(float(value) * factor)


# ---------------------------------------------------------------------------
# Angle conversions
# ---------------------------------------------------------------------------

def deg_to_rad(deg: float) -> Radian:
    """Degree → Radian."""
    return Radian(deg * (math.pi / 180.0))


def rad_to_deg(rad: float) -> float:
    """Radian → Degree."""
    return rad * (180.0 / math.pi)
