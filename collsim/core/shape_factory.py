"""Shape factory — validated constructors for tube, cone and box solids.

Pure functions of their arguments; all lengths in mm, sweep in degree.
"""

from __future__ import annotations

import math
import numbers

from collsim.errors import InvalidDimension
from collsim.models.geometry import BoxShape, ConeShape, TubeShape


def _check_length(name: str, value: float, positive: bool = False) -> float:
    if not isinstance(value, numbers.Real) or not math.isfinite(value):
        raise InvalidDimension(name, value, "not a finite number")
    if value < 0.0:
        raise InvalidDimension(name, value, "must be >= 0")
    if positive and value == 0.0:
        raise InvalidDimension(name, value, "must be > 0")
    return float(value)


def _check_sweep(sweep_deg: float) -> float:
    if not isinstance(sweep_deg, numbers.Real) or not math.isfinite(sweep_deg):
        raise InvalidDimension("sweep_deg", sweep_deg, "not a finite number")
    if not 0.0 < sweep_deg <= 360.0:
        raise InvalidDimension("sweep_deg", sweep_deg, "must be in (0, 360]")
    return float(sweep_deg)


def _check_radii(inner_name: str, inner: float, outer_name: str, outer: float) -> None:
    if inner > outer:
        raise InvalidDimension(
            inner_name, inner, f"exceeds {outer_name} = {outer!r}",
        )


class ShapeFactory:
    """Builds solid descriptors, rejecting malformed parameters.

    Raises InvalidDimension naming the offending parameter for negative or
    non-finite values, inner radius above outer radius, zero half length,
    or a sweep outside (0, 360].
    """

    @staticmethod
    def tube(
        inner_radius: float,
        outer_radius: float,
        half_length: float,
        sweep_deg: float = 360.0,
    ) -> TubeShape:
        rmin = _check_length("inner_radius", inner_radius)
        rmax = _check_length("outer_radius", outer_radius, positive=True)
        hz = _check_length("half_length", half_length, positive=True)
        _check_radii("inner_radius", rmin, "outer_radius", rmax)
        return TubeShape(rmin, rmax, hz, _check_sweep(sweep_deg))

    # Same solid under the generic name
    cylinder = tube

    @staticmethod
    def cone(
        inner_radius1: float,
        outer_radius1: float,
        inner_radius2: float,
        outer_radius2: float,
        half_length: float,
        sweep_deg: float = 360.0,
    ) -> ConeShape:
        rmin1 = _check_length("inner_radius1", inner_radius1)
        rmax1 = _check_length("outer_radius1", outer_radius1)
        rmin2 = _check_length("inner_radius2", inner_radius2)
        rmax2 = _check_length("outer_radius2", outer_radius2)
        hz = _check_length("half_length", half_length, positive=True)
        _check_radii("inner_radius1", rmin1, "outer_radius1", rmax1)
        _check_radii("inner_radius2", rmin2, "outer_radius2", rmax2)
        if rmax1 == 0.0 and rmax2 == 0.0:
            raise InvalidDimension("outer_radius1", rmax1, "both outer radii are zero")
        return ConeShape(rmin1, rmax1, rmin2, rmax2, hz, _check_sweep(sweep_deg))

    @staticmethod
    def box(half_x: float, half_y: float, half_z: float) -> BoxShape:
        return BoxShape(
            _check_length("half_x", half_x, positive=True),
            _check_length("half_y", half_y, positive=True),
            _check_length("half_z", half_z, positive=True),
        )
