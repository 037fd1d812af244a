"""Shared fixtures: the reference collimator configuration."""

import pytest

from collsim.core.units import cm_to_mm
from collsim.models.geometry import CollimatorDimensions

# Reference scenario dimensions [cm]
REFERENCE_CM = {
    "src_radius": 0.1,
    "src_halfz": 0.1,
    "src_shiftz": 4.5,
    "enc_radius": 5.0,
    "enc_halfz": 5.0,
    "opn_radius": 0.3,
    "opn_halfz": 4.5,
    "pcl_radius": 4.5,
    "pcl_halfz": 0.5,
    "air_gap": 1.0,
    "coll_radius": 5.0,
    "coll_halfz": 10.0,
    "scl_radius": 4.0,
    "scl_hole_a": 0.2,
    "scl_hole_b": 0.5,
    "scl_halfz": 3.0,
}


def make_dimensions(**overrides_mm: float) -> CollimatorDimensions:
    dims = CollimatorDimensions()
    for name, value_cm in REFERENCE_CM.items():
        dims.set(name, cm_to_mm(value_cm))
    for name, value in overrides_mm.items():
        dims.set(name, value)
    return dims


@pytest.fixture
def reference_dimensions() -> CollimatorDimensions:
    return make_dimensions()


@pytest.fixture
def dimensions_factory():
    """Reference dimensions with selected values overridden [mm]."""
    return make_dimensions
