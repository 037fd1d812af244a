"""Serialization utilities — dataclass ↔ JSON-safe dict conversion.

Handles Enum fields, NumPy arrays, unit conversion of configuration
lengths, and the placement tree of a built geometry.
Used by the JSON/CSV exporters and the command line.
"""

from __future__ import annotations

import dataclasses
import numbers
from enum import Enum
from typing import Any, Optional

import numpy as np

from collsim.constants import CONFIG_SCHEMA_VERSION, GEOMETRY_SCHEMA_VERSION
from collsim.core.placement_engine import PlacementEngine
from collsim.core.units import LENGTH_UNITS, to_mm
from collsim.errors import InvalidDimension
from collsim.models.geometry import (
    CollimatorDimensions,
    OverlapPolicy,
    Placement,
    Transform,
    Volume,
)
from collsim.models.physics import CutSet, PhysicsConfig
from collsim.models.setup import SetupConfig


# =====================================================================
# Generic helpers
# =====================================================================


def _serialize_value(val: Any) -> Any:
    """Convert a value to a JSON-safe type."""
    if val is None:
        return None
    if isinstance(val, Enum):
        return val.value
    if isinstance(val, np.ndarray):
        return val.tolist()
    if dataclasses.is_dataclass(val) and not isinstance(val, type):
        return _dataclass_to_dict(val)
    if isinstance(val, (list, tuple)):
        return [_serialize_value(v) for v in val]
    if isinstance(val, (int, float, str, bool)):
        return val
    return str(val)


def _dataclass_to_dict(obj: Any) -> dict:
    """Recursively convert a dataclass to a JSON-safe dict."""
    result = {}
    for f in dataclasses.fields(obj):
        val = getattr(obj, f.name)
        result[f.name] = _serialize_value(val)
    return result


# =====================================================================
# Setup configuration
# =====================================================================


def setup_config_to_dict(config: SetupConfig, units: str = "mm") -> dict:
    """Serialize a SetupConfig with lengths expressed in *units*.

    Unset dimensions are written as ``null``.
    """
    factor = LENGTH_UNITS[units]
    dims = config.dimensions
    dimensions = {}
    for name in dims.dimension_names():
        value = getattr(dims, name)
        dimensions[name] = None if value is None else value / factor
    return {
        "schema_version": CONFIG_SCHEMA_VERSION,
        "units": units,
        "dimensions": dimensions,
        "world_extent": dims.world_extent / factor,
        "source_material": dims.source_material,
        "overlap_policy": config.overlap_policy.value,
        "physics": {
            "base_package": config.physics.base_package,
            "extra_packages": list(config.physics.extra_packages),
            "units": "mm",
            "cuts": _dataclass_to_dict(config.physics.cuts),
        },
    }


def dict_to_setup_config(data: dict) -> SetupConfig:
    """Deserialize a configuration dict.

    Lengths are converted from the dict's ``units`` (default mm) to mm.
    Dimensions given as ``null`` stay unset.

    Raises:
        KeyError: Unknown dimension name or length unit.
        InvalidDimension: Invalid dimension or cut value.
        ValueError: Unknown overlap policy.
    """
    units = data.get("units", "mm")
    dims = CollimatorDimensions()
    for name, value in data.get("dimensions", {}).items():
        if value is None:
            continue
        dims.set(name, to_mm(value, units))
    if data.get("world_extent") is not None:
        dims.set("world_extent", to_mm(data["world_extent"], units))
    if data.get("source_material"):
        dims.source_material = data["source_material"]

    policy = OverlapPolicy(data.get("overlap_policy", OverlapPolicy.STRICT.value))
    physics = dict_to_physics_config(data.get("physics", {}))
    return SetupConfig(dimensions=dims, overlap_policy=policy, physics=physics)


def dict_to_physics_config(data: dict) -> PhysicsConfig:
    """Deserialize the ``physics`` section of a configuration dict.

    Raises:
        InvalidDimension: ``cuts`` is neither a number nor a dict.
        ValueError: ``extra_packages`` is not a list of package names.
    """
    config = PhysicsConfig()
    if data.get("base_package"):
        config.base_package = data["base_package"]
    extras = data.get("extra_packages", [])
    if not isinstance(extras, list) or not all(isinstance(n, str) for n in extras):
        raise ValueError(
            f"physics.extra_packages must be a list of package names, got {extras!r}"
        )
    config.extra_packages = list(extras)
    units = data.get("units", "mm")
    cuts = data.get("cuts", {})
    if isinstance(cuts, numbers.Real) and not isinstance(cuts, bool):
        config.cuts = CutSet.uniform(to_mm(cuts, units))
    elif not isinstance(cuts, dict):
        raise InvalidDimension("cuts", cuts, "must be a number or a per-particle mapping")
    else:
        defaults = CutSet()
        config.cuts = CutSet(
            gamma=to_mm(cuts.get("gamma", defaults.gamma), units),
            electron=to_mm(cuts.get("electron", defaults.electron), units),
            positron=to_mm(cuts.get("positron", defaults.positron), units),
        )
    return config


# =====================================================================
# Geometry
# =====================================================================


def volume_to_dict(volume: Volume) -> dict:
    shape = _dataclass_to_dict(volume.shape)
    return {
        "name": volume.name,
        "material": volume.material.id,
        "shape": shape,
    }


def _transform_to_dict(transform: Transform) -> dict:
    return {
        "translation": transform.translation.tolist(),
        "rotation": transform.rotation.tolist(),
    }


def _placement_to_dict(
    engine: PlacementEngine, placement: Placement, mother_global: Optional[Transform],
) -> dict:
    global_transform = (
        placement.transform if mother_global is None
        else mother_global.compose(placement.transform)
    )
    return {
        "name": placement.name,
        "volume": placement.volume.name,
        "copy_index": placement.copy_index,
        "local": _transform_to_dict(placement.transform),
        "global_translation": global_transform.translation.tolist(),
        "children": [
            _placement_to_dict(engine, child, global_transform)
            for child in engine.daughters(placement.volume)
        ],
    }


def geometry_to_dict(engine: PlacementEngine) -> dict:
    """Serialize a built geometry.

    Returns:
        Dict with schema version, tolerance, materials, volumes, the
        nested placement tree under ``world`` and recorded overlaps.
    """
    volumes: dict[str, dict] = {}
    materials: dict[str, dict] = {}
    for placement in engine.placements():
        for volume in (placement.volume, placement.mother):
            if volume is None or volume.name in volumes:
                continue
            volumes[volume.name] = volume_to_dict(volume)
            materials.setdefault(volume.material.id, _dataclass_to_dict(volume.material))

    root = engine.root
    return {
        "schema_version": GEOMETRY_SCHEMA_VERSION,
        "units": "mm",
        "tolerance": engine.tolerance,
        "overlap_policy": engine.policy.value,
        "materials": list(materials.values()),
        "volumes": list(volumes.values()),
        "world": None if root is None else _placement_to_dict(engine, root, None),
        "overlaps": [_dataclass_to_dict(o) for o in engine.overlaps],
    }


def placement_rows(engine: PlacementEngine) -> list[dict]:
    """Flat placement table, one row per placement reached from the root."""
    rows = []
    for node in engine.walk():
        p = node.placement
        x, y, z = node.global_position.tolist()
        rows.append({
            "path": "/".join(node.path),
            "name": p.name,
            "volume": p.volume.name,
            "material": p.volume.material.id,
            "shape": p.volume.shape.kind.value,
            "copy_index": p.copy_index,
            "depth": node.depth,
            "global_x_mm": x,
            "global_y_mm": y,
            "global_z_mm": z,
        })
    return rows
