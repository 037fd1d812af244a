"""Geometry data models for the collimator assembly.

Two-module architecture: a primary collimator (enclosure holding the
source, the bore opening and the primary tungsten absorber) followed,
across an air gap, by a secondary collimator (air cylinder holding an iron
sleeve and a tapered tungsten absorber). Both modules sit in an air world.

All lengths in mm, angles in degree. Solid-geometry code converts angles
via collsim.core.units before use.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

import numpy as np
from numpy.typing import NDArray

from collsim.constants import DEFAULT_SOURCE_MATERIAL, DEFAULT_WORLD_EXTENT_MM
from collsim.errors import InvalidDimension
from collsim.models.material import Material


class ShapeKind(Enum):
    TUBE = "tube"
    CONE = "cone"
    BOX = "box"


class OverlapPolicy(Enum):
    """What to do when a placement overlaps a sibling.

    STRICT:     Abort the build with OverlapDetected.
    PERMISSIVE: Log a warning, record the overlap and keep placing.
    """
    STRICT = "strict"
    PERMISSIVE = "permissive"


# ── Solids ──


@dataclass(frozen=True)
class TubeShape:
    """Cylindrical section, optionally hollow, with phi sweep from 0°.

    Attributes:
        inner_radius: Inner radius [mm].
        outer_radius: Outer radius [mm].
        half_length: Half length along z [mm].
        sweep_deg: Phi sweep [degree], in (0, 360].
    """
    inner_radius: float
    outer_radius: float
    half_length: float
    sweep_deg: float = 360.0
    kind: ShapeKind = field(default=ShapeKind.TUBE, init=False)


@dataclass(frozen=True)
class ConeShape:
    """Conical section; end 1 at -half_length, end 2 at +half_length.

    Attributes:
        inner_radius1: Inner radius at -z [mm].
        outer_radius1: Outer radius at -z [mm].
        inner_radius2: Inner radius at +z [mm].
        outer_radius2: Outer radius at +z [mm].
        half_length: Half length along z [mm].
        sweep_deg: Phi sweep [degree], in (0, 360].
    """
    inner_radius1: float
    outer_radius1: float
    inner_radius2: float
    outer_radius2: float
    half_length: float
    sweep_deg: float = 360.0
    kind: ShapeKind = field(default=ShapeKind.CONE, init=False)


@dataclass(frozen=True)
class BoxShape:
    """Axis-aligned box given by its half extents [mm]."""
    half_x: float
    half_y: float
    half_z: float
    kind: ShapeKind = field(default=ShapeKind.BOX, init=False)


Shape = Union[TubeShape, ConeShape, BoxShape]


@dataclass(frozen=True)
class Volume:
    """A shape bound to a material under a unique name (logical volume)."""
    name: str
    shape: Shape
    material: Material


# ── Placements ──


def _identity() -> NDArray[np.float64]:
    return np.eye(3, dtype=np.float64)


def _origin() -> NDArray[np.float64]:
    return np.zeros(3, dtype=np.float64)


@dataclass(eq=False)
class Transform:
    """Rigid transform from a child frame into its mother frame.

    ``p_mother = rotation @ p_child + translation``

    Attributes:
        translation: Translation vector [mm].
        rotation: 3x3 active rotation matrix.
    """
    translation: NDArray[np.float64] = field(default_factory=_origin)
    rotation: NDArray[np.float64] = field(default_factory=_identity)

    def apply(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Map (N, 3) points from the child frame into the mother frame."""
        return points @ self.rotation.T + self.translation

    def apply_inverse(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Map (N, 3) points from the mother frame into the child frame."""
        return (points - self.translation) @ self.rotation

    def compose(self, child: Transform) -> Transform:
        """Global transform of *child* given this transform as its mother's."""
        return Transform(
            translation=self.rotation @ child.translation + self.translation,
            rotation=self.rotation @ child.rotation,
        )


@dataclass(eq=False)
class Placement:
    """A positioned instance of a volume inside its mother volume.

    Attributes:
        handle: Stable index in the placement arena.
        name: Placement (physical volume) name.
        volume: The placed volume.
        mother: Mother volume, or None for the root placement.
        transform: Local transform into the mother frame.
        copy_index: Copy number.
        check_overlaps: Whether overlaps were checked on placement.
    """
    handle: int
    name: str
    volume: Volume
    mother: Optional[Volume]
    transform: Transform = field(default_factory=Transform)
    copy_index: int = 0
    check_overlaps: bool = True

    @property
    def is_root(self) -> bool:
        return self.mother is None


@dataclass(eq=False)
class PlacedNode:
    """A placement reached by walking the tree from the root.

    Attributes:
        path: Placement names from the root down to this node.
        placement: The placement.
        depth: 0 for the root.
        global_transform: Transform into the world frame.
    """
    path: tuple[str, ...]
    placement: Placement
    depth: int
    global_transform: Transform

    @property
    def global_position(self) -> NDArray[np.float64]:
        return self.global_transform.translation


@dataclass
class OverlapRecord:
    """A detected overlap.

    Attributes:
        child: Name of the volume being placed.
        other: Sibling name, or the mother name for a protrusion.
        mother: Mother volume name.
        protrusion: True if the child sticks out of its mother.
        point: Offending sample point in the mother frame [mm].
    """
    child: str
    other: str
    mother: str
    protrusion: bool
    point: tuple[float, float, float]


# ── Configuration record ──


@dataclass
class CollimatorDimensions:
    """Dimensions of both collimator modules [mm].

    ``None`` marks a dimension that has not been configured. Building the
    assembly fails fast while any of them is still unset.

    Primary module:
        src_radius, src_halfz: Source cylinder.
        src_shiftz: Source z offset inside the enclosure.
        enc_radius, enc_halfz: Iron enclosure.
        opn_radius, opn_halfz: Bore opening, flush with the enclosure end.
        pcl_radius, pcl_halfz: Primary tungsten absorber.
    Between modules:
        air_gap: Air gap from the enclosure end to the secondary module.
    Secondary module:
        coll_radius, coll_halfz: Air cylinder and iron sleeve.
        scl_radius: Tapered absorber outer radius (sleeve inner radius).
        scl_hole_a, scl_hole_b: Absorber bore radii at -z and +z.
        scl_halfz: Absorber half length.
    World:
        world_extent: Full edge length of the cubic world.
        source_material: Catalog id of the source material.
    """
    src_radius: Optional[float] = None
    src_halfz: Optional[float] = None
    src_shiftz: Optional[float] = None
    enc_radius: Optional[float] = None
    enc_halfz: Optional[float] = None
    opn_radius: Optional[float] = None
    opn_halfz: Optional[float] = None
    pcl_radius: Optional[float] = None
    pcl_halfz: Optional[float] = None
    air_gap: Optional[float] = None
    coll_radius: Optional[float] = None
    coll_halfz: Optional[float] = None
    scl_radius: Optional[float] = None
    scl_hole_a: Optional[float] = None
    scl_hole_b: Optional[float] = None
    scl_halfz: Optional[float] = None
    world_extent: float = DEFAULT_WORLD_EXTENT_MM
    source_material: str = DEFAULT_SOURCE_MATERIAL

    @classmethod
    def dimension_names(cls) -> list[str]:
        """Names of the required module dimensions, in build order."""
        return [
            f.name for f in dataclasses.fields(cls)
            if f.name not in ("world_extent", "source_material")
        ]

    def set(self, name: str, value: float) -> None:
        """Validated setter for a single dimension.

        Raises:
            KeyError: If *name* is not a dimension.
            InvalidDimension: If *value* is not a finite number, or is
                negative for anything other than ``src_shiftz``.
        """
        if name != "world_extent" and name not in self.dimension_names():
            raise KeyError(f"Unknown dimension: {name!r}")
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise InvalidDimension(name, value, "not a number") from None
        if not math.isfinite(value):
            raise InvalidDimension(name, value, "not finite")
        if value < 0.0 and name != "src_shiftz":
            raise InvalidDimension(name, value, "must be >= 0")
        if name == "world_extent" and value <= 0.0:
            raise InvalidDimension(name, value, "must be > 0")
        setattr(self, name, value)

    def unset(self) -> list[str]:
        """Dimensions still at the unset sentinel."""
        return [n for n in self.dimension_names() if getattr(self, n) is None]

    @property
    def is_complete(self) -> bool:
        return not self.unset()
