"""Placement engine — positions volumes inside mother volumes.

Placements are kept in an arena and referenced by a stable handle. A
volume's daughters are registered on the volume itself, so a module can be
filled before it is placed into the world. Global transforms are resolved
by walking from a placement up to the root.

Overlap checking samples the surface of the volume being placed on a
deterministic grid and tests every sample point:

1. against the mother solid (a point outside it is a protrusion);
2. against every sibling placed earlier whose bounding box intersects the
   new one (a point strictly inside a sibling is an overlap).

An earlier sibling lying wholly inside the new volume is not reported.

The cost is O(n²) in the number of siblings per mother, which stays small
for the collimator modules.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Optional

import numpy as np
from numpy.typing import NDArray

from collsim.constants import (
    DEFAULT_WORLD_EXTENT_MM,
    OVERLAP_SAMPLE_RESOLUTION,
    SURFACE_TOLERANCE_FACTOR,
)
from collsim.core.solids import inside_mask, surface_points, transformed_extent
from collsim.core.units import deg_to_rad
from collsim.errors import InvalidDimension, OverlapDetected
from collsim.models.geometry import (
    OverlapPolicy,
    OverlapRecord,
    PlacedNode,
    Placement,
    Transform,
    Volume,
)

logger = logging.getLogger(__name__)


def surface_tolerance(world_extent: float) -> float:
    """Surface tolerance [mm] for a world of the given extent [mm]."""
    if world_extent <= 0.0:
        raise InvalidDimension("world_extent", world_extent, "must be > 0")
    return SURFACE_TOLERANCE_FACTOR * world_extent


def rotation_x(angle_deg: float) -> NDArray[np.float64]:
    """Active rotation about x by *angle_deg*."""
    a = float(deg_to_rad(angle_deg))
    c, s = np.cos(a), np.sin(a)
    return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])


def rotation_y(angle_deg: float) -> NDArray[np.float64]:
    """Active rotation about y by *angle_deg*."""
    a = float(deg_to_rad(angle_deg))
    c, s = np.cos(a), np.sin(a)
    return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])


def rotation_z(angle_deg: float) -> NDArray[np.float64]:
    """Active rotation about z by *angle_deg*."""
    a = float(deg_to_rad(angle_deg))
    c, s = np.cos(a), np.sin(a)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


class PlacementEngine:
    """Arena of placements forming a tree rooted at the world placement.

    Args:
        policy: Overlap handling. STRICT aborts with OverlapDetected,
            PERMISSIVE logs and records the overlap.
        world_extent: World edge length [mm], sets the surface tolerance.
        resolution: Surface sampling grid points per direction.
    """

    def __init__(
        self,
        policy: OverlapPolicy = OverlapPolicy.STRICT,
        world_extent: float = DEFAULT_WORLD_EXTENT_MM,
        resolution: int = OVERLAP_SAMPLE_RESOLUTION,
    ) -> None:
        self._policy = policy
        self._tolerance = surface_tolerance(world_extent)
        self._resolution = resolution
        self._placements: list[Placement] = []
        self._daughters: dict[Volume, list[int]] = {}
        self._instances: dict[Volume, list[int]] = {}
        self._root: Optional[int] = None
        self._overlaps: list[OverlapRecord] = []
        logger.info("Computed tolerance = %g mm", self._tolerance)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def policy(self) -> OverlapPolicy:
        return self._policy

    @property
    def tolerance(self) -> float:
        return self._tolerance

    @property
    def root(self) -> Optional[Placement]:
        return None if self._root is None else self._placements[self._root]

    @property
    def overlaps(self) -> list[OverlapRecord]:
        """Overlaps recorded in permissive mode."""
        return list(self._overlaps)

    def __len__(self) -> int:
        return len(self._placements)

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def place(
        self,
        volume: Volume,
        mother: Optional[Volume],
        translation: Sequence[float] = (0.0, 0.0, 0.0),
        rotation: Optional[NDArray[np.float64]] = None,
        copy_index: int = 0,
        check_overlaps: bool = True,
        name: Optional[str] = None,
    ) -> Placement:
        """Place *volume* inside *mother* (None places the world root).

        Args:
            volume: Volume to place.
            mother: Mother volume, or None for the root.
            translation: Position in the mother frame [mm].
            rotation: 3x3 active rotation, identity if None.
            copy_index: Copy number.
            check_overlaps: Run the overlap check for this placement.
            name: Placement name, defaults to the volume name.

        Returns:
            The new placement.

        Raises:
            InvalidDimension: Non-finite translation or improper rotation.
            OverlapDetected: Overlap found in strict mode.
            ValueError: Second root, or a placement creating a cycle.
        """
        transform = Transform(
            translation=self._as_translation(translation),
            rotation=self._as_rotation(rotation),
        )
        if mother is None:
            if self._root is not None:
                raise ValueError(
                    f"Root already placed: {self._placements[self._root].name!r}"
                )
        elif self._is_ancestor(volume, mother):
            raise ValueError(
                f"Placing {volume.name!r} in {mother.name!r} would create a cycle"
            )

        placement = Placement(
            handle=len(self._placements),
            name=name or volume.name,
            volume=volume,
            mother=mother,
            transform=transform,
            copy_index=copy_index,
            check_overlaps=check_overlaps,
        )
        if mother is not None and check_overlaps:
            self._check_overlaps(placement)

        self._placements.append(placement)
        self._instances.setdefault(volume, []).append(placement.handle)
        if mother is None:
            self._root = placement.handle
        else:
            self._daughters.setdefault(mother, []).append(placement.handle)
        logger.debug(
            "Placed %s (copy %d) in %s at %s",
            placement.name, copy_index,
            mother.name if mother is not None else "<root>",
            transform.translation.tolist(),
        )
        return placement

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, handle: int) -> Placement:
        return self._placements[handle]

    def placements(self) -> list[Placement]:
        """All placements in creation order."""
        return list(self._placements)

    def daughters(self, volume: Volume) -> list[Placement]:
        """Placements whose mother is *volume*, in placement order."""
        return [self._placements[h] for h in self._daughters.get(volume, [])]

    def placements_of(self, volume: Volume) -> list[Placement]:
        """Every placement of *volume*."""
        return [self._placements[h] for h in self._instances.get(volume, [])]

    def global_transform(self, placement: Placement) -> Transform:
        """Transform of *placement* into the world frame.

        Raises:
            ValueError: If an ancestor volume is unplaced or placed more
                than once (the path to the root is ambiguous).
        """
        transform = placement.transform
        current = placement
        while current.mother is not None:
            parents = self._instances.get(current.mother, [])
            if len(parents) != 1:
                raise ValueError(
                    f"Mother {current.mother.name!r} of {current.name!r} has "
                    f"{len(parents)} placements; global transform is undefined"
                )
            current = self._placements[parents[0]]
            transform = current.transform.compose(transform)
        return transform

    def walk(self) -> Iterator[PlacedNode]:
        """Depth-first traversal from the root in placement order."""
        if self._root is None:
            return
        root = self._placements[self._root]
        stack = [PlacedNode((root.name,), root, 0, root.transform)]
        while stack:
            node = stack.pop()
            yield node
            children = self.daughters(node.placement.volume)
            for child in reversed(children):
                stack.append(
                    PlacedNode(
                        path=node.path + (child.name,),
                        placement=child,
                        depth=node.depth + 1,
                        global_transform=node.global_transform.compose(child.transform),
                    )
                )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _as_translation(translation: Sequence[float]) -> NDArray[np.float64]:
        t = np.asarray(translation, dtype=np.float64).reshape(3)
        if not np.all(np.isfinite(t)):
            raise InvalidDimension("translation", t.tolist(), "not finite")
        return t

    @staticmethod
    def _as_rotation(rotation: Optional[NDArray[np.float64]]) -> NDArray[np.float64]:
        if rotation is None:
            return np.eye(3)
        r = np.asarray(rotation, dtype=np.float64).reshape(3, 3)
        if not np.allclose(r @ r.T, np.eye(3), atol=1e-9) or not np.isclose(np.linalg.det(r), 1.0):
            raise InvalidDimension("rotation", r.tolist(), "not a proper rotation matrix")
        return r

    def _is_ancestor(self, volume: Volume, mother: Volume) -> bool:
        """True if *volume* is *mother* or contains it somewhere below."""
        pending = [mother]
        seen: set[Volume] = set()
        while pending:
            current = pending.pop()
            if current == volume:
                return True
            if current in seen:
                continue
            seen.add(current)
            for h in self._instances.get(current, []):
                parent = self._placements[h].mother
                if parent is not None:
                    pending.append(parent)
        return False

    def _check_overlaps(self, placement: Placement) -> None:
        mother = placement.mother
        assert mother is not None
        tol = self._tolerance
        points = placement.transform.apply(
            surface_points(placement.volume.shape, self._resolution)
        )

        outside = ~inside_mask(mother.shape, points, tol, strict=False)
        if outside.any():
            self._report(OverlapRecord(
                child=placement.name,
                other=mother.name,
                mother=mother.name,
                protrusion=True,
                point=tuple(points[int(np.argmax(outside))].tolist()),
            ))

        lo, hi = transformed_extent(placement.volume.shape, placement.transform)
        for sibling in self.daughters(mother):
            s_lo, s_hi = transformed_extent(sibling.volume.shape, sibling.transform)
            if np.any(hi <= s_lo + tol) or np.any(s_hi <= lo + tol):
                continue
            local = sibling.transform.apply_inverse(points)
            hits = inside_mask(sibling.volume.shape, local, tol, strict=True)
            if hits.any():
                self._report(OverlapRecord(
                    child=placement.name,
                    other=sibling.name,
                    mother=mother.name,
                    protrusion=False,
                    point=tuple(points[int(np.argmax(hits))].tolist()),
                ))

    def _report(self, record: OverlapRecord) -> None:
        if self._policy is OverlapPolicy.STRICT:
            raise OverlapDetected(record.child, record.other, protrusion=record.protrusion)
        self._overlaps.append(record)
        logger.warning(
            "Overlap: %s %s %s in %s at %s",
            record.child,
            "protrudes from" if record.protrusion else "overlaps",
            record.other, record.mother, record.point,
        )
