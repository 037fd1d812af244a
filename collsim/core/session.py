"""Transport-engine lifecycle — the callbacks an engine drives, in order.

The engine calls, exactly once each and in this order::

    construct_geometry() -> world placement
    construct_particles()
    construct_processes()
    apply_cuts()

SetupSession enforces the order and delegates to a DetectorAssembly and a
PhysicsAssembly.
"""

from __future__ import annotations

import abc
import copy
import logging
from dataclasses import dataclass, field
from typing import Optional

from collsim.core.detector_assembly import DetectorAssembly
from collsim.core.material_database import MaterialCatalog
from collsim.core.physics_assembly import PhysicsAssembly
from collsim.errors import OrderingViolation
from collsim.models.geometry import (
    CollimatorDimensions,
    OverlapPolicy,
    OverlapRecord,
    Placement,
)
from collsim.models.physics import CutSet, PhysicsConfig

logger = logging.getLogger(__name__)

_PHASES = ("construct_geometry", "construct_particles", "construct_processes", "apply_cuts")


class TransportCallbacks(abc.ABC):
    """Callbacks a transport engine invokes during initialization."""

    @abc.abstractmethod
    def construct_geometry(self) -> Placement:
        """Build the geometry; return the world placement."""

    @abc.abstractmethod
    def construct_particles(self) -> None:
        """Register particle species."""

    @abc.abstractmethod
    def construct_processes(self) -> None:
        """Attach interaction processes."""

    @abc.abstractmethod
    def apply_cuts(self) -> None:
        """Apply production cuts."""


@dataclass
class SetupResult:
    """Summary of a completed initialization.

    Attributes:
        world: Root placement.
        module_offsets: World z offsets of the module roots [mm].
        base_package: Active base package name.
        extra_packages: Active extra package names.
        cuts: Applied production cuts.
        overlaps: Overlaps recorded in permissive mode.
    """
    world: Placement
    module_offsets: dict[str, float]
    base_package: str
    extra_packages: list[str]
    cuts: CutSet
    overlaps: list[OverlapRecord] = field(default_factory=list)


class SetupSession(TransportCallbacks):
    """Geometry and physics configuration for one simulation.

    Args:
        detector: Geometry builder.
        physics: Physics list.
    """

    def __init__(self, detector: DetectorAssembly, physics: PhysicsAssembly) -> None:
        self._detector = detector
        self._physics = physics
        self._completed: list[str] = []
        self._world: Optional[Placement] = None

    @classmethod
    def from_config(
        cls,
        dimensions: CollimatorDimensions,
        physics: Optional[PhysicsConfig] = None,
        policy: OverlapPolicy = OverlapPolicy.STRICT,
        catalog: Optional[MaterialCatalog] = None,
    ) -> SetupSession:
        detector = DetectorAssembly(dimensions, catalog=catalog, policy=policy)
        assembly = PhysicsAssembly.from_config(physics or PhysicsConfig())
        return cls(detector, assembly)

    @property
    def detector(self) -> DetectorAssembly:
        return self._detector

    @property
    def physics(self) -> PhysicsAssembly:
        return self._physics

    @property
    def completed_phases(self) -> list[str]:
        return list(self._completed)

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def construct_geometry(self) -> Placement:
        self._enter("construct_geometry")
        self._world = self._detector.construct()
        self._completed.append("construct_geometry")
        return self._world

    def construct_particles(self) -> None:
        self._enter("construct_particles")
        self._physics.construct_particles()
        self._completed.append("construct_particles")

    def construct_processes(self) -> None:
        self._enter("construct_processes")
        self._physics.construct_processes()
        self._completed.append("construct_processes")

    def apply_cuts(self) -> None:
        self._enter("apply_cuts")
        self._physics.apply_cuts()
        self._completed.append("apply_cuts")

    # ------------------------------------------------------------------
    # Convenience
    # ------------------------------------------------------------------

    def initialize(self) -> SetupResult:
        """Run all four phases in order and summarize the result."""
        world = self.construct_geometry()
        self.construct_particles()
        self.construct_processes()
        self.apply_cuts()
        engine = self._detector.placement_engine
        return SetupResult(
            world=world,
            module_offsets=self._detector.module_offsets(),
            base_package=self._physics.base_package,
            extra_packages=self._physics.extra_packages,
            cuts=self._physics.cuts,
            overlaps=engine.overlaps if engine is not None else [],
        )

    def clone_for_worker(self) -> SetupSession:
        """Independent deep copy for a worker thread.

        Materials are immutable and stay shared with this session; every
        volume, placement and package is copied.
        """
        memo: dict[int, object] = {}
        for material in self._detector.catalog.resolved():
            memo[id(material)] = material
        return copy.deepcopy(self, memo)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _enter(self, phase: str) -> None:
        expected = _PHASES[len(self._completed)] if len(self._completed) < len(_PHASES) else None
        if phase != expected:
            state = self._completed[-1] if self._completed else "new"
            raise OrderingViolation(phase, state)
        logger.info("Lifecycle phase: %s", phase)
