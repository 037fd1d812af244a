"""Physics assembly — package selection, ordered construction and cuts.

Lifecycle (driven by the transport engine)::

    UNINITIALIZED
        └─ construct_particles() ─> PARTICLES_CONSTRUCTED
              └─ construct_processes() ─> PROCESSES_CONSTRUCTED
                    └─ apply_cuts() ─> CUTS_APPLIED

Package selection is only possible before processes are constructed.
Cut values may change at any time; once processes exist every change is
pushed to the active packages immediately.
"""

from __future__ import annotations

import logging
import math
import numbers

from collsim.constants import DEFAULT_BASE_PACKAGE, DEFAULT_CUT_MM
from collsim.core.physics_packages import (
    EXTRA_PACKAGES,
    ParticleTable,
    PhysicsPackage,
    ProcessTable,
    lookup_base,
    lookup_extra,
)
from collsim.errors import InvalidDimension, OrderingViolation
from collsim.models.physics import CutSet, PhysicsConfig, PhysicsState

logger = logging.getLogger(__name__)


def _check_cut(name: str, value: float) -> float:
    if not isinstance(value, numbers.Real) or not math.isfinite(value) or value <= 0.0:
        raise InvalidDimension(name, value, "cut must be a positive length")
    return float(value)


class PhysicsAssembly:
    """Modular physics list: one base EM package plus additive extras.

    Args:
        default_cut: Uniform production cut for gamma, e- and e+ [mm].
    """

    def __init__(self, default_cut: float = DEFAULT_CUT_MM) -> None:
        self._cuts = CutSet.uniform(_check_cut("default_cut", default_cut))
        self._state = PhysicsState.UNINITIALIZED
        self._base = PhysicsPackage(lookup_base(DEFAULT_BASE_PACKAGE))
        self._extras: dict[str, PhysicsPackage] = {}
        self._particles = ParticleTable()
        self._processes = ProcessTable()
        self._production_cuts: dict[str, float] = {}

    @classmethod
    def from_config(cls, config: PhysicsConfig) -> PhysicsAssembly:
        """Assembly with the packages and cuts of *config* selected."""
        assembly = cls()
        assembly.select_base_package(config.base_package)
        for name in config.extra_packages:
            assembly.add_extra_package(name)
        assembly.set_cuts(config.cuts)
        return assembly

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> PhysicsState:
        return self._state

    @property
    def cuts(self) -> CutSet:
        return self._cuts

    @property
    def base_package(self) -> str:
        return self._base.name

    @property
    def extra_packages(self) -> list[str]:
        return [p.name for p in self._ordered_extras()]

    @property
    def active_packages(self) -> list[PhysicsPackage]:
        """Base package first, then extras in menu order."""
        return [self._base] + self._ordered_extras()

    @property
    def particle_table(self) -> ParticleTable:
        return self._particles

    @property
    def process_table(self) -> ProcessTable:
        return self._processes

    @property
    def production_cuts(self) -> dict[str, float]:
        """Cuts per particle as last propagated; empty before processes exist."""
        return dict(self._production_cuts)

    # ------------------------------------------------------------------
    # Package selection
    # ------------------------------------------------------------------

    def select_base_package(self, name: str) -> None:
        """Replace the base EM package.

        Raises:
            UnknownPackage: If *name* is not on the base menu.
            OrderingViolation: If processes are already constructed.
        """
        definition = lookup_base(name)
        self._require_selectable("select_base_package")
        if definition.name == self._base.name:
            return
        self._base = PhysicsPackage(definition)
        logger.info("Base physics package: %s", definition.name)
        if self._state is PhysicsState.PARTICLES_CONSTRUCTED:
            self._base.construct_particles(self._particles)

    def add_extra_package(self, name: str) -> None:
        """Add an extra package; adding one twice is a no-op.

        Raises:
            UnknownPackage: If *name* is not on the extras menu.
            OrderingViolation: If processes are already constructed.
        """
        definition = lookup_extra(name)
        self._require_selectable("add_extra_package")
        if definition.name in self._extras:
            return
        package = PhysicsPackage(definition)
        self._extras[definition.name] = package
        logger.info("Extra physics package: %s", definition.name)
        if self._state is PhysicsState.PARTICLES_CONSTRUCTED:
            package.construct_particles(self._particles)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def construct_particles(self) -> None:
        if self._state is not PhysicsState.UNINITIALIZED:
            raise OrderingViolation("construct_particles", self._state.value)
        for package in self.active_packages:
            package.construct_particles(self._particles)
        self._state = PhysicsState.PARTICLES_CONSTRUCTED
        logger.info("Constructed %d particle species", len(self._particles))

    def construct_processes(self) -> None:
        if self._state is not PhysicsState.PARTICLES_CONSTRUCTED:
            raise OrderingViolation("construct_processes", self._state.value)
        for package in self.active_packages:
            package.construct_processes(self._processes, self._particles)
        self._state = PhysicsState.PROCESSES_CONSTRUCTED
        logger.info(
            "Constructed %d processes from %s",
            len(self._processes), ", ".join(p.name for p in self.active_packages),
        )

    def apply_cuts(self) -> None:
        """Propagate the current cuts to every active package."""
        if self._state.rank < PhysicsState.PROCESSES_CONSTRUCTED.rank:
            raise OrderingViolation("apply_cuts", self._state.value)
        self._propagate_cuts()
        self._state = PhysicsState.CUTS_APPLIED

    # ------------------------------------------------------------------
    # Cuts
    # ------------------------------------------------------------------

    def set_cuts(self, cuts: CutSet) -> None:
        """Replace all three cuts.

        Raises:
            InvalidDimension: If any cut is not a positive length.
        """
        cuts = CutSet(
            gamma=_check_cut("cut_for_gamma", cuts.gamma),
            electron=_check_cut("cut_for_electron", cuts.electron),
            positron=_check_cut("cut_for_positron", cuts.positron),
        )
        self._cuts = cuts
        if self._state.rank >= PhysicsState.PROCESSES_CONSTRUCTED.rank:
            self._propagate_cuts()

    def set_cut_for_gamma(self, value: float) -> None:
        self.set_cuts(self._cuts.replace(gamma=_check_cut("cut_for_gamma", value)))

    def set_cut_for_electron(self, value: float) -> None:
        self.set_cuts(self._cuts.replace(electron=_check_cut("cut_for_electron", value)))

    def set_cut_for_positron(self, value: float) -> None:
        self.set_cuts(self._cuts.replace(positron=_check_cut("cut_for_positron", value)))

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _ordered_extras(self) -> list[PhysicsPackage]:
        return [self._extras[n] for n in EXTRA_PACKAGES if n in self._extras]

    def _require_selectable(self, operation: str) -> None:
        if self._state.rank >= PhysicsState.PROCESSES_CONSTRUCTED.rank:
            raise OrderingViolation(operation, self._state.value)

    def _propagate_cuts(self) -> None:
        self._production_cuts = self._cuts.by_particle()
        for package in self.active_packages:
            package.apply_cuts(self._cuts)
        logger.info(
            "Production cuts: gamma %g mm, e- %g mm, e+ %g mm",
            self._cuts.gamma, self._cuts.electron, self._cuts.positron,
        )
