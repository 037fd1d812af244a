"""Physics configuration data models.

Production cuts are range thresholds in mm (core units).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum

from collsim.constants import DEFAULT_BASE_PACKAGE, DEFAULT_CUT_MM


class PhysicsState(Enum):
    """Physics lifecycle. CUTS_APPLIED is terminal; cuts may still change."""
    UNINITIALIZED = "uninitialized"
    PARTICLES_CONSTRUCTED = "particles_constructed"
    PROCESSES_CONSTRUCTED = "processes_constructed"
    CUTS_APPLIED = "cuts_applied"

    @property
    def rank(self) -> int:
        return _STATE_ORDER.index(self)


_STATE_ORDER = [
    PhysicsState.UNINITIALIZED,
    PhysicsState.PARTICLES_CONSTRUCTED,
    PhysicsState.PROCESSES_CONSTRUCTED,
    PhysicsState.CUTS_APPLIED,
]


class PackageRole(Enum):
    BASE_EM = "base_em"
    DECAY = "decay"
    EXTRA_EM = "extra_em"
    RADIOACTIVE_DECAY = "radioactive_decay"


# Particle names the cuts apply to
CUT_PARTICLES = ("gamma", "e-", "e+")


@dataclass(frozen=True)
class CutSet:
    """Per-particle production cuts [mm].

    Attributes:
        gamma: Cut for photons.
        electron: Cut for electrons.
        positron: Cut for positrons.
    """
    gamma: float = DEFAULT_CUT_MM
    electron: float = DEFAULT_CUT_MM
    positron: float = DEFAULT_CUT_MM

    @classmethod
    def uniform(cls, value: float) -> CutSet:
        return cls(gamma=value, electron=value, positron=value)

    def replace(self, **changes: float) -> CutSet:
        return dataclasses.replace(self, **changes)

    def by_particle(self) -> dict[str, float]:
        """Cut values keyed by particle name."""
        return dict(zip(CUT_PARTICLES, (self.gamma, self.electron, self.positron)))


@dataclass
class PhysicsConfig:
    """Physics selection as read from a configuration file.

    Attributes:
        base_package: Base electromagnetic package name.
        extra_packages: Additive package names.
        cuts: Production cuts.
    """
    base_package: str = DEFAULT_BASE_PACKAGE
    extra_packages: list[str] = field(default_factory=list)
    cuts: CutSet = field(default_factory=CutSet)
