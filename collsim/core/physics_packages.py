"""Physics package definitions and the fixed package menus.

A package is a named bundle that registers the particle species it needs,
then attaches interaction processes to them, then receives production
cuts. Packages are looked up by name in a closed menu: one base
electromagnetic package, plus any number of additive extras.

Process names follow the transport engine's conventions (``phot``,
``compt``, ``eIoni``, ``Decay``...); the model label records which
physics model set a base package uses for photons and electrons.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from collsim.errors import UnknownPackage
from collsim.models.physics import CutSet, PackageRole

logger = logging.getLogger(__name__)


# ── Particles ──


@dataclass(frozen=True)
class ParticleDefinition:
    """Particle species known to the transport engine.

    Attributes:
        name: Engine particle name.
        pdg_code: PDG Monte Carlo code (0 for the generic ion).
        charge: Charge [e].
        stable: False for species that decay in flight.
    """
    name: str
    pdg_code: int
    charge: float
    stable: bool = True


PARTICLES: dict[str, ParticleDefinition] = {
    p.name: p for p in (
        ParticleDefinition("gamma", 22, 0.0),
        ParticleDefinition("e-", 11, -1.0),
        ParticleDefinition("e+", -11, 1.0),
        ParticleDefinition("mu-", 13, -1.0, stable=False),
        ParticleDefinition("mu+", -13, 1.0, stable=False),
        ParticleDefinition("pi+", 211, 1.0, stable=False),
        ParticleDefinition("pi-", -211, -1.0, stable=False),
        ParticleDefinition("pi0", 111, 0.0, stable=False),
        ParticleDefinition("kaon+", 321, 1.0, stable=False),
        ParticleDefinition("kaon-", -321, -1.0, stable=False),
        ParticleDefinition("kaon0L", 130, 0.0, stable=False),
        ParticleDefinition("neutron", 2112, 0.0, stable=False),
        ParticleDefinition("proton", 2212, 1.0),
        ParticleDefinition("anti_proton", -2212, -1.0),
        ParticleDefinition("deuteron", 1000010020, 1.0),
        ParticleDefinition("alpha", 1000020040, 2.0),
        ParticleDefinition("GenericIon", 0, 1.0),
    )
}


class ParticleTable:
    """Registered particle species, in registration order."""

    def __init__(self) -> None:
        self._particles: dict[str, ParticleDefinition] = {}

    def register(self, name: str) -> ParticleDefinition:
        """Register *name*; registering twice is a no-op."""
        try:
            definition = PARTICLES[name]
        except KeyError:
            raise KeyError(f"Unknown particle: {name!r}")
        self._particles.setdefault(name, definition)
        return definition

    def names(self) -> list[str]:
        return list(self._particles)

    def unstable(self) -> list[ParticleDefinition]:
        return [p for p in self._particles.values() if not p.stable]

    def __contains__(self, name: object) -> bool:
        return name in self._particles

    def __len__(self) -> int:
        return len(self._particles)


# ── Processes ──


@dataclass(frozen=True)
class ProcessEntry:
    """A process attached to a particle.

    Attributes:
        particle: Particle name.
        process: Process name.
        model: Model set label.
        package: Name of the registering package.
    """
    particle: str
    process: str
    model: str
    package: str


class ProcessTable:
    """Processes per particle, in registration order."""

    def __init__(self) -> None:
        self._entries: dict[str, list[ProcessEntry]] = {}

    def add(self, entry: ProcessEntry, particles: ParticleTable) -> None:
        """Attach a process; the particle must already be registered.

        A process name already attached to the particle is kept as is.
        """
        if entry.particle not in particles:
            raise KeyError(
                f"Particle {entry.particle!r} not constructed before process {entry.process!r}"
            )
        entries = self._entries.setdefault(entry.particle, [])
        if any(e.process == entry.process for e in entries):
            logger.debug(
                "Process %s already attached to %s, skipping duplicate from %s",
                entry.process, entry.particle, entry.package,
            )
            return
        entries.append(entry)

    def processes_for(self, particle: str) -> list[str]:
        return [e.process for e in self._entries.get(particle, [])]

    def entries(self) -> list[ProcessEntry]:
        return [e for entries in self._entries.values() for e in entries]

    def __len__(self) -> int:
        return sum(len(v) for v in self._entries.values())


# ── Package definitions ──


@dataclass(frozen=True)
class PackageDefinition:
    """Static description of a physics package.

    Attributes:
        name: Menu name.
        role: Base EM package or one of the additive extras.
        description: Human readable summary.
        particles: Species the package registers.
        processes: (particle, process names) pairs it attaches.
        unstable_processes: Processes attached to every registered
            unstable particle (decay packages).
        model: Photon/electron model set label.
    """
    name: str
    role: PackageRole
    description: str
    particles: tuple[str, ...]
    processes: tuple[tuple[str, tuple[str, ...]], ...] = ()
    unstable_processes: tuple[str, ...] = ()
    model: str = "Standard"


_EM_PARTICLES = (
    "gamma", "e-", "e+", "mu-", "mu+", "pi+", "pi-", "kaon+", "kaon-",
    "proton", "anti_proton", "deuteron", "alpha", "GenericIon",
)

_HADRON_EM = ("msc", "hIoni", "hBrems", "hPairProd")


def _em_package(name: str, description: str, model: str, rayleigh: bool) -> PackageDefinition:
    gamma = ("phot", "compt", "conv") + (("Rayl",) if rayleigh else ())
    muon = ("msc", "muIoni", "muBrems", "muPairProd")
    return PackageDefinition(
        name=name,
        role=PackageRole.BASE_EM,
        description=description,
        particles=_EM_PARTICLES,
        processes=(
            ("gamma", gamma),
            ("e-", ("msc", "eIoni", "eBrem")),
            ("e+", ("msc", "eIoni", "eBrem", "annihil")),
            ("mu-", muon),
            ("mu+", muon),
            ("pi+", _HADRON_EM),
            ("pi-", _HADRON_EM),
            ("kaon+", _HADRON_EM),
            ("kaon-", _HADRON_EM),
            ("proton", _HADRON_EM),
            ("anti_proton", _HADRON_EM),
            ("deuteron", ("msc", "ionIoni")),
            ("alpha", ("msc", "ionIoni")),
            ("GenericIon", ("msc", "ionIoni")),
        ),
        model=model,
    )


BASE_PACKAGES: dict[str, PackageDefinition] = {
    d.name: d for d in (
        _em_package("standard", "Standard EM, default options", "Standard", rayleigh=False),
        _em_package("emstandard_opt1", "Standard EM, fast multiple scattering", "Standard", rayleigh=False),
        _em_package("emstandard_opt2", "Standard EM, no displacement in msc", "Standard", rayleigh=False),
        _em_package("emstandard_opt3", "Standard EM, accurate tracking", "Standard", rayleigh=True),
        _em_package("emstandard_opt4", "Most accurate EM combination", "Livermore", rayleigh=True),
        _em_package("livermore", "Livermore low-energy EM", "Livermore", rayleigh=True),
        _em_package("penelope", "Penelope low-energy EM", "Penelope", rayleigh=True),
    )
}

BASE_ALIASES: dict[str, str] = {
    "emstandard_opt0": "standard",
}

EXTRA_PACKAGES: dict[str, PackageDefinition] = {
    d.name: d for d in (
        PackageDefinition(
            name="decay",
            role=PackageRole.DECAY,
            description="Decay in flight of unstable particles",
            particles=("mu-", "mu+", "pi+", "pi-", "pi0", "kaon+", "kaon-", "kaon0L", "neutron"),
            unstable_processes=("Decay",),
        ),
        PackageDefinition(
            name="emextra",
            role=PackageRole.EXTRA_EM,
            description="Gamma, electron and muon nuclear interactions",
            particles=("gamma", "e-", "e+", "mu-", "mu+"),
            processes=(
                ("gamma", ("photonNuclear",)),
                ("e-", ("electronNuclear",)),
                ("e+", ("positronNuclear",)),
                ("mu-", ("muonNuclear",)),
                ("mu+", ("muonNuclear",)),
            ),
        ),
        PackageDefinition(
            name="radioactive_decay",
            role=PackageRole.RADIOACTIVE_DECAY,
            description="Radioactive decay of ions at rest",
            particles=("GenericIon", "alpha", "e-", "e+", "gamma"),
            processes=(("GenericIon", ("RadioactiveDecay",)),),
        ),
    )
}


def lookup_base(name: str) -> PackageDefinition:
    """Base package definition for *name* (aliases accepted).

    Raises:
        UnknownPackage: If *name* is not on the base menu.
    """
    definition = BASE_PACKAGES.get(BASE_ALIASES.get(name, name))
    if definition is None:
        raise UnknownPackage(name, list(BASE_PACKAGES) + list(BASE_ALIASES))
    return definition


def lookup_extra(name: str) -> PackageDefinition:
    """Extra package definition for *name*.

    Raises:
        UnknownPackage: If *name* is not on the extras menu.
    """
    definition = EXTRA_PACKAGES.get(name)
    if definition is None:
        raise UnknownPackage(name, list(EXTRA_PACKAGES))
    return definition


# ── Runtime package ──


@dataclass
class PhysicsPackage:
    """An active package inside one PhysicsAssembly."""
    definition: PackageDefinition
    cuts: Optional[CutSet] = None
    registered_particles: list[str] = field(default_factory=list)
    registered_processes: int = 0

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def role(self) -> PackageRole:
        return self.definition.role

    def construct_particles(self, particles: ParticleTable) -> None:
        for name in self.definition.particles:
            particles.register(name)
            if name not in self.registered_particles:
                self.registered_particles.append(name)
        logger.debug("%s registered %d particles", self.name, len(self.definition.particles))

    def construct_processes(self, processes: ProcessTable, particles: ParticleTable) -> None:
        count = len(processes)
        for particle, names in self.definition.processes:
            for process in names:
                processes.add(
                    ProcessEntry(particle, process, self.definition.model, self.name),
                    particles,
                )
        for definition in particles.unstable():
            for process in self.definition.unstable_processes:
                processes.add(
                    ProcessEntry(definition.name, process, self.definition.model, self.name),
                    particles,
                )
        self.registered_processes = len(processes) - count
        logger.debug("%s attached %d processes", self.name, self.registered_processes)

    def apply_cuts(self, cuts: CutSet) -> None:
        self.cuts = cuts
