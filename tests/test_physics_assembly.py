"""Physics assembly tests.

Covers package menus, lifecycle ordering, production cuts and their
propagation after processes exist.
"""

import pytest

from collsim.core.physics_assembly import PhysicsAssembly
from collsim.core.physics_packages import (
    BASE_PACKAGES,
    EXTRA_PACKAGES,
    ParticleTable,
    ProcessEntry,
    ProcessTable,
    lookup_base,
    lookup_extra,
)
from collsim.errors import InvalidDimension, OrderingViolation, UnknownPackage
from collsim.models.physics import CutSet, PackageRole, PhysicsConfig, PhysicsState


def _initialized(*extras: str, base: str = "standard") -> PhysicsAssembly:
    assembly = PhysicsAssembly()
    assembly.select_base_package(base)
    for name in extras:
        assembly.add_extra_package(name)
    assembly.construct_particles()
    assembly.construct_processes()
    assembly.apply_cuts()
    return assembly


class TestDefaults:
    def test_default_cuts(self):
        assembly = PhysicsAssembly()
        assert assembly.cuts == CutSet(0.2, 0.2, 0.2)

    def test_default_base_package(self):
        assembly = PhysicsAssembly()
        assert assembly.base_package == "standard"
        assert assembly.extra_packages == []
        assert assembly.state == PhysicsState.UNINITIALIZED

    def test_custom_default_cut(self):
        assert PhysicsAssembly(default_cut=0.7).cuts == CutSet.uniform(0.7)

    def test_invalid_default_cut(self):
        with pytest.raises(InvalidDimension):
            PhysicsAssembly(default_cut=0.0)

    def test_no_production_cuts_before_processes(self):
        assert PhysicsAssembly().production_cuts == {}


class TestPackageMenus:
    def test_base_menu(self):
        assert set(BASE_PACKAGES) == {
            "standard", "emstandard_opt1", "emstandard_opt2", "emstandard_opt3",
            "emstandard_opt4", "livermore", "penelope",
        }

    def test_extras_menu(self):
        assert list(EXTRA_PACKAGES) == ["decay", "emextra", "radioactive_decay"]

    def test_alias(self):
        assert lookup_base("emstandard_opt0").name == "standard"

    def test_roles(self):
        assert all(d.role == PackageRole.BASE_EM for d in BASE_PACKAGES.values())
        assert lookup_extra("decay").role == PackageRole.DECAY

    def test_unknown_base(self):
        with pytest.raises(UnknownPackage, match="doesNotExist") as exc:
            lookup_base("doesNotExist")
        assert "standard" in exc.value.menu

    def test_base_name_is_not_an_extra(self):
        with pytest.raises(UnknownPackage):
            lookup_extra("standard")


class TestPackageSelection:
    def test_unknown_then_valid(self):
        assembly = PhysicsAssembly()
        assembly.select_base_package("livermore")
        with pytest.raises(UnknownPackage):
            assembly.select_base_package("doesNotExist")
        assert assembly.base_package == "livermore"
        assembly.select_base_package("standard")
        assert assembly.base_package == "standard"

    def test_unknown_package_is_key_error(self):
        with pytest.raises(KeyError):
            PhysicsAssembly().add_extra_package("optical")

    def test_alias_selects_standard(self):
        assembly = PhysicsAssembly()
        assembly.select_base_package("emstandard_opt0")
        assert assembly.base_package == "standard"

    def test_extra_added_once(self):
        assembly = PhysicsAssembly()
        assembly.add_extra_package("decay")
        assembly.add_extra_package("decay")
        assert assembly.extra_packages == ["decay"]

    def test_extras_in_menu_order(self):
        assembly = PhysicsAssembly()
        assembly.add_extra_package("radioactive_decay")
        assembly.add_extra_package("decay")
        assert assembly.extra_packages == ["decay", "radioactive_decay"]
        assert [p.name for p in assembly.active_packages] == [
            "standard", "decay", "radioactive_decay",
        ]

    def test_selection_after_processes_rejected(self):
        assembly = _initialized()
        with pytest.raises(OrderingViolation):
            assembly.select_base_package("livermore")
        with pytest.raises(OrderingViolation):
            assembly.add_extra_package("decay")
        assert assembly.base_package == "standard"

    def test_unknown_name_reported_before_state(self):
        assembly = _initialized()
        with pytest.raises(UnknownPackage):
            assembly.add_extra_package("optical")

    def test_extra_after_particles_registers_particles(self):
        assembly = PhysicsAssembly()
        assembly.construct_particles()
        assert "pi0" not in assembly.particle_table
        assembly.add_extra_package("decay")
        assert "pi0" in assembly.particle_table

    def test_base_swap_after_particles(self):
        assembly = PhysicsAssembly()
        assembly.construct_particles()
        assembly.select_base_package("penelope")
        assembly.construct_processes()
        models = {e.model for e in assembly.process_table.entries()}
        assert models == {"Penelope"}


class TestLifecycle:
    def test_full_sequence(self):
        assembly = _initialized("decay")
        assert assembly.state == PhysicsState.CUTS_APPLIED

    def test_processes_before_particles(self):
        with pytest.raises(OrderingViolation, match="construct_processes"):
            PhysicsAssembly().construct_processes()

    def test_cuts_before_processes(self):
        assembly = PhysicsAssembly()
        assembly.construct_particles()
        with pytest.raises(OrderingViolation, match="apply_cuts"):
            assembly.apply_cuts()

    def test_particles_twice(self):
        assembly = PhysicsAssembly()
        assembly.construct_particles()
        with pytest.raises(OrderingViolation) as exc:
            assembly.construct_particles()
        assert exc.value.state == "particles_constructed"

    def test_state_rank(self):
        ranks = [s.rank for s in PhysicsState]
        assert ranks == sorted(ranks)


class TestProcesses:
    def test_standard_gamma_processes(self):
        assembly = _initialized()
        assert assembly.process_table.processes_for("gamma") == ["phot", "compt", "conv"]

    def test_livermore_adds_rayleigh(self):
        assembly = _initialized(base="livermore")
        assert "Rayl" in assembly.process_table.processes_for("gamma")

    def test_decay_attached_to_unstable(self):
        assembly = _initialized("decay")
        table = assembly.process_table
        for particle in ("pi+", "pi0", "mu-", "kaon0L", "neutron"):
            assert "Decay" in table.processes_for(particle)
        assert "Decay" not in table.processes_for("e-")
        assert "Decay" not in table.processes_for("proton")

    def test_no_decay_without_package(self):
        assembly = _initialized()
        assert "Decay" not in assembly.process_table.processes_for("pi+")

    def test_emextra(self):
        assembly = _initialized("emextra")
        assert "photonNuclear" in assembly.process_table.processes_for("gamma")

    def test_radioactive_decay(self):
        assembly = _initialized("radioactive_decay")
        assert assembly.process_table.processes_for("GenericIon")[-1] == "RadioactiveDecay"

    def test_extras_order_independent(self):
        first = PhysicsAssembly()
        first.add_extra_package("emextra")
        first.add_extra_package("decay")
        second = PhysicsAssembly()
        second.add_extra_package("decay")
        second.add_extra_package("emextra")
        for assembly in (first, second):
            assembly.construct_particles()
            assembly.construct_processes()
        assert first.particle_table.names() == second.particle_table.names()
        assert first.process_table.entries() == second.process_table.entries()

    def test_process_needs_registered_particle(self):
        with pytest.raises(KeyError, match="not constructed"):
            ProcessTable().add(ProcessEntry("gamma", "phot", "Standard", "standard"), ParticleTable())

    def test_duplicate_process_kept_once(self):
        particles = ParticleTable()
        particles.register("gamma")
        table = ProcessTable()
        entry = ProcessEntry("gamma", "phot", "Standard", "standard")
        table.add(entry, particles)
        table.add(entry, particles)
        assert table.processes_for("gamma") == ["phot"]

    def test_unknown_particle(self):
        with pytest.raises(KeyError, match="tachyon"):
            ParticleTable().register("tachyon")


class TestCuts:
    def test_single_cut_change(self):
        assembly = PhysicsAssembly()
        assembly.set_cut_for_gamma(0.5)
        assert assembly.cuts == CutSet(gamma=0.5, electron=0.2, positron=0.2)

    @pytest.mark.parametrize("value", [0.0, -1.0, float("nan"), float("inf")])
    def test_invalid_cut(self, value):
        assembly = PhysicsAssembly()
        with pytest.raises(InvalidDimension, match="cut_for_electron"):
            assembly.set_cut_for_electron(value)
        assert assembly.cuts == CutSet()

    def test_applied_cuts_reach_packages(self):
        assembly = _initialized("decay")
        for package in assembly.active_packages:
            assert package.cuts == CutSet()
        assert assembly.production_cuts == {"gamma": 0.2, "e-": 0.2, "e+": 0.2}

    def test_change_after_apply_propagates(self):
        assembly = _initialized("decay", "emextra")
        assembly.set_cut_for_electron(1.0)
        assert assembly.state == PhysicsState.CUTS_APPLIED
        assert assembly.production_cuts["e-"] == 1.0
        for package in assembly.active_packages:
            assert package.cuts.electron == 1.0
            assert package.cuts.gamma == 0.2

    def test_change_after_processes_propagates(self):
        assembly = PhysicsAssembly()
        assembly.construct_particles()
        assembly.construct_processes()
        assembly.set_cut_for_positron(0.05)
        assert assembly.production_cuts["e+"] == 0.05
        assert assembly.state == PhysicsState.PROCESSES_CONSTRUCTED

    def test_change_before_processes_is_deferred(self):
        assembly = PhysicsAssembly()
        assembly.construct_particles()
        assembly.set_cut_for_gamma(2.0)
        assert assembly.production_cuts == {}
        assembly.construct_processes()
        assembly.apply_cuts()
        assert assembly.production_cuts["gamma"] == 2.0

    def test_set_all_cuts(self):
        assembly = PhysicsAssembly()
        assembly.set_cuts(CutSet(0.1, 0.3, 0.4))
        assert assembly.cuts.by_particle() == {"gamma": 0.1, "e-": 0.3, "e+": 0.4}

    def test_set_cuts_rejects_bad_member(self):
        assembly = PhysicsAssembly()
        with pytest.raises(InvalidDimension, match="cut_for_positron"):
            assembly.set_cuts(CutSet(0.1, 0.1, -0.1))


class TestFromConfig:
    def test_config(self):
        config = PhysicsConfig(
            base_package="emstandard_opt4",
            extra_packages=["radioactive_decay", "decay"],
            cuts=CutSet.uniform(0.7),
        )
        assembly = PhysicsAssembly.from_config(config)
        assert assembly.base_package == "emstandard_opt4"
        assert assembly.extra_packages == ["decay", "radioactive_decay"]
        assert assembly.cuts == CutSet.uniform(0.7)

    def test_config_with_unknown_package(self):
        with pytest.raises(UnknownPackage):
            PhysicsAssembly.from_config(PhysicsConfig(extra_packages=["hadronic"]))
