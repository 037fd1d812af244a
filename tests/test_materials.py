"""Material catalog tests.

Validates catalog loading, shared resolution and the unknown-name error.
"""

import json

import pytest

from collsim.constants import DEFAULT_SOURCE_MATERIAL
from collsim.core.material_database import MaterialCatalog
from collsim.errors import CollimatorSetupError, UnknownMaterial
from collsim.models.material import MaterialCategory, MaterialState


@pytest.fixture(scope="module")
def catalog() -> MaterialCatalog:
    return MaterialCatalog()


class TestCatalogLoading:
    def test_available_ids(self, catalog: MaterialCatalog):
        assert catalog.available() == sorted([
            "G4_AIR", "G4_Fe", "G4_W", "G4_Ni", "G4_Co",
            "G4_Pb", "G4_Cu", "G4_Al", "G4_WATER", "G4_Galactic",
        ])

    def test_default_materials_in_catalog(self, catalog: MaterialCatalog):
        for material_id in ("G4_AIR", "G4_Fe", "G4_W", DEFAULT_SOURCE_MATERIAL):
            assert material_id in catalog.available()

    def test_iron_properties(self, catalog: MaterialCatalog):
        fe = catalog.resolve("G4_Fe")
        assert fe.name == "Iron"
        assert fe.density == pytest.approx(7.874)
        assert fe.atomic_number == 26
        assert fe.category == MaterialCategory.PURE_ELEMENT
        assert fe.state == MaterialState.SOLID

    def test_tungsten_density(self, catalog: MaterialCatalog):
        assert catalog.resolve("G4_W").density == pytest.approx(19.3)

    def test_nickel_source_material(self, catalog: MaterialCatalog):
        assert catalog.resolve("G4_Ni").atomic_number == 28

    def test_air_is_gas_compound(self, catalog: MaterialCatalog):
        air = catalog.resolve("G4_AIR")
        assert air.state == MaterialState.GAS
        assert air.category == MaterialCategory.COMPOUND
        assert {c.element for c in air.composition} == {"C", "N", "O", "Ar"}
        total = sum(c.weight_fraction for c in air.composition)
        assert total == pytest.approx(1.0, abs=1e-6)


class TestResolution:
    def test_resolution_is_shared(self):
        catalog = MaterialCatalog()
        first = catalog.resolve("G4_W")
        assert catalog.resolve("G4_W") is first

    def test_lazy_resolution(self):
        catalog = MaterialCatalog()
        assert catalog.resolved() == []
        assert not catalog.is_resolved("G4_Fe")
        catalog.resolve("G4_Fe")
        assert catalog.is_resolved("G4_Fe")
        assert [m.id for m in catalog.resolved()] == ["G4_Fe"]

    def test_resolution_order(self):
        catalog = MaterialCatalog()
        for name in ("G4_W", "G4_AIR", "G4_Fe"):
            catalog.resolve(name)
        assert [m.id for m in catalog.resolved()] == ["G4_W", "G4_AIR", "G4_Fe"]

    def test_unknown_material(self, catalog: MaterialCatalog):
        with pytest.raises(UnknownMaterial, match="Unknown material: 'G4_Unobtainium'") as exc:
            catalog.resolve("G4_Unobtainium")
        assert exc.value.name == "G4_Unobtainium"

    def test_unknown_material_is_key_error(self, catalog: MaterialCatalog):
        with pytest.raises(KeyError):
            catalog.resolve("Fe")
        with pytest.raises(CollimatorSetupError):
            catalog.resolve("Fe")

    def test_materials_are_immutable(self, catalog: MaterialCatalog):
        fe = catalog.resolve("G4_Fe")
        with pytest.raises(AttributeError):
            fe.density = 1.0


class TestMaterialTable:
    def test_table_lists_resolved_materials(self):
        catalog = MaterialCatalog()
        catalog.resolve("G4_Fe")
        catalog.resolve("G4_AIR")
        table = catalog.format_table()
        assert "G4_Fe" in table
        assert "G4_AIR" in table
        assert "G4_W" not in table

    def test_table_lists_compound_fractions(self):
        catalog = MaterialCatalog()
        catalog.resolve("G4_WATER")
        table = catalog.format_table()
        assert "0.111894" in table


class TestCustomCatalog:
    def test_custom_catalog_file(self, tmp_path):
        path = tmp_path / "materials.json"
        path.write_text(json.dumps({
            "materials": [{
                "material_id": "X_Test",
                "name": "Testium",
                "symbol": "Tt",
                "atomic_number": 99,
                "density_g_cm3": 3.5,
                "mean_excitation_eV": 500.0,
                "state": "liquid",
                "category": "pure_element",
            }],
        }), encoding="utf-8")
        catalog = MaterialCatalog(path)
        assert catalog.available() == ["X_Test"]
        material = catalog.resolve("X_Test")
        assert material.state == MaterialState.LIQUID
        assert material.density == pytest.approx(3.5)
        with pytest.raises(UnknownMaterial):
            catalog.resolve("G4_Fe")
