"""Volume builder tests — naming, reuse and duplicate detection."""

import pytest

from collsim.core.material_database import MaterialCatalog
from collsim.core.shape_factory import ShapeFactory
from collsim.core.volume_builder import VolumeBuilder
from collsim.errors import DuplicateVolumeName


@pytest.fixture(scope="module")
def catalog() -> MaterialCatalog:
    return MaterialCatalog()


class TestVolumeBuilder:
    def test_build(self, catalog: MaterialCatalog):
        builder = VolumeBuilder()
        iron = catalog.resolve("G4_Fe")
        volume = builder.build("enclosure", ShapeFactory.tube(0.0, 50.0, 50.0), iron)
        assert volume.name == "enclosure"
        assert volume.material is iron
        assert "enclosure" in builder
        assert len(builder) == 1

    def test_same_definition_returns_existing(self, catalog: MaterialCatalog):
        builder = VolumeBuilder()
        iron = catalog.resolve("G4_Fe")
        first = builder.build("sleeve", ShapeFactory.tube(40.0, 50.0, 100.0), iron)
        again = builder.build("sleeve", ShapeFactory.tube(40.0, 50.0, 100.0), iron)
        assert again is first
        assert len(builder) == 1

    def test_duplicate_name_different_shape(self, catalog: MaterialCatalog):
        builder = VolumeBuilder()
        iron = catalog.resolve("G4_Fe")
        builder.build("sleeve", ShapeFactory.tube(40.0, 50.0, 100.0), iron)
        with pytest.raises(DuplicateVolumeName, match="sleeve"):
            builder.build("sleeve", ShapeFactory.tube(30.0, 50.0, 100.0), iron)

    def test_duplicate_name_different_material(self, catalog: MaterialCatalog):
        builder = VolumeBuilder()
        shape = ShapeFactory.box(1.0, 1.0, 1.0)
        builder.build("block", shape, catalog.resolve("G4_Fe"))
        with pytest.raises(DuplicateVolumeName):
            builder.build("block", shape, catalog.resolve("G4_W"))

    def test_empty_name(self, catalog: MaterialCatalog):
        with pytest.raises(ValueError):
            VolumeBuilder().build("", ShapeFactory.box(1.0, 1.0, 1.0), catalog.resolve("G4_AIR"))

    def test_get(self, catalog: MaterialCatalog):
        builder = VolumeBuilder()
        volume = builder.build("world", ShapeFactory.box(300.0, 300.0, 300.0), catalog.resolve("G4_AIR"))
        assert builder.get("world") is volume
        with pytest.raises(KeyError, match="Unknown volume"):
            builder.get("nothing")

    def test_volumes_in_build_order(self, catalog: MaterialCatalog):
        builder = VolumeBuilder()
        air = catalog.resolve("G4_AIR")
        for name in ("world", "enclosure", "source"):
            builder.build(name, ShapeFactory.box(1.0, 1.0, 1.0), air)
        assert [v.name for v in builder.volumes()] == ["world", "enclosure", "source"]

    def test_material_shared_between_volumes(self, catalog: MaterialCatalog):
        builder = VolumeBuilder()
        iron = catalog.resolve("G4_Fe")
        a = builder.build("a", ShapeFactory.box(1.0, 1.0, 1.0), iron)
        b = builder.build("b", ShapeFactory.box(2.0, 2.0, 2.0), catalog.resolve("G4_Fe"))
        assert a.material is b.material
