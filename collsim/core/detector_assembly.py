"""Detector assembly — builds the two collimator modules and the world.

Layout along the beam (z) axis, all lengths in mm:

    World (air box)
    ├── PrimaryCollimator   enclosure (Fe) at z = -src_shiftz
    │   ├── source   (Ni)   at z = src_shiftz
    │   ├── opening  (air)  at z = enc_halfz - opn_halfz
    │   └── PCL      (W)    at z = enc_halfz - pcl_halfz - (opn_halfz - pcl_halfz)/2
    └── SecondaryCollimator aircyl (air) at z = enc_halfz - src_shiftz + air_gap + coll_halfz
        ├── irontube (Fe)   at z = 0
        └── scl      (W)    at z = -(coll_halfz - scl_halfz)

Placing the primary module at -src_shiftz puts the source centre at the
world origin. The secondary module starts exactly air_gap downstream of the
enclosure end, so the modules cannot overlap for any air_gap >= 0.
"""

from __future__ import annotations

import logging
from typing import Optional

from collsim.core.material_database import MaterialCatalog
from collsim.core.placement_engine import PlacementEngine
from collsim.core.shape_factory import ShapeFactory
from collsim.core.volume_builder import VolumeBuilder
from collsim.errors import InvalidDimension, OrderingViolation, UnconfiguredDimension
from collsim.models.geometry import (
    CollimatorDimensions,
    OverlapPolicy,
    Placement,
    Volume,
)
from collsim.models.material import Material

logger = logging.getLogger(__name__)

AIR = "G4_AIR"
IRON = "G4_Fe"
TUNGSTEN = "G4_W"


class DetectorAssembly:
    """Builds the collimator geometry from a dimensions record.

    Args:
        dimensions: Module dimensions; every required field must be set.
        catalog: Material catalog, a fresh one if None.
        policy: Overlap handling for every placement.
        check_overlaps: Run overlap checks on placements.
    """

    def __init__(
        self,
        dimensions: CollimatorDimensions,
        catalog: Optional[MaterialCatalog] = None,
        policy: OverlapPolicy = OverlapPolicy.STRICT,
        check_overlaps: bool = True,
    ) -> None:
        self._dims = dimensions
        self._catalog = catalog if catalog is not None else MaterialCatalog()
        self._policy = policy
        self._check_overlaps = check_overlaps
        self._shapes = ShapeFactory()
        self._volumes = VolumeBuilder()
        self._engine: Optional[PlacementEngine] = None
        self._materials: dict[str, Material] = {}
        self._modules: dict[str, Volume] = {}
        self._world: Optional[Placement] = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def dimensions(self) -> CollimatorDimensions:
        return self._dims

    @property
    def catalog(self) -> MaterialCatalog:
        return self._catalog

    @property
    def materials(self) -> dict[str, Material]:
        return dict(self._materials)

    @property
    def volumes(self) -> VolumeBuilder:
        return self._volumes

    @property
    def placement_engine(self) -> Optional[PlacementEngine]:
        return self._engine

    @property
    def world(self) -> Optional[Placement]:
        return self._world

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def construct(self) -> Placement:
        """Build materials, both modules and the world; return the root.

        Raises:
            OrderingViolation: If the geometry was already constructed.
            UnconfiguredDimension: If a required dimension is unset.
            InvalidDimension: If the dimensions are inconsistent.
            OverlapDetected: On overlap in strict mode.
        """
        if self._world is not None:
            raise OrderingViolation("construct", "constructed")
        self._prepare()
        return self._define_volumes()

    def build_primary_collimator(self) -> Volume:
        """Build the primary module; return its enclosure volume."""
        if "primary" in self._modules:
            return self._modules["primary"]
        self._prepare()
        d = self._dims
        engine = self._engine
        iron, air, tungsten = self._materials[IRON], self._materials[AIR], self._materials[TUNGSTEN]

        # Enclosure around primary collimator
        enc = self._volumes.build(
            "enclosure", self._shapes.tube(0.0, d.enc_radius, d.enc_halfz), iron,
        )

        source = self._volumes.build(
            "source",
            self._shapes.tube(0.0, d.src_radius, d.src_halfz),
            self._materials[d.source_material],
        )
        engine.place(
            source, enc, (0.0, 0.0, d.src_shiftz),
            check_overlaps=self._check_overlaps,
        )

        # Opening flush with the downstream end of the enclosure
        opening = self._volumes.build(
            "opening", self._shapes.tube(0.0, d.opn_radius, d.opn_halfz), air,
        )
        engine.place(
            opening, enc, (0.0, 0.0, d.enc_halfz - d.opn_halfz),
            check_overlaps=self._check_overlaps,
        )

        # Tungsten absorber around the bore
        pcl = self._volumes.build(
            "PCL", self._shapes.tube(d.opn_radius, d.pcl_radius, d.pcl_halfz), tungsten,
        )
        engine.place(
            pcl, enc,
            (0.0, 0.0, d.enc_halfz - d.pcl_halfz - 0.5 * (d.opn_halfz - d.pcl_halfz)),
            check_overlaps=self._check_overlaps,
        )

        self._modules["primary"] = enc
        return enc

    def build_secondary_collimator(self) -> Volume:
        """Build the secondary module; return its air cylinder volume."""
        if "secondary" in self._modules:
            return self._modules["secondary"]
        self._prepare()
        d = self._dims
        engine = self._engine
        iron, air, tungsten = self._materials[IRON], self._materials[AIR], self._materials[TUNGSTEN]

        air_cyl = self._volumes.build(
            "aircyl", self._shapes.tube(0.0, d.coll_radius, d.coll_halfz), air,
        )

        # Iron sleeve, same length, no shift
        sleeve = self._volumes.build(
            "irontube", self._shapes.tube(d.scl_radius, d.coll_radius, d.coll_halfz), iron,
        )
        engine.place(sleeve, air_cyl, (0.0, 0.0, 0.0), check_overlaps=self._check_overlaps)

        taper = self._volumes.build(
            "scl",
            self._shapes.cone(d.scl_hole_a, d.scl_radius, d.scl_hole_b, d.scl_radius, d.scl_halfz),
            tungsten,
        )
        engine.place(
            taper, air_cyl, (0.0, 0.0, -(d.coll_halfz - d.scl_halfz)),
            check_overlaps=self._check_overlaps,
        )

        self._modules["secondary"] = air_cyl
        return air_cyl

    def module_offsets(self) -> dict[str, float]:
        """World z offsets of the primary and secondary module roots [mm]."""
        self._validate()
        d = self._dims
        return {
            "primary": -d.src_shiftz,
            "secondary": (d.enc_halfz - d.src_shiftz) + d.air_gap + d.coll_halfz,
        }

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _prepare(self) -> None:
        """Validate dimensions, resolve materials and create the engine once."""
        if self._engine is not None:
            return
        self._validate()
        self._define_materials()
        self._engine = PlacementEngine(
            policy=self._policy, world_extent=self._dims.world_extent,
        )

    def _validate(self) -> None:
        d = self._dims
        missing = d.unset()
        if missing:
            raise UnconfiguredDimension(missing[0], missing)
        for name in d.dimension_names():
            value = getattr(d, name)
            if name != "src_shiftz" and value < 0.0:
                raise InvalidDimension(name, value, "must be >= 0")
        if not d.coll_radius > d.scl_radius:
            raise InvalidDimension(
                "coll_radius", d.coll_radius, f"must exceed scl_radius = {d.scl_radius!r}",
            )
        for hole in ("scl_hole_a", "scl_hole_b"):
            value = getattr(d, hole)
            if not value < d.scl_radius:
                raise InvalidDimension(
                    hole, value, f"must be below scl_radius = {d.scl_radius!r}",
                )
        if not d.opn_radius < d.pcl_radius:
            raise InvalidDimension(
                "opn_radius", d.opn_radius, f"must be below pcl_radius = {d.pcl_radius!r}",
            )

    def _define_materials(self) -> None:
        for name in (AIR, IRON, TUNGSTEN, self._dims.source_material):
            self._materials[name] = self._catalog.resolve(name)
        logger.info("Material table:\n%s", self._catalog.format_table())

    def _define_volumes(self) -> Placement:
        d = self._dims
        engine = self._engine
        half = 0.5 * d.world_extent

        world_lv = self._volumes.build(
            "world", self._shapes.box(half, half, half), self._materials[AIR],
        )
        world = engine.place(world_lv, None, name="World")

        primary = self.build_primary_collimator()
        secondary = self.build_secondary_collimator()
        offsets = self.module_offsets()

        # Source centre at the origin
        engine.place(
            primary, world_lv, (0.0, 0.0, offsets["primary"]),
            check_overlaps=self._check_overlaps, name="PrimaryCollimator",
        )
        # Downstream of the primary module, across the air gap
        engine.place(
            secondary, world_lv, (0.0, 0.0, offsets["secondary"]),
            check_overlaps=self._check_overlaps, name="SecondaryCollimator",
        )
        logger.info(
            "Primary collimator at z = %g mm, secondary at z = %g mm",
            offsets["primary"], offsets["secondary"],
        )
        self._world = world
        return world
