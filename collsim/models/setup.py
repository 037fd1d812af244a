"""Complete setup configuration as loaded from a configuration file."""

from dataclasses import dataclass, field

from collsim.models.geometry import CollimatorDimensions, OverlapPolicy
from collsim.models.physics import PhysicsConfig


@dataclass
class SetupConfig:
    """Geometry dimensions, overlap policy and physics selection.

    Attributes:
        dimensions: Module dimensions [mm].
        overlap_policy: Strict (abort) or permissive (log) overlaps.
        physics: Package selection and production cuts.
    """
    dimensions: CollimatorDimensions = field(default_factory=CollimatorDimensions)
    overlap_policy: OverlapPolicy = OverlapPolicy.STRICT
    physics: PhysicsConfig = field(default_factory=PhysicsConfig)
