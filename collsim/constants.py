"""Application-wide constants.

All lengths in mm (core units), angles in degree.
"""

APP_NAME = "Collimator Simulation Setup"
APP_VERSION = "0.1.0"

# World
DEFAULT_WORLD_EXTENT_MM = 600.0  # 60 cm cube
SURFACE_TOLERANCE_FACTOR = 1e-9  # tolerance = factor * world extent

# Overlap checking
OVERLAP_SAMPLE_RESOLUTION = 24  # grid points per surface direction

# Physics
DEFAULT_CUT_MM = 0.2
DEFAULT_BASE_PACKAGE = "standard"

# Materials
DEFAULT_SOURCE_MATERIAL = "G4_Ni"

# Export
GEOMETRY_SCHEMA_VERSION = "1.0"
CONFIG_SCHEMA_VERSION = "1.0"
