"""
Configuration constants for polygon triangulation.

All the magic numbers live here! Thresholds, quantization scales and
tolerances are named once so the engine, the CLI and the tests agree on
them without hunting through code.
"""

__version__ = "1.0.0"

# ============================================================================
# Input Layout
# ============================================================================

# Default number of values per vertex in the flat coordinate array
# Only the first two (x, y) take part in the geometry; any extra values
# (z, uv, colour...) are carried along and ignored
DEFAULT_DIM = 2

# Smallest dimension a vertex can have (we need at least x and y)
MIN_DIM = 2

# ============================================================================
# Z-Order Index
# ============================================================================

# Polygons with more than this many vertices get the z-order (Morton) index.
# The index is compared against the flat array length as
# len(vertices) > Z_ORDER_VERTEX_THRESHOLD * dim
# Below it, the setup cost of hashing outweighs the faster ear tests
Z_ORDER_VERTEX_THRESHOLD = 80

# Coordinates are normalised to the bounding box and quantised into this
# many steps per axis (15 bits) before their bits are interleaved
Z_ORDER_SCALE = 32767

# ============================================================================
# Verification
# ============================================================================

# Maximum relative area deviation accepted for well-conditioned input
# Real-world fixtures with self-touching rings need a looser value
DEFAULT_DEVIATION_TOLERANCE = 1e-12

# Triangles with an absolute doubled area below this are reported as
# degenerate by the validator
DEGENERATE_AREA_EPSILON = 1e-12

# Relative tolerance for the shapely coverage and overlap checks
# GEOS overlay operations leave slivers around 1e-15 of the polygon area
COVERAGE_TOLERANCE = 1e-9

# ============================================================================
# CLI
# ============================================================================

# File extension picked up when the CLI is pointed at a directory
INPUT_FILE_EXTENSION = ".json"

# Default output filename suffix
# If no output file is given in batch mode we write {input_name}_triangles.json
DEFAULT_OUTPUT_SUFFIX = "_triangles"
