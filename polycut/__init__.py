"""
polycut - Polygon Triangulation Package

Triangulate 2D polygons (with holes, and degenerate or self-intersecting
input) into triangles that reference the original vertices, using ear
clipping accelerated by a z-order index.
"""

from .constants import __version__

# Core triangulation functions and configuration
from .earcut import triangulate, triangulate_detailed, log_triangulation_summary, TriangulationResult
from .config import TriangulationConfig
from .exceptions import InvalidDimensionError

# Verification helpers
from .deviation import deviation, flatten, FlatPolygon
from .validation import validate_triangulation, get_validation_report, ValidationResult

# Make the CLI main function easily accessible
from .cli import main

__all__ = [
    "__version__",
    "main",
    "triangulate",
    "triangulate_detailed",
    "log_triangulation_summary",
    "TriangulationResult",
    "TriangulationConfig",
    "InvalidDimensionError",
    "deviation",
    "flatten",
    "FlatPolygon",
    "validate_triangulation",
    "get_validation_report",
    "ValidationResult"
]
