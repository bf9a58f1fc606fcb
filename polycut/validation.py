"""
Triangulation validation using shapely for independent geometry checks.

deviation() only compares total areas, which can hide two errors that
cancel out (a missing piece plus an overlapping triangle). This module
rebuilds the input polygon and the output triangles as shapely geometries
and checks what really matters to a consumer of the triangles:

- Index sanity (multiple of 3, every index in range)
- Area deviation (same oracle as deviation())
- Degenerate (zero-area) triangles
- Coverage: the union of the triangles equals the polygon
- Overlap: triangles don't cover the same area twice

Invalid input (self-intersecting rings, holes outside the outer ring...)
is reported as a warning rather than an error: the engine is built to
degrade gracefully on such input, and the coverage checks are skipped for
it because there is no well-defined area to compare against.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging

from shapely.errors import GEOSException
from shapely.geometry import Polygon
from shapely.ops import unary_union
from shapely.validation import explain_validity

from .constants import COVERAGE_TOLERANCE, DEFAULT_DEVIATION_TOLERANCE, DEGENERATE_AREA_EPSILON
from .deviation import deviation
from .geometry import as_flat_list, triangle_area

# Set up logging for this module
logger = logging.getLogger(__name__)


class ValidationResult:
    """
    Result of triangulation validation containing issues found and statistics.

    Errors mean the triangulation is wrong for its input; warnings point
    at questionable input or output quality.
    """

    def __init__(self):
        """Initialize an empty validation result."""
        self.is_valid = True
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.stats: Dict[str, Any] = {}

    def add_error(self, message: str) -> None:
        """Add a critical error that makes the triangulation invalid."""
        self.is_valid = False
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        """Add a non-critical warning."""
        self.warnings.append(message)

    def add_stat(self, key: str, value: Any) -> None:
        """Add a statistic about the triangulation."""
        self.stats[key] = value

    def __repr__(self) -> str:
        status = "VALID" if self.is_valid else "INVALID"
        return f"ValidationResult({status}, errors={len(self.errors)}, warnings={len(self.warnings)})"


def _ring_coords(data: Sequence[float], start: int, end: int, dim: int) -> List[Tuple[float, float]]:
    return [(data[k], data[k + 1]) for k in range(start, end, dim)]


def validate_triangulation(
    vertices: Sequence[float],
    hole_indices: Optional[Sequence[int]],
    dim: int,
    triangles: Sequence[int],
    tolerance: float = DEFAULT_DEVIATION_TOLERANCE,
    name: str = "polygon"
) -> ValidationResult:
    """
    Validate a triangulation against its input polygon.

    Args:
        vertices: Flat vertex array given to triangulate()
        hole_indices: Hole start indices given to triangulate()
        dim: Values per vertex
        triangles: Flat triangle index list returned by triangulate()
        tolerance: Maximum accepted relative area deviation
        name: Name for messages (e.g. a fixture or file name)

    Returns:
        ValidationResult with detailed findings
    """
    result = ValidationResult()

    data = as_flat_list(vertices)
    holes = [int(h) for h in hole_indices] if hole_indices is not None else []
    vertex_count = len(data) // dim

    result.add_stat("vertices", vertex_count)
    result.add_stat("holes", len(holes))
    result.add_stat("triangles", len(triangles) // 3)

    # Critical check: index list shape
    if len(triangles) % 3 != 0:
        result.add_error(f"{name}: triangle index count {len(triangles)} is not a multiple of 3")
        return result

    out_of_range = [idx for idx in triangles if not 0 <= idx < vertex_count]
    if out_of_range:
        result.add_error(
            f"{name}: {len(out_of_range)} triangle indices out of range 0..{vertex_count - 1} "
            f"(first: {out_of_range[0]})"
        )
        return result

    # Critical check: area deviation
    dev = deviation(data, holes, dim, triangles)
    result.add_stat("deviation", dev)
    if dev > tolerance:
        result.add_error(f"{name}: area deviation {dev:.3e} exceeds tolerance {tolerance:.1e}")

    # Quality check: degenerate triangles
    tri_list = [tuple(triangles[k:k + 3]) for k in range(0, len(triangles), 3)]
    has_area = [triangle_area(data, t[0], t[1], t[2], dim) > DEGENERATE_AREA_EPSILON for t in tri_list]
    degenerate_count = has_area.count(False)
    result.add_stat("degenerate_triangles", degenerate_count)
    if degenerate_count:
        result.add_warning(f"{name} has {degenerate_count} degenerate (zero-area) triangles")

    # Geometry checks with shapely
    outer_len = holes[0] * dim if holes else len(data)
    outer_coords = _ring_coords(data, 0, outer_len, dim)
    hole_coords = []
    for n, hole_start in enumerate(holes):
        end = holes[n + 1] * dim if n < len(holes) - 1 else len(data)
        coords = _ring_coords(data, hole_start * dim, end, dim)
        if len(coords) >= 3:
            hole_coords.append(coords)

    if len(outer_coords) < 3:
        result.add_warning(f"{name}: outer ring has fewer than 3 vertices, skipping coverage checks")
        return result

    try:
        polygon = Polygon(outer_coords, hole_coords)
        input_valid = bool(polygon.is_valid)
        if not input_valid:
            result.add_warning(f"{name}: input is not a valid simple polygon ({explain_validity(polygon)})")
        result.add_stat("input_valid", input_valid)

        solid = [
            Polygon([(data[i * dim], data[i * dim + 1]) for i in t])
            for t, keep in zip(tri_list, has_area)
            if keep
        ]
        if not solid:
            return result

        union = unary_union(solid)
        overlap_area = max(sum(p.area for p in solid) - union.area, 0.0)
        result.add_stat("overlap_area", overlap_area)

        polygon_area = polygon.area
        if input_valid and polygon_area > 0:
            coverage_error = polygon.symmetric_difference(union).area / polygon_area
            result.add_stat("coverage_error", coverage_error)
            if coverage_error > COVERAGE_TOLERANCE:
                result.add_error(
                    f"{name}: triangles do not cover the polygon exactly "
                    f"(relative coverage error {coverage_error:.3e})"
                )
            if overlap_area / polygon_area > COVERAGE_TOLERANCE:
                result.add_error(f"{name}: triangles overlap (overlap area {overlap_area:.3e})")
    except (GEOSException, ValueError) as e:
        logger.debug(f"shapely checks failed for {name}: {e}")
        result.add_warning(f"{name}: could not run shapely geometry checks: {e}")

    return result


def get_validation_report(result: ValidationResult, name: str = "polygon") -> str:
    """
    Generate a human-readable validation report.

    Args:
        result: ValidationResult from validate_triangulation()
        name: Name for the report header

    Returns:
        Formatted report string
    """
    stats = result.stats
    lines = []
    lines.append(f"=== Triangulation Report: {name} ===")
    lines.append("")

    lines.append("Basic Statistics:")
    lines.append(f"  Vertices: {stats.get('vertices', 'N/A')}")
    lines.append(f"  Holes: {stats.get('holes', 'N/A')}")
    lines.append(f"  Triangles: {stats.get('triangles', 'N/A')}")
    lines.append("")

    lines.append("Validation Status:")
    if result.is_valid:
        lines.append("  ✅ VALID - Triangulation passed all critical checks")
    else:
        lines.append("  ❌ INVALID - Triangulation has critical issues")

    if 'deviation' in stats:
        lines.append(f"  Area Deviation: {stats['deviation']:.3e}")
    if 'input_valid' in stats:
        lines.append(f"  Simple Input: {'✅ Yes' if stats['input_valid'] else '⚠️ No'}")
    if 'coverage_error' in stats:
        lines.append(f"  Coverage Error: {stats['coverage_error']:.3e}")
    if 'overlap_area' in stats:
        lines.append(f"  Overlap Area: {stats['overlap_area']:.3e}")
    if stats.get('degenerate_triangles'):
        lines.append(f"  Degenerate Triangles: {stats['degenerate_triangles']}")
    lines.append("")

    if result.errors:
        lines.append("Errors:")
        for error in result.errors:
            lines.append(f"  ❌ {error}")
        lines.append("")

    if result.warnings:
        lines.append("Warnings:")
        for warning in result.warnings:
            lines.append(f"  ⚠️ {warning}")
        lines.append("")

    return "\n".join(lines)
