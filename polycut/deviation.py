"""
Area-based correctness check and input flattening.

deviation() compares the area of the polygon (outer ring minus holes) with
the total area of the triangles produced for it. For a correct
triangulation of a simple polygon the two match up to floating point
noise, so a large value is a reliable "something went wrong" signal. It is
a verification oracle and takes no part in the triangulation itself.

flatten() converts the nested ring layout most geometry sources use
(GeoJSON-style [[[x, y], ...], ...]) into the flat arrays the engine wants.
"""

import math
from typing import Any, List, NamedTuple, Optional, Sequence

import numpy as np

from .geometry import as_flat_list, signed_area, triangle_area


class FlatPolygon(NamedTuple):
    """Flat polygon arrays ready for triangulate()."""
    vertices: List[float]
    holes: List[int]
    dim: int


def deviation(
    vertices: Sequence[float],
    hole_indices: Optional[Sequence[int]],
    dim: int,
    triangles: Sequence[int]
) -> float:
    """
    Relative difference between the polygon area and its triangulation area.

    Args:
        vertices: Flat vertex array used for the triangulation
        hole_indices: Vertex index where each hole starts (or None)
        dim: Values per vertex
        triangles: Flat triangle index list returned by triangulate()

    Returns:
        |triangles_area - polygon_area| / polygon_area, 0.0 when both areas
        are zero, and math.inf when only the polygon area is zero
    """
    data = as_flat_list(vertices)
    holes = [int(h) for h in hole_indices] if hole_indices is not None else []
    outer_len = holes[0] * dim if holes else len(data)

    polygon_area = abs(signed_area(data, 0, outer_len, dim))
    for n, hole_start in enumerate(holes):
        start = hole_start * dim
        end = holes[n + 1] * dim if n < len(holes) - 1 else len(data)
        polygon_area -= abs(signed_area(data, start, end, dim))

    triangles_area = 0.0
    for k in range(0, len(triangles) - 2, 3):
        triangles_area += triangle_area(data, triangles[k], triangles[k + 1], triangles[k + 2], dim)

    if polygon_area == 0 and triangles_area == 0:
        return 0.0
    if polygon_area == 0:
        return math.inf
    return abs((triangles_area - polygon_area) / polygon_area)


def flatten(rings: Sequence[Any]) -> FlatPolygon:
    """
    Flatten nested polygon rings into triangulate() input.

    The first ring is the outer boundary, every following ring a hole.
    All points must have the same number of coordinates (at least 2);
    that number becomes dim.

    Args:
        rings: Sequence of rings, each a sequence of points

    Returns:
        FlatPolygon(vertices, holes, dim)

    Raises:
        ValueError: If the rings are ragged or points have fewer than 2 values

    Example:
        >>> flatten([[[0, 0], [4, 0], [4, 4]], [[1, 1], [2, 1], [1, 2]]])
        FlatPolygon(vertices=[0.0, 0.0, 4.0, 0.0, 4.0, 4.0, 1.0, 1.0, 2.0, 1.0, 1.0, 2.0], holes=[3], dim=2)
    """
    arrays = []
    dim = None
    for n, ring in enumerate(rings):
        try:
            arr = np.asarray(ring, dtype=np.float64)
        except ValueError as e:
            raise ValueError(f"Ring {n} has ragged point data: {e}") from e

        if arr.size == 0:
            arr = arr.reshape(0, dim or 2)
        if arr.ndim != 2:
            raise ValueError(f"Ring {n} must be a list of points, got array of shape {arr.shape}")
        if arr.shape[1] < 2:
            raise ValueError(f"Ring {n} points need at least 2 coordinates, got {arr.shape[1]}")
        if dim is None:
            dim = arr.shape[1]
        elif arr.shape[1] != dim:
            raise ValueError(f"Ring {n} points have {arr.shape[1]} coordinates, expected {dim}")
        arrays.append(arr)

    if not arrays:
        return FlatPolygon(vertices=[], holes=[], dim=2)

    holes = []
    count = 0
    for n, arr in enumerate(arrays):
        if n > 0:
            holes.append(count)
        count += len(arr)

    vertices = np.concatenate(arrays).ravel().tolist()
    return FlatPolygon(vertices=vertices, holes=holes, dim=int(dim))
