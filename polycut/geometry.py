"""
Plain-coordinate geometry helpers.

These work directly on floats or on the caller's flat vertex array, so
they are shared by the ring builder, the engine, the deviation check and
the validator. as_flat_list() brings every accepted input layout into
that flat array.
All areas here are DOUBLED areas (no division by 2) - every caller compares
them against each other, so the factor cancels out.
"""

from typing import Any, List, Sequence

import numpy as np


def as_flat_list(values: Any) -> List[float]:
    """
    Turn vertex input into a flat list of floats.

    Accepts flat sequences, sequences of (x, y, ...) points and numpy
    arrays of any shape; everything goes through numpy so all of them end
    up in the same layout.

    Raises:
        ValueError: If the points have different lengths
    """
    return np.asarray(values, dtype=np.float64).ravel().tolist()


def signed_area(data: Sequence[float], start: int, end: int, dim: int) -> float:
    """
    Doubled signed area of the ring stored in data[start:end].

    Uses the shoelace formula over (x, y) pairs, stepping by dim. The sign
    tells the winding: positive for counter-clockwise in a y-up frame
    (clockwise on a y-down screen), negative for the opposite.

    Args:
        data: Flat vertex array
        start: Flat offset of the first vertex
        end: Flat offset one past the last vertex
        dim: Values per vertex

    Returns:
        Doubled signed area; 0.0 for an empty range
    """
    total = 0.0
    j = end - dim
    for i in range(start, end, dim):
        total += (data[j] - data[i]) * (data[i + 1] + data[j + 1])
        j = i
    return total


def point_in_triangle(
    ax: float, ay: float,
    bx: float, by: float,
    cx: float, cy: float,
    px: float, py: float
) -> bool:
    """Check if point p lies within the convex triangle abc (boundary included)."""
    return (
        (cx - px) * (ay - py) - (ax - px) * (cy - py) >= 0
        and (ax - px) * (by - py) - (bx - px) * (ay - py) >= 0
        and (bx - px) * (cy - py) - (cx - px) * (by - py) >= 0
    )


def triangle_area(data: Sequence[float], a: int, b: int, c: int, dim: int) -> float:
    """Unsigned doubled area of the triangle formed by vertex indices a, b, c."""
    a *= dim
    b *= dim
    c *= dim
    return abs(
        (data[a] - data[c]) * (data[b + 1] - data[a + 1])
        - (data[a] - data[b]) * (data[c + 1] - data[a + 1])
    )
