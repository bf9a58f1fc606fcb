"""
Test helper utilities for creating test polygons.

This module provides polygon generators and small conversion helpers used
across multiple test files. Generated rings are lists of (x, y) tuples
without a closing duplicate, wound counter-clockwise (y-up) unless asked
otherwise.
"""

import json
import math
import os
import tempfile
from typing import Any, FrozenSet, List, Optional, Sequence, Set, Tuple

Point = Tuple[float, float]
Ring = List[Point]


# Literal polygons used by several test modules
DEGENERATE_TRIANGLE = [0.0, 0.0, 1.0, 0.0, 0.0, 1.0, 0.0, 0.0]

PENTAGON = [
    0.0, 0.0,
    1.0, 0.0,
    1.309, 0.951,
    0.5, 1.539,
    -0.309, 0.951,
    0.0, 0.0,
]

PENTAGON_WITH_HOLE = PENTAGON + [
    0.25, 0.25,
    0.30, 0.25,
    0.30, 0.30,
    0.25, 0.30,
    0.25, 0.25,
]

# Spiral-shaped concave polygon with an extra value per vertex (dim=3)
NESTED_C_3D = [
    0.0, 0.0, 1.0,
    11.0, 0.0, 2.0,
    11.0, 9.0, 3.0,
    6.0, 9.0, 4.0,
    6.0, 3.0, 5.0,
    3.0, 3.0, 6.0,
    3.0, 9.0, 7.0,
    2.0, 9.0, 8.0,
    2.0, 2.0, 9.0,
    7.0, 2.0, 10.0,
    7.0, 8.0, 11.0,
    10.0, 8.0, 12.0,
    10.0, 1.0, 13.0,
    1.0, 1.0, 14.0,
    1.0, 10.0, 15.0,
    4.0, 10.0, 16.0,
    4.0, 4.0, 17.0,
    5.0, 4.0, 18.0,
    5.0, 11.0, 19.0,
    0.0, 11.0, 20.0,
    0.0, 0.0, 21.0,
]


def regular_polygon(
    n: int,
    radius: float = 1.0,
    cx: float = 0.0,
    cy: float = 0.0,
    clockwise: bool = False
) -> Ring:
    """
    Create a convex regular polygon with n vertices.

    Vertices lie on a circle, so no three of them are collinear.
    """
    ring = []
    for k in range(n):
        angle = 2.0 * math.pi * k / n
        ring.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    if clockwise:
        ring.reverse()
    return ring


def star(
    spikes: int,
    inner: float = 50.0,
    outer: float = 100.0,
    cx: float = 0.0,
    cy: float = 0.0
) -> Ring:
    """Create a concave star with 2 * spikes vertices alternating between two radii."""
    ring = []
    for k in range(2 * spikes):
        angle = math.pi * k / spikes
        r = outer if k % 2 == 0 else inner
        ring.append((cx + r * math.cos(angle), cy + r * math.sin(angle)))
    return ring


def square(x: float, y: float, size: float, clockwise: bool = False) -> Ring:
    """Create an axis-aligned square with its lower-left corner at (x, y)."""
    ring = [(x, y), (x + size, y), (x + size, y + size), (x, y + size)]
    if clockwise:
        ring.reverse()
    return ring


def sawtooth(teeth: int, height: float = 10.0, depth: float = 5.0) -> Ring:
    """
    Create a polygon with a flat bottom and a zigzag top edge.

    The zigzag alternates between height and height - depth, so the
    polygon has many reflex vertices but no collinear runs.
    """
    ring = [(0.0, 0.0), (float(teeth), 0.0)]
    for k in range(teeth, -1, -1):
        ring.append((float(k), height if k % 2 == 0 else height - depth))
    return ring


def ring_of_holes(count: int, radius: float = 25.0, size: float = 6.0, phase: float = 0.0) -> List[Ring]:
    """
    Create square holes spread evenly on a circle around the origin.

    With phase 0 mirrored holes line up (equal heights on both sides); a
    small phase such as 0.1 gives every hole its own height.
    """
    holes = []
    for k in range(count):
        angle = phase + 2.0 * math.pi * k / count
        hx = radius * math.cos(angle) - size / 2
        hy = radius * math.sin(angle) - size / 2
        holes.append(square(hx, hy, size))
    return holes


def to_flat(rings: Sequence[Ring]) -> Tuple[List[float], List[int]]:
    """Flatten rings into (vertices, hole_indices) with dim=2."""
    vertices: List[float] = []
    holes: List[int] = []
    count = 0
    for n, ring in enumerate(rings):
        if n > 0:
            holes.append(count)
        for x, y in ring:
            vertices.extend((x, y))
            count += 1
    return vertices, holes


def reverse_flat(vertices: Sequence[float], dim: int = 2) -> List[float]:
    """Reverse the vertex order of a flat single-ring array."""
    points = [list(vertices[k:k + dim]) for k in range(0, len(vertices), dim)]
    points.reverse()
    return [value for point in points for value in point]


def triangle_set(triangles: Sequence[int]) -> Set[FrozenSet[int]]:
    """Triangles as a set of unordered vertex triples."""
    return {frozenset(triangles[k:k + 3]) for k in range(0, len(triangles), 3)}


def write_json_file(data: Any, filepath: Optional[str] = None) -> str:
    """
    Write data to a JSON file.

    Args:
        data: Data to serialize
        filepath: Optional path (defaults to a temp file)

    Returns:
        Path to the written file
    """
    if filepath is None:
        fd, filepath = tempfile.mkstemp(suffix='.json')
        os.close(fd)
    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(data, f)
    return filepath


def cleanup_test_file(filepath: str) -> None:
    """Remove a test file if it exists."""
    if filepath and os.path.exists(filepath):
        os.remove(filepath)
