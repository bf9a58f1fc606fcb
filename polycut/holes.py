"""
Hole elimination: splice every hole ring into the outer ring.

The ear-clipping engine only understands a single ring. Each hole gets
connected to the outer ring by a bridge - a pair of coincident edges going
out to the hole and back - which turns "outer ring + holes" into one
(weakly simple) ring that can be clipped like any other polygon.

Holes are processed from left to right by their leftmost vertex, so a hole
bridged earlier becomes part of the outer boundary that later holes can
bridge to.
"""

import logging
import math
from typing import List, Sequence

from .geometry import point_in_triangle
from .ring import (
    NIL,
    NodeArena,
    build_ring,
    filter_points,
    get_leftmost,
    locally_inside,
    split_polygon,
)

logger = logging.getLogger(__name__)


def eliminate_holes(
    arena: NodeArena,
    data: Sequence[float],
    hole_indices: Sequence[int],
    outer: int,
    dim: int
) -> int:
    """
    Link every hole into the outer ring, producing a single ring without holes.

    Each hole spans from its start index to the next hole's start (or the
    end of the data). Hole rings are built with the winding opposite to the
    outer ring. A hole made of one vertex is kept as a Steiner point so the
    point filter never removes it.

    Holes are sorted by the x of their leftmost vertex. The sort is stable,
    so holes with the same leftmost x keep their declaration order.

    Args:
        arena: Node arena holding the outer ring
        data: Flat vertex array
        hole_indices: Vertex index where each hole starts
        outer: Handle of a node of the outer ring
        dim: Values per vertex

    Returns:
        Handle of a node of the merged ring
    """
    queue: List[int] = []
    count = len(hole_indices)
    for n in range(count):
        start = hole_indices[n] * dim
        end = hole_indices[n + 1] * dim if n < count - 1 else len(data)
        ring = build_ring(arena, data, start, end, dim, False)
        if ring == NIL:
            logger.debug(f"Hole {n} is empty, skipping")
            continue
        if ring == arena.next[ring]:
            arena.steiner[ring] = True
        queue.append(get_leftmost(arena, ring))

    x = arena.x
    queue.sort(key=lambda node: x[node])

    for hole in queue:
        eliminate_hole(arena, hole, outer)
        outer = filter_points(arena, outer, arena.next[outer])

    return outer


def eliminate_hole(arena: NodeArena, hole: int, outer: int) -> None:
    """Find a bridge between a hole and the outer ring and link it."""
    bridge = find_hole_bridge(arena, hole, outer)
    if bridge == NIL:
        logger.debug(f"No bridge found for hole vertex {arena.i[hole]}, hole left unmerged")
        return

    logger.debug(f"Bridging hole vertex {arena.i[hole]} to outer vertex {arena.i[bridge]}")
    b = split_polygon(arena, bridge, hole)
    filter_points(arena, b, arena.next[b])


def find_hole_bridge(arena: NodeArena, hole: int, outer: int) -> int:
    """
    David Eberly's algorithm for finding a bridge between a hole and the outer ring.

    A ray is cast from the hole's leftmost point to the left. The nearest
    outer edge it hits gives a candidate: that edge's endpoint with the
    lesser x. If the hole touches the outer ring exactly we connect right
    there. Otherwise other outer vertices may sit inside the triangle
    (hole point, hit point, candidate) and block the straight connection;
    among those we take the one with the smallest angle to the ray, which
    is always visible from the hole point.

    Args:
        arena: Node arena
        hole: Leftmost node of the hole ring
        outer: Any node of the outer ring

    Returns:
        Outer node to connect the hole to, or NIL if the ray hits nothing
    """
    x = arena.x
    y = arena.y
    nxt = arena.next

    hx = x[hole]
    hy = y[hole]
    qx = -math.inf
    m = NIL

    # find a segment intersected by a ray from the hole's leftmost point to the left;
    # segment's endpoint with lesser x will be potential connection point
    p = outer
    while True:
        q = nxt[p]
        if hy <= y[p] and hy >= y[q] and y[q] != y[p]:
            ix = x[p] + (hy - y[p]) * (x[q] - x[p]) / (y[q] - y[p])
            if ix <= hx and ix > qx:
                qx = ix
                if ix == hx:
                    if hy == y[p]:
                        return p
                    if hy == y[q]:
                        return q
                m = p if x[p] < x[q] else q
        p = q
        if p == outer:
            break

    if m == NIL:
        return NIL

    if hx == qx:
        # hole touches outer segment; pick lower endpoint
        return arena.prev[m]

    # look for points inside the triangle of hole point, segment intersection and endpoint;
    # if there are no points found, we have a valid connection;
    # otherwise choose the point of the minimum angle with the ray as connection point
    stop = m
    mx = x[m]
    my = y[m]
    tan_min = math.inf

    if hy < my:
        ax, cx = hx, qx
    else:
        ax, cx = qx, hx

    p = nxt[m]
    while p != stop:
        px = x[p]
        py = y[p]
        if hx >= px >= mx and hx != px and point_in_triangle(ax, hy, mx, my, cx, hy, px, py):
            tan = abs(hy - py) / (hx - px)
            if (tan < tan_min or (tan == tan_min and px > x[m])) and locally_inside(arena, p, hole):
                m = p
                tan_min = tan
        p = nxt[p]

    return m
