"""
Z-order (Morton) index over a ring.

For large polygons most of the ear-test time goes into scanning vertices
that are nowhere near the candidate ear. Each node gets a Morton code: its
coordinates normalised to the polygon bounding box, quantised to 15 bits
per axis, and bit-interleaved. Sorting the ring by that code gives a second
traversal order (prev_z/next_z) in which points close together in space
are mostly close together in the chain.

Any point inside a triangle's bounding box has a code between the codes of
the box corners, so the ear test only has to walk the chain within that
range. Extra candidates in the range are still checked geometrically.
"""

import math
from typing import Sequence, Tuple

from .constants import Z_ORDER_SCALE
from .ring import NIL, NodeArena


def _quantize(value: float, origin: float, inv_size: float) -> int:
    """
    Map a coordinate onto the 0..Z_ORDER_SCALE grid.

    Clamping keeps the mapping monotonic for points outside the outer
    bounding box (holes may stick out), and NaN maps to 0 instead of
    raising.
    """
    q = Z_ORDER_SCALE * (value - origin) * inv_size
    if not q > 0:
        return 0
    if q >= Z_ORDER_SCALE:
        return Z_ORDER_SCALE
    return int(q)


def _spread_bits(v: int) -> int:
    """Spread the low 16 bits of v into the even bit positions."""
    v = (v | (v << 8)) & 0x00FF00FF
    v = (v | (v << 4)) & 0x0F0F0F0F
    v = (v | (v << 2)) & 0x33333333
    v = (v | (v << 1)) & 0x55555555
    return v


def z_order(x: float, y: float, min_x: float, min_y: float, inv_size: float) -> int:
    """
    Morton code of a point.

    Args:
        x, y: Point coordinates
        min_x, min_y: Bounding box origin
        inv_size: 1 / max(width, height) of the bounding box

    Returns:
        Interleaved code with x bits in even and y bits in odd positions
    """
    ix = _spread_bits(_quantize(x, min_x, inv_size))
    iy = _spread_bits(_quantize(y, min_y, inv_size))
    return ix | (iy << 1)


def compute_bounds(data: Sequence[float], outer_len: int, dim: int) -> Tuple[float, float, float]:
    """
    Bounding box of the outer ring, as the z-order transform needs it.

    Args:
        data: Flat vertex array
        outer_len: Flat length of the outer ring
        dim: Values per vertex

    Returns:
        (min_x, min_y, inv_size) where inv_size is 1 / max(width, height),
        or 0.0 when the box has no extent (the index is then skipped)
    """
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    for k in range(0, outer_len, dim):
        x = data[k]
        y = data[k + 1]
        if x < min_x:
            min_x = x
        if x > max_x:
            max_x = x
        if y < min_y:
            min_y = y
        if y > max_y:
            max_y = y

    size = max(max_x - min_x, max_y - min_y)
    inv_size = 1.0 / size if size > 0 else 0.0
    return min_x, min_y, inv_size


def index_curve(arena: NodeArena, start: int, min_x: float, min_y: float, inv_size: float) -> None:
    """
    Interlink the nodes of a ring in z-order.

    Codes are computed only for nodes that don't have one yet. The z chain
    is rebuilt from scratch as a copy of the ring order, opened into a
    NIL-terminated list and merge-sorted by code.
    """
    z = arena.z
    x = arena.x
    y = arena.y
    prev_z = arena.prev_z
    next_z = arena.next_z

    p = start
    while True:
        if z[p] is None:
            z[p] = z_order(x[p], y[p], min_x, min_y, inv_size)
        prev_z[p] = arena.prev[p]
        next_z[p] = arena.next[p]
        p = arena.next[p]
        if p == start:
            break

    next_z[prev_z[p]] = NIL
    prev_z[p] = NIL

    sort_linked(arena, p)


def sort_linked(arena: NodeArena, head: int) -> int:
    """
    Sort a NIL-terminated z chain by Morton code.

    Simon Tatham's bottom-up linked-list merge sort: runs of in_size nodes
    are merged pairwise, in_size doubles every pass, and the sort ends when
    a pass does a single merge. Stable for equal codes.

    Returns:
        Handle of the new head of the chain
    """
    z = arena.z
    prev_z = arena.prev_z
    next_z = arena.next_z

    in_size = 1
    while True:
        p = head
        head = NIL
        tail = NIL
        num_merges = 0

        while p != NIL:
            num_merges += 1
            q = p
            p_size = 0
            for _ in range(in_size):
                p_size += 1
                q = next_z[q]
                if q == NIL:
                    break
            q_size = in_size

            while p_size > 0 or (q_size > 0 and q != NIL):
                if p_size != 0 and (q_size == 0 or q == NIL or z[p] <= z[q]):
                    e = p
                    p = next_z[p]
                    p_size -= 1
                else:
                    e = q
                    q = next_z[q]
                    q_size -= 1

                if tail != NIL:
                    next_z[tail] = e
                else:
                    head = e

                prev_z[e] = tail
                tail = e

            p = q

        next_z[tail] = NIL
        in_size *= 2

        if num_merges <= 1:
            return head
