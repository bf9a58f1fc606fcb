"""
Polygon rings stored in a node arena.

A ring is a circular doubly-linked list of vertex nodes. Instead of one
Python object per node we keep every node field in parallel lists inside a
NodeArena and address nodes by integer handle. Links are handles too, with
NIL meaning "no node". This keeps O(1) splice/remove, avoids aliasing
surprises, and makes the whole node graph of one triangulation call a
single object that is thrown away when the call returns.

Handles are never reused: removing a node only unlinks it from its
neighbours. The removed node keeps its own prev/next values, and the
clipping code relies on that to keep walking from a node it just cut.

This module also holds the ring builder, the point filter, the
node-level predicates (area, crossing, "locally inside"...) and
split_polygon, the primitive used both for hole bridges and for splitting
a ring along a diagonal.
"""

from typing import Iterator, List, Optional, Sequence
import logging

from .geometry import signed_area

logger = logging.getLogger(__name__)

# Handle value meaning "no node"
NIL = -1


class NodeArena:
    """
    Dense store of polygon vertex nodes.

    Each attribute is a list indexed by node handle:
        i: original vertex index in the caller's array (vertex units)
        x, y: vertex coordinates
        prev, next: ring neighbours
        z: Morton code, None until the z-order pass computes it
        prev_z, next_z: neighbours in the z-sorted chain
        steiner: True for single-vertex hole rings
    """

    __slots__ = ('i', 'x', 'y', 'prev', 'next', 'z', 'prev_z', 'next_z', 'steiner')

    def __init__(self):
        self.i: List[int] = []
        self.x: List[float] = []
        self.y: List[float] = []
        self.prev: List[int] = []
        self.next: List[int] = []
        self.z: List[Optional[int]] = []
        self.prev_z: List[int] = []
        self.next_z: List[int] = []
        self.steiner: List[bool] = []

    def __len__(self) -> int:
        return len(self.i)

    def new_node(self, i: int, x: float, y: float) -> int:
        """Allocate an unlinked node and return its handle."""
        handle = len(self.i)
        self.i.append(i)
        self.x.append(x)
        self.y.append(y)
        self.prev.append(NIL)
        self.next.append(NIL)
        self.z.append(None)
        self.prev_z.append(NIL)
        self.next_z.append(NIL)
        self.steiner.append(False)
        return handle

    def insert_node(self, i: int, x: float, y: float, last: int) -> int:
        """
        Create a node and link it right after last.

        With last == NIL the node becomes a ring of its own.
        """
        p = self.new_node(i, x, y)
        if last == NIL:
            self.prev[p] = p
            self.next[p] = p
        else:
            after = self.next[last]
            self.next[p] = after
            self.prev[p] = last
            self.prev[after] = p
            self.next[last] = p
        return p

    def remove_node(self, p: int) -> None:
        """Unlink p from its ring and from the z-order chain."""
        prev_node = self.prev[p]
        next_node = self.next[p]
        self.prev[next_node] = prev_node
        self.next[prev_node] = next_node

        prev_z = self.prev_z[p]
        next_z = self.next_z[p]
        if prev_z != NIL:
            self.next_z[prev_z] = next_z
        if next_z != NIL:
            self.prev_z[next_z] = prev_z

    def equals(self, p: int, q: int) -> bool:
        """Check if two nodes sit on exactly the same coordinates."""
        return self.x[p] == self.x[q] and self.y[p] == self.y[q]

    def area(self, p: int, q: int, r: int) -> float:
        """
        Doubled signed area of triangle pqr.

        Negative means the turn p -> q -> r is convex for rings in the
        winding the builder produces; zero means collinear.
        """
        x = self.x
        y = self.y
        return (y[q] - y[p]) * (x[r] - x[q]) - (x[q] - x[p]) * (y[r] - y[q])

    def iter_ring(self, start: int) -> Iterator[int]:
        """Yield every node handle of the ring containing start, once."""
        p = start
        while True:
            yield p
            p = self.next[p]
            if p == start:
                break

    def ring_size(self, start: int) -> int:
        """Number of nodes in the ring containing start."""
        return sum(1 for _ in self.iter_ring(start))

    def ring_indices(self, start: int) -> List[int]:
        """Original vertex indices of a ring, in ring order."""
        return [self.i[p] for p in self.iter_ring(start)]


def build_ring(
    arena: NodeArena,
    data: Sequence[float],
    start: int,
    end: int,
    dim: int,
    clockwise: bool
) -> int:
    """
    Create a circular ring from the flat range data[start:end].

    Vertices are inserted forward when the range already has the requested
    winding and in reverse otherwise, so every ring leaves here with the
    winding the caller asked for. A closing vertex equal to the first one
    is dropped.

    Args:
        arena: Arena to allocate nodes in
        data: Flat vertex array
        start: Flat offset of the first vertex
        end: Flat offset one past the last vertex
        dim: Values per vertex
        clockwise: Requested winding (True for outer rings)

    Returns:
        Handle of the last inserted node, or NIL for an empty range
    """
    last = NIL
    if clockwise == (signed_area(data, start, end, dim) > 0):
        for k in range(start, end, dim):
            last = arena.insert_node(k // dim, data[k], data[k + 1], last)
    else:
        for k in range(end - dim, start - 1, -dim):
            last = arena.insert_node(k // dim, data[k], data[k + 1], last)

    if last != NIL and arena.equals(last, arena.next[last]):
        arena.remove_node(last)
        last = arena.next[last]

    return last


def filter_points(arena: NodeArena, start: int, end: int = NIL) -> int:
    """
    Eliminate duplicate and collinear points from a ring.

    Steiner nodes are never removed. After each removal the walk steps back
    to the predecessor, since removing a node can make its neighbour
    collinear in turn. The walk stops as soon as the ring is down to a
    single node.

    Args:
        arena: Node arena
        start: Node to start walking from
        end: Node to stop at (defaults to start)

    Returns:
        Handle of a node still in the ring, to be used as the new anchor
    """
    if start == NIL:
        return start
    if end == NIL:
        end = start

    nxt = arena.next
    prv = arena.prev
    steiner = arena.steiner

    p = start
    while True:
        again = False
        if not steiner[p] and (arena.equals(p, nxt[p]) or arena.area(prv[p], p, nxt[p]) == 0):
            arena.remove_node(p)
            p = end = prv[p]
            if p == nxt[p]:
                break
            again = True
        else:
            p = nxt[p]

        if not again and p == end:
            break

    return end


def get_leftmost(arena: NodeArena, start: int) -> int:
    """Find the leftmost node of a ring (first one found on ties)."""
    x = arena.x
    leftmost = start
    for p in arena.iter_ring(start):
        if x[p] < x[leftmost]:
            leftmost = p
    return leftmost


def intersects(arena: NodeArena, p1: int, q1: int, p2: int, q2: int) -> bool:
    """Check if segment p1-q1 crosses segment p2-q2."""
    if (arena.equals(p1, q1) and arena.equals(p2, q2)) or (arena.equals(p1, q2) and arena.equals(p2, q1)):
        return True
    area = arena.area
    return (
        (area(p1, q1, p2) > 0) != (area(p1, q1, q2) > 0)
        and (area(p2, q2, p1) > 0) != (area(p2, q2, q1) > 0)
    )


def intersects_polygon(arena: NodeArena, a: int, b: int) -> bool:
    """Check if the diagonal a-b crosses any edge of the ring."""
    i = arena.i
    nxt = arena.next
    ia = i[a]
    ib = i[b]
    for p in arena.iter_ring(a):
        q = nxt[p]
        if i[p] != ia and i[q] != ia and i[p] != ib and i[q] != ib and intersects(arena, p, q, a, b):
            return True
    return False


def locally_inside(arena: NodeArena, a: int, b: int) -> bool:
    """Check if the diagonal a-b leaves a towards the polygon interior."""
    area = arena.area
    prev_a = arena.prev[a]
    next_a = arena.next[a]
    if area(prev_a, a, next_a) < 0:
        return area(a, b, next_a) >= 0 and area(a, prev_a, b) >= 0
    return area(a, b, prev_a) < 0 or area(a, next_a, b) < 0


def middle_inside(arena: NodeArena, a: int, b: int) -> bool:
    """Check if the midpoint of the diagonal a-b is inside the ring (ray-crossing parity)."""
    x = arena.x
    y = arena.y
    nxt = arena.next
    px = (x[a] + x[b]) / 2
    py = (y[a] + y[b]) / 2
    inside = False
    for p in arena.iter_ring(a):
        q = nxt[p]
        if (
            (y[p] > py) != (y[q] > py)
            and y[q] != y[p]
            and px < (x[q] - x[p]) * (py - y[p]) / (y[q] - y[p]) + x[p]
        ):
            inside = not inside
    return inside


def is_valid_diagonal(arena: NodeArena, a: int, b: int) -> bool:
    """Check if a diagonal between two ring nodes lies in the polygon interior."""
    i = arena.i
    return (
        i[arena.next[a]] != i[b]
        and i[arena.prev[a]] != i[b]
        and not intersects_polygon(arena, a, b)
        and locally_inside(arena, a, b)
        and locally_inside(arena, b, a)
        and middle_inside(arena, a, b)
    )


def split_polygon(arena: NodeArena, a: int, b: int) -> int:
    """
    Link two nodes with a bridge.

    Both endpoints are duplicated so the edge a -> b can be traversed in
    both directions. If a and b are in the same ring this splits it into
    two rings: a -> b -> ... and b' -> a' -> .... If they are in different
    rings (outer ring and a hole) it merges them into one.

    Returns:
        Handle of the copy of b. When splitting, it belongs to the new
        ring that does not contain a.
    """
    a2 = arena.new_node(arena.i[a], arena.x[a], arena.y[a])
    b2 = arena.new_node(arena.i[b], arena.x[b], arena.y[b])
    nxt = arena.next
    prv = arena.prev
    an = nxt[a]
    bp = prv[b]

    nxt[a] = b
    prv[b] = a

    nxt[a2] = an
    prv[an] = a2

    nxt[b2] = a2
    prv[a2] = b2

    nxt[bp] = b2
    prv[b2] = bp

    return b2
