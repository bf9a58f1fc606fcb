"""
Ear-clipping triangulation engine.

This is where polygons become triangles! The outer ring (with every hole
already spliced in) is walked node by node; whenever a node forms an "ear"
- a convex corner whose triangle contains no other vertex - that triangle
is emitted and the node is cut out of the ring. Repeat until the ring is
down to two nodes.

Real-world data is messy, so when a full walk around the ring finds no ear
the engine escalates through three fallback passes:

    pass 0 -> 1: filter out points that became duplicate/collinear, retry
    pass 1 -> 2: cure small local self-intersections, retry
    pass 2:      split the ring along a valid diagonal and start over on
                 each half (pass 0)

Splits go onto an explicit work-list instead of recursing, so deep split
chains never hit Python's recursion limit. Halves are processed depth-first
(first half completely, then the second), which is the same order a
recursive implementation would produce triangles in.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import logging

from .config import TriangulationConfig
from .constants import DEFAULT_DIM, MIN_DIM
from .exceptions import InvalidDimensionError
from .geometry import as_flat_list, point_in_triangle
from .holes import eliminate_holes
from .ring import (
    NIL,
    NodeArena,
    build_ring,
    filter_points,
    intersects,
    is_valid_diagonal,
    locally_inside,
    split_polygon,
)
from .zorder import compute_bounds, index_curve, z_order

# Set up logging for this module
# Note: Level will be configured by the application (see cli.py)
logger = logging.getLogger(__name__)


def _new_stats() -> Dict[str, int]:
    return {
        'input_vertices': 0,
        'holes': 0,
        'nodes_allocated': 0,
        'ears_clipped': 0,
        'filter_passes': 0,
        'cure_passes': 0,
        'cured_triangles': 0,
        'splits': 0,
        'dropped_rings': 0,
        'z_order': 0,
    }


@dataclass
class TriangulationResult:
    """
    Triangles produced by one triangulation call plus how they were found.

    Attributes:
        triangles: Flat list of vertex indices, three per triangle
        stats: Counters describing the run (ears clipped, fallback passes,
            splits, dropped rings, whether the z-order index was used...)
    """

    triangles: List[int]
    stats: Dict[str, int] = field(default_factory=_new_stats)

    @property
    def triangle_count(self) -> int:
        return len(self.triangles) // 3

    @property
    def is_partial(self) -> bool:
        """True when a ring had to be given up and part of the polygon is not covered."""
        return self.stats['dropped_rings'] > 0


class EarClipper:
    """
    Ear-clipping engine for one triangulation call.

    Owns the node arena, the output triangle list and the z-order
    parameters. Create one per call; nothing here is shared between calls.
    """

    def __init__(
        self,
        arena: NodeArena,
        min_x: float = 0.0,
        min_y: float = 0.0,
        inv_size: float = 0.0
    ):
        self.arena = arena
        self.min_x = min_x
        self.min_y = min_y
        self.inv_size = inv_size
        self.triangles: List[int] = []
        self.stats = _new_stats()
        self._pending: List[int] = []

    def run(self, start: int) -> List[int]:
        """Triangulate the ring containing start, plus any rings split off from it."""
        self._pending.append(start)
        while self._pending:
            self.clip_ring(self._pending.pop())
        return self.triangles

    def _emit(self, a: int, b: int, c: int) -> None:
        i = self.arena.i
        self.triangles.extend((i[a], i[b], i[c]))

    def clip_ring(self, ear: int) -> None:
        """
        Main ear slicing loop for a single ring.

        Escalates through the fallback passes in place. A split in the
        last pass pushes both halves onto the work-list and ends this ring.
        """
        if ear == NIL:
            return

        arena = self.arena
        prv = arena.prev
        nxt = arena.next
        hashed = self.inv_size != 0
        stage = 0

        while True:
            # interlink polygon nodes in z-order
            if stage == 0 and hashed:
                index_curve(arena, ear, self.min_x, self.min_y, self.inv_size)

            stop = ear
            stuck = False

            # iterate through ears, slicing them one by one
            while prv[ear] != nxt[ear]:
                prev_node = prv[ear]
                next_node = nxt[ear]

                if self.is_ear_hashed(ear) if hashed else self.is_ear(ear):
                    # cut off the triangle
                    self._emit(prev_node, ear, next_node)
                    arena.remove_node(ear)
                    self.stats['ears_clipped'] += 1

                    # skipping the next vertex leads to less sliver triangles
                    ear = nxt[next_node]
                    stop = ear
                    continue

                ear = next_node

                # looped through the whole remaining polygon without finding an ear
                if ear == stop:
                    stuck = True
                    break

            if not stuck:
                return

            if stage == 0:
                logger.debug("No ear found, filtering points and retrying")
                self.stats['filter_passes'] += 1
                ear = filter_points(arena, ear)
                stage = 1
            elif stage == 1:
                logger.debug("No ear found, curing local self-intersections")
                self.stats['cure_passes'] += 1
                ear = self.cure_local_intersections(ear)
                stage = 2
            else:
                self.split_earcut(ear)
                return

    def is_ear(self, ear: int) -> bool:
        """Check whether a ring node forms a valid ear with its neighbours."""
        arena = self.arena
        x = arena.x
        y = arena.y
        prv = arena.prev
        nxt = arena.next

        a = prv[ear]
        c = nxt[ear]
        if arena.area(a, ear, c) >= 0:
            # reflex, can't be an ear
            return False

        ax, ay = x[a], y[a]
        bx, by = x[ear], y[ear]
        cx, cy = x[c], y[c]

        # now make sure we don't have other points inside the potential ear
        p = nxt[c]
        while p != a:
            if point_in_triangle(ax, ay, bx, by, cx, cy, x[p], y[p]) and arena.area(prv[p], p, nxt[p]) >= 0:
                return False
            p = nxt[p]

        return True

    def is_ear_hashed(self, ear: int) -> bool:
        """
        Ear test restricted to the z-order range of the triangle's bounding box.

        Walks the z chain outward from the ear in both directions at once,
        then finishes whichever direction is still inside the range.
        """
        arena = self.arena
        x = arena.x
        y = arena.y
        z = arena.z
        prv = arena.prev
        nxt = arena.next
        prev_z = arena.prev_z
        next_z = arena.next_z

        a = prv[ear]
        c = nxt[ear]
        if arena.area(a, ear, c) >= 0:
            # reflex, can't be an ear
            return False

        ax, ay = x[a], y[a]
        bx, by = x[ear], y[ear]
        cx, cy = x[c], y[c]

        # triangle bbox
        min_tx = min(ax, bx, cx)
        min_ty = min(ay, by, cy)
        max_tx = max(ax, bx, cx)
        max_ty = max(ay, by, cy)

        # z-order range for the current triangle bbox
        min_z = z_order(min_tx, min_ty, self.min_x, self.min_y, self.inv_size)
        max_z = z_order(max_tx, max_ty, self.min_x, self.min_y, self.inv_size)

        def blocks(node: int) -> bool:
            return (
                node != a
                and node != c
                and point_in_triangle(ax, ay, bx, by, cx, cy, x[node], y[node])
                and arena.area(prv[node], node, nxt[node]) >= 0
            )

        p = prev_z[ear]
        n = next_z[ear]

        # look for points inside the triangle in both directions
        while p != NIL and z[p] >= min_z and n != NIL and z[n] <= max_z:
            if blocks(p):
                return False
            p = prev_z[p]
            if blocks(n):
                return False
            n = next_z[n]

        # look for remaining points in decreasing z-order
        while p != NIL and z[p] >= min_z:
            if blocks(p):
                return False
            p = prev_z[p]

        # look for remaining points in increasing z-order
        while n != NIL and z[n] <= max_z:
            if blocks(n):
                return False
            n = next_z[n]

        return True

    def cure_local_intersections(self, start: int) -> int:
        """
        Go through all ring nodes and cure small local self-intersections.

        For a run a -> p -> p.next -> b where edge a-p crosses edge
        p.next-b, the triangle (a, p, b) is emitted and p, p.next removed.

        Returns:
            Node to resume clipping from
        """
        arena = self.arena
        prv = arena.prev
        nxt = arena.next

        p = start
        while True:
            a = prv[p]
            b = nxt[nxt[p]]

            if (
                not arena.equals(a, b)
                and intersects(arena, a, p, nxt[p], b)
                and locally_inside(arena, a, b)
                and locally_inside(arena, b, a)
            ):
                self._emit(a, p, b)
                self.stats['cured_triangles'] += 1

                # remove two nodes involved
                arena.remove_node(p)
                arena.remove_node(nxt[p])

                p = start = b

            p = nxt[p]
            if p == start:
                break

        return p

    def split_earcut(self, start: int) -> None:
        """
        Try splitting the ring into two and triangulate them independently.

        Looks for a valid diagonal; both halves go onto the work-list and
        restart at pass 0. Without any valid diagonal the ring is dropped,
        which leaves that part of the polygon untriangulated.
        """
        arena = self.arena
        i = arena.i
        prv = arena.prev
        nxt = arena.next

        a = start
        while True:
            b = nxt[nxt[a]]
            while b != prv[a]:
                if i[a] != i[b] and is_valid_diagonal(arena, a, b):
                    logger.debug(f"Splitting ring along diagonal {i[a]}-{i[b]}")
                    self.stats['splits'] += 1

                    # split the polygon in two by the diagonal
                    c = split_polygon(arena, a, b)

                    # filter colinear points around the cuts
                    a = filter_points(arena, a, nxt[a])
                    c = filter_points(arena, c, nxt[c])

                    # second half goes underneath so the first is finished first
                    self._pending.append(c)
                    self._pending.append(a)
                    return
                b = nxt[b]
            a = nxt[a]
            if a == start:
                break

        self.stats['dropped_rings'] += 1
        logger.warning(
            f"No valid diagonal found; dropping a ring of {arena.ring_size(start)} vertices "
            f"(starting at vertex {i[start]}) - triangulation is partial"
        )


def triangulate_detailed(
    vertices: Sequence[float],
    hole_indices: Optional[Sequence[int]] = None,
    dim: int = DEFAULT_DIM,
    config: Optional[TriangulationConfig] = None
) -> TriangulationResult:
    """
    Triangulate a polygon and report how the engine got there.

    Same triangles as triangulate(), wrapped in a TriangulationResult whose
    stats tell whether fallback passes ran and whether any ring was dropped
    (result.is_partial).

    Args:
        vertices: Flat vertex array [x0, y0, (extra...), x1, y1, ...], or the
            same values as a sequence of points or a numpy array
        hole_indices: Vertex index (not flat offset) where each hole starts,
            strictly ascending
        dim: Values per vertex (>= 2; only x and y are used)
        config: Optional TriangulationConfig

    Returns:
        TriangulationResult

    Raises:
        InvalidDimensionError: If dim < 2
        ValueError: If points given as a sequence have different lengths
    """
    if dim < MIN_DIM:
        raise InvalidDimensionError(dim)
    if config is None:
        config = TriangulationConfig()

    data = as_flat_list(vertices)
    holes = [int(h) for h in hole_indices] if hole_indices is not None else []
    has_holes = len(holes) > 0
    outer_len = holes[0] * dim if has_holes else len(data)

    arena = NodeArena()
    outer = build_ring(arena, data, 0, outer_len, dim, True)

    if outer == NIL:
        result = TriangulationResult(triangles=[])
        result.stats['input_vertices'] = len(data) // dim
        result.stats['holes'] = len(holes)
        return result

    if has_holes:
        outer = eliminate_holes(arena, data, holes, outer, dim)

    min_x = min_y = inv_size = 0.0
    if config.wants_z_order(len(data), dim):
        min_x, min_y, inv_size = compute_bounds(data, outer_len, dim)
        if inv_size == 0:
            logger.debug("Bounding box has no extent, z-order index disabled")
        else:
            logger.debug(f"Using z-order index for {len(data) // dim} vertices")

    clipper = EarClipper(arena, min_x, min_y, inv_size)
    triangles = clipper.run(outer)

    stats = clipper.stats
    stats['input_vertices'] = len(data) // dim
    stats['holes'] = len(holes)
    stats['nodes_allocated'] = len(arena)
    stats['z_order'] = 1 if inv_size != 0 else 0

    return TriangulationResult(triangles=triangles, stats=stats)


def triangulate(
    vertices: Sequence[float],
    hole_indices: Optional[Sequence[int]] = None,
    dim: int = DEFAULT_DIM,
    config: Optional[TriangulationConfig] = None
) -> List[int]:
    """
    Triangulate a polygon with optional holes.

    Args:
        vertices: Flat vertex array [x0, y0, (extra...), x1, y1, ...], or the
            same values as a sequence of points or a numpy array
        hole_indices: Vertex index (not flat offset) where each hole starts,
            strictly ascending
        dim: Values per vertex (>= 2; only x and y are used)
        config: Optional TriangulationConfig

    Returns:
        Flat list of vertex indices, three per triangle. Empty for empty or
        fully degenerate input.

    Raises:
        InvalidDimensionError: If dim < 2
        ValueError: If points given as a sequence have different lengths

    Example:
        >>> triangulate([0, 0, 1, 0, 0, 1, 0, 0])
        [2, 0, 1]
    """
    return triangulate_detailed(vertices, hole_indices, dim, config).triangles


def log_triangulation_summary(result: TriangulationResult) -> None:
    """Log summary of a triangulation run."""
    stats = result.stats
    logger.info("=" * 70)
    logger.info("TRIANGULATION SUMMARY")
    logger.info("=" * 70)
    logger.info(f"Input vertices: {stats['input_vertices']} ({stats['holes']} holes)")
    logger.info(f"Triangles: {result.triangle_count}")
    logger.info(f"Z-order index: {'used' if stats['z_order'] else 'not used'}")

    if stats['filter_passes'] > 0:
        logger.info(f"  - Filter passes: {stats['filter_passes']}")
    if stats['cure_passes'] > 0:
        logger.info(f"  - Cure passes: {stats['cure_passes']} ({stats['cured_triangles']} triangles)")
    if stats['splits'] > 0:
        logger.info(f"  - Splits: {stats['splits']}")
    if stats['dropped_rings'] > 0:
        logger.info(f"  - Dropped rings: {stats['dropped_rings']} (result is partial)")
    logger.info("=" * 70)
