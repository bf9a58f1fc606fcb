"""
Compare the plain and z-order accelerated ear tests on a large polygon.

This is a debug/analysis script, not part of the library. It builds a
noisy star with a ring of square holes, triangulates it with the index
forced off and forced on, and prints timing, triangle counts and the
deviation of both runs. Both runs should report the same triangle count
and a deviation close to zero.

Usage:
    python compare_z_order.py [points] [holes]
"""
import sys
import time

import numpy as np

from polycut import TriangulationConfig, deviation, triangulate_detailed

points = int(sys.argv[1]) if len(sys.argv) > 1 else 2000
hole_count = int(sys.argv[2]) if len(sys.argv) > 2 else 12

rng = np.random.default_rng(42)
angles = np.linspace(0.0, 2.0 * np.pi, points, endpoint=False)
radii = 100.0 + rng.uniform(-10.0, 10.0, points) + 20.0 * (np.arange(points) % 2)
outer = np.column_stack([radii * np.cos(angles), radii * np.sin(angles)])

rings = [outer]
for k in range(hole_count):
    a = 2.0 * np.pi * k / hole_count
    cx, cy = 50.0 * np.cos(a), 50.0 * np.sin(a)
    rings.append(np.array([[cx - 3, cy - 3], [cx + 3, cy - 3], [cx + 3, cy + 3], [cx - 3, cy + 3]]))

vertices = np.concatenate(rings).ravel().tolist()
holes = np.cumsum([len(r) for r in rings])[:-1].tolist()

print(f"Polygon: {points} outer vertices, {hole_count} holes")
print("=" * 70)

for label, use_z_order in (("plain", False), ("z-order", True)):
    config = TriangulationConfig(use_z_order=use_z_order)
    start = time.perf_counter()
    result = triangulate_detailed(vertices, holes, 2, config)
    elapsed = time.perf_counter() - start
    dev = deviation(vertices, holes, 2, result.triangles)

    print(f"\n=== {label} ===")
    print(f"  Triangles: {result.triangle_count}")
    print(f"  Time: {elapsed * 1000:.1f}ms")
    print(f"  Deviation: {dev:.3e}")
    print(f"  Passes (filter/cure/split): "
          f"{result.stats['filter_passes']}/{result.stats['cure_passes']}/{result.stats['splits']}")
    if result.is_partial:
        print(f"  ⚠️  Dropped rings: {result.stats['dropped_rings']}")
