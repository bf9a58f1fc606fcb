"""
Configuration dataclass for polygon triangulation.

This module defines the TriangulationConfig dataclass that holds the
tunable knobs of the ear-clipping engine. Keeping them in one object keeps
function signatures clean and lets tests force either code path (plain or
z-order accelerated) deterministically.
"""

from dataclasses import dataclass
from typing import Optional

from .constants import Z_ORDER_VERTEX_THRESHOLD


@dataclass
class TriangulationConfig:
    """
    Configuration for a triangulation call.

    Attributes:
        hash_threshold: Vertex count above which the z-order index is used.
            The check is len(vertices) > hash_threshold * dim.
        use_z_order: None to decide automatically from hash_threshold,
            True to always build the index, False to never build it.
            Forcing it on still leaves it off for a zero-size bounding box.
    """

    hash_threshold: int = Z_ORDER_VERTEX_THRESHOLD
    use_z_order: Optional[bool] = None

    def __post_init__(self):
        """Validate configuration parameters."""
        if isinstance(self.hash_threshold, bool) or not isinstance(self.hash_threshold, int):
            raise ValueError(f"hash_threshold must be an integer, got {self.hash_threshold!r}")
        if self.hash_threshold < 0:
            raise ValueError(f"hash_threshold must be non-negative, got {self.hash_threshold}")
        if self.use_z_order not in (None, True, False):
            raise ValueError(f"use_z_order must be None, True or False, got {self.use_z_order!r}")

    def wants_z_order(self, data_len: int, dim: int) -> bool:
        """Decide whether a flat array of data_len values gets the z-order index."""
        if self.use_z_order is not None:
            return self.use_z_order
        return data_len > self.hash_threshold * dim
