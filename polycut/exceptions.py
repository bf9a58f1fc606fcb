"""Exceptions raised by polycut."""


class InvalidDimensionError(ValueError):
    """Raised when a vertex has fewer than two coordinates."""

    def __init__(self, dim: int):
        self.dim = dim
        super().__init__(f"dim must be at least 2 (need x and y per vertex), got {dim}")
