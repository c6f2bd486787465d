"""
errors.py — Fatal Error Kinds
==============================
The core has no recoverable failures. Everything in here signals a bug
in whoever produced the coordinate or picked the grid size.
"""


class OutOfBoundsError(IndexError):
    """A coordinate fell outside the grid. Never caught inside the package."""

    def __init__(self, index, dimensions):
        self.index = tuple(index)
        self.dimensions = tuple(dimensions)
        super().__init__(
            f"Index out of bounds. {self.index} is not less than {self.dimensions}"
        )


class GridSizeError(ValueError):
    """A field smaller than 2x2 was requested (a cell would have no neighbors)."""
