"""
cell.py — Per-coordinate simulation record.
"""

from dataclasses import dataclass
from typing import Any, Tuple


@dataclass(frozen=True)
class Cell:
    """
    quantity : energy (float) or color (length-3 numpy vector)
    target   : coordinate of the source this cell currently draws from.
               Equal to the cell's own coordinate when it is its own source.

    Cells are replaced wholesale each generation, never edited in place.
    """
    quantity: Any
    target: Tuple[int, int]

    @classmethod
    def at_rest(cls, x: int, y: int, quantity=0.0) -> "Cell":
        return cls(quantity=quantity, target=(x, y))
