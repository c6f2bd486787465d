"""
double_buffer.py — Read/Write State Pair
=========================================
Ping-pong between two instances of the same state.

  reader()  → the current generation (read-only by convention)
  writer()  → scratch space being filled with the next generation
  split()   → both at once, for one update pass
  swap()    → the scratch becomes current, the old current becomes scratch

Both sides are held in a single tuple and a swap rebinds that one
attribute, so any observer sees either the old pair or the new pair,
never a mix. No data is copied on swap.
"""

import copy
from typing import Generic, Tuple, TypeVar

T = TypeVar("T")


class DoubleBuffer(Generic[T]):

    def __init__(self, read: T, write: T):
        if read is write:
            raise ValueError("DoubleBuffer sides must be two distinct instances")
        self._sides = (read, write)

    @classmethod
    def from_value(cls, value: T) -> "DoubleBuffer[T]":
        """Both sides start as independent deep copies of `value`."""
        return cls(copy.deepcopy(value), value)

    def split(self) -> Tuple[T, T]:
        """(reader, writer) for one update pass. The two never share storage."""
        return self._sides

    def swap(self):
        read, write = self._sides
        self._sides = (write, read)

    def reader(self) -> T:
        return self._sides[0]

    def writer(self) -> T:
        return self._sides[1]
