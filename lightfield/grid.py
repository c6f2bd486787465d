"""
grid.py — Dense Row-Major Grid
===============================
The container every field in the simulation lives in.

Layout:
  - A grid of `width x height` cells is stored in ONE flat list.
  - Cell (x, y) lives at linear index `y * width + x` (row-major).
  - Coordinates are plain `(x, y)` tuples of ints.

Two ways to read a cell:
  - `grid.get(pos)`  → the value, or None when `pos` is outside the grid
  - `grid[pos]`      → the value, or OutOfBoundsError (a bug, not a condition)

Indexed access is what the hot loops use. Those loops only ever see
coordinates produced by the grid's own cursors, so an out-of-range index
there means the caller is broken and we stop immediately.

Three cursors walk the grid in row-major order (y outer, x inner):
  - iter()          → values
  - enumerate()     → ((x, y), value) pairs
  - iter_indices()  → coordinates only
Each one is lazy, finite and knows exactly how many cells it has left.
Call the method again to start over.
"""

import copy
from typing import Callable, Generic, Iterator, List, Optional, Tuple, TypeVar

from .errors import OutOfBoundsError

T = TypeVar("T")
Coord = Tuple[int, int]


def flatten_index(index: Coord, width: int) -> int:
    """Linear storage index of `(x, y)` in a row-major grid of the given width."""
    x, y = index
    return y * width + x


def in_range(index: Coord, dimensions: Coord) -> bool:
    x, y = index
    return 0 <= x < dimensions[0] and 0 <= y < dimensions[1]


def assert_index_in_range(index: Coord, dimensions: Coord):
    """Raise OutOfBoundsError naming the coordinate and the grid size."""
    if not in_range(index, dimensions):
        raise OutOfBoundsError(index, dimensions)


class Grid(Generic[T]):
    """
    Fixed-size 2-D container. Never resized after construction.

    Usage:
        g = Grid.from_fn(4, 3, lambda x, y: x + 10 * y)
        g[(2, 1)]            # → 12
        g.get((9, 9))        # → None
        for pos in g.iter_indices():
            ...
    """

    def __init__(self, width: int, height: int, data: List[T]):
        """
        Args:
            width, height : Grid dimensions in cells (both ≥ 1)
            data          : Row-major storage, exactly width*height long

        Prefer from_value() / from_fn(); this constructor adopts `data` as-is.
        """
        if width < 1 or height < 1:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        if len(data) != width * height:
            raise ValueError(
                f"Storage holds {len(data)} cells, expected {width}*{height}={width * height}"
            )
        self._data = data
        self._dimensions = (width, height)

    # ── Construction ──────────────────────────────────────────────────────

    @classmethod
    def from_value(cls, width: int, height: int, value: T) -> "Grid[T]":
        """Fill every cell with its own copy of `value`."""
        return cls(width, height, [copy.copy(value) for _ in range(width * height)])

    @classmethod
    def from_fn(cls, width: int, height: int, func: Callable[[int, int], T]) -> "Grid[T]":
        """
        Fill cell (x, y) with `func(x, y)`.

        func is called in row-major order (y outer, x inner), which only
        matters if it has side effects.
        """
        data = []
        for y in range(height):
            for x in range(width):
                data.append(func(x, y))
        return cls(width, height, data)

    def clone(self) -> "Grid[T]":
        """Independent copy: mutating one grid is never visible in the other."""
        return Grid(self.width, self.height, copy.deepcopy(self._data))

    __copy__ = clone

    # ── Dimensions ────────────────────────────────────────────────────────

    @property
    def width(self) -> int:
        return self._dimensions[0]

    @property
    def height(self) -> int:
        return self._dimensions[1]

    @property
    def dimensions(self) -> Coord:
        return self._dimensions

    def __len__(self) -> int:
        return len(self._data)

    def contains(self, index: Coord) -> bool:
        return in_range(index, self._dimensions)

    # ── Checked access (Optional) ─────────────────────────────────────────

    def get(self, index: Coord, default: Optional[T] = None) -> Optional[T]:
        """The value at `index`, or `default` when it lies outside the grid."""
        if not in_range(index, self._dimensions):
            return default
        return self._data[flatten_index(index, self.width)]

    def get_mut(self, index: Coord) -> Optional[T]:
        """
        The live stored object at `index` (None when out of range).

        Same object get() returns; in-place changes to a mutable value
        show up in the grid. Use put() to replace a cell.
        """
        return self.get(index)

    # ── Indexed access (fatal on bad coordinates) ─────────────────────────

    def __getitem__(self, index: Coord) -> T:
        assert_index_in_range(index, self._dimensions)
        return self._data[flatten_index(index, self.width)]

    def __setitem__(self, index: Coord, value: T):
        assert_index_in_range(index, self._dimensions)
        self._data[flatten_index(index, self.width)] = value

    def put(self, index: Coord, value: T):
        self[index] = value

    # ── Cursors ───────────────────────────────────────────────────────────

    def iter(self) -> "Cells[T]":
        return Cells(self)

    def enumerate(self) -> "EnumerateCells[T]":
        return EnumerateCells(self)

    def iter_indices(self) -> "CellIndices":
        return CellIndices(self._dimensions)

    def __iter__(self) -> Iterator[T]:
        return self.iter()

    # ── Parallel cursors (see parallel.py) ────────────────────────────────

    def par_iter(self, workers: Optional[int] = None, executor=None):
        from .parallel import ParallelCursor
        return ParallelCursor(self.iter(), workers=workers, executor=executor)

    def par_enumerate(self, workers: Optional[int] = None, executor=None):
        from .parallel import ParallelCursor
        return ParallelCursor(self.enumerate(), workers=workers, executor=executor)

    def par_iter_indices(self, workers: Optional[int] = None, executor=None):
        from .parallel import ParallelCursor
        return ParallelCursor(self.iter_indices(), workers=workers, executor=executor)

    # ── Continuous reads (see sampling.py) ────────────────────────────────

    def sample(self, coord: Tuple[float, float]) -> T:
        """Bilinear read at a fractional coordinate."""
        from .sampling import sample
        return sample(self, coord)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self._dimensions == other._dimensions and self._data == other._data

    def __repr__(self):
        return f"Grid(width={self.width}, height={self.height})"


class _RowMajorCursor:
    """
    Shared walking logic: a flat position counter over `width*height` cells.
    Subclasses decide what one step yields.
    """

    def __init__(self, dimensions: Coord):
        self._dimensions = dimensions
        self._total = dimensions[0] * dimensions[1]
        self._next = 0

    def __iter__(self):
        return self

    def __next__(self):
        if self._next >= self._total:
            raise StopIteration
        flat = self._next
        self._next += 1
        width = self._dimensions[0]
        return self._item(flat, (flat % width, flat // width))

    def _item(self, flat: int, index: Coord):
        raise NotImplementedError

    def __len__(self) -> int:
        return self._total - self._next

    def __length_hint__(self) -> int:
        return len(self)


class Cells(_RowMajorCursor, Generic[T]):
    """Values in row-major order."""

    def __init__(self, grid: Grid[T]):
        super().__init__(grid.dimensions)
        self._data = grid._data

    def _item(self, flat, index):
        return self._data[flat]


class EnumerateCells(_RowMajorCursor, Generic[T]):
    """((x, y), value) pairs in row-major order."""

    def __init__(self, grid: Grid[T]):
        super().__init__(grid.dimensions)
        self._data = grid._data

    def _item(self, flat, index):
        return index, self._data[flat]


class CellIndices(_RowMajorCursor):
    """(x, y) coordinates in row-major order. Holds no reference to the grid."""

    def _item(self, flat, index):
        return index
