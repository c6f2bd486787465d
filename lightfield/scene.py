"""
scene.py — External Forcing (Lights & Barriers)
================================================
After every generation's propagation, and before the swap, the driver
pins a few cells to fixed values:

  - source  cells → quantity overwritten with the light's fixed value
                    (their target is left as the rule computed it)
  - barrier cells → quantity reset to 0 and target reset to the cell
                    itself, so no light is ever routed through them

Barriers are applied after sources, so a cell that is both stays dark.

A light's value is either one scalar (same in every channel) or a
per-channel tuple such as an RGB color. A field stored as a list of
scalar channel grids gets one component per channel; a single grid
gets the value as-is (tuples become numpy vectors, and a
scalar fills every component of a vector cell).
"""

import dataclasses
import numbers
from typing import Dict, Iterable, List, Sequence, Set, Tuple, Union

import numpy as np

from .cell import Cell
from .errors import OutOfBoundsError
from .grid import Grid, in_range

Coord = Tuple[int, int]
SourceValue = Union[float, Sequence[float]]

# Classic demo layout, authored on a 128×128 field.
REFERENCE_SIZE = 128
DEFAULT_LIGHTS = [
    ((60, 45), (1.0, 0.0, 0.0)),
    ((80, 70), (0.0, 0.0, 1.0)),
    ((60, 90), (0.0, 1.0, 0.0)),
    ((10, 50), (0.5, 1.0, 0.0)),
    ((50, 10), (1.0, 0.0, 1.0)),
    ((60, 60), (0.2, 0.2, 0.2)),
]
DEFAULT_WALL = ((36, 40), (49, 53))


def line_cells(start: Coord, end: Coord) -> List[Coord]:
    """Cells on the segment start → end (inclusive), one per major-axis step."""
    (x0, y0), (x1, y1) = start, end
    steps = max(abs(x1 - x0), abs(y1 - y0))
    if steps == 0:
        return [start]
    return [
        (x0 + round((x1 - x0) * i / steps), y0 + round((y1 - y0) * i / steps))
        for i in range(steps + 1)
    ]


def channel_value(value: SourceValue, channel: int):
    """Component of a light's value seen by one scalar channel."""
    if isinstance(value, numbers.Real):
        return value
    return value[channel]


def _full_value(value: SourceValue):
    if isinstance(value, numbers.Real):
        return value
    return np.asarray(value, dtype=np.float32)


def _zero_like(quantity):
    if isinstance(quantity, np.ndarray):
        return np.zeros_like(quantity)
    return 0.0


def _matched(pos: Coord, current, quantity):
    if isinstance(current, np.ndarray) and isinstance(quantity, numbers.Real):
        return np.full_like(current, quantity)
    if np.shape(quantity) != np.shape(current):
        raise ValueError(
            f"Light at {pos} has shape {np.shape(quantity)}, "
            f"but the field holds quantities of shape {np.shape(current)}"
        )
    return quantity


def force_grid(grid: Grid, sources: Dict[Coord, object], barriers: Iterable[Coord]):
    """
    Overwrite source quantities, then reset barrier cells, in one grid.

    A scalar light fills every component of a vector cell. Any other shape
    mismatch between a light and the cell it lands on raises ValueError.
    """
    for pos, quantity in sources.items():
        cell = grid[pos]
        grid[pos] = dataclasses.replace(cell, quantity=_matched(pos, cell.quantity, quantity))
    for pos in barriers:
        grid[pos] = Cell(quantity=_zero_like(grid[pos].quantity), target=tuple(pos))


def apply_forcing(side, sources: Dict[Coord, SourceValue], barriers: Iterable[Coord]):
    """
    Apply lights and barriers to one buffer side.

    Args:
        side     : A Grid, or a list of per-channel Grids
        sources  : coordinate → scalar or per-channel value
        barriers : coordinates to darken
    """
    barriers = list(barriers)
    if isinstance(side, Grid):
        force_grid(side, {pos: _full_value(v) for pos, v in sources.items()}, barriers)
        return
    for channel, grid in enumerate(side):
        force_grid(grid, {pos: channel_value(v, channel) for pos, v in sources.items()}, barriers)


class Scene:
    """
    The externally configured forcing for a run.

    Usage:
        scene = Scene()
        scene.add_light((2, 2), 1.0)
        scene.barrier_line((0, 5), (6, 5))
        scene.validate(width, height)
    """

    def __init__(self, sources: Dict[Coord, SourceValue] = None,
                 barriers: Iterable[Coord] = ()):
        self.sources: Dict[Coord, SourceValue] = dict(sources or {})
        self.barriers: Set[Coord] = set(barriers)

    def add_light(self, pos: Coord, value: SourceValue):
        self.sources[tuple(pos)] = value

    def add_barrier(self, pos: Coord):
        self.barriers.add(tuple(pos))

    def barrier_line(self, start: Coord, end: Coord):
        """Add every cell of the segment start → end as a barrier."""
        self.barriers.update(line_cells(start, end))

    @property
    def color_size(self) -> int:
        """Length of the longest per-channel light value (0 when every light is a scalar)."""
        return max((len(v) for v in self.sources.values() if not isinstance(v, numbers.Real)),
                   default=0)

    def validate(self, width: int, height: int):
        """Every light and barrier must lie inside the field."""
        for pos in list(self.sources) + sorted(self.barriers):
            if not in_range(pos, (width, height)):
                raise OutOfBoundsError(pos, (width, height))

    def apply(self, side):
        apply_forcing(side, self.sources, self.barriers)

    def __repr__(self):
        return f"Scene(lights={len(self.sources)}, barriers={len(self.barriers)})"


def default_scene(width: int = REFERENCE_SIZE, height: int = REFERENCE_SIZE) -> Scene:
    """Six colored lights and one diagonal wall, scaled from the 128×128 layout."""
    sx = width / REFERENCE_SIZE
    sy = height / REFERENCE_SIZE

    def scale(pos):
        x, y = pos
        return (min(width - 1, int(x * sx)), min(height - 1, int(y * sy)))

    scene = Scene()
    for pos, color in DEFAULT_LIGHTS:
        scene.add_light(scale(pos), color)
    start, end = DEFAULT_WALL
    scene.barrier_line(scale(start), scale(end))
    return scene
