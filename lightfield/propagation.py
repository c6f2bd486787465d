"""
propagation.py — The Per-Cell Update Rule
==========================================
One call to `next_cell(pos, reader)` computes the next generation of a
single cell from the FROZEN previous generation. It reads nothing else
and writes nothing, so every cell of a generation can be computed in
any order, on any thread.

Per cell:
  1. Target re-election
       Start from the cell's current target, then challenge it with
       itself and with each in-bounds neighbor's target, in the fixed
       order self, left, up, right, down. A challenger wins only if it
       delivers STRICTLY more (ties keep the incumbent).
  2. Received quantity
       recv = R(target, pos) under the configured attenuation policy.
  3. Blend
       q'  = blend(q,  recv,       accumulation)
       q'' = blend(q', nb_average, blur)
     nb_average is the plain mean of the in-bounds neighbors' current
     quantities (2, 3 or 4 of them; border cells just have fewer).
  4. Return Cell(q'', target)
"""

from typing import Iterator, Optional, Tuple

from .attenuation import AttenuationPolicy, DirectionalThroughput
from .cell import Cell
from .errors import GridSizeError
from .grid import Grid
from .sampling import blend, intensity

# Evaluation order matters for ties: left, up, right, down.
NEIGHBOR_OFFSETS = ((-1, 0), (0, -1), (1, 0), (0, 1))


def neighbor_coords(pos: Tuple[int, int], dimensions: Tuple[int, int]) -> Iterator[Tuple[int, int]]:
    """In-bounds 4-connected neighbors of `pos`, in re-election order."""
    x, y = pos
    width, height = dimensions
    for dx, dy in NEIGHBOR_OFFSETS:
        nx, ny = x + dx, y + dy
        if 0 <= nx < width and 0 <= ny < height:
            yield nx, ny


class PropagationRule:
    """
    The fixed simulation parameters plus the update function.

    Usage:
        rule = PropagationRule(accumulation=1.0, blur=0.1)
        writer[pos] = rule.next_cell(pos, reader)
    """

    def __init__(self, accumulation: float = 1.0, blur: float = 0.1,
                 attenuation: Optional[AttenuationPolicy] = None):
        """
        Args:
            accumulation : Weight pulling a cell toward what it receives from its target
            blur         : Weight pulling a cell toward its neighbors' average
            attenuation  : R(source, sink) policy (default: directional throughput)
        """
        for name, value in (("accumulation", accumulation), ("blur", blur)):
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} factor must be within [0, 1], got {value}")
        self.accumulation = accumulation
        self.blur = blur
        self.attenuation = attenuation or DirectionalThroughput()

    def next_cell(self, pos: Tuple[int, int], reader: Grid) -> Cell:
        """
        The cell at `pos` one generation later, computed from `reader` only.

        Fields are checked to be at least 2×2 when they are built
        (new_field, SimulationConfig). The GridSizeError below is only
        reachable by handing the rule a bare 1×1 Grid.
        """
        received = self.attenuation.received
        cell = reader[pos]

        # ── 1. Target re-election (incumbent first, strict > to replace) ──
        target = cell.target
        best = received(reader, target, pos)
        best_rank = intensity(best)

        def challenge(candidate):
            nonlocal target, best, best_rank
            if candidate == target:
                return
            value = received(reader, candidate, pos)
            rank = intensity(value)
            if rank > best_rank:
                target, best, best_rank = candidate, value, rank

        challenge(pos)

        nb_sum = 0.0
        nb_count = 0
        for nb in neighbor_coords(pos, reader.dimensions):
            nb_cell = reader[nb]
            challenge(nb_cell.target)
            nb_sum = nb_sum + nb_cell.quantity
            nb_count += 1

        if nb_count == 0:
            raise GridSizeError(
                f"Cell {pos} has no neighbors in a {reader.width}x{reader.height} grid"
            )

        # ── 2-3. Blend toward the received quantity, then the neighborhood ──
        nb_avg = nb_sum / nb_count
        quantity = blend(cell.quantity, best, self.accumulation)
        quantity = blend(quantity, nb_avg, self.blur)

        return Cell(quantity=quantity, target=target)

    def __repr__(self):
        return (f"PropagationRule(accumulation={self.accumulation}, "
                f"blur={self.blur}, attenuation={self.attenuation!r})")


_DEFAULT_RULE = PropagationRule()


def next_cell(pos: Tuple[int, int], reader: Grid, rule: Optional[PropagationRule] = None) -> Cell:
    """Functional form of `PropagationRule.next_cell` (default parameters when rule is None)."""
    return (rule or _DEFAULT_RULE).next_cell(pos, reader)
