"""
simulation.py — Generation Loop
================================
Ties the grid, the double buffer, the propagation rule and the scene
together. One call to `advance()` is one generation:

  1. (reader, writer) = buffer.split()
  2. Propagate   every cell of every channel: writer[pos] = rule(pos, reader)
  3. Force       pin light cells, darken barrier cells (writer side only)
  4. Swap        writer becomes the new current generation

The swap is a full barrier: step 2 is completely drained (sequential
loop finished, or every parallel chunk done) before step 3 starts, and
the swap only happens after step 3.

Channels are independent fields. Each one is propagated against its own
reader; nothing ever reads the writer side during step 2.

The simulation state is an explicit object (LightSimulation) owned by
whoever drives the loop. There is no module-level state.
"""

import copy
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

import numpy as np

from .cell import Cell
from .config import SimulationConfig, check_field_size
from .double_buffer import DoubleBuffer
from .grid import Grid
from .propagation import PropagationRule
from .render import quantities, targets
from .scene import Scene, apply_forcing

logger = logging.getLogger(__name__)

Field = Union[Grid, List[Grid]]


def _channels(side: Field) -> List[Grid]:
    return [side] if isinstance(side, Grid) else list(side)


def new_field(width: int, height: int, init=0.0, channels: int = 1) -> DoubleBuffer:
    """
    Build a fresh double-buffered field where every cell is its own source.

    Args:
        width, height : Field size (≥ 2×2, else GridSizeError)
        init          : Initial quantity, or a callable (x, y) → quantity
        channels      : 1 → each side is a Grid; n > 1 → each side is a list of n Grids

    Returns:
        DoubleBuffer whose two sides are independent copies
    """
    check_field_size(width, height)
    make = init if callable(init) else (lambda x, y: copy.copy(init))
    grid = Grid.from_fn(width, height, lambda x, y: Cell(quantity=make(x, y), target=(x, y)))
    if channels == 1:
        return DoubleBuffer.from_value(grid)
    return DoubleBuffer.from_value([grid.clone() for _ in range(channels)])


def propagate(reader: Grid, writer: Grid, rule: PropagationRule,
              parallel: bool = False, workers: Optional[int] = None,
              executor: Optional[ThreadPoolExecutor] = None):
    """Write the next generation of every cell of `reader` into `writer`."""
    if reader.dimensions != writer.dimensions:
        raise ValueError(f"Reader {reader.dimensions} and writer {writer.dimensions} differ in size")
    if reader is writer:
        raise ValueError("Propagation must not write into the grid it reads from")

    if parallel:
        reader.par_iter_indices(workers=workers, executor=executor).for_each(
            lambda pos: writer.put(pos, rule.next_cell(pos, reader))
        )
    else:
        for pos in reader.iter_indices():
            writer[pos] = rule.next_cell(pos, reader)


def _generation(buffer: DoubleBuffer, rule: PropagationRule, force: Callable[[Field], None],
                parallel: bool = False, workers: Optional[int] = None,
                executor: Optional[ThreadPoolExecutor] = None) -> Tuple[float, float]:
    """Split, propagate every channel, force, swap. Returns (propagate_ms, forcing_ms)."""
    reader, writer = buffer.split()

    t0 = time.perf_counter()
    for r, w in zip(_channels(reader), _channels(writer)):
        propagate(r, w, rule, parallel=parallel, workers=workers, executor=executor)
    t_propagate = (time.perf_counter() - t0) * 1000

    t0 = time.perf_counter()
    force(writer)
    t_forcing = (time.perf_counter() - t0) * 1000

    buffer.swap()
    return t_propagate, t_forcing


def advance(buffer: DoubleBuffer, sources: Dict = None, barriers: Iterable = (),
            rule: Optional[PropagationRule] = None, parallel: bool = False,
            workers: Optional[int] = None,
            executor: Optional[ThreadPoolExecutor] = None) -> Field:
    """
    Run one generation and swap.

    Args:
        buffer   : Field built by new_field()
        sources  : coordinate → fixed quantity (scalar or per-channel tuple)
        barriers : coordinates reset to (0, self) after propagation
        rule     : Propagation parameters (default PropagationRule())
        parallel : Spread each channel's cells over a thread pool
        workers  : Pool size for parallel mode
        executor : Existing pool to reuse

    Returns:
        The new current side (buffer.reader())
    """
    sources = sources or {}
    barriers = list(barriers)
    _generation(buffer, rule or PropagationRule(),
                lambda side: apply_forcing(side, sources, barriers),
                parallel=parallel, workers=workers, executor=executor)
    return buffer.reader()


def current_field(buffer: DoubleBuffer, channel: int = 0) -> Grid:
    """The current generation's grid (for multi-channel fields, one channel of it)."""
    side = buffer.reader()
    if isinstance(side, Grid):
        return side
    return side[channel]


class LightSimulation:
    """
    A complete light field run.

    Usage:
        with LightSimulation(SimulationConfig(width=64, height=64), default_scene(64, 64)) as sim:
            for _ in range(100):
                sim.step()
            rgb = sim.rgb()          # hand to a renderer
    """

    def __init__(self, config: Optional[SimulationConfig] = None, scene: Optional[Scene] = None):
        """
        Args:
            config : Field size and propagation parameters (default SimulationConfig())
            scene  : Lights and barriers (default: none)
        """
        self.config = config or SimulationConfig()
        self.scene = scene or Scene()
        self.scene.validate(self.config.width, self.config.height)

        self.rule = self.config.make_rule()
        init = self.config.default_quantity
        if self.config.channels == 1 and self.scene.color_size:
            # Colored lights on a single grid: every cell holds a color vector.
            init = np.full(self.scene.color_size, init, dtype=np.float32)
        self.buffer = new_field(self.config.width, self.config.height,
                                init=init, channels=self.config.channels)
        self.executor = None
        if self.config.workers is not None:
            self.executor = ThreadPoolExecutor(max_workers=self.config.workers,
                                               thread_name_prefix="lightfield")
        self.frame = 0
        self.perf_log = []

        logger.info(f"Light field {self.config.width}x{self.config.height} "
                    f"({self.config.channels} channel(s)) | {self.rule!r} | {self.scene!r}")

    @property
    def parallel(self) -> bool:
        return self.executor is not None

    def step(self) -> dict:
        """Advance one generation. Returns per-phase timings and field stats."""
        t_total_start = time.perf_counter()
        t_propagate, t_forcing = _generation(
            self.buffer, self.rule, self.scene.apply,
            parallel=self.parallel, workers=self.config.workers, executor=self.executor,
        )
        self.frame += 1
        t_total = (time.perf_counter() - t_total_start) * 1000

        field = self.quantities()
        metrics = {
            "frame"        : self.frame,
            "total_ms"     : t_total,
            "fps"          : 1000.0 / t_total if t_total > 0 else 0,
            "propagate_ms" : t_propagate,
            "forcing_ms"   : t_forcing,
            "energy_total" : float(field.sum()),
            "energy_max"   : float(field.max()),
        }
        self.perf_log.append(metrics)
        logger.debug(f"Generation {self.frame}: {t_total:.1f}ms, "
                     f"energy={metrics['energy_total']:.3f}")
        return metrics

    def run(self, generations: int) -> List[dict]:
        return [self.step() for _ in range(generations)]

    def current(self, channel: int = 0) -> Grid:
        return current_field(self.buffer, channel)

    def quantities(self) -> np.ndarray:
        """Current quantities: (H, W) for one channel, (H, W, C) for several."""
        side = self.buffer.reader()
        if isinstance(side, Grid):
            return quantities(side)
        return np.stack([quantities(g) for g in side], axis=-1)

    def rgb(self) -> np.ndarray:
        """(H, W, 3) float array for display. Fewer than 3 channels are repeated."""
        q = self.quantities()
        if q.ndim == 2:
            q = q[:, :, np.newaxis]
        if q.shape[-1] >= 3:
            return q[:, :, :3]
        return np.repeat(q[:, :, :1], 3, axis=-1)

    def get_snapshot(self) -> dict:
        """Current state as plain arrays, ready for np.save."""
        return {
            "frame"   : self.frame,
            "rgb"     : self.rgb().astype(np.float32),
            "targets" : targets(self.current(0)),
        }

    def print_status(self):
        """Pretty-print the current field state."""
        q = self.quantities()
        print(f"\n{'='*50}")
        print(f"  Generation: {self.frame}  |  {self.config.width}x{self.config.height}"
              f"  |  {self.config.attenuation}")
        print(f"  Quantity  : max={q.max():.4f}, mean={q.mean():.4f}, total={q.sum():.2f}")
        print(f"  Scene     : {len(self.scene.sources)} light(s), {len(self.scene.barriers)} barrier cell(s)")
        if self.perf_log:
            last = self.perf_log[-1]
            print(f"  Perf      : {last['total_ms']:.1f}ms/generation ({last['fps']:.1f} FPS)")
        print(f"{'='*50}")

    def close(self):
        if self.executor is not None:
            self.executor.shutdown(wait=True)
            self.executor = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
