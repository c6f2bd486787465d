"""
parallel.py — Parallel Traversal Bridge
========================================
Turns any of the grid's sequential cursors into an unordered parallel
work source backed by a thread pool.

How it works:
  1. The cursor is drained in the calling thread into fixed-size chunks.
  2. Each chunk is submitted to the pool as one task.
  3. Idle workers pick up whatever chunk is next in the queue, so a slow
     chunk never holds the others back.

Results come back in COMPLETION order, not grid order. The body must not
write to the grid it is reading from; write into a different grid (the
other side of a DoubleBuffer) where every item owns its own cell.

Exceptions raised inside the body (e.g. OutOfBoundsError) are re-raised
in the caller once the pool reaches them.
"""

import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from itertools import islice
from typing import Callable, Iterator, List, Optional


def default_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


def _run_chunk(fn: Callable, chunk: list) -> list:
    return [fn(item) for item in chunk]


class ParallelCursor:
    """
    Usage:
        grid.par_iter_indices(workers=4).for_each(lambda pos: out.put(pos, f(pos)))
        values = grid.par_iter().map(float)      # any order
    """

    def __init__(self, cursor: Iterator, workers: Optional[int] = None,
                 executor: Optional[ThreadPoolExecutor] = None,
                 chunk_size: Optional[int] = None):
        """
        Args:
            cursor     : A grid cursor (or any finite iterator)
            workers    : Pool size when no executor is given, and the basis for chunk sizing
                         (default: cpu_count + 4, max 32)
            executor   : Reuse an existing pool instead of spinning one up per call
            chunk_size : Items per task. Default spreads ~4 tasks per worker.
        """
        self._cursor = cursor
        self._workers = workers or default_workers()
        self._executor = executor
        self._chunk_size = chunk_size

    def __len__(self) -> int:
        return len(self._cursor)

    def _chunks(self):
        size = self._chunk_size
        if size is None:
            remaining = self._cursor.__length_hint__() if hasattr(self._cursor, "__length_hint__") else 0
            size = max(1, remaining // (self._workers * 4))
        while True:
            chunk = list(islice(self._cursor, size))
            if not chunk:
                return
            yield chunk

    def _submit_all(self, pool, fn):
        return [pool.submit(_run_chunk, fn, chunk) for chunk in self._chunks()]

    def map(self, fn: Callable) -> List:
        """Apply `fn` to every item. Returns results in completion order."""
        results = []
        if self._executor is not None:
            futures = self._submit_all(self._executor, fn)
            for future in as_completed(futures):
                results.extend(future.result())
            return results

        with ThreadPoolExecutor(max_workers=self._workers) as pool:
            futures = self._submit_all(pool, fn)
            for future in as_completed(futures):
                results.extend(future.result())
        return results

    def for_each(self, fn: Callable):
        """Apply `fn` to every item for its side effect. Blocks until all items are done."""
        self.map(fn)
