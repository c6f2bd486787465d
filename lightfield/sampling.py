"""
sampling.py — Blending & Bilinear Sampling
===========================================
Cell quantities come in two shapes:
  - scalar energy   → a plain float
  - color           → a length-3 numpy vector

Both need the same two capabilities, written once as generic functions:
  - blend(a, b, w)  → a*(1-w) + b*w        (w ∈ [0, 1])
  - intensity(q)    → one float to compare quantities by

Anything else can join in with `@blend.register(MyType)`.

Bilinear sampling reads a grid at a fractional coordinate:

    (i,j) ──── tx ──── (i+1,j)        top    = blend(c00, c10, tx)
      │                   │           bottom = blend(c01, c11, tx)
      ty                  │           result = blend(top, bottom, ty)
      │                   │
    (i,j+1) ────────── (i+1,j+1)

Standard bilinear interpolation, NOT area-correct resampling. All four
corners must exist: sampling on the last row or column is out of range.
"""

import math
import numbers
from functools import singledispatch
from typing import Tuple

import numpy as np

from .errors import OutOfBoundsError
from .grid import Grid, assert_index_in_range, flatten_index


@singledispatch
def blend(a, b, weight: float):
    """Linear blend from `a` toward `b`. weight=0 gives `a`, weight=1 gives `b`."""
    raise TypeError(f"No blend registered for {type(a).__name__}")


@blend.register(numbers.Real)
def _blend_scalar(a, b, weight: float):
    return a * (1.0 - weight) + b * weight


@blend.register(np.ndarray)
def _blend_vector(a, b, weight: float):
    return a * (1.0 - weight) + np.asarray(b) * weight


@singledispatch
def intensity(quantity) -> float:
    """Scalar used to rank quantities against each other."""
    raise TypeError(f"No intensity registered for {type(quantity).__name__}")


@intensity.register(numbers.Real)
def _intensity_scalar(quantity) -> float:
    return float(quantity)


@intensity.register(np.ndarray)
def _intensity_vector(quantity) -> float:
    return float(quantity.sum())


def sample(grid: Grid, coord: Tuple[float, float]):
    """
    Bilinear read of `grid` at `coord = (fx, fy)`.

    Args:
        grid  : Grid whose values support blend()
        coord : Non-negative fractional position in cell units

    Raises:
        OutOfBoundsError if a coordinate is negative or (i+1, j+1) is
        outside the grid.
    """
    fx, fy = coord
    if fx < 0 or fy < 0:
        raise OutOfBoundsError(coord, grid.dimensions)

    i, j = math.floor(fx), math.floor(fy)
    tx, ty = fx - i, fy - j

    assert_index_in_range((i + 1, j + 1), grid.dimensions)

    w = grid.width
    data = grid._data
    c00 = data[flatten_index((i, j), w)]
    c10 = data[flatten_index((i + 1, j), w)]
    c01 = data[flatten_index((i, j + 1), w)]
    c11 = data[flatten_index((i + 1, j + 1), w)]

    top = blend(c00, c10, tx)
    bottom = blend(c01, c11, tx)
    return blend(top, bottom, ty)
