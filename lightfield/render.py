"""
render.py — Field → Array Conversion
=====================================
Read-side helpers for whatever displays the field. The core does not
care about color spaces; these only pull quantities out of a grid and
squash them into bytes.

Byte mapping: clamp to [0, 1], scale by 256, saturate at 255.
"""

from typing import Sequence, Union

import numpy as np

from .grid import Grid


def quantities(grid: Grid) -> np.ndarray:
    """
    Cell quantities as a float32 array.

    Returns:
        (H, W) for scalar quantities, (H, W, K) for vector quantities
    """
    values = [cell.quantity for cell in grid.iter()]
    arr = np.asarray(values, dtype=np.float32)
    return arr.reshape((grid.height, grid.width) + arr.shape[1:])


def targets(grid: Grid) -> np.ndarray:
    """(H, W, 2) int32 array of each cell's target (x, y)."""
    arr = np.asarray([cell.target for cell in grid.iter()], dtype=np.int32)
    return arr.reshape(grid.height, grid.width, 2)


def to_bytes(values: np.ndarray) -> np.ndarray:
    scaled = np.clip(values, 0.0, 1.0) * 256.0
    return np.minimum(scaled, 255.0).astype(np.uint8)


def to_rgb8(field: Union[np.ndarray, Sequence[Grid]]) -> np.ndarray:
    """
    (H, W, 3) uint8 image from three scalar channel grids or an (H, W, 3) float array.
    """
    if isinstance(field, np.ndarray):
        rgb = field
    else:
        rgb = np.stack([quantities(g) for g in field], axis=-1)
    if rgb.ndim != 3 or rgb.shape[-1] != 3:
        raise ValueError(f"Expected an (H, W, 3) field, got shape {rgb.shape}")
    return to_bytes(rgb)


def to_luminance8(grid: Grid) -> np.ndarray:
    """(H, W) uint8 image of a single scalar channel."""
    return to_bytes(quantities(grid))
