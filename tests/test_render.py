"""Field → array conversion."""

import numpy as np
import pytest

from lightfield.cell import Cell
from lightfield.grid import Grid
from lightfield.render import quantities, targets, to_luminance8, to_rgb8


def test_quantities_are_row_major():
    g = Grid.from_fn(3, 2, lambda x, y: Cell(float(x + 10 * y), (x, y)))
    q = quantities(g)
    assert q.shape == (2, 3)
    assert q[1, 2] == 12.0


def test_vector_quantities_shape():
    g = Grid.from_fn(3, 2, lambda x, y: Cell(np.full(3, x, dtype=np.float32), (x, y)))
    assert quantities(g).shape == (2, 3, 3)


def test_targets():
    g = Grid.from_fn(2, 2, lambda x, y: Cell(0.0, (1 - x, y)))
    t = targets(g)
    assert t.shape == (2, 2, 2)
    assert tuple(t[0, 0]) == (1, 0)


def test_to_rgb8_clamps_and_saturates():
    arr = np.array([[[0.0, 0.5, 1.0]], [[2.0, -1.0, 0.25]]])
    np.testing.assert_array_equal(to_rgb8(arr), [[[0, 128, 255]], [[255, 0, 64]]])
    assert to_rgb8(arr).dtype == np.uint8


def test_to_rgb8_from_channel_grids():
    channels = [Grid.from_value(2, 2, Cell(v, (0, 0))) for v in (1.0, 0.5, 0.0)]
    img = to_rgb8(channels)
    assert img.shape == (2, 2, 3)
    np.testing.assert_array_equal(img[1, 1], [255, 128, 0])


def test_to_rgb8_rejects_wrong_shape():
    with pytest.raises(ValueError):
        to_rgb8(np.zeros((2, 2)))


def test_to_luminance8():
    g = Grid.from_fn(2, 1, lambda x, y: Cell(x * 0.5, (x, y)))
    np.testing.assert_array_equal(to_luminance8(g), [[0, 128]])
