"""Read/write role swapping without aliasing."""

import pytest

from lightfield.double_buffer import DoubleBuffer
from lightfield.grid import Grid


def test_split_returns_reader_and_writer():
    read, write = Grid.from_value(2, 2, 0.0), Grid.from_value(2, 2, 1.0)
    db = DoubleBuffer(read, write)
    r, w = db.split()
    assert r is read and w is write
    assert db.reader() is read and db.writer() is write


def test_swap_exchanges_roles():
    db = DoubleBuffer(["a"], ["b"])
    old_reader, old_writer = db.split()
    db.swap()
    assert db.reader() is old_writer
    assert db.writer() is old_reader
    db.swap()
    assert db.reader() is old_reader


def test_from_value_sides_do_not_alias():
    db = DoubleBuffer.from_value(Grid.from_value(2, 2, 0.0))
    assert db.reader() is not db.writer()

    db.swap()
    db.writer()[(0, 0)] = 5.0
    assert db.reader()[(0, 0)] == 0.0


def test_from_value_copies_lists_of_grids():
    db = DoubleBuffer.from_value([Grid.from_value(2, 2, 0.0) for _ in range(3)])
    r, w = db.split()
    for rg, wg in zip(r, w):
        assert rg is not wg
        wg[(1, 1)] = 1.0
        assert rg[(1, 1)] == 0.0


def test_same_instance_rejected():
    g = Grid.from_value(2, 2, 0.0)
    with pytest.raises(ValueError):
        DoubleBuffer(g, g)
