"""Dense grid: addressing, construction, cursors and the parallel bridge."""

import operator
from collections import Counter

import pytest

from lightfield.errors import OutOfBoundsError
from lightfield.grid import Grid, flatten_index


@pytest.mark.parametrize("width,height", [(1, 1), (3, 2), (5, 7), (16, 4)])
def test_flatten_is_row_major_and_injective(width, height):
    seen = []
    for y in range(height):
        for x in range(width):
            assert flatten_index((x, y), width) == y * width + x
            seen.append(flatten_index((x, y), width))
    assert seen == list(range(width * height))


def test_from_fn_round_trip():
    g = Grid.from_fn(4, 3, lambda x, y: (x, y, x * 10 + y))
    for y in range(3):
        for x in range(4):
            assert g[(x, y)] == (x, y, x * 10 + y)


def test_from_fn_calls_in_row_major_order():
    calls = []
    Grid.from_fn(3, 2, lambda x, y: calls.append((x, y)))
    assert calls == [(0, 0), (1, 0), (2, 0), (0, 1), (1, 1), (2, 1)]


def test_from_value_gives_each_cell_its_own_copy():
    g = Grid.from_value(2, 2, [])
    g[(0, 0)].append(1)
    assert g[(1, 0)] == []
    assert g.width == 2 and g.height == 2 and g.dimensions == (2, 2)


@pytest.mark.parametrize("pos", [(3, 0), (0, 2), (-1, 0), (0, -1), (7, 7)])
def test_get_returns_none_out_of_range(pos):
    g = Grid.from_value(3, 2, 1.0)
    assert g.get(pos) is None
    assert g.get_mut(pos) is None


def test_get_mut_is_the_live_object():
    g = Grid.from_value(2, 2, [])
    g.get_mut((1, 1)).append("x")
    assert g[(1, 1)] == ["x"]


def test_indexing_out_of_range_is_fatal():
    g = Grid.from_value(3, 2, 0.0)
    with pytest.raises(OutOfBoundsError) as exc:
        g[(3, 0)]
    assert "(3, 0)" in str(exc.value)
    assert "(3, 2)" in str(exc.value)

    with pytest.raises(OutOfBoundsError):
        g[(0, 2)] = 1.0
    with pytest.raises(OutOfBoundsError):
        g.put((-1, 0), 1.0)


def test_put_and_setitem():
    g = Grid.from_value(2, 2, 0.0)
    g.put((1, 0), 5.0)
    g[(0, 1)] = 7.0
    assert list(g.iter()) == [0.0, 5.0, 7.0, 0.0]


def test_storage_length_must_match():
    with pytest.raises(ValueError):
        Grid(2, 2, [0, 1, 2])


def test_cursors_cover_every_cell_once_in_row_major_order():
    g = Grid.from_fn(4, 3, lambda x, y: y * 4 + x)
    expected_indices = [(x, y) for y in range(3) for x in range(4)]

    assert list(g.iter()) == list(range(12))
    assert list(g.iter_indices()) == expected_indices
    assert list(g.enumerate()) == [(pos, i) for i, pos in enumerate(expected_indices)]


def test_cursors_report_remaining_length():
    g = Grid.from_value(3, 2, 0)
    for cursor in (g.iter(), g.enumerate(), g.iter_indices()):
        assert len(cursor) == 6
        assert operator.length_hint(cursor) == 6
        next(cursor)
        next(cursor)
        assert len(cursor) == 4
        list(cursor)
        assert len(cursor) == 0


def test_cursors_restart_with_a_fresh_call():
    g = Grid.from_value(2, 2, 1)
    first = g.iter_indices()
    list(first)
    assert list(first) == []
    assert len(list(g.iter_indices())) == 4


def test_clone_is_independent():
    g = Grid.from_fn(2, 2, lambda x, y: [x, y])
    c = g.clone()
    c[(0, 0)].append(99)
    c[(1, 1)] = "new"
    assert g[(0, 0)] == [0, 0]
    assert g[(1, 1)] == [1, 1]


@pytest.mark.parametrize("workers", [1, 3, 8])
def test_parallel_cursors_produce_the_same_multiset(workers):
    g = Grid.from_fn(7, 5, lambda x, y: (x * y) % 4)

    assert Counter(g.par_iter(workers=workers).map(lambda v: v)) == Counter(g.iter())
    assert sorted(g.par_iter_indices(workers=workers).map(lambda p: p)) == sorted(g.iter_indices())
    assert sorted(g.par_enumerate(workers=workers).map(lambda item: item)) == sorted(g.enumerate())


def test_parallel_for_each_writes_disjoint_cells():
    src = Grid.from_fn(6, 6, lambda x, y: x + y)
    dst = Grid.from_value(6, 6, None)
    src.par_enumerate(workers=4).for_each(lambda item: dst.put(item[0], item[1] * 2))
    assert list(dst.iter()) == [v * 2 for v in src.iter()]


def test_parallel_body_errors_propagate():
    g = Grid.from_value(3, 3, 0)

    def boom(pos):
        return g[(pos[0] + 3, pos[1])]

    with pytest.raises(OutOfBoundsError):
        g.par_iter_indices(workers=2).for_each(boom)
