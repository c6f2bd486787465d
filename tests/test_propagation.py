"""Per-cell propagation rule and attenuation policies."""

import numpy as np
import pytest

from lightfield.attenuation import DirectionalThroughput, InverseDistance, make_policy
from lightfield.cell import Cell
from lightfield.errors import GridSizeError
from lightfield.grid import Grid
from lightfield.propagation import PropagationRule, neighbor_coords, next_cell
from lightfield.simulation import propagate


def field(width, height, quantities=None, targets=None):
    """Grid of self-targeting cells, with optional per-coordinate overrides."""
    quantities = quantities or {}
    targets = targets or {}
    return Grid.from_fn(width, height, lambda x, y: Cell(
        quantity=quantities.get((x, y), 0.0),
        target=targets.get((x, y), (x, y)),
    ))


# ── Neighborhood ──────────────────────────────────────────────────────────────

def test_neighbor_order_is_left_up_right_down():
    assert list(neighbor_coords((1, 1), (3, 3))) == [(0, 1), (1, 0), (2, 1), (1, 2)]


@pytest.mark.parametrize("pos,count", [((0, 0), 2), ((3, 3), 2), ((1, 0), 3), ((0, 2), 3), ((2, 2), 4)])
def test_neighbor_count_depends_on_position(pos, count):
    assert len(list(neighbor_coords(pos, (4, 4)))) == count


def test_corner_only_sees_right_and_down():
    assert list(neighbor_coords((0, 0), (4, 4))) == [(1, 0), (0, 1)]


# ── Attenuation ───────────────────────────────────────────────────────────────

def test_self_source_is_unattenuated():
    g = field(3, 3, quantities={(1, 1): 0.7})
    for policy in (DirectionalThroughput(0.25), InverseDistance(0.25)):
        assert policy.received(g, (1, 1), (1, 1)) == 0.7


def test_throughput_is_zero_outside_the_beam():
    g = field(3, 3, quantities={(2, 0): 1.0})
    policy = DirectionalThroughput(0.25)
    assert policy.throughput(g, (2, 0), (0, 0)) == 0.0
    assert policy.received(g, (2, 0), (0, 0)) == 0.0


def test_throughput_along_a_lit_axis():
    g = field(3, 3, quantities={(2, 0): 1.0}, targets={(1, 0): (2, 0)})
    policy = DirectionalThroughput(0.25)
    assert policy.throughput(g, (2, 0), (0, 0)) == 1.0
    assert policy.received(g, (2, 0), (0, 0)) == pytest.approx(1.0 / (2 * 0.25 + 1))


def test_diagonal_throughput_counts_each_lit_axis():
    g = field(3, 3, quantities={(1, 1): 1.0}, targets={(1, 0): (1, 1)})
    policy = DirectionalThroughput(0.25)
    assert policy.throughput(g, (1, 1), (0, 0)) == pytest.approx(0.5)

    g = field(3, 3, quantities={(1, 1): 1.0}, targets={(1, 0): (1, 1), (0, 1): (1, 1)})
    assert policy.throughput(g, (1, 1), (0, 0)) == pytest.approx(1.0)


def test_inverse_distance_decreases_with_range():
    g = field(8, 2, quantities={(0, 0): 1.0})
    policy = InverseDistance(0.25)
    values = [policy.received(g, (0, 0), (x, 0)) for x in range(1, 8)]
    assert all(v > 0 for v in values)
    assert all(a > b for a, b in zip(values, values[1:]))


def test_make_policy():
    assert isinstance(make_policy("throughput"), DirectionalThroughput)
    assert isinstance(make_policy("distance", offset=2.0), InverseDistance)
    with pytest.raises(ValueError):
        make_policy("raytraced")
    with pytest.raises(ValueError):
        DirectionalThroughput(0.0)


# ── Rule ──────────────────────────────────────────────────────────────────────

def test_factors_must_be_in_unit_range():
    with pytest.raises(ValueError):
        PropagationRule(accumulation=1.5)
    with pytest.raises(ValueError):
        PropagationRule(blur=-0.1)


def test_corner_averages_only_in_bounds_neighbors():
    g = field(3, 3, quantities={(1, 0): 0.4, (0, 1): 0.8, (1, 1): 100.0})
    rule = PropagationRule(accumulation=0.0, blur=1.0)
    cell = rule.next_cell((0, 0), g)
    assert cell.quantity == pytest.approx(0.6)


def test_interior_averages_four_neighbors():
    g = field(3, 3, quantities={(0, 1): 0.1, (1, 0): 0.2, (2, 1): 0.3, (1, 2): 0.4})
    rule = PropagationRule(accumulation=0.0, blur=1.0)
    assert rule.next_cell((1, 1), g).quantity == pytest.approx(0.25)


def test_re_election_picks_the_strongest_neighbor_target():
    g = field(3, 3, quantities={(1, 0): 0.4, (0, 1): 0.8})
    rule = PropagationRule(accumulation=1.0, blur=0.0)
    cell = rule.next_cell((0, 0), g)
    assert cell.target == (0, 1)
    assert cell.quantity == pytest.approx(0.8 / 1.25)


def test_ties_keep_the_incumbent():
    g = field(3, 3, targets={(0, 0): (1, 0)})
    cell = next_cell((0, 0), g)
    assert cell.target == (1, 0)


def test_self_sourcing_cell_keeps_its_quantity_without_blur():
    g = field(3, 3, quantities={(1, 1): 0.9})
    cell = PropagationRule(accumulation=0.5, blur=0.0).next_cell((1, 1), g)
    assert cell.target == (1, 1)
    assert cell.quantity == pytest.approx(0.9)


def test_rule_reads_only_the_reader():
    g = field(3, 3, quantities={(1, 1): 1.0})
    before = g.clone()
    for pos in g.iter_indices():
        next_cell(pos, g)
    assert g == before


def test_vector_quantities():
    g = Grid.from_fn(3, 3, lambda x, y: Cell(np.zeros(3, dtype=np.float32), (x, y)))
    g[(1, 0)] = Cell(np.array([1.0, 0.5, 0.0], dtype=np.float32), (1, 0))
    cell = PropagationRule(accumulation=1.0, blur=0.0).next_cell((0, 0), g)
    assert cell.target == (1, 0)
    np.testing.assert_allclose(cell.quantity, np.array([1.0, 0.5, 0.0]) / 1.25, rtol=1e-6)


@pytest.mark.parametrize("workers", [2, 5])
def test_parallel_partitioning_is_bit_identical(workers):
    rng = np.random.default_rng(7)
    g = Grid.from_fn(9, 7, lambda x, y: Cell(
        quantity=float(rng.random()),
        target=(int(rng.integers(0, 9)), int(rng.integers(0, 7))),
    ))
    rule = PropagationRule(accumulation=0.6, blur=0.2)

    sequential = g.clone()
    parallel = g.clone()
    propagate(g, sequential, rule)
    propagate(g, parallel, rule, parallel=True, workers=workers)
    assert parallel == sequential


def test_single_cell_grid_has_no_neighbors():
    g = field(1, 1)
    with pytest.raises(GridSizeError):
        PropagationRule().next_cell((0, 0), g)
