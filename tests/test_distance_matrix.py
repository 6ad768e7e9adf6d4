import random

import numpy as np
import pytest

from tourmatrix.core.floats import approx_gt
from tourmatrix.core.geo import Coordinate, round_distance
from tourmatrix.matrix.distance import DistanceMatrixBuilder


RECTANGLE = [Coordinate(0, 0), Coordinate(0, 3), Coordinate(4, 0), Coordinate(4, 3)]


def _random_points(n: int, seed: int = 7) -> list[Coordinate]:
    rng = random.Random(seed)
    return [Coordinate(lat=rng.uniform(-50, 50), lng=rng.uniform(-50, 50)) for _ in range(n)]


def _both_modes(locations, *, rounded=False):
    eager = DistanceMatrixBuilder(locations=locations, precompute=True, rounded=rounded).build()
    lazy = DistanceMatrixBuilder(locations=locations, precompute=False, rounded=rounded).build()
    return eager, lazy


def test_rectangle_distances_and_max():
    dm = DistanceMatrixBuilder(locations=RECTANGLE, precompute=True).build()
    assert dm.precomputed
    assert dm.size() == 4
    assert dm.get(0, 1) == 3.0
    assert dm.get(0, 2) == 4.0
    assert dm.get(1, 2) == 5.0
    assert dm.max() == 5.0


def test_builder_defaults_to_lazy_empty_matrix():
    dm = DistanceMatrixBuilder().build()
    assert not dm.precomputed
    assert not dm.rounded
    assert dm.size() == 0
    assert dm.max() is None


def test_precomputed_matrix_is_symmetric_with_zero_diagonal():
    dm = DistanceMatrixBuilder(locations=_random_points(25), precompute=True).build()
    for i in range(25):
        assert dm.get(i, i) == 0.0
        for j in range(25):
            assert dm.get(i, j) == dm.get(j, i)


@pytest.mark.parametrize("rounded", [False, True])
def test_precomputed_and_lazy_modes_agree(rounded):
    eager, lazy = _both_modes(_random_points(20), rounded=rounded)
    for i in range(20):
        for j in range(20):
            assert eager.get(i, j) == pytest.approx(lazy.get(i, j))


def test_rounded_distances_are_integers():
    eager, lazy = _both_modes(_random_points(15), rounded=True)
    for dm in (eager, lazy):
        for i in range(15):
            for j in range(15):
                d = dm.get(i, j)
                assert d == pytest.approx(round(d))


def test_rounding_is_half_away_from_zero():
    locations = [Coordinate(0, 0), Coordinate(0, 2.5)]
    eager, lazy = _both_modes(locations, rounded=True)
    assert eager.get(0, 1) == 3.0
    assert lazy.get(0, 1) == 3.0


def test_max_matches_largest_pairwise_distance():
    points = _random_points(30)
    eager, lazy = _both_modes(points)
    expected = max(eager.get(i, j) for i in range(30) for j in range(30) if i != j)
    assert eager.max() == pytest.approx(expected)
    assert lazy.max() is None


@pytest.mark.parametrize("points", [[], [Coordinate(1, 1)]])
def test_max_is_none_with_fewer_than_two_locations(points):
    dm = DistanceMatrixBuilder(locations=points, precompute=True).build()
    assert dm.max() is None


@pytest.mark.parametrize("row, col, number", [(0, 0, 16), (1, 2, 5), (2, 3, 5), (3, 3, 1), (0, 1, 0)])
def test_get_vec_wraps_rows_identically_in_both_modes(row, col, number):
    eager, lazy = _both_modes(RECTANGLE)
    n = eager.size()

    expected = []
    r, c = row, col
    for _ in range(number):
        expected.append(eager.get(r, c))
        if c < n - 1:
            c += 1
        else:
            r, c = r + 1, 0

    np.testing.assert_array_equal(eager.get_vec(row, col, number), expected)
    np.testing.assert_array_equal(lazy.get_vec(row, col, number), expected)


def test_get_vec_rejects_spans_past_the_end():
    eager, lazy = _both_modes(RECTANGLE)
    for dm in (eager, lazy):
        with pytest.raises(IndexError):
            dm.get_vec(3, 2, 3)
        with pytest.raises(IndexError):
            dm.get_vec(4, 0, 1)


@pytest.mark.parametrize("precompute", [False, True])
def test_get_rejects_out_of_range_indices(precompute):
    dm = DistanceMatrixBuilder(locations=RECTANGLE, precompute=precompute).build()
    with pytest.raises(IndexError):
        dm.get(4, 0)
    with pytest.raises(IndexError):
        dm.get(0, -1)


def test_approx_gt_ignores_floating_point_noise():
    assert not approx_gt(1.0 + 1e-12, 1.0)
    assert not approx_gt(1.0, 1.0)
    assert approx_gt(1.001, 1.0)


@pytest.mark.parametrize(
    "offset, expected",
    [
        (0.49999999999999994, 0.0),
        (2.0**52 + 1, 2.0**52 + 1),
        (2.5, 3.0),
        (1.4, 1.0),
    ],
)
def test_rounding_does_not_drift_near_half_or_large_integers(offset, expected):
    assert round_distance(offset) == expected
    eager, lazy = _both_modes([Coordinate(0, 0), Coordinate(0, offset)], rounded=True)
    for dm in (eager, lazy):
        assert dm.get(0, 1) == expected
        assert dm.get_vec(0, 0, 2).tolist() == [0.0, expected]


@pytest.mark.parametrize("precompute", [False, True])
def test_get_vec_result_is_read_only(precompute):
    dm = DistanceMatrixBuilder(locations=RECTANGLE, precompute=precompute).build()
    out = dm.get_vec(1, 2, 4)
    with pytest.raises(ValueError):
        out[0] = 99.0


@pytest.mark.parametrize("rounded", [False, True])
def test_lazy_get_vec_matches_scalar_get_bit_for_bit(rounded):
    points = _random_points(12, seed=3)
    eager, lazy = _both_modes(points, rounded=rounded)
    vec = lazy.get_vec(2, 7, 60).tolist()
    cells = [divmod(k, 12) for k in range(2 * 12 + 7, 2 * 12 + 7 + 60)]
    assert vec == [lazy.get(r, c) for r, c in cells]
    assert vec == eager.get_vec(2, 7, 60).tolist()
