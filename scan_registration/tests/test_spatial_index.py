import numpy as np
import pytest

from scan_registration.errors import EmptyIndexError
from scan_registration.spatial_index import SpatialIndex


def test_empty_target_is_rejected():
    with pytest.raises(EmptyIndexError):
        SpatialIndex(np.zeros((0, 3)))


def test_wrong_shape_is_rejected():
    with pytest.raises(ValueError):
        SpatialIndex(np.zeros((4, 2)))


def test_nearest_neighbor_returns_row_and_squared_distance():
    target = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 2.0, 0.0],
    ])
    index = SpatialIndex(target)

    row, sq_dist = index.nearest_neighbor([0.9, 0.1, 0.0])

    assert row == 1
    assert sq_dist == pytest.approx(0.02)


def test_index_keeps_its_own_copy():
    target = np.eye(3)
    index = SpatialIndex(target)
    target[:] = 100.0

    row, sq_dist = index.nearest_neighbor([1.0, 0.0, 0.0])
    assert row == 0
    assert sq_dist == pytest.approx(0.0)


def test_batched_query_matches_brute_force():
    rng = np.random.default_rng(3)
    target = rng.uniform(-1, 1, size=(200, 3))
    queries = rng.uniform(-1, 1, size=(50, 3))

    rows, sq_dists = SpatialIndex(target).query(queries)

    brute = ((queries[:, None, :] - target[None, :, :]) ** 2).sum(axis=2)
    np.testing.assert_array_equal(rows, brute.argmin(axis=1))
    np.testing.assert_allclose(sq_dists, brute.min(axis=1), rtol=1e-10, atol=1e-12)
