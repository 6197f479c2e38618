import numpy as np
import pytest
import scipy.sparse as sp

from scprojection.errors import EmptyPartition
from scprojection.integration import (
    ConditionPartition,
    center_partition,
    center_partitions,
    partition_by_condition,
)


def test_centered_rows_have_zero_mean(rng):
    X = rng.gamma(2.0, size=(50, 80)) * 10
    parts = partition_by_condition(X, rng.choice(["a", "b"], size=80))

    for part in center_partitions(parts).values():
        np.testing.assert_allclose(part.centered.mean(axis=1), 0.0, atol=1e-9)


def test_center_is_feature_mean_and_invertible(rng):
    X = rng.random((10, 25))
    part = ConditionPartition(condition="a", indices=np.arange(25), matrix=X)

    centered = center_partition(part)

    np.testing.assert_allclose(centered.center, X.mean(axis=1))
    np.testing.assert_allclose(centered.centered + centered.center[:, None], X)
    assert centered.n_cells == 25
    assert centered.n_features == 10


def test_empty_partition_raises():
    part = ConditionPartition(condition="empty", indices=np.array([], dtype=int), matrix=np.ones((4, 0)))
    with pytest.raises(EmptyPartition, match="empty"):
        center_partition(part)


def test_sparse_matches_dense(rng):
    dense = rng.random((8, 20))
    dense[dense < 0.6] = 0
    idx = np.arange(20)

    from_dense = center_partition(ConditionPartition("a", idx, dense))
    from_sparse = center_partition(ConditionPartition("a", idx, sp.csc_matrix(dense)))

    np.testing.assert_allclose(from_sparse.center, from_dense.center)
    np.testing.assert_allclose(from_sparse.centered, from_dense.centered)


def test_single_cell_centers_to_zero():
    part = ConditionPartition("a", np.array([3]), np.array([[1.0], [2.0]]))
    centered = center_partition(part)
    np.testing.assert_array_equal(centered.centered, np.zeros((2, 1)))


def test_outputs_are_read_only(rng):
    part = ConditionPartition("a", np.arange(5), rng.random((3, 5)))
    centered = center_partition(part)
    assert not centered.center.flags.writeable
    assert not centered.centered.flags.writeable
    with pytest.raises(ValueError):
        centered.centered[0, 0] = 1.0
