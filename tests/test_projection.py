import numpy as np
import pytest

from scprojection.errors import InvalidInput, PartitionMismatch
from scprojection.integration import (
    CenteredPartition,
    center_partitions,
    fit_reference_basis,
    partition_by_condition,
    project_partition,
    project_partitions,
)


@pytest.fixture
def interleaved(rng):
    X = rng.gamma(3.0, size=(30, 60))
    labels = rng.choice(["ctrl", "stim", "other"], size=60)
    centered = center_partitions(partition_by_condition(X, labels))
    basis = fit_reference_basis(centered["ctrl"], 4)
    return X, labels, centered, basis


def test_columns_written_back_in_original_order(interleaved):
    X, labels, centered, basis = interleaved

    embedding = project_partitions(basis, centered, X.shape[1])

    assert embedding.shape == (4, 60)
    for i in range(X.shape[1]):
        center = centered[labels[i]].center
        expected = basis.rotation.T @ (X[:, i] - center)
        np.testing.assert_allclose(embedding[:, i], expected, atol=1e-10)


def test_tagged_columns_survive_projection(rng):
    # The first feature tags each cell with its own column index; with a
    # one-column basis on that feature the embedding reproduces the tags.
    n_cells = 40
    X = rng.random((3, n_cells)) * 1e-3
    X[0] = np.arange(n_cells)
    labels = np.where(rng.random(n_cells) < 0.5, "a", "b")
    labels[:2] = ["a", "b"]

    centered = center_partitions(partition_by_condition(X, labels))
    basis = fit_reference_basis(centered["a"], 1)
    embedding = project_partitions(basis, centered, n_cells)

    for condition, part in centered.items():
        tags = X[0, part.indices] - part.center[0]
        np.testing.assert_allclose(np.abs(embedding[0, part.indices]), np.abs(tags), rtol=1e-3, atol=1e-3)


def test_missing_cells_raise(interleaved):
    X, _, centered, basis = interleaved
    with pytest.raises(PartitionMismatch, match="columns"):
        project_partitions(basis, centered, X.shape[1] + 1)


def test_overlapping_partitions_raise(interleaved):
    _, _, centered, basis = interleaved
    ctrl = centered["ctrl"]
    k = centered["other"].n_cells
    clash = CenteredPartition(
        "clash", np.resize(ctrl.indices, k), ctrl.center, np.zeros((ctrl.n_features, k))
    )
    parts = {"ctrl": ctrl, "stim": centered["stim"], "clash": clash}
    with pytest.raises(PartitionMismatch, match="overlaps"):
        project_partitions(basis, parts, 60)


def test_out_of_range_indices_raise(interleaved):
    _, _, centered, basis = interleaved
    ctrl = centered["ctrl"]
    shifted = CenteredPartition("ctrl", ctrl.indices + 1000, ctrl.center, ctrl.centered)
    with pytest.raises(PartitionMismatch, match="out of range"):
        project_partitions(basis, {"ctrl": shifted}, ctrl.n_cells)


def test_feature_mismatch_raises(interleaved):
    _, _, _, basis = interleaved
    wrong = CenteredPartition("x", np.arange(3), np.zeros(5), np.zeros((5, 3)))
    with pytest.raises(InvalidInput, match="features"):
        project_partition(basis, wrong)
