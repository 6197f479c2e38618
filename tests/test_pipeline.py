import numpy as np
import pytest
import scipy.sparse as sp
from sklearn.decomposition import PCA

from scprojection import (
    EmptyPartition,
    InvalidInput,
    ProjectionConfig,
    RankError,
    integrate,
)
from scprojection.analysis import centroid_distance
from scprojection.embeddings import compute_pca


@pytest.fixture
def config():
    return ProjectionConfig(n_components=5, reference_condition="ctrl", random_seed=0)


def test_end_to_end_offset_scenario(offset_dataset, config, align_signs):
    X, labels = offset_dataset
    assert X.shape == (500, 200)

    result = integrate(X, labels, config)

    assert result.embedding.shape == (5, 200)
    assert result.conditions == ("ctrl", "stim")
    assert result.reference_condition == "ctrl"

    # reference cells get exactly their own PCA coordinates
    ctrl = labels == "ctrl"
    direct = PCA(n_components=5, svd_solver="full").fit_transform(X[:, ctrl].T).T
    projected = result.embedding[:, ctrl]
    np.testing.assert_allclose(align_signs(projected, direct), direct, atol=1e-6)

    # the stim offset is gone from the integrated space
    raw = centroid_distance(X.T, labels)
    integrated = centroid_distance(result.cell_embeddings(), labels)
    baseline, _, _ = compute_pca(X.T, n_components=5)
    assert raw > 5.0
    assert integrated < 1e-8
    assert integrated < centroid_distance(baseline, labels)


def test_centers_recover_offset(offset_dataset, config):
    X, labels = offset_dataset
    result = integrate(X, labels, config)

    shift = result.centers["stim"] - result.centers["ctrl"]
    np.testing.assert_allclose(shift[:10], 2.0, atol=0.5)
    assert np.abs(shift[10:]).max() < 0.75


def test_interleaved_labels_keep_column_order(config):
    from scprojection.data import make_condition_offset_dataset

    X, labels = make_condition_offset_dataset(interleave=True, random_state=3)
    result = integrate(X, labels, config)

    np.testing.assert_array_equal(result.labels, labels)
    for i in (0, 1, 57, 198, 199):
        center = result.centers[labels[i]]
        np.testing.assert_allclose(
            result.embedding[:, i], result.basis.rotation.T @ (X[:, i] - center), atol=1e-10
        )


def test_sparse_input_matches_dense(offset_dataset, config):
    X, labels = offset_dataset
    dense = integrate(X, labels, config)
    sparse = integrate(sp.csr_matrix(X), labels, config)
    np.testing.assert_allclose(sparse.embedding, dense.embedding, atol=1e-8)


def test_rank_above_feature_count(offset_dataset):
    X, labels = offset_dataset
    with pytest.raises(RankError):
        integrate(X, labels, ProjectionConfig(n_components=501, reference_condition="ctrl"))


def test_condition_without_cells(offset_dataset, config):
    X, labels = offset_dataset
    with pytest.raises(EmptyPartition):
        integrate(X, labels, config, conditions=["ctrl", "stim", "ko"])


def test_unknown_reference(offset_dataset):
    X, labels = offset_dataset
    with pytest.raises(InvalidInput, match="Reference condition"):
        integrate(X, labels, ProjectionConfig(n_components=5, reference_condition="ko"))


def test_reference_choice_is_reproducible(offset_dataset, config):
    X, labels = offset_dataset
    first = integrate(X, labels, config)
    second = integrate(X, labels, config)
    np.testing.assert_allclose(first.embedding, second.embedding, atol=1e-12)


def test_result_is_read_only(offset_dataset, config):
    X, labels = offset_dataset
    result = integrate(X, labels, config)
    assert not result.embedding.flags.writeable
    assert not result.centers["ctrl"].flags.writeable
    assert result.cell_embeddings().shape == (200, 5)
    assert result.condition_mask("stim").sum() == 100
