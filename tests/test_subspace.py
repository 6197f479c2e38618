import numpy as np
import pytest
from sklearn.decomposition import PCA

from scprojection.errors import ConvergenceError, DegenerateInput, RankError
from scprojection.integration import (
    CenteredPartition,
    ConditionPartition,
    center_partition,
    fit_reference_basis,
)


def _centered(X, condition="ref"):
    return center_partition(ConditionPartition(condition, np.arange(X.shape[1]), X))


@pytest.fixture
def reference(offset_dataset):
    X, labels = offset_dataset
    return _centered(X[:, labels == "ctrl"], "ctrl")


def test_basis_is_orthonormal(reference):
    basis = fit_reference_basis(reference, 5)

    assert basis.rotation.shape == (500, 5)
    np.testing.assert_allclose(basis.rotation.T @ basis.rotation, np.eye(5), atol=1e-10)


def test_singular_values_descending(reference):
    basis = fit_reference_basis(reference, 5)
    assert np.all(np.diff(basis.singular_values) <= 0)
    assert np.all(np.diff(basis.explained_variance_ratio) <= 0)
    assert 0 < basis.explained_variance_ratio.sum() <= 1


def test_same_seed_same_basis(reference):
    first = fit_reference_basis(reference, 5, random_seed=7)
    second = fit_reference_basis(reference, 5, random_seed=7)
    np.testing.assert_allclose(first.rotation, second.rotation, atol=1e-12)
    assert first.random_seed == 7


def test_different_seeds_agree_up_to_sign(reference):
    first = fit_reference_basis(reference, 5, random_seed=1)
    second = fit_reference_basis(reference, 5, random_seed=2)
    np.testing.assert_allclose(
        np.abs(first.rotation.T @ second.rotation), np.eye(5), atol=1e-8
    )


def test_matches_full_pca_scores(reference, align_signs):
    basis = fit_reference_basis(reference, 5)
    projected = basis.rotation.T @ reference.centered

    direct = PCA(n_components=5, svd_solver="full").fit_transform(reference.centered.T).T

    np.testing.assert_allclose(align_signs(projected, direct), direct, atol=1e-6)


@pytest.mark.parametrize("n_components", [0, -1, 100, 501])
def test_rank_out_of_range(reference, n_components):
    # reference is 500 features x 100 cells, so the bound is 99
    with pytest.raises(RankError):
        fit_reference_basis(reference, n_components)


def test_rank_must_be_integer(reference):
    with pytest.raises(RankError, match="integer"):
        fit_reference_basis(reference, 2.5)


def test_zero_variance_is_degenerate():
    X = np.tile(np.arange(6.0)[:, None], (1, 20))
    with pytest.raises(DegenerateInput, match="zero variance"):
        fit_reference_basis(_centered(X), 2)


def test_constant_non_dyadic_rows_are_degenerate():
    # means of 0.1, 0.7, ... are inexact, centering leaves ~1e-15 residue
    values = np.array([0.1, 0.7, 1.3, 2.9, 0.3, 5.1])
    centered = _centered(np.tile(values[:, None], (1, 30)))
    assert np.abs(centered.centered).max() < 1e-12

    with pytest.raises(DegenerateInput, match="zero variance"):
        fit_reference_basis(centered, 1)


def test_small_but_real_variance_is_fitted(rng):
    X = 1e3 + 1e-6 * rng.normal(size=(6, 30))
    basis = fit_reference_basis(_centered(X), 1)
    assert basis.singular_values[0] > 0


def test_rank_deficient_is_degenerate(rng):
    # exact rank 2 in 10 features
    X = rng.normal(size=(10, 2)) @ rng.normal(size=(2, 50))
    centered = _centered(X)

    fit_reference_basis(centered, 2)
    with pytest.raises(DegenerateInput, match="fewer components"):
        fit_reference_basis(centered, 3)


def test_no_convergence_raises(rng):
    X = rng.normal(size=(300, 200))
    with pytest.raises(ConvergenceError):
        fit_reference_basis(_centered(X), 10, max_iter=1)


def test_basis_is_read_only(reference):
    basis = fit_reference_basis(reference, 3)
    assert not basis.rotation.flags.writeable
    assert basis.n_components == 3
    assert basis.n_features == 500
    assert basis.condition == "ctrl"


def test_accepts_prebuilt_centered_partition(rng):
    X = rng.normal(size=(6, 30))
    X -= X.mean(axis=1, keepdims=True)
    part = CenteredPartition("x", np.arange(30), np.zeros(6), X)
    basis = fit_reference_basis(part, 2)
    assert basis.rotation.shape == (6, 2)
