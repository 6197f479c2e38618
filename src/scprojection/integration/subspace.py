"""Fit the reference PCA subspace with a truncated Lanczos SVD.

Only the top P directions are needed, so the factorization uses ARPACK's
implicitly restarted Lanczos iteration (``scipy.sparse.linalg.svds``) instead
of a full dense SVD. The random starting vector is drawn from an explicit
seed, and column signs are fixed with ``svd_flip`` so that a given seed always
yields the same basis. Signs carry no meaning: a column and its negation span
the same direction.
"""

import logging
from typing import Optional

import numpy as np
from scipy.sparse.linalg import ArpackNoConvergence, svds
from sklearn.utils.extmath import svd_flip

from scprojection.errors import ConvergenceError, DegenerateInput, RankError
from scprojection.integration.types import CenteredPartition, ReferenceBasis

logger = logging.getLogger(__name__)


def max_rank(n_features: int, n_cells: int) -> int:
    """Largest rank the truncated factorization can return."""
    return min(n_features, n_cells) - 1


def check_rank(n_components: int, n_features: int, n_cells: int) -> None:
    """Raise ``RankError`` unless 1 <= n_components <= min(F, n) - 1."""
    if isinstance(n_components, bool) or not isinstance(n_components, (int, np.integer)):
        raise RankError(f"n_components must be an integer, got {n_components!r}")
    upper = max_rank(n_features, n_cells)
    if n_components < 1 or n_components > upper:
        raise RankError(
            f"n_components={n_components} is outside the feasible range [1, {upper}] "
            f"for a reference with {n_features} features and {n_cells} cells"
        )


def fit_reference_basis(
    centered: CenteredPartition,
    n_components: int,
    random_seed: Optional[int] = 42,
    max_iter: int = 1000,
    tol: float = 0.0,
    degeneracy_ratio: float = 1e-10,
) -> ReferenceBasis:
    """Compute the rank-P PCA rotation of the reference condition.

    Parameters
    ----------
    centered : CenteredPartition
        Reference condition after centering, shape (n_features, n_cells)
    n_components : int
        Target rank P, 1 <= P <= min(n_features, n_cells) - 1
    random_seed : int, optional
        Seed for the ARPACK starting vector. None uses ARPACK's own random
        start and is not reproducible.
    max_iter : int
        Maximum number of Arnoldi update iterations
    tol : float
        Relative accuracy for singular values; 0 means machine precision
    degeneracy_ratio : float
        Minimum allowed ratio of the P-th to the largest singular value

    Returns
    -------
    ReferenceBasis
        Orthonormal (n_features, P) rotation ordered by descending singular value

    Raises
    ------
    RankError
        If ``n_components`` is outside the feasible range.
    DegenerateInput
        If the data has numerical rank below ``n_components``.
    ConvergenceError
        If ARPACK does not converge within ``max_iter`` iterations.
    """
    X = centered.centered
    n_features, n_cells = X.shape
    check_rank(n_components, n_features, n_cells)

    # Centering constant features leaves rounding noise of order eps * |center|,
    # so anything at or below that scale is treated as no variance at all.
    noise_floor = (
        np.finfo(np.float64).eps
        * max(n_features, n_cells)
        * max(1.0, float(np.abs(centered.center).max(initial=0.0)))
        * np.sqrt(n_cells)
    )
    scale = float(np.linalg.norm(X))
    if scale <= noise_floor:
        raise DegenerateInput(
            f"Reference condition {centered.condition!r} has near-zero variance after "
            f"centering (norm {scale:.3g} <= rounding floor {noise_floor:.3g})"
        )

    v0 = None
    if random_seed is not None:
        rng = np.random.default_rng(random_seed)
        v0 = rng.uniform(-1, 1, min(X.shape))

    try:
        u, s, vt = svds(
            X,
            k=int(n_components),
            tol=tol,
            maxiter=max_iter,
            v0=v0,
            solver="arpack",
        )
    except ArpackNoConvergence as exc:
        raise ConvergenceError(
            f"Truncated SVD did not converge in {max_iter} iterations "
            f"({len(exc.eigenvalues)} of {n_components} components converged)"
        ) from exc

    # svds returns singular values in ascending order
    order = np.argsort(s)[::-1]
    u, s, vt = u[:, order], s[order], vt[order]

    if s[0] <= 0 or s[-1] / s[0] < degeneracy_ratio:
        ratio = s[-1] / s[0] if s[0] > 0 else 0.0
        raise DegenerateInput(
            f"Reference condition {centered.condition!r} has numerical rank below "
            f"{n_components} (singular value ratio {ratio:.3g} < {degeneracy_ratio:g}); "
            "request fewer components"
        )

    u, vt = svd_flip(u, vt)

    explained_variance = s**2 / (n_cells - 1)
    total_variance = float(np.sum(X**2)) / (n_cells - 1)

    logger.info(
        "Fitted %d-component basis on %r (%d features x %d cells), variance explained %.1f%%",
        n_components,
        centered.condition,
        n_features,
        n_cells,
        100 * explained_variance.sum() / total_variance,
    )

    return ReferenceBasis(
        condition=centered.condition,
        rotation=np.ascontiguousarray(u),
        singular_values=s,
        explained_variance=explained_variance,
        explained_variance_ratio=explained_variance / total_variance,
        random_seed=random_seed,
    )
