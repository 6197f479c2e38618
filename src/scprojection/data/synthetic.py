"""Synthetic datasets for the integration scenarios.

Matrices are returned in expression-matrix layout, (n_features, n_cells),
together with one condition label per cell.
"""

import numpy as np


def make_condition_offset_dataset(
    n_features: int = 500,
    n_cells_per_condition: int = 100,
    conditions: tuple[str, str] = ("ctrl", "stim"),
    offset: float = 2.0,
    n_offset_features: int = 10,
    factor_scales: tuple[float, ...] = (10.0, 8.0, 6.0, 5.0, 4.0),
    noise: float = 0.3,
    baseline: float = 10.0,
    interleave: bool = False,
    random_state: int = 0,
) -> tuple[np.ndarray, np.ndarray]:
    """Low-rank expression data for two conditions with a mean offset.

    Cells of both conditions share the same latent programs (orthonormal
    gene loadings with decreasing scale) plus Gaussian noise. The second
    condition gets ``+offset`` on its first ``n_offset_features`` features.

    Args:
        n_features: Number of features (genes)
        n_cells_per_condition: Cells in each condition
        conditions: Labels of the (unshifted, shifted) conditions
        offset: Mean shift added to the second condition
        n_offset_features: Number of leading features that are shifted
        factor_scales: Standard deviation of each latent program
        noise: Standard deviation of per-entry noise
        baseline: Constant expression level, keeps values non-negative
        interleave: Alternate conditions column by column instead of blocks
        random_state: Random seed

    Returns:
        Tuple of (matrix (n_features, n_cells), labels (n_cells,))
    """
    rng = np.random.default_rng(random_state)
    n_cells = 2 * n_cells_per_condition
    n_factors = len(factor_scales)

    loadings, _ = np.linalg.qr(rng.normal(size=(n_features, n_factors)))
    scores = rng.normal(size=(n_factors, n_cells)) * np.asarray(factor_scales)[:, None]
    matrix = baseline + loadings @ scores + noise * rng.normal(size=(n_features, n_cells))

    labels = np.repeat(np.array(conditions, dtype=object), n_cells_per_condition)
    if interleave:
        labels = np.tile(np.array(conditions, dtype=object), n_cells_per_condition)

    matrix[:n_offset_features, labels == conditions[1]] += offset
    return np.clip(matrix, 0.0, None), labels


def make_ellipsoid_pair(
    n_cells_per_condition: int = 300,
    axes: tuple[float, float, float] = (10.0, 4.0, 1.0),
    axes_b: tuple[float, float, float] | None = None,
    shift: float = 5.0,
    conditions: tuple[str, str] = ("A", "B"),
    random_state: int = 0,
) -> tuple[np.ndarray, np.ndarray]:
    """Two 3-D Gaussian ellipsoid clouds, the second shifted along z.

    Condition A is an axis-aligned ellipsoid whose two longest axes are x and
    y. Condition B is drawn independently from the same ellipsoid (or one with
    ``axes_b``) and shifted by ``shift`` along z, orthogonal to A's two
    longest principal axes.

    Args:
        n_cells_per_condition: Points per condition
        axes: Standard deviations of A along x, y, z
        axes_b: Standard deviations of B; defaults to ``axes``
        shift: Offset of B along z
        conditions: Labels of (A, B)
        random_state: Random seed

    Returns:
        Tuple of (matrix (3, n_cells), labels (n_cells,))
    """
    rng = np.random.default_rng(random_state)
    axes_b = axes if axes_b is None else axes_b

    a = rng.normal(size=(3, n_cells_per_condition)) * np.asarray(axes)[:, None]
    b = rng.normal(size=(3, n_cells_per_condition)) * np.asarray(axes_b)[:, None]
    b[2] += shift

    matrix = np.hstack([a, b])
    labels = np.repeat(np.array(conditions, dtype=object), n_cells_per_condition)
    return matrix, labels
