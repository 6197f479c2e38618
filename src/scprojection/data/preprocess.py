"""Upstream normalization and feature selection for count tables.

The integration itself never normalizes. These helpers run scanpy's standard
recipe on a cells x genes array: library-size normalization with log1p, then
highly-variable gene selection on the log data.
"""

import numpy as np
import pandas as pd
import scanpy as sc
from anndata import AnnData


def _as_anndata(matrix: pd.DataFrame | np.ndarray) -> AnnData:
    if isinstance(matrix, pd.DataFrame):
        matrix = matrix.values
    return AnnData(X=np.array(matrix, dtype=np.float64))


def log_normalize(
    counts: pd.DataFrame | np.ndarray,
    target_sum: float = 1e4,
) -> np.ndarray:
    """Scale each cell to ``target_sum`` total counts and apply log1p.

    Cells with no counts stay at zero.

    Args:
        counts: Raw counts (cells x genes)
        target_sum: Total counts per cell after scaling

    Returns:
        Log-normalized matrix (cells x genes)
    """
    adata = _as_anndata(counts)
    if (adata.X < 0).any():
        raise ValueError("Counts must be non-negative")

    sc.pp.normalize_total(adata, target_sum=target_sum)
    sc.pp.log1p(adata)
    return np.asarray(adata.X)


def select_variable_features(
    features: pd.DataFrame | np.ndarray,
    n_top: int = 500,
    flavor: str = "seurat",
) -> np.ndarray:
    """Indices of the ``n_top`` highly variable features.

    Args:
        features: Log-normalized matrix (cells x features)
        n_top: Number of features to keep
        flavor: ``sc.pp.highly_variable_genes`` flavor

    Returns:
        Column indices of the selected features, in original column order
    """
    adata = _as_anndata(features)
    if n_top >= adata.n_vars:
        return np.arange(adata.n_vars)

    sc.pp.highly_variable_genes(adata, n_top_genes=n_top, flavor=flavor)
    return np.flatnonzero(adata.var["highly_variable"].to_numpy())
