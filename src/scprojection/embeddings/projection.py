"""PCA embeddings with and without reference-projection integration.

This module provides two embeddings for a cells x features table:
1. `compute_pca` - Plain PCA on the pooled cells (no integration baseline)
2. `compute_projection_embedding` - Per-condition centering, PCA fitted on a
   reference condition, every condition projected onto that basis

The projection embedding is asymmetric in the choice of reference; the
reference cells get their exact PCA coordinates, all others are projected.
"""

from pathlib import Path
from typing import Hashable, Optional, Sequence, Union

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler

from scprojection.config import ProjectionConfig
from scprojection.embeddings.base import save_embedding
from scprojection.errors import InvalidInput
from scprojection.integration import IntegratedEmbedding, ReferenceBasis, integrate


def _as_cell_matrix(features: Union[pd.DataFrame, np.ndarray]) -> np.ndarray:
    if isinstance(features, pd.DataFrame):
        features = features.values
    features = np.asarray(features, dtype=np.float64)
    if features.ndim != 2:
        raise InvalidInput(f"features must be 2D (n_cells, n_features), got {features.shape}")
    return features


def compute_pca(
    features: Union[pd.DataFrame, np.ndarray],
    n_components: int = 50,
    scale: bool = False,
    random_state: int = 42,
) -> tuple[np.ndarray, PCA, dict]:
    """Compute an unintegrated PCA embedding of all cells together.

    Parameters
    ----------
    features : np.ndarray or pd.DataFrame
        Normalized features (n_cells, n_features)
    n_components : int
        Number of PCA components
    scale : bool
        Z-score features before PCA
    random_state : int
        Random seed for reproducibility

    Returns
    -------
    embeddings : np.ndarray
        PCA embeddings (n_cells, n_components)
    pca_model : PCA
        Fitted PCA model
    config : dict
        Configuration dictionary with method details
    """
    X = _as_cell_matrix(features)
    if scale:
        X = StandardScaler().fit_transform(X)

    pca = PCA(n_components=n_components, random_state=random_state)
    embeddings = pca.fit_transform(X)

    config = {
        "method": "pca",
        "n_components": n_components,
        "scale": scale,
        "variance_explained": float(pca.explained_variance_ratio_.sum()),
        "random_state": random_state,
    }
    return embeddings, pca, config


def compute_projection_embedding(
    features: Union[pd.DataFrame, np.ndarray],
    metadata: pd.DataFrame,
    condition_col: str,
    reference_condition: Hashable,
    n_components: int = 50,
    random_state: Optional[int] = 42,
    max_iter: int = 1000,
    tol: float = 0.0,
    degeneracy_ratio: float = 1e-10,
    conditions: Optional[Sequence[Hashable]] = None,
) -> tuple[np.ndarray, IntegratedEmbedding, dict]:
    """Integrate conditions by projecting them onto a reference PCA subspace.

    Parameters
    ----------
    features : np.ndarray or pd.DataFrame
        Normalized features (n_cells, n_features)
    metadata : pd.DataFrame
        Cell metadata aligned with ``features`` rows
    condition_col : str
        Column of ``metadata`` holding the condition label
    reference_condition : hashable
        Condition whose PCA basis defines the embedding
    n_components : int
        Embedding dimensionality
    random_state : int, optional
        Seed for the truncated SVD starting vector
    max_iter : int
        Iteration cap for the truncated SVD
    tol : float
        Convergence tolerance for the truncated SVD (0 = machine precision)
    degeneracy_ratio : float
        Smallest allowed ratio of the last to the first singular value
    conditions : sequence, optional
        Explicit condition identifiers

    Returns
    -------
    embeddings : np.ndarray
        Integrated embeddings (n_cells, n_components), rows in input order
    result : IntegratedEmbedding
        Full result including the basis and per-condition centers
    config : dict
        Configuration dictionary with method details
    """
    X = _as_cell_matrix(features)
    if condition_col not in metadata.columns:
        raise InvalidInput(f"Condition column '{condition_col}' not in metadata")
    if len(metadata) != X.shape[0]:
        raise InvalidInput(
            f"metadata has {len(metadata)} rows but features have {X.shape[0]} cells"
        )

    projection_config = ProjectionConfig(
        n_components=n_components,
        reference_condition=reference_condition,
        random_seed=random_state,
        max_iter=max_iter,
        tol=tol,
        degeneracy_ratio=degeneracy_ratio,
    )
    result = integrate(
        X.T,
        metadata[condition_col].to_numpy(),
        projection_config,
        conditions=conditions,
    )

    config = {
        "method": "manual_projection",
        "condition_col": condition_col,
        "conditions": [str(c) for c in result.conditions],
        "reference_condition": str(reference_condition),
        "n_components": n_components,
        "n_features": X.shape[1],
        "n_cells": X.shape[0],
        "variance_explained": float(result.basis.explained_variance_ratio.sum()),
        "random_state": random_state,
        "max_iter": max_iter,
        "tol": tol,
        "degeneracy_ratio": degeneracy_ratio,
    }
    return result.cell_embeddings(), result, config


def save_projection_embedding(
    output_dir: Union[str, Path],
    result: IntegratedEmbedding,
    metadata: pd.DataFrame,
    config: dict,
) -> Path:
    """Save a projection embedding plus its basis and centers.

    Writes the standardized files and ``basis.npz`` holding the rotation,
    singular values and one center vector per condition (rows follow
    ``conditions``, stored as strings).
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    basis = result.basis
    np.savez(
        output_dir / "basis.npz",
        rotation=basis.rotation,
        singular_values=basis.singular_values,
        explained_variance=basis.explained_variance,
        explained_variance_ratio=basis.explained_variance_ratio,
        reference_condition=np.array(str(result.reference_condition)),
        conditions=np.array([str(c) for c in result.conditions]),
        centers=np.vstack([result.centers[c] for c in result.conditions]),
    )

    return save_embedding(
        output_dir,
        result.cell_embeddings(),
        metadata,
        method="manual_projection",
        config=config,
        extra_files={"basis": "basis.npz"},
    )


def load_projection_basis(path: Union[str, Path]) -> tuple[ReferenceBasis, dict[str, np.ndarray]]:
    """Load the basis and per-condition centers written by `save_projection_embedding`.

    Parameters
    ----------
    path : Path
        ``basis.npz`` file or the directory containing it

    Returns
    -------
    basis : ReferenceBasis
    centers : dict
        Mapping from condition (as string) to its center vector
    """
    path = Path(path)
    if path.is_dir():
        path = path / "basis.npz"
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with np.load(path) as data:
        basis = ReferenceBasis(
            condition=str(data["reference_condition"]),
            rotation=data["rotation"],
            singular_values=data["singular_values"],
            explained_variance=data["explained_variance"],
            explained_variance_ratio=data["explained_variance_ratio"],
        )
        centers = {str(c): row for c, row in zip(data["conditions"], data["centers"])}

    return basis, centers
