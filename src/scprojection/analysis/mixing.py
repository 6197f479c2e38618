"""
Condition mixing assessment for integrated embeddings.

All functions take cells-first arrays, shape (n_cells, n_dims).
"""

import logging
from dataclasses import dataclass
from itertools import combinations
from typing import Dict, Hashable, Optional

import numpy as np
import pandas as pd
from scipy.spatial import procrustes
from sklearn.metrics import silhouette_score

from scprojection.config import ProjectionConfig
from scprojection.integration import IntegratedEmbedding, integrate

logger = logging.getLogger(__name__)


def centroid_distance(
    embeddings: np.ndarray,
    condition_labels: np.ndarray,
) -> float:
    """
    Mean pairwise Euclidean distance between condition centroids.

    Lower = conditions sit closer together. Zero when every condition is
    centered at the same point.

    Parameters
    ----------
    embeddings : np.ndarray
        Cell embeddings, shape (n_cells, n_dims)
    condition_labels : np.ndarray
        Condition label for each cell

    Returns
    -------
    float
        Mean distance over all condition pairs (NaN with fewer than 2 conditions)
    """
    condition_labels = np.asarray(condition_labels)
    unique_conditions = pd.unique(condition_labels)
    if len(unique_conditions) < 2:
        return np.nan

    centroids = [embeddings[condition_labels == c].mean(axis=0) for c in unique_conditions]
    distances = [np.linalg.norm(a - b) for a, b in combinations(centroids, 2)]
    return float(np.mean(distances))


def condition_mixing_score(
    embeddings: np.ndarray,
    condition_labels: np.ndarray,
    sample_size: Optional[int] = 10000,
    seed: int = 42,
) -> float:
    """
    Compute condition mixing score based on silhouette score.

    Lower silhouette score by condition = better mixing.
    We return NEGATIVE silhouette so higher = better mixing.

    Parameters
    ----------
    embeddings : np.ndarray
        Cell embeddings, shape (n_cells, n_dims)
    condition_labels : np.ndarray
        Condition label for each cell
    sample_size : int, optional
        Subsample for efficiency. None = use all.
    seed : int
        Random seed for subsampling

    Returns
    -------
    float
        Negative silhouette score (higher = better mixing)
    """
    condition_labels = np.asarray(condition_labels)
    if sample_size is not None and len(embeddings) > sample_size:
        rng = np.random.default_rng(seed)
        idx = rng.choice(len(embeddings), sample_size, replace=False)
        embeddings = embeddings[idx]
        condition_labels = condition_labels[idx]

    if len(pd.unique(condition_labels)) < 2:
        return np.nan

    return -float(silhouette_score(embeddings, condition_labels))


def within_between_variance_ratio(
    embeddings: np.ndarray,
    condition_labels: np.ndarray,
) -> float:
    """
    Ratio of within-condition to between-condition variance.

    Higher ratio = condition explains less of the variance (better mixing).

    Parameters
    ----------
    embeddings : np.ndarray
        Cell embeddings, shape (n_cells, n_dims)
    condition_labels : np.ndarray
        Condition label for each cell

    Returns
    -------
    float
        Within/between variance ratio
    """
    condition_labels = np.asarray(condition_labels)
    unique_conditions = pd.unique(condition_labels)

    if len(unique_conditions) < 2:
        return np.nan

    within_vars = []
    condition_means = []
    condition_sizes = []

    for condition in unique_conditions:
        data = embeddings[condition_labels == condition]
        if len(data) > 1:
            within_vars.append(np.var(data, axis=0).mean())
            condition_means.append(data.mean(axis=0))
            condition_sizes.append(len(data))

    if len(within_vars) < 2:
        return np.nan

    within_var = np.average(within_vars, weights=condition_sizes)

    global_mean = embeddings.mean(axis=0)
    between_var = (
        np.average(
            [np.sum((m - global_mean) ** 2) for m in condition_means], weights=condition_sizes
        )
        / embeddings.shape[1]
    )

    return float(within_var / (between_var + 1e-10))


@dataclass
class MixingMetrics:
    """Collection of condition mixing metrics."""

    space_name: str
    centroid_distance: float
    mixing_score: float
    variance_ratio: float

    def to_dict(self) -> dict:
        return {
            "space": self.space_name,
            "centroid_distance": self.centroid_distance,
            "condition_mixing_score": self.mixing_score,
            "variance_ratio": self.variance_ratio,
        }


def compute_mixing_metrics(
    embeddings_dict: Dict[str, np.ndarray],
    condition_labels: np.ndarray,
    sample_size: int = 10000,
    seed: int = 42,
) -> pd.DataFrame:
    """
    Compute condition mixing metrics across multiple embedding spaces.

    Parameters
    ----------
    embeddings_dict : dict
        Dictionary mapping space name to embeddings array (n_cells, n_dims)
    condition_labels : np.ndarray
        Condition label for each cell
    sample_size : int
        Subsample size for the silhouette score
    seed : int
        Random seed

    Returns
    -------
    pd.DataFrame
        Mixing metrics for each space
    """
    results = []

    for space_name, embeddings in embeddings_dict.items():
        logger.info("Computing mixing metrics for %s", space_name)

        metrics = MixingMetrics(
            space_name=space_name,
            centroid_distance=centroid_distance(embeddings, condition_labels),
            mixing_score=condition_mixing_score(
                embeddings, condition_labels, sample_size=sample_size, seed=seed
            ),
            variance_ratio=within_between_variance_ratio(embeddings, condition_labels),
        )
        results.append(metrics.to_dict())

    return pd.DataFrame(results)


@dataclass
class AsymmetryResult:
    """Two integrations of the same data that differ only in the reference."""

    first: IntegratedEmbedding
    second: IntegratedEmbedding
    disparity: float  # Procrustes disparity, 0 = related by a similarity transform

    @property
    def max_abs_difference(self) -> float:
        return float(np.abs(self.first.embedding - self.second.embedding).max())


def reference_asymmetry(
    matrix: np.ndarray,
    labels: np.ndarray,
    n_components: int,
    first_reference: Hashable,
    second_reference: Hashable,
    random_seed: Optional[int] = 42,
) -> AsymmetryResult:
    """
    Integrate twice, swapping the reference condition, and compare.

    The comparison uses Procrustes analysis: both embeddings are centered,
    scaled to unit norm and optimally rotated/reflected onto each other. A
    disparity near zero means the two integrations differ only by a global
    similarity transform.

    Parameters
    ----------
    matrix : np.ndarray
        Expression matrix, shape (n_features, n_cells)
    labels : np.ndarray
        Condition label for each cell
    n_components : int
        Embedding dimensionality
    first_reference, second_reference : hashable
        The two reference conditions to compare
    random_seed : int, optional
        Seed for the truncated SVD

    Returns
    -------
    AsymmetryResult
    """
    first = integrate(
        matrix,
        labels,
        ProjectionConfig(n_components, first_reference, random_seed=random_seed),
    )
    second = integrate(
        matrix,
        labels,
        ProjectionConfig(n_components, second_reference, random_seed=random_seed),
    )
    _, _, disparity = procrustes(first.cell_embeddings(), second.cell_embeddings())

    logger.info(
        "Reference %r vs %r: Procrustes disparity %.4g",
        first_reference,
        second_reference,
        disparity,
    )
    return AsymmetryResult(first=first, second=second, disparity=float(disparity))
