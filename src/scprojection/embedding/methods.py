"""2D layouts of integrated embeddings.

Layouts are computed on cells-first coordinates, such as
``IntegratedEmbedding.cell_embeddings()`` or the unintegrated PCA baseline,
so the same cells can be drawn before and after integration.
"""

from typing import Literal

import numpy as np
import pandas as pd
from sklearn.manifold import TSNE
from sklearn.preprocessing import RobustScaler, StandardScaler

LayoutMethod = Literal["umap", "tsne"]


def normalize_features(
    features: pd.DataFrame | np.ndarray,
    method: Literal["zscore", "robust", "none"] = "none",
) -> np.ndarray:
    """Rescale embedding dimensions before a layout.

    Projected coordinates are already in a common unit, so ``"none"`` is
    the default. ``"zscore"`` and ``"robust"`` give each dimension equal
    weight in the neighbor graph.
    """
    if isinstance(features, pd.DataFrame):
        features = features.values
    X = np.asarray(features, dtype=np.float64)

    scalers = {"zscore": StandardScaler, "robust": RobustScaler}
    if method == "none":
        return X
    if method not in scalers:
        raise ValueError(f"Unknown normalization method: {method}")
    return scalers[method]().fit_transform(X)


def run_umap(
    embeddings: np.ndarray,
    n_neighbors: int = 15,
    min_dist: float = 0.1,
    normalize: Literal["zscore", "robust", "none"] = "none",
    random_state: int = 42,
) -> np.ndarray:
    """UMAP of an embedding (cells x dims) into 2D.

    ``n_neighbors`` is capped at ``n_cells - 1`` so small runs still work.
    """
    import umap

    X = normalize_features(embeddings, method=normalize)
    reducer = umap.UMAP(
        n_components=2,
        n_neighbors=max(2, min(n_neighbors, X.shape[0] - 1)),
        min_dist=min_dist,
        random_state=random_state,
    )
    return reducer.fit_transform(X)


def run_tsne(
    embeddings: np.ndarray,
    perplexity: float = 30.0,
    normalize: Literal["zscore", "robust", "none"] = "none",
    random_state: int = 42,
) -> np.ndarray:
    """t-SNE of an embedding (cells x dims) into 2D.

    sklearn requires ``perplexity < n_cells``. Larger values fall back to a
    third of the cells, never reaching ``n_cells``.
    """
    X = normalize_features(embeddings, method=normalize)
    n_cells = X.shape[0]
    if perplexity >= n_cells:
        perplexity = float(min(max(5, n_cells // 3), n_cells - 1))

    tsne = TSNE(
        n_components=2,
        perplexity=perplexity,
        learning_rate="auto",
        init="pca",
        random_state=random_state,
    )
    return tsne.fit_transform(X)


def compute_layout(
    embeddings: np.ndarray,
    method: LayoutMethod = "umap",
    random_state: int = 42,
    **kwargs,
) -> np.ndarray:
    """Lay out one embedding (cells x dims) in 2D with UMAP or t-SNE."""
    if method == "umap":
        return run_umap(embeddings, random_state=random_state, **kwargs)
    if method == "tsne":
        return run_tsne(embeddings, random_state=random_state, **kwargs)
    raise ValueError(f"Unknown layout method: {method}")


def compute_layouts(
    spaces: dict[str, np.ndarray],
    method: LayoutMethod = "umap",
    random_state: int = 42,
    **kwargs,
) -> dict[str, np.ndarray]:
    """2D layouts for several named embeddings of the same cells.

    Every space is laid out with the same method and seed, so differences
    between panels come from the embeddings themselves.
    """
    n_cells = {len(emb) for emb in spaces.values()}
    if len(n_cells) > 1:
        raise ValueError(f"Embeddings cover different numbers of cells: {sorted(n_cells)}")
    return {
        name: compute_layout(emb, method=method, random_state=random_state, **kwargs)
        for name, emb in spaces.items()
    }
