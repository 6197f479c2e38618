"""2D layout methods for visualizing embeddings."""

from scprojection.embedding.methods import (
    compute_layout,
    compute_layouts,
    normalize_features,
    run_tsne,
    run_umap,
)

__all__ = [
    "run_umap",
    "run_tsne",
    "normalize_features",
    "compute_layout",
    "compute_layouts",
]
