"""Embedding computation and storage for cells x features tables.

Embedding Methods:
- PCA: plain PCA on the pooled cells (unintegrated baseline)
- Manual projection: per-condition centering + PCA fitted on a reference
  condition + projection of every condition onto that basis

Standardized Output Format:
    outputs/embeddings/{method}/{dataset}/
    ├── embeddings.npy        # (n_cells, n_dims) float64
    ├── metadata.parquet      # Cell metadata
    ├── manifest.json         # Config and file paths
    └── basis.npz             # Reference rotation and per-condition centers

Example Usage:
    from scprojection.embeddings import compute_projection_embedding
    embeddings, result, config = compute_projection_embedding(
        features, metadata, condition_col="stim", reference_condition="CTRL"
    )

    from scprojection.embeddings import load_embedding
    emb = load_embedding("outputs/embeddings/manual_projection/ifnb")
"""

from scprojection.embeddings.base import (
    EmbeddingOutput,
    load_embedding,
    load_multiple_embeddings,
    save_embedding,
)
from scprojection.embeddings.projection import (
    compute_pca,
    compute_projection_embedding,
    load_projection_basis,
    save_projection_embedding,
)

__all__ = [
    # Base
    "EmbeddingOutput",
    "load_embedding",
    "load_multiple_embeddings",
    "save_embedding",
    # PCA / projection
    "compute_pca",
    "compute_projection_embedding",
    "save_projection_embedding",
    "load_projection_basis",
]
