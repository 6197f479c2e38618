"""Visualization utilities for scProjection."""

from scprojection.viz.plots import (
    compare_embeddings,
    plot_embedding,
    plot_embedding_by_condition,
    save_integration_figure,
)

__all__ = [
    "compare_embeddings",
    "plot_embedding",
    "plot_embedding_by_condition",
    "save_integration_figure",
]
