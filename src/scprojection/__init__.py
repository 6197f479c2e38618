"""scProjection: reference-subspace projection integration for single-cell data."""

__version__ = "0.1.0"

from scprojection import analysis, data, embedding, embeddings, integration, viz
from scprojection.config import ProjectionConfig, load_projection_config
from scprojection.errors import (
    ConvergenceError,
    DegenerateInput,
    EmptyPartition,
    InvalidInput,
    PartitionMismatch,
    ProjectionError,
    RankError,
)
from scprojection.integration import IntegratedEmbedding, integrate

__all__ = [
    "analysis",
    "data",
    "embedding",
    "embeddings",
    "integration",
    "viz",
    "ProjectionConfig",
    "load_projection_config",
    "IntegratedEmbedding",
    "integrate",
    "ProjectionError",
    "InvalidInput",
    "EmptyPartition",
    "RankError",
    "DegenerateInput",
    "PartitionMismatch",
    "ConvergenceError",
]
