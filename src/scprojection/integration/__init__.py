"""Manual subspace-projection integration of conditions.

The procedure is four pure stages chained through immutable value types:

1. ``partition_by_condition`` - split the (n_features, n_cells) matrix by label
2. ``center_partitions`` - subtract each condition's per-feature mean
3. ``fit_reference_basis`` - rank-P PCA rotation of the reference condition
4. ``project_partitions`` - project all conditions through that rotation

``integrate`` runs all four and returns an ``IntegratedEmbedding``.

Example Usage:
    from scprojection.config import ProjectionConfig
    from scprojection.integration import integrate

    config = ProjectionConfig(n_components=20, reference_condition="ctrl")
    result = integrate(expression, labels, config)
    result.embedding  # (20, n_cells)
"""

from scprojection.integration.centering import center_partition, center_partitions
from scprojection.integration.partition import partition_by_condition, validate_matrix
from scprojection.integration.pipeline import integrate
from scprojection.integration.projection import project_partition, project_partitions
from scprojection.integration.subspace import check_rank, fit_reference_basis, max_rank
from scprojection.integration.types import (
    CenteredPartition,
    ConditionPartition,
    IntegratedEmbedding,
    ReferenceBasis,
)

__all__ = [
    # Types
    "ConditionPartition",
    "CenteredPartition",
    "ReferenceBasis",
    "IntegratedEmbedding",
    # Stages
    "validate_matrix",
    "partition_by_condition",
    "center_partition",
    "center_partitions",
    "check_rank",
    "max_rank",
    "fit_reference_basis",
    "project_partition",
    "project_partitions",
    # Pipeline
    "integrate",
]
