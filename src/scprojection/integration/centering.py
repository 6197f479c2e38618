"""Per-condition feature centering."""

import logging
from typing import Hashable

import numpy as np
import scipy.sparse as sp

from scprojection.errors import EmptyPartition
from scprojection.integration.types import CenteredPartition, ConditionPartition

logger = logging.getLogger(__name__)


def center_partition(partition: ConditionPartition) -> CenteredPartition:
    """Subtract the per-feature mean of a condition from its cells.

    Parameters
    ----------
    partition : ConditionPartition
        One condition's sub-matrix, shape (n_features, n_cells)

    Returns
    -------
    CenteredPartition
        Dense centered sub-matrix together with the center vector needed to
        undo the centering.

    Raises
    ------
    EmptyPartition
        If the condition has no cells.
    """
    if partition.n_cells == 0:
        raise EmptyPartition(f"Condition {partition.condition!r} has no cells to center")

    matrix = partition.matrix
    if sp.issparse(matrix):
        center = np.asarray(matrix.mean(axis=1), dtype=np.float64).ravel()
        dense = matrix.toarray().astype(np.float64, copy=False)
    else:
        dense = np.asarray(matrix, dtype=np.float64)
        center = dense.mean(axis=1)

    centered = dense - center[:, np.newaxis]

    return CenteredPartition(
        condition=partition.condition,
        indices=partition.indices,
        center=center,
        centered=centered,
    )


def center_partitions(
    partitions: dict[Hashable, ConditionPartition],
) -> dict[Hashable, CenteredPartition]:
    """Center every partition independently, preserving condition order."""
    centered = {}
    for condition, partition in partitions.items():
        centered[condition] = center_partition(partition)
        logger.debug(
            "Centered %r (%d cells), mean |center| = %.4g",
            condition,
            partition.n_cells,
            float(np.abs(centered[condition].center).mean()),
        )
    return centered
