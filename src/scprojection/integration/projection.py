"""Project every condition onto the reference basis.

Only the reference condition is projected orthogonally onto its own principal
axes; its coordinates equal its PCA scores. Every other condition is
cross-projected onto axes fitted on different data, which is an
approximation. Swapping the reference generally gives a different embedding
that no global transform maps onto the first.
"""

import logging
from typing import Hashable

import numpy as np

from scprojection.errors import InvalidInput, PartitionMismatch
from scprojection.integration.types import CenteredPartition, ReferenceBasis

logger = logging.getLogger(__name__)


def project_partition(basis: ReferenceBasis, partition: CenteredPartition) -> np.ndarray:
    """Coordinates of one condition in the reference subspace, shape (P, n_cells)."""
    if partition.n_features != basis.n_features:
        raise InvalidInput(
            f"Condition {partition.condition!r} has {partition.n_features} features "
            f"but the basis has {basis.n_features}"
        )
    return basis.rotation.T @ partition.centered


def project_partitions(
    basis: ReferenceBasis,
    partitions: dict[Hashable, CenteredPartition],
    n_cells: int,
) -> np.ndarray:
    """Scatter each condition's projection back into original column order.

    Parameters
    ----------
    basis : ReferenceBasis
        Rotation fitted on the reference condition
    partitions : dict
        Centered partitions of every condition
    n_cells : int
        Column count of the original expression matrix

    Returns
    -------
    np.ndarray
        Integrated embedding, shape (P, n_cells)

    Raises
    ------
    PartitionMismatch
        If the partitions do not cover every column exactly once.
    """
    total = sum(p.n_cells for p in partitions.values())
    if total != n_cells:
        raise PartitionMismatch(
            f"Partitions hold {total} cells but the expression matrix has {n_cells} columns"
        )

    embedding = np.zeros((basis.n_components, n_cells), dtype=np.float64)
    written = np.zeros(n_cells, dtype=bool)

    for condition, partition in partitions.items():
        idx = partition.indices
        if idx.size and (idx.min() < 0 or idx.max() >= n_cells):
            raise PartitionMismatch(f"Condition {condition!r} has column indices out of range")
        if np.any(written[idx]) or np.unique(idx).size != idx.size:
            raise PartitionMismatch(f"Condition {condition!r} overlaps columns already written")

        embedding[:, idx] = project_partition(basis, partition)
        written[idx] = True

        logger.debug(
            "Projected %r (%d cells)%s",
            condition,
            partition.n_cells,
            " [reference]" if condition == basis.condition else "",
        )

    if not written.all():
        missing = np.flatnonzero(~written)
        raise PartitionMismatch(
            f"{missing.size} columns were not written (first missing column {missing[0]})"
        )

    return embedding
