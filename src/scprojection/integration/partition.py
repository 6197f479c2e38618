"""Split an expression matrix into per-condition sub-matrices."""

import logging
from typing import Hashable, Optional, Sequence, Union

import numpy as np
import pandas as pd
import scipy.sparse as sp

from scprojection.errors import InvalidInput
from scprojection.integration.types import ConditionPartition

logger = logging.getLogger(__name__)


def validate_matrix(matrix: Union[np.ndarray, sp.spmatrix]) -> Union[np.ndarray, sp.spmatrix]:
    """Check that ``matrix`` is a finite 2D numeric (n_features, n_cells) matrix."""
    if sp.issparse(matrix):
        if matrix.ndim != 2:
            raise InvalidInput(f"Expression matrix must be 2D, got shape {matrix.shape}")
        values = matrix.data
    else:
        matrix = np.asarray(matrix)
        if matrix.ndim != 2:
            raise InvalidInput(f"Expression matrix must be 2D, got shape {matrix.shape}")
        if not np.issubdtype(matrix.dtype, np.number):
            raise InvalidInput(f"Expression matrix must be numeric, got dtype {matrix.dtype}")
        values = matrix

    if not np.all(np.isfinite(values)):
        raise InvalidInput("Expression matrix contains NaN or infinite values")
    return matrix


def partition_by_condition(
    matrix: Union[np.ndarray, sp.spmatrix],
    labels: Union[Sequence[Hashable], np.ndarray, pd.Series],
    conditions: Optional[Sequence[Hashable]] = None,
) -> dict[Hashable, ConditionPartition]:
    """Partition the columns of an expression matrix by condition label.

    Parameters
    ----------
    matrix : np.ndarray or scipy.sparse matrix
        Expression matrix, shape (n_features, n_cells)
    labels : array-like
        One condition label per cell (column)
    conditions : sequence, optional
        Condition identifiers to partition into, in output order. A condition
        with no matching cells yields an empty partition. If None, uses the
        distinct labels in order of first appearance.

    Returns
    -------
    dict
        Mapping from condition to its ``ConditionPartition``. Within each
        partition columns keep their original relative order.

    Raises
    ------
    InvalidInput
        If the label count differs from the number of columns, a label is
        missing, or a label is not one of ``conditions``.
    """
    matrix = validate_matrix(matrix)
    n_cells = matrix.shape[1]

    labels = np.asarray(labels, dtype=object)
    if labels.ndim != 1:
        raise InvalidInput(f"Label vector must be 1D, got shape {labels.shape}")
    labels = pd.Series(labels)
    if len(labels) != n_cells:
        raise InvalidInput(
            f"Label vector has length {len(labels)} but matrix has {n_cells} columns"
        )
    if labels.isna().any():
        missing = np.flatnonzero(labels.isna().to_numpy())
        raise InvalidInput(f"{len(missing)} cells have no condition label (first at column {missing[0]})")

    if conditions is None:
        conditions = list(pd.unique(labels))
    else:
        conditions = list(conditions)
        if len(set(conditions)) != len(conditions):
            raise InvalidInput(f"Duplicate condition identifiers: {conditions}")
        unmapped = sorted(set(labels) - set(conditions), key=str)
        if unmapped:
            raise InvalidInput(f"Labels {unmapped} are not among conditions {conditions}")

    if sp.issparse(matrix):
        matrix = matrix.tocsc()

    label_values = labels.to_numpy()
    partitions = {}
    for condition in conditions:
        indices = np.flatnonzero(label_values == condition)
        partitions[condition] = ConditionPartition(
            condition=condition,
            indices=indices,
            matrix=matrix[:, indices],
        )
        logger.debug("Condition %r: %d cells", condition, len(indices))

    return partitions
