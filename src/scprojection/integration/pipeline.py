"""Manual subspace-projection integration: partition, center, fit, project."""

import logging
from typing import Hashable, Optional, Sequence, Union

import numpy as np
import pandas as pd
import scipy.sparse as sp

from scprojection.config import ProjectionConfig
from scprojection.errors import InvalidInput
from scprojection.integration.centering import center_partitions
from scprojection.integration.partition import partition_by_condition
from scprojection.integration.projection import project_partitions
from scprojection.integration.subspace import fit_reference_basis
from scprojection.integration.types import IntegratedEmbedding

logger = logging.getLogger(__name__)


def integrate(
    matrix: Union[np.ndarray, sp.spmatrix],
    labels: Union[Sequence[Hashable], np.ndarray, pd.Series],
    config: ProjectionConfig,
    conditions: Optional[Sequence[Hashable]] = None,
) -> IntegratedEmbedding:
    """Integrate conditions by projecting them onto one condition's PCA subspace.

    Each condition is centered on its own per-feature mean, a rank-P basis is
    fitted on the reference condition, and every condition is projected
    through that basis.

    Parameters
    ----------
    matrix : np.ndarray or scipy.sparse matrix
        Normalized expression matrix, shape (n_features, n_cells)
    labels : array-like
        Condition label of each cell
    config : ProjectionConfig
        Target rank, reference condition and solver settings
    conditions : sequence, optional
        Explicit condition identifiers. Defaults to the distinct labels.

    Returns
    -------
    IntegratedEmbedding
        Embedding of shape (P, n_cells) in the original column order, with the
        fitted basis and every condition's center vector.
    """
    partitions = partition_by_condition(matrix, labels, conditions=conditions)
    if config.reference_condition not in partitions:
        raise InvalidInput(
            f"Reference condition {config.reference_condition!r} is not one of "
            f"{list(partitions)}"
        )

    n_features, n_cells = np.shape(matrix)
    logger.info(
        "Integrating %d cells x %d features across %d conditions (reference=%r, P=%d)",
        n_cells,
        n_features,
        len(partitions),
        config.reference_condition,
        config.n_components,
    )

    centered = center_partitions(partitions)
    basis = fit_reference_basis(
        centered[config.reference_condition],
        config.n_components,
        random_seed=config.random_seed,
        max_iter=config.max_iter,
        tol=config.tol,
        degeneracy_ratio=config.degeneracy_ratio,
    )
    embedding = project_partitions(basis, centered, n_cells)

    return IntegratedEmbedding(
        embedding=embedding,
        labels=np.asarray(labels, dtype=object),
        conditions=tuple(partitions),
        reference_condition=config.reference_condition,
        basis=basis,
        centers={c: p.center for c, p in centered.items()},
    )
