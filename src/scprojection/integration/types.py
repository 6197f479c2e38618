"""Immutable value types passed between the integration stages.

Matrices follow the expression-matrix layout: rows are features, columns are
cells. Every array is flagged read-only on construction.
"""

from dataclasses import dataclass, field
from typing import Hashable, Optional, Union

import numpy as np
import scipy.sparse as sp


def _freeze(array: np.ndarray) -> np.ndarray:
    # a read-only view leaves the caller's array writable
    array = np.asarray(array).view()
    array.setflags(write=False)
    return array


@dataclass(frozen=True)
class ConditionPartition:
    """Columns of the expression matrix belonging to one condition."""

    condition: Hashable
    indices: np.ndarray  # original column positions, ascending
    matrix: Union[np.ndarray, sp.spmatrix]  # (n_features, n_cells)

    def __post_init__(self):
        object.__setattr__(self, "indices", _freeze(self.indices))
        if not sp.issparse(self.matrix):
            object.__setattr__(self, "matrix", _freeze(self.matrix))

    @property
    def n_cells(self) -> int:
        return int(self.indices.shape[0])

    @property
    def n_features(self) -> int:
        return int(self.matrix.shape[0])


@dataclass(frozen=True)
class CenteredPartition:
    """A condition's sub-matrix after subtracting its per-feature mean.

    ``center`` is kept so the centering can be inverted downstream.
    """

    condition: Hashable
    indices: np.ndarray
    center: np.ndarray  # (n_features,)
    centered: np.ndarray  # (n_features, n_cells)

    def __post_init__(self):
        for name in ("indices", "center", "centered"):
            object.__setattr__(self, name, _freeze(getattr(self, name)))

    @property
    def n_cells(self) -> int:
        return int(self.indices.shape[0])

    @property
    def n_features(self) -> int:
        return int(self.centered.shape[0])


@dataclass(frozen=True)
class ReferenceBasis:
    """Orthonormal PCA rotation fitted on the reference condition.

    Columns are ordered by descending singular value. The sign of each column
    is arbitrary; it is fixed deterministically for a given seed only.
    """

    condition: Hashable
    rotation: np.ndarray  # (n_features, n_components)
    singular_values: np.ndarray
    explained_variance: np.ndarray
    explained_variance_ratio: np.ndarray
    random_seed: Optional[int] = None

    def __post_init__(self):
        for name in ("rotation", "singular_values", "explained_variance", "explained_variance_ratio"):
            object.__setattr__(self, name, _freeze(getattr(self, name)))

    @property
    def n_components(self) -> int:
        return int(self.rotation.shape[1])

    @property
    def n_features(self) -> int:
        return int(self.rotation.shape[0])


@dataclass(frozen=True)
class IntegratedEmbedding:
    """Result of projecting every condition onto the reference basis.

    ``embedding`` is (n_components, n_cells); column i corresponds to column i
    of the input expression matrix.
    """

    embedding: np.ndarray
    labels: np.ndarray
    conditions: tuple
    reference_condition: Hashable
    basis: ReferenceBasis
    centers: dict = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "embedding", _freeze(self.embedding))
        object.__setattr__(self, "labels", _freeze(self.labels))
        object.__setattr__(self, "conditions", tuple(self.conditions))
        object.__setattr__(
            self, "centers", {c: _freeze(v) for c, v in self.centers.items()}
        )

    @property
    def n_cells(self) -> int:
        return int(self.embedding.shape[1])

    @property
    def n_components(self) -> int:
        return int(self.embedding.shape[0])

    def cell_embeddings(self) -> np.ndarray:
        """Embedding in (n_cells, n_components) layout for downstream tools."""
        return np.ascontiguousarray(self.embedding.T)

    def condition_mask(self, condition: Hashable) -> np.ndarray:
        return self.labels == condition
