"""Exceptions raised by the subspace-projection integration pipeline.

Every failure is raised at the point where the violated precondition is
detected and propagates to the caller. No partial embedding is ever returned.
"""


class ProjectionError(ValueError):
    """Base class for integration failures."""


class InvalidInput(ProjectionError):
    """Shape or length mismatch, missing labels, or unknown conditions."""


class EmptyPartition(ProjectionError):
    """A condition has no cells, so its mean is undefined."""


class RankError(ProjectionError):
    """Requested rank is outside 1 <= P <= min(n_features, n_cells) - 1."""


class DegenerateInput(ProjectionError):
    """Centered data is numerically rank-deficient for the requested rank."""


class PartitionMismatch(ProjectionError):
    """Projected blocks do not cover every output column exactly once."""


class ConvergenceError(ProjectionError):
    """The iterative factorization did not converge within max_iter."""
