"""Analysis module for condition mixing and reference asymmetry."""

from .mixing import (
    AsymmetryResult,
    MixingMetrics,
    centroid_distance,
    compute_mixing_metrics,
    condition_mixing_score,
    reference_asymmetry,
    within_between_variance_ratio,
)

__all__ = [
    "centroid_distance",
    "condition_mixing_score",
    "within_between_variance_ratio",
    "compute_mixing_metrics",
    "MixingMetrics",
    "reference_asymmetry",
    "AsymmetryResult",
]
