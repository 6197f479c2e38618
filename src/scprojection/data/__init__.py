"""Data loading, preprocessing and synthetic datasets for scProjection."""

from scprojection.data.loader import (
    METADATA_COLS,
    load_expression_table,
    split_metadata_features,
    subsample_cells,
    validate_features,
)
from scprojection.data.preprocess import log_normalize, select_variable_features
from scprojection.data.synthetic import make_condition_offset_dataset, make_ellipsoid_pair

__all__ = [
    # Loading
    "load_expression_table",
    "split_metadata_features",
    "validate_features",
    "subsample_cells",
    "METADATA_COLS",
    # Preprocessing
    "log_normalize",
    "select_variable_features",
    # Synthetic
    "make_condition_offset_dataset",
    "make_ellipsoid_pair",
]
