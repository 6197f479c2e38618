"""Functions for loading cells x features expression tables.

This module provides utilities for loading single-cell tables from parquet,
CSV or TSV files and splitting metadata from features.

Key features:
- Parquet loading via PyArrow, csv/tsv via pandas
- Metadata/feature column split driven by an explicit metadata list
- Feature validation before integration
- Stratified subsampling for balanced representation across conditions
"""

from pathlib import Path
from typing import Union

import numpy as np
import pandas as pd
import pyarrow.parquet as pq

# Metadata columns commonly found in exported single-cell tables
METADATA_COLS = [
    "cell",
    "barcode",
    "sample",
    "orig.ident",
    "condition",
    "stim",
    "batch",
    "donor",
    "cell_type",
    "seurat_annotations",
    "n_counts",
    "n_genes",
]


def load_expression_table(path: Union[str, Path]) -> pd.DataFrame:
    """Load a cells x features table.

    Parquet files are read with PyArrow; ``.csv``, ``.tsv`` and ``.txt``
    files with pandas.

    Args:
        path: Path to the table

    Returns:
        DataFrame with one row per cell
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".parquet":
        return pq.read_table(path).to_pandas()
    if suffix in (".csv", ".tsv", ".txt"):
        return pd.read_csv(path, sep="," if suffix == ".csv" else "\t")
    raise ValueError(f"Unsupported table format: {path.suffix}. Use parquet, csv or tsv")


def split_metadata_features(
    df: pd.DataFrame,
    metadata_cols: list[str] | None = None,
    feature_cols: list[str] | None = None,
) -> tuple[pd.DataFrame, np.ndarray, list[str]]:
    """Split a cell table into metadata and features.

    Args:
        df: DataFrame containing both metadata and feature columns
        metadata_cols: Metadata column names. If None, uses METADATA_COLS plus
            every non-numeric column.
        feature_cols: Feature column names. If None, every numeric column
            that is not metadata.

    Returns:
        Tuple of (metadata_df, features_array, feature_names)
        - metadata_df: DataFrame with metadata columns
        - features_array: NumPy array of shape (n_cells, n_features)
        - feature_names: List of feature column names
    """
    if metadata_cols is None:
        metadata_cols = [
            c
            for c in df.columns
            if c in METADATA_COLS or not pd.api.types.is_numeric_dtype(df[c])
        ]
    existing_meta_cols = [c for c in metadata_cols if c in df.columns]

    if feature_cols is None:
        feature_cols = [
            c
            for c in df.columns
            if c not in existing_meta_cols and pd.api.types.is_numeric_dtype(df[c])
        ]

    if len(feature_cols) == 0:
        raise ValueError("No feature columns found in DataFrame")

    metadata = df[existing_meta_cols].copy()
    features = df[feature_cols].values.astype(np.float64)

    return metadata, features, list(feature_cols)


def validate_features(features: np.ndarray) -> dict:
    """Validate feature array and return statistics.

    Args:
        features: NumPy array of features

    Returns:
        Dictionary with validation results
    """
    return {
        "shape": features.shape,
        "dtype": features.dtype,
        "has_nan": bool(np.isnan(features).any()),
        "nan_count": int(np.isnan(features).sum()),
        "has_inf": bool(np.isinf(features).any()),
        "inf_count": int(np.isinf(features).sum()),
        "has_negative": bool((features < 0).any()),
        "min": float(np.nanmin(features)),
        "max": float(np.nanmax(features)),
        "mean": float(np.nanmean(features)),
        "std": float(np.nanstd(features)),
    }


def subsample_cells(
    df: pd.DataFrame,
    n: int,
    stratify_col: str | None = None,
    random_state: int = 42,
) -> pd.DataFrame:
    """Subsample cells from a DataFrame.

    Args:
        df: DataFrame to subsample
        n: Number of cells to sample
        stratify_col: Optional column to stratify sampling by (e.g., 'condition')
        random_state: Random seed for reproducibility

    Returns:
        Subsampled DataFrame, rows kept in their original order
    """
    if n >= len(df):
        return df.copy()

    rng = np.random.default_rng(random_state)

    if stratify_col is None:
        idx = np.sort(rng.choice(len(df), size=n, replace=False))
        return df.iloc[idx].reset_index(drop=True)

    groups = df.groupby(stratify_col, sort=False)
    n_per_group = n // groups.ngroups

    keep = []
    for positions in groups.indices.values():
        if len(positions) <= n_per_group:
            keep.append(positions)
        else:
            keep.append(rng.choice(positions, size=n_per_group, replace=False))

    keep = np.concatenate(keep)

    # Top up from the remainder if groups were too small
    if len(keep) < n:
        remaining = np.setdiff1d(np.arange(len(df)), keep)
        extra_n = min(n - len(keep), len(remaining))
        keep = np.concatenate([keep, rng.choice(remaining, size=extra_n, replace=False)])

    return df.iloc[np.sort(keep)].reset_index(drop=True)
