"""Base classes and utilities for embedding outputs.

This module provides the standardized on-disk format shared by the plain PCA
baseline and the reference-projection integration, so that downstream layout
and mixing evaluation can load either one the same way.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd


@dataclass
class EmbeddingOutput:
    """Container for embedding outputs with metadata.

    Embeddings are stored cells-first for uniform downstream consumption.
    """

    embeddings: np.ndarray  # (n_cells, n_dims)
    metadata: pd.DataFrame  # Cell metadata (condition, cell type, etc.)
    config: dict  # Method-specific configuration
    method: str  # 'pca', 'manual_projection'

    @property
    def n_cells(self) -> int:
        return self.embeddings.shape[0]

    @property
    def n_dims(self) -> int:
        return self.embeddings.shape[1]


def load_embedding(output_dir: Union[str, Path]) -> EmbeddingOutput:
    """Load embedding output from a standardized directory.

    Parameters
    ----------
    output_dir : Path
        Directory containing embeddings.npy, metadata.parquet, manifest.json

    Returns
    -------
    EmbeddingOutput
        Container with embeddings, metadata, config, and method name
    """
    output_dir = Path(output_dir)

    manifest_path = output_dir / "manifest.json"
    if manifest_path.exists():
        with open(manifest_path) as f:
            manifest = json.load(f)
        method = manifest.get("method", "unknown")
        config = manifest.get("config", {})
    else:
        config = {}
        method = "manual_projection" if "projection" in output_dir.name else "unknown"

    embeddings_path = output_dir / "embeddings.npy"
    if not embeddings_path.exists():
        raise FileNotFoundError(f"No embeddings found in {output_dir}")
    embeddings = np.load(embeddings_path)

    metadata_path = output_dir / "metadata.parquet"
    if metadata_path.exists():
        metadata = pd.read_parquet(metadata_path)
    else:
        metadata = pd.DataFrame()

    return EmbeddingOutput(
        embeddings=embeddings,
        metadata=metadata,
        config=config,
        method=method,
    )


def save_embedding(
    output_dir: Union[str, Path],
    embeddings: np.ndarray,
    metadata: pd.DataFrame,
    method: str,
    config: Optional[dict] = None,
    extra_files: Optional[dict[str, str]] = None,
) -> Path:
    """Save embedding output in standardized format.

    Parameters
    ----------
    output_dir : Path
        Directory to save outputs
    embeddings : np.ndarray
        Embedding array (n_cells, n_dims)
    metadata : pd.DataFrame
        Cell metadata, one row per embedding row
    method : str
        Embedding method name
    config : dict, optional
        Method-specific configuration
    extra_files : dict, optional
        Additional files already written to output_dir, listed in the manifest

    Returns
    -------
    Path
        The output directory
    """
    if len(metadata) and len(metadata) != embeddings.shape[0]:
        raise ValueError(
            f"metadata has {len(metadata)} rows but embeddings have {embeddings.shape[0]}"
        )

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    np.save(output_dir / "embeddings.npy", embeddings)

    # parquet requires string column names
    metadata = metadata.copy()
    metadata.columns = [str(c) for c in metadata.columns]
    metadata.to_parquet(output_dir / "metadata.parquet")

    manifest = {
        "method": method,
        "n_cells": int(embeddings.shape[0]),
        "n_dims": int(embeddings.shape[1]),
        "created": datetime.now().isoformat(),
        "files": {
            "embeddings": "embeddings.npy",
            "metadata": "metadata.parquet",
        },
    }
    if extra_files:
        manifest["files"].update(extra_files)

    if config:
        manifest["config"] = config

    with open(output_dir / "manifest.json", "w") as f:
        json.dump(manifest, f, indent=2, default=str)

    return output_dir


def load_multiple_embeddings(
    pattern: str, base_dir: Union[str, Path] = "outputs/embeddings"
) -> dict[str, EmbeddingOutput]:
    """Load multiple embedding outputs matching a pattern.

    Parameters
    ----------
    pattern : str
        Glob pattern for directories, e.g., "*/pbmc_ifnb"
    base_dir : Path
        Base directory to search in

    Returns
    -------
    dict
        Mapping from method name to EmbeddingOutput
    """
    base_dir = Path(base_dir)
    results = {}

    for path in sorted(base_dir.glob(pattern)):
        if path.is_dir() and (path / "embeddings.npy").exists():
            emb = load_embedding(path)
            results[emb.method] = emb

    return results
