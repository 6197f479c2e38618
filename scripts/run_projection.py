#!/usr/bin/env python3
"""Integrate conditions by projecting onto a reference PCA subspace.

Reads a cells x features table (parquet/csv/tsv) with a condition column,
optionally subsamples cells per condition, log-normalizes and selects highly
variable features, fits a PCA basis on the reference condition and projects
every condition onto it.

Creates standardized outputs:
    outputs/embeddings/manual_projection/{name}/
    ├── embeddings.npy        # (n_cells, n_components) projected coordinates
    ├── metadata.parquet      # Cell metadata
    ├── manifest.json         # Configuration
    ├── basis.npz             # Reference rotation and per-condition centers
    └── layout.png            # With --plot: PCA vs projection, by condition

Usage:
    # Already normalized table
    python scripts/run_projection.py --table cells.parquet --condition-col stim \\
        --reference CTRL --n-components 30

    # Raw counts: normalize and keep the 500 most variable genes
    python scripts/run_projection.py --table counts.tsv --condition-col stim \\
        --reference CTRL --log-normalize --n-top-features 500

    # Settings from a JSON config, 20k cells, before/after UMAP figure
    python scripts/run_projection.py --table cells.parquet --condition-col stim \\
        --config configs/projection.json --n-cells 20000 --plot
"""

import argparse
from pathlib import Path

import pandas as pd

from scprojection.analysis import compute_mixing_metrics
from scprojection.config import ProjectionConfig, load_projection_config
from scprojection.data import (
    METADATA_COLS,
    load_expression_table,
    log_normalize,
    select_variable_features,
    split_metadata_features,
    subsample_cells,
    validate_features,
)
from scprojection.embedding import compute_layouts
from scprojection.embeddings import (
    compute_pca,
    compute_projection_embedding,
    save_projection_embedding,
)
from scprojection.viz import save_integration_figure

OUTPUT_DIR = Path("outputs/embeddings")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Reference-subspace projection integration",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("--table", type=Path, required=True, help="Cells x features table")
    parser.add_argument(
        "--condition-col",
        type=str,
        default="condition",
        help="Metadata column holding the condition label",
    )
    parser.add_argument(
        "--reference",
        type=str,
        default=None,
        help="Reference condition (required unless given in --config)",
    )
    parser.add_argument(
        "--n-components",
        type=int,
        default=30,
        help="Embedding dimensionality",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON projection config; overrides --reference/--n-components/--seed",
    )
    parser.add_argument(
        "--metadata-cols",
        type=str,
        nargs="*",
        default=None,
        help="Metadata columns (default: known names plus non-numeric columns)",
    )
    parser.add_argument(
        "--n-cells",
        type=int,
        default=None,
        help="Subsample this many cells, stratified by condition",
    )
    parser.add_argument(
        "--log-normalize",
        action="store_true",
        help="Treat features as raw counts and log-normalize them",
    )
    parser.add_argument(
        "--n-top-features",
        type=int,
        default=None,
        help="Keep only the most variable features",
    )
    parser.add_argument(
        "--plot",
        action="store_true",
        help="Save a 2D layout of the PCA and projection embeddings",
    )
    parser.add_argument(
        "--layout",
        type=str,
        choices=["umap", "tsne"],
        default="umap",
        help="Layout method for --plot",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=OUTPUT_DIR,
        help="Base output directory",
    )
    parser.add_argument(
        "--name",
        type=str,
        default=None,
        help="Experiment name (default: table file stem)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed",
    )

    args = parser.parse_args(argv)
    if args.config is None and args.reference is None:
        parser.error("--reference or --config is required")
    return args


def main(argv=None):
    args = parse_args(argv)

    if args.config is not None:
        config = load_projection_config(args.config)
    else:
        config = ProjectionConfig(
            n_components=args.n_components,
            reference_condition=args.reference,
            random_seed=args.seed,
        )

    exp_name = args.name or args.table.stem
    output_dir = args.output_dir / "manual_projection" / exp_name

    print("=" * 70)
    print("MANUAL PROJECTION INTEGRATION")
    print("=" * 70)
    print(f"Data: {args.table}")
    print(f"Condition col: {args.condition_col}")
    print(f"Reference: {config.reference_condition}")
    print(f"Components: {config.n_components}")
    print(f"Output: {output_dir}")
    print()

    print("Loading data...")
    df = load_expression_table(args.table)
    print(f"  Loaded {len(df):,} cells")

    if args.condition_col not in df.columns:
        raise ValueError(f"Condition column '{args.condition_col}' not found in table")

    na_mask = df[args.condition_col].isna()
    if na_mask.any():
        print(f"  Dropping {na_mask.sum()} cells without a condition label")
        df = df[~na_mask].reset_index(drop=True)

    # Condition labels are compared as strings so CLI references match
    df[args.condition_col] = df[args.condition_col].astype(str)

    if args.n_cells is not None and args.n_cells < len(df):
        df = subsample_cells(
            df, args.n_cells, stratify_col=args.condition_col, random_state=args.seed
        )
        print(f"  Subsampled to {len(df):,} cells")

    metadata_cols = args.metadata_cols
    if metadata_cols is None:
        metadata_cols = [
            c
            for c in df.columns
            if c in METADATA_COLS or not pd.api.types.is_numeric_dtype(df[c])
        ]
    if args.condition_col not in metadata_cols:
        metadata_cols = [*metadata_cols, args.condition_col]

    metadata_df, features, feature_names = split_metadata_features(
        df, metadata_cols=metadata_cols
    )
    print(f"  Features: {features.shape[1]}")
    for condition, count in metadata_df[args.condition_col].value_counts(sort=False).items():
        print(f"  {condition}: {count:,} cells")

    stats = validate_features(features)
    if stats["has_nan"] or stats["has_inf"]:
        raise ValueError(
            f"Features contain {stats['nan_count']} NaN and {stats['inf_count']} "
            "infinite values; clean the table before integrating"
        )

    if args.log_normalize:
        if stats["has_negative"]:
            raise ValueError("--log-normalize expects raw counts, found negative values")
        print("\nLog-normalizing counts...")
        features = log_normalize(features)

    if args.n_top_features is not None:
        keep = select_variable_features(features, n_top=args.n_top_features)
        features = features[:, keep]
        feature_names = [feature_names[i] for i in keep]
        print(f"  Kept {len(feature_names)} highly variable features")

    print("\nComputing projection...")
    embeddings, result, run_config = compute_projection_embedding(
        features,
        metadata_df,
        condition_col=args.condition_col,
        reference_condition=str(config.reference_condition),
        n_components=config.n_components,
        random_state=config.random_seed,
        max_iter=config.max_iter,
        tol=config.tol,
        degeneracy_ratio=config.degeneracy_ratio,
    )
    run_config["table"] = str(args.table)
    run_config["feature_names"] = feature_names
    print(f"  Embeddings shape: {embeddings.shape}")
    print(f"  Reference variance explained: {run_config['variance_explained']:.1%}")

    print("\nMixing metrics...")
    pca_embeddings, _, _ = compute_pca(
        features, n_components=config.n_components, random_state=args.seed
    )
    spaces = {"pca": pca_embeddings, "manual_projection": embeddings}
    metrics = compute_mixing_metrics(
        spaces,
        metadata_df[args.condition_col].to_numpy(),
        seed=args.seed,
    )
    print(metrics.to_string(index=False, float_format=lambda v: f"{v:.4f}"))

    print("\nSaving outputs...")
    save_projection_embedding(output_dir, result, metadata_df, run_config)
    print(f"  embeddings.npy: {embeddings.shape}")
    print(f"  metadata.parquet: {len(metadata_df)} cells")
    print(f"  basis.npz: rotation {result.basis.rotation.shape}")
    print("  manifest.json")

    if args.plot:
        print(f"\nComputing {args.layout} layouts...")
        layouts = compute_layouts(spaces, method=args.layout, random_state=args.seed)
        figure_path = save_integration_figure(
            layouts, metadata_df[args.condition_col].to_numpy(), output_dir / "layout.png"
        )
        print(f"  {figure_path.name}")

    print("\nDone!")
    print(f"Output saved to: {output_dir}")
    return output_dir


if __name__ == "__main__":
    main()
