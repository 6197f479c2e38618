"""Scatter plots of 2D layouts colored by condition.

The main figure is a before/after panel: the same cells laid out from the
unintegrated PCA and from the reference projection, one color per condition.
"""

from pathlib import Path
from typing import Sequence, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd


def plot_embedding(
    layout: np.ndarray,
    ax: plt.Axes | None = None,
    color: np.ndarray | None = None,
    title: str | None = None,
    s: float = 2,
    alpha: float = 0.6,
    cmap: str = "viridis",
) -> plt.Axes:
    """Scatter a 2D layout, optionally colored by a numeric value per cell."""
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 6))

    points = ax.scatter(layout[:, 0], layout[:, 1], c=color, cmap=cmap, s=s, alpha=alpha)
    if color is not None:
        plt.colorbar(points, ax=ax)

    _finish_axes(ax, title)
    return ax


def plot_embedding_by_condition(
    layout: np.ndarray,
    conditions: pd.Series | np.ndarray,
    order: Sequence | None = None,
    ax: plt.Axes | None = None,
    title: str | None = None,
    s: float = 2,
    alpha: float = 0.6,
    legend: bool = True,
) -> plt.Axes:
    """Scatter a 2D layout with one tab10 color per condition.

    Conditions are drawn in ``order`` (first appearance by default), so the
    last one ends up on top. Legend entries carry the cell count.
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 6))

    conditions = np.asarray(conditions)
    order = list(pd.unique(conditions)) if order is None else list(order)
    palette = plt.cm.tab10.colors

    for i, condition in enumerate(order):
        mask = conditions == condition
        n = int(mask.sum())
        if n == 0:
            continue
        ax.scatter(
            layout[mask, 0],
            layout[mask, 1],
            color=palette[i % len(palette)],
            s=s,
            alpha=alpha,
            label=f"{condition} (n={n})",
        )

    _finish_axes(ax, title)
    if legend:
        ax.legend(fontsize=8, markerscale=4)
    return ax


def compare_embeddings(
    layouts: dict[str, np.ndarray],
    conditions: pd.Series | np.ndarray | None = None,
    panel_size: float = 5.0,
) -> plt.Figure:
    """One panel per named layout, side by side, sharing condition colors."""
    fig, axes = plt.subplots(
        1, len(layouts), figsize=(panel_size * len(layouts), panel_size), squeeze=False
    )

    order = None if conditions is None else list(pd.unique(np.asarray(conditions)))
    for ax, (name, layout) in zip(axes[0], layouts.items()):
        if conditions is None:
            plot_embedding(layout, ax=ax, title=name)
        else:
            plot_embedding_by_condition(layout, conditions, order=order, ax=ax, title=name)

    fig.tight_layout()
    return fig


def save_integration_figure(
    layouts: dict[str, np.ndarray],
    conditions: pd.Series | np.ndarray,
    path: Union[str, Path],
    dpi: int = 150,
) -> Path:
    """Write the before/after comparison figure and close it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig = compare_embeddings(layouts, conditions=conditions)
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    return path


def _finish_axes(ax: plt.Axes, title: str | None) -> None:
    if title:
        ax.set_title(title)
    ax.set_xlabel("Dim 1")
    ax.set_ylabel("Dim 2")
    ax.set_aspect("equal")
