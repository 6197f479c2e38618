import matplotlib.pyplot as plt
import numpy as np

from scprojection.viz import (
    compare_embeddings,
    plot_embedding,
    plot_embedding_by_condition,
    save_integration_figure,
)


def test_plot_by_condition_legend(rng):
    emb = rng.normal(size=(40, 2))
    conditions = np.array(["ctrl", "stim"] * 20)

    ax = plot_embedding_by_condition(emb, conditions, order=["stim", "ctrl"])

    labels = [t.get_text() for t in ax.get_legend().get_texts()]
    assert labels == ["stim (n=20)", "ctrl (n=20)"]
    plt.close("all")


def test_compare_embeddings_panels(rng):
    conditions = np.array(["a", "b"] * 10)
    fig = compare_embeddings(
        {"raw": rng.normal(size=(20, 2)), "integrated": rng.normal(size=(20, 2))},
        conditions=conditions,
    )
    assert len(fig.axes) == 2
    assert [ax.get_title() for ax in fig.axes] == ["raw", "integrated"]
    plt.close(fig)


def test_plot_embedding_numeric_color(rng):
    ax = plot_embedding(rng.normal(size=(10, 2)), color=np.arange(10.0), title="t")
    assert ax.get_title() == "t"
    plt.close("all")


def test_save_integration_figure(tmp_path, rng):
    conditions = np.array(["ctrl", "stim"] * 15)
    layouts = {"pca": rng.normal(size=(30, 2)), "manual_projection": rng.normal(size=(30, 2))}

    path = save_integration_figure(layouts, conditions, tmp_path / "plots" / "layout.png")

    assert path.exists()
    assert path.stat().st_size > 0
