import matplotlib.pyplot as plt
import numpy as np
import pytest
from PIL import Image

from ipw import plots
from ipw.report import build_pdf


def test_draw_dag_unknown_node():
    fig, ax = plt.subplots()
    with pytest.raises(ValueError, match="Rain"):
        plots.draw_dag(ax, {"A": (1, 1)}, [("A", "Rain")])
    plt.close(fig)


def test_savefig_writes_png(tmp_path):
    fig, ax = plt.subplots()
    plots.draw_dag(ax, plots.NET_DAG_NODES, plots.NET_DAG_EDGES)
    path = plots.savefig(fig, str(tmp_path / "figs"), "dag.png")
    with Image.open(path) as img:
        assert img.size[0] > 0


def test_plot_weights_and_effects(tmp_path):
    fig, axes = plt.subplots(1, 2)
    plots.plot_weights(axes[0], np.linspace(0.5, 2, 100))
    plots.plot_effects(axes[1], {"Naive": dict(estimate=-14.0, se=0.4),
                                 "IPW": dict(estimate=-10.2)}, -10)
    assert [t.get_text() for t in axes[1].get_yticklabels()] == ["Naive", "IPW"]
    plots.savefig(fig, str(tmp_path), "effects.png")


def test_build_pdf(tmp_path):
    png = tmp_path / "fig.png"
    Image.new("RGB", (300, 150), "white").save(png)
    text = "Section 1: Heading\n\nA line with <angle> & ampersand\n"
    out = build_pdf(str(tmp_path / "r.pdf"), "Title", "Subtitle",
                    [(text, str(png)), ("Section 2: No figure\nbody", None)])
    with open(out, "rb") as fh:
        assert fh.read(4) == b"%PDF"
