"""
Figures for the weighting tutorial: DAGs, propensity overlap, weights
and a comparison of effect estimates.
"""

import os

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

# -- Style --
STYLE = {
    "figure.facecolor": "#FAFAFA", "axes.facecolor": "#FAFAFA",
    "axes.edgecolor": "#333", "axes.labelcolor": "#222",
    "xtick.color": "#555", "ytick.color": "#555", "text.color": "#222",
    "font.size": 10, "axes.titlesize": 12, "axes.titleweight": "bold",
    "axes.grid": True, "grid.alpha": 0.25, "grid.color": "#AAA", "figure.dpi": 140,
}
CB, CO, CG, CR, CP, CY = "#2171B5", "#E6550D", "#31A354", "#DE2D26", "#756BB1", "#888"

NET_DAG_NODES = {
    "Income": (2, 8), "Health": (2, 2), "Net use": (5, 5),
    "Malaria risk": (8.5, 5), "Temp.": (8.5, 8.8),
}
NET_DAG_EDGES = [
    ("Income", "Health"), ("Income", "Net use"), ("Health", "Net use"),
    ("Income", "Malaria risk"), ("Health", "Malaria risk"),
    ("Temp.", "Malaria risk"), ("Net use", "Malaria risk"),
]


def apply_style():
    plt.rcParams.update(STYLE)


def savefig(fig, outdir, name):
    """Save `fig` as `outdir/name` and close it. Returns the path."""
    os.makedirs(outdir, exist_ok=True)
    path = os.path.join(outdir, name)
    fig.savefig(path, bbox_inches="tight", dpi=150)
    plt.close(fig)
    return path


def draw_dag(ax, nodes, edges, title="DAG", highlight=None, radius=1.1):
    """
    Draw a causal diagram.

    Parameters
    ----------
    ax : matplotlib Axes
    nodes : dict
        Node label -> (x, y) position on a 10x10 canvas.
    edges : list of (str, str)
        Directed edges (cause, effect).
    highlight : (str, str) or None
        Edge drawn in the accent colour, usually treatment -> outcome.
    """
    unknown = {n for edge in edges for n in edge} - set(nodes)
    if unknown:
        raise ValueError(f"edges refer to unknown node(s): {sorted(unknown)}")

    ax.set_xlim(0, 10); ax.set_ylim(0, 10); ax.set_aspect("equal"); ax.axis("off")
    ax.set_title(title)
    for label, (x, y) in nodes.items():
        ax.add_patch(plt.Circle((x, y), radius, fc="white", ec=CB, lw=2))
        ax.text(x, y, label, ha="center", va="center", fontsize=8, fontweight="bold")

    for src, dst in edges:
        (x0, y0), (x1, y1) = nodes[src], nodes[dst]
        d = np.hypot(x1 - x0, y1 - y0)
        ux, uy = (x1 - x0) / d, (y1 - y0) / d
        color = CR if highlight == (src, dst) else CO
        ax.annotate("", xy=(x1 - ux * radius, y1 - uy * radius),
                    xytext=(x0 + ux * radius, y0 + uy * radius),
                    arrowprops=dict(arrowstyle="-|>", color=color, lw=2, mutation_scale=18))
    return ax


def plot_propensity_overlap(ax, df, treatment, propensity="propensity", bins=30):
    """Mirrored histogram: treated above the axis, untreated below."""
    treated = df[treatment].to_numpy() == 1
    p = df[propensity].to_numpy()
    edges = np.linspace(0, 1, bins + 1)
    h1, _ = np.histogram(p[treated], bins=edges)
    h0, _ = np.histogram(p[~treated], bins=edges)
    width = edges[1] - edges[0]
    ax.bar(edges[:-1], h1, width=width, align="edge", color=CB, alpha=.7, label="Treated")
    ax.bar(edges[:-1], -h0, width=width, align="edge", color=CO, alpha=.7, label="Untreated")
    ax.axhline(0, color="#333", lw=1)
    ax.set_xlabel("Propensity score"); ax.set_ylabel("Count")
    ax.set_title("Propensity score overlap"); ax.legend(fontsize=8)
    return ax


def plot_weights(ax, w, bins=40, title="Distribution of weights"):
    ax.hist(w, bins=bins, color=CP, alpha=.8, edgecolor="none")
    ax.axvline(np.mean(w), color=CR, lw=1.5, ls="--", label=f"mean = {np.mean(w):.2f}")
    ax.set_xlabel("Weight"); ax.set_ylabel("Count"); ax.set_title(title)
    ax.legend(fontsize=8)
    return ax


def plot_effects(ax, estimates, truth, title="Effect estimates"):
    """
    Point estimates (with 95% intervals where an `se` is present)
    against the true effect.

    Parameters
    ----------
    estimates : dict
        Label -> dict(estimate=..., se=...).
    truth : float
    """
    labels = list(estimates)
    ys = np.arange(len(labels))
    for y, label in zip(ys, labels):
        est = estimates[label]
        ax.plot(est["estimate"], y, "o", color=CB, ms=8)
        if "se" in est:
            ax.hlines(y, est["estimate"] - 1.96 * est["se"],
                      est["estimate"] + 1.96 * est["se"], color=CB, lw=2)
    ax.axvline(truth, color=CG, lw=2, ls="--", label=f"True effect = {truth:g}")
    ax.set_yticks(ys); ax.set_yticklabels(labels)
    ax.set_xlabel("Estimated effect"); ax.set_title(title); ax.legend(fontsize=8)
    return ax
