"""Smoke tests for ipsnav.eval.plots (non-interactive backend)."""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np

from ipsnav.eval.plots import plot_error_cdf, plot_floor_tracks, save_figure
from ipsnav.graph import Edge, Graph, Node
from ipsnav.planning import Route


def _graph():
    return Graph(
        nodes=(Node("A", "Lift", 0.0, 0.0), Node("J", None, 5.0, 0.0, type="junction"), Node("B", "Exit", 5.0, 5.0)),
        edges=(Edge("A", "J", 5.0), Edge("J", "B", 5.0)),
    )


def test_floor_tracks_saved(tmp_path):
    graph = _graph()
    route = Route(nodes=graph.nodes, goal_id="B", cost=10.0)
    truth = np.array([[0.0, 0.0], [5.0, 0.0], [5.0, 5.0]])

    fig = plot_floor_tracks(
        graph,
        {"Ground Truth": truth, "Fused": truth + 0.2},
        route=route,
        fixes=np.array([[0.5, 0.3], [4.6, 4.8]]),
    )
    paths = save_figure(fig, tmp_path / "figs", "walk", formats=("png", "svg"))
    plt.close(fig)

    assert [p.name for p in paths] == ["walk.png", "walk.svg"]
    assert all(p.exists() for p in paths)


def test_error_cdf():
    fig = plot_error_cdf({"Fused": np.array([0.5, 1.0, 2.0]), "Wi-Fi": np.array([1.0, 3.0])})

    lines = fig.axes[0].get_lines()
    assert len(lines) == 2
    np.testing.assert_allclose(lines[0].get_ydata(), [1 / 3, 2 / 3, 1.0])
    plt.close(fig)
