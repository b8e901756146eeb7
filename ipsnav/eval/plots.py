"""
Floor-plan plots for offline runs.

All functions return matplotlib Figure objects for flexible display/saving.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np

from ipsnav.graph.types import Graph
from ipsnav.planning.route import Route


def plot_floor_tracks(
    graph: Graph,
    tracks: Dict[str, np.ndarray],
    route: Optional[Route] = None,
    fixes: Optional[np.ndarray] = None,
    title: str = "Indoor Navigation",
) -> plt.Figure:
    """
    Plot the floor graph with the active route and position tracks.

    Args:
        graph: Floor graph; edges drawn grey, nodes labelled.
        tracks: Named position tracks {name: array of shape (N, 2)}.
        route: Route to highlight (optional).
        fixes: Raw Wi-Fi fixes, shape (M, 2) (optional).
        title: Plot title.

    Returns:
        fig: Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=(10, 8))

    for edge in graph.edges:
        u = graph.node_by_id(edge.u)
        v = graph.node_by_id(edge.v)
        ax.plot([u.x_m, v.x_m], [u.y_m, v.y_m], "-", color="lightgray", linewidth=3, zorder=1)

    for node in graph.nodes:
        marker = "s" if node.is_room else "o"
        ax.plot(node.x_m, node.y_m, marker, color="dimgray", markersize=6, zorder=2)
        if node.label:
            ax.annotate(node.label, node.xy, textcoords="offset points", xytext=(4, 4), fontsize=8)

    if route is not None and not route.is_empty:
        xy = np.array(route.polyline)
        ax.plot(xy[:, 0], xy[:, 1], "-", color="green", linewidth=2, alpha=0.6, label="Route", zorder=3)

    colors = ["black", "blue", "red", "orange", "purple"]
    linestyles = ["-", "--", "-.", ":", "-"]
    for i, (name, track) in enumerate(tracks.items()):
        track = np.asarray(track)
        ax.plot(
            track[:, 0],
            track[:, 1],
            linestyle=linestyles[i % len(linestyles)],
            color=colors[i % len(colors)],
            linewidth=1.5,
            label=name,
            zorder=4,
        )

    if fixes is not None and len(fixes):
        fixes = np.asarray(fixes)
        ax.plot(fixes[:, 0], fixes[:, 1], "x", color="red", alpha=0.5, label="Wi-Fi fixes", zorder=5)

    ax.set_xlabel("X (m)", fontsize=12)
    ax.set_ylabel("Y (m)", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)
    ax.axis("equal")

    plt.tight_layout()
    return fig


def plot_error_cdf(
    errors_dict: Dict[str, np.ndarray], title: str = "Error CDF"
) -> plt.Figure:
    """
    Plot the cumulative distribution of position error magnitudes.

    Args:
        errors_dict: Dictionary of error arrays {name: errors}
        title: Plot title

    Returns:
        fig: Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=(10, 6))

    for name, errors in errors_dict.items():
        sorted_errors = np.sort(np.abs(np.asarray(errors)))
        cdf = np.arange(1, len(sorted_errors) + 1) / len(sorted_errors)
        ax.plot(sorted_errors, cdf, label=name, linewidth=2)

    ax.set_xlabel("Position Error (m)", fontsize=12)
    ax.set_ylabel("CDF", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)
    ax.set_xlim(left=0)
    ax.set_ylim([0, 1.05])

    plt.tight_layout()
    return fig


def save_figure(
    fig: plt.Figure,
    out_dir: Union[str, Path],
    name: str,
    formats: Tuple[str, ...] = ("png",),
) -> List[Path]:
    """Save figure in each of ``formats`` under ``out_dir``; returns the paths."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for fmt in formats:
        filepath = out_dir / f"{name}.{fmt}"
        fig.savefig(filepath, dpi=150, bbox_inches="tight")
        paths.append(filepath)

    return paths
