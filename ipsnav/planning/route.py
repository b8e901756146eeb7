"""Planned route value."""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ipsnav.graph.types import Node
from ipsnav.utils.geometry import point_to_polyline_distance


@dataclass(frozen=True)
class Route:
    """
    Ordered node sequence from start to goal.

    An empty ``nodes`` tuple means "no path". ``cost`` is the sum of
    edge weights along the nodes.
    """

    nodes: Tuple[Node, ...]
    goal_id: str
    cost: float = 0.0

    @property
    def is_empty(self) -> bool:
        return len(self.nodes) == 0

    @property
    def start(self) -> Optional[Node]:
        return self.nodes[0] if self.nodes else None

    @property
    def ids(self) -> List[str]:
        return [node.id for node in self.nodes]

    @property
    def labels(self) -> List[str]:
        """Node labels, falling back to ids for unlabeled nodes."""
        return [node.label or node.id for node in self.nodes]

    @property
    def polyline(self) -> List[Tuple[float, float]]:
        return [node.xy for node in self.nodes]

    def distance_to(self, x: float, y: float) -> float:
        """Perpendicular distance from (x, y) to the route polyline (m)."""
        return point_to_polyline_distance((x, y), self.polyline)

    def __len__(self) -> int:
        return len(self.nodes)
