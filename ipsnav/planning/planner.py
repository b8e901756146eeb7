"""
Route planning with off-route detection.

``RoutePlanner`` resolves labels against the graph, runs A*, keeps the
active route and its goal, and replans from the nearest node whenever
the fused position strays from the route polyline.
"""

import logging
from typing import List, Optional, Tuple

from ipsnav.config import PlannerConfig
from ipsnav.exceptions import InvalidNode, NoRouteFound
from ipsnav.graph.types import Graph, Node
from ipsnav.planning.astar import find_path, path_cost
from ipsnav.planning.instructions import generate_instructions
from ipsnav.planning.route import Route

logger = logging.getLogger(__name__)


class RoutePlanner:
    """
    Plans and maintains the active route over a shared read-only graph.

    Usage:
        >>> planner = RoutePlanner(graph)                          # doctest: +SKIP
        >>> route = planner.navigate("1-10", start_label="Lift")   # doctest: +SKIP
        >>> planner.check_off_route(4.0, 3.0)                      # doctest: +SKIP
    """

    def __init__(self, graph: Graph, config: Optional[PlannerConfig] = None):
        self.graph = graph
        self.config = config or PlannerConfig()
        self._route: Optional[Route] = None
        self._instructions: List[str] = []

    @property
    def route(self) -> Optional[Route]:
        return self._route

    @property
    def instructions(self) -> List[str]:
        return list(self._instructions)

    @property
    def goal_id(self) -> Optional[str]:
        return self._route.goal_id if self._route is not None else None

    def resolve_label(self, label: str) -> Node:
        node = self.graph.node_by_label(label)
        if node is None:
            raise InvalidNode(f"Unknown location label: {label!r}")
        return node

    def plan(self, start_id: str, goal_id: str) -> Route:
        """
        Run A* between two node ids and make the result the active route.

        Raises:
            InvalidNode: Unknown id.
            NoRouteFound: Goal unreachable from start.
        """
        nodes = find_path(self.graph, start_id, goal_id)
        if not nodes:
            raise NoRouteFound(f"No path from {start_id!r} to {goal_id!r}")
        route = Route(nodes=tuple(nodes), goal_id=goal_id, cost=path_cost(self.graph, nodes))
        self._route = route
        self._instructions = generate_instructions(route.nodes, self.graph, self.config)
        logger.info(
            "Route %s (%.1f m, %d nodes)", " -> ".join(route.labels), route.cost, len(route)
        )
        return route

    def navigate(
        self,
        goal_label: str,
        start_label: Optional[str] = None,
        position: Optional[Tuple[float, float]] = None,
    ) -> Route:
        """
        Plan a route to ``goal_label``.

        Args:
            goal_label: Destination label.
            start_label: Start label; None means "current location", the
                         node nearest to ``position``.
            position: Fused (x, y) used when ``start_label`` is None.

        Raises:
            InvalidNode: Unknown label, or no start label and no position.
            NoRouteFound: Goal unreachable. The previous route is kept.
        """
        goal = self.resolve_label(goal_label)
        if start_label is not None:
            start = self.resolve_label(start_label)
        elif position is not None:
            start = self.graph.nearest_node(*position)
            if start is None:
                raise InvalidNode("Graph has no nodes")
        else:
            raise InvalidNode("No start label given and no current position known")
        return self.plan(start.id, goal.id)

    def clear(self) -> None:
        self._route = None
        self._instructions = []

    def distance_to_route(self, x: float, y: float) -> Optional[float]:
        if self._route is None or self._route.is_empty:
            return None
        return self._route.distance_to(x, y)

    def check_off_route(self, x: float, y: float) -> Optional[Route]:
        """
        Replan when (x, y) is farther than the threshold from the route.

        Returns:
            The new route if a replan happened, else None.

        Raises:
            NoRouteFound: The goal is unreachable from the nearest node.
        """
        distance = self.distance_to_route(x, y)
        if distance is None or distance <= self.config.off_route_threshold_m:
            return None

        nearest = self.graph.nearest_node(x, y)
        logger.info(
            "Off route by %.1f m at (%.1f, %.1f); replanning from %s",
            distance, x, y, nearest.label or nearest.id,
        )
        return self.plan(nearest.id, self._route.goal_id)
