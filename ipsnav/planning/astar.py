"""
A* shortest-path search over the floor graph.

    g(n): cost of the best known path from start to n
    h(n): Euclidean distance from n to the goal (admissible while edge
          weights are at least the straight-line length between endpoints)
    f(n) = g(n) + h(n)

The open set is a binary heap keyed on (f, insertion counter), so equal
f values are expanded in the order they were discovered and the result
is reproducible for a given graph.
"""

import heapq
import itertools
import math
from typing import Dict, List, Sequence

from ipsnav.exceptions import InvalidNode
from ipsnav.graph.types import Graph, Node


def heuristic(a: Node, b: Node) -> float:
    """Straight-line distance between two nodes (m)."""
    return math.hypot(a.x_m - b.x_m, a.y_m - b.y_m)


def _reconstruct_path(came_from: Dict[str, str], current: str) -> List[str]:
    path = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path


def find_path(graph: Graph, start_id: str, goal_id: str) -> List[Node]:
    """
    Lowest-cost node sequence from ``start_id`` to ``goal_id``.

    Args:
        graph: Floor graph.
        start_id: Id of the start node.
        goal_id: Id of the goal node.

    Returns:
        Nodes from start to goal inclusive; ``[start]`` when both ids are
        equal; an empty list when the goal is unreachable.

    Raises:
        InvalidNode: If either id is not in the graph.

    Examples:
        >>> from ipsnav.graph.types import Edge
        >>> g = Graph(
        ...     nodes=(Node("A", "A", 0, 0), Node("B", "B", 10, 0), Node("C", "C", 10, 10)),
        ...     edges=(Edge("A", "B", 10.0), Edge("B", "C", 10.0)),
        ... )
        >>> [n.id for n in find_path(g, "A", "C")]
        ['A', 'B', 'C']
    """
    start = graph.node_by_id(start_id)
    goal = graph.node_by_id(goal_id)
    if start is None:
        raise InvalidNode(f"Unknown start node id: {start_id!r}")
    if goal is None:
        raise InvalidNode(f"Unknown goal node id: {goal_id!r}")

    counter = itertools.count()
    open_heap = [(heuristic(start, goal), next(counter), start.id)]
    came_from: Dict[str, str] = {}
    g_score: Dict[str, float] = {start.id: 0.0}
    closed = set()

    while open_heap:
        _, _, current_id = heapq.heappop(open_heap)
        if current_id in closed:
            continue
        if current_id == goal.id:
            return [graph.node_by_id(i) for i in _reconstruct_path(came_from, current_id)]
        closed.add(current_id)

        for neighbor, weight in graph.neighbors(current_id):
            tentative_g = g_score[current_id] + weight
            if tentative_g < g_score.get(neighbor.id, math.inf):
                came_from[neighbor.id] = current_id
                g_score[neighbor.id] = tentative_g
                # Improved nodes are reopened; stale heap entries are skipped above
                closed.discard(neighbor.id)
                f = tentative_g + heuristic(neighbor, goal)
                heapq.heappush(open_heap, (f, next(counter), neighbor.id))

    return []


def path_cost(graph: Graph, path: Sequence[Node]) -> float:
    """
    Sum of edge weights along ``path``.

    Raises:
        ValueError: If two consecutive nodes are not joined by an edge.
    """
    total = 0.0
    for a, b in zip(path, path[1:]):
        weight = graph.edge_weight(a.id, b.id)
        if weight is None:
            raise ValueError(f"No edge between {a.id!r} and {b.id!r}")
        total += weight
    return total
