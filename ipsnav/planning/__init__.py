"""
Route planning and instruction generation.

Modules:
    astar: A* search and path cost over the floor graph
    route: Route value (nodes, goal, cost, polyline)
    planner: RoutePlanner with label resolution and off-route replanning
    instructions: turn angles and turn-by-turn text
"""

from ipsnav.planning.astar import find_path, heuristic, path_cost
from ipsnav.planning.instructions import (
    classify_turn,
    display_label,
    generate_instructions,
    turn_angle,
)
from ipsnav.planning.planner import RoutePlanner
from ipsnav.planning.route import Route

__all__ = [
    "find_path",
    "heuristic",
    "path_cost",
    "Route",
    "RoutePlanner",
    "generate_instructions",
    "turn_angle",
    "classify_turn",
    "display_label",
]
