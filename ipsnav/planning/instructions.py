"""
Turn-by-turn text for a planned route.

For each leg current → next the generator emits one line:

    "<Turn right|Turn left|Go straight>[ for D.D m][ towards LABEL]"

The turn word comes from the signed angle at ``current`` between the
incoming leg (prev → current) and the outgoing leg (current → next).
Junction nodes are announced by the nearest room's label, turn nodes
as "the end of hallway", and a leg whose label repeats the previous one
is skipped. The last line names the destination.
"""

import math
from typing import List, Optional, Sequence, Tuple

from ipsnav.config import PlannerConfig
from ipsnav.graph.types import Graph, Node
from ipsnav.utils.geometry import euclidean

END_OF_HALLWAY = "the end of hallway"

Point = Tuple[float, float]


def turn_angle(a: Point, b: Point, c: Point, y_axis_up: bool = True) -> float:
    """
    Signed turn angle at ``b`` when walking a → b → c (degrees).

    Positive is a right (clockwise) turn, negative a left turn, 0 straight
    on; the result lies in [-180, 180]. ``y_axis_up`` selects the frame:
    True for map coordinates (y north), False for image coordinates
    (y down), where the sign of the cross product flips.

    Examples:
        >>> turn_angle((0, 0), (0, 10), (10, 10))    # north, then east
        90.0
        >>> turn_angle((0, 0), (0, 10), (-10, 10))   # north, then west
        -90.0
    """
    v1x, v1y = b[0] - a[0], b[1] - a[1]
    v2x, v2y = c[0] - b[0], c[1] - b[1]
    dot = v1x * v2x + v1y * v2y
    cross = v1x * v2y - v1y * v2x
    if y_axis_up:
        cross = -cross
    return math.degrees(math.atan2(cross, dot))


def classify_turn(angle_deg: float, threshold_deg: float = 30.0) -> str:
    if angle_deg > threshold_deg:
        return "Turn right"
    if angle_deg < -threshold_deg:
        return "Turn left"
    return "Go straight"


def _nearest_room_label(node: Node, graph: Optional[Graph]) -> Optional[str]:
    if graph is None:
        return None
    rooms = [room for room in graph.nodes if room.is_room and room.label]
    if not rooms:
        return None
    nearest = min(rooms, key=lambda room: euclidean(node.xy, room.xy))
    return nearest.label


def display_label(node: Node, graph: Optional[Graph] = None) -> str:
    """Readable name of ``node`` as used in instructions."""
    if node.is_junction:
        return _nearest_room_label(node, graph) or node.label or "nearby room"
    if node.is_turn:
        return END_OF_HALLWAY
    return node.label or ""


def generate_instructions(
    path: Sequence[Node],
    graph: Optional[Graph] = None,
    config: Optional[PlannerConfig] = None,
) -> List[str]:
    """
    Instruction lines for walking ``path``.

    Args:
        path: Route nodes from start to goal.
        graph: Graph used to relabel junctions by their nearest room; when
               None, junctions keep their own label.
        config: Turn threshold and frame orientation.

    Returns:
        One line per announced leg followed by "You have arrived at ...".
        A path with fewer than two nodes gives ["Already at destination."].
    """
    config = config or PlannerConfig()
    if len(path) < 2:
        return ["Already at destination."]

    instructions: List[str] = []
    last_label: Optional[str] = None

    for i in range(len(path) - 1):
        current = path[i]
        nxt = path[i + 1]

        label = display_label(nxt, graph)
        if label == last_label:
            continue
        last_label = label

        if nxt.is_turn:
            instructions.append(f"Turn at {label}")
            continue

        if i >= 1:
            angle = turn_angle(path[i - 1].xy, current.xy, nxt.xy, config.y_axis_up)
            turn = classify_turn(angle, config.turn_threshold_deg)
        else:
            turn = "Go straight"

        distance = euclidean(current.xy, nxt.xy)
        distance_text = f" for {distance:.1f} m" if distance > 0.5 else ""
        label_text = f" towards {label}" if label else ""
        instructions.append(f"{turn}{distance_text}{label_text}")

    destination = path[-1].label or "your destination"
    instructions.append(f"You have arrived at {destination}")
    return instructions
