"""Data structures for the static indoor graph.

The graph is loaded once and treated as an immutable value: nodes and
edges are frozen dataclasses and ``Graph`` only exposes read-only
queries. Coordinates are floor-local meters (x east, y north).
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Node:
    """
    A point of interest or junction.

    Attributes:
        id: Unique identifier within the graph.
        label: Human-readable name (e.g. "1-10", "Stairs"), may be None.
        x_m: Floor-local x coordinate (m).
        y_m: Floor-local y coordinate (m).
        floor: Floor level.
        type: "room", "junction", "turn", ...
    """

    id: str
    label: Optional[str]
    x_m: float
    y_m: float
    floor: int = 1
    type: str = "room"

    @property
    def xy(self) -> Tuple[float, float]:
        return (self.x_m, self.y_m)

    @property
    def is_room(self) -> bool:
        return self.type.lower() == "room"

    @property
    def is_junction(self) -> bool:
        return self.type.lower() == "junction"

    @property
    def is_turn(self) -> bool:
        return self.type.lower() == "turn"


@dataclass(frozen=True)
class Edge:
    """An undirected walkable connection between nodes ``u`` and ``v``."""

    u: str
    v: str
    weight: float
    type: Optional[str] = None

    def other(self, node_id: str) -> str:
        """Endpoint opposite to ``node_id``."""
        return self.v if self.u == node_id else self.u


@dataclass(frozen=True)
class GraphMetadata:
    """
    Floor-plan metadata used to place graph coordinates on the map image.

    Attributes:
        building: Building name.
        floor: Floor number the graph describes.
        units: Coordinate units, normally "m".
        px_per_meter: Floor-plan image scale.
        image_width_px: Floor-plan image width.
        image_height_px: Floor-plan image height.
        origin: Description of the coordinate origin.
        north_angle_deg: Angle between map +y and true north.
        offset_x_m: Alignment offset added to x before scaling.
        offset_y_m: Alignment offset added to y before scaling.
    """

    building: Optional[str] = None
    floor: Optional[int] = None
    units: Optional[str] = None
    px_per_meter: Optional[float] = None
    image_width_px: Optional[int] = None
    image_height_px: Optional[int] = None
    origin: Optional[str] = None
    north_angle_deg: Optional[float] = None
    offset_x_m: float = 0.0
    offset_y_m: float = 0.0


DEFAULT_PX_PER_METER = 100.0
DEFAULT_IMAGE_HEIGHT_PX = 2000


@dataclass(frozen=True)
class Graph:
    """
    Immutable indoor floor graph.

    Build it with ``ipsnav.graph.load_graph``; the constructor assumes
    its inputs were already validated (unique ids, known endpoints,
    non-negative weights).

    Examples:
        >>> g = Graph(
        ...     nodes=(Node("A", "A", 0.0, 0.0), Node("B", "B", 10.0, 0.0)),
        ...     edges=(Edge("A", "B", 10.0),),
        ... )
        >>> [(n.id, w) for n, w in g.neighbors("A")]
        [('B', 10.0)]
    """

    nodes: Tuple[Node, ...]
    edges: Tuple[Edge, ...]
    metadata: GraphMetadata = field(default_factory=GraphMetadata)

    def __post_init__(self) -> None:
        by_id = {node.id: node for node in self.nodes}
        adjacency: Dict[str, List[Tuple[str, float]]] = {node.id: [] for node in self.nodes}
        # Edge order is preserved so neighbour scans stay deterministic
        for edge in self.edges:
            adjacency[edge.u].append((edge.v, edge.weight))
            if edge.u != edge.v:
                adjacency[edge.v].append((edge.u, edge.weight))
        object.__setattr__(self, "_by_id", by_id)
        object.__setattr__(self, "_adjacency", adjacency)

    @property
    def n_nodes(self) -> int:
        return len(self.nodes)

    @property
    def n_edges(self) -> int:
        return len(self.edges)

    def node_by_id(self, node_id: str) -> Optional[Node]:
        return self._by_id.get(node_id)

    def node_by_label(self, label: str) -> Optional[Node]:
        """First node whose label equals ``label`` ignoring case."""
        target = label.casefold()
        for node in self.nodes:
            if node.label is not None and node.label.casefold() == target:
                return node
        return None

    def neighbors(self, node_id: str) -> List[Tuple[Node, float]]:
        """
        Nodes reachable over one edge from ``node_id`` with edge weights.

        Edges are undirected, so both endpoints see each other. Unknown
        ids have no neighbours.
        """
        return [(self._by_id[other], w) for other, w in self._adjacency.get(node_id, [])]

    def nearest_node(self, x: float, y: float) -> Optional[Node]:
        """
        Node with minimum squared Euclidean distance to (x, y).

        Ties go to the node that comes first in insertion order. Returns
        None only for an empty graph.
        """
        best: Optional[Node] = None
        best_d2 = float("inf")
        for node in self.nodes:
            dx = node.x_m - x
            dy = node.y_m - y
            d2 = dx * dx + dy * dy
            if d2 < best_d2:
                best, best_d2 = node, d2
        return best

    def nodes_of_type(self, node_type: str) -> List[Node]:
        target = node_type.lower()
        return [node for node in self.nodes if node.type.lower() == target]

    def labels(self) -> List[str]:
        """All node labels sorted case-insensitively (for destination pickers)."""
        return sorted((n.label for n in self.nodes if n.label), key=str.lower)

    def edge_weight(self, u: str, v: str) -> Optional[float]:
        """Smallest weight among edges joining ``u`` and ``v``, or None."""
        weights = [w for other, w in self._adjacency.get(u, []) if other == v]
        return min(weights) if weights else None

    def to_pixels(self, x_m: float, y_m: float) -> Tuple[float, float]:
        """
        Map floor meters to floor-plan pixel coordinates.

        Image rows grow downwards, so y is flipped against the image
        height. Missing metadata falls back to 100 px/m and a 2000 px
        tall image.
        """
        meta = self.metadata
        ppm = meta.px_per_meter if meta.px_per_meter is not None else DEFAULT_PX_PER_METER
        height = (
            meta.image_height_px if meta.image_height_px is not None else DEFAULT_IMAGE_HEIGHT_PX
        )
        px = (x_m + meta.offset_x_m) * ppm
        py = height - (y_m + meta.offset_y_m) * ppm
        return (px, py)

    def __repr__(self) -> str:
        building = f", building={self.metadata.building!r}" if self.metadata.building else ""
        return f"Graph(n_nodes={self.n_nodes}, n_edges={self.n_edges}{building})"
