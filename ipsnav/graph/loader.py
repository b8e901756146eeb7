"""Loading and validation of indoor graph descriptions.

Expected JSON layout::

    {
      "nodes": [{"id": "n1", "label": "1-01", "x_m": 1.0, "y_m": 1.0,
                 "z": 1, "type": "room"}, ...],
      "edges": [{"u": "n1", "v": "n2", "w": 3.5, "edge_type": "manual"}, ...],
      "metadata": {"building": "...", "floor": 1, "units": "m",
                   "scale": {"px_per_meter": 100.0},
                   "image_size_px": {"width": 3000, "height": 2000},
                   "origin": "bottom-left", "north_angle_deg": 0.0,
                   "alignment_offsets_m": {"x": 0.0, "y": 0.0}}
    }

``floor`` is accepted as an alias of ``z`` and ``weight`` of ``w``.
"""

import json
import logging
import math
import threading
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from ipsnav.exceptions import ParseError
from ipsnav.graph.types import Edge, Graph, GraphMetadata, Node

logger = logging.getLogger(__name__)

GraphSource = Union[str, Path, Mapping[str, Any]]


def _number(value: Any, what: str) -> float:
    if isinstance(value, bool) or value is None:
        raise ParseError(f"{what} must be a number, got {value!r}")
    try:
        result = float(value)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"{what} must be a number, got {value!r}") from exc
    if not math.isfinite(result):
        raise ParseError(f"{what} must be finite, got {value!r}")
    return result


def _optional(mapping: Mapping[str, Any], key: str, convert, what: str):
    value = mapping.get(key)
    if value is None:
        return None
    try:
        return convert(value)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"{what} has invalid value {value!r}") from exc


def _parse_node(raw: Any, index: int) -> Node:
    if not isinstance(raw, Mapping):
        raise ParseError(f"nodes[{index}] must be an object")
    if "id" not in raw or raw["id"] is None:
        raise ParseError(f"nodes[{index}] is missing 'id'")
    for key in ("x_m", "y_m"):
        if key not in raw:
            raise ParseError(f"nodes[{index}] ({raw['id']}) is missing '{key}'")

    floor_raw = raw.get("z", raw.get("floor", 1))
    try:
        floor = int(floor_raw)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"nodes[{index}] has invalid floor {floor_raw!r}") from exc

    label = raw.get("label")
    return Node(
        id=str(raw["id"]),
        label=None if label is None else str(label),
        x_m=_number(raw["x_m"], f"nodes[{index}].x_m"),
        y_m=_number(raw["y_m"], f"nodes[{index}].y_m"),
        floor=floor,
        type=str(raw.get("type") or "room"),
    )


def _parse_edge(raw: Any, index: int, node_ids: Dict[str, Node]) -> Edge:
    if not isinstance(raw, Mapping):
        raise ParseError(f"edges[{index}] must be an object")
    for key in ("u", "v"):
        if key not in raw:
            raise ParseError(f"edges[{index}] is missing '{key}'")
    u, v = str(raw["u"]), str(raw["v"])
    for endpoint in (u, v):
        if endpoint not in node_ids:
            raise ParseError(f"edges[{index}] references unknown node id '{endpoint}'")

    if "w" in raw:
        weight = _number(raw["w"], f"edges[{index}].w")
    elif "weight" in raw:
        weight = _number(raw["weight"], f"edges[{index}].weight")
    else:
        raise ParseError(f"edges[{index}] ({u}-{v}) is missing weight 'w'")
    if weight < 0:
        raise ParseError(f"edges[{index}] ({u}-{v}) has negative weight {weight}")

    edge_type = raw.get("edge_type", raw.get("type"))
    return Edge(u=u, v=v, weight=weight, type=None if edge_type is None else str(edge_type))


def _parse_metadata(raw: Any) -> GraphMetadata:
    if raw is None:
        return GraphMetadata()
    if not isinstance(raw, Mapping):
        raise ParseError("metadata must be an object")

    scale = raw.get("scale") or {}
    size = raw.get("image_size_px") or {}
    offsets = raw.get("alignment_offsets_m") or {}
    for name, section in (("scale", scale), ("image_size_px", size),
                          ("alignment_offsets_m", offsets)):
        if not isinstance(section, Mapping):
            raise ParseError(f"metadata.{name} must be an object")

    return GraphMetadata(
        building=_optional(raw, "building", str, "metadata.building"),
        floor=_optional(raw, "floor", int, "metadata.floor"),
        units=_optional(raw, "units", str, "metadata.units"),
        px_per_meter=_optional(scale, "px_per_meter", float, "metadata.scale.px_per_meter"),
        image_width_px=_optional(size, "width", int, "metadata.image_size_px.width"),
        image_height_px=_optional(size, "height", int, "metadata.image_size_px.height"),
        origin=_optional(raw, "origin", str, "metadata.origin"),
        north_angle_deg=_optional(raw, "north_angle_deg", float, "metadata.north_angle_deg"),
        offset_x_m=_optional(offsets, "x", float, "metadata.alignment_offsets_m.x") or 0.0,
        offset_y_m=_optional(offsets, "y", float, "metadata.alignment_offsets_m.y") or 0.0,
    )


def graph_from_dict(data: Mapping[str, Any]) -> Graph:
    """
    Validate a decoded graph description and build a ``Graph``.

    Args:
        data: Mapping with ``nodes``, ``edges`` and optional ``metadata``.

    Returns:
        Immutable Graph.

    Raises:
        ParseError: On missing sections, malformed entries, duplicate
                    node ids, unknown edge endpoints or negative weights.
    """
    if not isinstance(data, Mapping):
        raise ParseError(f"Graph description must be an object, got {type(data).__name__}")
    nodes_raw = data.get("nodes")
    edges_raw = data.get("edges")
    if not isinstance(nodes_raw, list):
        raise ParseError("Graph description must contain a 'nodes' list")
    if not isinstance(edges_raw, list):
        raise ParseError("Graph description must contain an 'edges' list")

    nodes: List[Node] = []
    by_id: Dict[str, Node] = {}
    for i, raw in enumerate(nodes_raw):
        node = _parse_node(raw, i)
        if node.id in by_id:
            raise ParseError(f"Duplicate node id '{node.id}'")
        by_id[node.id] = node
        nodes.append(node)

    edges = [_parse_edge(raw, i, by_id) for i, raw in enumerate(edges_raw)]
    metadata = _parse_metadata(data.get("metadata"))

    return Graph(nodes=tuple(nodes), edges=tuple(edges), metadata=metadata)


def load_graph(source: GraphSource) -> Graph:
    """
    Load a graph from a JSON file path or an already decoded mapping.

    Args:
        source: Path to a JSON file, or a mapping in the documented layout.

    Returns:
        Immutable Graph.

    Raises:
        ParseError: If the file cannot be read or decoded, or the
                    description is malformed.

    Examples:
        >>> g = load_graph({
        ...     "nodes": [{"id": "A", "label": "A", "x_m": 0, "y_m": 0, "z": 1, "type": "room"}],
        ...     "edges": [],
        ... })
        >>> g.n_nodes
        1
    """
    if isinstance(source, Mapping):
        return graph_from_dict(source)

    path = Path(source)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise ParseError(f"Cannot read graph file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ParseError(f"Graph file {path} is not valid JSON: {exc}") from exc

    graph = graph_from_dict(data)
    logger.info("Loaded graph from %s: %d nodes, %d edges", path, graph.n_nodes, graph.n_edges)
    return graph


class GraphManager:
    """
    Owner of the process-wide graph handle.

    Constructed explicitly and passed to whoever needs the graph; the
    first successful ``load`` wins and later calls return the same
    Graph without touching the source again.

    Usage:
        >>> manager = GraphManager()
        >>> graph = manager.load("assets/graph.json")   # doctest: +SKIP
        >>> manager.load("other.json") is graph          # doctest: +SKIP
        True
    """

    def __init__(self, graph: Optional[Graph] = None):
        self._graph = graph
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._graph is not None

    def load(self, source: GraphSource) -> Graph:
        """Load the graph once; subsequent calls are no-ops."""
        with self._lock:
            if self._graph is None:
                self._graph = load_graph(source)
            else:
                logger.debug("Graph already loaded, ignoring new source")
            return self._graph

    @property
    def graph(self) -> Graph:
        if self._graph is None:
            raise RuntimeError("Graph not loaded. Call load() first.")
        return self._graph
