"""Static indoor graph: nodes, walkable edges and floor-plan metadata.

Main components:
    - Node, Edge, GraphMetadata, Graph: immutable graph value
    - load_graph, graph_from_dict: validated loading (ParseError on bad input)
    - GraphManager: explicit, load-once owner of the shared graph

Example usage:
    >>> from ipsnav.graph import load_graph
    >>> graph = load_graph("assets/graph.json")      # doctest: +SKIP
    >>> graph.nearest_node(3.2, 4.1)                 # doctest: +SKIP
"""

from .loader import GraphManager, graph_from_dict, load_graph
from .types import Edge, Graph, GraphMetadata, Node

__all__ = [
    "Node",
    "Edge",
    "GraphMetadata",
    "Graph",
    "load_graph",
    "graph_from_dict",
    "GraphManager",
]
