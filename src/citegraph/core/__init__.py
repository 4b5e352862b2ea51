"""
Core Module
===========

Data model, graph builder and traversal primitives shared by every
algorithm.

Submodules
----------
types
    Node/edge records and immutable result records
graph
    Snapshot builder (index adjacency) and networkx conversion
traversal
    Breadth-first and depth-first search
"""

from .types import (
    EntityType,
    GraphNode,
    GraphEdge,
    Community,
    PathResult,
    ComponentResult,
    CycleResult,
    TraversalResult,
)
from .graph import (
    GraphSnapshot,
    build_graph,
    to_networkx,
    from_networkx,
)
from .traversal import bfs, dfs

__all__ = [
    # Types
    "EntityType",
    "GraphNode",
    "GraphEdge",
    "Community",
    "PathResult",
    "ComponentResult",
    "CycleResult",
    "TraversalResult",
    # Builder
    "GraphSnapshot",
    "build_graph",
    "to_networkx",
    "from_networkx",
    # Traversal
    "bfs",
    "dfs",
]
