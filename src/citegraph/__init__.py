"""
citegraph
=========

Graph analytics for bibliographic property graphs: works, authors,
institutions and related entities linked by citation, authorship and
affiliation edges.

Every function takes a ``(nodes, edges)`` snapshot plus scalar options,
rebuilds its own index adjacency, and returns a fully materialized,
immutable result record. Nothing is cached between calls and caller
records are never modified.

Modules
-------
core
    Data model, graph builder, BFS/DFS
algorithms
    Connectivity, paths, extraction, cohesion, communities, patterns
metrics
    Statistics and partition quality
engine
    Name-based dispatch with configurable defaults
"""

__version__ = "0.1.0"

from . import core
from . import algorithms
from . import metrics

from .core import (
    EntityType,
    GraphNode,
    GraphEdge,
    build_graph,
    bfs,
    dfs,
)
from .algorithms import *  # noqa: F401,F403
from .metrics import *  # noqa: F401,F403
from .config import load_config
from .engine import run_algorithm

__all__ = [
    "core",
    "algorithms",
    "metrics",
    "EntityType",
    "GraphNode",
    "GraphEdge",
    "build_graph",
    "bfs",
    "dfs",
    "load_config",
    "run_algorithm",
    "__version__",
] + algorithms.__all__ + metrics.__all__
