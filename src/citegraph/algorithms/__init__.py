"""
Algorithms Module
=================

This module provides the graph algorithms of the engine.

Submodules
----------
connectivity
    Weak/strong components, cycles, topological order, biconnectivity
paths
    Unweighted and weighted shortest paths
extraction
    Ego networks, reachability, induced and filtered subgraphs
cohesion
    k-core, k-truss and truss numbers, triangles, star patterns, core-periphery
community_detection
    Louvain, Leiden, label propagation and hierarchical linkage
patterns
    Co-citation and bibliographic coupling
"""

from .connectivity import (
    find_components,
    find_weak_components,
    find_strong_components,
    find_cycle,
    has_cycles,
    topological_sort,
    find_biconnected_components,
)
from .paths import (
    find_shortest_path,
    shortest_path_lengths,
)
from .extraction import (
    ego_network,
    find_reachable,
    induced_subgraph,
    filter_subgraph,
)
from .cohesion import (
    k_core,
    core_numbers,
    k_truss,
    truss_numbers,
    find_triangles,
    clustering_coefficient,
    detect_star_patterns,
    core_periphery,
)
from .community_detection import (
    CommunityAlgorithm,
    detect_communities,
)
from .patterns import (
    find_co_citations,
    find_bibliographic_coupling,
)

__all__ = [
    # Connectivity
    "find_components",
    "find_weak_components",
    "find_strong_components",
    "find_cycle",
    "has_cycles",
    "topological_sort",
    "find_biconnected_components",
    # Paths
    "find_shortest_path",
    "shortest_path_lengths",
    # Extraction
    "ego_network",
    "find_reachable",
    "induced_subgraph",
    "filter_subgraph",
    # Cohesion
    "k_core",
    "core_numbers",
    "k_truss",
    "truss_numbers",
    "find_triangles",
    "clustering_coefficient",
    "detect_star_patterns",
    "core_periphery",
    # Community detection
    "CommunityAlgorithm",
    "detect_communities",
    # Relational patterns
    "find_co_citations",
    "find_bibliographic_coupling",
]
