"""
Algorithm dispatch.

``run_algorithm`` resolves an algorithm name once into the concrete
function and fills every option the caller left out from the
configuration (see ``citegraph.config``).
"""

import inspect
import logging
from typing import Any, Callable, Dict, Optional, Sequence

from .algorithms.cohesion import (
    clustering_coefficient,
    core_numbers,
    core_periphery,
    detect_star_patterns,
    find_triangles,
    k_core,
    k_truss,
    truss_numbers,
)
from .algorithms.community_detection import detect_communities
from .algorithms.connectivity import (
    find_biconnected_components,
    find_components,
    find_cycle,
    has_cycles,
    topological_sort,
)
from .algorithms.extraction import ego_network, filter_subgraph, find_reachable
from .algorithms.paths import find_shortest_path, shortest_path_lengths
from .algorithms.patterns import find_bibliographic_coupling, find_co_citations
from .config import load_config
from .core.traversal import bfs, dfs
from .core.types import EdgeLike, NodeLike
from .metrics.quality import cluster_quality, modularity
from .metrics.statistics import graph_statistics

logger = logging.getLogger(__name__)

ALGORITHMS: Dict[str, Callable[..., Any]] = {
    "bfs": bfs,
    "dfs": dfs,
    "components": find_components,
    "biconnected_components": find_biconnected_components,
    "cycle": find_cycle,
    "has_cycles": has_cycles,
    "topological_sort": topological_sort,
    "shortest_path": find_shortest_path,
    "shortest_path_lengths": shortest_path_lengths,
    "ego_network": ego_network,
    "reachable": find_reachable,
    "filter_subgraph": filter_subgraph,
    "k_core": k_core,
    "core_numbers": core_numbers,
    "k_truss": k_truss,
    "truss_numbers": truss_numbers,
    "triangles": find_triangles,
    "clustering_coefficient": clustering_coefficient,
    "star_patterns": detect_star_patterns,
    "core_periphery": core_periphery,
    "communities": detect_communities,
    "co_citation": find_co_citations,
    "bibliographic_coupling": find_bibliographic_coupling,
    "statistics": graph_statistics,
    "modularity": modularity,
    "cluster_quality": cluster_quality,
}

# configuration keys whose parameter name differs per function
_ALIASES = {("k_truss", "k"): "k_truss"}


def resolve_algorithm(name: str) -> Callable[..., Any]:
    """
    Look up an algorithm by name ('-' and '_' are interchangeable).

    Raises
    ------
    ValueError
        If no algorithm has that name
    """
    key = name.strip().lower().replace("-", "_")
    if key not in ALGORITHMS:
        raise ValueError(f"Unknown algorithm: {name}")
    return ALGORITHMS[key]


def run_algorithm(
    name: str,
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    config: Optional[Dict[str, Any]] = None,
    **options: Any,
) -> Any:
    """
    Run one algorithm over a snapshot.

    Parameters
    ----------
    name : str
        Key of ``ALGORITHMS``, e.g. 'communities' or 'k-truss'
    nodes, edges : sequences
        Graph snapshot
    config : dict, optional
        Option defaults as returned by ``load_config``; the built-in
        defaults when None
    **options
        Algorithm options; these take precedence over ``config``

    Returns
    -------
    Any
        The algorithm's result record

    Examples
    --------
    >>> run_algorithm("k-truss", list("ABC"), [("A", "B"), ("B", "C"), ("C", "A")]).node_count
    3
    """
    func = resolve_algorithm(name)
    config = load_config() if config is None else config
    key = name.strip().lower().replace("-", "_")

    resolved: Dict[str, Any] = {}
    for param, spec in inspect.signature(func).parameters.items():
        if param in ("nodes", "edges") or param in options:
            continue
        if spec.default is inspect.Parameter.empty:
            continue
        config_key = _ALIASES.get((key, param), param)
        if config_key in config:
            resolved[param] = config[config_key]
    resolved.update(options)

    logger.debug(f"Running {key} with options {sorted(resolved)}")
    return func(nodes, edges, **resolved)
