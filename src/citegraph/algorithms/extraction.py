"""
Subgraph Extraction Module
==========================

Neighborhood-style views of a snapshot:

- Ego network: nodes within ``radius`` hops of one or more seeds, with
  the edges among them
- Reachability: everything reachable from a set of sources, forward
  (what they cite) or backward (what cites them)
- Induced subgraph over an explicit node set
- Filtered subgraph from node and edge predicates combined with AND or OR
"""

import logging
from collections import deque
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple, Union

from ..config import DEFAULT_DIRECTED, DEFAULT_EGO_RADIUS
from ..core.graph import GraphSnapshot, build_graph
from ..core.types import (
    EdgeLike,
    EgoNetworkResult,
    GraphEdge,
    GraphNode,
    NodeLike,
    ReachabilityResult,
    coerce_edge,
    coerce_node,
)

logger = logging.getLogger(__name__)


def _multi_source_bfs(
    snapshot: GraphSnapshot,
    sources: List[int],
    max_depth: Optional[int],
    reverse: bool = False,
) -> Dict[int, int]:
    """Hop distance from the nearest source, for every node reached."""
    adjacency = snapshot.reverse if reverse else snapshot.forward
    depths = {s: 0 for s in sources}
    queue = deque(sources)
    while queue:
        u = queue.popleft()
        if max_depth is not None and depths[u] >= max_depth:
            continue
        for v, _ in adjacency[u]:
            if v not in depths:
                depths[v] = depths[u] + 1
                queue.append(v)
    return depths


def _as_list(ids: Union[str, Sequence[str]]) -> List[str]:
    return [ids] if isinstance(ids, str) else list(ids)


def ego_network(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    center: Union[str, Sequence[str]],
    radius: int = DEFAULT_EGO_RADIUS,
    directed: bool = DEFAULT_DIRECTED,
) -> Optional[EgoNetworkResult]:
    """
    Extract the ego network around ``center``.

    Parameters
    ----------
    nodes, edges : sequences
        Graph snapshot
    center : str or sequence of str
        Seed node id, or several seeds for a multi-source ego network
    radius : int, optional
        Maximum hop distance from the nearest seed (default: 1)
    directed : bool, optional
        Expand along outgoing edges only (default: True)

    Returns
    -------
    EgoNetworkResult or None
        None when the center is absent (for several seeds: when none of
        them is present). ``edges`` holds the caller's edge records whose
        endpoints both fall inside the ego network.

    Raises
    ------
    ValueError
        If ``radius`` is negative
    """
    if radius < 0:
        raise ValueError(f"radius must be >= 0, got {radius}")

    edge_records = [coerce_edge(e) for e in edges]
    snapshot = build_graph(nodes, edge_records, directed=directed)
    seeds = [s for s in _as_list(center) if s in snapshot.index]
    if not seeds:
        logger.debug(f"Ego network center {center!r} not in graph")
        return None

    depths = _multi_source_bfs(snapshot, [snapshot.index[s] for s in seeds], radius)
    members = sorted(depths)
    member_ids = set(snapshot.ids(members))
    ego_edges = tuple(
        e for e in edge_records
        if e.source in member_ids and e.target in member_ids and e.source != e.target
    )

    logger.debug(
        f"Ego network of {len(seeds)} seeds at radius {radius}: "
        f"{len(members)} nodes, {len(ego_edges)} edges"
    )
    return EgoNetworkResult(
        seeds=tuple(seeds),
        radius=radius,
        node_ids=snapshot.ids(members),
        edges=ego_edges,
        distances={snapshot.node_ids[i]: d for i, d in depths.items()},
    )


def find_reachable(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    sources: Union[str, Sequence[str]],
    direction: str = "forward",
) -> ReachabilityResult:
    """
    Nodes reachable from ``sources`` (sources included).

    Parameters
    ----------
    direction : str, optional
        'forward' follows edges, 'backward' follows them in reverse
        (default: 'forward')

    Raises
    ------
    ValueError
        If ``direction`` is unknown
    """
    if direction not in ("forward", "backward"):
        raise ValueError(f"Unknown direction: {direction}")

    snapshot = build_graph(nodes, edges, directed=True)
    present = [s for s in _as_list(sources) if s in snapshot.index]
    if not present:
        return ReachabilityResult(sources=(), direction=direction, node_ids=(), distances={})

    depths = _multi_source_bfs(
        snapshot,
        [snapshot.index[s] for s in present],
        max_depth=None,
        reverse=direction == "backward",
    )
    return ReachabilityResult(
        sources=tuple(present),
        direction=direction,
        node_ids=snapshot.ids(sorted(depths)),
        distances={snapshot.node_ids[i]: d for i, d in depths.items()},
    )


def induced_subgraph(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    node_ids: Sequence[str],
) -> Tuple[List[GraphNode], List[GraphEdge]]:
    """
    Restrict a snapshot to ``node_ids`` and the edges among them.

    Input order is preserved; ids not present in ``nodes`` are ignored.
    """
    keep: Set[str] = set(node_ids)
    sub_nodes = [n for n in (coerce_node(r) for r in nodes) if n.id in keep]
    present = {n.id for n in sub_nodes}
    sub_edges = [
        e for e in (coerce_edge(r) for r in edges)
        if e.source in present and e.target in present
    ]
    return sub_nodes, sub_edges


def filter_subgraph(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    node_filter: Optional[Callable[[GraphNode], bool]] = None,
    edge_filter: Optional[Callable[[GraphEdge], bool]] = None,
    combinator: str = "and",
) -> Tuple[List[GraphNode], List[GraphEdge]]:
    """
    Keep the nodes and edges that satisfy attribute predicates.

    Parameters
    ----------
    nodes, edges : sequences
        Graph snapshot
    node_filter : callable, optional
        Predicate on a ``GraphNode``; every node passes when omitted
    edge_filter : callable, optional
        Predicate on a ``GraphEdge``; every edge passes when omitted
    combinator : str, optional
        How the two predicates combine when both are given
        (default: 'and'):

        - 'and': nodes passing ``node_filter``, and the edges passing
          ``edge_filter`` whose endpoints were both kept
        - 'or': nodes passing ``node_filter`` plus the endpoints of every
          edge passing ``edge_filter``, and those passing edges

    Returns
    -------
    Tuple[List[GraphNode], List[GraphEdge]]
        Records in input order. Edges with an endpoint outside the kept
        nodes are dropped. With no predicates, the whole snapshot.

    Raises
    ------
    ValueError
        If ``combinator`` is neither 'and' nor 'or'

    Examples
    --------
    >>> nodes = [GraphNode("W1", "work"), GraphNode("W2", "work"), GraphNode("A1", "author")]
    >>> edges = [GraphEdge("W2", "W1", "cites"), GraphEdge("W1", "A1", "authored_by")]
    >>> kept, _ = filter_subgraph(nodes, edges, node_filter=lambda n: n.entity_type == "work")
    >>> [n.id for n in kept]
    ['W1', 'W2']
    """
    mode = combinator.strip().lower()
    if mode not in ("and", "or"):
        raise ValueError(f"Unknown combinator: {combinator}")

    node_records = [coerce_node(r) for r in nodes]
    edge_records = [coerce_edge(r) for r in edges]
    present = {n.id for n in node_records}
    passing_edges = [
        e for e in edge_records
        if e.source in present and e.target in present
        and (edge_filter is None or edge_filter(e))
    ]

    if mode == "or" and node_filter is not None and edge_filter is not None:
        keep = {n.id for n in node_records if node_filter(n)}
        keep.update(i for e in passing_edges for i in (e.source, e.target))
        sub_nodes = [n for n in node_records if n.id in keep]
        sub_edges = passing_edges
    else:
        sub_nodes = [n for n in node_records if node_filter is None or node_filter(n)]
        keep = {n.id for n in sub_nodes}
        sub_edges = [e for e in passing_edges if e.source in keep and e.target in keep]

    logger.debug(
        f"Filtered subgraph ({mode}): {len(sub_nodes)} of {len(node_records)} nodes, "
        f"{len(sub_edges)} of {len(edge_records)} edges"
    )
    return sub_nodes, sub_edges
