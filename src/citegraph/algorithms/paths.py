"""
Path Finding Module
===================

Shortest paths between two nodes: breadth-first search for unweighted
graphs, Dijkstra with a binary heap when edge weights are present.

Negative weights are outside the supported domain and are rejected.
"""

import heapq
import logging
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import DEFAULT_DIRECTED
from ..core.graph import GraphSnapshot, build_graph
from ..core.traversal import bfs_indices
from ..core.types import EdgeLike, NodeLike, PathResult

logger = logging.getLogger(__name__)


def _dijkstra(
    snapshot: GraphSnapshot,
    source: int,
    target: Optional[int] = None,
) -> Tuple[Dict[int, float], Dict[int, Optional[int]]]:
    """
    Single-source Dijkstra, stopping early once ``target`` is settled.

    Ties between equal distances settle the lower index first, so the
    returned path is deterministic.

    Raises
    ------
    ValueError
        If a negative edge weight is reached
    """
    dist: Dict[int, float] = {source: 0.0}
    parents: Dict[int, Optional[int]] = {source: None}
    settled = set()
    heap = [(0.0, source)]

    while heap:
        d, u = heapq.heappop(heap)
        if u in settled:
            continue
        settled.add(u)
        if u == target:
            break
        for v, w in snapshot.forward[u]:
            if w < 0:
                raise ValueError(
                    f"Negative edge weight {w} on "
                    f"{snapshot.node_ids[u]!r} -> {snapshot.node_ids[v]!r}"
                )
            candidate = d + w
            if v not in dist or candidate < dist[v]:
                dist[v] = candidate
                parents[v] = u
                heapq.heappush(heap, (candidate, v))

    return {u: dist[u] for u in settled}, parents


def _walk_back(parents: Dict[int, Optional[int]], target: int) -> List[int]:
    path = [target]
    while parents[path[-1]] is not None:
        path.append(parents[path[-1]])
    path.reverse()
    return path


def find_shortest_path(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    source: str,
    target: str,
    directed: bool = DEFAULT_DIRECTED,
    weighted: Optional[bool] = None,
) -> PathResult:
    """
    Find a shortest path from ``source`` to ``target``.

    Parameters
    ----------
    nodes, edges : sequences
        Graph snapshot
    source, target : str
        Endpoint node ids
    directed : bool, optional
        Follow edge direction (default: True)
    weighted : bool, optional
        Use edge weights (Dijkstra). If None, weights are used when any
        edge weight differs from 1.

    Returns
    -------
    PathResult
        ``found=False`` with an empty path when an endpoint is absent or
        unreachable. ``length`` counts hops, ``total_weight`` sums weights.

    Raises
    ------
    ValueError
        If Dijkstra meets a negative edge weight

    Examples
    --------
    >>> r = find_shortest_path(list("ABC"), [("A", "B"), ("B", "C")], "A", "C")
    >>> r.path, r.length
    (('A', 'B', 'C'), 2)
    """
    snapshot = build_graph(nodes, edges, directed=directed, combine="min")
    s = snapshot.index.get(source)
    t = snapshot.index.get(target)
    if s is None or t is None:
        logger.debug(f"Shortest path endpoint missing: {source!r} -> {target!r}")
        return PathResult(found=False, source=source, target=target)

    if weighted is None:
        weighted = snapshot.has_weights()

    if weighted:
        dist, parents = _dijkstra(snapshot, s, t)
        if t not in dist:
            return PathResult(found=False, source=source, target=target)
        path = _walk_back(parents, t)
        total_weight = dist[t]
    else:
        _, parents, depths = bfs_indices(snapshot, s)
        if t not in depths:
            return PathResult(found=False, source=source, target=target)
        path = _walk_back(parents, t)
        total_weight = _path_weight(snapshot, path)

    return PathResult(
        found=True,
        source=source,
        target=target,
        path=snapshot.ids(path),
        length=len(path) - 1,
        total_weight=total_weight,
    )


def _path_weight(snapshot: GraphSnapshot, path: List[int]) -> float:
    total = 0.0
    for u, v in zip(path, path[1:]):
        total += next(w for x, w in snapshot.forward[u] if x == v)
    return total


def shortest_path_lengths(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    source: str,
    directed: bool = DEFAULT_DIRECTED,
    weighted: Optional[bool] = None,
) -> Dict[str, float]:
    """
    Distances from ``source`` to every reachable node.

    Hop counts when unweighted, summed weights otherwise. Returns an
    empty dict when ``source`` is absent.
    """
    snapshot = build_graph(nodes, edges, directed=directed, combine="min")
    s = snapshot.index.get(source)
    if s is None:
        return {}
    if weighted is None:
        weighted = snapshot.has_weights()

    if weighted:
        dist, _ = _dijkstra(snapshot, s)
        return {snapshot.node_ids[i]: d for i, d in dist.items()}
    _, _, depths = bfs_indices(snapshot, s)
    return {snapshot.node_ids[i]: float(d) for i, d in depths.items()}
