"""
Traversal Primitives
====================

Breadth-first and depth-first search shared by the higher-level
algorithms. The index-level helpers (``bfs_indices``, ``dfs_indices``)
work on a ``GraphSnapshot``; ``bfs`` and ``dfs`` are the public entry
points over caller node and edge lists.

Both searches are iterative so that long chains in citation graphs do
not hit the interpreter recursion limit.
"""

import logging
from collections import deque
from typing import Dict, List, Optional, Sequence, Tuple

from .graph import GraphSnapshot, build_graph
from .types import EdgeLike, NodeLike, TraversalResult

logger = logging.getLogger(__name__)


def bfs_indices(
    snapshot: GraphSnapshot,
    start: int,
    max_depth: Optional[int] = None,
    reverse: bool = False,
) -> Tuple[List[int], Dict[int, Optional[int]], Dict[int, int]]:
    """
    Breadth-first search from ``start``.

    Parameters
    ----------
    snapshot : GraphSnapshot
        Graph to traverse
    start : int
        Start index
    max_depth : int, optional
        Do not expand nodes at this depth
    reverse : bool, optional
        Follow incoming instead of outgoing edges (default: False)

    Returns
    -------
    order : list of int
        Visit order
    parents : dict
        Index -> parent index (None for ``start``)
    depths : dict
        Index -> hop distance from ``start``
    """
    adjacency = snapshot.reverse if reverse else snapshot.forward
    order = [start]
    parents: Dict[int, Optional[int]] = {start: None}
    depths = {start: 0}
    queue = deque([start])

    while queue:
        u = queue.popleft()
        if max_depth is not None and depths[u] >= max_depth:
            continue
        for v, _ in adjacency[u]:
            if v not in depths:
                depths[v] = depths[u] + 1
                parents[v] = u
                order.append(v)
                queue.append(v)

    return order, parents, depths


def dfs_indices(
    snapshot: GraphSnapshot,
    start: int,
) -> Tuple[List[int], Dict[int, Optional[int]], Dict[int, int]]:
    """
    Depth-first search from ``start`` in preorder.

    Neighbors are explored in adjacency order, matching what a recursive
    DFS would produce.
    """
    order: List[int] = []
    parents: Dict[int, Optional[int]] = {start: None}
    depths = {start: 0}
    visited = set()
    stack = [(start, iter(snapshot.forward[start]))]
    visited.add(start)
    order.append(start)

    while stack:
        u, neighbors = stack[-1]
        advanced = False
        for v, _ in neighbors:
            if v not in visited:
                visited.add(v)
                parents[v] = u
                depths[v] = depths[u] + 1
                order.append(v)
                stack.append((v, iter(snapshot.forward[v])))
                advanced = True
                break
        if not advanced:
            stack.pop()

    return order, parents, depths


def _to_result(
    snapshot: GraphSnapshot,
    start: str,
    order: List[int],
    parents: Dict[int, Optional[int]],
    depths: Dict[int, int],
) -> TraversalResult:
    ids = snapshot.node_ids
    return TraversalResult(
        found=True,
        start=start,
        order=tuple(ids[i] for i in order),
        parents={ids[v]: (None if p is None else ids[p]) for v, p in parents.items()},
        depths={ids[v]: d for v, d in depths.items()},
    )


def bfs(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    start: str,
    directed: bool = True,
) -> TraversalResult:
    """
    Breadth-first search from ``start``.

    Parameters
    ----------
    nodes, edges : sequences
        Graph snapshot
    start : str
        Start node id
    directed : bool, optional
        Follow edge direction (default: True)

    Returns
    -------
    TraversalResult
        ``found=False`` with empty collections when ``start`` is absent

    Examples
    --------
    >>> r = bfs(["A", "B", "C"], [("A", "B"), ("B", "C")], "A")
    >>> r.order
    ('A', 'B', 'C')
    >>> r.path_to("C")
    ('A', 'B', 'C')
    """
    snapshot = build_graph(nodes, edges, directed=directed)
    i = snapshot.index.get(start)
    if i is None:
        logger.debug(f"BFS start {start!r} not in graph")
        return TraversalResult(found=False, start=start)
    return _to_result(snapshot, start, *bfs_indices(snapshot, i))


def dfs(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    start: str,
    directed: bool = True,
) -> TraversalResult:
    """Depth-first search from ``start``; see ``bfs`` for conventions."""
    snapshot = build_graph(nodes, edges, directed=directed)
    i = snapshot.index.get(start)
    if i is None:
        logger.debug(f"DFS start {start!r} not in graph")
        return TraversalResult(found=False, start=start)
    return _to_result(snapshot, start, *dfs_indices(snapshot, i))
