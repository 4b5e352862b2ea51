"""
Connectivity Module
===================

Component structure of a graph snapshot:

- Weak components (union-find over the undirected interpretation)
- Strong components (iterative Tarjan)
- Cycle detection and one concrete cycle (white/gray/black DFS)
- Topological ordering (Kahn's algorithm)
- Biconnected components, articulation points and bridges
  (discovery time / low-link DFS)

Every DFS here is iterative, so graphs with long chains are safe.
"""

import logging
from collections import deque
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..core.graph import GraphSnapshot, build_graph
from ..core.types import (
    BiconnectedResult,
    ComponentResult,
    CycleResult,
    EdgeLike,
    NodeLike,
)

logger = logging.getLogger(__name__)

WHITE, GRAY, BLACK = 0, 1, 2


def _weak_component_indices(snapshot: GraphSnapshot) -> List[List[int]]:
    """Union-find over all edges; components ordered by smallest member."""
    parent = list(range(len(snapshot)))

    def find(x: int) -> int:
        root = x
        while parent[root] != root:
            root = parent[root]
        while parent[x] != root:
            parent[x], x = root, parent[x]
        return root

    for u, v, _ in snapshot.edges():
        ru, rv = find(u), find(v)
        if ru != rv:
            if ru < rv:
                parent[rv] = ru
            else:
                parent[ru] = rv

    groups: Dict[int, List[int]] = {}
    for i in range(len(snapshot)):
        groups.setdefault(find(i), []).append(i)
    return list(groups.values())


def _strong_component_indices(snapshot: GraphSnapshot) -> List[List[int]]:
    """Iterative Tarjan; components in the order Tarjan completes them."""
    n = len(snapshot)
    disc = [-1] * n
    low = [0] * n
    on_stack = [False] * n
    stack: List[int] = []
    components: List[List[int]] = []
    counter = 0

    for root in range(n):
        if disc[root] != -1:
            continue
        work = [(root, iter(snapshot.forward[root]))]
        disc[root] = low[root] = counter
        counter += 1
        stack.append(root)
        on_stack[root] = True

        while work:
            u, neighbors = work[-1]
            descended = False
            for v, _ in neighbors:
                if disc[v] == -1:
                    disc[v] = low[v] = counter
                    counter += 1
                    stack.append(v)
                    on_stack[v] = True
                    work.append((v, iter(snapshot.forward[v])))
                    descended = True
                    break
                if on_stack[v]:
                    low[u] = min(low[u], disc[v])
            if descended:
                continue

            work.pop()
            if work:
                p = work[-1][0]
                low[p] = min(low[p], low[u])
            if low[u] == disc[u]:
                component = []
                while True:
                    w = stack.pop()
                    on_stack[w] = False
                    component.append(w)
                    if w == u:
                        break
                components.append(component)

    return components


def _component_result(
    snapshot: GraphSnapshot,
    groups: List[List[int]],
    directed: bool,
) -> ComponentResult:
    components = tuple(snapshot.ids(sorted(group)) for group in groups)
    membership = {
        node_id: cid for cid, members in enumerate(components) for node_id in members
    }
    return ComponentResult(components=components, directed=directed, membership=membership)


def find_weak_components(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
) -> ComponentResult:
    """
    Weakly connected components (edge direction ignored).

    Parameters
    ----------
    nodes, edges : sequences
        Graph snapshot

    Returns
    -------
    ComponentResult
        Zero components for an empty node set

    Examples
    --------
    >>> r = find_weak_components(list("ABCD"), [("A", "B"), ("C", "D")])
    >>> r.count
    2
    """
    snapshot = build_graph(nodes, edges, directed=False)
    groups = _weak_component_indices(snapshot)
    logger.debug(f"Found {len(groups)} weak components over {len(snapshot)} nodes")
    return _component_result(snapshot, groups, directed=False)


def find_strong_components(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
) -> ComponentResult:
    """
    Strongly connected components of the directed graph (Tarjan).

    Components come back in discovery order, not sorted by size or id.
    Members inside a component are listed in input order.
    """
    snapshot = build_graph(nodes, edges, directed=True)
    groups = _strong_component_indices(snapshot)
    logger.debug(f"Found {len(groups)} strong components over {len(snapshot)} nodes")
    return _component_result(snapshot, groups, directed=True)


def find_components(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    directed: bool = False,
) -> ComponentResult:
    """Strong components when ``directed`` is True, weak components otherwise."""
    if directed:
        return find_strong_components(nodes, edges)
    return find_weak_components(nodes, edges)


def _find_cycle_indices(snapshot: GraphSnapshot) -> Optional[List[int]]:
    """
    Return the nodes of one cycle, or None.

    Directed graphs: a back edge to a GRAY node closes a cycle.
    Undirected graphs: any edge to a visited node other than the DFS parent
    does (parallel edges were merged by the builder).
    """
    n = len(snapshot)
    color = [WHITE] * n
    parent: List[int] = [-1] * n
    directed = snapshot.directed

    for root in range(n):
        if color[root] != WHITE:
            continue
        color[root] = GRAY
        work = [(root, iter(snapshot.forward[root]))]

        while work:
            u, neighbors = work[-1]
            descended = False
            for v, _ in neighbors:
                if v == u:
                    return [u]
                if color[v] == WHITE:
                    color[v] = GRAY
                    parent[v] = u
                    work.append((v, iter(snapshot.forward[v])))
                    descended = True
                    break
                if directed and color[v] == GRAY:
                    return _unwind(parent, u, v)
                if not directed and color[v] == GRAY and v != parent[u]:
                    return _unwind(parent, u, v)
            if not descended:
                color[u] = BLACK
                work.pop()

    return None


def _unwind(parent: List[int], u: int, ancestor: int) -> List[int]:
    """Tree path ``ancestor -> ... -> u``; the closing edge is ``u -> ancestor``."""
    cycle = [u]
    while cycle[-1] != ancestor:
        cycle.append(parent[cycle[-1]])
    cycle.reverse()
    return cycle


def find_cycle(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    directed: bool = True,
) -> CycleResult:
    """
    Detect a cycle and return one concrete instance.

    Parameters
    ----------
    nodes, edges : sequences
        Graph snapshot
    directed : bool, optional
        Respect edge direction (default: True)

    Returns
    -------
    CycleResult
        ``cycle`` lists the nodes in traversal order; the last node links
        back to the first. ``CycleResult(False, ())`` when acyclic.

    Examples
    --------
    >>> find_cycle(list("ABC"), [("A", "B"), ("B", "C"), ("C", "A")]).cycle
    ('A', 'B', 'C')
    """
    snapshot = build_graph(nodes, edges, directed=directed, keep_self_loops=True)
    cycle = _find_cycle_indices(snapshot)
    if cycle is None:
        return CycleResult(has_cycle=False)
    return CycleResult(has_cycle=True, cycle=snapshot.ids(cycle))


def has_cycles(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    directed: bool = True,
) -> bool:
    """True if the graph contains at least one cycle (self-loops count)."""
    return find_cycle(nodes, edges, directed=directed).has_cycle


def topological_sort(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
) -> Optional[List[str]]:
    """
    Topological order via Kahn's algorithm.

    Nodes with equal precedence keep their input order.

    Returns
    -------
    list of str or None
        ``[]`` for an empty graph, None when the graph has a cycle

    Examples
    --------
    >>> topological_sort(list("ABC"), [("A", "B"), ("B", "C")])
    ['A', 'B', 'C']
    >>> topological_sort(list("AB"), [("A", "B"), ("B", "A")]) is None
    True
    """
    snapshot = build_graph(nodes, edges, directed=True, keep_self_loops=True)
    in_degree = [snapshot.in_degree(i) for i in range(len(snapshot))]
    queue = deque(i for i, d in enumerate(in_degree) if d == 0)
    order: List[int] = []

    while queue:
        u = queue.popleft()
        order.append(u)
        for v, _ in snapshot.forward[u]:
            in_degree[v] -= 1
            if in_degree[v] == 0:
                queue.append(v)

    if len(order) < len(snapshot):
        logger.debug(
            f"Topological sort stopped after {len(order)} of {len(snapshot)} nodes: graph is cyclic"
        )
        return None
    return list(snapshot.ids(order))


def find_biconnected_components(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
) -> BiconnectedResult:
    """
    Biconnected components, articulation points and bridges.

    The graph is read as undirected. A component is the node set of a
    maximal edge-biconnected block; a bridge forms its own two-node block.
    Isolated nodes belong to no component.

    Returns
    -------
    BiconnectedResult

    Examples
    --------
    >>> r = find_biconnected_components(list("ABC"), [("A", "B"), ("B", "C")])
    >>> r.articulation_points
    ('B',)
    """
    snapshot = build_graph(nodes, edges, directed=False)
    n = len(snapshot)
    neighbor_lists = [snapshot.neighbors(i) for i in range(n)]
    disc = [-1] * n
    low = [0] * n
    is_articulation = [False] * n
    bridges: List[Tuple[int, int]] = []
    blocks: List[List[int]] = []
    edge_stack: List[Tuple[int, int]] = []
    counter = 0

    for root in range(n):
        if disc[root] != -1:
            continue
        disc[root] = low[root] = counter
        counter += 1
        root_children = 0
        work = [(root, -1, iter(neighbor_lists[root]))]

        while work:
            u, parent, neighbors = work[-1]
            descended = False
            for v in neighbors:
                if disc[v] == -1:
                    disc[v] = low[v] = counter
                    counter += 1
                    edge_stack.append((u, v))
                    if u == root:
                        root_children += 1
                    work.append((v, u, iter(neighbor_lists[v])))
                    descended = True
                    break
                if v != parent and disc[v] < disc[u]:
                    edge_stack.append((u, v))
                    low[u] = min(low[u], disc[v])
            if descended:
                continue

            work.pop()
            if parent == -1:
                continue
            low[parent] = min(low[parent], low[u])
            if low[u] >= disc[parent]:
                if parent != root:
                    is_articulation[parent] = True
                if low[u] > disc[parent]:
                    bridges.append((parent, u))
                block: Set[int] = set()
                while edge_stack:
                    a, b = edge_stack.pop()
                    block.update((a, b))
                    if (a, b) == (parent, u):
                        break
                blocks.append(sorted(block))

        if root_children > 1:
            is_articulation[root] = True

    logger.debug(
        f"Found {len(blocks)} biconnected components, "
        f"{sum(is_articulation)} articulation points, {len(bridges)} bridges"
    )
    return BiconnectedResult(
        components=tuple(snapshot.ids(block) for block in blocks),
        articulation_points=snapshot.ids(i for i in range(n) if is_articulation[i]),
        bridges=tuple(snapshot.ids(sorted(pair)) for pair in bridges),
    )
