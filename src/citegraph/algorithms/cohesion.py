"""
Density and Cohesion Module
===========================

Dense-substructure measures on the undirected simple interpretation of a
snapshot (direction ignored, self-loops and parallel edges merged):

- k-core: maximal subgraph where every node has degree >= k
- core numbers: the largest k for which each node is in the k-core
- k-truss: maximal subgraph where every edge lies in >= k - 2 triangles
- truss numbers: the largest k for which each edge is in the k-truss
- triangles and clustering coefficients
- star patterns (hubs and their dependent leaves)
- core-periphery split by normalized degree

Triangles are enumerated with a degree ordering: each edge is oriented
from lower to higher rank and only forward neighbor sets are intersected,
so every triangle is found exactly once.
"""

import heapq
import logging
from collections import deque
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..config import DEFAULT_CORE_THRESHOLD, DEFAULT_KTRUSS_K, DEFAULT_STAR_MIN_DEGREE
from ..core.graph import GraphSnapshot, build_graph
from ..core.types import (
    CorePeripheryResult,
    EdgeLike,
    KCoreResult,
    KTrussResult,
    NodeLike,
    StarPattern,
    StarPatternResult,
    TriangleResult,
)

logger = logging.getLogger(__name__)

STAR_TYPES = ("in", "out", "undirected")


def _simple_undirected(nodes: Sequence[NodeLike], edges: Sequence[EdgeLike]):
    snapshot = build_graph(nodes, edges, directed=False)
    return snapshot, snapshot.undirected_neighbor_sets()


def _edge_key(u: int, v: int) -> Tuple[int, int]:
    return (u, v) if u < v else (v, u)


def _edge_ids(snapshot: GraphSnapshot, pairs) -> Tuple[Tuple[str, str], ...]:
    ids = snapshot.node_ids
    return tuple((ids[u], ids[v]) for u, v in sorted(pairs))


def _pair_density(edge_count: int, node_count: int) -> float:
    possible = node_count * (node_count - 1) / 2
    return edge_count / possible if possible > 0 else 0.0


# =============================================================================
# k-core
# =============================================================================


def k_core(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    k: int,
) -> KCoreResult:
    """
    Compute the k-core by iterative peeling.

    Nodes whose current degree is below ``k`` are removed, their
    neighbors' degrees decremented, until no such node remains.

    Parameters
    ----------
    nodes, edges : sequences
        Graph snapshot
    k : int
        Minimum degree

    Returns
    -------
    KCoreResult
        Empty when ``k < 1`` or there are no nodes

    Examples
    --------
    >>> star = [("A", "B"), ("A", "C"), ("A", "D")]
    >>> k_core(list("ABCD"), star, 1).node_ids
    ('A', 'B', 'C', 'D')
    >>> k_core(list("ABCD"), star, 2).node_ids
    ()
    """
    if k < 1 or not nodes:
        return KCoreResult(k=k)

    snapshot, neighbor_sets = _simple_undirected(nodes, edges)
    degree = [len(s) for s in neighbor_sets]
    removed = [False] * len(snapshot)
    queue = deque(i for i, d in enumerate(degree) if d < k)
    for i in queue:
        removed[i] = True

    while queue:
        u = queue.popleft()
        for v in neighbor_sets[u]:
            if removed[v]:
                continue
            degree[v] -= 1
            if degree[v] < k:
                removed[v] = True
                queue.append(v)

    survivors = [i for i in range(len(snapshot)) if not removed[i]]
    alive = set(survivors)
    core_edges = [
        (u, v) for u in survivors for v in neighbor_sets[u] if u < v and v in alive
    ]
    logger.debug(f"{k}-core keeps {len(survivors)} of {len(snapshot)} nodes")
    return KCoreResult(k=k, node_ids=snapshot.ids(survivors), edges=_edge_ids(snapshot, core_edges))


def core_numbers(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
) -> Dict[str, int]:
    """
    Core number of every node (Batagelj-Zaversnik bucket peeling).

    A node with core number c belongs to the k-core for every k <= c.
    """
    snapshot, neighbor_sets = _simple_undirected(nodes, edges)
    n = len(snapshot)
    degree = [len(s) for s in neighbor_sets]
    max_degree = max(degree, default=0)
    buckets: List[Set[int]] = [set() for _ in range(max_degree + 1)]
    for i, d in enumerate(degree):
        buckets[d].add(i)

    core = [0] * n
    done = [False] * n
    current = 0
    for _ in range(n):
        while not buckets[current]:
            current += 1
        u = buckets[current].pop()
        done[u] = True
        core[u] = current
        for v in neighbor_sets[u]:
            if done[v] or degree[v] <= current:
                continue
            buckets[degree[v]].discard(v)
            degree[v] -= 1
            buckets[degree[v]].add(v)

    return {snapshot.node_ids[i]: core[i] for i in range(n)}


# =============================================================================
# k-truss
# =============================================================================


def _edge_supports(adjacency: List[Set[int]]) -> Dict[Tuple[int, int], int]:
    """Triangle count of every edge ``(u, v)`` with ``u < v``."""
    support: Dict[Tuple[int, int], int] = {}
    for u, neighbors in enumerate(adjacency):
        for v in neighbors:
            if u < v:
                support[(u, v)] = len(neighbors & adjacency[v])
    return support


def _truss_decomposition(neighbor_sets: List[Set[int]]) -> Dict[Tuple[int, int], int]:
    """
    Peel edges in order of current support; an edge removed while the
    smallest support is ``s`` gets truss number ``max(level, s + 2)``.
    """
    adjacency = [set(s) for s in neighbor_sets]
    support = _edge_supports(adjacency)
    heap = [(s, edge) for edge, s in support.items()]
    heapq.heapify(heap)

    truss: Dict[Tuple[int, int], int] = {}
    level = 2
    while heap:
        s, (u, v) = heapq.heappop(heap)
        if (u, v) in truss or support[(u, v)] != s:
            continue  # stale entry
        level = max(level, s + 2)
        truss[(u, v)] = level
        for w in adjacency[u] & adjacency[v]:
            for edge in (_edge_key(u, w), _edge_key(v, w)):
                support[edge] -= 1
                heapq.heappush(heap, (support[edge], edge))
        adjacency[u].discard(v)
        adjacency[v].discard(u)
    return truss


def k_truss(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    k: int = DEFAULT_KTRUSS_K,
) -> KTrussResult:
    """
    Compute the k-truss by iterative edge peeling.

    Edges supported by fewer than ``k - 2`` triangles are removed and the
    support of the two other edges of each destroyed triangle decremented,
    until stable. Nodes left without edges are pruned.

    Parameters
    ----------
    nodes, edges : sequences
        Graph snapshot
    k : int, optional
        Truss order (default: 3)

    Returns
    -------
    KTrussResult
        Empty when there are fewer than 3 distinct nodes or edges, or
        ``k < 2``. ``edge_support`` reports each surviving edge's
        triangle count within the truss; ``truss_number`` the largest
        order of truss each surviving edge belongs to.
    """
    if k < 2:
        return KTrussResult(k=k)

    snapshot, neighbor_sets = _simple_undirected(nodes, edges)
    if len(snapshot) < 3 or snapshot.number_of_edges() < 3:
        return KTrussResult(k=k)

    adjacency = [set(s) for s in neighbor_sets]
    support = _edge_supports(adjacency)

    required = k - 2
    queue = deque(e for e, s in support.items() if s < required)
    queued = set(queue)

    while queue:
        u, v = queue.popleft()
        for w in adjacency[u] & adjacency[v]:
            for edge in (_edge_key(u, w), _edge_key(v, w)):
                support[edge] -= 1
                if support[edge] < required and edge not in queued:
                    queued.add(edge)
                    queue.append(edge)
        adjacency[u].discard(v)
        adjacency[v].discard(u)
        del support[(u, v)]

    truss_nodes = sorted({i for edge in support for i in edge})
    truss = _truss_decomposition(neighbor_sets) if support else {}
    ids = snapshot.node_ids
    logger.debug(
        f"{k}-truss keeps {len(truss_nodes)} nodes and {len(support)} edges "
        f"of {len(snapshot)} / {snapshot.number_of_edges()}"
    )
    return KTrussResult(
        k=k,
        node_ids=snapshot.ids(truss_nodes),
        edges=_edge_ids(snapshot, support),
        edge_support={(ids[u], ids[v]): s for (u, v), s in sorted(support.items())},
        truss_number={(ids[u], ids[v]): truss[(u, v)] for (u, v) in sorted(support)},
    )


def truss_numbers(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
) -> Dict[Tuple[str, str], int]:
    """
    Truss number of every edge: the largest k whose k-truss contains it.

    Edges in no triangle get 2. Keys are ``(u, v)`` in input node order,
    as in ``KTrussResult.edges``.

    Examples
    --------
    >>> edges = [("A", "B"), ("B", "C"), ("C", "A"), ("C", "D")]
    >>> truss_numbers(list("ABCD"), edges)
    {('A', 'B'): 3, ('A', 'C'): 3, ('B', 'C'): 3, ('C', 'D'): 2}
    """
    snapshot, neighbor_sets = _simple_undirected(nodes, edges)
    truss = _truss_decomposition(neighbor_sets)
    ids = snapshot.node_ids
    return {(ids[u], ids[v]): t for (u, v), t in sorted(truss.items())}


# =============================================================================
# Triangles & clustering
# =============================================================================


def _enumerate_triangles(neighbor_sets: List[Set[int]]) -> List[Tuple[int, int, int]]:
    rank = sorted(range(len(neighbor_sets)), key=lambda i: (len(neighbor_sets[i]), i))
    position = [0] * len(neighbor_sets)
    for r, i in enumerate(rank):
        position[i] = r
    higher = [
        {v for v in neighbor_sets[u] if position[v] > position[u]}
        for u in range(len(neighbor_sets))
    ]
    triangles = []
    for u in range(len(neighbor_sets)):
        for v in higher[u]:
            for w in higher[u] & higher[v]:
                triangles.append(tuple(sorted((u, v, w))))
    triangles.sort()
    return triangles


def find_triangles(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
) -> TriangleResult:
    """
    Enumerate triangles and compute clustering coefficients.

    The global coefficient is closed triples / connected triples
    (``3 * triangles / sum(d * (d - 1) / 2)``); it is 0.0 when there are
    no connected triples. Local coefficients follow the same convention.

    Examples
    --------
    >>> r = find_triangles(list("ABC"), [("A", "B"), ("B", "C"), ("C", "A")])
    >>> r.triangle_count, r.clustering_coefficient
    (1, 1.0)
    """
    snapshot, neighbor_sets = _simple_undirected(nodes, edges)
    triangles = _enumerate_triangles(neighbor_sets)

    per_node = [0] * len(snapshot)
    for tri in triangles:
        for i in tri:
            per_node[i] += 1

    local: Dict[str, float] = {}
    connected_triples = 0
    for i, neighbors in enumerate(neighbor_sets):
        d = len(neighbors)
        possible = d * (d - 1) // 2
        connected_triples += possible
        local[snapshot.node_ids[i]] = per_node[i] / possible if possible else 0.0

    coefficient = 3 * len(triangles) / connected_triples if connected_triples else 0.0
    return TriangleResult(
        triangle_count=len(triangles),
        triangles=tuple(snapshot.ids(t) for t in triangles),
        node_triangles={snapshot.node_ids[i]: c for i, c in enumerate(per_node)},
        clustering_coefficient=coefficient,
        local_clustering=local,
    )


def clustering_coefficient(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
) -> float:
    """Global clustering coefficient in [0, 1]."""
    return find_triangles(nodes, edges).clustering_coefficient


# =============================================================================
# Star patterns
# =============================================================================


def detect_star_patterns(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    min_degree: int = DEFAULT_STAR_MIN_DEGREE,
    star_type: Optional[str] = None,
) -> StarPatternResult:
    """
    Find hub nodes whose degree reaches ``min_degree``.

    Parameters
    ----------
    nodes, edges : sequences
        Graph snapshot
    min_degree : int, optional
        Minimum degree of a star center (default: 3)
    star_type : str, optional
        'in' (many incoming edges, e.g. highly cited works), 'out'
        (many outgoing edges) or 'undirected'. If None, both 'in' and
        'out' stars are reported.

    Returns
    -------
    StarPatternResult
        Stars ordered by degree (descending), then input order. ``leaves``
        are spokes whose only connection is the center.

    Raises
    ------
    ValueError
        If ``star_type`` is unknown
    """
    if star_type is not None and star_type not in STAR_TYPES:
        raise ValueError(f"Unknown star type: {star_type}")

    snapshot = build_graph(nodes, edges, directed=True)
    total_neighbors = [set() for _ in range(len(snapshot))]
    for u, v, _ in snapshot.edges():
        total_neighbors[u].add(v)
        total_neighbors[v].add(u)

    spoke_sources = {
        "in": lambda i: snapshot.predecessors(i),
        "out": lambda i: snapshot.neighbors(i),
        "undirected": lambda i: sorted(total_neighbors[i]),
    }
    kinds = ("in", "out") if star_type is None else (star_type,)

    stars = []
    for kind in kinds:
        for i in range(len(snapshot)):
            spokes = sorted(set(spoke_sources[kind](i)))
            if len(spokes) < max(min_degree, 1):
                continue
            leaves = [j for j in spokes if total_neighbors[j] == {i}]
            stars.append(
                StarPattern(
                    center=snapshot.node_ids[i],
                    star_type=kind,
                    degree=len(spokes),
                    spokes=snapshot.ids(spokes),
                    leaves=snapshot.ids(leaves),
                )
            )

    stars.sort(key=lambda s: (-s.degree, snapshot.index[s.center], s.star_type))
    return StarPatternResult(stars=tuple(stars), min_degree=min_degree)


# =============================================================================
# Core-periphery
# =============================================================================


def core_periphery(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    threshold: float = DEFAULT_CORE_THRESHOLD,
) -> CorePeripheryResult:
    """
    Split nodes into core and periphery by normalized degree.

    A node's coreness is ``degree / (n - 1)``; nodes with coreness at or
    above ``threshold`` form the core.

    Returns
    -------
    CorePeripheryResult
        ``valid=False`` and empty sets for fewer than 3 nodes. Densities
        are edge counts over possible pairs within the core, within the
        periphery, and across the two.
    """
    snapshot, neighbor_sets = _simple_undirected(nodes, edges)
    n = len(snapshot)
    if n < 3:
        return CorePeripheryResult(valid=False, threshold=threshold)

    coreness = [len(s) / (n - 1) for s in neighbor_sets]
    core = [i for i in range(n) if coreness[i] >= threshold]
    periphery = [i for i in range(n) if coreness[i] < threshold]
    in_core = set(core)

    core_edges = periphery_edges = cross_edges = 0
    for u, v, _ in snapshot.edges():
        if u == v:
            continue
        if u in in_core and v in in_core:
            core_edges += 1
        elif u in in_core or v in in_core:
            cross_edges += 1
        else:
            periphery_edges += 1

    cross_possible = len(core) * len(periphery)
    return CorePeripheryResult(
        valid=True,
        threshold=threshold,
        core=snapshot.ids(core),
        periphery=snapshot.ids(periphery),
        coreness={snapshot.node_ids[i]: c for i, c in enumerate(coreness)},
        core_density=_pair_density(core_edges, len(core)),
        periphery_density=_pair_density(periphery_edges, len(periphery)),
        core_periphery_density=cross_edges / cross_possible if cross_possible else 0.0,
    )
