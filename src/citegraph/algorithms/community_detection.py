"""
Community Detection Module
==========================

This module partitions a graph snapshot into communities.

Supported algorithms:
- Louvain (networkx, seeded from config)
- Leiden (Louvain local moves with a refinement step that keeps
  communities connected)
- Label Propagation (networkx semi-synchronous variant)
- Hierarchical linkage: single, complete or average

The algorithm name is resolved once into a ``CommunityAlgorithm`` and
then into a concrete strategy function. All strategies are deterministic:
Louvain runs with a fixed seed, label propagation is semi-synchronous,
and Leiden visits nodes in input order, so repeated calls return
identical partitions.

Directed input is symmetrized; parallel edges add their weights.
"""

import logging
import math
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import networkx as nx
import numpy as np
from scipy import sparse
from scipy.cluster.hierarchy import fcluster, linkage
from scipy.spatial.distance import squareform

from ..config import (
    DEFAULT_COMMUNITY_ALGORITHM,
    DEFAULT_RESOLUTION,
    DEFAULT_SEED,
    HIERARCHICAL_WARN_NODES,
    LEIDEN_MAX_LEVELS,
    LEIDEN_MAX_PASSES,
    MODULARITY_MIN_GAIN,
)
from ..core.graph import GraphSnapshot, build_graph
from ..core.types import Community, EdgeLike, NodeLike

logger = logging.getLogger(__name__)

_EPSILON = 1e-12


class CommunityAlgorithm(str, Enum):
    LOUVAIN = "louvain"
    LEIDEN = "leiden"
    LABEL_PROPAGATION = "label_propagation"
    SINGLE_LINKAGE = "single"
    COMPLETE_LINKAGE = "complete"
    AVERAGE_LINKAGE = "average"

    @classmethod
    def parse(cls, value: Union["CommunityAlgorithm", str]) -> "CommunityAlgorithm":
        """
        Resolve an algorithm name.

        Accepts 'louvain', 'leiden', 'label-propagation', and the linkage
        variants as 'single', 'hierarchical-single', 'single_linkage', etc.

        Raises
        ------
        ValueError
            If the name matches no algorithm
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "_")
        if key.startswith("hierarchical_"):
            key = key[len("hierarchical_"):]
        if key.endswith("_linkage"):
            key = key[: -len("_linkage")]
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown algorithm: {value}")

    @property
    def is_hierarchical(self) -> bool:
        return self in (
            CommunityAlgorithm.SINGLE_LINKAGE,
            CommunityAlgorithm.COMPLETE_LINKAGE,
            CommunityAlgorithm.AVERAGE_LINKAGE,
        )


def _check_weights(snapshot: GraphSnapshot) -> None:
    for u, v, w in snapshot.edges():
        if w < 0:
            raise ValueError(
                f"Community detection requires non-negative weights, got {w} on "
                f"{snapshot.node_ids[u]!r} - {snapshot.node_ids[v]!r}"
            )


def _labels_from_sets(snapshot: GraphSnapshot, communities) -> List[int]:
    """Turn networkx community sets into one label per snapshot index."""
    labels = [0] * len(snapshot)
    for label, members in enumerate(communities):
        for node_id in members:
            labels[snapshot.index[node_id]] = label
    return labels


class _LevelGraph:
    """
    Weighted undirected graph for one Leiden level.

    ``adj[i]`` maps neighbor -> weight (no self entries); ``loops[i]`` is
    the weight folded inside super-node ``i`` by earlier contractions.
    """

    def __init__(self, adj: List[Dict[int, float]], loops: List[float]):
        self.adj = adj
        self.loops = loops
        self.degree = [sum(a.values()) + 2 * loops[i] for i, a in enumerate(adj)]
        self.total = sum(self.degree)  # 2m

    def __len__(self) -> int:
        return len(self.adj)

    @classmethod
    def from_snapshot(cls, snapshot: GraphSnapshot) -> "_LevelGraph":
        _check_weights(snapshot)
        adj: List[Dict[int, float]] = [{} for _ in range(len(snapshot))]
        for u, v, w in snapshot.edges():
            adj[u][v] = adj[u].get(v, 0.0) + w
            adj[v][u] = adj[v].get(u, 0.0) + w
        return cls(adj, [0.0] * len(snapshot))


def _level_modularity(graph: _LevelGraph, community: List[int], resolution: float) -> float:
    if graph.total <= 0:
        return 0.0
    internal: Dict[int, float] = {}
    tot: Dict[int, float] = {}
    for i, c in enumerate(community):
        tot[c] = tot.get(c, 0.0) + graph.degree[i]
        internal[c] = internal.get(c, 0.0) + 2 * graph.loops[i]
        for j, w in graph.adj[i].items():
            if community[j] == c:
                internal[c] += w
    m2 = graph.total
    return sum(internal[c] / m2 - resolution * (tot[c] / m2) ** 2 for c in tot)


def _local_moves(
    graph: _LevelGraph,
    resolution: float,
    max_passes: int = LEIDEN_MAX_PASSES,
) -> Tuple[List[int], bool]:
    """
    Greedy phase: move each node to the neighboring community with the
    largest modularity gain until a full sweep moves nothing.

    Gains are compared in units of edge weight:
    ``k_i,c - resolution * tot_c * k_i / 2m``.
    """
    n = len(graph)
    community = list(range(n))
    tot = list(graph.degree)
    m2 = graph.total
    moved_any = False

    for _ in range(max_passes):
        moves = 0
        for i in range(n):
            ki = graph.degree[i]
            current = community[i]
            links: Dict[int, float] = {}
            for j, w in graph.adj[i].items():
                links[community[j]] = links.get(community[j], 0.0) + w

            tot[current] -= ki
            best = current
            best_gain = links.get(current, 0.0) - resolution * tot[current] * ki / m2
            for c, w in links.items():
                gain = w - resolution * tot[c] * ki / m2
                if gain > best_gain + _EPSILON:
                    best, best_gain = c, gain
            tot[best] += ki

            if best != current:
                community[i] = best
                moves += 1
        if moves == 0:
            break
        moved_any = True

    return community, moved_any


def _refine(graph: _LevelGraph, community: List[int]) -> List[int]:
    """Split every community into its connected pieces (Leiden refinement)."""
    refined = [-1] * len(graph)
    next_label = 0
    for start in range(len(graph)):
        if refined[start] != -1:
            continue
        refined[start] = next_label
        stack = [start]
        while stack:
            u = stack.pop()
            for v in graph.adj[u]:
                if refined[v] == -1 and community[v] == community[start]:
                    refined[v] = next_label
                    stack.append(v)
        next_label += 1
    return refined


def _aggregate(graph: _LevelGraph, community: List[int]) -> Tuple[_LevelGraph, List[int]]:
    """Contract each community into one super-node."""
    labels: Dict[int, int] = {}
    for c in community:
        if c not in labels:
            labels[c] = len(labels)
    node_label = [labels[c] for c in community]

    adj: List[Dict[int, float]] = [{} for _ in range(len(labels))]
    loops = [0.0] * len(labels)
    for i in range(len(graph)):
        ci = node_label[i]
        loops[ci] += graph.loops[i]
        for j, w in graph.adj[i].items():
            cj = node_label[j]
            if ci == cj:
                if i < j:
                    loops[ci] += w
            else:
                adj[ci][cj] = adj[ci].get(cj, 0.0) + w
    return _LevelGraph(adj, loops), node_label


def _louvain(
    snapshot: GraphSnapshot,
    resolution: float,
    seed: Optional[int] = DEFAULT_SEED,
    **_,
) -> List[int]:
    _check_weights(snapshot)
    if sum(w for _, _, w in snapshot.edges()) <= 0:
        return list(range(len(snapshot)))
    communities = nx.community.louvain_communities(
        snapshot.to_networkx(),
        weight="weight",
        resolution=resolution,
        threshold=MODULARITY_MIN_GAIN,
        seed=seed,
    )
    return _labels_from_sets(snapshot, communities)


def _leiden(snapshot: GraphSnapshot, resolution: float, **_) -> List[int]:
    """
    Louvain local moves followed by a refinement that splits every
    community into its connected pieces before contraction.
    """
    graph = _LevelGraph.from_snapshot(snapshot)
    membership = list(range(len(snapshot)))
    if graph.total <= 0:
        return membership

    quality = _level_modularity(graph, list(range(len(graph))), resolution)
    for level in range(LEIDEN_MAX_LEVELS):
        community, moved = _local_moves(graph, resolution)
        community = _refine(graph, community)
        if not moved and len(set(community)) == len(graph):
            break

        new_quality = _level_modularity(graph, community, resolution)
        graph, node_label = _aggregate(graph, community)
        membership = [node_label[m] for m in membership]
        logger.debug(
            f"Level {level}: {len(graph)} communities, modularity {new_quality:.4f}"
        )
        if new_quality - quality <= MODULARITY_MIN_GAIN:
            break
        quality = new_quality

    return membership


def _label_propagation(snapshot: GraphSnapshot, **_) -> List[int]:
    # Semi-synchronous updates over a graph coloring; no randomness involved
    communities = nx.community.label_propagation_communities(snapshot.to_networkx())
    return _labels_from_sets(snapshot, communities)


def _jaccard_distances(snapshot: GraphSnapshot) -> np.ndarray:
    """Condensed Jaccard distances between closed neighborhoods."""
    n = len(snapshot)
    rows, cols = [], []
    for u, neighbors in enumerate(snapshot.undirected_neighbor_sets()):
        rows.append(u)
        cols.append(u)
        for v in neighbors:
            rows.append(u)
            cols.append(v)
    A = sparse.csr_matrix((np.ones(len(rows)), (rows, cols)), shape=(n, n))
    intersection = (A @ A.T).toarray()
    sizes = np.asarray(A.sum(axis=1)).ravel()
    union = sizes[:, None] + sizes[None, :] - intersection
    distance = 1.0 - intersection / union
    np.fill_diagonal(distance, 0.0)
    return squareform(distance, checks=False)


def _hierarchical(
    snapshot: GraphSnapshot,
    method: str,
    num_clusters: Optional[int] = None,
    **_,
) -> List[int]:
    n = len(snapshot)
    if n == 1:
        return [0]
    if n > HIERARCHICAL_WARN_NODES:
        logger.warning(
            f"Hierarchical linkage on {n} nodes builds a dense distance matrix; "
            f"expect high memory use"
        )
    if num_clusters is None:
        num_clusters = math.ceil(math.sqrt(n / 2))
    num_clusters = min(max(int(num_clusters), 1), n)

    Z = linkage(_jaccard_distances(snapshot), method=method)
    return [int(label) for label in fcluster(Z, t=num_clusters, criterion="maxclust")]


_STRATEGIES: Dict[CommunityAlgorithm, Callable[..., List[int]]] = {
    CommunityAlgorithm.LOUVAIN: _louvain,
    CommunityAlgorithm.LEIDEN: _leiden,
    CommunityAlgorithm.LABEL_PROPAGATION: _label_propagation,
    CommunityAlgorithm.SINGLE_LINKAGE: lambda s, **kw: _hierarchical(s, "single", **kw),
    CommunityAlgorithm.COMPLETE_LINKAGE: lambda s, **kw: _hierarchical(s, "complete", **kw),
    CommunityAlgorithm.AVERAGE_LINKAGE: lambda s, **kw: _hierarchical(s, "average", **kw),
}


def _build_communities(snapshot: GraphSnapshot, labels: List[int]) -> List[Community]:
    """Group by label, then number communities by descending size."""
    groups: Dict[int, List[int]] = {}
    for i, label in enumerate(labels):
        groups.setdefault(label, []).append(i)
    ordered = sorted(groups.values(), key=lambda members: (-len(members), members[0]))

    neighbor_sets = snapshot.undirected_neighbor_sets()
    communities = []
    for cid, members in enumerate(ordered):
        member_set = set(members)
        internal = sum(1 for u in members for v in neighbor_sets[u] if v in member_set) // 2
        possible = len(members) * (len(members) - 1) / 2
        communities.append(
            Community(
                id=cid,
                node_ids=snapshot.ids(members),
                density=internal / possible if possible > 0 else 0.0,
            )
        )
    return communities


def detect_communities(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    algorithm: Union[CommunityAlgorithm, str] = DEFAULT_COMMUNITY_ALGORITHM,
    resolution: float = DEFAULT_RESOLUTION,
    num_clusters: Optional[int] = None,
    seed: Optional[int] = DEFAULT_SEED,
) -> List[Community]:
    """
    Detect communities using the specified algorithm.

    Parameters
    ----------
    nodes, edges : sequences
        Graph snapshot
    algorithm : str or CommunityAlgorithm, optional
        'louvain', 'leiden', 'label_propagation', or a hierarchical
        linkage 'single' / 'complete' / 'average' (default: 'louvain')
    resolution : float, optional
        Scales the null-model term of modularity for Louvain and Leiden;
        higher values favor more, smaller communities (default: 1.0)
    num_clusters : int, optional
        Number of clusters at which hierarchical variants cut the
        dendrogram (default: ceil(sqrt(n / 2)))
    seed : int, optional
        Random state for Louvain; a fixed seed makes repeated calls return
        the same partition (default: 42)

    Returns
    -------
    List[Community]
        A partition of the node set, community 0 being the largest.
        ``[]`` for an empty node set.

    Raises
    ------
    ValueError
        If the algorithm is unknown or an edge weight is negative

    Examples
    --------
    >>> edges = [("A", "B"), ("B", "C"), ("C", "A"), ("D", "E"), ("E", "F"),
    ...          ("F", "D"), ("C", "D")]
    >>> [c.node_ids for c in detect_communities(list("ABCDEF"), edges)]
    [('A', 'B', 'C'), ('D', 'E', 'F')]
    """
    strategy = _STRATEGIES[CommunityAlgorithm.parse(algorithm)]
    snapshot = build_graph(nodes, edges, directed=False, combine="sum")
    if len(snapshot) == 0:
        return []

    labels = strategy(
        snapshot,
        resolution=resolution,
        num_clusters=num_clusters,
        seed=seed,
    )
    communities = _build_communities(snapshot, labels)
    logger.info(
        f"Detected {len(communities)} communities over {len(snapshot)} nodes "
        f"with {CommunityAlgorithm.parse(algorithm).value}"
    )
    return communities
