"""
Partition Quality Metrics
=========================

Scores for a partition of a snapshot into communities.

Key Metrics
-----------
- modularity: Q = sum_c [ w_in(c) / m - resolution * (vol(c) / 2m)^2 ]
- conductance: cut(c) / min(vol(c), vol(V) - vol(c)); lower is tighter
- density: internal edges / possible pairs inside the community
- coverage: internal weight / (internal + boundary weight) per community;
  globally, the share of all edge weight that falls inside communities

The graph is read as undirected with parallel edge weights summed, the
same view community detection optimizes. Partitions may be given as a
list of ``Community`` records, a list of node-id collections, or a
node id -> label dict.
"""

import logging
from typing import Dict, Hashable, List, Mapping, Optional, Sequence, Set, Tuple, Union

import networkx as nx
from sklearn.metrics import adjusted_rand_score, normalized_mutual_info_score

from ..config import DEFAULT_RESOLUTION
from ..core.graph import GraphSnapshot, build_graph
from ..core.types import (
    ClusterQualityResult,
    Community,
    CommunityQuality,
    EdgeLike,
    NodeLike,
)

logger = logging.getLogger(__name__)


# Type alias for communities
Communities = Union[Sequence[Community], Sequence[Sequence[str]], Mapping[str, Hashable]]

_UNASSIGNED = object()


def _parse_communities(communities: Communities) -> Dict[str, Hashable]:
    """
    Parse communities into standard dict format.

    Handles multiple input formats and converts them to a unified
    {node_id: community_id} dictionary representation.

    Parameters
    ----------
    communities : list of Community, list of collections, or dict
        Community assignments in various formats:
        - List of Community records (their ``id`` is kept)
        - List of sets/lists of node ids: [{"A", "B"}, {"C"}]
        - Dict: {node_id: community_id}

    Returns
    -------
    Dict[str, Hashable]
        Mapping from node_id to community_id

    Examples
    --------
    >>> _parse_communities([{"A", "B"}, {"C"}])["C"]
    1
    """
    if isinstance(communities, Mapping):
        return dict(communities)

    node_to_community: Dict[str, Hashable] = {}
    for position, members in enumerate(communities):
        if isinstance(members, Community):
            for node_id in members.node_ids:
                node_to_community[node_id] = members.id
        else:
            for node_id in members:
                node_to_community[node_id] = position
    return node_to_community


def _partition_edges(
    snapshot: GraphSnapshot,
    labels: List[Optional[Hashable]],
) -> Tuple[List[Tuple[int, int, float]], List[Tuple[int, int, float]]]:
    """
    Partition edges into intra-community and inter-community.

    Edges touching an unassigned node (label None) are inter-community.
    """
    intra: List[Tuple[int, int, float]] = []
    inter: List[Tuple[int, int, float]] = []
    for u, v, w in snapshot.edges():
        if labels[u] is not None and labels[u] == labels[v]:
            intra.append((u, v, w))
        else:
            inter.append((u, v, w))
    return intra, inter


def _labels_for(snapshot: GraphSnapshot, communities: Communities) -> List[Optional[Hashable]]:
    node_to_community = _parse_communities(communities)
    return [node_to_community.get(node_id) for node_id in snapshot.node_ids]


def _quality_snapshot(nodes, edges) -> GraphSnapshot:
    return build_graph(nodes, edges, directed=False, combine="sum")


def modularity(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    communities: Communities,
    resolution: float = DEFAULT_RESOLUTION,
) -> float:
    """
    Compute modularity of a partition.

    Parameters
    ----------
    nodes, edges : sequences
        Graph snapshot
    communities : list of Community, list of collections, or dict
        Partition to score; unassigned nodes count as singletons
    resolution : float, optional
        Weight of the null-model term (default: 1.0)

    Returns
    -------
    float
        Modularity value; 0.0 for a graph without edges

    Examples
    --------
    >>> edges = [("A", "B"), ("C", "D")]
    >>> round(modularity(list("ABCD"), edges, [{"A", "B"}, {"C", "D"}]), 3)
    0.5
    """
    snapshot = _quality_snapshot(nodes, edges)
    return _modularity(snapshot, _labels_for(snapshot, communities), resolution)


def _modularity(
    snapshot: GraphSnapshot,
    labels: List[Optional[Hashable]],
    resolution: float,
) -> float:
    if sum(w for _, _, w in snapshot.edges()) <= 0:
        return 0.0

    # networkx needs a full partition: unassigned nodes become singletons
    groups: Dict[Hashable, Set[str]] = {}
    for i, label in enumerate(labels):
        key = (_UNASSIGNED, i) if label is None else label
        groups.setdefault(key, set()).add(snapshot.node_ids[i])

    return float(
        nx.community.modularity(
            snapshot.to_networkx(),
            list(groups.values()),
            weight="weight",
            resolution=resolution,
        )
    )


def _strengths(snapshot: GraphSnapshot) -> List[float]:
    strength = [0.0] * len(snapshot)
    for u, v, w in snapshot.edges():
        strength[u] += w
        strength[v] += w
    return strength


def cluster_quality(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    communities: Communities,
) -> ClusterQualityResult:
    """
    Score every community and the partition as a whole.

    Parameters
    ----------
    nodes, edges : sequences
        Graph snapshot
    communities : list of Community, list of collections, or dict
        Partition to score

    Returns
    -------
    ClusterQualityResult
        Per-community density, conductance and coverage, their averages,
        global coverage, modularity and
        ``overall_score = mean(average_density, 1 - average_conductance, coverage)``.
        All values lie in [0, 1] except modularity.
    """
    snapshot = _quality_snapshot(nodes, edges)
    labels = _labels_for(snapshot, communities)
    strength = _strengths(snapshot)
    total_volume = sum(strength)
    total_weight = total_volume / 2

    members: Dict[Hashable, Set[int]] = {}
    for i, label in enumerate(labels):
        if label is not None:
            members.setdefault(label, set()).add(i)

    internal_weight: Dict[Hashable, float] = {c: 0.0 for c in members}
    internal_edges: Dict[Hashable, int] = {c: 0 for c in members}
    boundary_weight: Dict[Hashable, float] = {c: 0.0 for c in members}
    intra, inter = _partition_edges(snapshot, labels)
    for u, _, w in intra:
        internal_weight[labels[u]] += w
        internal_edges[labels[u]] += 1
    for u, v, w in inter:
        for endpoint in (u, v):
            if labels[endpoint] is not None:
                boundary_weight[labels[endpoint]] += w

    scores = []
    for label, member_set in members.items():
        size = len(member_set)
        possible = size * (size - 1) / 2
        volume = sum(strength[i] for i in member_set)
        denominator = min(volume, total_volume - volume)
        incident = internal_weight[label] + boundary_weight[label]
        scores.append(
            CommunityQuality(
                community_id=label,
                size=size,
                internal_weight=internal_weight[label],
                boundary_weight=boundary_weight[label],
                density=internal_edges[label] / possible if possible > 0 else 0.0,
                conductance=boundary_weight[label] / denominator if denominator > 0 else 0.0,
                coverage=internal_weight[label] / incident if incident > 0 else 0.0,
            )
        )

    if scores:
        average_density = sum(s.density for s in scores) / len(scores)
        average_conductance = sum(s.conductance for s in scores) / len(scores)
    else:
        average_density = average_conductance = 0.0
    coverage = sum(w for _, _, w in intra) / total_weight if total_weight > 0 else 0.0

    return ClusterQualityResult(
        communities=tuple(scores),
        average_density=average_density,
        average_conductance=average_conductance,
        coverage=coverage,
        modularity=_modularity(snapshot, labels, DEFAULT_RESOLUTION),
        overall_score=(average_density + (1.0 - average_conductance) + coverage) / 3,
    )


def compute_nmi(
    true_communities: Communities,
    detected_communities: Communities,
    nodes: Optional[Sequence[str]] = None,
) -> float:
    """
    Compute Normalized Mutual Information between two partitions.

    Parameters
    ----------
    true_communities : communities
        Reference partition
    detected_communities : communities
        Partition to compare
    nodes : sequence of str, optional
        Nodes to consider. If None, uses intersection of both partitions.

    Returns
    -------
    float
        NMI score (0 = no mutual information, 1 = perfect match)

    Examples
    --------
    >>> compute_nmi({"A": 0, "B": 0, "C": 1}, {"A": 5, "B": 5, "C": 7})
    1.0
    """
    true_labels, detected_labels = _aligned_labels(true_communities, detected_communities, nodes)
    if not true_labels:
        return 0.0
    return float(normalized_mutual_info_score(true_labels, detected_labels))


def compute_ari(
    true_communities: Communities,
    detected_communities: Communities,
    nodes: Optional[Sequence[str]] = None,
) -> float:
    """
    Compute Adjusted Rand Index between two partitions.

    Returns
    -------
    float
        ARI score (-1 to 1, with 1 = perfect match, 0 = random)
    """
    true_labels, detected_labels = _aligned_labels(true_communities, detected_communities, nodes)
    if not true_labels:
        return 0.0
    return float(adjusted_rand_score(true_labels, detected_labels))


def compare_partitions(
    first: Communities,
    second: Communities,
) -> Dict[str, float]:
    """NMI and ARI between two partitions over their shared nodes."""
    return {
        "nmi": compute_nmi(first, second),
        "ari": compute_ari(first, second),
    }


def _aligned_labels(
    first: Communities,
    second: Communities,
    nodes: Optional[Sequence[str]],
) -> Tuple[List[str], List[str]]:
    first_map = _parse_communities(first)
    second_map = _parse_communities(second)
    if nodes is None:
        nodes = sorted(set(first_map) & set(second_map))
    # sklearn needs one comparable label type per partition
    return (
        [repr(first_map.get(n)) for n in nodes],
        [repr(second_map.get(n)) for n in nodes],
    )
