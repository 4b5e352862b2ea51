"""
Graph Builder
=============

Converts caller-supplied node and edge lists into a ``GraphSnapshot``:
dense integer indices with forward (and, for directed graphs, reverse)
adjacency lists. A snapshot is built fresh for every algorithm call and
never retained.

Undirected semantics are obtained by symmetrizing edges inside the
snapshot; the caller's records are never modified.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Set, Tuple

import networkx as nx

from .types import (
    EdgeLike,
    EntityType,
    GraphEdge,
    GraphNode,
    NodeLike,
    coerce_edge,
    coerce_node,
)

logger = logging.getLogger(__name__)

COMBINE_RULES = ("min", "max", "sum", "first")


class GraphSnapshot:
    """
    Index-based adjacency built from one ``(nodes, edges)`` snapshot.

    Attributes
    ----------
    node_ids : List[str]
        Node id for each index, in input order
    index : Dict[str, int]
        Node id -> index
    entity_types : List[EntityType]
        Entity type for each index
    forward : List[List[Tuple[int, float]]]
        Outgoing ``(neighbor, weight)`` pairs; both directions when undirected
    reverse : List[List[Tuple[int, float]]]
        Incoming pairs; identical to ``forward`` when undirected
    directed : bool
    """

    def __init__(
        self,
        node_ids: List[str],
        entity_types: List[EntityType],
        forward: List[List[Tuple[int, float]]],
        reverse: List[List[Tuple[int, float]]],
        directed: bool,
        edge_count: int,
    ):
        self.node_ids = node_ids
        self.index = {node_id: i for i, node_id in enumerate(node_ids)}
        self.entity_types = entity_types
        self.forward = forward
        self.reverse = reverse
        self.directed = directed
        self._edge_count = edge_count

    def __len__(self) -> int:
        return len(self.node_ids)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.index

    def number_of_nodes(self) -> int:
        return len(self.node_ids)

    def number_of_edges(self) -> int:
        """Distinct edges after merging (an undirected edge counts once)."""
        return self._edge_count

    def neighbors(self, i: int) -> List[int]:
        return [j for j, _ in self.forward[i]]

    def predecessors(self, i: int) -> List[int]:
        return [j for j, _ in self.reverse[i]]

    def out_degree(self, i: int) -> int:
        return len(self.forward[i])

    def in_degree(self, i: int) -> int:
        return len(self.reverse[i])

    def edges(self) -> Iterator[Tuple[int, int, float]]:
        """Yield each distinct edge once as ``(u, v, weight)``."""
        for u, adjacency in enumerate(self.forward):
            for v, w in adjacency:
                if self.directed or u <= v:
                    yield u, v, w

    def has_weights(self) -> bool:
        return any(w != 1.0 for _, _, w in self.edges())

    def undirected_neighbor_sets(self) -> List[Set[int]]:
        """Neighbor sets ignoring direction and self-loops."""
        sets: List[Set[int]] = [set() for _ in self.node_ids]
        for u, v, _ in self.edges():
            if u != v:
                sets[u].add(v)
                sets[v].add(u)
        return sets

    def ids(self, indices: Iterable[int]) -> Tuple[str, ...]:
        return tuple(self.node_ids[i] for i in indices)

    def to_networkx(self) -> nx.Graph:
        """
        The merged snapshot as a networkx graph keyed by node id.

        Unlike the module-level ``to_networkx``, parallel records are
        already combined here, so each edge carries the merged ``weight``.
        """
        G = nx.DiGraph() if self.directed else nx.Graph()
        G.add_nodes_from(self.node_ids)
        G.add_weighted_edges_from(
            (self.node_ids[u], self.node_ids[v], w) for u, v, w in self.edges()
        )
        return G


def build_graph(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    directed: bool = True,
    combine: str = "max",
    keep_self_loops: bool = False,
) -> GraphSnapshot:
    """
    Build index adjacency from node and edge lists in O(N + E).

    Parameters
    ----------
    nodes : sequence of GraphNode, dict or str
        Node records; duplicate ids keep their first occurrence
    edges : sequence of GraphEdge, dict or tuple
        Edge records; edges with an endpoint outside ``nodes`` are skipped
    directed : bool, optional
        If False, every edge is symmetrized (default: True)
    combine : str, optional
        How parallel edges merge their weights: 'min', 'max', 'sum' or
        'first' (default: 'max')
    keep_self_loops : bool, optional
        Keep ``u -> u`` edges (default: False)

    Returns
    -------
    GraphSnapshot

    Raises
    ------
    ValueError
        If ``combine`` is unknown or a record cannot be coerced

    Examples
    --------
    >>> g = build_graph(["A", "B"], [("A", "B")], directed=False)
    >>> g.neighbors(1)
    [0]
    """
    if combine not in COMBINE_RULES:
        raise ValueError(f"Unknown combine rule: {combine}")

    node_ids: List[str] = []
    entity_types: List[EntityType] = []
    index: Dict[str, int] = {}
    for record in nodes:
        node = coerce_node(record)
        if node.id in index:
            continue
        index[node.id] = len(node_ids)
        node_ids.append(node.id)
        entity_types.append(node.entity_type)

    merged: Dict[Tuple[int, int], float] = {}
    skipped = 0
    for record in edges:
        edge = coerce_edge(record)
        u = index.get(edge.source)
        v = index.get(edge.target)
        if u is None or v is None:
            skipped += 1
            continue
        if u == v and not keep_self_loops:
            continue
        key = (u, v) if directed or u <= v else (v, u)
        if key in merged:
            merged[key] = _combine(merged[key], edge.weight, combine)
        else:
            merged[key] = edge.weight

    if skipped:
        logger.debug(f"Skipped {skipped} edges with endpoints outside the node set")

    n = len(node_ids)
    forward: List[List[Tuple[int, float]]] = [[] for _ in range(n)]
    if directed:
        reverse: List[List[Tuple[int, float]]] = [[] for _ in range(n)]
        for (u, v), w in merged.items():
            forward[u].append((v, w))
            reverse[v].append((u, w))
    else:
        for (u, v), w in merged.items():
            forward[u].append((v, w))
            if u != v:
                forward[v].append((u, w))
        reverse = forward

    logger.debug(
        f"Built {'directed' if directed else 'undirected'} snapshot with "
        f"{n} nodes, {len(merged)} edges"
    )
    return GraphSnapshot(node_ids, entity_types, forward, reverse, directed, len(merged))


def _combine(current: float, new: float, rule: str) -> float:
    if rule == "min":
        return min(current, new)
    if rule == "max":
        return max(current, new)
    if rule == "sum":
        return current + new
    return current


def to_networkx(
    nodes: Sequence[NodeLike],
    edges: Sequence[EdgeLike],
    directed: bool = True,
) -> nx.Graph:
    """
    Convert a snapshot to a networkx graph.

    Node attributes carry ``entity_type`` plus the display attribute bag;
    edges carry ``relation_type`` and ``weight``. Parallel edges keep the
    last record, as networkx does.
    """
    G = nx.DiGraph() if directed else nx.Graph()
    for record in nodes:
        node = coerce_node(record)
        G.add_node(node.id, entity_type=node.entity_type.value, **dict(node.attributes))
    for record in edges:
        edge = coerce_edge(record)
        if edge.source in G and edge.target in G:
            G.add_edge(
                edge.source,
                edge.target,
                relation_type=edge.relation_type,
                weight=edge.weight,
            )
    return G


def from_networkx(
    G: nx.Graph,
    default_type: EntityType = EntityType.WORK,
) -> Tuple[List[GraphNode], List[GraphEdge]]:
    """
    Convert a networkx graph to node and edge records.

    Node ids are stringified. An undirected networkx graph yields one
    record per edge; pass ``directed=False`` to the algorithms to keep
    undirected semantics.

    Raises
    ------
    ValueError
        If a node carries an unknown ``entity_type`` attribute
    """
    nodes = []
    for node, data in G.nodes(data=True):
        data = dict(data)
        entity_type = data.pop("entity_type", default_type)
        nodes.append(GraphNode(id=str(node), entity_type=entity_type, attributes=data))

    edges = []
    for u, v, data in G.edges(data=True):
        edges.append(
            GraphEdge(
                source=str(u),
                target=str(v),
                relation_type=data.get("relation_type", "related"),
                weight=data.get("weight", 1.0),
            )
        )
    return nodes, edges


def induced_edges(
    snapshot: GraphSnapshot,
    members: Set[int],
) -> List[Tuple[int, int, float]]:
    """Edges of ``snapshot`` with both endpoints in ``members``."""
    return [(u, v, w) for u, v, w in snapshot.edges() if u in members and v in members]


def resolve_index(snapshot: GraphSnapshot, node_id: Optional[str]) -> Optional[int]:
    """Index of ``node_id``, or None when it is absent from the snapshot."""
    if node_id is None:
        return None
    return snapshot.index.get(node_id)
