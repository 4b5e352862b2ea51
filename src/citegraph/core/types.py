"""
Graph Types
===========

Node and edge records supplied by callers, and the immutable result
records returned by every algorithm.

Result records are frozen dataclasses holding tuples, so a result can be
shared freely and compared structurally: two calls over identical input
produce equal results.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class EntityType(str, Enum):
    """Closed set of bibliographic entity kinds a node can represent."""

    WORK = "work"
    AUTHOR = "author"
    INSTITUTION = "institution"
    SOURCE = "source"
    TOPIC = "topic"
    PUBLISHER = "publisher"
    FUNDER = "funder"
    KEYWORD = "keyword"
    CONCEPT = "concept"

    @classmethod
    def parse(cls, value: Union["EntityType", str]) -> "EntityType":
        """
        Resolve an entity type from an enum member or a string.

        Parameters
        ----------
        value : EntityType or str
            Member, or its case-insensitive name/value (plural forms such
            as ``"works"`` are accepted)

        Returns
        -------
        EntityType

        Raises
        ------
        ValueError
            If the value names no known entity type
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if key in (member.value, member.value + "s"):
                    return member
        raise ValueError(f"Unknown entity type: {value!r}")


@dataclass(frozen=True)
class GraphNode:
    """
    A node of the caller's graph.

    ``attributes`` is a display-only payload; it is excluded from equality
    and never read by any algorithm.
    """

    id: str
    entity_type: EntityType = EntityType.WORK
    attributes: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self):
        if not isinstance(self.id, str) or not self.id:
            raise ValueError(f"Node id must be a non-empty string, got {self.id!r}")
        object.__setattr__(self, "entity_type", EntityType.parse(self.entity_type))


@dataclass(frozen=True)
class GraphEdge:
    """A directed, typed, optionally weighted relationship."""

    source: str
    target: str
    relation_type: str = "related"
    weight: float = 1.0

    def __post_init__(self):
        if not isinstance(self.source, str) or not isinstance(self.target, str):
            raise ValueError(
                f"Edge endpoints must be strings, got ({self.source!r}, {self.target!r})"
            )
        weight = float(self.weight)
        if not math.isfinite(weight):
            raise ValueError(f"Edge weight must be finite, got {self.weight!r}")
        object.__setattr__(self, "weight", weight)


NodeLike = Union[GraphNode, Mapping[str, Any], str]
EdgeLike = Union[GraphEdge, Mapping[str, Any], Tuple[Any, ...]]


def coerce_node(node: NodeLike) -> GraphNode:
    """
    Convert a caller-supplied node record into a ``GraphNode``.

    Accepts a ``GraphNode``, a mapping with ``id`` and ``type`` (or
    ``entity_type``) keys, or a bare id string (typed as a work).
    """
    if isinstance(node, GraphNode):
        return node
    if isinstance(node, str):
        return GraphNode(id=node)
    if isinstance(node, Mapping):
        if "id" not in node:
            raise ValueError(f"Node record has no 'id': {node!r}")
        entity_type = node.get("entity_type", node.get("type", EntityType.WORK))
        return GraphNode(
            id=node["id"],
            entity_type=entity_type,
            attributes=node.get("attributes", {}),
        )
    raise ValueError(f"Unsupported node record: {node!r}")


def coerce_edge(edge: EdgeLike) -> GraphEdge:
    """
    Convert a caller-supplied edge record into a ``GraphEdge``.

    Accepts a ``GraphEdge``, a mapping with ``source``/``target`` keys, or a
    ``(source, target)`` / ``(source, target, weight)`` tuple.
    """
    if isinstance(edge, GraphEdge):
        return edge
    if isinstance(edge, Mapping):
        try:
            source, target = edge["source"], edge["target"]
        except KeyError:
            raise ValueError(f"Edge record needs 'source' and 'target': {edge!r}") from None
        weight = edge.get("weight")
        return GraphEdge(
            source=source,
            target=target,
            relation_type=edge.get("relation_type", edge.get("type", "related")),
            weight=1.0 if weight is None else weight,
        )
    if isinstance(edge, tuple) and len(edge) in (2, 3):
        weight = edge[2] if len(edge) == 3 else 1.0
        return GraphEdge(source=edge[0], target=edge[1], weight=weight)
    raise ValueError(f"Unsupported edge record: {edge!r}")


# =============================================================================
# Result records
# =============================================================================


@dataclass(frozen=True)
class TraversalResult:
    """Visit order and BFS/DFS tree of a traversal from ``start``."""

    found: bool
    start: str
    order: Tuple[str, ...] = ()
    parents: Mapping[str, Optional[str]] = field(default_factory=dict)
    depths: Mapping[str, int] = field(default_factory=dict)

    def path_to(self, node_id: str) -> Tuple[str, ...]:
        """Reconstruct the tree path from ``start`` to ``node_id``, or ``()``."""
        if node_id not in self.parents:
            return ()
        path = []
        current: Optional[str] = node_id
        while current is not None:
            path.append(current)
            current = self.parents[current]
        return tuple(reversed(path))


@dataclass(frozen=True)
class PathResult:
    found: bool
    source: str
    target: str
    path: Tuple[str, ...] = ()
    length: int = 0
    total_weight: float = 0.0


@dataclass(frozen=True)
class ComponentResult:
    """
    Connected components.

    ``components`` keeps discovery order; callers must not rely on it.
    """

    components: Tuple[Tuple[str, ...], ...]
    directed: bool
    membership: Mapping[str, int] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.components)

    @property
    def largest_size(self) -> int:
        return max((len(c) for c in self.components), default=0)


@dataclass(frozen=True)
class CycleResult:
    has_cycle: bool
    cycle: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BiconnectedResult:
    components: Tuple[Tuple[str, ...], ...]
    articulation_points: Tuple[str, ...]
    bridges: Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class KCoreResult:
    k: int
    node_ids: Tuple[str, ...] = ()
    edges: Tuple[Tuple[str, str], ...] = ()

    @property
    def node_count(self) -> int:
        return len(self.node_ids)

    @property
    def edge_count(self) -> int:
        return len(self.edges)


@dataclass(frozen=True)
class KTrussResult:
    k: int
    node_ids: Tuple[str, ...] = ()
    edges: Tuple[Tuple[str, str], ...] = ()
    edge_support: Mapping[Tuple[str, str], int] = field(default_factory=dict)
    truss_number: Mapping[Tuple[str, str], int] = field(default_factory=dict)

    @property
    def node_count(self) -> int:
        return len(self.node_ids)

    @property
    def edge_count(self) -> int:
        return len(self.edges)


@dataclass(frozen=True)
class TriangleResult:
    triangle_count: int
    triangles: Tuple[Tuple[str, str, str], ...]
    node_triangles: Mapping[str, int]
    clustering_coefficient: float
    local_clustering: Mapping[str, float]


@dataclass(frozen=True)
class StarPattern:
    center: str
    star_type: str
    degree: int
    spokes: Tuple[str, ...]
    leaves: Tuple[str, ...]


@dataclass(frozen=True)
class StarPatternResult:
    stars: Tuple[StarPattern, ...]
    min_degree: int

    @property
    def count(self) -> int:
        return len(self.stars)


@dataclass(frozen=True)
class CorePeripheryResult:
    valid: bool
    threshold: float
    core: Tuple[str, ...] = ()
    periphery: Tuple[str, ...] = ()
    coreness: Mapping[str, float] = field(default_factory=dict)
    core_density: float = 0.0
    periphery_density: float = 0.0
    core_periphery_density: float = 0.0


@dataclass(frozen=True)
class Community:
    """A detected community; ``id`` orders communities by descending size."""

    id: int
    node_ids: Tuple[str, ...]
    density: float = 0.0

    @property
    def size(self) -> int:
        return len(self.node_ids)


@dataclass(frozen=True)
class CouplingPair:
    """
    Two nodes linked through shared neighbors.

    For co-citation ``shared`` holds the citing nodes; for bibliographic
    coupling it holds the commonly cited targets.
    """

    first: str
    second: str
    count: int
    shared: Tuple[str, ...]
    similarity: float


@dataclass(frozen=True)
class PairResult:
    pairs: Tuple[CouplingPair, ...]
    threshold: int

    @property
    def count(self) -> int:
        return len(self.pairs)


@dataclass(frozen=True)
class EgoNetworkResult:
    seeds: Tuple[str, ...]
    radius: int
    node_ids: Tuple[str, ...]
    edges: Tuple[GraphEdge, ...]
    distances: Mapping[str, int]


@dataclass(frozen=True)
class ReachabilityResult:
    sources: Tuple[str, ...]
    direction: str
    node_ids: Tuple[str, ...]
    distances: Mapping[str, int]


@dataclass(frozen=True)
class DegreeSummary:
    mean: float = 0.0
    std: float = 0.0
    min: int = 0
    max: int = 0
    median: float = 0.0
    skewness: float = 0.0
    gini: float = 0.0


@dataclass(frozen=True)
class GraphStatistics:
    node_count: int
    edge_count: int
    directed: bool
    density: float
    average_degree: float
    degree: DegreeSummary
    node_type_counts: Mapping[str, int]
    relation_type_counts: Mapping[str, int]
    isolated_count: int
    component_count: int
    clustering_coefficient: Optional[float] = None


@dataclass(frozen=True)
class CommunityQuality:
    community_id: int
    size: int
    internal_weight: float
    boundary_weight: float
    density: float
    conductance: float
    coverage: float


@dataclass(frozen=True)
class ClusterQualityResult:
    communities: Tuple[CommunityQuality, ...]
    average_density: float
    average_conductance: float
    coverage: float
    modularity: float
    overall_score: float

    def as_dict(self) -> Dict[str, float]:
        """Scalar summary, without the per-community breakdown."""
        return {
            "average_density": self.average_density,
            "average_conductance": self.average_conductance,
            "coverage": self.coverage,
            "modularity": self.modularity,
            "overall_score": self.overall_score,
        }
