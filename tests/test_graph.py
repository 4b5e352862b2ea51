"""
Tests for the core module: types, graph builder and traversal.
"""

import pytest
import networkx as nx

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from citegraph.core.types import (
    EntityType,
    GraphEdge,
    GraphNode,
    coerce_edge,
    coerce_node,
)
from citegraph.core.graph import build_graph, from_networkx, to_networkx
from citegraph.core.traversal import bfs, dfs


class TestEntityType:
    """Tests for entity type parsing."""

    def test_parse_value(self):
        assert EntityType.parse("author") is EntityType.AUTHOR

    def test_parse_case_and_plural(self):
        assert EntityType.parse("Works") is EntityType.WORK
        assert EntityType.parse(" INSTITUTIONS ") is EntityType.INSTITUTION

    def test_parse_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown entity type"):
            EntityType.parse("galaxy")

    def test_node_rejects_unknown_type(self):
        with pytest.raises(ValueError):
            GraphNode(id="X", entity_type="galaxy")


class TestCoercion:
    """Tests for boundary coercion of caller records."""

    def test_node_from_string(self):
        node = coerce_node("W1")
        assert node.id == "W1"
        assert node.entity_type is EntityType.WORK

    def test_node_from_dict(self):
        node = coerce_node({"id": "A1", "type": "author", "attributes": {"name": "Ada"}})
        assert node.entity_type is EntityType.AUTHOR
        assert node.attributes["name"] == "Ada"

    def test_attributes_do_not_affect_equality(self):
        a = GraphNode(id="W1", attributes={"title": "x"})
        b = GraphNode(id="W1", attributes={"title": "y"})
        assert a == b

    def test_node_dict_without_id_raises(self):
        with pytest.raises(ValueError):
            coerce_node({"type": "work"})

    def test_edge_from_tuple(self):
        edge = coerce_edge(("A", "B", 2.5))
        assert (edge.source, edge.target, edge.weight) == ("A", "B", 2.5)
        assert edge.relation_type == "related"

    def test_edge_from_dict(self):
        edge = coerce_edge({"source": "A", "target": "B", "type": "cites"})
        assert edge.relation_type == "cites"
        assert edge.weight == 1.0

    def test_edge_dict_missing_target_raises(self):
        with pytest.raises(ValueError):
            coerce_edge({"source": "A"})

    def test_edge_rejects_non_finite_weight(self):
        with pytest.raises(ValueError):
            GraphEdge("A", "B", weight=float("nan"))


class TestBuildGraph:
    """Tests for the snapshot builder."""

    def test_directed_adjacency(self):
        g = build_graph(["A", "B", "C"], [("A", "B"), ("B", "C")])
        assert g.neighbors(0) == [1]
        assert g.predecessors(2) == [1]
        assert g.number_of_edges() == 2

    def test_undirected_symmetrized(self):
        g = build_graph(["A", "B"], [("A", "B")], directed=False)
        assert g.neighbors(0) == [1]
        assert g.neighbors(1) == [0]
        assert g.number_of_edges() == 1

    def test_self_loops_dropped_by_default(self):
        g = build_graph(["A"], [("A", "A")])
        assert g.number_of_edges() == 0
        g = build_graph(["A"], [("A", "A")], keep_self_loops=True)
        assert g.number_of_edges() == 1

    def test_parallel_edges_combined(self):
        edges = [("A", "B", 2.0), ("A", "B", 5.0)]
        assert build_graph(["A", "B"], edges, combine="min").forward[0] == [(1, 2.0)]
        assert build_graph(["A", "B"], edges, combine="sum").forward[0] == [(1, 7.0)]
        assert build_graph(["A", "B"], edges).forward[0] == [(1, 5.0)]

    def test_reverse_edges_merge_when_undirected(self):
        g = build_graph(["A", "B"], [("A", "B"), ("B", "A")], directed=False)
        assert g.number_of_edges() == 1

    def test_dangling_edges_skipped(self):
        g = build_graph(["A", "B"], [("A", "B"), ("A", "Z")])
        assert g.number_of_edges() == 1

    def test_duplicate_nodes_keep_first(self):
        g = build_graph([{"id": "A", "type": "author"}, {"id": "A", "type": "work"}], [])
        assert len(g) == 1
        assert g.entity_types[0] is EntityType.AUTHOR

    def test_unknown_combine_raises(self):
        with pytest.raises(ValueError):
            build_graph(["A"], [], combine="avg")

    def test_input_not_mutated(self):
        nodes = [{"id": "A"}, {"id": "B"}]
        edges = [{"source": "A", "target": "B"}]
        build_graph(nodes, edges, directed=False)
        assert nodes == [{"id": "A"}, {"id": "B"}]
        assert edges == [{"source": "A", "target": "B"}]


class TestNetworkxConversion:
    """Tests for networkx interop."""

    def test_round_trip_keeps_types(self):
        nodes = [GraphNode("A1", "author"), GraphNode("W1", "work")]
        edges = [GraphEdge("A1", "W1", "authored", 1.0)]
        G = to_networkx(nodes, edges)
        assert isinstance(G, nx.DiGraph)
        assert G.nodes["A1"]["entity_type"] == "author"

        back_nodes, back_edges = from_networkx(G)
        assert back_nodes == nodes
        assert back_edges == edges

    def test_from_networkx_stringifies_ids(self):
        nodes, edges = from_networkx(nx.path_graph(3))
        assert [n.id for n in nodes] == ["0", "1", "2"]
        assert len(edges) == 2

    def test_snapshot_export_keeps_merged_weights(self):
        edges = [("A", "B", 1.0), ("B", "A", 2.0), ("B", "C", 0.5)]
        G = build_graph(list("ABCD"), edges, directed=False, combine="sum").to_networkx()
        assert isinstance(G, nx.Graph) and not G.is_directed()
        assert list(G.nodes()) == list("ABCD")
        assert G["A"]["B"]["weight"] == 3.0
        assert G.number_of_edges() == 2


class TestTraversal:
    """Tests for BFS and DFS."""

    @pytest.fixture
    def tree(self):
        nodes = ["A", "B", "C", "D", "E"]
        edges = [("A", "B"), ("A", "C"), ("B", "D"), ("C", "E")]
        return nodes, edges

    def test_bfs_order(self, tree):
        result = bfs(*tree, "A")
        assert result.found
        assert result.order == ("A", "B", "C", "D", "E")
        assert result.depths["E"] == 2

    def test_dfs_order(self, tree):
        result = dfs(*tree, "A")
        assert result.order == ("A", "B", "D", "C", "E")
        assert result.parents["E"] == "C"

    def test_path_reconstruction(self, tree):
        assert bfs(*tree, "A").path_to("E") == ("A", "C", "E")
        assert bfs(*tree, "A").path_to("missing") == ()

    def test_directed_respects_direction(self, tree):
        assert bfs(*tree, "D").order == ("D",)
        assert set(bfs(*tree, "D", directed=False).order) == set(tree[0])

    def test_missing_start(self, tree):
        for search in (bfs, dfs):
            result = search(*tree, "Z")
            assert not result.found
            assert result.order == ()

    def test_dfs_long_chain(self):
        n = 5000
        nodes = [str(i) for i in range(n)]
        edges = [(str(i), str(i + 1)) for i in range(n - 1)]
        result = dfs(nodes, edges, "0")
        assert len(result.order) == n
        assert result.depths[str(n - 1)] == n - 1
