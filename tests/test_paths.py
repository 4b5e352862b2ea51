"""
Tests for shortest paths and subgraph extraction.
"""

import random

import pytest
import networkx as nx

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from citegraph.algorithms.extraction import (
    ego_network,
    filter_subgraph,
    find_reachable,
    induced_subgraph,
)
from citegraph.algorithms.paths import find_shortest_path, shortest_path_lengths
from citegraph.core.graph import from_networkx
from citegraph.core.types import GraphEdge, GraphNode


@pytest.fixture
def weighted_graph():
    """Random weighted digraph as (nx graph, nodes, edges)."""
    rng = random.Random(42)
    G = nx.gnp_random_graph(40, 0.1, seed=42, directed=True)
    for u, v in G.edges():
        G[u][v]["weight"] = float(rng.randint(1, 9))
    G = nx.relabel_nodes(G, str)
    nodes, edges = from_networkx(G)
    return G, nodes, edges


class TestShortestPath:
    """Tests for find_shortest_path."""

    def test_unweighted_hops(self):
        edges = [("A", "B"), ("B", "C"), ("A", "D"), ("D", "E"), ("E", "C")]
        result = find_shortest_path(list("ABCDE"), edges, "A", "C")
        assert result.found
        assert result.path == ("A", "B", "C")
        assert result.length == 2
        assert result.total_weight == 2.0

    def test_weighted_prefers_lighter_route(self):
        edges = [("A", "B", 10.0), ("B", "C", 10.0), ("A", "D", 1.0), ("D", "C", 1.0)]
        result = find_shortest_path(list("ABCD"), edges, "A", "C")
        assert result.path == ("A", "D", "C")
        assert result.total_weight == 2.0

    def test_weighted_flag_off_counts_hops(self):
        edges = [("A", "C", 10.0), ("A", "B", 1.0), ("B", "C", 1.0)]
        result = find_shortest_path(list("ABC"), edges, "A", "C", weighted=False)
        assert result.path == ("A", "C")
        assert result.total_weight == 10.0

    def test_disconnected_pair_not_found(self):
        result = find_shortest_path(list("ABCD"), [("A", "B"), ("C", "D")], "A", "D")
        assert not result.found
        assert result.path == ()
        assert result.length == 0

    def test_direction_respected(self):
        edges = [("A", "B")]
        assert not find_shortest_path(list("AB"), edges, "B", "A").found
        assert find_shortest_path(list("AB"), edges, "B", "A", directed=False).found

    def test_missing_endpoint(self):
        result = find_shortest_path(list("AB"), [("A", "B")], "A", "Z")
        assert not result.found
        assert result.source == "A"
        assert result.target == "Z"

    def test_source_equals_target(self):
        result = find_shortest_path(list("AB"), [("A", "B")], "A", "A")
        assert result.found
        assert result.path == ("A",)
        assert result.length == 0

    def test_parallel_edges_use_lightest(self):
        edges = [("A", "B", 5.0), ("A", "B", 2.0)]
        assert find_shortest_path(list("AB"), edges, "A", "B").total_weight == 2.0

    def test_negative_weight_raises(self):
        with pytest.raises(ValueError, match="Negative edge weight"):
            find_shortest_path(list("AB"), [("A", "B", -1.0)], "A", "B")

    def test_matches_networkx_dijkstra(self, weighted_graph):
        G, nodes, edges = weighted_graph
        for target in ["5", "17", "33"]:
            result = find_shortest_path(nodes, edges, "0", target)
            if nx.has_path(G, "0", target):
                assert result.found
                assert result.total_weight == pytest.approx(
                    nx.dijkstra_path_length(G, "0", target)
                )
                hops = list(zip(result.path, result.path[1:]))
                assert all(G.has_edge(u, v) for u, v in hops)
            else:
                assert not result.found

    def test_repeated_calls_identical(self, weighted_graph):
        _, nodes, edges = weighted_graph
        first = find_shortest_path(nodes, edges, "0", "33")
        assert find_shortest_path(nodes, edges, "0", "33") == first


class TestShortestPathLengths:
    """Tests for single-source distances."""

    def test_hop_counts(self):
        lengths = shortest_path_lengths(list("ABCD"), [("A", "B"), ("B", "C")], "A")
        assert lengths == {"A": 0.0, "B": 1.0, "C": 2.0}

    def test_matches_networkx(self, weighted_graph):
        G, nodes, edges = weighted_graph
        ours = shortest_path_lengths(nodes, edges, "0")
        expected = nx.single_source_dijkstra_path_length(G, "0")
        assert set(ours) == set(expected)
        for node, distance in expected.items():
            assert ours[node] == pytest.approx(distance)

    def test_missing_source(self):
        assert shortest_path_lengths(list("AB"), [("A", "B")], "Z") == {}


class TestEgoNetwork:
    """Tests for ego network extraction."""

    @pytest.fixture
    def chain(self):
        nodes = list("ABCDE")
        edges = [("A", "B"), ("B", "C"), ("C", "D"), ("D", "E")]
        return nodes, edges

    def test_radius_one(self, chain):
        result = ego_network(*chain, "B", radius=1)
        assert result.node_ids == ("B", "C")
        assert result.distances == {"B": 0, "C": 1}
        assert [(e.source, e.target) for e in result.edges] == [("B", "C")]

    def test_undirected_radius_two(self, chain):
        result = ego_network(*chain, "C", radius=2, directed=False)
        assert result.node_ids == ("A", "B", "C", "D", "E")
        assert len(result.edges) == 4

    def test_radius_zero_is_center(self, chain):
        result = ego_network(*chain, "C", radius=0)
        assert result.node_ids == ("C",)
        assert result.edges == ()

    def test_missing_center_returns_none(self, chain):
        assert ego_network(*chain, "Z") is None

    def test_multiple_seeds(self, chain):
        result = ego_network(*chain, ["A", "D", "Z"], radius=1)
        assert result.seeds == ("A", "D")
        assert set(result.node_ids) == {"A", "B", "D", "E"}

    def test_negative_radius_raises(self, chain):
        with pytest.raises(ValueError):
            ego_network(*chain, "A", radius=-1)

    def test_edges_keep_caller_records(self):
        edges = [GraphEdge("A", "B", "cites", 3.0)]
        result = ego_network(list("AB"), edges, "A")
        assert result.edges == (GraphEdge("A", "B", "cites", 3.0),)

    def test_contains_every_node_within_radius(self):
        G = nx.gnp_random_graph(50, 0.06, seed=7)
        nodes, edges = from_networkx(G)
        result = ego_network(nodes, edges, "0", radius=2, directed=False)
        expected = nx.single_source_shortest_path_length(G, 0, cutoff=2)
        assert set(result.node_ids) == {str(n) for n in expected}


class TestReachability:
    """Tests for forward and backward reachability."""

    @pytest.fixture
    def citations(self):
        nodes = ["W1", "W2", "W3", "W4"]
        edges = [("W1", "W2"), ("W2", "W3"), ("W4", "W3")]
        return nodes, edges

    def test_forward(self, citations):
        result = find_reachable(*citations, "W1")
        assert result.node_ids == ("W1", "W2", "W3")
        assert result.distances["W3"] == 2

    def test_backward(self, citations):
        result = find_reachable(*citations, "W3", direction="backward")
        assert set(result.node_ids) == {"W1", "W2", "W3", "W4"}

    def test_absent_sources(self, citations):
        result = find_reachable(*citations, ["Z"])
        assert result.node_ids == ()

    def test_unknown_direction_raises(self, citations):
        with pytest.raises(ValueError, match="Unknown direction"):
            find_reachable(*citations, "W1", direction="sideways")


class TestInducedSubgraph:
    """Tests for induced_subgraph."""

    def test_keeps_edges_among_members(self):
        nodes, edges = induced_subgraph(
            list("ABCD"), [("A", "B"), ("B", "C"), ("C", "D")], ["B", "C", "Z"]
        )
        assert [n.id for n in nodes] == ["B", "C"]
        assert [(e.source, e.target) for e in edges] == [("B", "C")]


class TestFilterSubgraph:
    """Tests for predicate-based extraction."""

    @pytest.fixture
    def scholarly(self):
        nodes = [
            GraphNode("W1", "work", {"year": 2019}),
            GraphNode("W2", "work", {"year": 2022}),
            GraphNode("A1", "author"),
            GraphNode("A2", "author"),
        ]
        edges = [
            GraphEdge("W2", "W1", "cites"),
            GraphEdge("W1", "A1", "authored_by"),
            GraphEdge("W2", "A2", "authored_by"),
            GraphEdge("W2", "ghost", "cites"),
        ]
        return nodes, edges

    @staticmethod
    def _ids(result):
        nodes, edges = result
        return [n.id for n in nodes], [(e.source, e.target) for e in edges]

    def test_no_filters_returns_whole_graph(self, scholarly):
        nodes, edges = self._ids(filter_subgraph(*scholarly))
        assert nodes == ["W1", "W2", "A1", "A2"]
        assert edges == [("W2", "W1"), ("W1", "A1"), ("W2", "A2")]

    def test_node_filter_is_induced(self, scholarly):
        result = filter_subgraph(*scholarly, node_filter=lambda n: n.entity_type == "work")
        assert self._ids(result) == (["W1", "W2"], [("W2", "W1")])

    def test_node_filter_on_attributes(self, scholarly):
        result = filter_subgraph(
            *scholarly, node_filter=lambda n: n.attributes.get("year", 0) >= 2020
        )
        assert self._ids(result) == (["W2"], [])

    def test_edge_filter_keeps_all_nodes(self, scholarly):
        result = filter_subgraph(*scholarly, edge_filter=lambda e: e.relation_type == "authored_by")
        nodes, edges = self._ids(result)
        assert nodes == ["W1", "W2", "A1", "A2"]
        assert edges == [("W1", "A1"), ("W2", "A2")]

    def test_and_requires_both(self, scholarly):
        result = filter_subgraph(
            *scholarly,
            node_filter=lambda n: n.entity_type == "work",
            edge_filter=lambda e: e.relation_type == "authored_by",
        )
        assert self._ids(result) == (["W1", "W2"], [])

    def test_or_adds_endpoints_of_passing_edges(self, scholarly):
        result = filter_subgraph(
            *scholarly,
            node_filter=lambda n: n.id == "W2",
            edge_filter=lambda e: e.relation_type == "cites",
            combinator="OR",
        )
        assert self._ids(result) == (["W1", "W2"], [("W2", "W1")])

    def test_or_with_single_filter_matches_and(self, scholarly):
        only_works = dict(node_filter=lambda n: n.entity_type == "work")
        assert self._ids(filter_subgraph(*scholarly, combinator="or", **only_works)) == self._ids(
            filter_subgraph(*scholarly, **only_works)
        )

    def test_unknown_combinator_raises(self, scholarly):
        with pytest.raises(ValueError, match="combinator"):
            filter_subgraph(*scholarly, combinator="xor")
