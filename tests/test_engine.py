"""
Tests for algorithm dispatch and configuration loading.
"""

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from citegraph.algorithms.community_detection import detect_communities
from citegraph.config import DEFAULTS, load_config
from citegraph.core.types import Community, KTrussResult
from citegraph.engine import ALGORITHMS, resolve_algorithm, run_algorithm


@pytest.fixture
def triangle():
    return list("ABC"), [("A", "B"), ("B", "C"), ("C", "A")]


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self):
        config = load_config()
        assert config == DEFAULTS
        assert config is not DEFAULTS

    def test_yaml_override(self, tmp_path):
        path = tmp_path / "citegraph.yaml"
        path.write_text("resolution: 2.5\nk_truss: 4\n", encoding="utf-8")
        config = load_config(path)
        assert config["resolution"] == 2.5
        assert config["k_truss"] == 4
        assert config["min_count"] == DEFAULTS["min_count"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == DEFAULTS

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_unknown_key_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("resolutoin: 2.0\n", encoding="utf-8")
        with pytest.raises(ValueError, match="resolutoin"):
            load_config(path)

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(path)


class TestResolveAlgorithm:
    """Tests for name resolution."""

    def test_dash_and_case(self):
        assert resolve_algorithm("K-Truss") is ALGORITHMS["k_truss"]
        assert resolve_algorithm("communities") is detect_communities

    def test_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown algorithm"):
            resolve_algorithm("pagerank")


class TestRunAlgorithm:
    """Tests for run_algorithm."""

    def test_k_truss_default_from_config(self, triangle):
        result = run_algorithm("k-truss", *triangle)
        assert isinstance(result, KTrussResult)
        assert result.k == 3
        assert result.node_count == 3

    def test_config_value_applied(self, triangle):
        config = load_config()
        config["k_truss"] = 4
        assert run_algorithm("k_truss", *triangle, config=config).node_count == 0

    def test_explicit_option_wins(self, triangle):
        config = load_config()
        config["k_truss"] = 4
        assert run_algorithm("k_truss", *triangle, config=config, k=3).node_count == 3

    def test_yaml_config_reaches_algorithm(self, tmp_path):
        path = tmp_path / "citegraph.yaml"
        path.write_text("resolution: 100.0\n", encoding="utf-8")
        edges = [("A", "B"), ("B", "C"), ("C", "A"), ("D", "E"), ("E", "F"), ("F", "D"), ("C", "D")]
        communities = run_algorithm("communities", list("ABCDEF"), edges, config=load_config(path))
        assert len(communities) == 6
        assert all(isinstance(c, Community) for c in communities)

    def test_required_arguments_passed_through(self, triangle):
        result = run_algorithm("shortest_path", *triangle, source="A", target="C")
        assert result.found
        assert result.path == ("A", "B", "C")

    def test_missing_required_argument_raises(self, triangle):
        with pytest.raises(TypeError):
            run_algorithm("k_core", *triangle)

    def test_every_algorithm_registered_is_callable(self):
        assert all(callable(func) for func in ALGORITHMS.values())

    def test_statistics(self, triangle):
        stats_ = run_algorithm("statistics", *triangle, directed=False)
        assert stats_.edge_count == 3

    def test_seed_read_from_config(self, tmp_path):
        path = tmp_path / "citegraph.yaml"
        path.write_text("seed: 3\n", encoding="utf-8")
        edges = [("A", "B"), ("B", "C"), ("C", "A"), ("D", "E"), ("E", "F"), ("F", "D"), ("C", "D")]
        nodes = list("ABCDEF")
        assert run_algorithm("communities", nodes, edges, config=load_config(path)) == (
            detect_communities(nodes, edges, seed=3)
        )

    def test_truss_numbers(self, triangle):
        assert set(run_algorithm("truss-numbers", *triangle).values()) == {3}

    def test_filter_subgraph(self, triangle):
        nodes, edges = run_algorithm("filter_subgraph", *triangle, node_filter=lambda n: n.id != "C")
        assert [n.id for n in nodes] == ["A", "B"]
        assert len(edges) == 1
