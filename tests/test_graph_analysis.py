"""
NetworkX graph analysis tests over hand-built artifact graphs.
"""

from core.entities import Tier


class TestGraphAnalyzer:
    """Tests for cycle, dangling reference and depth analysis."""

    def test_chain_depth(self, analyzer, artifact_factory):
        artifacts = [
            artifact_factory("a", Tier.SUBSYSTEM),
            artifact_factory("b", dependencies=["a"]),
            artifact_factory("c", dependencies=["b"]),
        ]

        assert analyzer.is_acyclic(artifacts)
        assert analyzer.calculate_max_depth(artifacts) == 2
        assert analyzer.find_cycles(artifacts) == []

    def test_cycle_found(self, analyzer, artifact_factory):
        artifacts = [
            artifact_factory("a", dependencies=["b"]),
            artifact_factory("b", dependencies=["c"]),
            artifact_factory("c", dependencies=["a"]),
        ]

        cycles = analyzer.find_cycles(artifacts)
        assert len(cycles) == 1
        assert sorted(cycles[0]) == ["a", "b", "c"]
        assert not analyzer.is_acyclic(artifacts)

    def test_cycle_limit(self, analyzer, artifact_factory):
        artifacts = [
            artifact_factory("a", dependencies=["b", "c"]),
            artifact_factory("b", dependencies=["a"]),
            artifact_factory("c", dependencies=["a"]),
        ]
        assert len(analyzer.find_cycles(artifacts, limit=1)) == 1

    def test_depth_of_cyclic_graph_is_finite(self, analyzer, artifact_factory):
        artifacts = [
            artifact_factory("root", dependencies=["a"]),
            artifact_factory("a", dependencies=["b"]),
            artifact_factory("b", dependencies=["a"]),
        ]
        assert analyzer.calculate_max_depth(artifacts) == 2

    def test_dangling_references_listed_not_graphed(self, analyzer, artifact_factory):
        artifacts = [
            artifact_factory("a"),
            artifact_factory("b", dependencies=["a", "ghost"]),
        ]

        assert analyzer.find_dangling_references(artifacts) == {"b": ["ghost"]}
        assert "ghost" not in analyzer.build_graph(artifacts)

    def test_in_degree(self, analyzer, artifact_factory):
        artifacts = [
            artifact_factory("a"),
            artifact_factory("b", dependencies=["a"]),
            artifact_factory("c", dependencies=["a", "b"]),
        ]
        assert analyzer.calculate_in_degree(artifacts) == {"a": 2, "b": 1, "c": 0}

    def test_empty_graph(self, analyzer):
        assert analyzer.calculate_max_depth([]) == 0
        assert analyzer.find_cycles([]) == []
