#!/usr/bin/env python3
"""Tests for lib/impact_analysis.py"""

import pytest

from lib.constants import EDGE_API, EDGE_DATA, EDGE_EXPLICIT, EDGE_REFERENCE, LEVEL_HIGH, LEVEL_LOW, LEVEL_MEDIUM, SpecNotFoundError
from lib.graph_builder import build_dependency_graph
from lib.impact_analysis import (
    analyze_impact,
    collect_transitive_dependents,
    determine_impact_level,
    generate_recommendations,
)
from lib.impact_types import AffectedSpec


class TestDetermineImpactLevel:
    """Tests for the edge type to impact level mapping."""

    @pytest.mark.parametrize(
        "edge_type,level",
        [(EDGE_EXPLICIT, LEVEL_HIGH), (EDGE_API, LEVEL_HIGH), (EDGE_DATA, LEVEL_MEDIUM), (EDGE_REFERENCE, LEVEL_LOW), (None, LEVEL_LOW)],
    )
    def test_mapping(self, edge_type, level: str) -> None:
        assert determine_impact_level(edge_type) == level


class TestAnalyzeImpact:
    """Tests for single-spec impact analysis."""

    def test_base_with_five_features(self, scenario_root: str) -> None:
        graph = build_dependency_graph(scenario_root)

        result = analyze_impact(graph, "base")

        assert len(result.affected_by) == 5
        assert len(result.depends_on) == 0
        assert result.transitive_affected == []
        assert all(s.level == LEVEL_HIGH for s in result.affected_by)
        assert result.risk_score >= 7
        assert result.risk_level == LEVEL_HIGH

    def test_feature_depends_on_base(self, scenario_graph) -> None:
        result = analyze_impact(scenario_graph, "feature1")

        assert [s.id for s in result.depends_on] == ["base"]
        assert result.depends_on[0].level == LEVEL_LOW
        assert result.affected_by == []
        assert result.risk_score == 0

    def test_isolated_spec(self, graph_factory) -> None:
        graph = graph_factory(["lonely", "a", "b"], [("a", "b")])

        result = analyze_impact(graph, "lonely")

        assert result.risk_score == 0
        assert result.risk_level == LEVEL_LOW
        assert "no spec depends on it" in result.summary

    def test_missing_spec_raises(self, scenario_graph) -> None:
        with pytest.raises(SpecNotFoundError) as excinfo:
            analyze_impact(scenario_graph, "ghost")
        assert excinfo.value.spec_id == "ghost"

    def test_does_not_modify_graph(self, chain_graph) -> None:
        before = chain_graph.to_dict()
        analyze_impact(chain_graph, "a")
        assert chain_graph.to_dict() == before

    def test_reference_dependent_is_low(self, graph_factory) -> None:
        graph = graph_factory(["a", "b"], [("b", "a")], edge_type=EDGE_REFERENCE)
        result = analyze_impact(graph, "a")
        assert result.affected_by[0].level == LEVEL_LOW
        assert result.affected_by[0].type == EDGE_REFERENCE

    def test_api_dependent_adds_recommendation(self, graph_factory) -> None:
        graph = graph_factory(["a", "b"], [("b", "a")], edge_type=EDGE_API)
        result = analyze_impact(graph, "a")
        assert any("API" in r for r in result.recommendations)

    def test_summary_mentions_score(self, scenario_graph) -> None:
        result = analyze_impact(scenario_graph, "base")
        assert result.summary.startswith("Changing 'base':")
        assert f"risk score: {result.risk_score}/10" in result.summary

    def test_to_dict_keys(self, scenario_graph) -> None:
        data = analyze_impact(scenario_graph, "base").to_dict()
        assert data["targetSpec"] == "base"
        assert len(data["affectedBy"]) == 5
        assert set(data) == {"targetSpec", "dependsOn", "affectedBy", "transitiveAffected", "riskScore", "riskLevel", "summary", "recommendations"}


class TestTransitiveDependents:
    """Tests for the breadth-first transitive walk."""

    def test_levels_by_depth(self, chain_graph) -> None:
        # a <- b <- c <- {d, e}
        result = analyze_impact(chain_graph, "a")

        assert [s.id for s in result.affected_by] == ["b"]
        transitive = {s.id: s for s in result.transitive_affected}
        assert list(transitive) == ["c", "d", "e"]
        assert transitive["c"].level == LEVEL_MEDIUM
        assert transitive["d"].level == LEVEL_LOW
        assert transitive["e"].level == LEVEL_LOW
        assert "depth 1" in transitive["c"].reason
        assert "depth 2" in transitive["d"].reason

    def test_depth_is_bounded(self, graph_factory) -> None:
        # n9 -> n8 -> ... -> n0
        ids = [f"n{i}" for i in range(10)]
        graph = graph_factory(ids, [(ids[i + 1], ids[i]) for i in range(9)])

        transitive = collect_transitive_dependents(graph, "n0")

        # n1 is the direct dependent, n2..n6 are 1..5 hops beyond it
        assert [s.id for s in transitive] == ["n2", "n3", "n4", "n5", "n6"]

    def test_cycle_terminates_without_duplicates(self, ring_root: str) -> None:
        graph = build_dependency_graph(ring_root)

        result = analyze_impact(graph, "a")

        ids = result.all_affected_ids()
        assert len(ids) == len(set(ids))
        assert "a" not in ids
        assert sorted(ids) == ["b", "c"]

    def test_diamond_lists_each_spec_once(self, graph_factory) -> None:
        graph = graph_factory(["root", "left", "right", "top"], [("left", "root"), ("right", "root"), ("top", "left"), ("top", "right")])
        result = analyze_impact(graph, "root")
        assert [s.id for s in result.transitive_affected] == ["top"]


class TestRecommendations:
    """Tests for advisory recommendations."""

    def _spec(self, spec_id: str, edge_type: str = EDGE_EXPLICIT) -> AffectedSpec:
        return AffectedSpec(id=spec_id, path="", title=None, level=LEVEL_HIGH, type=edge_type, reason="")

    def test_high_risk(self) -> None:
        recs = generate_recommendations([self._spec("a")], [], LEVEL_HIGH)
        assert "Roll the change out in stages." in recs
        assert len(recs) == 3

    def test_low_risk(self) -> None:
        assert generate_recommendations([], [], LEVEL_LOW) == ["Follow the standard change process."]

    def test_many_transitive_dependents_suggest_proposal(self) -> None:
        transitive = [self._spec(f"t{i}") for i in range(4)]
        recs = generate_recommendations([], transitive, LEVEL_MEDIUM)
        assert any(r.startswith("Write a formal change proposal") for r in recs)

    def test_data_dependency(self) -> None:
        recs = generate_recommendations([self._spec("a", EDGE_DATA)], [], LEVEL_MEDIUM)
        assert any("data migration" in r for r in recs)
