#!/usr/bin/env python3
"""Tests for lib/simulation.py"""

import pytest

from lib.constants import LEVEL_HIGH, LEVEL_LOW, SimulationError, SpecNotFoundError
from lib.delta_parser import AddedDelta, ModifiedDelta, RemovedDelta, parse_deltas
from lib.simulation import apply_deltas, run_simulation


class TestApplyDeltas:
    """Tests for applying deltas to a graph copy."""

    def test_added_is_idempotent(self, scenario_graph) -> None:
        delta = AddedDelta("payments", "new payments", ["base"])

        once = scenario_graph.clone()
        apply_deltas(once, [delta])
        twice = scenario_graph.clone()
        apply_deltas(twice, [delta, delta])

        assert once.to_dict() == twice.to_dict()
        assert once.nodes["payments"].depends_on == ["base"]
        assert "payments" in once.nodes["base"].depended_by
        assert once.check_consistency() == []

    def test_removed_cleans_all_references(self, chain_graph) -> None:
        apply_deltas(chain_graph, [RemovedDelta("c")])

        assert "c" not in chain_graph.nodes
        for node in chain_graph.nodes.values():
            assert "c" not in node.depends_on
            assert "c" not in node.depended_by
        assert all("c" not in edge.key for edge in chain_graph.edges)
        assert chain_graph.check_consistency() == []

    def test_modified_is_additive(self, chain_graph) -> None:
        apply_deltas(chain_graph, [ModifiedDelta("d", new_dependencies=["a"], removed_dependencies=["c"])])

        assert chain_graph.nodes["d"].depends_on == ["c", "a"]
        assert "d" in chain_graph.nodes["a"].depended_by

    def test_unknown_dependency_is_noted(self, chain_graph) -> None:
        notes = apply_deltas(chain_graph, [AddedDelta("x", None, ["ghost"])])
        assert "x" in chain_graph.nodes
        assert chain_graph.nodes["x"].depends_on == []
        assert len(notes) == 1 and "ghost" in notes[0]

    def test_removing_missing_spec_is_noted(self, chain_graph) -> None:
        notes = apply_deltas(chain_graph, [RemovedDelta("ghost")])
        assert len(chain_graph.nodes) == 5
        assert notes

    def test_added_specs_may_depend_on_later_additions(self, scenario_graph) -> None:
        deltas = parse_deltas("## ADDED\n- `payments` (depends: ledger)\n- `ledger` (depends: base)\n")

        notes = apply_deltas(scenario_graph, deltas)

        assert notes == []
        assert scenario_graph.nodes["payments"].depends_on == ["ledger"]
        assert scenario_graph.nodes["ledger"].depended_by == ["payments"]
        assert scenario_graph.check_consistency() == []

    def test_added_then_removed_in_one_proposal(self, chain_graph) -> None:
        apply_deltas(chain_graph, [AddedDelta("x", None, ["a"]), RemovedDelta("x")])
        assert "x" not in chain_graph.nodes
        assert "x" not in chain_graph.nodes["a"].depended_by

    def test_self_dependency_is_ignored(self, chain_graph) -> None:
        notes = apply_deltas(chain_graph, [AddedDelta("x", None, ["x", "a"]), ModifiedDelta("d", new_dependencies=["d"])])

        assert chain_graph.nodes["x"].depends_on == ["a"]
        assert "x" not in chain_graph.nodes["x"].depended_by
        assert chain_graph.nodes["d"].depends_on == ["c"]
        assert len(notes) == 2
        assert all("itself" in note for note in notes)

    def test_unknown_delta_type(self, chain_graph) -> None:
        with pytest.raises(SimulationError):
            apply_deltas(chain_graph, ["not a delta"])  # type: ignore[list-item]


class TestRunSimulation:
    """Tests for the what-if comparison."""

    def test_base_graph_is_not_modified(self, scenario_graph) -> None:
        before = scenario_graph.to_dict()

        run_simulation(scenario_graph, "base", [AddedDelta("x", None, ["base"]), RemovedDelta("feature1"), ModifiedDelta("feature2", new_dependencies=["feature3"])])

        assert scenario_graph.to_dict() == before

    def test_chained_additions_are_all_newly_affected(self, scenario_graph) -> None:
        deltas = parse_deltas("## ADDED\n- `payments` (depends: ledger)\n- `ledger` (depends: base)\n")

        result = run_simulation(scenario_graph, "base", deltas)

        assert sorted(s.id for s in result.newly_affected) == ["ledger", "payments"]

    def test_removing_a_referenced_spec(self, scenario_graph) -> None:
        result = run_simulation(scenario_graph, "base", [RemovedDelta("base")])

        assert result.projected.total_specs == result.current.total_specs - 1
        assert result.projected.total_edges == 0
        assert result.changes.removed_specs == ["base"]
        assert result.changes.removed_edges == 5
        assert any("still referenced" in w and "base" in w for w in result.warnings)
        assert any("is removed by this change" in w for w in result.warnings)
        assert result.projected.target_risk_score == 0
        assert sorted(result.no_longer_affected) == [f"feature{i}" for i in range(1, 6)]

    def test_new_dependents_raise_risk(self, graph_factory) -> None:
        graph = graph_factory(["core", "other"])
        deltas = [AddedDelta(f"new{i}", None, ["core"]) for i in range(4)]

        result = run_simulation(graph, "core", deltas)

        assert result.current.target_risk_score == 0
        assert result.projected.target_risk_score == 10
        assert result.projected.target_risk_level == LEVEL_HIGH
        assert result.risk_delta == 10
        assert [s.id for s in result.newly_affected] == ["new0", "new1", "new2", "new3"]
        assert result.changes.added_specs == ["new0", "new1", "new2", "new3"]
        assert result.changes.added_edges == 4
        assert any(w.startswith("Risk score rises by 10") for w in result.warnings)
        assert any("newly affected" in w for w in result.warnings)
        assert any('"high"' in w for w in result.warnings)
        assert len(result.recommendations) >= 2

    def test_adding_high_dependent_never_lowers_risk(self, scenario_graph) -> None:
        result = run_simulation(scenario_graph, "feature1", [AddedDelta("consumer", None, ["feature1"])])
        assert result.projected.target_risk_score >= result.current.target_risk_score
        assert result.risk_delta >= 0

    def test_no_deltas(self, scenario_graph) -> None:
        result = run_simulation(scenario_graph, "base", [])
        assert result.risk_delta == 0
        assert result.newly_affected == []
        assert result.no_longer_affected == []
        assert result.warnings == []

    def test_missing_target(self, scenario_graph) -> None:
        with pytest.raises(SpecNotFoundError):
            run_simulation(scenario_graph, "ghost", [])

    def test_invalid_delta_rejected_before_work(self, scenario_graph) -> None:
        with pytest.raises(SimulationError):
            run_simulation(scenario_graph, "base", [object()])  # type: ignore[list-item]

    def test_parsed_proposal(self, scenario_graph) -> None:
        deltas = parse_deltas("## ADDED\n- `reports` (depends: feature1)\n\n## REMOVED\n- `feature5`\n")

        result = run_simulation(scenario_graph, "feature1", deltas)

        assert result.current.target_risk_level == LEVEL_LOW
        assert [s.id for s in result.newly_affected] == ["reports"]
        assert result.projected.total_specs == 6
        assert result.changes.added_edges == 1
        assert result.changes.removed_edges == 1

    def test_to_dict(self, scenario_graph) -> None:
        data = run_simulation(scenario_graph, "base", [RemovedDelta("feature1")]).to_dict()
        assert data["targetSpec"] == "base"
        assert data["noLongerAffected"] == ["feature1"]
        assert data["changes"]["removedSpecs"] == ["feature1"]
