#!/usr/bin/env python3
"""Tests for lib/cycle_detector.py"""

from lib.cycle_detector import find_cycles, format_cycle, nodes_in_cycles
from lib.graph_builder import build_dependency_graph


class TestFindCycles:
    """Tests for circular dependency detection."""

    def test_three_node_ring(self, ring_root: str) -> None:
        graph = build_dependency_graph(ring_root)

        cycles = find_cycles(graph)

        assert len(cycles) == 1
        assert sorted(cycles[0].cycle) == ["a", "b", "c"]
        assert cycles[0].description == "a -> b -> c -> a"

    def test_acyclic_graph(self, chain_graph) -> None:
        assert find_cycles(chain_graph) == []

    def test_empty_graph(self, graph_factory) -> None:
        assert find_cycles(graph_factory([])) == []

    def test_two_node_cycle(self, graph_factory) -> None:
        graph = graph_factory(["x", "y"], [("x", "y"), ("y", "x")])
        cycles = find_cycles(graph)
        assert [c.cycle for c in cycles] == [["x", "y"]]

    def test_separate_cycles_are_both_found(self, graph_factory) -> None:
        graph = graph_factory(["a", "b", "c", "d"], [("a", "b"), ("b", "a"), ("c", "d"), ("d", "c")])
        cycles = find_cycles(graph)
        assert len(cycles) == 2
        assert nodes_in_cycles(cycles) == {"a", "b", "c", "d"}

    def test_does_not_modify_graph(self, ring_root: str) -> None:
        graph = build_dependency_graph(ring_root)
        before = graph.to_dict()
        find_cycles(graph)
        assert graph.to_dict() == before

    def test_long_chain_does_not_recurse(self, graph_factory) -> None:
        ids = [f"n{i}" for i in range(3000)]
        graph = graph_factory(ids, [(ids[i], ids[i + 1]) for i in range(len(ids) - 1)])
        assert find_cycles(graph) == []


class TestFormatCycle:
    """Tests for cycle descriptions."""

    def test_format(self) -> None:
        assert format_cycle(["a", "b"]) == "a -> b -> a"

    def test_empty(self) -> None:
        assert format_cycle([]) == ""
