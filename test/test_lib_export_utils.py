#!/usr/bin/env python3
"""Tests for lib/export_utils.py"""

import os
import json

import networkx as nx
import pytest

from lib.cycle_detector import find_cycles
from lib.export_utils import build_export_graph, export_dependency_graph, generate_mermaid_graph, mermaid_node_id


class TestMermaid:
    """Tests for Mermaid rendering."""

    def test_full_graph(self, chain_graph) -> None:
        text = generate_mermaid_graph(chain_graph)

        assert text.startswith("graph TD\n")
        assert '    a["a"]' in text
        assert "    b -->|explicit| a" in text
        assert text.count("-->") == 4
        assert "style" not in text

    def test_focus_on_target(self, chain_graph) -> None:
        text = generate_mermaid_graph(chain_graph, "c")

        assert "c -->|explicit| b" in text
        assert "d -->|explicit| c" in text
        assert "e -->|explicit| c" in text
        assert "b -->|explicit| a" not in text
        assert 'a["a"]' not in text
        assert "style c fill" in text

    def test_unknown_target_renders_everything(self, chain_graph) -> None:
        assert generate_mermaid_graph(chain_graph, "ghost") == generate_mermaid_graph(chain_graph)

    def test_node_ids_are_sanitized(self) -> None:
        assert mermaid_node_id("billing/invoices-v2") == "billing_invoices_v2"

    def test_titles_are_escaped(self, chain_graph) -> None:
        chain_graph.nodes["a"].title = 'The "A" spec'
        assert 'a["The #quot;A#quot; spec"]' in generate_mermaid_graph(chain_graph)


class TestBuildExportGraph:
    """Tests for the attributed NetworkX graph."""

    def test_attributes(self, ring_root: str) -> None:
        from lib.graph_builder import build_dependency_graph

        graph = build_dependency_graph(ring_root)
        G = build_export_graph(graph, find_cycles(graph))

        assert G.nodes["a"]["label"] == "a"
        assert G.nodes["a"]["path"] == "a/spec.md"
        assert G.nodes["a"]["fan_in"] == 1
        assert G.nodes["a"]["fan_out"] == 1
        assert G.nodes["a"]["in_cycle"] is True
        assert G.edges["a", "b"]["description"] == "frontmatter depends field"


class TestExportDependencyGraph:
    """Tests for writing graph files."""

    @pytest.mark.parametrize("ext", [".graphml", ".gexf"])
    def test_networkx_formats(self, chain_graph, temp_dir: str, ext: str) -> None:
        filename = os.path.join(temp_dir, "deps" + ext)

        assert export_dependency_graph(filename, chain_graph)

        G = nx.read_graphml(filename) if ext == ".graphml" else nx.read_gexf(filename)
        assert G.number_of_nodes() == 5
        assert G.number_of_edges() == 4

    def test_json(self, chain_graph, temp_dir: str) -> None:
        filename = os.path.join(temp_dir, "deps.json")

        assert export_dependency_graph(filename, chain_graph)

        with open(filename, "r", encoding="utf-8") as f:
            data = json.load(f)
        assert data["directed"] is True
        assert len(data["nodes"]) == 5

    def test_mermaid_file(self, chain_graph, temp_dir: str) -> None:
        filename = os.path.join(temp_dir, "deps.mmd")

        assert export_dependency_graph(filename, chain_graph)

        with open(filename, "r", encoding="utf-8") as f:
            assert f.read() == generate_mermaid_graph(chain_graph)

    def test_unknown_extension_falls_back_to_graphml(self, chain_graph, temp_dir: str) -> None:
        filename = os.path.join(temp_dir, "deps.txt")

        assert export_dependency_graph(filename, chain_graph)

        assert os.path.exists(filename + ".graphml")

    def test_unwritable_path(self, chain_graph, temp_dir: str, capsys) -> None:
        filename = os.path.join(temp_dir, "missing", "deps.mmd")

        assert not export_dependency_graph(filename, chain_graph)

        assert "Failed to export graph" in capsys.readouterr().err
