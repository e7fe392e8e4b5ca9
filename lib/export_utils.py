#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Export utilities for writing spec dependency graphs to various file formats."""

import os
import re
import json
import logging
from typing import Any, List, Optional, Set

import networkx as nx
from networkx.readwrite import json_graph

from lib.color_utils import print_error, print_success
from lib.cycle_detector import CycleRecord, nodes_in_cycles
from lib.spec_graph import DependencyGraph

logger = logging.getLogger(__name__)

RE_MERMAID_UNSAFE = re.compile(r"[^A-Za-z0-9_]")


def mermaid_node_id(spec_id: str) -> str:
    """Spec id reduced to characters Mermaid accepts as a node id."""
    return RE_MERMAID_UNSAFE.sub("_", spec_id)


def _mermaid_label(text: str) -> str:
    return text.replace('"', "#quot;")


def generate_mermaid_graph(graph: DependencyGraph, target_id: Optional[str] = None) -> str:
    """Render the dependency graph as a Mermaid flowchart.

    Edges point from the dependent spec to the spec it depends on and are
    labelled with the dependency type. When target_id is given, only the
    target, its dependencies and its direct dependents are drawn and the
    target is highlighted.

    Args:
        graph: Dependency graph
        target_id: Optional spec to focus on

    Returns:
        Mermaid source text
    """
    if target_id is not None and target_id in graph.nodes:
        target = graph.nodes[target_id]
        included: Set[str] = {target_id, *target.depends_on, *target.depended_by}
    else:
        target_id = None
        included = set(graph.nodes)

    lines = ["graph TD"]
    for spec_id, node in graph.nodes.items():
        if spec_id in included:
            lines.append(f'    {mermaid_node_id(spec_id)}["{_mermaid_label(node.title or spec_id)}"]')

    for edge in graph.edges:
        if edge.source in included and edge.target in included:
            if target_id is not None and target_id not in (edge.source, edge.target):
                continue
            lines.append(f"    {mermaid_node_id(edge.source)} -->|{edge.type}| {mermaid_node_id(edge.target)}")

    if target_id is not None:
        lines.append(f"    style {mermaid_node_id(target_id)} fill:#f96,stroke:#333,stroke-width:2px")

    return "\n".join(lines) + "\n"


def build_export_graph(graph: DependencyGraph, cycles: Optional[List[CycleRecord]] = None) -> Any:
    """NetworkX copy of the graph with attributes for visualization tools.

    Node attributes: label, path, fan_in, fan_out, in_cycle
    Edge attributes: type, description
    """
    G = graph.to_networkx()
    cyclic = nodes_in_cycles(cycles or [])

    for spec_id in G.nodes():
        G.nodes[spec_id]["label"] = G.nodes[spec_id].pop("title")
        G.nodes[spec_id]["fan_in"] = G.in_degree(spec_id)
        G.nodes[spec_id]["fan_out"] = G.out_degree(spec_id)
        G.nodes[spec_id]["in_cycle"] = spec_id in cyclic

    for edge in graph.edges:
        G.edges[edge.source, edge.target]["description"] = edge.description or ""

    return G


def export_dependency_graph(filename: str, graph: DependencyGraph, cycles: Optional[List[CycleRecord]] = None) -> bool:
    """Export the dependency graph to a file.

    Supports: GraphML (.graphml), DOT (.dot), GEXF (.gexf), JSON (.json),
    Mermaid (.mmd). Unknown extensions fall back to GraphML.

    Args:
        filename: Output filename (extension determines format)
        graph: Dependency graph
        cycles: Detected cycles, used to flag nodes with in_cycle

    Returns:
        True if the file was written
    """
    ext = os.path.splitext(filename)[1].lower()

    try:
        if ext == ".mmd":
            with open(filename, "w", encoding="utf-8") as f:
                f.write(generate_mermaid_graph(graph))
        else:
            G = build_export_graph(graph, cycles)
            if ext == ".graphml":
                nx.write_graphml(G, filename)
            elif ext == ".dot":
                nx.drawing.nx_pydot.write_dot(G, filename)
            elif ext == ".gexf":
                nx.write_gexf(G, filename)
            elif ext == ".json":
                data = json_graph.node_link_data(G)
                with open(filename, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
            else:
                logger.warning("Unsupported graph format: %s. Defaulting to GraphML.", ext)
                filename = filename + ".graphml"
                nx.write_graphml(G, filename)

        logger.info("Exported dependency graph to %s", filename)
        print_success(f"Exported dependency graph to {filename}")
        return True

    except ImportError:
        logger.error("Missing dependency for graph export")
        print_error("Missing dependency for graph export. Install pydot for DOT format.")
    except OSError as e:
        logger.error("Failed to export graph: %s", e)
        print_error(f"Failed to export graph: {e}")
    return False
