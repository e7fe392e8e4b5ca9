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
"""Dependency graph model for specification documents.

A DependencyGraph holds one DependencyNode per specification document and an
ordered list of typed DependencyEdges. Every edge A -> B is mirrored in the
node lists: A.depends_on contains B and B.depended_by contains A.

Graphs handed out by the builder are treated as read-only. The simulator works
on a copy obtained from DependencyGraph.clone() and mutates it through
add_edge()/remove_node(), which keep both directions in sync.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple, Any

import networkx as nx

from lib.constants import EDGE_TYPES

logger = logging.getLogger(__name__)


@dataclass
class DependencyNode:
    """A single specification document in the graph.

    Attributes:
        id: Stable identifier derived from the document path (e.g. "auth")
        path: Document path relative to the specification root
        title: Optional human readable label
        depends_on: Ids this spec depends on (insertion ordered, no duplicates)
        depended_by: Ids depending on this spec (inverse of depends_on)
    """

    id: str
    path: str
    title: Optional[str] = None
    depends_on: List[str] = field(default_factory=list)
    depended_by: List[str] = field(default_factory=list)

    @property
    def degree(self) -> int:
        """Number of incoming plus outgoing dependencies."""
        return len(self.depends_on) + len(self.depended_by)


@dataclass
class DependencyEdge:
    """A directed dependency: source depends on target."""

    source: str
    target: str
    type: str
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type not in EDGE_TYPES:
            raise ValueError(f"Unknown dependency type '{self.type}' (expected one of {', '.join(EDGE_TYPES)})")

    @property
    def key(self) -> Tuple[str, str]:
        return (self.source, self.target)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"from": self.source, "to": self.target, "type": self.type}
        if self.description:
            data["description"] = self.description
        return data


@dataclass
class ParseWarning:
    """Non-fatal problem found while reading a document.

    The document is still part of the graph, with no explicit dependencies.
    """

    spec_id: str
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass
class DependencyGraph:
    """Specification dependency graph.

    Attributes:
        nodes: Nodes keyed by id, in discovery order
        edges: Edges in creation order
        unresolved_references: (source, target) pairs dropped because target is unknown
        parse_warnings: Documents whose header could not be read as expected
    """

    nodes: Dict[str, DependencyNode] = field(default_factory=dict)
    edges: List[DependencyEdge] = field(default_factory=list)
    unresolved_references: List[Tuple[str, str]] = field(default_factory=list)
    parse_warnings: List[ParseWarning] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, spec_id: object) -> bool:
        return spec_id in self.nodes

    def find_edge(self, source: str, target: str) -> Optional[DependencyEdge]:
        """Return the edge source -> target, or None."""
        for edge in self.edges:
            if edge.source == source and edge.target == target:
                return edge
        return None

    def edge_keys(self) -> Set[Tuple[str, str]]:
        return {edge.key for edge in self.edges}

    def add_node(self, node: DependencyNode) -> bool:
        """Add a node unless one with the same id exists.

        Returns:
            True if the node was added
        """
        if node.id in self.nodes:
            return False
        self.nodes[node.id] = node
        return True

    def add_edge(self, source: str, target: str, edge_type: str, description: Optional[str] = None) -> bool:
        """Add source -> target and update both adjacency lists.

        Edges to or from unknown nodes and duplicate edges are ignored.

        Returns:
            True if a new edge was stored
        """
        source_node = self.nodes.get(source)
        target_node = self.nodes.get(target)
        if source_node is None or target_node is None:
            return False
        if target in source_node.depends_on:
            return False

        self.edges.append(DependencyEdge(source, target, edge_type, description))
        source_node.depends_on.append(target)
        if source not in target_node.depended_by:
            target_node.depended_by.append(source)
        return True

    def remove_node(self, spec_id: str) -> bool:
        """Remove a node, every edge touching it and all reciprocal entries.

        Returns:
            True if the node existed
        """
        node = self.nodes.pop(spec_id, None)
        if node is None:
            return False

        self.edges = [e for e in self.edges if e.source != spec_id and e.target != spec_id]

        for dep_id in node.depends_on:
            dep_node = self.nodes.get(dep_id)
            if dep_node is not None:
                dep_node.depended_by = [i for i in dep_node.depended_by if i != spec_id]

        for by_id in node.depended_by:
            by_node = self.nodes.get(by_id)
            if by_node is not None:
                by_node.depends_on = [i for i in by_node.depends_on if i != spec_id]

        return True

    def clone(self) -> "DependencyGraph":
        """Return a deep copy that shares no mutable state with this graph."""
        cloned = DependencyGraph(
            edges=[DependencyEdge(e.source, e.target, e.type, e.description) for e in self.edges],
            unresolved_references=list(self.unresolved_references),
            parse_warnings=list(self.parse_warnings),
        )
        for spec_id, node in self.nodes.items():
            cloned.nodes[spec_id] = DependencyNode(
                id=node.id,
                path=node.path,
                title=node.title,
                depends_on=list(node.depends_on),
                depended_by=list(node.depended_by),
            )
        return cloned

    def check_consistency(self) -> List[str]:
        """Verify that edges and adjacency lists mirror each other.

        Returns:
            List of problems (empty when the graph is consistent)
        """
        problems: List[str] = []
        edge_keys = self.edge_keys()

        for edge in self.edges:
            if edge.source not in self.nodes or edge.target not in self.nodes:
                problems.append(f"dangling edge {edge.source} -> {edge.target}")
                continue
            if edge.target not in self.nodes[edge.source].depends_on:
                problems.append(f"{edge.source}.depends_on is missing {edge.target}")
            if edge.source not in self.nodes[edge.target].depended_by:
                problems.append(f"{edge.target}.depended_by is missing {edge.source}")

        for spec_id, node in self.nodes.items():
            for dep_id in node.depends_on:
                if (spec_id, dep_id) not in edge_keys:
                    problems.append(f"{spec_id}.depends_on lists {dep_id} without an edge")
            for by_id in node.depended_by:
                if (by_id, spec_id) not in edge_keys:
                    problems.append(f"{spec_id}.depended_by lists {by_id} without an edge")

        return problems

    def to_networkx(self) -> "nx.DiGraph[Any]":
        """Build a NetworkX directed graph with node and edge attributes."""
        G: nx.DiGraph[str] = nx.DiGraph()

        G.add_nodes_from((spec_id, {"path": node.path, "title": node.title or spec_id}) for spec_id, node in self.nodes.items())
        G.add_edges_from((e.source, e.target, {"type": e.type}) for e in self.edges)

        logger.debug("Built NetworkX graph with %s nodes and %s edges", G.number_of_nodes(), G.number_of_edges())
        return G

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [
                {
                    "id": node.id,
                    "path": node.path,
                    "title": node.title,
                    "dependsOn": list(node.depends_on),
                    "dependedBy": list(node.depended_by),
                }
                for node in self.nodes.values()
            ],
            "edges": [edge.to_dict() for edge in self.edges],
        }
