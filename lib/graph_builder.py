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
"""Build the specification dependency graph.

Construction runs in three passes so that a document may refer to one that is
read later in the directory walk:

1. one node per document
2. edges from declared 'depends' entries, then from in-body references;
   edges to unknown ids are dropped and recorded as unresolved
3. depended_by filled in as the transpose of depends_on
"""

import re
import logging
from typing import Dict, List, Pattern, Sequence

from lib.constants import EDGE_REFERENCE, GraphBuildError
from lib.document_store import SpecDocument, list_documents
from lib.spec_graph import DependencyEdge, DependencyGraph, DependencyNode, ParseWarning

logger = logging.getLogger(__name__)

REFERENCE_DESCRIPTION = "in-document reference"
EXPLICIT_DESCRIPTION = "frontmatter depends field"


def build_reference_patterns(spec_id: str) -> List[Pattern[str]]:
    """Compile the patterns that count as a body reference to spec_id.

    A reference is a Markdown link whose target contains the id as a path
    segment, a ``specs/<id>`` path, or the id quoted in backticks.
    """
    escaped = re.escape(spec_id)
    return [
        re.compile(r"\[[^\]]*\]\((?:[^)\s]*/)?" + escaped + r"(?:\.md|/[^)\s]*)?(?:#[^)\s]*)?\)", re.IGNORECASE),
        re.compile(r"(?<![\w/-])specs/" + escaped + r"(?![\w-])", re.IGNORECASE),
        re.compile(r"`" + escaped + r"`", re.IGNORECASE),
    ]


def extract_references(body: str, patterns: Dict[str, List[Pattern[str]]], self_id: str) -> List[str]:
    """Find the spec ids referenced in a document body.

    Args:
        body: Document text without frontmatter
        patterns: Precompiled reference patterns per known spec id
        self_id: Id of the document being scanned (never reported)

    Returns:
        Referenced ids in pattern-table order
    """
    references: List[str] = []
    for spec_id, spec_patterns in patterns.items():
        if spec_id == self_id:
            continue
        if any(pattern.search(body) for pattern in spec_patterns):
            references.append(spec_id)
    return references


def build_graph_from_documents(documents: Sequence[SpecDocument]) -> DependencyGraph:
    """Build a dependency graph from already parsed documents.

    Args:
        documents: Documents in discovery order

    Returns:
        DependencyGraph whose edges all resolve to nodes
    """
    graph = DependencyGraph()

    # Pass 1: nodes
    for document in documents:
        node = DependencyNode(id=document.id, path=document.path, title=document.title)
        if not graph.add_node(node):
            logger.warning("Duplicate spec id '%s' (%s), keeping the first document", document.id, document.path)
            continue
        if document.parse_warning is not None:
            graph.parse_warnings.append(document.parse_warning)

    # Pass 2: edges (depends_on only; the inverse is derived below)
    patterns = {spec_id: build_reference_patterns(spec_id) for spec_id in graph.nodes}
    for document in documents:
        node = graph.nodes[document.id]
        if node.path != document.path:
            continue

        for dependency in document.dependencies:
            if dependency.spec_id == document.id:
                logger.warning("Ignoring self-dependency in %s", document.path)
                graph.parse_warnings.append(ParseWarning(document.id, document.path, f"depends on itself ('{document.id}'), ignored"))
                continue
            if dependency.spec_id not in graph.nodes:
                logger.debug("Dropping unresolved dependency %s -> %s", document.id, dependency.spec_id)
                graph.unresolved_references.append((document.id, dependency.spec_id))
                continue
            if dependency.spec_id in node.depends_on:
                continue
            node.depends_on.append(dependency.spec_id)
            graph.edges.append(DependencyEdge(document.id, dependency.spec_id, dependency.type, dependency.description or EXPLICIT_DESCRIPTION))

        for ref_id in extract_references(document.body, patterns, document.id):
            if ref_id in node.depends_on:
                continue
            node.depends_on.append(ref_id)
            graph.edges.append(DependencyEdge(document.id, ref_id, EDGE_REFERENCE, REFERENCE_DESCRIPTION))

    # Pass 3: inverse index
    for edge in graph.edges:
        target = graph.nodes[edge.target]
        if edge.source not in target.depended_by:
            target.depended_by.append(edge.source)

    logger.debug(
        "Built spec graph with %s nodes, %s edges (%s unresolved references)", len(graph.nodes), len(graph.edges), len(graph.unresolved_references)
    )
    return graph


def build_dependency_graph(root: str) -> DependencyGraph:
    """Scan a specification root and build its dependency graph.

    Args:
        root: Specification root directory

    Returns:
        Freshly built DependencyGraph

    Raises:
        DocumentRootError: If root is missing or unreadable
        GraphBuildError: If the graph violates its edge invariant after the build
    """
    documents = list_documents(root)
    graph = build_graph_from_documents(documents)

    problems = graph.check_consistency()
    if problems:
        raise GraphBuildError(f"Inconsistent dependency graph for {root}: {problems[0]}")

    logger.info("Loaded %s specs with %s dependencies from %s", len(graph.nodes), len(graph.edges), root)
    return graph
