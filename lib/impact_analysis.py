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
"""Impact analysis: what is affected when a spec changes.

For a target spec the analysis lists:

- depends_on: what the target itself uses (informational, always "low")
- affected_by: direct dependents, rated by how the dependency was declared
  (explicit/api -> high, data -> medium, reference -> low)
- transitive_affected: dependents of dependents, found breadth-first up to
  MAX_TRANSITIVE_DEPTH hops away (first hop "medium", further hops "low")

The result carries a risk score and advisory recommendations. The graph is
only read.
"""

import logging
from collections import deque
from typing import Deque, List, Optional, Set, Tuple

from lib.constants import (
    EDGE_API,
    EDGE_DATA,
    EDGE_EXPLICIT,
    EDGE_REFERENCE,
    LEVEL_HIGH,
    LEVEL_LOW,
    LEVEL_MEDIUM,
    MAX_TRANSITIVE_DEPTH,
    TRANSITIVE_PROPOSAL_THRESHOLD,
    SpecNotFoundError,
)
from lib.impact_types import AffectedSpec, ImpactAnalysisResult
from lib.risk_policy import RiskPolicy
from lib.risk_scoring import score_risk
from lib.spec_graph import DependencyGraph

logger = logging.getLogger(__name__)


def determine_impact_level(edge_type: Optional[str]) -> str:
    """Impact level of a direct dependent, from the type of its dependency edge."""
    if edge_type in (EDGE_EXPLICIT, EDGE_API):
        return LEVEL_HIGH
    if edge_type == EDGE_DATA:
        return LEVEL_MEDIUM
    return LEVEL_LOW


def _affected_spec(graph: DependencyGraph, spec_id: str, level: str, edge_type: str, reason: str) -> AffectedSpec:
    node = graph.nodes[spec_id]
    return AffectedSpec(id=spec_id, path=node.path, title=node.title, level=level, type=edge_type, reason=reason)


def collect_dependencies(graph: DependencyGraph, target_id: str) -> List[AffectedSpec]:
    """Specs the target depends on."""
    result: List[AffectedSpec] = []
    for dep_id in graph.nodes[target_id].depends_on:
        edge = graph.find_edge(target_id, dep_id)
        edge_type = edge.type if edge else EDGE_REFERENCE
        reason = edge.description if edge and edge.description else f"{target_id} depends on it"
        result.append(_affected_spec(graph, dep_id, LEVEL_LOW, edge_type, reason))
    return result


def collect_direct_dependents(graph: DependencyGraph, target_id: str) -> List[AffectedSpec]:
    """Specs that depend on the target directly."""
    result: List[AffectedSpec] = []
    for by_id in graph.nodes[target_id].depended_by:
        edge = graph.find_edge(by_id, target_id)
        edge_type = edge.type if edge else EDGE_REFERENCE
        reason = edge.description if edge and edge.description else f"depends on {target_id}"
        result.append(_affected_spec(graph, by_id, determine_impact_level(edge_type), edge_type, reason))
    return result


def collect_transitive_dependents(graph: DependencyGraph, target_id: str, max_depth: int = MAX_TRANSITIVE_DEPTH) -> List[AffectedSpec]:
    """Dependents reached through the target's direct dependents.

    Breadth-first over depended_by links, starting from every direct
    dependent. Depth 1 is a dependent of a direct dependent. The visited set
    starts with the target and its direct dependents, so cycles terminate and
    no spec is listed twice.

    Args:
        graph: Dependency graph
        target_id: Spec being changed
        max_depth: Maximum number of hops beyond the direct dependents

    Returns:
        Transitive dependents in breadth-first order
    """
    target = graph.nodes[target_id]
    visited: Set[str] = {target_id, *target.depended_by}
    queue: Deque[Tuple[str, int]] = deque((by_id, 0) for by_id in target.depended_by)
    result: List[AffectedSpec] = []

    while queue:
        current_id, depth = queue.popleft()
        if depth >= max_depth:
            continue

        for by_id in graph.nodes[current_id].depended_by:
            if by_id in visited:
                continue
            visited.add(by_id)

            hop = depth + 1
            edge = graph.find_edge(by_id, current_id)
            level = LEVEL_MEDIUM if hop == 1 else LEVEL_LOW
            reason = f"affected through {current_id} (depth {hop})"
            result.append(_affected_spec(graph, by_id, level, edge.type if edge else EDGE_REFERENCE, reason))
            queue.append((by_id, hop))

    return result


def generate_summary(target_id: str, depends_on: List[AffectedSpec], affected_by: List[AffectedSpec], transitive: List[AffectedSpec], risk_score: int) -> str:
    """Short multi-line summary of an impact analysis."""
    parts = [f"Changing '{target_id}':"]

    if depends_on:
        parts.append(f"- depends on {len(depends_on)} spec(s)")

    if affected_by:
        parts.append(f"- directly affects {len(affected_by)} spec(s)")
        high_count = sum(1 for s in affected_by if s.level == LEVEL_HIGH)
        if high_count:
            parts.append(f"  - high impact: {high_count}")
    else:
        parts.append("- no spec depends on it")

    if transitive:
        parts.append(f"- transitively affects {len(transitive)} more spec(s)")

    parts.append(f"- risk score: {risk_score}/10")
    return "\n".join(parts)


def generate_recommendations(affected_by: List[AffectedSpec], transitive: List[AffectedSpec], risk_level: str) -> List[str]:
    """Advisory recommendations derived from the risk level and affected set."""
    recommendations: List[str] = []

    if risk_level == LEVEL_HIGH:
        recommendations.append("Review every affected spec before making the change.")
        recommendations.append("Roll the change out in stages.")
        recommendations.append("Share the change with the owning teams for cross-team review.")
    elif risk_level == LEVEL_MEDIUM:
        recommendations.append("Check the tests of the affected specs.")
        recommendations.append("Re-validate the affected specs after the change.")
    else:
        recommendations.append("Follow the standard change process.")

    affected_types = {s.type for s in affected_by} | {s.type for s in transitive}
    if EDGE_API in affected_types:
        recommendations.append("Version the API change so dependents can migrate.")
    if EDGE_DATA in affected_types:
        recommendations.append("Plan a data migration for the shared data model.")

    if len(transitive) > TRANSITIVE_PROPOSAL_THRESHOLD:
        recommendations.append("Write a formal change proposal; the change reaches beyond its direct dependents.")

    return recommendations


def analyze_impact(graph: DependencyGraph, target_id: str, policy: Optional[RiskPolicy] = None) -> ImpactAnalysisResult:
    """Analyze the impact of changing one spec.

    Args:
        graph: Dependency graph (not modified)
        target_id: Id of the spec to analyze
        policy: Risk weights (default: MEDIUM sensitivity)

    Returns:
        ImpactAnalysisResult

    Raises:
        SpecNotFoundError: If target_id is not a node of the graph
    """
    if target_id not in graph.nodes:
        raise SpecNotFoundError(target_id)

    depends_on = collect_dependencies(graph, target_id)
    affected_by = collect_direct_dependents(graph, target_id)
    transitive = collect_transitive_dependents(graph, target_id)

    risk = score_risk(affected_by, transitive, policy)
    logger.debug(
        "Impact of %s: %s dependencies, %s direct, %s transitive, risk %s (%s)",
        target_id,
        len(depends_on),
        len(affected_by),
        len(transitive),
        risk.score,
        risk.level,
    )

    return ImpactAnalysisResult(
        target_spec=target_id,
        depends_on=depends_on,
        affected_by=affected_by,
        transitive_affected=transitive,
        risk_score=risk.score,
        risk_level=risk.level,
        summary=generate_summary(target_id, depends_on, affected_by, transitive, risk.score),
        recommendations=generate_recommendations(affected_by, transitive, risk.level),
    )
