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
"""What-if simulation of change proposals.

The simulation never touches the graph it is given. It works on a deep copy:

1. clone the current graph
2. apply the deltas to the clone, creating added specs first
3. analyze the target on both graphs with the same risk policy
4. report the structural difference, the change in affected specs and risk,
   and warnings about risky outcomes

Many simulations can therefore be run against one freshly built graph.
"""

import logging
from typing import Dict, List, Optional, Sequence, Set

from lib.constants import (
    EDGE_EXPLICIT,
    LEVEL_HIGH,
    LEVEL_LOW,
    SIMULATION_NEWLY_AFFECTED_WARNING,
    SIMULATION_RISK_DELTA_WARNING,
    SimulationError,
    SpecNotFoundError,
)
from lib.delta_parser import AddedDelta, DeltaItem, ModifiedDelta, RemovedDelta
from lib.impact_analysis import analyze_impact
from lib.impact_types import AffectedSpec, ImpactAnalysisResult, SimulationChanges, SimulationResult, SimulationSnapshot
from lib.risk_policy import RiskPolicy
from lib.spec_graph import DependencyGraph, DependencyNode

logger = logging.getLogger(__name__)

SIMULATED_EDGE_DESCRIPTION = "simulated dependency"


def _add_dependencies(graph: DependencyGraph, spec_id: str, dependencies: Sequence[str], notes: List[str]) -> None:
    for dep_id in dependencies:
        if dep_id == spec_id:
            notes.append(f"{spec_id}: a spec cannot depend on itself, dependency ignored")
            continue
        if dep_id not in graph.nodes:
            notes.append(f"{spec_id}: dependency '{dep_id}' does not exist and was ignored")
            continue
        graph.add_edge(spec_id, dep_id, EDGE_EXPLICIT, SIMULATED_EDGE_DESCRIPTION)


def create_added_node(graph: DependencyGraph, delta: AddedDelta) -> bool:
    """Create the spec unless it already exists (adding twice is a no-op).

    Returns:
        True if a node was created
    """
    if delta.spec_id in graph.nodes:
        logger.debug("ADDED %s: spec already exists, skipping", delta.spec_id)
        return False

    graph.add_node(DependencyNode(id=delta.spec_id, path=f"{delta.spec_id}/spec.md", title=delta.description))
    return True


def apply_added(graph: DependencyGraph, delta: AddedDelta, notes: List[str]) -> None:
    """Link a newly created spec to its dependencies."""
    node = graph.nodes.get(delta.spec_id)
    if node is None:
        return
    _add_dependencies(graph, delta.spec_id, [d for d in delta.new_dependencies if d not in node.depends_on], notes)


def apply_removed(graph: DependencyGraph, delta: RemovedDelta, notes: List[str]) -> None:
    """Delete the spec together with every dependency in either direction."""
    if not graph.remove_node(delta.spec_id):
        notes.append(f"{delta.spec_id}: cannot remove a spec that does not exist")


def apply_modified(graph: DependencyGraph, delta: ModifiedDelta, notes: List[str]) -> None:
    """Append new dependencies to an existing spec.

    Dependency removals are not applied; MODIFIED is additive only.
    """
    if delta.spec_id not in graph.nodes:
        notes.append(f"{delta.spec_id}: cannot modify a spec that does not exist")
        return

    if delta.removed_dependencies:
        logger.info("MODIFIED %s: dependency removals are not simulated (%s)", delta.spec_id, ", ".join(delta.removed_dependencies))

    node = graph.nodes[delta.spec_id]
    _add_dependencies(graph, delta.spec_id, [d for d in delta.new_dependencies if d not in node.depends_on], notes)


def apply_deltas(graph: DependencyGraph, deltas: Sequence[DeltaItem]) -> List[str]:
    """Apply deltas to a graph in place.

    Only call this on a clone; the simulator never passes the caller's graph.

    Runs in two passes so that a proposal may add specs that depend on each
    other in any order:

    1. create every ADDED spec
    2. link the created specs, apply MODIFIED and REMOVED deltas in order

    Args:
        graph: Graph to mutate
        deltas: Deltas in application order

    Returns:
        Notes about deltas that could not be fully applied

    Raises:
        SimulationError: For an object that is not a known delta type
    """
    _validate_deltas(deltas)

    # Pass 1: nodes
    created: Set[str] = set()
    for delta in deltas:
        if isinstance(delta, AddedDelta) and create_added_node(graph, delta):
            created.add(delta.spec_id)

    # Pass 2: edges and removals
    notes: List[str] = []
    for delta in deltas:
        if isinstance(delta, AddedDelta):
            if delta.spec_id in created:
                apply_added(graph, delta, notes)
        elif isinstance(delta, RemovedDelta):
            apply_removed(graph, delta, notes)
        else:
            apply_modified(graph, delta, notes)
    return notes


def _validate_deltas(deltas: Sequence[DeltaItem]) -> None:
    for delta in deltas:
        if not isinstance(delta, (AddedDelta, ModifiedDelta, RemovedDelta)):
            raise SimulationError(f"Unsupported delta: {delta!r}")


def _affected_by_id(result: Optional[ImpactAnalysisResult]) -> Dict[str, AffectedSpec]:
    if result is None:
        return {}
    affected: Dict[str, AffectedSpec] = {}
    for spec in result.affected_by + result.transitive_affected:
        affected.setdefault(spec.id, spec)
    return affected


def _snapshot(graph: DependencyGraph, result: Optional[ImpactAnalysisResult]) -> SimulationSnapshot:
    return SimulationSnapshot(
        total_specs=len(graph.nodes),
        total_edges=len(graph.edges),
        target_risk_score=result.risk_score if result else 0,
        target_risk_level=result.risk_level if result else LEVEL_LOW,
    )


def summarize_changes(current: DependencyGraph, projected: DependencyGraph, deltas: Sequence[DeltaItem]) -> SimulationChanges:
    """List the delta ids by kind and count the edges that appeared or vanished."""
    current_edges = current.edge_keys()
    projected_edges = projected.edge_keys()

    return SimulationChanges(
        added_specs=[d.spec_id for d in deltas if isinstance(d, AddedDelta)],
        removed_specs=[d.spec_id for d in deltas if isinstance(d, RemovedDelta)],
        modified_specs=[d.spec_id for d in deltas if isinstance(d, ModifiedDelta)],
        added_edges=len(projected_edges - current_edges),
        removed_edges=len(current_edges - projected_edges),
    )


def run_simulation(graph: DependencyGraph, target_id: str, deltas: Sequence[DeltaItem], policy: Optional[RiskPolicy] = None) -> SimulationResult:
    """Simulate a change proposal and compare the outcome with the current state.

    Args:
        graph: Current dependency graph (never modified)
        target_id: Spec whose impact is compared before and after
        deltas: Hypothetical changes
        policy: Risk weights used for both analyses

    Returns:
        SimulationResult

    Raises:
        SpecNotFoundError: If target_id is not in the current graph
        SimulationError: If a delta is of an unknown type
    """
    if target_id not in graph.nodes:
        raise SpecNotFoundError(target_id)
    _validate_deltas(deltas)

    projected_graph = graph.clone()
    notes = apply_deltas(projected_graph, deltas)

    current_result = analyze_impact(graph, target_id, policy)
    projected_result = analyze_impact(projected_graph, target_id, policy) if target_id in projected_graph.nodes else None

    current = _snapshot(graph, current_result)
    projected = _snapshot(projected_graph, projected_result)

    current_affected = _affected_by_id(current_result)
    projected_affected = _affected_by_id(projected_result)
    newly_affected = [spec for spec_id, spec in projected_affected.items() if spec_id not in current_affected]
    no_longer_affected = [spec_id for spec_id in current_affected if spec_id not in projected_affected]

    changes = summarize_changes(graph, projected_graph, deltas)
    risk_delta = projected.target_risk_score - current.target_risk_score

    warnings: List[str] = []
    recommendations: List[str] = []

    if projected_result is None:
        warnings.append(f"The target spec '{target_id}' is removed by this change")

    if risk_delta > SIMULATION_RISK_DELTA_WARNING:
        warnings.append(f"Risk score rises by {risk_delta} points ({current.target_risk_score} -> {projected.target_risk_score})")

    if len(newly_affected) > SIMULATION_NEWLY_AFFECTED_WARNING:
        warnings.append(f"{len(newly_affected)} specs become newly affected")
        recommendations.append("Reduce the scope of the change or apply it in stages.")

    if projected.target_risk_level == LEVEL_HIGH and current.target_risk_level != LEVEL_HIGH:
        warnings.append('Risk level rises to "high" after the change')
        recommendations.append("Write a test plan for the affected specs before applying the change.")

    still_referenced = [
        spec_id for spec_id in changes.removed_specs if spec_id in graph.nodes and graph.nodes[spec_id].depended_by
    ]
    if still_referenced:
        warnings.append(f"Removed specs are still referenced by other specs: {', '.join(still_referenced)}")
        recommendations.append("Update or remove the references to the removed specs first.")

    warnings.extend(notes)

    logger.debug("Simulation for %s: risk %s -> %s, %s newly affected", target_id, current.target_risk_score, projected.target_risk_score, len(newly_affected))

    return SimulationResult(
        target_spec=target_id,
        current=current,
        projected=projected,
        changes=changes,
        newly_affected=newly_affected,
        no_longer_affected=no_longer_affected,
        risk_delta=risk_delta,
        warnings=warnings,
        recommendations=recommendations,
    )
