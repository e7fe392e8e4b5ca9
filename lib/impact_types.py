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
"""Type definitions for impact analysis, simulation and health reporting.

This module contains the dataclasses returned by the analysis modules. They
carry no formatting; to_dict() produces JSON-ready plain data.
"""

from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from lib.constants import LEVEL_LOW
from lib.cycle_detector import CycleRecord


@dataclass
class AffectedSpec:
    """A spec related to the analysis target.

    Attributes:
        id: Spec id
        path: Document path relative to the specification root
        title: Optional human readable label
        level: Impact level (low/medium/high)
        type: Dependency type of the connecting edge
        reason: Why the spec is listed
    """

    id: str
    path: str
    title: Optional[str]
    level: str
    type: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "path": self.path,
            "title": self.title,
            "level": self.level,
            "type": self.type,
            "reason": self.reason,
        }


@dataclass
class RiskAssessment:
    """Risk score (0 only for an empty affected set, otherwise 1-10) and level."""

    score: int
    level: str


@dataclass
class ImpactAnalysisResult:
    """Result of analyzing the impact of changing one spec.

    Attributes:
        target_spec: Id of the analyzed spec
        depends_on: Specs the target depends on (informational, level low)
        affected_by: Direct dependents of the target
        transitive_affected: Dependents reached through other dependents (depth-bounded)
        risk_score: 0-10 risk score
        risk_level: low/medium/high
        summary: Short multi-line description
        recommendations: Advisory strings
    """

    target_spec: str
    depends_on: List[AffectedSpec]
    affected_by: List[AffectedSpec]
    transitive_affected: List[AffectedSpec]
    risk_score: int
    risk_level: str
    summary: str
    recommendations: List[str]

    def all_affected_ids(self) -> List[str]:
        """Direct and transitive dependent ids, direct first."""
        return [s.id for s in self.affected_by] + [s.id for s in self.transitive_affected]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "targetSpec": self.target_spec,
            "dependsOn": [s.to_dict() for s in self.depends_on],
            "affectedBy": [s.to_dict() for s in self.affected_by],
            "transitiveAffected": [s.to_dict() for s in self.transitive_affected],
            "riskScore": self.risk_score,
            "riskLevel": self.risk_level,
            "summary": self.summary,
            "recommendations": list(self.recommendations),
        }


@dataclass
class SimulationSnapshot:
    """Graph size and target risk at one point of a simulation."""

    total_specs: int
    total_edges: int
    target_risk_score: int
    target_risk_level: str = LEVEL_LOW

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalSpecs": self.total_specs,
            "totalEdges": self.total_edges,
            "targetRiskScore": self.target_risk_score,
            "targetRiskLevel": self.target_risk_level,
        }


@dataclass
class SimulationChanges:
    """Structural changes between the current and the projected graph."""

    added_specs: List[str] = field(default_factory=list)
    removed_specs: List[str] = field(default_factory=list)
    modified_specs: List[str] = field(default_factory=list)
    added_edges: int = 0
    removed_edges: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "addedSpecs": list(self.added_specs),
            "removedSpecs": list(self.removed_specs),
            "modifiedSpecs": list(self.modified_specs),
            "addedEdges": self.added_edges,
            "removedEdges": self.removed_edges,
        }


@dataclass
class SimulationResult:
    """Outcome of applying hypothetical deltas to a copy of the graph."""

    target_spec: str
    current: SimulationSnapshot
    projected: SimulationSnapshot
    changes: SimulationChanges
    newly_affected: List[AffectedSpec]
    no_longer_affected: List[str]
    risk_delta: int
    warnings: List[str]
    recommendations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "targetSpec": self.target_spec,
            "current": self.current.to_dict(),
            "projected": self.projected.to_dict(),
            "changes": self.changes.to_dict(),
            "newlyAffected": [s.to_dict() for s in self.newly_affected],
            "noLongerAffected": list(self.no_longer_affected),
            "riskDelta": self.risk_delta,
            "warnings": list(self.warnings),
            "recommendations": list(self.recommendations),
        }


@dataclass
class ConnectedSpec:
    """A spec ranked by its number of dependencies (in + out)."""

    id: str
    fan_in: int
    fan_out: int

    @property
    def degree(self) -> int:
        return self.fan_in + self.fan_out

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "fanIn": self.fan_in, "fanOut": self.fan_out, "degree": self.degree}


@dataclass
class ProjectHealthReport:
    """Whole-project structural statistics.

    Attributes:
        total_nodes: Number of specs
        total_edges: Number of dependencies
        most_connected: Top specs by degree
        orphan_nodes: Specs with no dependency in either direction
        cycles: Detected circular dependencies
        health_score: 0-100 structural health score
        health_label: healthy/moderate/poor
        average_degree: Mean of in + out degree
        median_degree: Median of in + out degree
        max_degree: Largest in + out degree
        edges_by_type: Edge count per dependency type
        unresolved_references: Number of dependencies dropped as dangling
        parse_warnings: Number of documents with header problems
    """

    total_nodes: int
    total_edges: int
    most_connected: List[ConnectedSpec]
    orphan_nodes: List[str]
    cycles: List[CycleRecord]
    health_score: int
    health_label: str
    average_degree: float = 0.0
    median_degree: float = 0.0
    max_degree: int = 0
    edges_by_type: Dict[str, int] = field(default_factory=dict)
    unresolved_references: int = 0
    parse_warnings: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalNodes": self.total_nodes,
            "totalEdges": self.total_edges,
            "mostConnected": [s.to_dict() for s in self.most_connected],
            "orphanNodes": list(self.orphan_nodes),
            "cycles": [c.to_dict() for c in self.cycles],
            "healthScore": self.health_score,
            "healthLabel": self.health_label,
            "averageDegree": self.average_degree,
            "medianDegree": self.median_degree,
            "maxDegree": self.max_degree,
            "edgesByType": dict(self.edges_by_type),
            "unresolvedReferences": self.unresolved_references,
            "parseWarnings": self.parse_warnings,
        }
