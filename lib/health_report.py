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
"""Whole-project structural health of the spec graph.

The health score starts at 100 and is reduced for:

- orphans: 20 points scaled by the share of specs without any dependency
- cycles: 10 points per detected circular dependency
- sparsity: 10 points when the average degree (2 * edges / specs) is below
  0.5 in a project with more than two specs

The result is rounded and clamped to 0-100.
"""

import logging
from collections import Counter
from typing import Any, Dict, List, Optional

import numpy as np

from lib.constants import (
    DEFAULT_TOP_N,
    HEALTH_CYCLE_PENALTY,
    HEALTH_GOOD_THRESHOLD,
    HEALTH_MIN_AVERAGE_DEGREE,
    HEALTH_MODERATE_THRESHOLD,
    HEALTH_ORPHAN_PENALTY,
    HEALTH_SCORE_MAX,
    HEALTH_SPARSE_MIN_NODES,
    HEALTH_SPARSE_PENALTY,
)
from lib.cycle_detector import CycleRecord, find_cycles
from lib.impact_types import ConnectedSpec, ProjectHealthReport
from lib.risk_scoring import round_half_up
from lib.spec_graph import DependencyGraph

logger = logging.getLogger(__name__)


def calculate_health_score(total_nodes: int, total_edges: int, orphan_count: int, cycle_count: int) -> int:
    """Compute the 0-100 health score.

    Args:
        total_nodes: Number of specs
        total_edges: Number of dependencies
        orphan_count: Specs with no dependency in either direction
        cycle_count: Detected circular dependencies

    Returns:
        Health score clamped to 0-100
    """
    score = float(HEALTH_SCORE_MAX)

    if total_nodes > 0:
        score -= HEALTH_ORPHAN_PENALTY * (orphan_count / total_nodes)

    score -= HEALTH_CYCLE_PENALTY * cycle_count

    if total_nodes > HEALTH_SPARSE_MIN_NODES and (2 * total_edges / total_nodes) < HEALTH_MIN_AVERAGE_DEGREE:
        score -= HEALTH_SPARSE_PENALTY

    return max(0, min(HEALTH_SCORE_MAX, round_half_up(score)))


def get_health_label(score: int) -> str:
    """Describe a health score as healthy/moderate/poor."""
    if score >= HEALTH_GOOD_THRESHOLD:
        return "healthy"
    if score >= HEALTH_MODERATE_THRESHOLD:
        return "moderate"
    return "poor"


def compute_fan_in_fan_out(graph: DependencyGraph) -> Dict[str, ConnectedSpec]:
    """Fan-in and fan-out of every spec, in node order."""
    G: Any = graph.to_networkx()
    return {spec_id: ConnectedSpec(id=spec_id, fan_in=G.in_degree(spec_id), fan_out=G.out_degree(spec_id)) for spec_id in graph.nodes}


def find_most_connected(connectivity: Dict[str, ConnectedSpec], top_n: int = DEFAULT_TOP_N) -> List[ConnectedSpec]:
    """Top specs by fan-in + fan-out; ties keep node order, unconnected specs are skipped."""
    ranked = sorted((c for c in connectivity.values() if c.degree > 0), key=lambda c: c.degree, reverse=True)
    return ranked[:top_n]


def generate_health_report(graph: DependencyGraph, top_n: int = DEFAULT_TOP_N, cycles: Optional[List[CycleRecord]] = None) -> ProjectHealthReport:
    """Aggregate whole-graph statistics into a health report.

    Args:
        graph: Dependency graph (not modified)
        top_n: Number of most-connected specs to include
        cycles: Precomputed cycles (computed when omitted)

    Returns:
        ProjectHealthReport
    """
    if cycles is None:
        cycles = find_cycles(graph)

    connectivity = compute_fan_in_fan_out(graph)
    orphans = [spec_id for spec_id, c in connectivity.items() if c.degree == 0]

    degrees = np.array([c.degree for c in connectivity.values()], dtype=float)
    if degrees.size:
        average_degree = float(np.mean(degrees))
        median_degree = float(np.median(degrees))
        max_degree = int(np.max(degrees))
    else:
        average_degree = median_degree = 0.0
        max_degree = 0

    total_nodes = len(graph.nodes)
    total_edges = len(graph.edges)
    score = calculate_health_score(total_nodes, total_edges, len(orphans), len(cycles))

    logger.debug("Health: %s specs, %s edges, %s orphans, %s cycles -> %s", total_nodes, total_edges, len(orphans), len(cycles), score)

    return ProjectHealthReport(
        total_nodes=total_nodes,
        total_edges=total_edges,
        most_connected=find_most_connected(connectivity, top_n),
        orphan_nodes=orphans,
        cycles=cycles,
        health_score=score,
        health_label=get_health_label(score),
        average_degree=round(average_degree, 2),
        median_degree=median_degree,
        max_degree=max_degree,
        edges_by_type=dict(Counter(edge.type for edge in graph.edges)),
        unresolved_references=len(graph.unresolved_references),
        parse_warnings=len(graph.parse_warnings),
    )
