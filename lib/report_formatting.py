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
"""Plain-text rendering of impact, simulation and health results."""

from typing import List, Sequence

from lib.color_utils import Colors, colored, format_level, format_table_row, progress_bar
from lib.constants import HEALTH_GOOD_THRESHOLD, HEALTH_MODERATE_THRESHOLD, HEALTH_SCORE_MAX, MAX_CYCLES_DISPLAY, MAX_SPECS_DISPLAY
from lib.impact_types import AffectedSpec, ImpactAnalysisResult, ProjectHealthReport, SimulationResult


def _heading(text: str) -> str:
    return colored(text, Colors.CYAN, Colors.BRIGHT)


def _format_spec_list(specs: Sequence[AffectedSpec], limit: int = MAX_SPECS_DISPLAY) -> List[str]:
    if not specs:
        return ["  (none)"]

    width = max(len(s.id) for s in specs[:limit]) + 2
    lines = []
    for spec in specs[:limit]:
        lines.append(f"  {spec.id.ljust(width)}{format_level(spec.level)}  [{spec.type}] {spec.reason}")
    if len(specs) > limit:
        lines.append(f"  ... and {len(specs) - limit} more")
    return lines


def format_impact_result(result: ImpactAnalysisResult) -> str:
    """Render an impact analysis as a multi-section text report."""
    lines = [_heading(f"Impact analysis: {result.target_spec}"), ""]

    lines.append(f"Risk: {colored(str(result.risk_score), get_risk_color(result.risk_level), Colors.BRIGHT)}/10 ({format_level(result.risk_level)})")
    lines.append("")

    lines.append(_heading(f"Depends on ({len(result.depends_on)}):"))
    lines.extend(_format_spec_list(result.depends_on))
    lines.append("")

    lines.append(_heading(f"Directly affected ({len(result.affected_by)}):"))
    lines.extend(_format_spec_list(result.affected_by))
    lines.append("")

    lines.append(_heading(f"Transitively affected ({len(result.transitive_affected)}):"))
    lines.extend(_format_spec_list(result.transitive_affected))
    lines.append("")

    lines.append(_heading("Summary:"))
    lines.extend(f"  {line}" for line in result.summary.splitlines())
    lines.append("")

    lines.append(_heading("Recommendations:"))
    lines.extend(f"  - {rec}" for rec in result.recommendations)
    return "\n".join(lines)


def get_risk_color(level: str) -> str:
    """Foreground color for a risk level."""
    return {"high": Colors.RED, "medium": Colors.YELLOW}.get(level, Colors.GREEN)


def format_simulation_result(result: SimulationResult) -> str:
    """Render a what-if simulation as a before/after comparison."""
    lines = [_heading(f"Simulation: {result.target_spec}"), ""]

    widths = [18, 10, 10]
    lines.append(format_table_row(["", "current", "projected"], widths))
    lines.append(format_table_row(["specs", result.current.total_specs, result.projected.total_specs], widths))
    lines.append(format_table_row(["dependencies", result.current.total_edges, result.projected.total_edges], widths))
    lines.append(format_table_row(["risk score", result.current.target_risk_score, result.projected.target_risk_score], widths))
    lines.append(
        format_table_row(
            ["risk level", result.current.target_risk_level, result.projected.target_risk_level],
            widths,
            ["", get_risk_color(result.current.target_risk_level), get_risk_color(result.projected.target_risk_level)],
        )
    )
    sign = "+" if result.risk_delta > 0 else ""
    lines.append(f"Risk delta: {sign}{result.risk_delta}")
    lines.append("")

    changes = result.changes
    lines.append(_heading("Changes:"))
    lines.append(f"  added:    {', '.join(changes.added_specs) or '-'}")
    lines.append(f"  modified: {', '.join(changes.modified_specs) or '-'}")
    lines.append(f"  removed:  {', '.join(changes.removed_specs) or '-'}")
    lines.append(f"  dependencies: +{changes.added_edges} / -{changes.removed_edges}")
    lines.append("")

    lines.append(_heading(f"Newly affected ({len(result.newly_affected)}):"))
    lines.extend(_format_spec_list(result.newly_affected))
    lines.append("")

    lines.append(_heading(f"No longer affected ({len(result.no_longer_affected)}):"))
    lines.extend(f"  {spec_id}" for spec_id in result.no_longer_affected[:MAX_SPECS_DISPLAY])
    if not result.no_longer_affected:
        lines.append("  (none)")

    if result.warnings:
        lines.append("")
        lines.append(_heading("Warnings:"))
        lines.extend(colored(f"  ! {w}", Colors.YELLOW) for w in result.warnings)

    if result.recommendations:
        lines.append("")
        lines.append(_heading("Recommendations:"))
        lines.extend(f"  - {rec}" for rec in result.recommendations)

    return "\n".join(lines)


def format_health_report(report: ProjectHealthReport) -> str:
    """Render a project health report."""
    if report.health_score >= HEALTH_GOOD_THRESHOLD:
        color = Colors.GREEN
    elif report.health_score >= HEALTH_MODERATE_THRESHOLD:
        color = Colors.YELLOW
    else:
        color = Colors.RED

    lines = [_heading("Project health"), ""]
    lines.append(f"Health score: {colored(str(report.health_score), color, Colors.BRIGHT)}/{HEALTH_SCORE_MAX} ({report.health_label})")
    lines.append(f"  {progress_bar(report.health_score, HEALTH_SCORE_MAX, color=color)}")
    lines.append("")

    lines.append(f"Specs:        {report.total_nodes}")
    lines.append(f"Dependencies: {report.total_edges}")
    if report.edges_by_type:
        by_type = ", ".join(f"{t}: {n}" for t, n in sorted(report.edges_by_type.items()))
        lines.append(f"  by type: {by_type}")
    lines.append(f"Degree:       mean {report.average_degree:.2f}, median {report.median_degree:.1f}, max {report.max_degree}")
    if report.unresolved_references:
        lines.append(colored(f"Unresolved references: {report.unresolved_references}", Colors.YELLOW))
    if report.parse_warnings:
        lines.append(colored(f"Documents with header problems: {report.parse_warnings}", Colors.YELLOW))
    lines.append("")

    lines.append(_heading(f"Most connected ({len(report.most_connected)}):"))
    if report.most_connected:
        widths = [max(len(s.id) for s in report.most_connected) + 2, 8, 8, 8]
        lines.append("  " + format_table_row(["spec", "fan-in", "fan-out", "total"], widths))
        for spec in report.most_connected:
            lines.append("  " + format_table_row([spec.id, spec.fan_in, spec.fan_out, spec.degree], widths))
    else:
        lines.append("  (none)")
    lines.append("")

    lines.append(_heading(f"Orphan specs ({len(report.orphan_nodes)}):"))
    lines.extend(f"  {spec_id}" for spec_id in report.orphan_nodes[:MAX_SPECS_DISPLAY])
    if not report.orphan_nodes:
        lines.append("  (none)")
    lines.append("")

    lines.append(_heading(f"Circular dependencies ({len(report.cycles)}):"))
    for record in report.cycles[:MAX_CYCLES_DISPLAY]:
        lines.append(colored(f"  {record.description}", Colors.RED))
    if len(report.cycles) > MAX_CYCLES_DISPLAY:
        lines.append(f"  ... and {len(report.cycles) - MAX_CYCLES_DISPLAY} more")
    if not report.cycles:
        lines.append("  (none)")

    return "\n".join(lines)
