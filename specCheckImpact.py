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
"""Impact analysis for a single specification.

PURPOSE:
    Shows what is affected when one spec changes: the specs it depends on, the
    specs that depend on it directly, and the specs reached transitively
    through those dependents. Produces a 0-10 risk score and recommendations.

WHAT IT DOES:
    - Scans the specification root for <id>/spec.md documents
    - Builds the dependency graph from 'depends' frontmatter and in-body
      references (Markdown links, specs/<id> paths, `id` mentions)
    - Rates each direct dependent by how the dependency was declared
      (explicit/api: high, data: medium, reference: low)
    - Walks dependents of dependents breadth-first, up to 5 hops

USE CASES:
    - "Who do I need to talk to before I change this spec?"
    - CI gate: fail a pipeline when a change touches a high-risk spec
      (--fail-on-risk high)

OUTPUT:
    - Text report (default), JSON (--json) or a Mermaid graph (--graph)
    - Optional graph export (--export deps.graphml|.gexf|.json|.dot|.mmd)

EXAMPLES:
    # Analyze the impact of changing the 'auth' spec
    ./specCheckImpact.py docs/specs auth

    # Machine-readable output with aggressive scoring
    ./specCheckImpact.py docs/specs auth --json --sensitivity high

    # Fail (exit code 3) when the risk level is high
    ./specCheckImpact.py docs/specs auth --fail-on-risk high
"""
import sys
import json
import argparse
import logging

from lib.constants import EXIT_RISK_THRESHOLD, EXIT_SUCCESS, IMPACT_LEVELS, SpecCheckError

# Check third-party availability early with helpful error message
from lib.package_verification import require_package

require_package("networkx", "dependency graph analysis")
require_package("PyYAML", "spec frontmatter parsing")
require_package("colorama", "colored terminal output")

from lib.color_utils import Colors, print_warning, print_error, should_use_color
from lib.cycle_detector import find_cycles
from lib.export_utils import export_dependency_graph, generate_mermaid_graph
from lib.graph_builder import build_dependency_graph
from lib.impact_analysis import analyze_impact
from lib.impact_types import ImpactAnalysisResult
from lib.report_formatting import format_impact_result
from lib.risk_policy import RiskPolicy, SensitivityLevel


def risk_threshold_reached(result: ImpactAnalysisResult, fail_on_risk: str) -> bool:
    """True when the result's risk level is at or above the given level."""
    return IMPACT_LEVELS.index(result.risk_level) >= IMPACT_LEVELS.index(fail_on_risk)


def main() -> int:
    """Main entry point for the spec impact analysis tool.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(
        description="Impact analysis: shows which specs are affected when one spec changes.",
        epilog="""
Typical workflow:
  1. Pick the spec you are about to change
  2. Run this tool to see direct and transitive dependents
  3. Use specCheckSimulate.py to evaluate a change proposal before applying it
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("spec_root", metavar="SPEC_ROOT", help="Specification root directory (contains <id>/spec.md documents)")

    parser.add_argument("spec_id", metavar="SPEC_ID", help="Id of the spec to analyze (e.g., auth or billing/invoices)")

    parser.add_argument("--json", action="store_true", help="Print the analysis as JSON")

    parser.add_argument("--graph", action="store_true", help="Print a Mermaid graph of the spec and its neighbours")

    parser.add_argument("--export", metavar="FILE", help="Export the full dependency graph (formats: .graphml, .dot, .gexf, .json, .mmd)")

    parser.add_argument(
        "--sensitivity",
        type=str,
        choices=["low", "medium", "high"],
        default="medium",
        help="Risk scoring sensitivity (default: medium). "
        "Low: only wide impact scores high. "
        "High: borderline changes are flagged early.",
    )

    parser.add_argument(
        "--fail-on-risk",
        type=str,
        choices=list(IMPACT_LEVELS),
        metavar="LEVEL",
        help=f"Exit with code {EXIT_RISK_THRESHOLD} when the risk level is at or above LEVEL (low, medium, high)",
    )

    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging output")

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    if not should_use_color(no_color=args.no_color):
        Colors.disable()

    try:
        graph = build_dependency_graph(args.spec_root)
        policy = RiskPolicy.for_sensitivity(SensitivityLevel(args.sensitivity))
        result = analyze_impact(graph, args.spec_id, policy)
    except SpecCheckError as e:
        print_error(str(e))
        return e.exit_code

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif args.graph:
        print(generate_mermaid_graph(graph, args.spec_id), end="")
    else:
        print(format_impact_result(result))

    if args.export:
        export_dependency_graph(args.export, graph, find_cycles(graph))

    if args.fail_on_risk and risk_threshold_reached(result, args.fail_on_risk):
        print_warning(f"Risk level '{result.risk_level}' reaches --fail-on-risk {args.fail_on_risk}")
        return EXIT_RISK_THRESHOLD

    return EXIT_SUCCESS


if __name__ == "__main__":
    from lib.constants import EXIT_KEYBOARD_INTERRUPT, EXIT_RUNTIME_ERROR

    try:
        exit_code = main()
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user", prefix=False)
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
    except SpecCheckError as e:
        logging.error(str(e))
        sys.exit(e.exit_code)
    except Exception as e:
        logging.error("Unexpected error: %s", e)
        if logging.getLogger().level == logging.DEBUG:
            import traceback

            traceback.print_exc()
        sys.exit(EXIT_RUNTIME_ERROR)
