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
"""What-if simulation of a change proposal.

PURPOSE:
    Evaluates a change proposal before it is applied: how the dependency graph
    and the risk of changing a target spec would look after the proposed
    ADDED / MODIFIED / REMOVED deltas.

WHAT IT DOES:
    - Builds the current dependency graph from the specification root
    - Parses the proposal's '## ADDED', '## MODIFIED' and '## REMOVED' sections
    - Applies the deltas to a copy of the graph (the current graph is never changed)
    - Compares the target's impact analysis on both graphs

PROPOSAL FORMAT:
    ## ADDED
    - `payments` - new payment flow (depends: billing, auth)

    ## MODIFIED
    ### `checkout`
    **Before**: depends: cart
    **After**: depends: [cart, payments]

    ## REMOVED
    - `legacy-checkout`

OUTPUT:
    - Current vs projected spec/dependency counts and risk
    - Newly affected and no longer affected specs
    - Warnings and recommendations for risky outcomes

EXAMPLES:
    ./specCheckSimulate.py docs/specs checkout changes/payments/proposal.md
    ./specCheckSimulate.py docs/specs checkout proposal.md --json
"""
import sys
import json
import argparse
import logging

from lib.constants import EXIT_SUCCESS, SpecCheckError

# Check third-party availability early with helpful error message
from lib.package_verification import require_package

require_package("networkx", "dependency graph analysis")
require_package("PyYAML", "spec frontmatter parsing")
require_package("colorama", "colored terminal output")

from lib.color_utils import Colors, print_warning, print_error, should_use_color
from lib.delta_parser import parse_delta_file
from lib.graph_builder import build_dependency_graph
from lib.report_formatting import format_simulation_result
from lib.risk_policy import RiskPolicy, SensitivityLevel
from lib.simulation import run_simulation


def main() -> int:
    """Main entry point for the change proposal simulator.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(
        description="What-if simulation: compares the impact of a spec before and after a change proposal.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("spec_root", metavar="SPEC_ROOT", help="Specification root directory (contains <id>/spec.md documents)")

    parser.add_argument("spec_id", metavar="SPEC_ID", help="Id of the spec whose impact is compared")

    parser.add_argument("proposal", metavar="PROPOSAL", help="Markdown change proposal with ADDED/MODIFIED/REMOVED sections")

    parser.add_argument("--json", action="store_true", help="Print the simulation result as JSON")

    parser.add_argument(
        "--sensitivity",
        type=str,
        choices=["low", "medium", "high"],
        default="medium",
        help="Risk scoring sensitivity used for both analyses (default: medium)",
    )

    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging output")

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    if not should_use_color(no_color=args.no_color):
        Colors.disable()

    try:
        deltas = parse_delta_file(args.proposal)
        if not deltas:
            print_warning(f"No ADDED/MODIFIED/REMOVED items found in {args.proposal}")

        graph = build_dependency_graph(args.spec_root)
        policy = RiskPolicy.for_sensitivity(SensitivityLevel(args.sensitivity))
        result = run_simulation(graph, args.spec_id, deltas, policy)
    except SpecCheckError as e:
        print_error(str(e))
        return e.exit_code

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_simulation_result(result))

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
