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
"""Project-wide health of the specification dependency graph.

PURPOSE:
    Summarizes the structure of all specs in a project: how many specs and
    dependencies exist, which specs are most connected, which are orphans,
    and which depend on each other in a circle.

WHAT IT DOES:
    - Builds the dependency graph from the specification root
    - Computes fan-in/fan-out per spec and degree statistics
    - Detects circular dependencies
    - Scores the project 0-100 (orphans, cycles and a sparse graph cost points)

OUTPUT:
    - Text report (default) or JSON (--json)
    - Optional Mermaid graph of the whole project (--graph)
    - Optional graph export (--export deps.graphml|.gexf|.json|.dot|.mmd)

EXAMPLES:
    ./specCheckHealth.py docs/specs
    ./specCheckHealth.py docs/specs --top 10 --json
"""
import sys
import json
import argparse
import logging

from lib.constants import DEFAULT_TOP_N, EXIT_INVALID_ARGS, EXIT_SUCCESS, SpecCheckError

# Check third-party availability early with helpful error message
from lib.package_verification import require_package

require_package("networkx", "dependency graph analysis")
require_package("numpy", "degree statistics")
require_package("PyYAML", "spec frontmatter parsing")
require_package("colorama", "colored terminal output")

from lib.color_utils import Colors, print_warning, print_error, should_use_color
from lib.cycle_detector import find_cycles
from lib.export_utils import export_dependency_graph, generate_mermaid_graph
from lib.graph_builder import build_dependency_graph
from lib.health_report import generate_health_report
from lib.report_formatting import format_health_report


def main() -> int:
    """Main entry point for the project health tool.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(
        description="Project health: structural statistics of the spec dependency graph.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("spec_root", metavar="SPEC_ROOT", help="Specification root directory (contains <id>/spec.md documents)")

    parser.add_argument("--top", type=int, default=DEFAULT_TOP_N, help=f"Number of most-connected specs to show (default: {DEFAULT_TOP_N})")

    parser.add_argument("--json", action="store_true", help="Print the report as JSON")

    parser.add_argument("--graph", action="store_true", help="Print a Mermaid graph of all specs")

    parser.add_argument("--export", metavar="FILE", help="Export the dependency graph (formats: .graphml, .dot, .gexf, .json, .mmd)")

    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging output")

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    if not should_use_color(no_color=args.no_color):
        Colors.disable()

    if args.top < 0:
        print_error("--top must not be negative")
        return EXIT_INVALID_ARGS

    try:
        graph = build_dependency_graph(args.spec_root)
    except SpecCheckError as e:
        print_error(str(e))
        return e.exit_code

    cycles = find_cycles(graph)
    report = generate_health_report(graph, top_n=args.top, cycles=cycles)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    elif args.graph:
        print(generate_mermaid_graph(graph), end="")
    else:
        print(format_health_report(report))

    if args.export:
        export_dependency_graph(args.export, graph, cycles)

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
