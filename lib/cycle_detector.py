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
"""Circular dependency detection for the spec graph.

Depth-first search with an explicit stack. When an edge leads back to a node
on the current path, the path slice from that node onwards is reported as one
cycle, and the search stops exploring further dependencies of the node that
closed it. A strongly connected region therefore shows up as a single readable
cycle instead of every elementary cycle it contains.

Roots are taken in node-map order (directory-walk order), so an unchanged
specification tree always produces the same report.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Set, Tuple

from lib.spec_graph import DependencyGraph

logger = logging.getLogger(__name__)


@dataclass
class CycleRecord:
    """A circular dependency chain.

    Attributes:
        cycle: Spec ids along the cycle, starting at the repeated node
        description: Human readable chain, e.g. "a -> b -> c -> a"
    """

    cycle: List[str]
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"cycle": list(self.cycle), "description": self.description}


def format_cycle(cycle: List[str]) -> str:
    """Render a cycle as "a -> b -> a"."""
    if not cycle:
        return ""
    return " -> ".join(cycle + [cycle[0]])


def find_cycles(graph: DependencyGraph) -> List[CycleRecord]:
    """Find circular dependencies in the graph.

    Args:
        graph: Dependency graph (not modified)

    Returns:
        One CycleRecord per detected back edge, in discovery order
    """
    cycles: List[CycleRecord] = []
    visited: Set[str] = set()

    for root in graph.nodes:
        if root in visited:
            continue

        path: List[str] = [root]
        on_path: Set[str] = {root}
        visited.add(root)
        stack: List[Tuple[str, Iterator[str]]] = [(root, iter(list(graph.nodes[root].depends_on)))]

        while stack:
            node_id, successors = stack[-1]
            advanced = False

            for dep_id in successors:
                if dep_id not in graph.nodes:
                    continue
                if dep_id in on_path:
                    cycle = path[path.index(dep_id) :]
                    cycles.append(CycleRecord(cycle=cycle, description=format_cycle(cycle)))
                    logger.debug("Cycle detected: %s", cycles[-1].description)
                    # Stop exploring from this node once a cycle through it is reported
                    stack[-1] = (node_id, iter(()))
                    break
                if dep_id not in visited:
                    visited.add(dep_id)
                    path.append(dep_id)
                    on_path.add(dep_id)
                    stack.append((dep_id, iter(list(graph.nodes[dep_id].depends_on))))
                    advanced = True
                    break

            if not advanced:
                stack.pop()
                on_path.discard(path.pop())

    return cycles


def nodes_in_cycles(cycles: List[CycleRecord]) -> Set[str]:
    """Return every spec id that takes part in at least one reported cycle."""
    return {spec_id for record in cycles for spec_id in record.cycle}
