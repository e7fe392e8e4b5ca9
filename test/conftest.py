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
"""Pytest configuration and shared fixtures for specCheck tests.

Spec tree fixtures write real <id>/spec.md documents into a temporary
directory; graph fixtures build DependencyGraph objects in memory.

Fixture Scopes:
- function: Default, recreated for each test (all fixtures below)
"""

import os
import sys
import tempfile
import shutil
from pathlib import Path
from typing import Callable, Dict, Generator, Iterable, Optional, Tuple

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from lib.constants import EDGE_EXPLICIT
from lib.spec_graph import DependencyGraph, DependencyNode


def write_spec(root: str, spec_id: str, depends: Optional[object] = None, body: str = "", title: Optional[str] = None) -> str:
    """Write <root>/<spec_id>/spec.md with a YAML header and return its path."""
    spec_dir = os.path.join(root, *spec_id.split("/"))
    os.makedirs(spec_dir, exist_ok=True)

    header = []
    if depends is not None:
        if isinstance(depends, (list, tuple)):
            header.append("depends:")
            header.extend(f"  - {d}" for d in depends)
        else:
            header.append(f"depends: {depends}")
    if title is not None:
        header.append(f"title: {title}")

    content = ""
    if header:
        content = "---\n" + "\n".join(header) + "\n---\n"
    content += body or f"# {spec_id}\n"

    path = os.path.join(spec_dir, "spec.md")
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    return path


def make_graph(spec_ids: Iterable[str], edges: Iterable[Tuple[str, str]] = (), edge_type: str = EDGE_EXPLICIT) -> DependencyGraph:
    """Build an in-memory graph; edges are (dependent, dependency) pairs."""
    graph = DependencyGraph()
    for spec_id in spec_ids:
        graph.add_node(DependencyNode(id=spec_id, path=f"{spec_id}/spec.md"))
    for source, target in edges:
        graph.add_edge(source, target, edge_type)
    return graph


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests.

    Use for: File I/O operations that need isolation
    """
    tmpdir = tempfile.mkdtemp(prefix="speccheck_test_")
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def spec_tree(temp_dir: str) -> Callable[[Dict[str, Optional[object]]], str]:
    """Factory writing {spec_id: depends} into a fresh specification root."""

    def _create(specs: Dict[str, Optional[object]]) -> str:
        for spec_id, depends in specs.items():
            write_spec(temp_dir, spec_id, depends)
        return temp_dir

    return _create


@pytest.fixture
def scenario_root(temp_dir: str) -> str:
    """'base' with feature1..feature5 explicitly depending on it."""
    write_spec(temp_dir, "base", body="# Base\n\nShared foundation.\n")
    for i in range(1, 6):
        write_spec(temp_dir, f"feature{i}", depends="base", body=f"# Feature {i}\n")
    return temp_dir


@pytest.fixture
def ring_root(temp_dir: str) -> str:
    """Three specs depending on each other in a ring: a -> b -> c -> a."""
    write_spec(temp_dir, "a", depends="b")
    write_spec(temp_dir, "b", depends="c")
    write_spec(temp_dir, "c", depends="a")
    return temp_dir


@pytest.fixture
def scenario_graph() -> DependencyGraph:
    """In-memory version of scenario_root."""
    return make_graph(["base"] + [f"feature{i}" for i in range(1, 6)], [(f"feature{i}", "base") for i in range(1, 6)])


@pytest.fixture
def chain_graph() -> DependencyGraph:
    """Chain with fan-out at the end: d -> c -> b -> a, e -> c."""
    return make_graph(["a", "b", "c", "d", "e"], [("b", "a"), ("c", "b"), ("d", "c"), ("e", "c")])


@pytest.fixture
def proposal_file(tmp_path: Path) -> Callable[[str], str]:
    """Factory writing a change proposal outside the specification root."""

    def _create(content: str) -> str:
        path = str(tmp_path / "proposal.md")
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    return _create


@pytest.fixture
def spec_writer() -> Callable[..., str]:
    """The write_spec helper, for tests that lay out their own tree."""
    return write_spec


@pytest.fixture
def graph_factory() -> Callable[..., DependencyGraph]:
    """The make_graph helper, for tests that need a custom in-memory graph."""
    return make_graph
