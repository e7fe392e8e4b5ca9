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
"""Change proposal deltas.

A delta is a hypothetical change to the spec graph. There is one type per
kind of change, and the simulator handles each explicitly:

    AddedDelta     a new spec, optionally with dependencies
    ModifiedDelta  an existing spec gaining (or losing) dependencies
    RemovedDelta   a spec that goes away

Proposals are Markdown documents with ``## ADDED``, ``## MODIFIED`` and
``## REMOVED`` sections:

    ## ADDED
    - `payments` - new payment flow (depends: billing, auth)

    ## MODIFIED
    ### `checkout`
    **Before**: depends: cart
    **After**: depends: [cart, payments]

    ## REMOVED
    - `legacy-checkout` - replaced by checkout

A section ends at the next ``##`` heading or a ``---`` rule.
"""

import os
import re
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from lib.constants import ProposalNotFoundError

logger = logging.getLogger(__name__)


class DeltaType(Enum):
    """Kind of change a delta describes."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    REMOVED = "REMOVED"


@dataclass
class AddedDelta:
    """A spec that does not exist yet."""

    spec_id: str
    description: Optional[str] = None
    new_dependencies: List[str] = field(default_factory=list)

    type = DeltaType.ADDED


@dataclass
class ModifiedDelta:
    """An existing spec whose dependencies change.

    Only new_dependencies are applied by the simulator; removed_dependencies
    are kept for reporting.
    """

    spec_id: str
    description: Optional[str] = None
    new_dependencies: List[str] = field(default_factory=list)
    removed_dependencies: List[str] = field(default_factory=list)
    before: Optional[str] = None
    after: Optional[str] = None

    type = DeltaType.MODIFIED


@dataclass
class RemovedDelta:
    """A spec that is deleted."""

    spec_id: str
    description: Optional[str] = None

    type = DeltaType.REMOVED


DeltaItem = Union[AddedDelta, ModifiedDelta, RemovedDelta]

RE_SECTION = re.compile(r"^##\s*(ADDED|MODIFIED|REMOVED)\b[^\n]*$", re.IGNORECASE | re.MULTILINE)
RE_SECTION_END = re.compile(r"^(?:##(?!#)|---\s*$)", re.MULTILINE)
RE_LIST_ITEM = re.compile(r"^\s*[-*]\s+(.+?)\s*$")
RE_BACKTICK_ID = re.compile(r"`([A-Za-z0-9][A-Za-z0-9_./-]*)`")
RE_LEADING_ID = re.compile(r"^([A-Za-z0-9][A-Za-z0-9_./-]*)")
RE_SUBHEADING = re.compile(r"^###\s+(.+?)\s*$", re.MULTILINE)
RE_BEFORE = re.compile(r"\*\*Before\*\*:?\s*(.+?)(?=\*\*After\*\*|\Z)", re.IGNORECASE | re.DOTALL)
RE_AFTER = re.compile(r"\*\*After\*\*:?\s*(.+?)\Z", re.IGNORECASE | re.DOTALL)
RE_DEPENDS = re.compile(r"depends?\s*:\s*\[?([^\]\n)]+)\]?", re.IGNORECASE)


def extract_spec_id(text: str) -> str:
    """Pick the spec id out of a list item or heading.

    The first backtick-quoted token wins, then a leading id-like word, then a
    slug of the first 20 characters.
    """
    match = RE_BACKTICK_ID.search(text)
    if match:
        return match.group(1)

    match = RE_LEADING_ID.match(text.strip())
    if match:
        return match.group(1)

    return re.sub(r"\s+", "-", text.strip()[:20]).lower()


def parse_dependency_list(text: str) -> Tuple[List[str], List[str]]:
    """Parse the ``depends:`` list in a piece of proposal text.

    Entries prefixed with '-' are removals, everything else (optionally
    prefixed with '+') is an addition.

    Returns:
        Tuple of (added ids, removed ids)
    """
    match = RE_DEPENDS.search(text)
    if not match:
        return [], []

    added: List[str] = []
    removed: List[str] = []
    for raw in match.group(1).split(","):
        item = raw.strip().strip("\"'`").strip()
        if not item or item.lower() in ("null", "none"):
            continue
        if item.startswith("-"):
            target, bucket = item[1:].strip(), removed
        else:
            target, bucket = item.lstrip("+").strip(), added
        if target and target not in bucket:
            bucket.append(target)
    return added, removed


def find_sections(content: str) -> List[Tuple[DeltaType, str]]:
    """Split proposal text into (delta type, section body) pairs in document order."""
    sections: List[Tuple[DeltaType, str]] = []
    for match in RE_SECTION.finditer(content):
        start = match.end()
        end_match = RE_SECTION_END.search(content, start + 1)
        end = end_match.start() if end_match else len(content)
        sections.append((DeltaType(match.group(1).upper()), content[start:end]))
    return sections


def parse_list_items(section: str) -> List[str]:
    """Return the text of every top-level list item in a section."""
    items: List[str] = []
    for line in section.splitlines():
        match = RE_LIST_ITEM.match(line)
        if match:
            items.append(match.group(1))
    return items


def parse_modified_section(section: str) -> List[ModifiedDelta]:
    """Parse a MODIFIED section written as ``###`` blocks or as a list."""
    deltas: List[ModifiedDelta] = []

    headings = list(RE_SUBHEADING.finditer(section))
    for index, heading in enumerate(headings):
        block_end = headings[index + 1].start() if index + 1 < len(headings) else len(section)
        block = section[heading.end() : block_end]
        before_match = RE_BEFORE.search(block)
        after_match = RE_AFTER.search(block)
        after = after_match.group(1).strip() if after_match else None

        # Without an After part, a Before part only documents the old state
        dependency_text = after if after is not None else ("" if before_match else block)
        new_deps, removed_deps = parse_dependency_list(dependency_text)
        if before_match and after is not None:
            before_deps, _ = parse_dependency_list(before_match.group(1))
            removed_deps += [d for d in before_deps if d not in new_deps and d not in removed_deps]
        deltas.append(
            ModifiedDelta(
                spec_id=extract_spec_id(heading.group(1)),
                description=heading.group(1).strip(),
                new_dependencies=new_deps,
                removed_dependencies=removed_deps,
                before=before_match.group(1).strip() if before_match else None,
                after=after,
            )
        )

    if not deltas:
        for item in parse_list_items(section):
            new_deps, removed_deps = parse_dependency_list(item)
            deltas.append(ModifiedDelta(spec_id=extract_spec_id(item), description=item, new_dependencies=new_deps, removed_dependencies=removed_deps))

    return deltas


def parse_deltas(content: str) -> List[DeltaItem]:
    """Parse the ADDED/MODIFIED/REMOVED sections of a change proposal.

    Args:
        content: Proposal Markdown text

    Returns:
        Deltas in section order, list order within a section
    """
    deltas: List[DeltaItem] = []

    for delta_type, section in find_sections(content):
        if delta_type == DeltaType.ADDED:
            for item in parse_list_items(section):
                new_deps, _ = parse_dependency_list(item)
                deltas.append(AddedDelta(spec_id=extract_spec_id(item), description=item, new_dependencies=new_deps))
        elif delta_type == DeltaType.MODIFIED:
            deltas.extend(parse_modified_section(section))
        else:
            for item in parse_list_items(section):
                deltas.append(RemovedDelta(spec_id=extract_spec_id(item), description=item))

    logger.debug("Parsed %s deltas from proposal", len(deltas))
    return deltas


def parse_delta_file(proposal_path: str) -> List[DeltaItem]:
    """Read a proposal file and parse its deltas.

    Raises:
        ProposalNotFoundError: If the file does not exist
    """
    if not os.path.isfile(proposal_path):
        raise ProposalNotFoundError(f"Proposal file not found: {proposal_path}")

    with open(proposal_path, "r", encoding="utf-8") as f:
        return parse_deltas(f.read())
