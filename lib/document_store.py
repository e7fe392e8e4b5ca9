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
"""Reading specification documents from disk.

Each Markdown file below the specification root is one document. The document
id is its path relative to the root without the ``.md`` suffix, and a
``<id>/spec.md`` file collapses to ``<id>``:

    specs/auth/spec.md      -> auth
    specs/api/users.md      -> api/users

A document may start with a YAML frontmatter block delimited by ``---``
lines. The header is parsed with PyYAML; a header that cannot be parsed does
not stop the scan, the document is returned with empty header fields and a
ParseWarning.
"""

import os
import re
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import yaml

from lib.constants import (
    EDGE_EXPLICIT,
    EDGE_TYPES,
    FRONTMATTER_DELIMITER,
    IGNORED_DOCUMENTS,
    NO_DEPENDENCY_SENTINELS,
    SPEC_FILE_STEM,
    SPEC_FILE_SUFFIX,
    DocumentRootError,
)
from lib.spec_graph import ParseWarning

logger = logging.getLogger(__name__)

RE_TITLE = re.compile(r"^#\s+(.+?)\s*$", re.MULTILINE)


@dataclass
class DeclaredDependency:
    """One entry of a document's 'depends' header field."""

    spec_id: str
    type: str = EDGE_EXPLICIT
    description: Optional[str] = None


@dataclass
class SpecDocument:
    """A specification document as read from the store.

    Attributes:
        id: Document id derived from its path
        path: Path relative to the specification root (forward slashes)
        header_fields: Parsed frontmatter (empty if absent or malformed)
        body: Document text after the frontmatter
        title: Frontmatter title, else the first level-1 heading
        dependencies: Normalized 'depends' entries
        parse_warning: Set when the header could not be parsed as expected
    """

    id: str
    path: str
    header_fields: Dict[str, Any] = field(default_factory=dict)
    body: str = ""
    title: Optional[str] = None
    dependencies: List[DeclaredDependency] = field(default_factory=list)
    parse_warning: Optional[ParseWarning] = None


def get_spec_id(relative_path: str) -> str:
    """Derive a spec id from a path relative to the specification root.

    Args:
        relative_path: e.g. "auth/spec.md" or "api\\users.md"

    Returns:
        Spec id, e.g. "auth" or "api/users"
    """
    spec_id = relative_path.replace("\\", "/")
    if spec_id.endswith(SPEC_FILE_SUFFIX):
        spec_id = spec_id[: -len(SPEC_FILE_SUFFIX)]
    suffix = "/" + SPEC_FILE_STEM
    if spec_id.endswith(suffix):
        spec_id = spec_id[: -len(suffix)]
    return spec_id


def collect_spec_files(root: str) -> List[str]:
    """Recursively collect specification documents below root.

    Hidden directories and ignored file names (AGENTS.md) are skipped.
    Directory entries are visited in sorted order so repeated scans of an
    unchanged tree return the same list.

    Raises:
        DocumentRootError: If root does not exist or cannot be listed
    """
    if not os.path.isdir(root):
        raise DocumentRootError(f"Specification root not found or not a directory: {root}")

    def _on_walk_error(error: OSError) -> None:
        # Only the root itself is fatal; unreadable subdirectories are skipped
        if error.filename is None or os.path.abspath(error.filename) == os.path.abspath(root):
            raise error
        logger.warning("Skipping unreadable directory %s: %s", error.filename, error.strerror)

    files: List[str] = []
    try:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_walk_error):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            for filename in sorted(filenames):
                if filename.endswith(SPEC_FILE_SUFFIX) and filename not in IGNORED_DOCUMENTS:
                    files.append(os.path.join(dirpath, filename))
    except OSError as e:
        raise DocumentRootError(f"Cannot read specification root {root}: {e}") from e

    logger.debug("Found %s spec documents under %s", len(files), root)
    return files


def split_frontmatter(content: str) -> Tuple[Optional[str], str]:
    """Split a document into its raw frontmatter block and body.

    Returns:
        Tuple of (frontmatter text or None, body)
    """
    lines = content.splitlines(keepends=True)
    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        return None, content

    for index in range(1, len(lines)):
        if lines[index].strip() == FRONTMATTER_DELIMITER:
            return "".join(lines[1:index]), "".join(lines[index + 1 :])

    # Opening delimiter without a closing one: treat everything as body
    return None, content


def parse_header(raw_header: Optional[str]) -> Tuple[Dict[str, Any], Optional[str]]:
    """Parse a YAML frontmatter block.

    Returns:
        Tuple of (header fields, error message or None)
    """
    if raw_header is None or not raw_header.strip():
        return {}, None

    try:
        data = yaml.safe_load(raw_header)
    except yaml.YAMLError as e:
        return {}, f"invalid frontmatter: {e}"

    if data is None:
        return {}, None
    if not isinstance(data, dict):
        return {}, f"frontmatter is a {type(data).__name__}, expected a mapping"
    return data, None


def _is_no_dependency(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value.strip().lower() in NO_DEPENDENCY_SENTINELS:
        return True
    return False


def normalize_depends(value: Any) -> Tuple[List[DeclaredDependency], List[str]]:
    """Normalize a 'depends' header value.

    Accepted shapes: absent/null/empty/"null" (no dependency), a scalar id,
    a list of ids, or a list of mappings ``{id, type, description}``.

    Returns:
        Tuple of (dependencies in declaration order without duplicates, problems)
    """
    problems: List[str] = []
    if _is_no_dependency(value):
        return [], problems

    entries = value if isinstance(value, list) else [value]
    dependencies: List[DeclaredDependency] = []
    seen = set()

    for entry in entries:
        if isinstance(entry, dict):
            spec_id = entry.get("id")
            if _is_no_dependency(spec_id):
                problems.append(f"dependency entry without id: {entry}")
                continue
            edge_type = str(entry.get("type", EDGE_EXPLICIT)).lower()
            if edge_type not in EDGE_TYPES:
                problems.append(f"unknown dependency type '{edge_type}' for {spec_id}, using '{EDGE_EXPLICIT}'")
                edge_type = EDGE_EXPLICIT
            dependency = DeclaredDependency(str(spec_id).strip(), edge_type, entry.get("description"))
        elif isinstance(entry, (str, int, float)) and not isinstance(entry, bool):
            if _is_no_dependency(entry):
                continue
            dependency = DeclaredDependency(str(entry).strip())
        elif entry is None:
            continue
        else:
            problems.append(f"unsupported dependency entry: {entry!r}")
            continue

        if dependency.spec_id not in seen:
            seen.add(dependency.spec_id)
            dependencies.append(dependency)

    return dependencies, problems


def extract_title(header_fields: Dict[str, Any], body: str) -> Optional[str]:
    """Return the frontmatter title or the first level-1 heading."""
    title = header_fields.get("title")
    if isinstance(title, str) and title.strip():
        return title.strip()

    match = RE_TITLE.search(body)
    return match.group(1) if match else None


def parse_document(spec_id: str, relative_path: str, content: str) -> SpecDocument:
    """Parse document text into a SpecDocument (never raises on bad content)."""
    raw_header, body = split_frontmatter(content)
    header_fields, error = parse_header(raw_header)

    problems: List[str] = [error] if error else []
    dependencies, depends_problems = normalize_depends(header_fields.get("depends"))
    problems.extend(depends_problems)

    document = SpecDocument(
        id=spec_id,
        path=relative_path,
        header_fields=header_fields,
        body=body,
        title=extract_title(header_fields, body),
        dependencies=dependencies,
    )

    if problems:
        document.parse_warning = ParseWarning(spec_id, relative_path, "; ".join(problems))
        # A header we could not read is not trusted for dependencies
        if error:
            document.dependencies = []
    return document


def list_documents(root: str) -> List[SpecDocument]:
    """Read every specification document below root.

    Args:
        root: Specification root directory

    Returns:
        Documents in sorted directory-walk order

    Raises:
        DocumentRootError: If root is missing or unreadable
    """
    documents: List[SpecDocument] = []

    for file_path in collect_spec_files(root):
        relative_path = os.path.relpath(file_path, root).replace("\\", "/")
        spec_id = get_spec_id(relative_path)

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", relative_path, e)
            documents.append(SpecDocument(id=spec_id, path=relative_path, parse_warning=ParseWarning(spec_id, relative_path, f"unreadable: {e}")))
            continue

        document = parse_document(spec_id, relative_path, content)
        if document.parse_warning is not None:
            logger.warning("%s", document.parse_warning)
        documents.append(document)

    return documents
