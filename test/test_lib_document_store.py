#!/usr/bin/env python3
"""Tests for lib/document_store.py"""

import errno
import logging
import os

import pytest

from lib.constants import EDGE_API, EDGE_EXPLICIT, DocumentRootError
from lib.document_store import (
    collect_spec_files,
    extract_title,
    get_spec_id,
    list_documents,
    normalize_depends,
    parse_document,
    parse_header,
    split_frontmatter,
)


class TestGetSpecId:
    """Tests for deriving spec ids from paths."""

    def test_spec_md_collapses_to_directory(self) -> None:
        assert get_spec_id("auth/spec.md") == "auth"

    def test_nested_directory(self) -> None:
        assert get_spec_id("billing/invoices/spec.md") == "billing/invoices"

    def test_plain_markdown_file(self) -> None:
        assert get_spec_id("overview.md") == "overview"

    def test_backslashes_are_normalized(self) -> None:
        assert get_spec_id("api\\users\\spec.md") == "api/users"


class TestFrontmatter:
    """Tests for header splitting and parsing."""

    def test_split_with_header(self) -> None:
        raw, body = split_frontmatter("---\ndepends: base\n---\n# Title\n")
        assert raw == "depends: base\n"
        assert body == "# Title\n"

    def test_split_without_header(self) -> None:
        raw, body = split_frontmatter("# Title\n")
        assert raw is None
        assert body == "# Title\n"

    def test_unterminated_header_is_body(self) -> None:
        raw, body = split_frontmatter("---\ndepends: base\n# Title\n")
        assert raw is None
        assert body.startswith("---")

    def test_parse_header_mapping(self) -> None:
        fields, error = parse_header("depends: base\ntitle: Auth\n")
        assert error is None
        assert fields == {"depends": "base", "title": "Auth"}

    def test_parse_header_invalid_yaml(self) -> None:
        fields, error = parse_header("depends: [unclosed\n")
        assert fields == {}
        assert error is not None and "invalid frontmatter" in error

    def test_parse_header_not_a_mapping(self) -> None:
        fields, error = parse_header("- a\n- b\n")
        assert fields == {}
        assert error is not None and "expected a mapping" in error


class TestNormalizeDepends:
    """Tests for the 'depends' header field."""

    @pytest.mark.parametrize("value", [None, "", "null", "None", "~"])
    def test_no_dependency_sentinels(self, value: object) -> None:
        deps, problems = normalize_depends(value)
        assert deps == []
        assert problems == []

    def test_scalar(self) -> None:
        deps, _ = normalize_depends("base")
        assert [d.spec_id for d in deps] == ["base"]
        assert deps[0].type == EDGE_EXPLICIT

    def test_list_keeps_order_and_drops_duplicates(self) -> None:
        deps, _ = normalize_depends(["b", "a", "b", None])
        assert [d.spec_id for d in deps] == ["b", "a"]

    def test_typed_mapping_entries(self) -> None:
        deps, problems = normalize_depends([{"id": "users", "type": "API", "description": "user lookup"}])
        assert problems == []
        assert deps[0].spec_id == "users"
        assert deps[0].type == EDGE_API
        assert deps[0].description == "user lookup"

    def test_unknown_type_falls_back_to_explicit(self) -> None:
        deps, problems = normalize_depends([{"id": "users", "type": "magic"}])
        assert deps[0].type == EDGE_EXPLICIT
        assert len(problems) == 1

    def test_mapping_without_id_is_a_problem(self) -> None:
        deps, problems = normalize_depends([{"type": "api"}])
        assert deps == []
        assert len(problems) == 1


class TestParseDocument:
    """Tests for parsing a single document."""

    def test_title_from_header_wins(self) -> None:
        assert extract_title({"title": "Auth"}, "# Heading\n") == "Auth"

    def test_title_from_heading(self) -> None:
        assert extract_title({}, "intro\n\n# Heading\n") == "Heading"

    def test_malformed_header_yields_warning_and_no_dependencies(self) -> None:
        document = parse_document("broken", "broken/spec.md", "---\ndepends: [a\n---\n# Broken\n")
        assert document.parse_warning is not None
        assert document.parse_warning.spec_id == "broken"
        assert document.dependencies == []

    def test_valid_document_has_no_warning(self) -> None:
        document = parse_document("auth", "auth/spec.md", "---\ndepends: [users, tokens]\n---\n# Auth\n")
        assert document.parse_warning is None
        assert [d.spec_id for d in document.dependencies] == ["users", "tokens"]
        assert document.title == "Auth"
        assert document.body == "# Auth\n"


class TestListDocuments:
    """Tests for scanning a specification root."""

    def test_missing_root_raises(self, temp_dir: str) -> None:
        with pytest.raises(DocumentRootError):
            list_documents(os.path.join(temp_dir, "missing"))

    def test_file_as_root_raises(self, temp_dir: str, spec_writer) -> None:
        path = spec_writer(temp_dir, "only")
        with pytest.raises(DocumentRootError):
            collect_spec_files(path)

    def test_hidden_and_ignored_entries_are_skipped(self, temp_dir: str, spec_writer) -> None:
        spec_writer(temp_dir, "visible")
        spec_writer(temp_dir, ".hidden")
        with open(os.path.join(temp_dir, "AGENTS.md"), "w", encoding="utf-8") as f:
            f.write("# Agents\n")
        with open(os.path.join(temp_dir, "notes.txt"), "w", encoding="utf-8") as f:
            f.write("not markdown\n")

        ids = [d.id for d in list_documents(temp_dir)]
        assert ids == ["visible"]

    def test_documents_are_sorted(self, spec_tree) -> None:
        root = spec_tree({"zeta": None, "alpha": None, "mid/nested": None})
        ids = [d.id for d in list_documents(root)]
        assert ids == ["alpha", "mid/nested", "zeta"]

    def test_empty_root(self, temp_dir: str) -> None:
        assert list_documents(temp_dir) == []

    def test_unreadable_subdirectory_is_skipped(self, spec_tree, monkeypatch, caplog) -> None:
        root = spec_tree({"alpha": None, "beta": None})
        real_walk = os.walk

        def _walk(top, onerror=None):
            onerror(PermissionError(errno.EACCES, "Permission denied", os.path.join(top, "locked")))
            yield from real_walk(top, onerror=onerror)

        monkeypatch.setattr(os, "walk", _walk)
        with caplog.at_level(logging.WARNING):
            ids = [d.id for d in list_documents(root)]

        assert ids == ["alpha", "beta"]
        assert "locked" in caplog.text

    def test_unreadable_root_raises(self, temp_dir: str, monkeypatch) -> None:
        def _walk(top, onerror=None):
            onerror(PermissionError(errno.EACCES, "Permission denied", top))
            yield from ()

        monkeypatch.setattr(os, "walk", _walk)
        with pytest.raises(DocumentRootError):
            list_documents(temp_dir)
