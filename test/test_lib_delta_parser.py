#!/usr/bin/env python3
"""Tests for lib/delta_parser.py"""

import os

import pytest

from lib.constants import ProposalNotFoundError
from lib.delta_parser import (
    AddedDelta,
    DeltaType,
    ModifiedDelta,
    RemovedDelta,
    extract_spec_id,
    parse_delta_file,
    parse_deltas,
    parse_dependency_list,
)

PROPOSAL = """# Proposal: payments

Intro text that is not a delta.

## ADDED
- `payments` - new payment flow (depends: billing, auth)
- refunds

## MODIFIED
### `checkout`
**Before**: depends: cart
**After**: depends: [cart, payments]

## REMOVED
- `legacy-checkout` - replaced by checkout

---

- `not-a-delta` after the rule
"""


class TestExtractSpecId:
    """Tests for spec id extraction."""

    def test_backtick_wins(self) -> None:
        assert extract_spec_id("new flow for `payments` team") == "payments"

    def test_leading_word(self) -> None:
        assert extract_spec_id("billing/invoices - split out") == "billing/invoices"

    def test_fallback_slug(self) -> None:
        assert extract_spec_id("**Bold** thing") == "**bold**-thing"


class TestParseDependencyList:
    """Tests for 'depends:' lists."""

    def test_plain_list(self) -> None:
        assert parse_dependency_list("(depends: billing, auth)") == (["billing", "auth"], [])

    def test_bracket_list(self) -> None:
        assert parse_dependency_list("depends: [cart, payments]") == (["cart", "payments"], [])

    def test_add_and_remove_notation(self) -> None:
        assert parse_dependency_list("depends: +payments, -cart") == (["payments"], ["cart"])

    def test_no_depends(self) -> None:
        assert parse_dependency_list("nothing here") == ([], [])


class TestParseDeltas:
    """Tests for full proposal parsing."""

    def test_sections_in_order(self) -> None:
        deltas = parse_deltas(PROPOSAL)

        assert [d.type for d in deltas] == [DeltaType.ADDED, DeltaType.ADDED, DeltaType.MODIFIED, DeltaType.REMOVED]
        assert [d.spec_id for d in deltas] == ["payments", "refunds", "checkout", "legacy-checkout"]

    def test_added_dependencies(self) -> None:
        added = parse_deltas(PROPOSAL)[0]
        assert isinstance(added, AddedDelta)
        assert added.new_dependencies == ["billing", "auth"]

    def test_modified_block(self) -> None:
        modified = parse_deltas(PROPOSAL)[2]
        assert isinstance(modified, ModifiedDelta)
        assert modified.new_dependencies == ["cart", "payments"]
        assert modified.removed_dependencies == []
        assert modified.before == "depends: cart"
        assert modified.after == "depends: [cart, payments]"

    def test_section_ends_at_rule(self) -> None:
        ids = [d.spec_id for d in parse_deltas(PROPOSAL)]
        assert "not-a-delta" not in ids

    def test_removed_delta(self) -> None:
        removed = parse_deltas(PROPOSAL)[3]
        assert isinstance(removed, RemovedDelta)
        assert removed.description.startswith("`legacy-checkout`")

    def test_modified_before_dependencies_missing_after_are_removed(self) -> None:
        text = "## MODIFIED\n### `checkout`\n**Before**: depends: [cart, coupons]\n**After**: depends: [cart]\n"
        modified = parse_deltas(text)[0]
        assert modified.new_dependencies == ["cart"]
        assert modified.removed_dependencies == ["coupons"]

    def test_modified_list_items(self) -> None:
        deltas = parse_deltas("## Modified\n- `checkout` (depends: +payments, -cart)\n")
        assert len(deltas) == 1
        assert deltas[0].spec_id == "checkout"
        assert deltas[0].new_dependencies == ["payments"]
        assert deltas[0].removed_dependencies == ["cart"]

    def test_case_insensitive_headings(self) -> None:
        deltas = parse_deltas("## removed\n- old\n")
        assert [(d.type, d.spec_id) for d in deltas] == [(DeltaType.REMOVED, "old")]

    def test_no_sections(self) -> None:
        assert parse_deltas("# Nothing to see\n\n- just a list\n") == []


class TestParseDeltaFile:
    """Tests for reading proposals from disk."""

    def test_missing_file(self, temp_dir: str) -> None:
        with pytest.raises(ProposalNotFoundError):
            parse_delta_file(os.path.join(temp_dir, "missing.md"))

    def test_reads_file(self, proposal_file) -> None:
        path = proposal_file(PROPOSAL)
        assert len(parse_delta_file(path)) == 4
