from __future__ import annotations

import pytest

from tailsort.domain import ClassSite, SiteKind
from tailsort.errors import SpanConsistencyViolation
from tailsort.rewriter import RewriteEdit, apply_edits, line_column, plan_edits


def _site(start: int, end: int, raw: str) -> ClassSite:
    return ClassSite(start=start, end=end, kind=SiteKind.ATTRIBUTE, quote='"', raw=raw, label="class")


def test_plan_edits_drops_unchanged_sites_and_orders_by_offset() -> None:
    second = _site(20, 28, "p-4 flex")
    first = _site(4, 12, "m-2 flex")
    same = _site(30, 34, "flex")

    edits = plan_edits([(second, "flex p-4"), (same, "flex"), (first, "flex m-2")])

    assert [edit.start for edit in edits] == [4, 20]
    assert edits[0].site is first


def test_apply_edits_splices_replacements_in_one_pass() -> None:
    source = b'<a class="p-4 flex"><b class="m-2 block">'
    edits = plan_edits([(_site(10, 18, "p-4 flex"), "flex p-4"), (_site(30, 39, "m-2 block"), "block m-2")])

    updated, diffs = apply_edits(source, edits)

    assert updated == b'<a class="flex p-4"><b class="block m-2">'
    assert [(diff.old_text, diff.new_text) for diff in diffs] == [("p-4 flex", "flex p-4"), ("m-2 block", "block m-2")]
    assert diffs[0].kind == "attribute"


def test_overlapping_edits_are_rejected() -> None:
    edits = [RewriteEdit(0, 10, "a"), RewriteEdit(5, 12, "b")]
    with pytest.raises(SpanConsistencyViolation):
        apply_edits(b"x" * 20, edits)


def test_edit_outside_document_is_rejected() -> None:
    with pytest.raises(SpanConsistencyViolation):
        apply_edits(b"short", [RewriteEdit(2, 40, "x")])


def test_line_column_is_one_based_and_counts_characters() -> None:
    source = "first\nçà b".encode("utf-8")
    assert line_column(source, 0) == (1, 1)
    assert line_column(source, source.index(b"b")) == (2, 4)
