from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .domain import ClassSite, SiteDiff
from .errors import SpanConsistencyViolation


@dataclass(frozen=True)
class RewriteEdit:
    start: int
    end: int
    replacement: str
    site: ClassSite | None = None


def plan_edits(replacements: Iterable[tuple[ClassSite, str]]) -> list[RewriteEdit]:
    edits = [
        RewriteEdit(start=site.start, end=site.end, replacement=new_content, site=site)
        for site, new_content in replacements
        if new_content != site.raw
    ]
    edits.sort(key=lambda edit: edit.start)
    return edits


def validate_edits(edits: list[RewriteEdit], length: int) -> None:
    previous_end = 0
    for edit in edits:
        if edit.start < 0 or edit.end > length or edit.start > edit.end:
            raise SpanConsistencyViolation(f"Edit [{edit.start}, {edit.end}) is outside the document (length {length})")
        if edit.start < previous_end:
            raise SpanConsistencyViolation(
                f"Edit [{edit.start}, {edit.end}) overlaps or precedes the previous edit ending at {previous_end}"
            )
        previous_end = edit.end


def line_column(source: bytes, offset: int) -> tuple[int, int]:
    prefix = source[:offset]
    line_start = prefix.rfind(b"\n") + 1
    column = len(prefix[line_start:].decode("utf-8", errors="replace")) + 1
    return prefix.count(b"\n") + 1, column


def apply_edits(source: bytes, edits: list[RewriteEdit]) -> tuple[bytes, list[SiteDiff]]:
    validate_edits(edits, len(source))

    pieces: list[bytes] = []
    diffs: list[SiteDiff] = []
    cursor = 0
    for edit in edits:
        pieces.append(source[cursor : edit.start])
        pieces.append(edit.replacement.encode("utf-8"))
        cursor = edit.end

        line, column = line_column(source, edit.start)
        diffs.append(
            SiteDiff(
                line=line,
                column=column,
                old_text=source[edit.start : edit.end].decode("utf-8"),
                new_text=edit.replacement,
                start=edit.start,
                end=edit.end,
                kind=str(edit.site.kind) if edit.site else "",
                label=edit.site.label if edit.site else "",
            )
        )
    pieces.append(source[cursor:])
    return b"".join(pieces), diffs
