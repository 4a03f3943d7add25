from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class SiteKind(StrEnum):
    ATTRIBUTE = "attribute"
    CALL_ARGUMENT = "call_argument"
    TAGGED_TEMPLATE = "tagged_template"
    ARRAY_ELEMENT = "array_element"
    OBJECT_PROPERTY = "object_property"


@dataclass
class SourceDocument:
    identifier: str
    kind: str
    text: str
    path: str | None = None

    def encoded(self) -> bytes:
        return self.text.encode("utf-8")


@dataclass(frozen=True)
class ClassSite:
    start: int
    end: int
    kind: SiteKind
    quote: str | None
    raw: str
    label: str = ""
    dynamic: bool = False
    pinned_head: bool = False
    pinned_tail: bool = False
    group: int | None = None


@dataclass(frozen=True)
class ClassToken:
    text: str
    important: bool
    negative: bool
    variants: tuple[str, ...]
    base: str


@dataclass
class SiteDiff:
    line: int
    column: int
    old_text: str
    new_text: str
    start: int
    end: int
    kind: str
    label: str


@dataclass
class SiteCounts:
    found: int = 0
    skipped_dynamic: int = 0
    skipped_escaped: int = 0
    sorted: int = 0
    already_sorted: int = 0

    def add(self, other: SiteCounts) -> None:
        self.found += other.found
        self.skipped_dynamic += other.skipped_dynamic
        self.skipped_escaped += other.skipped_escaped
        self.sorted += other.sorted
        self.already_sorted += other.already_sorted


@dataclass
class DocumentResult:
    identifier: str
    new_text: str | None
    diffs: list[SiteDiff] = field(default_factory=list)
    counts: SiteCounts = field(default_factory=SiteCounts)
    reason: str = "unchanged"
    error: str | None = None

    @property
    def changed(self) -> bool:
        return self.new_text is not None
