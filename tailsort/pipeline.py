from __future__ import annotations

from dataclasses import dataclass
import logging

from .domain import ClassSite, DocumentResult, SiteCounts, SourceDocument
from .errors import SpanConsistencyViolation, UnparseableSource
from .extraction.classifier import SiteClass, classify_site
from .extraction.locator import LocatorOptions, locate_sites
from .parsers import parse_document
from .parsers.syntax import SyntaxTree
from .rewriter import apply_edits, plan_edits
from .sorting.sorter import SortConfig, sort_tokens
from .sorting.tokens import split_classes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineConfig:
    sort: SortConfig
    locator: LocatorOptions
    sort_dynamic_segments: bool = False


def sort_site_content(site: ClassSite, config: SortConfig) -> str:
    tokens = split_classes(site.raw)
    head = tokens[:1] if site.pinned_head else []
    rest = tokens[len(head) :]
    tail = rest[-1:] if site.pinned_tail and rest else []
    middle = rest[: len(rest) - len(tail)]
    return " ".join(head + sort_tokens(middle, config) + tail)


def _sort_group(members: list[ClassSite], config: SortConfig) -> list[tuple[ClassSite, str]]:
    ordered = sort_tokens([site.raw for site in members], config, remove_duplicates=False)
    return list(zip(members, ordered))


def process_document(document: SourceDocument, tree: SyntaxTree | None, config: PipelineConfig) -> DocumentResult:
    source = document.encoded()
    counts = SiteCounts()

    try:
        sites = locate_sites(tree, source, config.locator)
    except UnparseableSource as exc:
        logger.info("[pipeline] %s left unmodified: %s", document.identifier, exc)
        return DocumentResult(
            identifier=document.identifier,
            new_text=None,
            counts=counts,
            reason="unparseable_source",
            error=str(exc),
        )

    replacements: list[tuple[ClassSite, str]] = []
    groups: dict[int, list[ClassSite]] = {}

    for site in sites:
        counts.found += 1
        decision = classify_site(site, config.sort_dynamic_segments)
        if decision == SiteClass.EMPTY:
            counts.already_sorted += 1
            continue
        if decision == SiteClass.DYNAMIC:
            counts.skipped_dynamic += 1
            continue
        if decision == SiteClass.ESCAPED:
            counts.skipped_escaped += 1
            continue
        if site.group is not None:
            groups.setdefault(site.group, []).append(site)
            continue
        replacements.append((site, sort_site_content(site, config.sort)))

    for members in groups.values():
        replacements.extend(_sort_group(members, config.sort))

    try:
        edits = plan_edits(replacements)
        counts.sorted = len(edits)
        counts.already_sorted += len(replacements) - len(edits)
        if not edits:
            return DocumentResult(identifier=document.identifier, new_text=None, counts=counts, reason="unchanged")
        new_source, diffs = apply_edits(source, edits)
    except SpanConsistencyViolation as exc:
        logger.error("[pipeline] %s left unmodified: %s", document.identifier, exc)
        return DocumentResult(
            identifier=document.identifier,
            new_text=None,
            counts=counts,
            reason="span_consistency_violation",
            error=str(exc),
        )

    logger.debug("[pipeline] %s: %d of %d sites reordered", document.identifier, counts.sorted, counts.found)
    return DocumentResult(
        identifier=document.identifier,
        new_text=new_source.decode("utf-8"),
        diffs=diffs,
        counts=counts,
        reason="rewritten",
    )


def format_document(document: SourceDocument, config: PipelineConfig) -> DocumentResult:
    tree = parse_document(document)
    return process_document(document, tree, config)


def format_source(text: str, kind: str, config: PipelineConfig, identifier: str = "<source>") -> DocumentResult:
    return format_document(SourceDocument(identifier=identifier, kind=kind, text=text), config)
