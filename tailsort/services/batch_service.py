from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import logging
from pathlib import Path
import time
from typing import Iterable, Literal

from ..config import TailsortSettings, build_pipeline_config
from ..domain import SiteCounts, SiteDiff, SourceDocument
from ..pipeline import PipelineConfig, format_document
from .file_writer import read_source, write_source
from .inventory import discover_files, document_kind

logger = logging.getLogger(__name__)

Mode = Literal["check", "write", "verify"]


@dataclass
class FileOutcome:
    path: str
    status: str
    counts: SiteCounts = field(default_factory=SiteCounts)
    diffs: list[SiteDiff] = field(default_factory=list)
    original_text: str | None = None
    new_text: str | None = None
    error: str | None = None

    @property
    def needs_formatting(self) -> bool:
        return self.status in {"changed", "written"}


@dataclass
class BatchReport:
    mode: str
    files: list[FileOutcome]
    duration_ms: int = 0

    def summary(self) -> dict[str, int]:
        counts = SiteCounts()
        for outcome in self.files:
            counts.add(outcome.counts)
        return {
            "files_processed": len(self.files),
            "files_changed": sum(1 for outcome in self.files if outcome.needs_formatting),
            "files_unchanged": sum(1 for outcome in self.files if outcome.status == "unchanged"),
            "files_skipped": sum(1 for outcome in self.files if outcome.status in {"skipped", "unparseable"}),
            "files_failed": sum(1 for outcome in self.files if outcome.status == "error"),
            "sites_found": counts.found,
            "sites_sorted": counts.sorted,
            "sites_already_sorted": counts.already_sorted,
            "sites_skipped_dynamic": counts.skipped_dynamic,
            "sites_skipped_escaped": counts.skipped_escaped,
            "duration_ms": self.duration_ms,
        }


def process_file(path: Path, mode: Mode, settings: TailsortSettings, pipeline_config: PipelineConfig) -> FileOutcome:
    try:
        size = path.stat().st_size
        if size > settings.max_file_size:
            logger.info("[batch] skipping %s: %d bytes exceeds limit", path, size)
            return FileOutcome(path=str(path), status="skipped", error=f"file larger than {settings.max_file_size} bytes")

        text = read_source(path)
        document = SourceDocument(identifier=str(path), kind=document_kind(path), text=text, path=str(path))
        result = format_document(document, pipeline_config)

        if result.reason == "unparseable_source":
            return FileOutcome(path=str(path), status="unparseable", counts=result.counts, error=result.error)
        if result.reason == "span_consistency_violation":
            return FileOutcome(path=str(path), status="error", counts=result.counts, error=result.error)
        if not result.changed:
            return FileOutcome(path=str(path), status="unchanged", counts=result.counts)

        status = "changed"
        if mode == "write":
            write_source(path, result.new_text or "", settings.safety)
            status = "written"
        return FileOutcome(
            path=str(path),
            status=status,
            counts=result.counts,
            diffs=result.diffs,
            original_text=text,
            new_text=result.new_text,
        )
    except Exception as exc:  # noqa: BLE001
        logger.exception("[batch] failed to process %s", path)
        return FileOutcome(path=str(path), status="error", error=str(exc))


def process_paths(
    paths: Iterable[str | Path],
    mode: Mode,
    settings: TailsortSettings,
    max_depth: int | None = None,
    sequential: bool = False,
    pipeline_config: PipelineConfig | None = None,
) -> BatchReport:
    effective_config = pipeline_config or build_pipeline_config(settings)
    files = discover_files(paths, settings.file_extensions, settings.ignore_paths, max_depth)
    started = time.perf_counter()

    if sequential or len(files) <= 1:
        outcomes = [process_file(path, mode, settings, effective_config) for path in files]
    else:
        with ThreadPoolExecutor(max_workers=settings.threads or None) as executor:
            outcomes = list(
                executor.map(lambda path: process_file(path, mode, settings, effective_config), files)
            )

    duration_ms = int((time.perf_counter() - started) * 1000)
    logger.info("[batch] %s: %d files in %d ms", mode, len(outcomes), duration_ms)
    return BatchReport(mode=mode, files=outcomes, duration_ms=duration_ms)
