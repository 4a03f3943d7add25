from __future__ import annotations

import logging
import threading
import uuid
from typing import Any

from ..config import load_settings
from ..database import get_store
from ..utils import from_json, to_json, utc_now_iso
from .batch_service import BatchReport, FileOutcome, process_paths

logger = logging.getLogger(__name__)


def create_job(mode: str, options: dict[str, Any]) -> str:
    job_id = uuid.uuid4().hex
    get_store().execute(
        """
        INSERT INTO jobs (id, mode, status, error_message, options_json, created_at)
        VALUES (?, ?, 'QUEUED', NULL, ?, ?)
        """,
        (job_id, mode, to_json(options), utc_now_iso()),
    )
    return job_id


def get_job(job_id: str) -> dict[str, Any] | None:
    row = get_store().fetchone(
        """
        SELECT id, mode, status, error_message, options_json, summary_json, created_at, started_at, finished_at
        FROM jobs
        WHERE id = ?
        """,
        (job_id,),
    )
    if row is None:
        return None
    return {
        "id": row["id"],
        "mode": row["mode"],
        "status": row["status"],
        "error_message": row["error_message"],
        "options": from_json(row["options_json"], {}),
        "summary": from_json(row["summary_json"], {}),
        "created_at": row["created_at"],
        "started_at": row["started_at"],
        "finished_at": row["finished_at"],
    }


def _set_job_running(job_id: str) -> None:
    get_store().execute(
        "UPDATE jobs SET status = 'RUNNING', started_at = ? WHERE id = ?",
        (utc_now_iso(), job_id),
    )


def _set_job_failed(job_id: str, message: str) -> None:
    get_store().execute(
        "UPDATE jobs SET status = 'FAILED', error_message = ?, finished_at = ? WHERE id = ?",
        (message, utc_now_iso(), job_id),
    )


def _file_row(job_id: str, outcome: FileOutcome, now: str) -> tuple[Any, ...]:
    return (
        uuid.uuid4().hex,
        job_id,
        outcome.path,
        outcome.status,
        outcome.error,
        to_json(outcome.counts),
        to_json(outcome.diffs),
        now,
    )


def _store_report(job_id: str, report: BatchReport) -> None:
    now = utc_now_iso()
    with get_store().transaction() as conn:
        conn.execute("DELETE FROM file_results WHERE job_id = ?", (job_id,))
        conn.executemany(
            """
            INSERT INTO file_results (id, job_id, path, status, error_message, counts_json, diffs_json, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [_file_row(job_id, outcome, now) for outcome in report.files],
        )
        conn.execute(
            "UPDATE jobs SET status = 'COMPLETED', summary_json = ?, finished_at = ? WHERE id = ?",
            (to_json(report.summary()), now, job_id),
        )


def run_job_sync(job_id: str, paths: list[str], mode: str, overrides: dict[str, Any] | None = None) -> None:
    _set_job_running(job_id)

    try:
        settings = load_settings(overrides=overrides)
        report = process_paths(paths, mode, settings)  # type: ignore[arg-type]
        if not report.files:
            raise RuntimeError(f"No supported source files found in {', '.join(paths)}")
        _store_report(job_id, report)
        logger.info("[run_service] job %s completed: %s", job_id, report.summary())
    except Exception as exc:  # noqa: BLE001
        logger.exception("[run_service] job %s failed", job_id)
        _set_job_failed(job_id, str(exc))


def run_job_async(job_id: str, paths: list[str], mode: str, overrides: dict[str, Any] | None = None) -> None:
    thread = threading.Thread(target=run_job_sync, args=(job_id, paths, mode, overrides), daemon=True)
    thread.start()


def list_jobs(limit: int = 20) -> list[dict[str, Any]]:
    rows = get_store().fetchall(
        "SELECT id FROM jobs ORDER BY created_at DESC, rowid DESC LIMIT ?",
        (limit,),
    )
    return [job for job in (get_job(row["id"]) for row in rows) if job]


def get_latest_completed_job_id() -> str | None:
    row = get_store().fetchone(
        """
        SELECT id
        FROM jobs
        WHERE status = 'COMPLETED'
        ORDER BY finished_at DESC
        LIMIT 1
        """
    )
    return row["id"] if row else None


def _row_to_file(row: Any) -> dict[str, Any]:
    return {
        "path": row["path"],
        "status": row["status"],
        "error": row["error_message"],
        "counts": from_json(row["counts_json"], {}),
        "diffs": from_json(row["diffs_json"], []),
    }


def get_results_payload(job_id: str | None = None) -> dict[str, Any]:
    effective_job_id = job_id or get_latest_completed_job_id()
    if not effective_job_id:
        return {"job": None, "summary": {}, "files": []}

    job = get_job(effective_job_id)
    rows = get_store().fetchall(
        """
        SELECT path, status, error_message, counts_json, diffs_json
        FROM file_results
        WHERE job_id = ?
        ORDER BY path ASC
        """,
        (effective_job_id,),
    )
    return {
        "job": job,
        "summary": (job or {}).get("summary", {}),
        "files": [_row_to_file(row) for row in rows],
    }
