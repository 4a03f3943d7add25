from __future__ import annotations

import csv
import difflib
import json
from pathlib import Path
from typing import Any

from openpyxl import Workbook

from ..settings import EXPORTS_DIR, ensure_runtime_dirs
from ..utils import utc_now_iso
from .run_service import get_results_payload

COLUMNS = [
    "path",
    "status",
    "line",
    "column",
    "kind",
    "label",
    "old_text",
    "new_text",
    "error",
]


def _build_rows(payload: dict[str, Any]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []

    for file_result in payload.get("files", []):
        base = {
            "path": file_result.get("path"),
            "status": file_result.get("status"),
            "error": file_result.get("error"),
        }
        diffs = file_result.get("diffs") or []
        if not diffs:
            rows.append({**base, "line": None, "column": None, "kind": None, "label": None, "old_text": None, "new_text": None})
            continue
        for diff in diffs:
            rows.append(
                {
                    **base,
                    "line": diff.get("line"),
                    "column": diff.get("column"),
                    "kind": diff.get("kind"),
                    "label": diff.get("label"),
                    "old_text": diff.get("old_text"),
                    "new_text": diff.get("new_text"),
                }
            )
    return rows


def _target(payload: dict[str, Any], extension: str) -> Path:
    ensure_runtime_dirs()
    job_id = (payload.get("job") or {}).get("id", "none")
    return EXPORTS_DIR / f"tailsort_{job_id}_{utc_now_iso().replace(':', '-')}.{extension}"


def export_csv(job_id: str | None = None) -> Path:
    payload = get_results_payload(job_id)
    target = _target(payload, "csv")

    with open(target, "w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=COLUMNS)
        writer.writeheader()
        for row in _build_rows(payload):
            writer.writerow(row)

    return target


def export_xlsx(job_id: str | None = None) -> Path:
    payload = get_results_payload(job_id)
    target = _target(payload, "xlsx")

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "class_order"
    sheet.append(COLUMNS)
    for row in _build_rows(payload):
        sheet.append([row[column] for column in COLUMNS])

    summary_sheet = workbook.create_sheet("summary")
    for key, value in (payload.get("summary") or {}).items():
        summary_sheet.append([key, value])

    workbook.save(target)
    return target


def build_issues(payload: dict[str, Any]) -> list[dict[str, Any]]:
    issues: list[dict[str, Any]] = []
    for file_result in payload.get("files", []):
        for diff in file_result.get("diffs") or []:
            issues.append(
                {
                    "file": file_result.get("path"),
                    "line": diff.get("line"),
                    "column": diff.get("column"),
                    "rule_id": "class-order",
                    "message": "Utility classes are not in canonical order",
                    "original": diff.get("old_text"),
                    "expected": diff.get("new_text"),
                }
            )
    return issues


def export_json(job_id: str | None = None) -> Path:
    payload = get_results_payload(job_id)
    target = _target(payload, "json")
    document = {
        "job": payload.get("job"),
        "summary": payload.get("summary"),
        "issues": build_issues(payload),
        "files": payload.get("files", []),
    }
    target.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
    return target


def unified_diff(path: str, original: str, updated: str) -> str:
    return "".join(
        difflib.unified_diff(
            original.splitlines(keepends=True),
            updated.splitlines(keepends=True),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
        )
    )
