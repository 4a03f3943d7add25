from __future__ import annotations

import csv
import io
import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from openpyxl import load_workbook

from app import app
from tailsort.errors import SpanConsistencyViolation
from tailsort.settings import EXPORTS_DIR


def test_health() -> None:
    client = TestClient(app)
    assert client.get("/health").json() == {"status": "ok"}


def test_format_and_check_source() -> None:
    client = TestClient(app)
    source = 'export const A = () => <div className="p-4 flex m-2" />;\n'

    format_resp = client.post("/format", json={"source": source, "kind": "tsx"})
    assert format_resp.status_code == 200
    payload = format_resp.json()
    assert payload["changed"] is True
    assert payload["output"] == 'export const A = () => <div className="flex m-2 p-4" />;\n'
    assert payload["counts"]["sorted"] == 1
    assert payload["diffs"][0]["line"] == 1

    check_resp = client.post("/check", json={"source": payload["output"], "kind": "tsx"})
    assert check_resp.json()["formatted"] is True

    unsorted_resp = client.post("/check", json={"source": source, "kind": "tsx"})
    assert unsorted_resp.json()["formatted"] is False


def test_format_reports_unparseable_source() -> None:
    client = TestClient(app)
    resp = client.post("/format", json={"source": "const = <div", "kind": "tsx"})

    assert resp.status_code == 200
    assert resp.json()["reason"] == "unparseable_source"
    assert resp.json()["output"] == "const = <div"


def test_span_violation_returns_result_not_server_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def overlapping(source: bytes, edits: list) -> None:
        raise SpanConsistencyViolation("edit 1 overlaps edit 0")

    monkeypatch.setattr("tailsort.pipeline.apply_edits", overlapping)
    client = TestClient(app)
    body = {"source": 'cn("p-4 flex");\n', "kind": "ts"}

    format_resp = client.post("/format", json=body)
    assert format_resp.status_code == 200
    assert format_resp.json()["reason"] == "span_consistency_violation"
    assert format_resp.json()["output"] == body["source"]

    check_resp = client.post("/check", json=body)
    assert check_resp.status_code == 200
    assert check_resp.json()["formatted"] is False
    assert check_resp.json()["error"] == "edit 1 overlaps edit 0"


def test_format_options_and_validation_errors() -> None:
    client = TestClient(app)

    custom = client.post(
        "/format",
        json={
            "source": 'cn("m-2 flex p-4")',
            "kind": "ts",
            "options": {"sort_order": "custom", "custom_order": ["padding", "margin"]},
        },
    )
    assert custom.json()["output"] == 'cn("p-4 m-2 flex")'

    bad_order = client.post(
        "/format",
        json={"source": "x", "kind": "ts", "options": {"sort_order": "custom", "custom_order": ["colors"]}},
    )
    assert bad_order.status_code == 400

    bad_kind = client.post("/format", json={"source": "x", "kind": "css"})
    assert bad_kind.status_code == 422


def test_batch_run_results_and_exports(project_dir: Path) -> None:
    client = TestClient(app)

    run_resp = client.post("/runs", json={"paths": [str(project_dir)], "mode": "check", "wait": True})
    assert run_resp.status_code == 200
    job = run_resp.json()["job"]
    assert job["status"] == "COMPLETED"
    assert job["summary"]["files_changed"] == 4

    job_resp = client.get(f"/jobs/{job['id']}")
    assert job_resp.json()["job"]["id"] == job["id"]

    recent = client.get("/jobs", params={"limit": 5}).json()["jobs"]
    assert recent[0]["id"] == job["id"]

    results = client.get("/results", params={"job_id": job["id"]}).json()
    statuses = {Path(item["path"]).name: item["status"] for item in results["files"]}
    assert statuses["Button.tsx"] == "changed"
    assert statuses["Broken.tsx"] == "unparseable"
    assert statuses["sorted.ts"] == "unchanged"

    before = {path.name for path in EXPORTS_DIR.glob("*")}

    csv_resp = client.post("/exports/csv", json={"job_id": job["id"]})
    assert csv_resp.status_code == 200
    rows = list(csv.DictReader(io.StringIO(csv_resp.text)))
    button_rows = [row for row in rows if row["path"].endswith("Button.tsx")]
    assert [row["new_text"] for row in button_rows] == ["flex items-center m-2 p-4", "bg-blue-500 text-white", "font-bold text-sm"]

    xlsx_resp = client.post("/exports/xlsx", json={"job_id": job["id"]})
    assert xlsx_resp.status_code == 200
    workbook = load_workbook(io.BytesIO(xlsx_resp.content))
    assert workbook.sheetnames == ["class_order", "summary"]
    assert [cell.value for cell in workbook["class_order"][1]][:2] == ["path", "status"]

    json_resp = client.post("/exports/json", json={"job_id": job["id"]})
    document = json.loads(json_resp.content)
    assert document["summary"]["files_processed"] == 6
    assert all(issue["rule_id"] == "class-order" for issue in document["issues"])
    assert len(document["issues"]) == job["summary"]["sites_sorted"]

    after = {path.name for path in EXPORTS_DIR.glob("*")}
    assert len(after - before) == 3

    assert '"p-4 flex m-2 items-center"' in (project_dir / "Button.tsx").read_text(encoding="utf-8")


def test_write_run_rewrites_files(project_dir: Path) -> None:
    client = TestClient(app)

    job = client.post("/runs", json={"paths": [str(project_dir)], "mode": "write", "wait": True}).json()["job"]

    assert job["status"] == "COMPLETED"
    assert 'class="flex p-4"' in (project_dir / "Card.vue").read_text(encoding="utf-8")


def test_run_without_sources_fails(tmp_path: Path) -> None:
    client = TestClient(app)

    job = client.post("/runs", json={"paths": [str(tmp_path)], "wait": True}).json()["job"]

    assert job["status"] == "FAILED"
    assert "No supported source files" in job["error_message"]


def test_unknown_job_and_bad_requests() -> None:
    client = TestClient(app)

    assert client.get("/jobs/does-not-exist").status_code == 404
    assert client.get("/results", params={"job_id": "does-not-exist"}).status_code == 404
    assert client.post("/runs", json={"paths": []}).status_code == 422
    assert client.post("/runs", json={"paths": ["."], "options": {"sort_order": "custom"}}).status_code == 400
