from __future__ import annotations

from pathlib import Path
import shutil
import sys
import tempfile

from fastapi.testclient import TestClient

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from app import app  # noqa: E402
from tailsort.settings import EXPORTS_DIR  # noqa: E402

FIXTURES_DIR = REPO_ROOT / "tests" / "fixtures"


def fail(message: str) -> None:
    print(f"SMOKE_FAIL: {message}")
    raise SystemExit(1)


def main() -> None:
    client = TestClient(app)

    format_response = client.post("/format", json={"source": 'cn("p-4 flex m-2 items-center")', "kind": "ts"})
    if format_response.status_code != 200:
        fail(f"format request failed ({format_response.status_code})")
    if format_response.json().get("output") != 'cn("flex items-center m-2 p-4")':
        fail(f"unexpected format output: {format_response.json()}")

    workdir = Path(tempfile.mkdtemp(prefix="tailsort-smoke-"))
    project = workdir / "project"
    shutil.copytree(FIXTURES_DIR, project)

    try:
        run_response = client.post("/runs", json={"paths": [str(project)], "mode": "check", "wait": True})
        if run_response.status_code != 200:
            fail(f"check run request failed ({run_response.status_code})")

        job = run_response.json().get("job", {})
        if job.get("status") != "COMPLETED":
            fail(f"check run did not complete: {job}")
        if not job.get("summary", {}).get("files_changed"):
            fail("check run reported no unsorted files")

        results = client.get("/results", params={"job_id": job["id"]}).json()
        if not any(item.get("diffs") for item in results.get("files", [])):
            fail("results carry no diffs")

        before_csv = {p.name for p in EXPORTS_DIR.glob("*.csv")}
        before_xlsx = {p.name for p in EXPORTS_DIR.glob("*.xlsx")}

        csv_response = client.post("/exports/csv", json={"job_id": job["id"]})
        xlsx_response = client.post("/exports/xlsx", json={"job_id": job["id"]})

        if csv_response.status_code != 200:
            fail("CSV export failed")
        if xlsx_response.status_code != 200:
            fail("XLSX export failed")

        after_csv = {p.name for p in EXPORTS_DIR.glob("*.csv")}
        after_xlsx = {p.name for p in EXPORTS_DIR.glob("*.xlsx")}

        if not (after_csv - before_csv):
            fail("no new CSV artifact detected")
        if not (after_xlsx - before_xlsx):
            fail("no new XLSX artifact detected")
    finally:
        shutil.rmtree(workdir, ignore_errors=True)

    print("SMOKE_OK")


if __name__ == "__main__":
    main()
