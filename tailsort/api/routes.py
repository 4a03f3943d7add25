from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import FileResponse

from ..config import build_pipeline_config, load_settings
from ..domain import DocumentResult
from ..errors import InvalidConfiguration
from ..pipeline import PipelineConfig, format_source
from ..services import export_service, run_service
from ..utils import to_payload
from .models import ExportRequest, FormatRequest, RunRequest


router = APIRouter()


def _pipeline_config(request: FormatRequest) -> PipelineConfig:
    try:
        return build_pipeline_config(load_settings(overrides=request.options.overrides()))
    except InvalidConfiguration as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _format(request: FormatRequest) -> DocumentResult:
    return format_source(request.source, request.kind, _pipeline_config(request), identifier=request.identifier)


@router.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/format")
def format_endpoint(request: FormatRequest) -> dict:
    result = _format(request)
    return {
        "changed": result.changed,
        "output": result.new_text if result.changed else request.source,
        "reason": result.reason,
        "error": result.error,
        "counts": to_payload(result.counts),
        "diffs": to_payload(result.diffs),
    }


@router.post("/check")
def check_endpoint(request: FormatRequest) -> dict:
    result = _format(request)
    return {
        "formatted": not result.changed and result.reason == "unchanged",
        "reason": result.reason,
        "error": result.error,
        "counts": to_payload(result.counts),
        "diffs": to_payload(result.diffs),
    }


@router.post("/runs")
def run_batch(request: RunRequest) -> dict:
    overrides = request.options.overrides()
    try:
        load_settings(overrides=overrides)
    except InvalidConfiguration as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    job_id = run_service.create_job(
        mode=request.mode,
        options={"paths": request.paths, "wait": request.wait, **overrides},
    )

    if request.wait:
        run_service.run_job_sync(job_id, request.paths, request.mode, overrides)
    else:
        run_service.run_job_async(job_id, request.paths, request.mode, overrides)

    job = run_service.get_job(job_id)
    if not job:
        raise HTTPException(status_code=500, detail="Failed to create formatting job")
    return {"job": job}


@router.get("/jobs")
def list_jobs(limit: int = Query(default=20, ge=1, le=200)) -> dict:
    return {"jobs": run_service.list_jobs(limit)}


@router.get("/jobs/{job_id}")
def get_job(job_id: str) -> dict:
    job = run_service.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return {"job": job}


@router.get("/results")
def get_results(job_id: str | None = None) -> dict:
    if job_id and not run_service.get_job(job_id):
        raise HTTPException(status_code=404, detail="Job not found")
    return run_service.get_results_payload(job_id)


@router.post("/exports/json")
def export_json(request: ExportRequest) -> FileResponse:
    path = export_service.export_json(request.job_id)
    return FileResponse(path, media_type="application/json", filename=path.name)


@router.post("/exports/csv")
def export_csv(request: ExportRequest) -> FileResponse:
    path = export_service.export_csv(request.job_id)
    return FileResponse(path, media_type="text/csv", filename=path.name)


@router.post("/exports/xlsx")
def export_xlsx(request: ExportRequest) -> FileResponse:
    path = export_service.export_xlsx(request.job_id)
    return FileResponse(
        path,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=path.name,
    )
