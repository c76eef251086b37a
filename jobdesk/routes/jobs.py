from __future__ import annotations

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from fastapi.responses import PlainTextResponse

from jobdesk.application import AuthenticationRequired, DashboardService, JobNotFound, get_dashboard_service
from jobdesk.core.csv_import import build_template
from jobdesk.core.validation import ValidationError
from jobdesk.exporters.jobs_csv import render_jobs_csv

router = APIRouter(prefix="/jobs", tags=["jobs"])

CSV_MEDIA_TYPE = "text/csv"


def _authorised_service() -> DashboardService:
    service = get_dashboard_service()
    if service.current_user() is None:
        raise HTTPException(status_code=401, detail="login required")
    return service


@router.get("")
async def list_jobs(
    status: str | None = Query(default=None),
    search: str | None = Query(default=None),
    category: str | None = Query(default=None),
    sub_category: str | None = Query(default=None),
) -> dict:
    service = _authorised_service()
    jobs = service.list_jobs(status=status, search=search, category=category, sub_category=sub_category)
    return {"items": [job.to_wire() for job in jobs]}


@router.get("/summary")
async def get_summary() -> dict:
    service = _authorised_service()
    summary = service.summary()
    return {
        "total": summary.total,
        "completed": summary.completed,
        "pending": summary.pending,
        "in_progress": summary.in_progress,
        "overdue": summary.overdue,
        "overdue_jobs": [job.to_wire() for job in summary.overdue_jobs],
        "by_category": summary.by_category,
    }


@router.get("/template")
async def download_template() -> PlainTextResponse:
    return PlainTextResponse(
        build_template(),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="Template_Global_Upload.csv"'},
    )


@router.get("/export")
async def export_jobs() -> PlainTextResponse:
    service = _authorised_service()
    return PlainTextResponse(
        render_jobs_csv(service.visible_jobs()),
        media_type=CSV_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="jobs.csv"'},
    )


@router.post("/import")
async def import_jobs(file: UploadFile = File(...)) -> dict:
    service = _authorised_service()
    try:
        raw = await file.read()
    finally:
        await file.close()
    text = raw.decode("utf-8-sig", errors="replace")
    try:
        outcome, synced = await service.import_csv(text)
    except AuthenticationRequired as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    if not outcome.ok:
        raise HTTPException(status_code=400, detail=outcome.error)
    return {"imported": len(outcome.jobs), "synced": synced, "items": [job.to_wire() for job in outcome.jobs]}


@router.post("")
async def create_job(payload: dict) -> dict:
    service = _authorised_service()
    try:
        job, synced = await service.add_job(payload)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"job": job.to_wire(), "synced": synced}


@router.patch("/{job_id}")
async def update_job(job_id: str, payload: dict) -> dict:
    service = _authorised_service()
    if not payload:
        raise HTTPException(status_code=400, detail="no updates provided")
    try:
        job, synced = await service.update_job(job_id, payload)
    except JobNotFound as exc:
        raise HTTPException(status_code=404, detail="job not found") from exc
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"job": job.to_wire(), "synced": synced}


@router.delete("/{job_id}")
async def delete_job(job_id: str, confirm: bool = Query(default=False)) -> dict:
    if not confirm:
        raise HTTPException(status_code=400, detail="deletion must be confirmed")
    service = _authorised_service()
    try:
        synced = await service.delete_job(job_id)
    except JobNotFound as exc:
        raise HTTPException(status_code=404, detail="job not found") from exc
    return {"deleted": job_id, "synced": synced}
