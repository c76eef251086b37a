from __future__ import annotations

from fastapi import APIRouter

from jobdesk.application import get_dashboard_service

router = APIRouter(prefix="/sync", tags=["sync"])


@router.get("/status")
async def get_sync_status() -> dict:
    service = get_dashboard_service()
    return service.sync_status().as_dict()


@router.post("/refresh")
async def refresh() -> dict:
    """Pull the shared snapshot now instead of waiting for the next poll."""
    service = get_dashboard_service()
    applied = await service.refresh()
    return {"applied": applied, **service.sync_status().as_dict()}
