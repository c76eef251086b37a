from __future__ import annotations

from fastapi import APIRouter, HTTPException

from jobdesk.application import AuthenticationRequired, get_dashboard_service

router = APIRouter(prefix="/session", tags=["session"])


@router.get("")
async def get_session() -> dict:
    service = get_dashboard_service()
    user = service.current_user()
    return {"user": user.public() if user else None}


@router.post("/login")
async def login(payload: dict) -> dict:
    email = str(payload.get("email") or "")
    password = str(payload.get("password") or "")
    if not email or not password:
        raise HTTPException(status_code=400, detail="email and password are required")
    service = get_dashboard_service()
    user = await service.login(email, password)
    if user is None:
        raise HTTPException(status_code=401, detail="invalid email or password")
    return {"user": user.public()}


@router.post("/logout")
async def logout() -> dict:
    service = get_dashboard_service()
    await service.logout()
    return {"user": None}


@router.post("/password")
async def change_password(payload: dict) -> dict:
    old_password = payload.get("old_password")
    new_password = payload.get("new_password")
    if not isinstance(old_password, str) or not isinstance(new_password, str) or not new_password:
        raise HTTPException(status_code=400, detail="old_password and new_password are required")
    service = get_dashboard_service()
    try:
        changed = await service.change_password(old_password, new_password)
    except AuthenticationRequired as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    if not changed:
        raise HTTPException(status_code=400, detail="current password does not match")
    return {"changed": True, "sync": service.sync_status().as_dict()}
