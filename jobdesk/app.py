import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobdesk.application import build_dashboard_service, configure_dashboard_service
from jobdesk.infrastructure import HttpRemoteStore, InMemoryRemoteStore, JsonFileStore
from jobdesk.routes import jobs, session, sync
from jobdesk.workers.sync import DEFAULT_POLL_INTERVAL

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    remote_url = os.getenv("JOBDESK_REMOTE_URL")
    if remote_url:
        headers = {}
        api_key = os.getenv("JOBDESK_REMOTE_API_KEY")
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        remote = HttpRemoteStore(remote_url, headers=headers)
    else:
        logger.warning("JOBDESK_REMOTE_URL not set; using a process-local store")
        remote = InMemoryRemoteStore()

    interval = float(os.getenv("JOBDESK_POLL_INTERVAL") or DEFAULT_POLL_INTERVAL)
    service = build_dashboard_service(remote=remote, local_store=JsonFileStore(), interval=interval)
    configure_dashboard_service(service)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        await service.startup()
        try:
            yield
        finally:
            await service.shutdown()
            await remote.aclose()

    app = FastAPI(title="JobDesk Dashboard API", version="0.1.0", lifespan=lifespan)

    origins_env = os.getenv("API_CORS_ORIGINS", "")
    origins = [origin.strip() for origin in origins_env.split(",") if origin.strip()]
    if not origins:
        origins = ["http://localhost:3000", "http://127.0.0.1:3000"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(session.router, prefix="/api")
    app.include_router(jobs.router, prefix="/api")
    app.include_router(sync.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "JobDesk Dashboard API",
                "docs": "/docs",
                "health": "/api/sync/status",
            }
        )

    return app


app = create_app()
