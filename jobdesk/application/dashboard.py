"""Application service layer for the job dashboard."""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Sequence

from jobdesk.application.session import SessionStore
from jobdesk.core.csv_import import parse_import
from jobdesk.core.roster import load_roster
from jobdesk.core.schema import DashboardSummary, Job, User
from jobdesk.core.validation import build_job, validate_job_updates
from jobdesk.core.visibility import filter_jobs, summarize, visible_jobs
from jobdesk.domain import ImportOutcome, SyncStatus
from jobdesk.infrastructure import InMemoryKeyValueStore, InMemoryRemoteStore, KeyValueStore, RemoteStore
from jobdesk.workers.sync import DEFAULT_POLL_INTERVAL, SyncEngine

logger = logging.getLogger(__name__)


class AuthenticationRequired(Exception):
    """Raised when an operation needs a logged-in user."""


class JobNotFound(KeyError):
    """Raised when a job does not exist or is not visible to the current user."""


def _normalise_email(email: str) -> str:
    return email.strip().lower()


class DashboardService:
    """Coordinates session, visibility and sync use cases."""

    def __init__(self, engine: SyncEngine, session: SessionStore) -> None:
        self._engine = engine
        self._session = session
        engine.subscribe(lambda snapshot: session.refresh(snapshot.users))

    @property
    def engine(self) -> SyncEngine:
        return self._engine

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    async def startup(self) -> None:
        """Restore local state and resume polling for a persisted session."""

        self._engine.load_local()
        if self._session.current() is not None:
            self._engine.start()

    async def shutdown(self) -> None:
        await self._engine.stop()

    # ------------------------------------------------------------------
    # session
    # ------------------------------------------------------------------
    def current_user(self) -> User | None:
        return self._session.current()

    def _require_user(self) -> User:
        user = self._session.current()
        if user is None:
            raise AuthenticationRequired("login required")
        return user

    async def login(self, email: str, password: str) -> User | None:
        wanted = _normalise_email(email)
        for user in self._engine.users:
            if _normalise_email(user.email) == wanted and user.password == password:
                self._session.login(user)
                self._engine.start()
                logger.info("User %s logged in", user.email)
                return user
        return None

    async def logout(self) -> None:
        self._session.logout()
        await self._engine.stop()

    async def change_password(self, old_password: str, new_password: str) -> bool:
        user = self._require_user()
        if user.password != old_password:
            return False
        self._session.login(user.model_copy(update={"password": new_password}))
        await self._engine.set_password(user.email, new_password)
        return True

    # ------------------------------------------------------------------
    # jobs
    # ------------------------------------------------------------------
    def visible_jobs(self) -> list[Job]:
        return visible_jobs(self._engine.jobs, self._require_user())

    def list_jobs(
        self,
        *,
        status: str | None = None,
        search: str | None = None,
        category: str | None = None,
        sub_category: str | None = None,
        today: date | None = None,
    ) -> list[Job]:
        return filter_jobs(
            self.visible_jobs(),
            status=status,
            search=search,
            category=category,
            sub_category=sub_category,
            today=today,
        )

    def get_job(self, job_id: str) -> Job:
        job = next((item for item in self.visible_jobs() if item.id == job_id), None)
        if job is None:
            raise JobNotFound(job_id)
        return job

    def summary(self, today: date | None = None) -> DashboardSummary:
        return summarize(self.visible_jobs(), today)

    async def add_job(self, payload: dict[str, Any]) -> tuple[Job, bool]:
        user = self._require_user()
        job = build_job(payload, created_by=user.email)
        synced = await self._engine.add_job(job)
        return job, synced

    async def update_job(self, job_id: str, updates: dict[str, Any]) -> tuple[Job, bool]:
        updated = validate_job_updates(self.get_job(job_id), updates)
        synced = await self._engine.update_job(job_id, updated)
        return updated, synced

    async def delete_job(self, job_id: str) -> bool:
        self.get_job(job_id)
        return await self._engine.delete_job(job_id)

    async def import_csv(self, text: str, today: date | None = None) -> tuple[ImportOutcome, bool]:
        self._require_user()
        outcome = parse_import(text, today)
        if not outcome.ok:
            return outcome, False
        synced = await self._engine.bulk_add(outcome.jobs)
        logger.info("Imported %d jobs", len(outcome.jobs))
        return outcome, synced

    # ------------------------------------------------------------------
    # sync
    # ------------------------------------------------------------------
    def sync_status(self) -> SyncStatus:
        return self._engine.status

    async def refresh(self) -> bool:
        return await self._engine.pull()


def build_dashboard_service(
    *,
    remote: RemoteStore | None = None,
    local_store: KeyValueStore | None = None,
    roster: Sequence[User] | None = None,
    interval: float = DEFAULT_POLL_INTERVAL,
) -> DashboardService:
    local_store = local_store or InMemoryKeyValueStore()
    engine = SyncEngine(
        remote or InMemoryRemoteStore(),
        roster if roster is not None else load_roster(),
        local_store=local_store,
        interval=interval,
    )
    return DashboardService(engine, SessionStore(local_store))


_service: DashboardService | None = None


def configure_dashboard_service(service: DashboardService) -> None:
    """Install the service used by the API routes."""

    global _service
    _service = service


def get_dashboard_service() -> DashboardService:
    """Return the singleton dashboard service for the process."""

    global _service
    if _service is None:
        _service = build_dashboard_service()
    return _service


def reset_dashboard_state() -> None:
    """Drop the configured service (used in tests)."""

    global _service
    _service = None
