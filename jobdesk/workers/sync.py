"""Owner of the local {jobs, users} snapshot and its sync with the remote store.

Consistency is last-full-snapshot-wins: every push sends the whole
snapshot and every applied pull replaces the local jobs wholesale. Two
clients writing concurrently will lose one write at snapshot granularity;
nothing here merges records or tracks versions.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Sequence

from pydantic import ValidationError

from jobdesk.core.roster import merge_roster, parse_credentials
from jobdesk.core.schema import Job, User
from jobdesk.domain import Snapshot, SyncStatus
from jobdesk.infrastructure import KeyValueStore, RemoteStore, RemoteStoreError

logger = logging.getLogger(__name__)

JOBS_KEY = "jobs"
USERS_KEY = "users"

DEFAULT_POLL_INTERVAL = 5.0

Listener = Callable[[Snapshot], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_jobs(raw: Any) -> list[Job] | None:
    """Validate a job sequence from untrusted JSON, ``None`` if unusable."""

    if not isinstance(raw, list):
        return None
    try:
        return [Job.model_validate(item) for item in raw]
    except ValidationError as exc:
        logger.warning("Discarding malformed job list: %s", exc.error_count())
        return None


class SyncEngine:
    def __init__(
        self,
        remote: RemoteStore,
        roster: Sequence[User],
        *,
        local_store: KeyValueStore | None = None,
        interval: float = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._remote = remote
        self._roster = tuple(roster)
        self._local = local_store
        self._interval = interval
        self._clock = clock
        self._snapshot = Snapshot(jobs=[], users=merge_roster(self._roster, []))
        self._status = SyncStatus()
        self._listeners: list[Listener] = []
        self._poll_task: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # read access
    # ------------------------------------------------------------------
    @property
    def jobs(self) -> list[Job]:
        return list(self._snapshot.jobs)

    @property
    def users(self) -> list[User]:
        return list(self._snapshot.users)

    @property
    def roster(self) -> tuple[User, ...]:
        return self._roster

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def in_flight(self) -> bool:
        return self._status.in_flight > 0

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def find_job(self, job_id: str) -> Job | None:
        return next((job for job in self._snapshot.jobs if job.id == job_id), None)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # local persistence
    # ------------------------------------------------------------------
    def load_local(self) -> None:
        """Restore the last-known snapshot written by a previous process."""

        if self._local is None:
            return
        jobs = parse_jobs(self._local.read(JOBS_KEY))
        credentials = parse_credentials(self._local.read(USERS_KEY))
        self._snapshot = Snapshot(
            jobs=jobs if jobs is not None else [],
            users=merge_roster(self._roster, credentials or []),
        )
        self._notify()

    def _persist_local(self) -> None:
        if self._local is None:
            return
        try:
            self._local.write(JOBS_KEY, [job.to_wire() for job in self._snapshot.jobs])
            self._local.write(USERS_KEY, [user.to_wire() for user in self._snapshot.users])
        except OSError as exc:
            logger.warning("Could not persist local snapshot: %s", exc)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._snapshot)

    def _replace(self, *, jobs: list[Job] | None = None, users: list[User] | None = None) -> None:
        self._snapshot = Snapshot(
            jobs=jobs if jobs is not None else self._snapshot.jobs,
            users=users if users is not None else self._snapshot.users,
        )
        self._persist_local()
        self._notify()

    # ------------------------------------------------------------------
    # pull / push
    # ------------------------------------------------------------------
    async def pull(self) -> bool:
        """Fetch the remote snapshot and apply it; ``False`` if nothing was applied."""

        if self.in_flight:
            logger.debug("Skipping pull while %d push(es) in flight", self._status.in_flight)
            return False

        try:
            payload = await self._remote.get()
        except RemoteStoreError as exc:
            self._mark_offline(exc)
            return False

        self._status.online = True
        self._status.last_error = None
        self._status.last_synced_at = self._clock()
        if payload is None:
            return False

        jobs = parse_jobs(payload.get("jobs"))
        credentials = parse_credentials(payload.get("users"))
        users = merge_roster(self._roster, credentials) if credentials is not None else None
        if jobs is None and users is None:
            return False
        self._replace(jobs=jobs, users=users)
        return True

    async def push(self) -> bool:
        """Send the whole local snapshot; the local state is kept whatever happens."""

        state = self._snapshot.to_remote()
        self._status.in_flight += 1
        try:
            saved = await self._remote.put(state)
        except RemoteStoreError as exc:
            self._mark_offline(exc)
            return False
        finally:
            self._status.in_flight -= 1

        if not saved:
            self._mark_offline("remote store rejected the snapshot")
            return False
        self._status.online = True
        self._status.last_error = None
        self._status.last_synced_at = self._clock()
        return True

    def _mark_offline(self, reason: object) -> None:
        logger.warning("Remote sync failed: %s", reason)
        self._status.online = False
        self._status.last_error = str(reason)

    # ------------------------------------------------------------------
    # optimistic mutations
    # ------------------------------------------------------------------
    async def add_job(self, job: Job) -> bool:
        self._replace(jobs=[job, *self._snapshot.jobs])
        return await self.push()

    async def bulk_add(self, jobs: Iterable[Job]) -> bool:
        self._replace(jobs=[*jobs, *self._snapshot.jobs])
        return await self.push()

    async def update_job(self, job_id: str, updated: Job) -> bool:
        self._replace(jobs=[updated if job.id == job_id else job for job in self._snapshot.jobs])
        return await self.push()

    async def delete_job(self, job_id: str) -> bool:
        self._replace(jobs=[job for job in self._snapshot.jobs if job.id != job_id])
        return await self.push()

    async def set_password(self, email: str, password: str) -> bool:
        users = [
            user.model_copy(update={"password": password}) if user.email == email else user
            for user in self._snapshot.users
        ]
        self._replace(users=users)
        return await self.push()

    # ------------------------------------------------------------------
    # polling
    # ------------------------------------------------------------------
    async def _poll_loop(self) -> None:
        while True:
            try:
                await self.pull()
            except Exception:  # pragma: no cover - keep the timer alive
                logger.exception("Unexpected error during pull")
            await asyncio.sleep(self._interval)

    def start(self) -> asyncio.Task:
        """Pull now and then every ``interval`` seconds until :meth:`stop`."""

        if self._poll_task is None or self._poll_task.done():
            self._poll_task = asyncio.create_task(self._poll_loop(), name="jobdesk-sync-poll")
        return self._poll_task

    async def stop(self) -> None:
        task, self._poll_task = self._poll_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
