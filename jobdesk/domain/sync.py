"""Domain entities for snapshot synchronisation."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from jobdesk.core.schema import Job, User


@dataclass(slots=True)
class Snapshot:
    """The whole persisted application state, written as one unit."""

    jobs: list[Job] = field(default_factory=list)
    users: list[User] = field(default_factory=list)

    def to_remote(self) -> dict[str, list[dict]]:
        return {
            "jobs": [job.to_wire() for job in self.jobs],
            "users": [{"email": user.email, "password": user.password} for user in self.users],
        }


@dataclass(slots=True)
class SyncStatus:
    """Connectivity indicator consumed by the presentation layer."""

    online: bool = True
    last_synced_at: datetime | None = None
    in_flight: int = 0
    last_error: str | None = None

    def as_dict(self) -> dict[str, object]:
        return {
            "online": self.online,
            "last_synced_at": self.last_synced_at.isoformat() if self.last_synced_at else None,
            "in_flight": self.in_flight,
            "last_error": self.last_error,
        }


@dataclass(slots=True)
class ImportOutcome:
    """Result of parsing a bulk CSV upload."""

    jobs: list[Job] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
