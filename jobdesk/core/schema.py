from __future__ import annotations

import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

JobStatus = Literal["Pending", "In Progress", "Completed", "Overdue"]
UserRole = Literal["Admin", "User"]

STATUS_ALIASES: dict[str, str] = {
    "Pending": "Pending",
    "In Progress": "In Progress",
    "InProgress": "In Progress",
    "Completed": "Completed",
    "Overdue": "Overdue",
}


def new_job_id() -> str:
    return str(uuid.uuid4())


class WireModel(BaseModel):
    """Base for records shared with other clients through the remote store."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Job(WireModel):
    id: str = Field(default_factory=new_job_id)
    category: str
    sub_category: str
    date_input: str
    branch_dept: str = ""
    job_type: str = ""
    status: JobStatus = "Pending"
    deadline: str
    activation_date: str | None = None
    notes: str | None = None
    created_by: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalise_status(cls, value: object) -> object:
        if isinstance(value, str):
            return STATUS_ALIASES.get(value.strip(), value)
        return value


class Credential(WireModel):
    email: str
    password: str | None = None


class User(Credential):
    name: str
    role: UserRole = "User"

    @property
    def is_admin(self) -> bool:
        return self.role == "Admin"

    def public(self) -> dict:
        return self.model_dump(by_alias=True, exclude={"password"})


class DashboardSummary(BaseModel):
    total: int = 0
    completed: int = 0
    pending: int = 0
    in_progress: int = 0
    overdue: int = 0
    overdue_jobs: list[Job] = Field(default_factory=list)
    by_category: dict[str, int] = Field(default_factory=dict)
