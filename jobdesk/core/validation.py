from __future__ import annotations

from typing import Any

from pydantic import ValidationError as ModelValidationError

from jobdesk.core.schema import Job

IMMUTABLE_FIELDS = {"id", "created_by"}


class ValidationError(Exception):
    """Raised when a job payload fails domain validation."""


def _field_names(payload: dict[str, Any]) -> dict[str, Any]:
    by_alias = {info.alias or name: name for name, info in Job.model_fields.items()}
    normalised: dict[str, Any] = {}
    for key, value in payload.items():
        name = by_alias.get(key, key)
        if name not in Job.model_fields:
            raise ValidationError(f"unknown job field: {key}")
        normalised[name] = value
    return normalised


def build_job(payload: dict[str, Any], *, created_by: str | None) -> Job:
    """Create a new job owned by ``created_by``; client supplied ids are ignored."""

    data = {key: value for key, value in _field_names(payload).items() if key not in IMMUTABLE_FIELDS}
    data["created_by"] = created_by
    try:
        return Job.model_validate(data)
    except ModelValidationError as exc:
        raise ValidationError(str(exc)) from exc


def validate_job_updates(job: Job, updates: dict[str, Any]) -> Job:
    """Return ``job`` with ``updates`` applied, rejecting unknown or locked fields.

    ``updates`` may use wire (camelCase) or attribute names.
    """

    normalised = _field_names(updates)
    locked = sorted(IMMUTABLE_FIELDS.intersection(normalised))
    if locked:
        raise ValidationError(f"job fields cannot be changed: {', '.join(locked)}")

    data = job.model_dump()
    data.update(normalised)
    try:
        return Job.model_validate(data)
    except ModelValidationError as exc:
        raise ValidationError(str(exc)) from exc
