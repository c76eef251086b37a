"""Role-based job visibility and the derived dashboard views."""

from __future__ import annotations

import re
from datetime import date
from typing import Iterable

from jobdesk.core.schema import DashboardSummary, Job, User


def visible_jobs(jobs: Iterable[Job], user: User | None) -> list[Job]:
    """Return the jobs ``user`` may see, preserving order.

    Admins see everything. Other users see their own jobs plus every job
    without an owner, so unowned legacy records are shared by all users.
    """

    if user is None:
        return []
    if user.is_admin:
        return list(jobs)
    return [job for job in jobs if not job.created_by or job.created_by == user.email]


_DATE_PREFIX = re.compile(r"\s*(\d{4})-(\d{1,2})-(\d{1,2})")


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    match = _DATE_PREFIX.match(value)
    if match is None:
        return None
    try:
        return date(*(int(part) for part in match.groups()))
    except ValueError:
        return None


def is_overdue(job: Job, today: date | None = None) -> bool:
    """Derived overdue state, independent of a stored ``Overdue`` status.

    Deadlines are read as ``YYYY-M-D`` (padding optional, any time part
    ignored); anything else is never overdue.
    """

    if job.status == "Completed":
        return False
    deadline = _parse_date(job.deadline)
    if deadline is None:
        return False
    return deadline < (today or date.today())


def summarize(jobs: Iterable[Job], today: date | None = None) -> DashboardSummary:
    today = today or date.today()
    summary = DashboardSummary()
    for job in jobs:
        summary.total += 1
        summary.by_category[job.category] = summary.by_category.get(job.category, 0) + 1
        if job.status == "Completed":
            summary.completed += 1
        elif job.status == "Pending":
            summary.pending += 1
        elif job.status == "In Progress":
            summary.in_progress += 1
        if is_overdue(job, today):
            summary.overdue_jobs.append(job)
    summary.overdue = len(summary.overdue_jobs)
    return summary


def filter_jobs(
    jobs: Iterable[Job],
    *,
    status: str | None = None,
    search: str | None = None,
    category: str | None = None,
    sub_category: str | None = None,
    today: date | None = None,
) -> list[Job]:
    """Apply the dashboard card, search box and category view filters."""

    result = list(jobs)
    if category:
        result = [job for job in result if job.category == category]
    if sub_category:
        result = [job for job in result if job.sub_category == sub_category]

    if status and status != "Total":
        if status == "Overdue":
            today = today or date.today()
            result = [job for job in result if is_overdue(job, today)]
        elif status in {"In Progress", "InProgress"}:
            # the "in progress" card groups pending work with it
            result = [job for job in result if job.status in {"In Progress", "Pending"}]
        else:
            result = [job for job in result if job.status == status]

    if search:
        keyword = search.strip().lower()
        result = [
            job
            for job in result
            if keyword in job.branch_dept.lower()
            or keyword in job.job_type.lower()
            or keyword in job.category.lower()
        ]
    return result
