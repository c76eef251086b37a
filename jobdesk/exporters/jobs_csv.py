from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from jobdesk.core.csv_import import TEMPLATE_COLUMNS
from jobdesk.core.csvio import render_records_csv, write_records_to_csv
from jobdesk.core.schema import Job

_SEPARATORS = re.compile(r"\s*[,;]\s*")


def _cell(value: str | None) -> str:
    # the importer splits on every separator and has no quoting
    return _SEPARATORS.sub(" ", value or "").strip()


def _records(jobs: Iterable[Job]) -> list[dict]:
    records = []
    for job in jobs:
        values = [
            job.category,
            job.sub_category,
            job.date_input,
            job.branch_dept,
            job.job_type,
            job.status,
            job.deadline,
        ]
        records.append(dict(zip(TEMPLATE_COLUMNS, [_cell(value) for value in values])))
    return records


def render_jobs_csv(jobs: Iterable[Job]) -> str:
    return render_records_csv(_records(jobs), TEMPLATE_COLUMNS)


def export_jobs_csv(path: Path, jobs: Iterable[Job]) -> Path:
    return write_records_to_csv(path, _records(jobs), TEMPLATE_COLUMNS)
