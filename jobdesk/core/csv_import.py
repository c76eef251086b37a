"""Bulk job import from the global CSV template."""

from __future__ import annotations

import logging
import re
from datetime import date

from jobdesk.core.csvio import render_records_csv
from jobdesk.core.schema import STATUS_ALIASES, Job
from jobdesk.domain import ImportOutcome

logger = logging.getLogger(__name__)

TEMPLATE_COLUMNS = [
    "Kategori",
    "Sub Kategori",
    "Tanggal Input (YYYY-MM-DD)",
    "Cabang/Dept",
    "Jenis Pekerjaan",
    "Status",
    "Dateline (YYYY-MM-DD)",
]

TEMPLATE_EXAMPLE = ["Penyesuaian", "Harga Jual", "2024-03-20", "Jakarta", "Update Tarif", "Pending", "2024-03-25"]

IMPORT_FAILED_MESSAGE = "Gagal membaca file. Pastikan menggunakan Template Global yang sesuai."

MIN_COLUMNS = len(TEMPLATE_COLUMNS)

_LINE_SPLIT = re.compile(r"\r\n|\n")
_CELL_SPLIT = re.compile(r"[,;]")


def build_template() -> str:
    """Render the downloadable import template with one example row."""

    return render_records_csv([dict(zip(TEMPLATE_COLUMNS, TEMPLATE_EXAMPLE))], TEMPLATE_COLUMNS)


def _row_to_job(cols: list[str], today: str) -> Job:
    status = STATUS_ALIASES.get(cols[5].strip(), "Pending")
    return Job(
        category=cols[0].strip(),
        sub_category=cols[1].strip(),
        date_input=cols[2].strip() or today,
        branch_dept=cols[3].strip() or "Unknown",
        job_type=cols[4].strip() or "Imported Job",
        status=status,
        deadline=cols[6].strip() or today,
    )


def parse_import(text: str, today: date | None = None) -> ImportOutcome:
    """Parse raw CSV text into new jobs.

    The first line is a header. Rows split on ``,`` or ``;`` and need at
    least seven columns with a category and sub-category; anything else is
    dropped without a per-row error. Quoted cells are not supported.
    """

    today_text = (today or date.today()).isoformat()
    lines = _LINE_SPLIT.split(text)

    jobs: list[Job] = []
    skipped = 0
    for line in lines[1:]:
        if not line.strip():
            continue
        cols = _CELL_SPLIT.split(line)
        if len(cols) < MIN_COLUMNS or not cols[0].strip() or not cols[1].strip():
            skipped += 1
            continue
        jobs.append(_row_to_job(cols, today_text))

    if skipped:
        logger.info("Skipped %d invalid import rows", skipped)
    if not jobs:
        return ImportOutcome(jobs=[], error=IMPORT_FAILED_MESSAGE)
    return ImportOutcome(jobs=jobs)
