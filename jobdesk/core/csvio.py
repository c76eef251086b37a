from __future__ import annotations

from pathlib import Path
from typing import Iterable, Sequence

import pandas as pd


def render_records_csv(rows: Iterable[dict], columns: Sequence[str]) -> str:
    df = pd.DataFrame(list(rows), columns=list(columns))
    return df.to_csv(index=False, lineterminator="\n")


def write_records_to_csv(path: Path, rows: Iterable[dict], columns: Sequence[str]) -> Path:
    df = pd.DataFrame(list(rows), columns=list(columns))
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False, lineterminator="\n")
    return path
