#!/usr/bin/env python
from __future__ import annotations

import argparse
import csv
import random
from datetime import date, timedelta
from pathlib import Path

HEADER = [
    "Kategori",
    "Sub Kategori",
    "Tanggal Input (YYYY-MM-DD)",
    "Cabang/Dept",
    "Jenis Pekerjaan",
    "Status",
    "Dateline (YYYY-MM-DD)",
]

CATEGORIES = {
    "Penyesuaian": ["Harga Jual", "Routing", "Costing"],
    "Request Data": ["KCU", "Nasional", "Project"],
    "Problem": ["Tarif", "SLA", "Biaya", "Routing"],
    "Produksi Master Data": ["Cabang", "Nasional"],
}

BRANCHES = ["Jakarta", "Bandung", "Surabaya", "Medan", "Makassar"]
STATUSES = ["Pending", "In Progress", "Completed"]


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate a sample bulk import CSV")
    parser.add_argument("--output", required=True, help="Output file path (.csv)")
    parser.add_argument("--rows", type=int, default=10, help="Number of job rows")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for repeatable output")
    args = parser.parse_args()

    rng = random.Random(args.seed)
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)

    today = date.today()
    with output.open("w", newline="", encoding="utf-8") as fp:
        writer = csv.writer(fp)
        writer.writerow(HEADER)
        for _ in range(args.rows):
            category = rng.choice(list(CATEGORIES))
            intake = today - timedelta(days=rng.randint(0, 30))
            writer.writerow([
                category,
                rng.choice(CATEGORIES[category]),
                intake.isoformat(),
                rng.choice(BRANCHES),
                f"Update {category}",
                rng.choice(STATUSES),
                (intake + timedelta(days=rng.randint(1, 21))).isoformat(),
            ])

    print(f"Sample import CSV written: {output}")


if __name__ == "__main__":
    main()
