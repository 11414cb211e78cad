#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from inspection.config import settings
from inspection.domain.metrics import compute_officer_stats, period_summary
from inspection.infra.logger import init_logging
from inspection.infra.repositories import load_dataset
from inspection.infra.store_client import SheetStoreClient


def parse_args() -> argparse.Namespace:
    today = date.today()
    parser = argparse.ArgumentParser(description="Officer inspection activity against monthly quotas")
    parser.add_argument("--year", type=int, default=today.year, help="Calendar year")
    parser.add_argument("--month", type=int, default=today.month, help="Month number (1-12)")
    parser.add_argument("--level", action="append", default=[], help="Only include these levels (repeatable)")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    if not 1 <= args.month <= 12:
        raise SystemExit("--month must be between 1 and 12")
    init_logging(settings)

    dataset = load_dataset(SheetStoreClient(settings.store_url, timeout=settings.store_timeout_seconds))
    stats = compute_officer_stats(args.year, args.month, dataset.officers, dataset.reports, len(dataset.sites))
    if args.level:
        wanted = {lvl.upper() for lvl in args.level}
        stats = [s for s in stats if s.level in wanted]
    summary = period_summary(dataset.reports, args.year, args.month)

    print(
        json.dumps(
            {
                "period": f"{args.year:04d}-{args.month:02d}",
                "source": dataset.source,
                "summary": {
                    "inspections": summary.inspections,
                    "active_sites": summary.active_sites,
                    "pending": summary.pending,
                },
                "officers": [
                    {
                        "name": s.name,
                        "level": s.level,
                        "visits": s.visit_count,
                        "target": s.target_label,
                        "percentage": round(s.percentage, 1),
                        "band": s.color.value,
                    }
                    for s in stats
                ],
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    main()
