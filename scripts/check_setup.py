#!/usr/bin/env python3
from __future__ import annotations

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from inspection.config import settings
from inspection.infra.repositories import load_dataset
from inspection.infra.store_client import SheetStoreClient


def main() -> None:
    print("== ENV VALIDATION ==")
    print(
        json.dumps(
            {
                "APP_ENV": settings.app_env,
                "STORE_URL_VALID": settings.store_url_valid(),
                "STORE_TIMEOUT_SECONDS": settings.store_timeout_seconds,
                "PROPAGATION_MODE": settings.propagation_mode,
                "SESSION_FILE": settings.session_file,
            },
            indent=2,
        )
    )

    if not settings.store_url_valid():
        print("\nStore URL invalid; the application will run on the built-in dataset.")
        return

    print("\n== STORE PROBE ==")
    dataset = load_dataset(SheetStoreClient(settings.store_url, timeout=settings.store_timeout_seconds))
    print(
        json.dumps(
            {
                "source": dataset.source,
                "error": dataset.error,
                "sites": len(dataset.sites),
                "officers": len(dataset.officers),
                "reports": len(dataset.reports),
                "duplicate_officer_names": sorted(
                    {o.name for o in dataset.officers if [p.name for p in dataset.officers].count(o.name) > 1}
                ),
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    main()
