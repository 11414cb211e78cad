#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

import requests

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from inspection.config import settings
from inspection.infra.logger import init_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay unacknowledged store writes held by a running API")
    parser.add_argument(
        "--api-url",
        default=os.getenv("INSPECTION_API_URL", "http://127.0.0.1:8000"),
        help="Base URL of the inspection API",
    )
    parser.add_argument("--officer-id", required=True, help="Administrator id to sign in as")
    parser.add_argument(
        "--password",
        default=os.getenv("INSPECTION_API_PASSWORD", ""),
        help="Administrator password (defaults to INSPECTION_API_PASSWORD)",
    )
    parser.add_argument("--limit", type=int, default=None, help="Max entries replayed in this run")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    init_logging(settings)
    base = args.api_url.rstrip("/")
    timeout = settings.store_timeout_seconds
    try:
        res = requests.post(
            f"{base}/auth/login",
            json={"officer_id": args.officer_id, "password": args.password},
            timeout=timeout,
        )
        res.raise_for_status()
        headers = {"X-Session-Token": res.json()["token"]}
    except requests.RequestException as exc:
        raise SystemExit(f"Sign-in against {base} failed: {exc}") from exc

    try:
        res = requests.get(f"{base}/outbox", headers=headers, timeout=timeout)
        res.raise_for_status()
        entries: list[dict[str, Any]] = res.json()
    except requests.RequestException as exc:
        raise SystemExit(f"Cannot read outbox from {base}: {exc}") from exc

    pending = [e for e in entries if not e.get("acknowledged")]
    if not pending:
        print(json.dumps({"pending": 0, "attempted": 0, "acknowledged": 0, "remaining": 0}, indent=2))
        return

    body: dict[str, Any] = {}
    if args.limit is not None:
        body["limit"] = max(1, args.limit)
    try:
        res = requests.post(f"{base}/outbox/replay", json=body, headers=headers, timeout=timeout)
        res.raise_for_status()
        summary = res.json()
    except requests.RequestException as exc:
        raise SystemExit(f"Replay request failed: {exc}") from exc

    print(
        json.dumps(
            {
                "pending": len(pending),
                "attempted": summary.get("attempted", 0),
                "acknowledged": summary.get("acknowledged", 0),
                "remaining": summary.get("remaining", len(pending)),
                "failures": summary.get("failures", [])[:10],
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    main()
