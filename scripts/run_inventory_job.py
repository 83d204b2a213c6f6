"""
Run one inventory job from CLI.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any

from app.inventory.errors import InventoryListUnavailableError
from app.services.inventory_jobs_service import InventoryJobsService
from db.session import dispose_engine

JOBS = ("sync-inventory", "ai-scraper", "ai-self-review")


async def _run(job: str, triggered_by: str) -> dict[str, Any]:
    service = InventoryJobsService()
    try:
        if job == "sync-inventory":
            summary: Any = await service.run_sync(triggered_by=triggered_by)
        elif job == "ai-scraper":
            summary = await service.run_ai_verification(triggered_by=triggered_by)
        else:
            summary = await service.run_self_review(triggered_by=triggered_by)
    finally:
        await dispose_engine()

    payload = {"success": True, "job": job, **asdict(summary)}
    payload["timestamp"] = datetime.now(timezone.utc).isoformat()
    return payload


def main() -> int:
    parser = argparse.ArgumentParser(description="Run one inventory verification job.")
    parser.add_argument("job", choices=JOBS, help="Job to run.")
    parser.add_argument(
        "--triggered-by",
        dest="triggered_by",
        default="cli",
        help="Marker recorded in the run log.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        payload = asyncio.run(_run(args.job, args.triggered_by))
    except InventoryListUnavailableError as exc:
        print(json.dumps({"success": False, "job": args.job, "error": str(exc)}, indent=2))
        return 1

    print(json.dumps(payload, indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
