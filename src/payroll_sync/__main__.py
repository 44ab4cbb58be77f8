"""
Main entrypoint: one-off syncs, run history, or the nightly scheduler.

The HTTP API runs separately under uvicorn.

Usage:
    python -m payroll_sync sync --source api    # one sync, prints the result as JSON
    python -m payroll_sync runs --limit 10      # recent sync runs
    python -m payroll_sync                      # starts the nightly scheduler
    uvicorn payroll_sync.api.main:app --host 0.0.0.0 --port 4000  # starts API
"""
import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


async def _run_sync(source: str) -> int:
    from payroll_sync.config import get_settings
    from payroll_sync.db.engine import get_engine
    from payroll_sync.sources.base import build_row_sources
    from payroll_sync.sync.service import PayrollSyncService
    from payroll_sync.sync.store import SyncStore

    service = PayrollSyncService(
        store=SyncStore(get_engine()),
        row_sources=build_row_sources(get_settings()),
    )
    try:
        result = await service.run_sync(source)
    except Exception:
        # run_sync has already marked the run ERROR
        logger.exception("Sync failed")
        return 1

    print(json.dumps(result.to_dict(), indent=2))
    return 0


def _list_runs(limit: int) -> int:
    from payroll_sync.db.engine import get_engine
    from payroll_sync.sync.store import SyncStore

    runs = SyncStore(get_engine()).list_runs(limit=limit)
    print(json.dumps([run.model_dump(mode="json") for run in runs], indent=2))
    return 0


async def _run_scheduler() -> None:
    from payroll_sync.config import get_settings
    from payroll_sync.db.engine import get_engine
    from payroll_sync.scheduler.jobs import build_scheduler

    settings = get_settings()
    scheduler = build_scheduler(get_engine())
    scheduler.start()
    logger.info(
        "Scheduler started (nightly %s sync at %02d:00)",
        settings.scheduled_sync_source,
        settings.sync_hour,
    )

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutting down...")
    finally:
        scheduler.shutdown()


def build_parser() -> argparse.ArgumentParser:
    from payroll_sync.config import get_settings

    parser = argparse.ArgumentParser(prog="payroll_sync", description="Payroll sync engine")
    sub = parser.add_subparsers(dest="command")

    sync = sub.add_parser("sync", help="Run one sync and print the result")
    sync.add_argument(
        "--source",
        type=str.upper,
        choices=["FILE", "API"],
        default="FILE",
        help="Row source to sync from (default: file)",
    )

    runs = sub.add_parser("runs", help="List recent sync runs")
    runs.add_argument(
        "--limit",
        type=int,
        default=get_settings().recent_runs_limit,
        help="Number of runs to show",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "sync":
        return asyncio.run(_run_sync(args.source))
    if args.command == "runs":
        return _list_runs(args.limit)
    asyncio.run(_run_scheduler())
    return 0


if __name__ == "__main__":
    sys.exit(main())
