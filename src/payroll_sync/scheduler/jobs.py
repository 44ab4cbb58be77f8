"""
APScheduler jobs for background sync.

A nightly sync keeps the store current even when nobody triggers a run
through the API. The scheduler runs in the process started by
`python -m payroll_sync`.
"""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from payroll_sync.config import get_settings

logger = logging.getLogger(__name__)


def build_scheduler(engine) -> AsyncIOScheduler:
    """
    Create and configure the APScheduler.

    Args:
        engine: SQLAlchemy engine to pass to the sync service.

    Returns:
        Configured AsyncIOScheduler (not yet started).
    """
    settings = get_settings()
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        _nightly_sync,
        trigger="cron",
        hour=settings.sync_hour,
        minute=0,
        id="nightly_sync",
        replace_existing=True,
        kwargs={"engine": engine},
    )

    return scheduler


async def _nightly_sync(engine) -> None:
    """
    Nightly job: one full sync from the configured source.

    Idempotent: re-running against an unchanged source changes nothing.
    Failures are logged; the failed run is already recorded as ERROR.
    """
    from payroll_sync.sources.base import build_row_sources
    from payroll_sync.sync.service import PayrollSyncService
    from payroll_sync.sync.store import SyncStore

    settings = get_settings()
    source = settings.scheduled_sync_source
    logger.info("Nightly sync starting (source=%s)", source)

    try:
        service = PayrollSyncService(
            store=SyncStore(engine),
            row_sources=build_row_sources(settings),
        )
        result = await service.run_sync(source)
        logger.info(
            "Nightly sync run %s done: %d errored rows",
            result.run_id,
            result.records_errored,
        )
    except Exception as exc:
        logger.error("Nightly sync failed: %s", exc)
