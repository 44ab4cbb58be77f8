"""Tests for APScheduler job configuration and nightly sync job body."""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from payroll_sync.errors import SourceNotFoundError
from payroll_sync.scheduler.jobs import build_scheduler, _nightly_sync


class TestBuildScheduler:
    def test_returns_scheduler(self):
        scheduler = build_scheduler(MagicMock())
        assert isinstance(scheduler, AsyncIOScheduler)

    def test_nightly_sync_job_registered(self):
        scheduler = build_scheduler(MagicMock())
        job_ids = [job.id for job in scheduler.get_jobs()]
        assert "nightly_sync" in job_ids

    def test_nightly_sync_is_cron(self):
        scheduler = build_scheduler(MagicMock())
        job = next(j for j in scheduler.get_jobs() if j.id == "nightly_sync")
        assert job.trigger.__class__.__name__ == "CronTrigger"

    def test_sync_hour_from_settings(self):
        """Scheduler respects the SYNC_HOUR setting."""
        with patch("payroll_sync.scheduler.jobs.get_settings") as mock_settings:
            mock_settings.return_value.sync_hour = 4
            scheduler = build_scheduler(MagicMock())

        job = next(j for j in scheduler.get_jobs() if j.id == "nightly_sync")
        fields = {f.name: f for f in job.trigger.fields}
        assert str(fields["hour"]) == "4"

    def test_scheduler_not_running_on_creation(self):
        """build_scheduler should not auto-start."""
        scheduler = build_scheduler(MagicMock())
        assert not scheduler.running


# ─── _nightly_sync job body ────────────────────────────────────────────────────

class TestNightlySyncJob:
    """Tests for the _nightly_sync() async function.

    PayrollSyncService and build_row_sources are lazily imported inside the
    function body, so we patch them at their source module paths.
    """

    @pytest.mark.asyncio
    async def test_runs_sync_from_configured_source(self):
        mock_service = MagicMock()
        mock_service.run_sync = AsyncMock(return_value=MagicMock(run_id=1, records_errored=0))

        with patch("payroll_sync.sync.service.PayrollSyncService", return_value=mock_service), \
             patch("payroll_sync.sources.base.build_row_sources", return_value={}), \
             patch("payroll_sync.scheduler.jobs.get_settings") as mock_settings:
            mock_settings.return_value.scheduled_sync_source = "API"
            await _nightly_sync(engine=MagicMock())

        mock_service.run_sync.assert_awaited_once_with("API")

    @pytest.mark.asyncio
    async def test_exception_does_not_propagate(self):
        """Nightly sync catches failures so the scheduler stays alive."""
        mock_service = MagicMock()
        mock_service.run_sync = AsyncMock(side_effect=SourceNotFoundError("File not found"))

        with patch("payroll_sync.sync.service.PayrollSyncService", return_value=mock_service), \
             patch("payroll_sync.sources.base.build_row_sources", return_value={}), \
             patch("payroll_sync.scheduler.jobs.get_settings") as mock_settings:
            mock_settings.return_value.scheduled_sync_source = "FILE"
            # Should not raise
            await _nightly_sync(engine=MagicMock())

        mock_service.run_sync.assert_awaited_once()
