"""
PayrollSyncService: drives one audited sync run from a row source into the store.

Flow for a run:
  1. Create SyncRun (status=IN_PROGRESS)
  2. Fetch employee rows → validate → upsert Employee rows
  3. Load every employee into a per-run lookup keyed by external_id
  4. Fetch shift rows → validate → resolve employee → derive → upsert Shift rows
  5. Update SyncRun (status=SUCCESS, counts, error log)

Rows that fail validation, or shifts whose employee is unknown, are skipped
and recorded in the run's error log; they never abort the run. Any exception
(source unavailable, storage failure) marks the run ERROR with whatever was
logged so far, then is re-raised.

Every input row ends up either in the inserted/updated counts or as exactly
one error entry.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from payroll_sync.errors import StorageError
from payroll_sync.models.payroll import Employee
from payroll_sync.models.sync import EntityKind, SyncRun, SyncSource, SyncStatus
from payroll_sync.sources.base import RawRow, RowSource
from payroll_sync.sync.derivation import derive_shift
from payroll_sync.sync.store import SyncStore
from payroll_sync.validation.schemas import (
    Invalid,
    validate_employee_row,
    validate_shift_row,
)

logger = logging.getLogger(__name__)


class RowErrorKind(str, Enum):
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"


@dataclass(frozen=True)
class RowError:
    """One skipped input row, as stored in SyncRun.error_log."""

    row: int  # 1-indexed position in the source
    entity: EntityKind
    kind: RowErrorKind
    message: str
    external_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row": self.row,
            "entity": self.entity.value,
            "kind": self.kind.value,
            "message": self.message,
            "external_id": self.external_id,
        }


@dataclass
class SyncResult:
    run_id: int
    status: SyncStatus
    source: SyncSource
    records_inserted: int = 0
    records_updated: int = 0
    records_errored: int = 0
    errors: List[RowError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "status": self.status.value,
            "source": self.source.value,
            "records_inserted": self.records_inserted,
            "records_updated": self.records_updated,
            "records_errored": self.records_errored,
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass
class _RunState:
    """Mutable tallies for one run, kept so a failed run can still be recorded."""

    inserted: int = 0
    updated: int = 0
    errors: List[RowError] = field(default_factory=list)

    def tally(self, created: bool) -> None:
        if created:
            self.inserted += 1
        else:
            self.updated += 1

    def counts(self) -> Dict[str, int]:
        return {
            "records_inserted": self.inserted,
            "records_updated": self.updated,
            "records_errored": len(self.errors),
        }

    def error_log(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.errors]


def _raw_external_id(raw: Any) -> Optional[str]:
    """Best-effort external_id of a raw row, for error entries."""
    if not isinstance(raw, Mapping):
        return None
    value = raw.get("external_id")
    if value is None or isinstance(value, (dict, list)):
        return None
    return str(value).strip() or None


class PayrollSyncService:
    """Runs employee + shift reconciliation from a selectable row source."""

    def __init__(self, store: SyncStore, row_sources: Mapping[SyncSource, RowSource]):
        """
        Args:
            store: SyncStore the run reads from and writes to.
            row_sources: One RowSource per SyncSource (see build_row_sources()).
        """
        self.store = store
        self.row_sources = dict(row_sources)

    async def run_sync(self, source: Union[SyncSource, str]) -> SyncResult:
        """
        Run one full sync from `source`.

        Args:
            source: SyncSource.FILE or SyncSource.API (or their string values).

        Returns:
            SyncResult for the finished run, including skipped-row errors.

        Raises:
            ValueError: unknown or unconfigured source (no run is created).
            SourceUnavailableError / StorageError / anything else raised while
                the run is in progress, after the run is marked ERROR.
        """
        source = SyncSource(str(getattr(source, "value", source)).upper())
        if source not in self.row_sources:
            raise ValueError(f"No row source configured for {source.value}")
        row_source = self.row_sources[source]

        run = self.store.create_run(source)
        state = _RunState()
        logger.info("Sync run %s started (source=%s)", run.id, source.value)

        try:
            await self._sync_employees(row_source, state)
            employees = {e.external_id: e for e in self.store.find_all_employees()}
            await self._sync_shifts(row_source, employees, state)
            self.store.update_run(
                run.id,
                SyncStatus.SUCCESS,
                counts=state.counts(),
                error_log=state.error_log(),
            )
        except BaseException:  # includes cancellation
            logger.exception("Sync run %s failed", run.id)
            self._record_failure(run, state)
            raise

        logger.info(
            "Sync run %s finished: %d inserted, %d updated, %d errored",
            run.id, state.inserted, state.updated, len(state.errors),
        )
        return SyncResult(
            run_id=run.id,
            status=SyncStatus.SUCCESS,
            source=source,
            records_inserted=state.inserted,
            records_updated=state.updated,
            records_errored=len(state.errors),
            errors=list(state.errors),
        )

    # ─── Phases ───────────────────────────────────────────────────────────────

    async def _sync_employees(self, row_source: RowSource, state: _RunState) -> None:
        rows = await row_source.fetch_rows(EntityKind.EMPLOYEE)
        for index, raw in enumerate(rows, start=1):
            outcome = validate_employee_row(raw)
            if isinstance(outcome, Invalid):
                self._skip(state, index, EntityKind.EMPLOYEE, RowErrorKind.VALIDATION,
                           outcome.message, _raw_external_id(raw))
                continue

            record = outcome.record
            created = self.store.upsert_employee(record.external_id, record.to_fields())
            state.tally(created)

    async def _sync_shifts(
        self,
        row_source: RowSource,
        employees: Dict[str, Employee],
        state: _RunState,
    ) -> None:
        rows = await row_source.fetch_rows(EntityKind.SHIFT)
        for index, raw in enumerate(rows, start=1):
            outcome = validate_shift_row(raw)
            if isinstance(outcome, Invalid):
                self._skip(state, index, EntityKind.SHIFT, RowErrorKind.VALIDATION,
                           outcome.message, _raw_external_id(raw))
                continue

            record = outcome.record
            employee = employees.get(record.employee_external_id)
            if employee is None:
                self._skip(state, index, EntityKind.SHIFT, RowErrorKind.BUSINESS_RULE,
                           f"Employee not found: {record.employee_external_id}",
                           record.external_id)
                continue

            derived = derive_shift(
                record.start_at,
                record.end_at,
                record.break_minutes,
                employee.hourly_rate_cents,
            )
            created = self.store.upsert_shift(
                record.external_id,
                {
                    "employee_external_id": record.employee_external_id,
                    "start_at": record.start_at,
                    "end_at": record.end_at,
                    "break_minutes": record.break_minutes,
                    "worked_minutes": derived.worked_minutes,
                    "earnings_cents": derived.earnings_cents,
                },
            )
            state.tally(created)

    # ─── Internal helpers ─────────────────────────────────────────────────────

    @staticmethod
    def _skip(
        state: _RunState,
        row: int,
        entity: EntityKind,
        kind: RowErrorKind,
        message: str,
        external_id: Optional[str],
    ) -> None:
        logger.warning("Skipping %s row %d (%s): %s", entity.value, row, external_id, message)
        state.errors.append(
            RowError(row=row, entity=entity, kind=kind, message=message,
                     external_id=external_id)
        )

    def _record_failure(self, run: SyncRun, state: _RunState) -> None:
        """Mark the run ERROR, keeping partial counts and errors. Best effort."""
        try:
            self.store.update_run(
                run.id,
                SyncStatus.ERROR,
                counts=state.counts(),
                error_log=state.error_log(),
            )
        except StorageError:
            logger.exception("Could not record failure of sync run %s", run.id)
