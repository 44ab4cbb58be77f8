"""
SyncStore: persistence for employees, shifts and sync runs.

Every operation opens its own short Session and commits before returning,
so each upsert is atomic on its own and nothing wider is locked. Any
SQLAlchemy failure is re-raised as StorageError; nothing here retries.

Upserts are keyed on external_id. An existing row keeps its surrogate id
and created_at, every other column is overwritten with the incoming
values, so applying the same input twice leaves the same final state.
"""
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Dict, List, Optional, Type, Union

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from payroll_sync.errors import StorageError
from payroll_sync.models.payroll import Employee, Shift
from payroll_sync.models.sync import EntityKind, SyncRun, SyncSource, SyncStatus

MODELS: Dict[EntityKind, Type[SQLModel]] = {
    EntityKind.EMPLOYEE: Employee,
    EntityKind.SHIFT: Shift,
}


def utcnow() -> datetime:
    """Current time as naive UTC, the convention for every stored timestamp."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _storage_errors(fn):
    """Re-raise SQLAlchemy failures from `fn` as StorageError."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except SQLAlchemyError as exc:
            raise StorageError(f"{fn.__name__} failed: {exc}") from exc

    return wrapper


class SyncStore:
    """Reconciliation store over a SQLAlchemy engine."""

    def __init__(self, engine):
        """
        Args:
            engine: SQLAlchemy engine (SQLModel create_engine result).
        """
        self.engine = engine

    # ─── Upserts ──────────────────────────────────────────────────────────────

    @_storage_errors
    def upsert(self, kind: EntityKind, external_id: str, fields: Dict[str, Any]) -> bool:
        """
        Create or fully replace the record with this external id.

        Args:
            kind: Which table to write.
            external_id: Reconciliation key.
            fields: Every mutable column of the record.

        Returns:
            True if a new row was inserted, False if an existing one was replaced.
        """
        model = MODELS[kind]
        with Session(self.engine) as s:
            existing = s.exec(
                select(model).where(model.external_id == external_id)
            ).first()

            if existing:
                for k, v in fields.items():
                    setattr(existing, k, v)
                s.add(existing)
                created = False
            else:
                s.add(model(external_id=external_id, **fields))
                created = True
            s.commit()
        return created

    def upsert_employee(self, external_id: str, fields: Dict[str, Any]) -> bool:
        return self.upsert(EntityKind.EMPLOYEE, external_id, fields)

    def upsert_shift(self, external_id: str, fields: Dict[str, Any]) -> bool:
        return self.upsert(EntityKind.SHIFT, external_id, fields)

    # ─── Reads ────────────────────────────────────────────────────────────────

    @_storage_errors
    def bulk_load(self, kind: EntityKind) -> List[SQLModel]:
        """Return every current record of `kind`."""
        model = MODELS[kind]
        with Session(self.engine) as s:
            return list(s.exec(select(model)).all())

    def find_all_employees(self) -> List[Employee]:
        return self.bulk_load(EntityKind.EMPLOYEE)

    @_storage_errors
    def list_employees(self) -> List[Employee]:
        """All employees ordered by external id."""
        with Session(self.engine) as s:
            return list(s.exec(select(Employee).order_by(Employee.external_id)).all())

    @_storage_errors
    def find_employee_by_external_id(self, external_id: str) -> Optional[Employee]:
        with Session(self.engine) as s:
            return s.exec(
                select(Employee).where(Employee.external_id == external_id)
            ).first()

    @_storage_errors
    def list_shifts_for_employee(
        self,
        external_id: str,
        start_from: Optional[datetime] = None,
        start_to: Optional[datetime] = None,
    ) -> List[Shift]:
        """
        Shifts of one employee, newest start first.

        Args:
            external_id: Employee external id.
            start_from: Inclusive lower bound on start_at.
            start_to: Exclusive upper bound on start_at.
        """
        query = select(Shift).where(Shift.employee_external_id == external_id)
        if start_from is not None:
            query = query.where(Shift.start_at >= start_from)
        if start_to is not None:
            query = query.where(Shift.start_at < start_to)
        with Session(self.engine) as s:
            return list(s.exec(query.order_by(Shift.start_at.desc())).all())

    @_storage_errors
    def last_shift_end_by_employee(self) -> Dict[str, datetime]:
        """Latest end_at per employee external id, over all shifts."""
        with Session(self.engine) as s:
            rows = s.exec(
                select(Shift.employee_external_id, func.max(Shift.end_at))
                .group_by(Shift.employee_external_id)
            ).all()
        return {emp_id: last_end for emp_id, last_end in rows}

    @_storage_errors
    def earnings_since_by_employee(self, since: datetime) -> Dict[str, int]:
        """Sum of earnings_cents per employee for shifts starting at or after `since`."""
        with Session(self.engine) as s:
            rows = s.exec(
                select(Shift.employee_external_id, func.sum(Shift.earnings_cents))
                .where(Shift.start_at >= since)
                .group_by(Shift.employee_external_id)
            ).all()
        return {emp_id: int(total or 0) for emp_id, total in rows}

    # ─── Sync runs ────────────────────────────────────────────────────────────

    @_storage_errors
    def create_run(self, source: Union[SyncSource, str]) -> SyncRun:
        """Insert a new IN_PROGRESS run started now."""
        run = SyncRun(
            started_at=utcnow(),
            status=SyncStatus.IN_PROGRESS.value,
            source=SyncSource(source).value,
        )
        with Session(self.engine) as s:
            s.add(run)
            s.commit()
            s.refresh(run)
        return run

    @_storage_errors
    def update_run(
        self,
        run_id: int,
        status: Union[SyncStatus, str],
        finished_at: Optional[datetime] = None,
        counts: Optional[Dict[str, int]] = None,
        error_log: Optional[List[Dict[str, Any]]] = None,
    ) -> SyncRun:
        """
        Move a run to `status` and record its outcome.

        Args:
            run_id: SyncRun primary key.
            status: New status.
            finished_at: Completion time; defaults to now for terminal statuses.
            counts: Any of records_inserted / records_updated / records_errored.
            error_log: Replacement error log (list of row error dicts).
        """
        status = SyncStatus(status)
        with Session(self.engine) as s:
            run = s.get(SyncRun, run_id)
            if run is None:
                raise StorageError(f"Sync run {run_id} does not exist")
            run.status = status.value
            if finished_at is None and status != SyncStatus.IN_PROGRESS:
                finished_at = utcnow()
            run.finished_at = finished_at
            for name, value in (counts or {}).items():
                setattr(run, name, value)
            if error_log is not None:
                run.error_log = list(error_log)
            s.add(run)
            s.commit()
            s.refresh(run)
        return run

    @_storage_errors
    def list_runs(self, limit: int = 50) -> List[SyncRun]:
        """Most recent runs first."""
        with Session(self.engine) as s:
            return list(
                s.exec(
                    select(SyncRun)
                    .order_by(SyncRun.started_at.desc(), SyncRun.id.desc())
                    .limit(limit)
                ).all()
            )

    @_storage_errors
    def get_run(self, run_id: int) -> Optional[SyncRun]:
        with Session(self.engine) as s:
            return s.get(SyncRun, run_id)
