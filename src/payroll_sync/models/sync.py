"""Sync run audit model and the enumerations shared by the sync engine."""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from payroll_sync.models.payroll import naive_utc_column


class SyncStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class SyncSource(str, Enum):
    FILE = "FILE"
    API = "API"


class EntityKind(str, Enum):
    EMPLOYEE = "employee"
    SHIFT = "shift"


class SyncRun(SQLModel, table=True):
    """One audited invocation of the sync engine."""

    id: Optional[int] = Field(default=None, primary_key=True)
    started_at: datetime = Field(sa_column=naive_utc_column(index=True, nullable=False))
    finished_at: Optional[datetime] = Field(
        default=None, sa_column=naive_utc_column(nullable=True)
    )  # None while IN_PROGRESS
    status: str = SyncStatus.IN_PROGRESS.value
    source: str  # "FILE" or "API"

    records_inserted: int = 0
    records_updated: int = 0
    records_errored: int = 0

    # Ordered row error entries: {row, entity, kind, message, external_id}
    error_log: List[Dict[str, Any]] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
