"""Sync trigger and run history routes."""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from payroll_sync.api.deps import get_store, get_sync_service
from payroll_sync.models.sync import SyncRun, SyncSource
from payroll_sync.sync.service import PayrollSyncService
from payroll_sync.sync.store import SyncStore

logger = logging.getLogger(__name__)

router = APIRouter()


class RowErrorResponse(BaseModel):
    row: int
    entity: str
    kind: str
    message: str
    external_id: Optional[str]


class SyncTriggerResponse(BaseModel):
    run_id: int
    status: str
    source: str
    records_inserted: int
    records_updated: int
    records_errored: int
    errors: List[RowErrorResponse]


class SyncRunResponse(BaseModel):
    id: int
    started_at: datetime
    finished_at: Optional[datetime]
    status: str
    source: str
    records_inserted: int
    records_updated: int
    records_errored: int
    error_log: List[Dict[str, Any]]


def _parse_source(source: str) -> SyncSource:
    try:
        return SyncSource(source.strip().upper())
    except ValueError:
        raise HTTPException(status_code=400, detail='source must be "file" or "api"')


@router.post("/sync", response_model=SyncTriggerResponse)
async def trigger_sync(
    source: str = "file",
    service: PayrollSyncService = Depends(get_sync_service),
):
    """
    Run a sync from the file or API source and wait for it to finish.

    Row-level problems come back in `errors`; a failed run answers 500 and
    is recorded with status ERROR.
    """
    selected = _parse_source(source)
    try:
        result = await service.run_sync(selected)
    except Exception:
        logger.exception("Sync from %s failed", selected.value)
        raise HTTPException(status_code=500, detail="Sync failed")
    return result.to_dict()


@router.get("/sync-runs", response_model=List[SyncRunResponse])
def list_sync_runs(
    limit: int = Query(50, ge=1, le=200),
    store: SyncStore = Depends(get_store),
):
    """Recent sync runs, newest first."""
    return store.list_runs(limit=limit)


@router.get("/sync-runs/{run_id}", response_model=SyncRunResponse)
def get_sync_run(run_id: int, store: SyncStore = Depends(get_store)):
    run: Optional[SyncRun] = store.get_run(run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Sync run not found")
    return run
