"""FastAPI dependencies: store, row sources and sync service."""
from typing import Dict

from fastapi import Depends

from payroll_sync.config import get_settings
from payroll_sync.db.engine import get_engine
from payroll_sync.models.sync import SyncSource
from payroll_sync.sources.base import RowSource, build_row_sources
from payroll_sync.sync.service import PayrollSyncService
from payroll_sync.sync.store import SyncStore


def get_store() -> SyncStore:
    return SyncStore(get_engine())


def get_row_sources() -> Dict[SyncSource, RowSource]:
    return build_row_sources(get_settings())


def get_sync_service(
    store: SyncStore = Depends(get_store),
    row_sources: Dict[SyncSource, RowSource] = Depends(get_row_sources),
) -> PayrollSyncService:
    return PayrollSyncService(store=store, row_sources=row_sources)
