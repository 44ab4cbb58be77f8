"""
Row source contract and wiring.

A row source turns a provider (a file on disk or a remote HTTP API) into a
fully materialized, ordered list of raw rows for one entity kind. Raw rows
are untyped: nothing about their shape is assumed until the validation
layer has looked at them.
"""
from typing import Any, Dict, List, Optional, Protocol

import httpx

from payroll_sync.config import Settings
from payroll_sync.models.sync import EntityKind, SyncSource

# Field name -> str / int / float / bool / None, in source column order
RawRow = Dict[str, Any]


class RowSource(Protocol):
    async def fetch_rows(self, kind: EntityKind) -> List[RawRow]:
        """Return every row of the given kind, in source order."""
        ...


def build_row_sources(
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Dict[SyncSource, RowSource]:
    """
    Build one row source per SyncSource from configuration.

    Args:
        settings: Application settings (data dir, file names, provider URL).
        http_client: Optional pre-built httpx client for the API source
            (tests pass one with a mock transport).
    """
    from payroll_sync.sources.files import FileRowSource
    from payroll_sync.sources.provider import ProviderRowSource

    return {
        SyncSource.FILE: FileRowSource(
            settings.data_dir,
            {
                EntityKind.EMPLOYEE: settings.employees_file,
                EntityKind.SHIFT: settings.shifts_file,
            },
        ),
        SyncSource.API: ProviderRowSource(
            settings.provider_base_url,
            client=http_client,
            timeout=settings.provider_timeout_seconds,
        ),
    }
