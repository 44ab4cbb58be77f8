"""
Remote provider row source.

The provider exposes one read endpoint per entity kind, each returning a
JSON array of row objects:

    GET {base_url}/employees
    GET {base_url}/shifts

Transport problems and non-2xx responses are surfaced as
SourceTransportError; a 2xx body that is not a JSON array is a
SourceFormatError. No retries: a failing provider aborts the run.
"""
import logging
from typing import Dict, List, Optional

import httpx

from payroll_sync.errors import SourceFormatError, SourceTransportError
from payroll_sync.models.sync import EntityKind
from payroll_sync.sources.base import RawRow

logger = logging.getLogger(__name__)

ENDPOINTS: Dict[EntityKind, str] = {
    EntityKind.EMPLOYEE: "/employees",
    EntityKind.SHIFT: "/shifts",
}


class ProviderRowSource:
    """Thin async reader over the provider's HTTP API."""

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        """
        Args:
            base_url: Provider root, e.g. "http://localhost:4001".
            client: Optional shared httpx.AsyncClient. When omitted a client
                is opened and closed around each request.
            timeout: Request timeout in seconds for self-managed clients.
        """
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._timeout = timeout

    def url_for(self, kind: EntityKind) -> str:
        return self.base_url + ENDPOINTS[kind]

    async def fetch_rows(self, kind: EntityKind) -> List[RawRow]:
        """
        Fetch every row of `kind` from the provider.

        Raises:
            SourceTransportError: unreachable host, timeout or non-2xx status.
            SourceFormatError: response body is not a JSON array.
        """
        url = self.url_for(kind)
        try:
            if self._client is not None:
                response = await self._client.get(url)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SourceTransportError(
                f"Provider returned HTTP {exc.response.status_code} for {url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceTransportError(f"Provider unreachable at {url}: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise SourceFormatError(f"Provider returned invalid JSON for {url}") from exc
        if not isinstance(payload, list):
            raise SourceFormatError(
                f"Expected a JSON array from {url}, got {type(payload).__name__}"
            )

        logger.info("Fetched %d %s rows from %s", len(payload), kind.value, url)
        return payload
