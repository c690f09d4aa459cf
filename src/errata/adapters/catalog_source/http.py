"""HTTP catalog source built on httpx.

`HttpCatalogSource` performs one time-bounded GET against the catalog endpoint
and normalizes the payload into a flat list of `CatalogEntry`. It never
retries; failures are raised to the caller as catalog source errors.

The endpoint is decided by the hosting layer (see
`errata.config.resolve_catalog_endpoint`): either an absolute URL, or a
relative path paired with a client that carries a ``base_url``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from errata.config import FETCH_TIMEOUT_SECONDS
from errata.domain.catalog import CatalogEntry
from errata.interfaces.catalog_source import (
    CatalogFetchError,
    CatalogSource,
    CatalogTimeoutError,
)

logger = logging.getLogger(__name__)

ITEMS_FIELD = "items"  # pragma: no mutate


def normalize_payload(payload: Any) -> list[Any]:
    """Flatten a catalog payload into its list of rows.

    Accepts a bare list or an envelope exposing the list under ``items``;
    anything else normalizes to an empty list.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping) and isinstance(payload.get(ITEMS_FIELD), list):
        return payload[ITEMS_FIELD]
    return []


def parse_entries(payload: Any) -> list[CatalogEntry]:
    """Normalize *payload* and parse its rows, dropping rows that are not mappings."""
    rows = normalize_payload(payload)
    entries = [CatalogEntry.from_mapping(row) for row in rows]
    return [entry for entry in entries if entry is not None]


class HttpCatalogSource(CatalogSource):
    """Catalog source that GETs the catalog over HTTP.

    The request is bound to an httpx timeout; when it elapses httpx cancels the
    in-flight request rather than waiting for a late response.

    Args:
        endpoint: Absolute URL, or a path relative to ``client.base_url``.
        timeout: Request timeout in seconds.
        headers: Extra request headers (e.g. an ``Authorization`` header added
            by the hosting layer).
        client: Shared `httpx.AsyncClient`. When omitted, a short-lived client
            is opened for each fetch.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        headers: Mapping[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout = timeout
        self.headers = dict(headers or {})
        self._client = client

    async def fetch_entries(self) -> list[CatalogEntry]:
        if self._client is not None:
            response = await self._get(self._client)
        else:
            async with httpx.AsyncClient() as client:
                response = await self._get(client)

        if not response.is_success:
            raise CatalogFetchError(self.endpoint, response.status_code)

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Error catalog response from %s is not JSON", self.endpoint)
            payload = None

        entries = parse_entries(payload)
        logger.debug("Fetched %d catalog entries from %s", len(entries), self.endpoint)
        return entries

    async def _get(self, client: httpx.AsyncClient) -> httpx.Response:
        headers = {
            "Accept": "application/json",
            "Cache-Control": "no-store",
            **self.headers,
        }
        try:
            return await client.get(
                self.endpoint,
                headers=headers,
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise CatalogTimeoutError(self.endpoint, self.timeout) from e
        except httpx.HTTPError as e:
            raise CatalogFetchError(self.endpoint, None, str(e) or type(e).__name__) from e
