"""Catalog source interface and the errors raised through it."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from errata.domain.catalog import CatalogEntry

# pylint: disable=too-few-public-methods


class CatalogSourceError(Exception):
    """Base class for catalog source errors."""


class CatalogFetchError(CatalogSourceError):
    """The catalog request failed or returned a non-2xx status.

    Attributes:
        endpoint (str): The endpoint that was requested.
        status_code (int | None): The HTTP status, or None for transport errors.
    """

    def __init__(
        self, endpoint: str, status_code: int | None, cause: str | None = None
    ) -> None:
        detail = f"status {status_code}" if status_code is not None else cause
        super().__init__(f"Failed to fetch error catalog from {endpoint} ({detail})")
        self.endpoint = endpoint
        self.status_code = status_code


class CatalogTimeoutError(CatalogSourceError):
    """The catalog request did not complete within its timeout.

    Attributes:
        endpoint (str): The endpoint that was requested.
        timeout (float): The timeout in seconds.
    """

    def __init__(self, endpoint: str, timeout: float) -> None:
        super().__init__(
            f"Timed out after {timeout}s fetching error catalog from {endpoint}"
        )
        self.endpoint = endpoint
        self.timeout = timeout


class CatalogSource(abc.ABC):
    """Contract for a source of catalog entries."""

    @abc.abstractmethod
    async def fetch_entries(self) -> list[CatalogEntry]:
        """Fetch the whole catalog as a flat list of entries.

        Returns:
            The entries; an unexpected payload shape yields an empty list.

        Raises:
            CatalogFetchError: If the request fails or returns a non-2xx status.
            CatalogTimeoutError: If the request times out.
        """
