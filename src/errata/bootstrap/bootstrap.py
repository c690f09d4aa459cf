"""Bootstrap the catalog cache and resolver with concrete adapters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from errata import config
from errata.adapters.catalog_source import HttpCatalogSource
from errata.adapters.clock import SystemClock
from errata.adapters.db.engine import make_engine
from errata.adapters.kv_store import NullKeyValueStore, SqlAlchemyKeyValueStore
from errata.service_layer.catalog_cache import CatalogCache
from errata.service_layer.resolver import ErrorResolver

if TYPE_CHECKING:
    from collections.abc import Mapping

    import httpx

    from errata.interfaces.catalog_source import CatalogSource
    from errata.interfaces.kv_store import KeyValueStore

SourceKind = Literal["app", "backend"]


@dataclass(frozen=True)
class AppContainer:
    """A class to hold the wired application services."""

    cache: CatalogCache
    resolver: ErrorResolver


def build_store(url: str | None) -> KeyValueStore:
    """Build the durable store for *url*, or a null store when there is none."""
    if url is None:
        return NullKeyValueStore()
    return SqlAlchemyKeyValueStore(make_engine(url))


def build_source(
    kind: SourceKind = "app",
    *,
    headers: Mapping[str, str] | None = None,
    client: httpx.AsyncClient | None = None,
) -> CatalogSource:
    """Build the catalog source.

    Args:
        kind: ``"app"`` fetches through the application's catalog route;
            ``"backend"`` fetches straight from ``ERRATA_BACKEND_URL``.
        headers: Extra request headers (e.g. authorization).
        client: Shared HTTP client. A client with a ``base_url`` makes the
            ``"app"`` source use the same-origin relative path.

    Raises:
        BackendUrlNotSetError: If *kind* is ``"backend"`` and no backend URL is set.
    """
    if kind == "backend":
        return HttpCatalogSource(
            config.get_backend_catalog_url(),
            timeout=config.BACKEND_FETCH_TIMEOUT_SECONDS,
            headers=headers,
            client=client,
        )
    relative = client is not None and bool(str(client.base_url))
    return HttpCatalogSource(
        config.resolve_catalog_endpoint(relative=relative),
        timeout=config.FETCH_TIMEOUT_SECONDS,
        headers=headers,
        client=client,
    )


def build_container(source: CatalogSource, store: KeyValueStore) -> AppContainer:
    """Wire a cache and resolver around the given adapters."""
    cache = CatalogCache(source, store, SystemClock(), ttl=config.CACHE_TTL)
    return AppContainer(cache=cache, resolver=ErrorResolver(cache))


def bootstrap(
    source_kind: SourceKind = "app",
    *,
    headers: Mapping[str, str] | None = None,
    client: httpx.AsyncClient | None = None,
) -> AppContainer:
    """Bootstrap the catalog cache and resolver from the environment."""
    store = build_store(config.get_optional_db_url())
    source = build_source(source_kind, headers=headers, client=client)
    return build_container(source, store)
