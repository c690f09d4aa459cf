"""Configuration utilities for ERRATA.

This module centralizes small helpers and constants related to application
configuration: the durable store URL, the catalog endpoint, and the fixed
cache/request timing constants. Environment-derived defaults are read once,
at import time.
"""

import os
import sys
from datetime import timedelta
from importlib.resources import files
from typing import TextIO

from alembic.config import Config

ALEMBIC_URL_KEY = "sqlalchemy.url"  # pragma: no mutate
ALEMBIC_SCRIPT_LOCATION_KEY = "script_location"  # pragma: no mutate

#: Maximum age of a catalog snapshot, in memory or on disk.
CACHE_TTL = timedelta(hours=24)

#: Timeout for the catalog refresh request.
FETCH_TIMEOUT_SECONDS = 10.0

#: Timeout for direct requests to the upstream backend.
BACKEND_FETCH_TIMEOUT_SECONDS = 10.0

#: Path of the catalog route relative to the application origin.
CATALOG_PATH = "/api/errors/getAll"

#: Path of the catalog resource relative to the backend base URL.
BACKEND_CATALOG_PATH = "/errors/getAll"

LOCALHOST_ORIGIN = "http://localhost:3000"


class DatabaseUrlNotSetError(Exception):
    """Raised when the ERRATA_DB_URL environment variable is not set."""


class BackendUrlNotSetError(Exception):
    """Raised when the ERRATA_BACKEND_URL environment variable is not set."""


def get_db_url() -> str:
    """Get the database URL from the environment.

    Returns:
        The value of the `ERRATA_DB_URL` environment variable.

    Raises:
        DatabaseUrlNotSetError: If `ERRATA_DB_URL` is not set.
    """
    if not (url := os.environ.get("ERRATA_DB_URL")):
        raise DatabaseUrlNotSetError
    return url


def get_optional_db_url() -> str | None:
    """Get the database URL from the environment, or None when durable storage is off."""
    return os.environ.get("ERRATA_DB_URL") or None


def _origin_candidates() -> list[str]:
    vercel = os.environ.get("VERCEL_URL")
    return [
        os.environ.get("ERRATA_APP_URL", ""),
        os.environ.get("ERRATA_FRONTEND_URL", ""),
        f"https://{vercel}" if vercel else "",
        os.environ.get("ERRATA_ORIGIN_URL", ""),
    ]


def resolve_origin() -> str:
    """Resolve the application origin used for absolute catalog URLs.

    Candidates are tried in order: `ERRATA_APP_URL`, `ERRATA_FRONTEND_URL`,
    `https://$VERCEL_URL`, `ERRATA_ORIGIN_URL`; the first non-empty one wins,
    falling back to ``http://localhost:3000``.
    """
    return next((c for c in _origin_candidates() if c), LOCALHOST_ORIGIN)


DEFAULT_ORIGIN = resolve_origin()


def resolve_catalog_endpoint(origin: str | None = None, *, relative: bool = False) -> str:
    """Build the catalog endpoint for the hosting context.

    Args:
        origin: Origin to prefix; defaults to the origin resolved at import time.
        relative: Return the bare same-origin path instead of an absolute URL.
            Use this with an HTTP client that already carries a ``base_url``.

    Returns:
        The relative path or the absolute catalog URL.
    """
    if relative:
        return CATALOG_PATH
    base = (origin or DEFAULT_ORIGIN).rstrip("/")
    return f"{base}{CATALOG_PATH}"


def get_backend_catalog_url() -> str:
    """Get the catalog URL on the upstream backend.

    Returns:
        ``$ERRATA_BACKEND_URL/errors/getAll``.

    Raises:
        BackendUrlNotSetError: If `ERRATA_BACKEND_URL` is not set.
    """
    if not (base := os.environ.get("ERRATA_BACKEND_URL")):
        raise BackendUrlNotSetError
    return f"{base.rstrip('/')}{BACKEND_CATALOG_PATH}"


def build_alembic_config(
    db_url: str | None = None, stdout: TextIO = sys.stdout
) -> Config:
    """Build an Alembic `Config` object for ERRATA's migrations.

    Sets only Alembic "main" options:
    - `sqlalchemy.url` → the database URL you pass
    - `script_location` → ERRATA's packaged Alembic scripts

    Args:
        db_url: SQLAlchemy database URL (e.g., `sqlite:///errata.db`). Can be
            `None` (default) only in contexts where Alembic won't need to
            connect to the DB.
        stdout: Text stream Alembic will write status lines to. Defaults to
            `sys.stdout`; override in tests to capture output.

    Returns:
        An `alembic.config.Config` pointing to ERRATA's migration scripts.
    """
    cfg = Config(stdout=stdout)
    if db_url is not None:
        cfg.set_main_option(ALEMBIC_URL_KEY, db_url)
    cfg.set_main_option(
        ALEMBIC_SCRIPT_LOCATION_KEY,
        str(files("errata.adapters.db.alembic")),
    )
    return cfg
