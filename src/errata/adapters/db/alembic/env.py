"""Alembic environment for the durable store.

The database URL comes from the ``sqlalchemy.url`` main option (set by
`errata.config.build_alembic_config`) or, for a bare ``alembic`` invocation,
from ``-x url=...`` or ``ERRATA_DB_URL``. Type and server-default drift are
compared on autogenerate; SQLite migrations run in batch mode.
"""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

import errata.adapters.kv_store.schema  # noqa: F401 # pylint: disable=unused-import
from errata.adapters.db.metadata import metadata

# pylint: disable=no-member

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

COMPARE_OPTIONS = {"compare_type": True, "compare_server_default": True}


def database_url() -> str:
    """Return the URL to migrate, raising when none is configured."""
    candidates = (
        context.get_x_argument(as_dictionary=True).get("url"),
        config.get_main_option("sqlalchemy.url"),
        os.environ.get("ERRATA_DB_URL"),
    )
    # an unexpanded "%(...)s" placeholder from an ini file counts as unset
    url = next((c for c in candidates if c and "%(" not in c), None)
    if url is None:
        raise RuntimeError("No database URL: set ERRATA_DB_URL or pass -x url=...")
    return url


def run_offline(url: str) -> None:
    """Emit the migration SQL to the configured output instead of executing it."""
    context.configure(
        url=url,
        target_metadata=metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **COMPARE_OPTIONS,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online(url: str) -> None:
    engine = engine_from_config(
        {"sqlalchemy.url": url}, prefix="sqlalchemy.", poolclass=pool.NullPool
    )
    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=metadata,
            render_as_batch=connection.dialect.name == "sqlite",
            **COMPARE_OPTIONS,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline(database_url())
else:
    run_online(database_url())
