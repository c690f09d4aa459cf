"""Durable store schema commands (forward-only Alembic wrappers).

The catalog snapshot lives in a single ``kv_store`` table whose schema is
versioned with Alembic. Only forward operations are exposed; there is no
``downgrade`` or ``stamp``.

Human-oriented notices go to stderr and Alembic output to stdout.
``ERRATA_DB_URL`` must be set for every command that touches the database;
``heads`` and plain ``history`` only read the migration scripts.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from alembic import command
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy import text
from sqlalchemy.exc import ArgumentError, OperationalError

from errata import config
from errata.adapters.db.engine import make_engine

from .helpers import error, sanitize_url, success, warn

if TYPE_CHECKING:
    from alembic.config import Config
    from sqlalchemy.engine import Engine

MISSING_DB_URL_MSG = (
    "ERRATA_DB_URL is not set.\n\n"
    "Without it the catalog is cached in memory only. To keep a durable "
    "snapshot, set it before running this command, e.g.:\n"
    "  export ERRATA_DB_URL='sqlite:///errata.db'"
)

INVALID_URL_FORMAT_MSG = "The value of ERRATA_DB_URL is not a valid SQLAlchemy database URL."

CANNOT_CONNECT_MSG = (
    "ERRATA_DB_URL is set, but the database is not reachable.\n"
    "Check that the URL is correct and the database file or server is available."
)

UPGRADE_SCHEMA_WARNING = "This will upgrade the durable store schema to the latest version."

VERBOSE_HELP = "Show alembic's more verbose output."


def _ping(url: str) -> None:
    with make_engine(url).connect() as conn:
        conn.execute(text("SELECT 1"))


def _get_url() -> str:
    try:
        url = config.get_db_url()
    except config.DatabaseUrlNotSetError as e:
        raise click.ClickException(MISSING_DB_URL_MSG) from e
    try:
        _ping(url)
    except OperationalError as e:
        raise click.ClickException(CANNOT_CONNECT_MSG) from e
    except ArgumentError as e:
        raise click.ClickException(INVALID_URL_FORMAT_MSG) from e
    return url


@click.group(cls=clickx.ExtraGroup)
def db() -> None:
    """Durable store schema commands."""


@db.command()
@click.option("--verbose", "-v", is_flag=True, help=VERBOSE_HELP)
def current(verbose: bool) -> None:
    """Show the schema revision of the durable store."""
    cfg = config.build_alembic_config(db_url=_get_url(), stdout=sys.stdout)
    command.current(cfg, verbose=verbose)


@db.command()
@click.option("--verbose", "-v", is_flag=True, help=VERBOSE_HELP)
def heads(verbose: bool) -> None:
    """Show the head revision(s) shipped with this version."""
    command.heads(config.build_alembic_config(stdout=sys.stdout), verbose=verbose)


@db.command()
@click.option("--verbose", "-v", is_flag=True, help=VERBOSE_HELP)
@click.option(
    "--indicate-current",
    "-i",
    is_flag=True,
    help="Mark the revision the database is at (needs ERRATA_DB_URL).",
)
def history(verbose: bool, indicate_current: bool) -> None:
    """Show the migration history."""
    url = _get_url() if indicate_current else None
    cfg = config.build_alembic_config(db_url=url, stdout=sys.stdout)
    command.history(cfg, verbose=verbose, indicate_current=indicate_current)


@db.command()
@click.option("--sql", is_flag=True, help="Print the SQL instead of running it.")
@click.option("--force", is_flag=True, help="Skip the confirmation prompt.")
def upgrade(sql: bool, force: bool) -> None:
    """Create or upgrade the ``kv_store`` table to the head revision."""
    url = _get_url()
    cfg = config.build_alembic_config(db_url=url, stdout=sys.stdout)
    if not (force or sql):
        warn(UPGRADE_SCHEMA_WARNING)
        click.echo(f"db: {click.style(sanitize_url(url), underline=True)}", err=True)
        click.confirm("Proceed?", abort=True, err=True)
    command.upgrade(cfg, revision="head", sql=sql)
    if not sql:
        success("Upgrade complete")


class SchemaState(Enum):
    """Where the durable store schema stands relative to the shipped head."""

    UP_TO_DATE = "up to date"
    OUT_OF_DATE = "out of date"
    UNINITIALIZED = "uninitialized"


def _current_revision(engine: Engine) -> str | None:
    with engine.connect() as conn:
        return MigrationContext.configure(conn).get_current_revision()


def _head_revision(cfg: Config) -> str | None:
    return ScriptDirectory.from_config(cfg).get_current_head()


def _schema_state(rev: str | None, head: str | None) -> SchemaState:
    if rev is None:
        return SchemaState.UNINITIALIZED
    if rev == head:
        return SchemaState.UP_TO_DATE
    return SchemaState.OUT_OF_DATE


@db.command()
def status() -> None:
    """Show durable store connectivity and schema state."""
    try:
        url = _get_url()
    except click.ClickException as e:
        error("Durable store unavailable")
        click.echo(e.message)
        return

    engine = make_engine(url)
    success("Database reachable")
    click.echo(f"Backend : {engine.dialect.name}")
    click.echo(f"URL     : {sanitize_url(url)}")

    rev = _current_revision(engine)
    state = _schema_state(rev, _head_revision(config.build_alembic_config(db_url=url)))
    click.echo(f"Schema  : {rev} ({state.value})" if rev else f"Schema  : {state.value}")
    if state is not SchemaState.UP_TO_DATE:
        warn("Run 'errata db upgrade' to update the schema.")
