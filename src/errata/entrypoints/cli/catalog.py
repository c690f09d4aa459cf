"""Error catalog commands: warm, resolve, show, clear.

Each command bootstraps a fresh container (durable store from
``ERRATA_DB_URL``, catalog source chosen by ``--source``), runs one coroutine
on a new event loop, and waits for background persistence before exiting.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

import click
from rich.console import Console

from errata import config
from errata.bootstrap import AppContainer, SourceKind, bootstrap
from errata.interfaces.catalog_source import CatalogSourceError

from .helpers import entries_json, entries_table, success, warn

T = TypeVar("T")

MISSING_BACKEND_URL_MSG = (
    "ERRATA_BACKEND_URL is not set.\n\n"
    "Set it to the backend base URL when using --source backend, e.g.:\n"
    "  export ERRATA_BACKEND_URL='https://bpms.example.com/api'"
)


@dataclass(frozen=True)
class CliState:
    """Options of the top-level group shared with subcommands."""

    source_kind: str = "app"


def _container(ctx: click.Context) -> AppContainer:
    state = ctx.find_object(CliState) or CliState()
    kind: SourceKind = "backend" if state.source_kind == "backend" else "app"
    try:
        return bootstrap(kind)
    except config.BackendUrlNotSetError as e:
        raise click.ClickException(MISSING_BACKEND_URL_MSG) from e


def _run(
    container: AppContainer, action: Callable[[AppContainer], Awaitable[T]]
) -> T:
    async def main() -> T:
        try:
            return await action(container)
        finally:
            await container.cache.drain()

    return asyncio.run(main())


@click.command()
@click.option("--force", is_flag=True, help="Refetch even if the cache is fresh.")
@click.pass_context
def warm(ctx: click.Context, force: bool) -> None:
    """Load the error catalog (durable snapshot or network)."""
    container = _container(ctx)

    async def action(c: AppContainer) -> int:
        await c.cache.init_catalog(force_refresh=force)
        return len(c.cache.entries())

    try:
        count = _run(container, action)
    except CatalogSourceError as e:
        raise click.ClickException(str(e)) from e
    if count:
        success(f"Error catalog ready ({count} entries)")
    else:
        warn("Error catalog is empty")


@click.command()
@click.option("--code", type=int, help="Numeric error code.")
@click.option("--key", "error_key", help="Symbolic error key.")
@click.option("--message", help="Message carried by the error itself.")
@click.option("--fallback", help="Text to use when nothing else resolves.")
@click.option(
    "--payload",
    help="Raw error payload as JSON (overrides --code/--key/--message).",
)
@click.pass_context
def resolve(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    code: int | None,
    error_key: str | None,
    message: str | None,
    fallback: str | None,
    payload: str | None,
) -> None:
    """Resolve an error to the message shown to users (printed to stdout)."""
    if payload is not None:
        try:
            raw = json.loads(payload)
        except json.JSONDecodeError as e:
            raise click.BadParameter(
                f"not valid JSON: {e}", param_hint="--payload"
            ) from e
    else:
        fields = {"code": code, "errorKey": error_key, "message": message}
        raw = {name: value for name, value in fields.items() if value is not None}

    container = _container(ctx)
    text = _run(container, lambda c: c.resolver.resolve_message(raw, fallback))
    click.echo(text)


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print entries as JSON.")
@click.pass_context
def show(ctx: click.Context, as_json: bool) -> None:
    """List the cached error catalog."""
    container = _container(ctx)

    async def action(c: AppContainer):
        await c.cache.init_catalog()
        return c.cache.entries()

    try:
        entries = _run(container, action)
    except CatalogSourceError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(entries_json(entries))
    else:
        Console().print(entries_table(entries))


@click.command()
@click.pass_context
def clear(ctx: click.Context) -> None:
    """Drop the cached catalog, in memory and in the durable store."""
    container = _container(ctx)

    async def action(c: AppContainer) -> None:
        c.cache.clear_cache()

    _run(container, action)
    success("Error catalog cleared")
