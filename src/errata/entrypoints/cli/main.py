"""Errata CLI entry point.

Defines the top-level ``errata`` command (via Click-Extra), configures logging
for the process, and registers the subcommands.

Available commands
- ``errata warm``, ``resolve``, ``show``, ``clear``: error catalog operations.
- ``errata db``: forward-only management of the durable store schema.

Examples
    $ errata --version
    $ errata -v warm --force
    $ errata resolve --code 1203 --fallback "Please try again"
"""

import logging
from pathlib import Path

import click
import click_extra as clickx
from platformdirs import user_log_dir

from errata import __version__
from errata.logging import LoggingSettings, configure_logging, log_startup

from .catalog import CliState, clear, resolve, show, warm
from .db import db as db_group
from .helpers.log_level_parser import parse_log_level

logger = logging.getLogger(__name__)


HELP = """ERRATA command-line interface.

    ERRATA keeps the backend error catalog (error codes and keys mapped to
    localized messages) cached in memory and in a local database, and resolves
    raw backend error payloads into the text shown to users.
    """


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help="Increase the default WARNING verbosity by one level per repetition.",
    default=0,
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help="Decrease the default WARNING verbosity by one level per repetition.",
    default=0,
)
@click.option(
    "--debug/--no-debug",
    is_flag=True,
    help="Enable debug mode (developer formatting with logger names and paths).",
    default=False,
)
@click.option(
    "--source",
    "source_kind",
    type=click.Choice(["app", "backend"], case_sensitive=False),
    default="app",
    show_default=True,
    envvar="ERRATA_SOURCE",
    show_envvar=True,
    help=(
        "Where to fetch the catalog from: the application's catalog route "
        "('app') or the upstream backend at ERRATA_BACKEND_URL ('backend')."
    ),
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to the flight-recorder log file.",
    default=Path(user_log_dir("errata", appauthor=False, ensure_exists=True))
    / "latest.log",
    envvar="ERRATA_LOG_PATH",
    show_default=True,
    show_envvar=True,
)
@click.option(
    "--flight-recorder-capacity",
    type=int,
    default=2000,
    hidden=True,
    envvar="ERRATA_FLIGHT_RECORDER_CAPACITY",
    show_envvar=True,
    help="Capacity of the flight recorder (in number of log records).",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    is_flag=True,
    help=(
        "Keep the last N log records at DEBUG granularity and write them to "
        "--log-path when a WARNING/ERROR occurs (or on exit with --force-flush)."
    ),
    default=True,
    show_envvar=True,
)
@click.option(
    "--force-flush/--no-force-flush",
    "force_flush_flight_recorder",
    is_flag=True,
    envvar="ERRATA_FORCE_FLUSH_FLIGHT_RECORDER",
    help="Write the flight recorder buffer to --log-path on exit.",
    default=False,
    show_default=True,
    show_envvar=True,
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    envvar="ERRATA_LOGGER_LEVELS",
    help=(
        "Set the minimum level of specific loggers (NAME=LEVEL). Repeatable "
        "(e.g. -L httpx=INFO -L sqlalchemy=WARNING)."
    ),
    default=("sqlalchemy=WARNING", "alembic=WARNING", "httpx=WARNING"),
    show_default=True,
    show_envvar=True,
)
@clickx.pass_context
def errata(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    source_kind: str,
    log_path: Path,
    flight_recorder_capacity: int,
    flight_recorder: bool,
    force_flush_flight_recorder: bool,
    logger_levels: dict[str, int],
) -> None:
    """ERRATA command-line interface."""

    level = logging.WARNING - (10 * verbose_count) + (10 * quiet_count)
    settings = LoggingSettings(
        level=max(logging.DEBUG, min(logging.CRITICAL, level)),
        debug_mode=debug,
        color=ctx.color is not False,  # None or True => allow color
        log_path=log_path,
        flight_recorder=flight_recorder,
        flight_capacity=flight_recorder_capacity,
        force_flush=force_flush_flight_recorder,
        logger_levels=logger_levels,
    )
    handlers = configure_logging(settings)
    log_startup(logger, app_version=__version__, settings=settings, handlers=handlers)

    ctx.obj = CliState(source_kind=source_kind.lower())
    ctx.call_on_close(logging.shutdown)


errata.add_command(warm)
errata.add_command(resolve)
errata.add_command(show)
errata.add_command(clear)
errata.add_command(db_group)
