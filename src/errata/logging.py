"""Logging setup for the Errata CLI and application.

Console output goes through Rich; a "flight recorder" keeps recent records in
memory at DEBUG granularity and dumps them to a file when something goes wrong.
Library code only ever calls ``logging.getLogger(__name__)``; everything in
this module is for the process that owns the root logger.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from dataclasses import dataclass, field
from logging.handlers import MemoryHandler
from pathlib import Path
from typing import Literal

import alembic
import httpx
import sqlalchemy
from rich.console import Console
from rich.logging import RichHandler

# pylint: disable=too-few-public-methods

PROJECT_PREFIX = "errata"

ColorSystem = Literal["auto", "standard", "256", "truecolor", "windows"]


class ThirdPartyPrefixFilter(logging.Filter):
    """Tag records from other libraries with a short ``[library]`` prefix.

    Errata's own records get an empty prefix. The filter never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(PROJECT_PREFIX):
            record.prefix = ""
        else:
            # "httpx._client" -> "[httpx]"
            record.prefix = f"[{record.name.split('.')[0]}]"
        return True


@dataclass
class LoggingSettings:
    """Everything `configure_logging` needs, as resolved from CLI options."""

    level: int = logging.WARNING
    debug_mode: bool = False
    color: bool = True
    log_path: Path | None = None
    flight_recorder: bool = False
    flight_capacity: int = 2000
    force_flush: bool = False
    logger_levels: dict[str, int] = field(default_factory=dict)


def config_console_handler(
    level: int = logging.INFO, debug_mode: bool = False, color: bool = True
) -> RichHandler:
    """Build the Rich console handler (writes to stderr).

    In debug mode the level drops to DEBUG and records show time, logger name
    and source location; otherwise third-party records get a short prefix.

    Args:
        level: Minimum console level (ignored in debug mode).
        debug_mode: Verbose developer formatting.
        color: Disable to match click-extra's ``--no-color``.
    """
    color_system: ColorSystem | None = "auto" if color else None
    console = Console(color_system=color_system, stderr=True)

    handler = RichHandler(
        level=logging.DEBUG if debug_mode else level,
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )
    if debug_mode:
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s: %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(prefix)s %(message)s"))
        handler.addFilter(ThirdPartyPrefixFilter())
    return handler


def config_flight_recorder(
    path: Path,
    capacity: int = 2000,
    flush_level: int = logging.WARNING,
    flush_on_close: bool = False,
) -> MemoryHandler:
    """Build the flight recorder: a bounded in-memory buffer backed by a file.

    The buffer is written to *path* when a record at *flush_level* or above
    arrives, when it fills up, or on close if *flush_on_close* is set.
    """
    file_handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(process)d:%(threadName)s] %(levelname)s "
            "%(name)s:%(lineno)d: %(message)s"
        )
    )
    return MemoryHandler(
        capacity=capacity,
        flushLevel=flush_level,
        target=file_handler,
        flushOnClose=flush_on_close,
    )


def configure_logging(settings: LoggingSettings) -> list[logging.Handler]:
    """Install the console handler (and flight recorder) on the root logger.

    The root logger is opened to DEBUG so the flight recorder sees everything;
    the handlers do the filtering. Per-logger overrides are applied last.

    Returns:
        The handlers now attached to the root logger.
    """
    handlers: list[logging.Handler] = [
        config_console_handler(
            level=settings.level,
            debug_mode=settings.debug_mode,
            color=settings.color,
        )
    ]
    if settings.flight_recorder and settings.log_path is not None:
        handlers.append(
            config_flight_recorder(
                path=settings.log_path,
                capacity=settings.flight_capacity,
                flush_on_close=settings.force_flush,
            )
        )

    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)
    for name, lvl in settings.logger_levels.items():
        logging.getLogger(name).setLevel(lvl)
    return handlers


def log_startup(
    logger: logging.Logger,
    *,
    app_version: str,
    settings: LoggingSettings,
    handlers: list[logging.Handler],
) -> None:
    """Log a one-line startup summary plus DEBUG diagnostics.

    Diagnostics cover the interpreter, platform, process, working directory,
    the versions of the storage and HTTP libraries, the active handlers and
    any per-logger level overrides.
    """
    logger.info(
        "ERRATA %s: console=%s, flight-recorder=%s",
        app_version,
        logging.getLevelName(settings.level),
        "ON" if settings.flight_recorder else "OFF",
    )

    logger.debug("Python: %s", sys.version.split()[0])
    logger.debug("Platform: %s %s", platform.system(), platform.release())
    logger.debug("PID: %s", os.getpid())
    logger.debug("CWD: %s", Path.cwd())
    logger.debug("SQLAlchemy: %s", sqlalchemy.__version__)
    logger.debug("Alembic: %s", alembic.__version__)
    logger.debug("httpx: %s", httpx.__version__)
    logger.debug("Handlers: %s", [type(h).__name__ for h in handlers])
    if settings.flight_recorder:
        logger.debug(
            "Flight recorder: path=%s, capacity=%s, flush_on_close=%s",
            settings.log_path or "<none>",
            settings.flight_capacity,
            settings.force_flush,
        )
    logger.debug(
        "Per-logger overrides: %s",
        {name: logging.getLevelName(lvl) for name, lvl in settings.logger_levels.items()}
        or "<none>",
    )
