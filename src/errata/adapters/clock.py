"""Clocks for ERRATA."""

from datetime import datetime, timezone

from errata.interfaces.clock import Clock

# pylint: disable=too-few-public-methods


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
