"""Catalog value objects.

A catalog entry maps a numeric backend error code and/or a symbolic error key
to a localized message. A snapshot is an ordered list of entries together with
the moment it was taken; it is the unit that gets persisted and restored.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from .errors import InvalidSnapshotError

__all__ = ["CatalogEntry", "CatalogSnapshot"]


def _as_int(value: Any) -> int | None:
    # bool is an int subclass; a flag is never an error code
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _as_str(value: Any) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    return value


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """One row of the authoritative error dictionary.

    Attributes:
        code: Numeric error identifier.
        error_key: Symbolic error identifier (alternate lookup axis).
        message: Localized, user-facing text.
        locale: Informational only; a single active locale is assumed.
        id: Backend row identifier, informational only.
    """

    code: int | None = None
    error_key: str | None = None
    message: str | None = None
    locale: str | None = None
    id: int | None = None

    @property
    def is_indexable(self) -> bool:
        """True when the entry carries a message and at least one identifier."""
        return bool(self.message) and (
            self.code is not None or self.error_key is not None
        )

    @classmethod
    def from_mapping(cls, raw: Any) -> CatalogEntry | None:
        """Build an entry from a wire mapping.

        Fields of the wrong type are dropped rather than rejected, so one odd
        column never costs the whole row.

        Args:
            raw: A mapping using the wire spelling (``errorKey``).

        Returns:
            The entry, or None if ``raw`` is not a mapping.
        """
        if not isinstance(raw, Mapping):
            return None
        return cls(
            code=_as_int(raw.get("code")),
            error_key=_as_str(raw.get("errorKey")),
            message=_as_str(raw.get("message")),
            locale=_as_str(raw.get("locale")),
            id=_as_int(raw.get("id")),
        )

    def to_mapping(self) -> dict[str, Any]:
        """Return the wire representation, omitting unset fields."""
        wire = {
            "id": self.id,
            "code": self.code,
            "errorKey": self.error_key,
            "message": self.message,
            "locale": self.locale,
        }
        return {name: value for name, value in wire.items() if value is not None}


@dataclass(frozen=True, slots=True)
class CatalogSnapshot:
    """A whole-catalog snapshot and the moment it was taken (aware UTC)."""

    entries: tuple[CatalogEntry, ...]
    taken_at: datetime

    @classmethod
    def from_records(cls, entries: Any, timestamp: Any) -> CatalogSnapshot:
        """Rebuild a snapshot from its two persisted records.

        Args:
            entries: The persisted list of wire mappings.
            timestamp: The persisted POSIX timestamp (seconds).

        Raises:
            InvalidSnapshotError: If either record has the wrong shape or the
                timestamp is out of range.
        """
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise InvalidSnapshotError(f"timestamp is not numeric: {timestamp!r}")
        if not isinstance(entries, list):
            raise InvalidSnapshotError(
                f"entries record is not a list: {type(entries).__name__}"
            )
        try:
            taken_at = datetime.fromtimestamp(timestamp, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise InvalidSnapshotError(f"timestamp out of range: {timestamp!r}") from e
        parsed = (CatalogEntry.from_mapping(row) for row in entries)
        return cls(
            entries=tuple(entry for entry in parsed if entry is not None),
            taken_at=taken_at,
        )

    @classmethod
    def of(cls, entries: Iterable[CatalogEntry], taken_at: datetime) -> CatalogSnapshot:
        """Build a snapshot from already-parsed entries."""
        return cls(entries=tuple(entries), taken_at=taken_at)

    def entry_records(self) -> list[dict[str, Any]]:
        """Return the entries as a JSON-serialisable list."""
        return [entry.to_mapping() for entry in self.entries]

    def timestamp_record(self) -> float:
        """Return the snapshot time as POSIX seconds."""
        return self.taken_at.timestamp()
