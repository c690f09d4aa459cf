"""Error message resolution.

Every HTTP error path in the client turns a raw backend error payload into a
display string through `ErrorResolver.resolve_message`. The payload is first
reduced to a small `ExtractedException` (or `NoException`), then resolved with
a fixed fallback order:

1. connectivity sentinel code → fixed connectivity message (catalog untouched)
2. catalog entry by code
3. catalog entry by error key
4. the payload's own message → caller fallback → default message

Resolution never raises.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

import httpx

if TYPE_CHECKING:
    from errata.service_layer.catalog_cache import CatalogCache

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE: Final = "خطا در پردازش اطلاعات"
CONNECTIVITY_ERROR_MESSAGE: Final = "عدم برقراری ارتباط با سرور"
CONNECTIVITY_ERROR_CODE: Final = -1

EXCEPTION_FIELD = "digitalMessageException"  # pragma: no mutate
DATA_FIELD = "data"  # pragma: no mutate
EXCEPTION_KEYS = frozenset({"code", "errorCode", "errorKey", "message"})


@dataclass(frozen=True, slots=True)
class ExtractedException:
    """The code/key/message triple pulled out of a backend error payload."""

    code: int | None = None
    error_key: str | None = None
    message: str | None = None


@dataclass(frozen=True, slots=True)
class NoException:
    """Marker for payloads that carry no recognizable exception object."""


NO_EXCEPTION: Final = NoException()


def _int_or_none(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _is_exception_shaped(obj: Any) -> bool:
    return isinstance(obj, Mapping) and not EXCEPTION_KEYS.isdisjoint(obj.keys())


def _response_payload(error: httpx.HTTPStatusError) -> Any:
    try:
        return error.response.json()
    except ValueError:
        return None


def _candidates(raw: Any) -> list[Any]:
    """Possible exception objects, outermost wrapper shape first."""
    if not isinstance(raw, Mapping):
        return []
    data = raw.get(DATA_FIELD)
    nested = data.get(EXCEPTION_FIELD) if isinstance(data, Mapping) else None
    return [nested, raw.get(EXCEPTION_FIELD), raw]


def extract_exception(raw: Any) -> ExtractedException | NoException:
    """Reduce a raw error payload to an `ExtractedException`.

    Known shapes are tried in a fixed order and the first structural match wins:

    - ``{"data": {"digitalMessageException": {...}}}``
    - ``{"digitalMessageException": {...}}``
    - a bare exception object ``{code?, errorCode?, errorKey?, message?}``

    An `httpx.HTTPStatusError` is unwrapped to its JSON response body first.

    Args:
        raw: Anything a caller caught or received.

    Returns:
        The extracted triple, or `NO_EXCEPTION` when nothing matched.
    """
    if isinstance(raw, httpx.HTTPStatusError):
        raw = _response_payload(raw)

    obj = next((c for c in _candidates(raw) if _is_exception_shaped(c)), None)
    if obj is None:
        return NO_EXCEPTION

    code = _int_or_none(obj.get("code"))
    if code is None:
        code = _int_or_none(obj.get("errorCode"))
    return ExtractedException(
        code=code,
        error_key=_str_or_none(obj.get("errorKey")),
        message=_str_or_none(obj.get("message")),
    )


class ErrorResolver:
    """Translate backend error payloads into user-facing messages.

    Args:
        cache: The catalog cache; it is initialized lazily on first use.
    """

    def __init__(self, cache: CatalogCache) -> None:
        self.cache = cache

    async def resolve_message(self, raw: Any, fallback: str | None = None) -> str:
        """Resolve *raw* to a display string. Never raises.

        Args:
            raw: Error payload, wrapped or bare, or a caught `httpx.HTTPStatusError`.
            fallback: Caller-supplied text used when neither the catalog nor
                the payload provides a message.

        Returns:
            The resolved message.
        """
        extracted: ExtractedException | NoException = NO_EXCEPTION
        try:
            extracted = extract_exception(raw)
            if isinstance(extracted, NoException):
                return fallback or DEFAULT_ERROR_MESSAGE
            if extracted.code == CONNECTIVITY_ERROR_CODE:
                return CONNECTIVITY_ERROR_MESSAGE

            await self._ensure_catalog()

            if message := self._catalog_message(extracted):
                return message
        except Exception:  # pylint: disable=broad-except
            logger.exception("Error while resolving error message")

        own = extracted.message if isinstance(extracted, ExtractedException) else None
        return own or fallback or DEFAULT_ERROR_MESSAGE

    def message_for_code(self, code: int | None, fallback: str | None = None) -> str:
        """Look up *code* in the loaded catalog (no initialization)."""
        entry = self.cache.by_code(code) if code is not None else None
        return (entry and entry.message) or fallback or DEFAULT_ERROR_MESSAGE

    def message_for_key(self, key: str | None, fallback: str | None = None) -> str:
        """Look up *key* in the loaded catalog (no initialization)."""
        entry = self.cache.by_key(key) if key else None
        return (entry and entry.message) or fallback or DEFAULT_ERROR_MESSAGE

    async def _ensure_catalog(self) -> None:
        # cheap when fresh; refreshes a catalog that outlived its TTL
        try:
            await self.cache.init_catalog()
        except Exception as e:  # pylint: disable=broad-except
            logger.warning("Error catalog unavailable, using fallbacks: %s", e)

    def _catalog_message(self, extracted: ExtractedException) -> str | None:
        if extracted.code is not None:
            entry = self.cache.by_code(extracted.code)
            if entry is not None and entry.message:
                return entry.message
        if extracted.error_key is not None:
            entry = self.cache.by_key(extracted.error_key)
            if entry is not None and entry.message:
                return entry.message
        return None
