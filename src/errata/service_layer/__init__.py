"""Service layer for ERRATA.

Implements the application use-cases: the catalog cache (load, refresh,
persist, invalidate) and the message resolver built on top of it.

Dependency rule: may import `errata.domain` and `errata.interfaces`, but not
`errata.adapters` or `errata.entrypoints`.
"""

from .catalog_cache import CatalogCache
from .resolver import (
    CONNECTIVITY_ERROR_CODE,
    CONNECTIVITY_ERROR_MESSAGE,
    DEFAULT_ERROR_MESSAGE,
    ErrorResolver,
    extract_exception,
)

__all__ = [
    "CatalogCache",
    "ErrorResolver",
    "extract_exception",
    "DEFAULT_ERROR_MESSAGE",
    "CONNECTIVITY_ERROR_MESSAGE",
    "CONNECTIVITY_ERROR_CODE",
]
