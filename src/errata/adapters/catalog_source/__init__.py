"""Catalog source adapters."""

from .http import HttpCatalogSource, normalize_payload, parse_entries

__all__ = ["HttpCatalogSource", "normalize_payload", "parse_entries"]
