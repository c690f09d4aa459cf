"""CLI helpers for ERRATA.

Message emitters that write to stderr with emoji→ASCII fallbacks, output
formatting (redacted URLs, catalog tables), and logger-level option parsing.
"""

from .formatting import entries_json, entries_table, sanitize_url
from .messages import error, success, warn

__all__ = ["sanitize_url", "entries_table", "entries_json", "warn", "success", "error"]
