"""Contract tests.

The `KeyValueStore` port is specified once here and run against every
backend (in-memory and SQLite), so the cache can swap stores without
noticing. Only the public async API is asserted.
"""
