"""Integration tests.

Run against real SQLite database files in the test's temp directory: Alembic
upgrades and downgrades, the SQLAlchemy key-value store across engines, and
the containers `bootstrap()` assembles from the environment.
"""
