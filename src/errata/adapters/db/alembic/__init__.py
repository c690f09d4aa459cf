"""Alembic migration scripts for the ERRATA durable store."""
