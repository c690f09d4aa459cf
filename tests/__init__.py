"""ERRATA test suite.

Layout
- unit/         : One module at a time against fakes (`tests/unit/fakes.py`); no sockets, no files.
- contract/     : The key-value store port, run against every backend.
- integration/  : Real SQLite files: Alembic migrations, the SQLAlchemy store, bootstrap wiring.
- functional/   : The `errata` CLI driven through Click's `CliRunner`.
- fixtures/     : Shared pytest fixtures (loaded from the root conftest).

Each folder's conftest adds its default marker, so `-m "not integration"`
selects the quick suite.
"""
