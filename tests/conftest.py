"""Global pytest fixtures for ERRATA."""

from __future__ import annotations

import pytest

pytest_plugins = [
    "tests.fixtures.sqlite",
]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear ERRATA's environment variables so a developer shell never leaks in."""
    for name in (
        "ERRATA_DB_URL",
        "ERRATA_APP_URL",
        "ERRATA_FRONTEND_URL",
        "ERRATA_ORIGIN_URL",
        "ERRATA_BACKEND_URL",
        "ERRATA_SOURCE",
        "ERRATA_LOGGER_LEVELS",
        "VERCEL_URL",
    ):
        monkeypatch.delenv(name, raising=False)
