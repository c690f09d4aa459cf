"""Default marks and shared fixtures for tests under `tests/functional/`."""

import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from errata.adapters.kv_store import InMemoryKeyValueStore
from errata.bootstrap.bootstrap import build_container
from errata.entrypoints.cli import catalog
from tests.unit.fakes import FakeSource, entry

# pylint: disable=unused-argument
# pylint: disable=redefined-outer-name

FUNCTIONAL_ROOT = Path(__file__).parent.resolve()
MARKER_NAME = "functional"


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Add default `functional` marks to items in `tests/functional/`."""
    for item in items:
        if FUNCTIONAL_ROOT in item.path.resolve().parents:
            if not any(marker.name == MARKER_NAME for marker in item.iter_markers()):
                item.add_marker(pytest.mark.functional)


@pytest.fixture(autouse=True)
def _reset_logger_levels():
    """Undo `-L` overrides; logger levels outlive a `CliRunner` invocation."""
    names = ("errata", "sqlalchemy", "alembic", "httpx", "httpcore")
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


@pytest.fixture
def make_runner(tmp_path: Path):
    """Build a `CliRunner` whose flight recorder writes under the test's temp dir."""

    def _make(**env: str) -> CliRunner:
        return CliRunner(env={"ERRATA_LOG_PATH": str(tmp_path / "latest.log"), **env})

    return _make


@pytest.fixture
def source() -> FakeSource:
    """Fake catalog source serving two entries: one by code and key, one by key."""
    return FakeSource([entry(100, "A_KEY", "A"), entry(None, "K", "B")])


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def wired(monkeypatch: pytest.MonkeyPatch, source, store) -> list[str]:
    """Make every catalog command bootstrap a container around the fakes.

    Returns:
        The source kinds the commands asked for, in call order.
    """
    kinds: list[str] = []

    def fake_bootstrap(kind="app"):
        kinds.append(kind)
        return build_container(source, store)

    monkeypatch.setattr(catalog, "bootstrap", fake_bootstrap)
    return kinds
