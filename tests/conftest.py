"""Shared fixtures and helpers for tests."""

import warnings
from datetime import datetime, timezone
from pathlib import Path

import pytest
from testcontainers.postgres import PostgresContainer

from alembic import command
from alembic.config import Config
from source_lines.core.ports.permissions import CODEVIEWER
from source_lines.db import InMemoryPermissionAuthority, InMemorySourceStore
from source_lines.models import LineRecord, SourceDump

_REPO_ROOT = Path(__file__).parent.parent

FILE_UUID = "abc"
EMPTY_FILE_UUID = "empty"
PROJECT_KEY = "my:project"


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# PostgresTestBase: helpers for integration tests that need a database
# ---------------------------------------------------------------------------


class PostgresTestBase:
    IMAGE = "postgres:16-alpine"

    @staticmethod
    def create_container() -> PostgresContainer:
        return PostgresContainer(PostgresTestBase.IMAGE, driver="asyncpg")

    @staticmethod
    def get_alembic_config(connection_url: str) -> Config:
        cfg = Config(str(_REPO_ROOT / "alembic.ini"))
        cfg.set_main_option("script_location", str(_REPO_ROOT / "alembic"))
        cfg.set_main_option("sqlalchemy.url", connection_url)
        return cfg

    @staticmethod
    def run_migrations(connection_url: str) -> None:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", DeprecationWarning)
            command.upgrade(PostgresTestBase.get_alembic_config(connection_url), "head")

    @staticmethod
    def cleanup_migrations(connection_url: str) -> None:
        command.downgrade(PostgresTestBase.get_alembic_config(connection_url), "base")


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------


def make_lines(count: int = 5) -> list[LineRecord]:
    """Lines 1..count; even lines are blamed and duplicated, line 1 is highlighted."""
    lines = []
    for n in range(1, count + 1):
        blamed = n % 2 == 0
        lines.append(
            LineRecord(
                line=n,
                source=f"x{n} = a < b" if n > 1 else "def main():",
                highlighting="0,3,k" if n == 1 else "",
                scm_author="jdoe" if blamed else None,
                scm_revision=f"rev{n}" if blamed else None,
                scm_date=datetime(2014, 9, 11, 8, 53, 12, tzinfo=timezone.utc) if blamed else None,
                line_hits=n,
                conditions=2 if blamed else 0,
                covered_conditions=1 if blamed else 0,
                duplications=[1] if blamed else [],
            )
        )
    return lines


def sample_dump() -> SourceDump:
    return SourceDump.model_validate(
        {
            "components": [
                {"uuid": FILE_UUID, "key": f"{PROJECT_KEY}:src/main.py", "project_key": PROJECT_KEY},
                {"uuid": EMPTY_FILE_UUID, "key": f"{PROJECT_KEY}:src/empty.py", "project_key": PROJECT_KEY},
            ],
            "lines": {FILE_UUID: [r.model_dump() for r in make_lines()]},
            "permissions": [{"grantee": "user:jdoe", "capability": CODEVIEWER, "component_key": PROJECT_KEY}],
        }
    )


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> InMemorySourceStore:
    dump = sample_dump()
    store = InMemorySourceStore()
    store.components = {c.uuid: c for c in dump.components}
    store.lines = dict(dump.lines)
    return store


@pytest.fixture
def authority() -> InMemoryPermissionAuthority:
    authority = InMemoryPermissionAuthority()
    authority.grants[PROJECT_KEY][CODEVIEWER].add("user:jdoe")
    return authority
