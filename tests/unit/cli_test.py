"""Tests for the typer CLI."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from source_lines.cli.app import app
from source_lines.db.memory import InMemoryPermissionAuthority, InMemorySourceStore
from tests.conftest import FILE_UUID, sample_dump

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_root_logger():  # type: ignore[no-untyped-def]
    # the app callback reconfigures the root logger on every invocation
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize(
    "args",
    [
        [],
        ["db"],
        ["db", "migrate"],
        ["lines"],
        ["load"],
        ["serve"],
    ],
    ids=["root", "db", "db-migrate", "lines", "load", "serve"],
)
def test_short_help_flag(args: list[str]) -> None:
    result = runner.invoke(app, [*args, "-h"])
    assert result.exit_code == 0
    assert "Usage" in result.output


def _patch_backend(store: InMemorySourceStore, authority: InMemoryPermissionAuthority):  # type: ignore[no-untyped-def]
    return patch("source_lines.cli.lines._get_backend", AsyncMock(return_value=(store, authority)))


def test_lines_prints_json_document(store: InMemorySourceStore, authority: InMemoryPermissionAuthority) -> None:
    with _patch_backend(store, authority):
        result = runner.invoke(app, ["lines", FILE_UUID, "--from", "4", "--login", "jdoe", "--json"])

    assert result.exit_code == 0, result.output
    doc = json.loads(result.stdout)
    assert [s["line"] for s in doc["sources"]] == [4, 5]
    assert doc["sources"][0]["duplicated"] is True
    assert "duplicated" not in doc["sources"][1]


def test_lines_renders_table(store: InMemorySourceStore, authority: InMemoryPermissionAuthority) -> None:
    with _patch_backend(store, authority):
        result = runner.invoke(app, ["lines", FILE_UUID, "--to", "2", "--login", "jdoe"])

    assert result.exit_code == 0, result.output
    assert "(2 lines)" in result.output


def test_lines_reports_forbidden(store: InMemorySourceStore, authority: InMemoryPermissionAuthority) -> None:
    with _patch_backend(store, authority):
        result = runner.invoke(app, ["lines", FILE_UUID])

    assert result.exit_code == 1
    assert "Insufficient privileges" in result.output


def test_lines_group_option_grants_access(
    store: InMemorySourceStore, authority: InMemoryPermissionAuthority
) -> None:
    authority.grants["my:project"]["codeviewer"].add("group:devs")
    with _patch_backend(store, authority):
        result = runner.invoke(app, ["lines", FILE_UUID, "--login", "al", "--group", "devs", "--json"])

    assert result.exit_code == 0, result.output


def test_load_reports_counts(tmp_path: Path) -> None:
    path = tmp_path / "dump.json"
    path.write_text(sample_dump().model_dump_json(), encoding="utf-8")

    result = runner.invoke(app, ["load", str(path), "--backend", "memory"])

    assert result.exit_code == 0, result.output
    assert "5 line(s)" in result.output


def test_db_migrate_runs_alembic() -> None:
    with patch("source_lines.db.migrations.run_migrations") as run:
        result = runner.invoke(app, ["db", "migrate", "--db-url", "postgresql+asyncpg://x/y"])

    assert result.exit_code == 0, result.output
    run.assert_called_once_with("postgresql+asyncpg://x/y", "alembic.ini")
