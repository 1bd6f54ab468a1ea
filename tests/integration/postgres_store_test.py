"""Integration tests for the PostgreSQL store against a real database."""

from datetime import datetime, timezone

import pytest

from source_lines.core.decoration import HtmlSourceDecorator
from source_lines.core.errors import ForbiddenError, NotFoundError
from source_lines.core.lines import get_lines
from source_lines.core.load import load_dump
from source_lines.core.ports.permissions import CODEVIEWER
from source_lines.db import PostgresPermissionAuthority, PostgresSourceStore
from source_lines.models import Component, Identity, LineRecord
from tests.conftest import EMPTY_FILE_UUID, FILE_UUID, sample_dump


@pytest.mark.asyncio
async def test_component_round_trip(pg_store: PostgresSourceStore) -> None:
    component = Component(uuid="u1", key="proj:a.py", project_key="proj", path="a.py")
    await pg_store.save_component(component)
    await pg_store.save_component(component.model_copy(update={"path": "b.py"}))

    stored = await pg_store.get_component_by_uuid("u1")
    assert stored is not None
    assert stored.path == "b.py"
    assert await pg_store.get_component_by_uuid("u2") is None


@pytest.mark.asyncio
async def test_lines_are_filtered_and_ordered(pg_store: PostgresSourceStore) -> None:
    when = datetime(2014, 9, 11, 8, 53, 12, tzinfo=timezone.utc)
    await pg_store.save_lines(
        "u1",
        [
            LineRecord(line=2, source="b", scm_date=when, duplications=[1, 2]),
            LineRecord(line=1, source="a"),
            LineRecord(line=3, source="c", line_hits=4),
        ],
    )

    assert [r.line for r in await pg_store.get_lines("u1", 1)] == [1, 2, 3]
    assert [r.line for r in await pg_store.get_lines("u1", 2, 2)] == [2]
    assert await pg_store.get_lines("u1", 3, 1) == []

    second = (await pg_store.get_lines("u1", 2, 2))[0]
    assert second.scm_date == when
    assert second.duplications == [1, 2]
    assert second.line_hits is None


@pytest.mark.asyncio
async def test_out_of_range_bounds_are_clamped(pg_store: PostgresSourceStore) -> None:
    await pg_store.save_lines("u1", [LineRecord(line=1, source="a"), LineRecord(line=2, source="b")])

    assert [r.line for r in await pg_store.get_lines("u1", 1, 2**40)] == [1, 2]
    assert await pg_store.get_lines("u1", 2**40) == []


@pytest.mark.asyncio
async def test_naive_scm_dates_are_stored_as_utc(pg_store: PostgresSourceStore) -> None:
    await pg_store.save_lines("u1", [LineRecord(line=1, scm_date=datetime(2014, 9, 11, 8, 53, 12))])
    (record,) = await pg_store.get_lines("u1", 1)
    assert record.scm_date == datetime(2014, 9, 11, 8, 53, 12, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_authority_grants(pg_store: PostgresSourceStore, pg_authority: PostgresPermissionAuthority) -> None:
    await pg_authority.grant("group:devs", CODEVIEWER, "proj")
    await pg_authority.grant("group:devs", CODEVIEWER, "proj")

    assert await pg_authority.has_capability(Identity(login="al", groups=frozenset({"devs"})), CODEVIEWER, "proj")
    assert not await pg_authority.has_capability(Identity(login="al"), CODEVIEWER, "proj")


@pytest.mark.asyncio
async def test_get_lines_end_to_end(pg_store: PostgresSourceStore, pg_authority: PostgresPermissionAuthority) -> None:
    await load_dump(pg_store, pg_authority, sample_dump())
    kwargs = {
        "directory": pg_store,
        "authority": pg_authority,
        "index": pg_store,
        "decorator": HtmlSourceDecorator(),
    }

    result = await get_lines(FILE_UUID, Identity(login="jdoe"), from_line=3, **kwargs)
    doc = result.to_document()
    assert [s["line"] for s in doc["sources"]] == [3, 4, 5]
    assert doc["sources"][1]["scmDate"] == "2014-09-11T08:53:12+0000"
    assert doc["sources"][1]["duplicated"] is True
    assert "duplicated" not in doc["sources"][0]

    with pytest.raises(NotFoundError):
        await get_lines(EMPTY_FILE_UUID, Identity(login="jdoe"), **kwargs)
    with pytest.raises(ForbiddenError):
        await get_lines(FILE_UUID, Identity(login="mallory"), **kwargs)
