"""Session-scoped fixtures for integration tests."""

from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine
from testcontainers.postgres import PostgresContainer

from alembic.config import Config
from source_lines.db import PostgresPermissionAuthority, PostgresSourceStore
from tests.conftest import PostgresTestBase


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Start a PostgreSQL container for the session."""
    with PostgresTestBase.create_container() as container:
        yield container


@pytest.fixture(scope="session")
def test_db_url(postgres_container: PostgresContainer) -> str:
    """Async connection URL for the test database."""
    return postgres_container.get_connection_url()


@pytest.fixture(scope="session")
def alembic_config(test_db_url: str) -> Config:
    return PostgresTestBase.get_alembic_config(test_db_url)


@pytest.fixture(scope="session")
def _run_migrations(test_db_url: str) -> Generator[None, None, None]:
    """Run migrations once per session, cleanup on teardown."""
    PostgresTestBase.run_migrations(test_db_url)
    yield
    PostgresTestBase.cleanup_migrations(test_db_url)


@pytest_asyncio.fixture
async def pg_store(_run_migrations: None, test_db_url: str) -> AsyncGenerator[PostgresSourceStore, None]:
    """Per-test store on a fresh engine, with the tables emptied."""
    instance = PostgresSourceStore(create_async_engine(test_db_url, future=True))
    await instance.ensure_ready()
    async with instance.engine.begin() as conn:
        await conn.execute(text("TRUNCATE public.components, public.source_lines, public.permissions"))
    yield instance
    await instance.dispose()


@pytest.fixture
def pg_authority(pg_store: PostgresSourceStore) -> PostgresPermissionAuthority:
    return PostgresPermissionAuthority(pg_store.engine)
