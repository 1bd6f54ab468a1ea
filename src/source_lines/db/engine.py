from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from source_lines.settings import settings


def get_engine(db_url: str | None = None) -> AsyncEngine:
    return create_async_engine(db_url or settings.DATABASE_URL, future=True)
