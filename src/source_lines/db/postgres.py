import logging
from datetime import timezone
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from source_lines.core.lines import MAX_LINE
from source_lines.models import Component, Identity, LineRecord

logger = logging.getLogger(__name__)

_SCHEMA_DDL = (
    """
    CREATE TABLE IF NOT EXISTS public.components
    (
        uuid        TEXT PRIMARY KEY,
        key         TEXT NOT NULL UNIQUE,
        project_key TEXT,
        path        TEXT,
        qualifier   TEXT NOT NULL DEFAULT 'FIL'
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS public.source_lines
    (
        file_uuid          TEXT      NOT NULL,
        line               INTEGER   NOT NULL,
        source             TEXT      NOT NULL DEFAULT '',
        highlighting       TEXT      NOT NULL DEFAULT '',
        symbols            TEXT      NOT NULL DEFAULT '',
        scm_author         TEXT,
        scm_revision       TEXT,
        scm_date           TIMESTAMPTZ,
        line_hits          INTEGER,
        conditions         INTEGER,
        covered_conditions INTEGER,
        duplications       INTEGER[] NOT NULL DEFAULT '{}',
        PRIMARY KEY (file_uuid, line)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS public.permissions
    (
        grantee       TEXT NOT NULL,
        capability    TEXT NOT NULL,
        component_key TEXT NOT NULL,
        PRIMARY KEY (component_key, capability, grantee)
    )
    """,
)

# revision whose schema _SCHEMA_DDL creates; stamped so `alembic upgrade` starts after it
SCHEMA_REVISION = "001"

_VERSION_TABLE_DDL = (
    "CREATE TABLE IF NOT EXISTS public.alembic_version (version_num VARCHAR(32) NOT NULL PRIMARY KEY)"
)
_STAMP_SQL = (
    "INSERT INTO public.alembic_version (version_num) SELECT CAST(:rev AS VARCHAR) "
    "WHERE NOT EXISTS (SELECT 1 FROM public.alembic_version)"
)

_LINE_COLUMNS = (
    "line, source, highlighting, symbols, scm_author, scm_revision, scm_date, "
    "line_hits, conditions, covered_conditions, duplications"
)


def _line_params(file_uuid: str, record: LineRecord) -> dict[str, Any]:
    scm_date = record.scm_date
    if scm_date is not None and scm_date.tzinfo is None:
        scm_date = scm_date.replace(tzinfo=timezone.utc)
    return {
        "file_uuid": file_uuid,
        "line": record.line,
        "source": record.source,
        "highlighting": record.highlighting,
        "symbols": record.symbols,
        "scm_author": record.scm_author,
        "scm_revision": record.scm_revision,
        "scm_date": scm_date,
        "line_hits": record.line_hits,
        "conditions": record.conditions,
        "covered_conditions": record.covered_conditions,
        "duplications": list(record.duplications),
    }


def _row_to_line(row: Any) -> LineRecord:
    return LineRecord(
        line=row[0],
        source=row[1],
        highlighting=row[2],
        symbols=row[3],
        scm_author=row[4],
        scm_revision=row[5],
        scm_date=row[6],
        line_hits=row[7],
        conditions=row[8],
        covered_conditions=row[9],
        duplications=list(row[10] or []),
    )


class PostgresSourceStore:
    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._schema_ensured = False

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    async def ensure_ready(self) -> None:
        if self._schema_ensured:
            return
        async with self._engine.begin() as conn:
            for ddl in _SCHEMA_DDL:
                await conn.execute(text(ddl))
            await conn.execute(text(_VERSION_TABLE_DDL))
            await conn.execute(text(_STAMP_SQL), {"rev": SCHEMA_REVISION})
        self._schema_ensured = True

    async def save_component(self, component: Component) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(
                text(
                    "INSERT INTO public.components (uuid, key, project_key, path, qualifier) "
                    "VALUES (:uuid, :key, :project_key, :path, :qualifier) "
                    "ON CONFLICT (uuid) DO UPDATE SET key = EXCLUDED.key, project_key = EXCLUDED.project_key, "
                    "path = EXCLUDED.path, qualifier = EXCLUDED.qualifier"
                ),
                component.model_dump(),
            )

    async def save_lines(self, file_uuid: str, lines: list[LineRecord]) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(text("DELETE FROM public.source_lines WHERE file_uuid = :u"), {"u": file_uuid})
            if lines:
                await conn.execute(
                    text(
                        f"INSERT INTO public.source_lines (file_uuid, {_LINE_COLUMNS}) VALUES "
                        "(:file_uuid, :line, :source, :highlighting, :symbols, :scm_author, :scm_revision, "
                        ":scm_date, :line_hits, :conditions, :covered_conditions, :duplications)"
                    ),
                    [_line_params(file_uuid, r) for r in lines],
                )
        logger.debug("Stored %d line(s) for %s", len(lines), file_uuid)

    async def get_component_by_uuid(self, uuid: str) -> Component | None:
        async with self._engine.connect() as conn:
            result = await conn.execute(
                text("SELECT uuid, key, project_key, path, qualifier FROM public.components WHERE uuid = :u"),
                {"u": uuid},
            )
            row = result.first()
        if row is None:
            return None
        return Component(uuid=row[0], key=row[1], project_key=row[2], path=row[3], qualifier=row[4])

    async def get_lines(self, file_uuid: str, from_line: int, to_line: int | None = None) -> list[LineRecord]:
        if from_line > MAX_LINE:
            return []
        params: dict[str, Any] = {"u": file_uuid, "from_line": from_line}
        upper = ""
        if to_line is not None:
            upper = " AND line <= :to_line"
            params["to_line"] = min(to_line, MAX_LINE)
        async with self._engine.connect() as conn:
            result = await conn.execute(
                text(
                    f"SELECT {_LINE_COLUMNS} FROM public.source_lines "
                    f"WHERE file_uuid = :u AND line >= :from_line{upper} ORDER BY line"
                ),
                params,
            )
            return [_row_to_line(row) for row in result.fetchall()]

    async def ping(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("Database ping failed", exc_info=True)
            return False

    async def dispose(self) -> None:
        await self._engine.dispose()


class PostgresPermissionAuthority:
    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def grant(self, grantee: str, capability: str, component_key: str) -> None:
        async with self._engine.begin() as conn:
            await conn.execute(
                text(
                    "INSERT INTO public.permissions (grantee, capability, component_key) "
                    "VALUES (:grantee, :capability, :component_key) ON CONFLICT DO NOTHING"
                ),
                {"grantee": grantee, "capability": capability, "component_key": component_key},
            )

    async def has_capability(self, identity: Identity, capability: str, component_key: str) -> bool:
        async with self._engine.connect() as conn:
            result = await conn.execute(
                text(
                    "SELECT 1 FROM public.permissions "
                    "WHERE component_key = :k AND capability = :c AND grantee = ANY(:grantees) LIMIT 1"
                ),
                {"k": component_key, "c": capability, "grantees": sorted(identity.grantees())},
            )
            return result.first() is not None
