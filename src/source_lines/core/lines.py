import logging
from datetime import datetime, timezone

from source_lines.core.errors import ForbiddenError, NotFoundError
from source_lines.core.ports.decorator import SourceDecorator
from source_lines.core.ports.directory import ComponentDirectory
from source_lines.core.ports.permissions import CODEVIEWER, PermissionAuthority
from source_lines.core.ports.source_index import SourceLineIndex
from source_lines.models import Component, Identity, LineRecord, LinesResponse, SourceLine

logger = logging.getLogger(__name__)

SCM_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
# line numbers are stored as 32-bit integers
MAX_LINE = 2**31 - 1


def clamp_from_line(value: int | None) -> int:
    """First line to return. Values below 1 (or no value) are raised to 1 instead of being rejected."""
    if value is None:
        return 1
    return max(value, 1)


def format_scm_date(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.strftime(SCM_DATE_FORMAT)


async def resolve_component(directory: ComponentDirectory, file_uuid: str) -> Component:
    component = await directory.get_component_by_uuid(file_uuid)
    if component is None:
        logger.info("No component with uuid %s", file_uuid)
        raise NotFoundError(f"Component with uuid '{file_uuid}' not found")
    return component


async def check_can_view_source(authority: PermissionAuthority, identity: Identity, component: Component) -> None:
    if not await authority.has_capability(identity, CODEVIEWER, component.permission_key):
        logger.info(
            "Denied %s on %s to %s", CODEVIEWER, component.permission_key, identity.login or "anonymous"
        )
        raise ForbiddenError("Insufficient privileges")


def to_source_line(record: LineRecord, decorator: SourceDecorator) -> SourceLine:
    # leave duplicated unset so it is dropped from the output
    flags = {"duplicated": True} if record.duplications else {}
    return SourceLine(
        line=record.line,
        code=decorator.decorate(record.source, record.highlighting, record.symbols),
        scm_author=record.scm_author,
        scm_revision=record.scm_revision,
        scm_date=format_scm_date(record.scm_date),
        line_hits=record.line_hits,
        conditions=record.conditions,
        covered_conditions=record.covered_conditions,
        **flags,
    )


async def get_lines(
    file_uuid: str,
    identity: Identity,
    *,
    directory: ComponentDirectory,
    authority: PermissionAuthority,
    index: SourceLineIndex,
    decorator: SourceDecorator,
    from_line: int | None = 1,
    to_line: int | None = None,
) -> LinesResponse:
    """Return the decorated lines of a file within ``[from_line, to_line]``.

    Raises ``NotFoundError`` when the uuid does not resolve or when no line
    falls in the range, and ``ForbiddenError`` when ``identity`` may not see
    the file's source. The permission check runs before the index is read.
    """
    component = await resolve_component(directory, file_uuid)
    await check_can_view_source(authority, identity, component)

    first = clamp_from_line(from_line)
    records = await index.get_lines(file_uuid, first, to_line)
    if not records:
        logger.info("No lines of %s in range %d..%s", file_uuid, first, to_line)
        raise NotFoundError(f"File '{file_uuid}' has no sources")

    logger.debug("Serving %d line(s) of %s from line %d", len(records), file_uuid, first)
    return LinesResponse(sources=[to_source_line(r, decorator) for r in records])
