"""FastMCP server exposing the lines operation."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP

from source_lines.core.decoration import HtmlSourceDecorator
from source_lines.core.errors import SourceLinesError
from source_lines.core.lines import get_lines
from source_lines.core.ports.permissions import PermissionAuthority
from source_lines.core.ports.store import SourceStore
from source_lines.models import Identity


def create_mcp_server(store: SourceStore, authority: PermissionAuthority, identity: Identity | None = None) -> FastMCP:
    """Create a FastMCP server wired to the given store, acting as ``identity`` (anonymous by default).

    The server owns ``store`` and disposes it when it shuts down.
    """

    @asynccontextmanager
    async def _lifespan(_server: FastMCP) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await store.dispose()

    mcp = FastMCP(
        "source-lines",
        instructions="Read source code lines with SCM blame and coverage metadata.",
        lifespan=_lifespan,
    )
    caller = identity or Identity()
    decorator = HtmlSourceDecorator()

    @mcp.tool()
    async def lines(uuid: str, from_line: int = 1, to_line: int | None = None) -> dict[str, Any] | str:
        """Return the lines of a file with SCM author, revision, date and coverage counters."""
        await store.ensure_ready()
        try:
            result = await get_lines(
                uuid,
                caller,
                directory=store,
                authority=authority,
                index=store,
                decorator=decorator,
                from_line=from_line,
                to_line=to_line,
            )
        except SourceLinesError as exc:
            return f"Error: {exc}"
        return result.to_document()

    return mcp
