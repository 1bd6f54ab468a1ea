import asyncio
import json
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from source_lines.core.decoration import HtmlSourceDecorator
from source_lines.core.errors import SourceLinesError
from source_lines.core.lines import get_lines
from source_lines.core.ports.store import GrantStore, SourceStore
from source_lines.db.backend import open_backend
from source_lines.models import Identity, LinesResponse

console = Console()


async def _get_backend(backend: str | None, seed: str | None) -> tuple[SourceStore, GrantStore]:
    return await open_backend(backend, seed)


def _render_table(response: LinesResponse) -> None:
    table = Table(show_lines=False)
    for h in ("line", "scmAuthor", "scmRevision", "scmDate", "lineHits", "conditions", "covered", "dup", "code"):
        table.add_column(h)
    for s in response.sources:
        table.add_row(
            str(s.line),
            Text(s.scm_author or ""),
            (s.scm_revision or "")[:8],
            s.scm_date or "",
            "" if s.line_hits is None else str(s.line_hits),
            "" if s.conditions is None else str(s.conditions),
            "" if s.covered_conditions is None else str(s.covered_conditions),
            "x" if s.duplicated else "",
            Text(s.code),
        )
    console.print(table)
    console.print(f"({len(response.sources)} lines)")


def lines(
    uuid: Annotated[str, typer.Argument(help="File uuid.")],
    from_line: Annotated[int, typer.Option("--from", help="First line to return. Starts at 1.")] = 1,
    to_line: Annotated[int | None, typer.Option("--to", help="Last line to return (inclusive).")] = None,
    login: Annotated[str | None, typer.Option(help="Login to check permissions for; anonymous when omitted.")] = None,
    group: Annotated[list[str] | None, typer.Option(help="Group of the caller, repeatable.")] = None,
    backend: Annotated[
        str | None, typer.Option(help="Store backend: memory or postgres. Overrides STORE_BACKEND.")
    ] = None,
    seed: Annotated[str | None, typer.Option(help="JSON dump to seed the memory backend with.")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the JSON document instead of a table.")] = False,
) -> None:
    """Show the lines of a file with SCM and coverage metadata."""
    identity = Identity(login=login, groups=frozenset(group or []))

    async def _run() -> LinesResponse:
        store, authority = await _get_backend(backend, seed)
        try:
            await store.ensure_ready()
            return await get_lines(
                uuid,
                identity,
                directory=store,
                authority=authority,
                index=store,
                decorator=HtmlSourceDecorator(),
                from_line=from_line,
                to_line=to_line,
            )
        finally:
            await store.dispose()

    try:
        response = asyncio.run(_run())
    except SourceLinesError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    if as_json:
        typer.echo(json.dumps(response.to_document(), indent=2))
    else:
        _render_table(response)
