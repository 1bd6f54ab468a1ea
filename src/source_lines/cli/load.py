import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from source_lines.core.load import load_dump, read_dump
from source_lines.db.backend import open_backend

console = Console()


def load(
    path: Annotated[Path, typer.Argument(help="JSON dump with components, lines and permissions.", exists=True)],
    backend: Annotated[
        str | None, typer.Option(help="Store backend: memory or postgres. Overrides STORE_BACKEND.")
    ] = None,
) -> None:
    """Load components, line records and permission grants into the store.

    With the memory backend nothing outlives the command, so this only validates the dump.
    """
    dump = read_dump(path)

    async def _run() -> dict[str, int]:
        store, authority = await open_backend(backend)
        try:
            return await load_dump(store, authority, dump)
        finally:
            await store.dispose()

    counts = asyncio.run(_run())
    console.print(
        f"[green]Loaded {counts['components']} component(s), {counts['lines']} line(s) "
        f"in {counts['files']} file(s), {counts['permissions']} grant(s).[/green]"
    )
