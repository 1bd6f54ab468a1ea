import asyncio

import typer
from rich.console import Console

from source_lines.settings import settings

serve_app = typer.Typer(help="Start servers.")
console = Console()
# stdout carries the MCP stdio transport
err_console = Console(stderr=True)


def _create_mcp_server():  # type: ignore[no-untyped-def]
    from source_lines.db.backend import open_backend
    from source_lines.mcp.server import create_mcp_server
    from source_lines.models import Identity

    store, authority = asyncio.run(open_backend())
    return create_mcp_server(store, authority, Identity(login=settings.MCP_LOGIN or None))


@serve_app.command("api")
def api(
    host: str = "127.0.0.1",
    port: int = 8000,
) -> None:
    """Start the FastAPI REST API server."""
    import uvicorn

    from source_lines.api.app import create_app

    app = create_app()
    console.print(f"[green]Starting API server on {host}:{port} ({settings.STORE_BACKEND} store)[/green]")
    uvicorn.run(app, host=host, port=port)


@serve_app.command("mcp")
def mcp(
    transport: str = "stdio",
) -> None:
    """Start the MCP server."""
    server = _create_mcp_server()
    err_console.print(f"[green]Starting MCP server (transport: {transport})[/green]")
    server.run(transport=transport)  # type: ignore[arg-type]


@serve_app.callback(invoke_without_command=True)
def serve_all(
    ctx: typer.Context,
    host: str = "0.0.0.0",
    port: int = 8000,
) -> None:
    """Start the API and the MCP (SSE) servers."""
    if ctx.invoked_subcommand is not None:
        return

    import threading

    import uvicorn

    from source_lines.api.app import create_app

    api_app = create_app()
    mcp_server = _create_mcp_server()
    mcp_port = port + 1

    threads = [
        threading.Thread(
            target=uvicorn.run,
            kwargs={"app": api_app, "host": host, "port": port},
            daemon=True,
        ),
        threading.Thread(
            target=mcp_server.run,
            kwargs={"transport": "sse", "host": host, "port": mcp_port},
            daemon=True,
        ),
    ]

    console.print(f"[green]Starting all servers on {host}[/green]")
    console.print(f"  API:       http://{host}:{port}")
    console.print(f"  MCP (SSE): http://{host}:{mcp_port}")

    for t in threads:
        t.start()
    for t in threads:
        t.join()
