"""Database commands: a local PostgreSQL container and schema migrations."""

from __future__ import annotations

import shutil
import subprocess
import time
from typing import Annotated

import typer
from rich.console import Console

from source_lines.settings import settings

db_app = typer.Typer(help="Manage the local PostgreSQL container and schema.")
console = Console()

_CONTAINER_NAME = "source-lines-db"
_IMAGE = "postgres:16-alpine"
_DEFAULT_PORT = 5432


def _docker(*args: str, check: bool = False) -> subprocess.CompletedProcess[str]:
    return subprocess.run(["docker", *args], capture_output=True, text=True, check=check)


def _require_docker() -> None:
    if shutil.which("docker") is None:
        console.print("[red]Docker is not installed or not in PATH.[/red]")
        raise typer.Exit(1)


def _container_state() -> str | None:
    """Return 'running', 'exited', etc. or None if the container does not exist."""
    result = _docker("inspect", "-f", "{{.State.Status}}", _CONTAINER_NAME)
    if result.returncode != 0:
        return None
    return result.stdout.strip()


def _wait_for_ready(timeout: int = 30) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if _docker("exec", _CONTAINER_NAME, "pg_isready", "-U", "postgres").returncode == 0:
            return True
        time.sleep(1)
    return False


@db_app.command("start")
def start(
    port: Annotated[int, typer.Option(help="Host port to map.")] = _DEFAULT_PORT,
) -> None:
    """Start a PostgreSQL container for the postgres store backend."""
    _require_docker()

    state = _container_state()
    if state == "running":
        console.print(f"[green]Container {_CONTAINER_NAME} is already running.[/green]")
        return
    if state is not None:
        console.print(f"Restarting stopped container {_CONTAINER_NAME}...")
        _docker("start", _CONTAINER_NAME, check=True)
    else:
        console.print(f"Starting {_IMAGE} as {_CONTAINER_NAME}...")
        _docker(
            "run",
            "-d",
            "--name",
            _CONTAINER_NAME,
            "-p",
            f"{port}:5432",
            "-e",
            "POSTGRES_PASSWORD=postgres",
            _IMAGE,
            check=True,
        )

    if _wait_for_ready():
        console.print(f"[green]Database ready on localhost:{port}[/green]")
    else:
        console.print("[red]Database did not become ready in time.[/red]")
        raise typer.Exit(1)


@db_app.command("stop")
def stop() -> None:
    """Stop and remove the database container."""
    _require_docker()
    if _container_state() is None:
        console.print(f"Container {_CONTAINER_NAME} not found.")
        return
    _docker("stop", _CONTAINER_NAME, check=True)
    _docker("rm", _CONTAINER_NAME, check=True)
    console.print("[green]Container stopped and removed.[/green]")


@db_app.command("status")
def status() -> None:
    """Show the database container state."""
    _require_docker()
    state = _container_state()
    colour = "green" if state == "running" else "yellow"
    console.print(f"Container {_CONTAINER_NAME}: [{colour}]{state or 'not found'}[/{colour}]")


@db_app.command("migrate")
def migrate(
    db_url: Annotated[str | None, typer.Option(help="Database URL. Defaults to DATABASE_URL.")] = None,
    ini_path: Annotated[str, typer.Option("--ini", help="Path to alembic.ini.")] = "alembic.ini",
) -> None:
    """Apply the schema migrations."""
    from source_lines.db.migrations import run_migrations

    run_migrations(db_url or settings.DATABASE_URL, ini_path)
    console.print("[green]Schema is up to date.[/green]")
