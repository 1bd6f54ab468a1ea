import typer

from source_lines.cli.db import db_app
from source_lines.cli.lines import lines
from source_lines.cli.load import load
from source_lines.cli.serve import serve_app
from source_lines.logging import setup_logging

app = typer.Typer(
    name="source-lines",
    help="Source Lines CLI: serve and query source lines with SCM and coverage metadata.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def _configure(
    log_level: str | None = typer.Option(None, "--log-level", help="Overrides LOG_LEVEL."),
) -> None:
    setup_logging(level=log_level)


app.add_typer(db_app, name="db")
app.command("lines")(lines)
app.command("load")(load)
app.add_typer(serve_app, name="serve")


def main() -> None:
    app()
