"""entschema CLI - Main entry point."""

import logging
import sys
from typing import Annotated, Any

import typer

import entschema
from entschema.cli.context import CLIContext, get_database_url

# Create main Typer app
app = typer.Typer(
    name="entschema",
    help="entschema CLI - Resolve, inspect and register relationship-aware schemas",
    no_args_is_help=True,
)


class _StderrHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Stream handler that writes to the current sys.stderr when a record is emitted."""

    @property  # type: ignore[override]
    def stream(self) -> Any:
        return sys.stderr

    @stream.setter
    def stream(self, value: Any) -> None:
        pass


def configure_logging(verbose: bool = False) -> None:
    """Send entschema log records to stderr (DEBUG when verbose, else WARNING)."""
    package_logger = logging.getLogger("entschema")
    if not any(isinstance(h, _StderrHandler) for h in package_logger.handlers):
        handler = _StderrHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.callback()
def main_callback(
    ctx: typer.Context,
    database: Annotated[
        str | None,
        typer.Option(
            "--database",
            "-d",
            envvar="ENTSCHEMA_URL",
            help="Database URL for create-tables (PostgreSQL or SQLite)",
        ),
    ] = None,
    echo: Annotated[
        bool,
        typer.Option(
            "--echo",
            "-e",
            help="Echo SQL statements to console",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON (machine-readable)",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log resolution steps to stderr",
        ),
    ] = False,
) -> None:
    """Initialize CLI context with global options."""
    configure_logging(verbose)

    ctx.obj = CLIContext(
        database_url=get_database_url(database),
        echo=echo,
        json_output=json_output,
    )


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"entschema v{entschema.__version__}")


# Register schema commands at the top level
from entschema.cli.commands import schema  # noqa: E402

app.command(name="check")(schema.check_command)
app.command(name="describe")(schema.describe_command)
app.command(name="edges")(schema.edges_command)
app.command(name="sql")(schema.sql_command)
app.command(name="export")(schema.export_command)
app.command(name="create-tables")(schema.create_tables_command)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
