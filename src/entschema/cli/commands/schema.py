"""Schema inspection and registration commands."""

from typing import Annotated

import typer

from entschema.cli.context import CLIContext
from entschema.cli.output import OutputFormatter
from entschema.cli.parsing import load_target
from entschema.schema.edges import is_resolved

TargetArgument = Annotated[
    str,
    typer.Argument(help="Schema to load: path to a .json file or 'module.path:attribute'"),
]


def check_command(ctx: typer.Context, target: TargetArgument) -> None:
    """Resolve a schema and report whether it is valid.

    Examples:

        entschema check schema.json

        entschema check myapp.schema:schema
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        schema = load_target(target)
        info = schema.describe()
        unresolved = [
            f"{table_name}.{edge_name}"
            for table_name, table in schema.tables.items()
            for edge_name, edge in table.edges.items()
            if not is_resolved(edge)
        ]
        formatter.print_success(
            "Schema is valid",
            {
                "tables": info.total_tables - len(info.junction_tables),
                "edges": info.total_edges,
                "junction_tables": info.junction_tables,
                "unresolved_edges": unresolved,
            },
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)


def describe_command(
    ctx: typer.Context,
    target: TargetArgument,
    table_name: Annotated[
        str | None, typer.Argument(help="Only describe this table")
    ] = None,
) -> None:
    """Show the tables of a schema, or one table in detail."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        info = load_target(target).describe()
        if table_name is not None:
            if table_name not in info.tables:
                raise ValueError(
                    f"Table '{table_name}' not found. Available: {', '.join(info.tables)}"
                )
            formatter.print_table_info(info.tables[table_name])
        elif cli_ctx.json_output:
            formatter.print_data(info.model_dump())
        else:
            formatter.print_table(
                f"Tables ({info.total_tables} total)",
                [
                    {
                        "Name": table.name,
                        "Fields": len(table.fields),
                        "Indexes": len(table.indexes),
                        "Edges": len(table.edges),
                        "Junction": "✓" if table.is_junction else "",
                    }
                    for table in info.tables.values()
                ],
                ["Name", "Fields", "Indexes", "Edges", "Junction"],
            )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)


def edges_command(ctx: typer.Context, target: TargetArgument) -> None:
    """List every resolved edge and how it is stored."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        info = load_target(target).describe()
        rows = [
            {"from": table.name, **edge.model_dump()}
            for table in info.tables.values()
            for edge in table.edges
        ]
        if cli_ctx.json_output:
            formatter.print_data(rows)
        else:
            formatter.print_table(
                f"Edges ({len(rows)} total)",
                [
                    {
                        "From": row["from"],
                        "Edge": row["name"],
                        "To": row["to"],
                        "Cardinality": row["cardinality"],
                        "Type": row["type"] or "unresolved",
                        "Field": row["field"] or "",
                        "Ref": row["ref"] or "",
                        "Junction": row["table"] or "",
                    }
                    for row in rows
                ],
                ["From", "Edge", "To", "Cardinality", "Type", "Field", "Ref", "Junction"],
            )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)


def sql_command(
    ctx: typer.Context,
    target: TargetArgument,
    dialect: Annotated[
        str,
        typer.Option("--dialect", help="SQL dialect: sqlite or postgresql"),
    ] = "sqlite",
) -> None:
    """Print the CREATE TABLE / CREATE INDEX statements of a schema."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        formatter.print_sql(load_target(target).ddl(dialect), dialect)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)


def export_command(ctx: typer.Context, target: TargetArgument) -> None:
    """Print the resolved schema as JSON (tables, indexes, document types)."""
    cli_ctx: CLIContext = ctx.obj
    # Export is always JSON
    formatter = OutputFormatter(json_mode=True)

    try:
        formatter.print_data(load_target(target).export())
    except Exception as e:
        OutputFormatter(cli_ctx.json_output).print_error(e)
        raise typer.Exit(code=1)


def create_tables_command(ctx: typer.Context, target: TargetArgument) -> None:
    """Create the schema's tables in the database (existing tables are kept)."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        schema = load_target(target)
        created = schema.create_all(cli_ctx.get_connection())
        formatter.print_success(
            f"Created {len(created)} tables",
            {"database": cli_ctx.database_url, "created": created},
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()
