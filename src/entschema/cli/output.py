"""Output formatting for CLI commands."""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from entschema.core.types import EdgeInfo, TableInfo
from entschema.exceptions import EntSchemaError

console = Console()


def _edge_storage(edge: EdgeInfo) -> str:
    """Short human description of where an edge is stored."""
    if edge.type is None:
        return "unresolved"
    if edge.table is not None:
        return f"{edge.table}.{edge.field} -> {edge.ref}"
    if edge.field is not None:
        return f"field {edge.field}"
    if edge.ref is not None:
        return f"{edge.to}.{edge.ref}"
    return "unresolved"


def _edge_flags(edge: EdgeInfo) -> str:
    return ", ".join(
        flag for flag in ("unique", "symmetric", "inverse") if getattr(edge, flag)
    )


class OutputFormatter:
    """Formats output for terminal or JSON mode."""

    def __init__(self, json_mode: bool = False) -> None:
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
        """
        self.json_mode = json_mode

    def print_table(
        self,
        title: str,
        data: list[dict[str, Any]],
        columns: list[str],
    ) -> None:
        """Print data as Rich table or JSON array.

        Args:
            title: Table title
            data: List of row dictionaries
            columns: Column names to display
        """
        if self.json_mode:
            print(json.dumps(data, default=str, indent=2))
        else:
            table = Table(title=title, show_header=True, header_style="bold magenta")
            for col in columns:
                table.add_column(col)
            for row in data:
                table.add_row(*[str(row.get(col, "")) for col in columns])
            console.print(table)

    def print_table_info(self, table: TableInfo) -> None:
        """Print one table with its fields, indexes and edges."""
        if self.json_mode:
            print(json.dumps(table.model_dump(), default=str, indent=2))
            return

        kind = "junction table" if table.is_junction else "table"
        console.print(f"\n[bold]Table:[/bold] {table.name} ({kind})")

        if table.fields:
            console.print(f"\n[bold]Fields ({len(table.fields)}):[/bold]")
            fields_table = Table(show_header=True, header_style="bold cyan")
            fields_table.add_column("Name")
            fields_table.add_column("Type")
            fields_table.add_column("Optional")
            fields_table.add_column("Unique")
            fields_table.add_column("Default")
            for field in table.fields:
                type_name = field.type
                if field.target_table:
                    type_name = f"{field.type}({field.target_table})"
                fields_table.add_row(
                    field.name,
                    type_name,
                    "✓" if field.optional else "",
                    "✓" if field.unique else "",
                    "" if field.default is None else json.dumps(field.default, default=str),
                )
            console.print(fields_table)

        if table.indexes:
            console.print(f"\n[bold]Indexes ({len(table.indexes)}):[/bold]")
            index_table = Table(show_header=True, header_style="bold cyan")
            index_table.add_column("Name")
            index_table.add_column("Kind")
            index_table.add_column("Fields")
            for index in table.indexes:
                index_table.add_row(index.name, index.kind, ", ".join(index.fields))
            console.print(index_table)

        if table.edges:
            console.print(f"\n[bold]Edges ({len(table.edges)}):[/bold]")
            edge_table = Table(show_header=True, header_style="bold cyan")
            edge_table.add_column("Name")
            edge_table.add_column("To")
            edge_table.add_column("Cardinality")
            edge_table.add_column("Storage")
            edge_table.add_column("Flags")
            for edge in table.edges:
                edge_table.add_row(
                    edge.name, edge.to, edge.cardinality, _edge_storage(edge), _edge_flags(edge)
                )
            console.print(edge_table)

    def print_sql(self, sql: str, dialect: str) -> None:
        """Print DDL as plain text (pipeable) or JSON."""
        if self.json_mode:
            print(json.dumps({"dialect": dialect, "sql": sql}, indent=2))
        else:
            print(sql, end="")

    def print_success(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Print success message.

        Args:
            message: Success message
            details: Optional details to display
        """
        if self.json_mode:
            output = {"success": True, "message": message}
            if details:
                output.update(details)
            print(json.dumps(output, default=str, indent=2))
        else:
            console.print(f"✓ {message}", style="green")
            if details:
                for key, value in details.items():
                    if isinstance(value, list):
                        value = ", ".join(str(v) for v in value) or "-"
                    console.print(f"  {key}: {value}", style="dim")

    def print_error(self, error: Exception) -> None:
        """Print error message.

        Args:
            error: Exception to display
        """
        if self.json_mode:
            if isinstance(error, EntSchemaError):
                print(json.dumps(error.to_dict(), default=str, indent=2))
            else:
                print(json.dumps({"error": str(error)}, indent=2))
        else:
            error_text = str(error)
            if isinstance(error, EntSchemaError) and error.context:
                context_str = "\n".join(
                    f"{k}: {v}" for k, v in error.context.items() if v is not None
                )
                error_text = f"{error_text}\n\n{context_str}"

            panel = Panel(
                error_text,
                title="[red]Error[/red]",
                border_style="red",
            )
            console.print(panel)

    def print_data(self, data: Any) -> None:
        """Print generic data (dict, list, etc.)."""
        if self.json_mode:
            print(json.dumps(data, default=str, indent=2))
        else:
            console.print_json(json.dumps(data, default=str))
