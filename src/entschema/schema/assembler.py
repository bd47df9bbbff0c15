"""Schema assembly: resolve every table once and expose the result.

Example:
    from entschema import define_schema, define_table, values as v

    schema = define_schema(
        {
            "users": define_table({"name": v.string()}).edges("messages"),
            "messages": define_table({"text": v.string()}).edge("user"),
        }
    )
    schema.tables["users"].edges["messages"].ref  # "userId"
    print(schema.ddl("postgresql"))
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Engine, MetaData, inspect

from entschema.core.connection import DatabaseConnection
from entschema.core.types import FieldInfo, IndexInfo, SchemaInfo, SchemaOptions, TableInfo
from entschema.schema.definition import FieldConfig, TableDefinition, TableSnapshot
from entschema.schema.edges import EdgeConfig
from entschema.schema.resolver import resolve_edges
from entschema.storage.metadata import build_metadata, render_ddl

logger = logging.getLogger(__name__)


class EntConfig(BaseModel):
    """Per-table view read by query and mutation helpers."""

    model_config = ConfigDict(frozen=True)

    defaults: dict[str, Any]
    edges: dict[str, EdgeConfig]
    fields: dict[str, FieldConfig]


class EntSchema:
    """A fully resolved schema: declared tables plus junction tables."""

    def __init__(self, tables: Mapping[str, TableSnapshot], options: SchemaOptions) -> None:
        self._tables = dict(tables)
        self._options = options
        self._metadata: MetaData | None = None

    @property
    def tables(self) -> Mapping[str, TableSnapshot]:
        """Read-only view of every table, junction tables last."""
        return MappingProxyType(self._tables)

    @property
    def options(self) -> SchemaOptions:
        return self._options

    @property
    def junction_tables(self) -> list[str]:
        return [name for name, table in self._tables.items() if table.is_junction]

    @property
    def metadata(self) -> MetaData:
        """SQLAlchemy metadata with one Table per schema table (built on first access).

        Raises:
            InvalidIndexError: If an index refers to an unknown field
        """
        if self._metadata is None:
            self._metadata = build_metadata(self._tables, self._options.schema_validation)
        return self._metadata

    def __getitem__(self, table_name: str) -> TableSnapshot:
        return self._tables[table_name]

    def __contains__(self, table_name: object) -> bool:
        return table_name in self._tables

    def __iter__(self) -> Iterator[str]:
        return iter(self._tables)

    def __len__(self) -> int:
        return len(self._tables)

    def ddl(self, dialect: str = "sqlite") -> str:
        """Render the CREATE statements of the schema for a SQL dialect."""
        return render_ddl(self.metadata, dialect)

    def create_all(self, bind: Engine | DatabaseConnection | str) -> list[str]:
        """Create the schema's tables in a database.

        Args:
            bind: SQLAlchemy engine, DatabaseConnection or database URL

        Returns:
            Names of the tables that were created
        """
        if isinstance(bind, DatabaseConnection):
            return bind.create_tables(self.metadata)
        if isinstance(bind, Engine):
            existing = set(inspect(bind).get_table_names())
            self.metadata.create_all(bind)
            return [t.name for t in self.metadata.sorted_tables if t.name not in existing]
        with DatabaseConnection(bind) as connection:
            return connection.create_tables(self.metadata)

    def export(self) -> dict[str, Any]:
        """Export the schema as a JSON-ready dict."""
        return {
            "schemaValidation": self._options.schema_validation,
            "tables": {name: table.export() for name, table in self._tables.items()},
        }

    def describe(self) -> SchemaInfo:
        """Describe every table with its fields, indexes and resolved edges."""
        tables = {name: _table_info(name, table) for name, table in self._tables.items()}
        return SchemaInfo(
            tables=tables,
            total_tables=len(tables),
            total_edges=sum(len(t.edges) for t in tables.values()),
            junction_tables=self.junction_tables,
        )


def _table_info(name: str, table: TableSnapshot) -> TableInfo:
    fields = [
        FieldInfo(
            name=field_name,
            type=validator.kind.value,
            optional=validator.optional,
            unique=field_name in table.field_configs and table.field_configs[field_name].unique,
            default=table.defaults.get(field_name),
            target_table=validator.table_name,
        )
        for field_name, validator in table.document_schema.items()
    ]
    indexes = [IndexInfo(name=i.name, fields=list(i.sort_fields)) for i in table.indexes]
    indexes.extend(
        IndexInfo(name=i.name, kind="search", fields=[i.search_field, *i.filter_fields])
        for i in table.search_indexes
    )
    indexes.extend(
        IndexInfo(name=i.name, kind="vector", fields=[i.vector_field, *i.filter_fields])
        for i in table.vector_indexes
    )
    return TableInfo(
        name=name,
        is_junction=table.is_junction,
        fields=fields,
        indexes=indexes,
        edges=[edge.to_info() for edge in table.edges.values()],
    )


def define_schema(
    tables: Mapping[str, TableDefinition | TableSnapshot],
    *,
    schema_validation: bool = True,
) -> EntSchema:
    """Resolve a mapping of table declarations into an EntSchema.

    Args:
        tables: Table name -> builder (or snapshot)
        schema_validation: Register typed columns and foreign keys

    Returns:
        The resolved schema

    Raises:
        EntSchemaError: If any edge cannot be resolved
    """
    options = SchemaOptions(schema_validation=schema_validation)
    resolved = resolve_edges(tables)
    schema = EntSchema(resolved, options)
    logger.info(
        f"Defined schema with {len(tables)} tables and "
        f"{len(schema.junction_tables)} junction tables"
    )
    return schema


def get_ent_definitions(schema: EntSchema) -> Mapping[str, EntConfig]:
    """Per-table defaults, edges and field configs of a resolved schema."""
    return MappingProxyType(
        {
            name: EntConfig(
                defaults=dict(table.defaults),
                edges=dict(table.edges),
                fields=dict(table.field_configs),
            )
            for name, table in schema.tables.items()
        }
    )
