"""Registration of resolved tables into SQLAlchemy metadata.

Every table gets the system columns (`_id`, `_creationTime`) plus one column
per top-level field, and one SQL index per declared index with the creation
time appended. Search and vector indexes have no portable SQL form and are
kept in `Table.info`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Index,
    LargeBinary,
    MetaData,
    String,
    Table,
    Text,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.schema import CreateIndex, CreateTable
from sqlalchemy.types import TypeEngine

from entschema.core.types import CREATION_TIME_FIELD, ID_FIELD, SYSTEM_FIELDS, FieldType
from entschema.exceptions import InvalidIndexError
from entschema.values import Validator

if TYPE_CHECKING:
    from entschema.schema.definition import TableSnapshot

logger = logging.getLogger(__name__)

# Dialect-aware JSON type: JSONB on PostgreSQL, JSON on SQLite
JSONType = JSONB().with_variant(JSON(), "sqlite")

# Mapping from validator kinds to SQLAlchemy column types
FIELD_TYPE_MAP = {
    FieldType.STRING: lambda: Text(),
    FieldType.INT: lambda: BigInteger(),
    FieldType.FLOAT: lambda: Float(),
    FieldType.BOOL: lambda: Boolean(),
    FieldType.BYTES: lambda: LargeBinary(),
    FieldType.ID: lambda: String(36),
    FieldType.JSON: lambda: JSONType,
    FieldType.OBJECT: lambda: JSONType,
    FieldType.ARRAY: lambda: JSONType,
    FieldType.UNION: lambda: JSONType,
}

DIALECTS = {
    "postgresql": postgresql.dialect,
    "sqlite": sqlite.dialect,
}


def column_type(validator: Validator) -> TypeEngine[Any]:
    """SQLAlchemy column type for a field validator."""
    if validator.kind == FieldType.LITERAL:
        if isinstance(validator.value, bool):
            return Boolean()
        if isinstance(validator.value, (int, float)):
            return Float()
        return Text()
    return FIELD_TYPE_MAP.get(validator.kind, lambda: JSONType)()


def _check_field_path(table_name: str, table: TableSnapshot, index_name: str, path: str) -> None:
    """Ensure an index path names a declared field or a system field."""
    if path in SYSTEM_FIELDS:
        return
    root, _, rest = path.partition(".")
    validator = table.document_schema.get(root)
    if validator is None:
        raise InvalidIndexError(index_name, f"unknown field '{path}'", table_name)
    if rest and validator.kind == FieldType.OBJECT and rest not in validator.field_paths():
        raise InvalidIndexError(index_name, f"unknown nested field '{path}'", table_name)


def build_table(
    metadata: MetaData,
    table_name: str,
    table: TableSnapshot,
    table_names: set[str],
    schema_validation: bool = True,
) -> Table:
    """Register one table into `metadata`.

    Args:
        metadata: Metadata to register into
        table_name: Name of the table
        table: Resolved table snapshot
        table_names: All table names of the schema (foreign key targets)
        schema_validation: Typed columns and foreign keys when True, JSON columns otherwise

    Returns:
        The registered table

    Raises:
        InvalidIndexError: If an index refers to an unknown field
    """
    columns: list[Column[Any]] = [
        Column(ID_FIELD, String(36), primary_key=True),
        Column(CREATION_TIME_FIELD, Float, nullable=False),
    ]
    for name, validator in table.document_schema.items():
        if not schema_validation:
            columns.append(Column(name, JSONType, nullable=True))
            continue
        constraints = []
        if validator.kind == FieldType.ID and validator.table_name in table_names:
            constraints.append(ForeignKey(f"{validator.table_name}.{ID_FIELD}"))
        columns.append(
            Column(name, column_type(validator), *constraints, nullable=validator.optional)
        )

    indexes: list[Index] = []
    nested_indexes: list[dict[str, Any]] = []
    for index in table.indexes:
        for path in index.fields:
            _check_field_path(table_name, table, index.name, path)
        if any("." in path for path in index.fields):
            # Nested paths have no portable column to index
            logger.debug(f"Index '{index.name}' on '{table_name}' uses nested paths, not emitted")
            nested_indexes.append(index.to_dict())
            continue
        indexes.append(Index(f"ix_{table_name}_{index.name}", *index.sort_fields))

    for search_index in table.search_indexes:
        for path in (search_index.search_field, *search_index.filter_fields):
            _check_field_path(table_name, table, search_index.name, path)
    for vector_index in table.vector_indexes:
        for path in (vector_index.vector_field, *vector_index.filter_fields):
            _check_field_path(table_name, table, vector_index.name, path)

    return Table(
        table_name,
        metadata,
        *columns,
        *indexes,
        info={
            "is_junction": table.is_junction,
            "nested_indexes": nested_indexes,
            "search_indexes": [i.to_dict() for i in table.search_indexes],
            "vector_indexes": [i.to_dict() for i in table.vector_indexes],
        },
    )


def build_metadata(
    tables: Mapping[str, TableSnapshot], schema_validation: bool = True
) -> MetaData:
    """Register every resolved table into a fresh MetaData."""
    metadata = MetaData()
    table_names = set(tables)
    for table_name, table in tables.items():
        build_table(metadata, table_name, table, table_names, schema_validation)
    logger.debug(f"Registered {len(tables)} tables into SQLAlchemy metadata")
    return metadata


def render_ddl(metadata: MetaData, dialect: str = "sqlite") -> str:
    """Render CREATE TABLE / CREATE INDEX statements for a dialect.

    Raises:
        ValueError: If the dialect is not supported
    """
    if dialect not in DIALECTS:
        raise ValueError(
            f"Unsupported dialect '{dialect}'. Supported: {', '.join(sorted(DIALECTS))}"
        )
    sql_dialect = DIALECTS[dialect]()
    statements = []
    for table in metadata.sorted_tables:
        statements.append(str(CreateTable(table).compile(dialect=sql_dialect)).strip() + ";")
        for index in sorted(table.indexes, key=lambda i: i.name or ""):
            statements.append(str(CreateIndex(index).compile(dialect=sql_dialect)).strip() + ";")
    return "\n\n".join(statements) + "\n"
