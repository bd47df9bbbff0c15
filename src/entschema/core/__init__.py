"""Core components for entschema."""

from entschema.core.connection import DatabaseConnection
from entschema.core.types import (
    Cardinality,
    EdgeInfo,
    EdgeOptions,
    EdgesOptions,
    EdgeType,
    FieldInfo,
    FieldType,
    IndexInfo,
    SchemaInfo,
    SchemaOptions,
    TableInfo,
)

__all__ = [
    "DatabaseConnection",
    "FieldType",
    "Cardinality",
    "EdgeType",
    "EdgeOptions",
    "EdgesOptions",
    "SchemaOptions",
    "FieldInfo",
    "IndexInfo",
    "EdgeInfo",
    "TableInfo",
    "SchemaInfo",
]
