"""Schema declaration and resolution for entschema."""

from entschema.schema.assembler import EntConfig, EntSchema, define_schema, get_ent_definitions
from entschema.schema.definition import (
    FieldConfig,
    IndexConfig,
    SearchIndexConfig,
    TableDefinition,
    TableSnapshot,
    VectorIndexConfig,
    define_table,
)
from entschema.schema.loader import load_schema_dict, load_schema_file
from entschema.schema.resolver import SchemaResolver, resolve_edges

__all__ = [
    "define_table",
    "define_schema",
    "get_ent_definitions",
    "resolve_edges",
    "load_schema_dict",
    "load_schema_file",
    "TableDefinition",
    "TableSnapshot",
    "SchemaResolver",
    "EntSchema",
    "EntConfig",
    "IndexConfig",
    "SearchIndexConfig",
    "VectorIndexConfig",
    "FieldConfig",
]
