"""entschema - Relationship-aware schema declarations for document tables.

Declare tables, fields, indexes and edges between tables with a chained
builder. define_schema() resolves every edge at once: it decides which side
stores the foreign key, marks 1:1 keys unique, and synthesizes junction
tables (with their indexes) for many:many relations.

Example:
    from entschema import define_schema, define_table, values as v

    schema = define_schema(
        {
            "users": define_table({"name": v.string()})
            .edges("messages")
            .edges("followers", to="users", inverse="followees"),
            "messages": define_table({"text": v.string()}).edge("user"),
        }
    )

    schema.tables["users"].edges["messages"]  # MultipleFieldEdge(ref="userId")
    schema.junction_tables  # ["users_followees_to_followers"]
    schema.create_all("sqlite:///./app.db")
"""

from entschema import values
from entschema.core.connection import DatabaseConnection
from entschema.core.types import (
    Cardinality,
    EdgeInfo,
    EdgeType,
    FieldInfo,
    FieldType,
    IndexInfo,
    SchemaInfo,
    SchemaOptions,
    TableInfo,
)
from entschema.exceptions import (
    AmbiguousInverseEdgeError,
    ConflictingOptionalEdgesError,
    ConnectionError,
    DeclarationError,
    DuplicateEdgeError,
    DuplicateFieldError,
    DuplicateIndexError,
    EntSchemaError,
    InvalidEdgeOptionsError,
    InvalidIndexError,
    InvalidInverseEdgeTypeError,
    InvalidManyToOneInverseError,
    InverseEdgeAlreadyPairedError,
    JunctionTableConflictError,
    RefFieldMismatchError,
    SchemaFileError,
)
from entschema.schema import (
    EntConfig,
    EntSchema,
    SchemaResolver,
    TableDefinition,
    TableSnapshot,
    define_schema,
    define_table,
    get_ent_definitions,
    load_schema_dict,
    load_schema_file,
    resolve_edges,
)
from entschema.schema.edges import (
    EdgeConfig,
    MultipleFieldEdge,
    MultipleRefEdge,
    PendingEdges,
    SingleFieldEdge,
    SingleRefEdge,
)
from entschema.values import Validator

__version__ = "0.1.0"

__all__ = [
    # Declaration API
    "define_table",
    "define_schema",
    "get_ent_definitions",
    "resolve_edges",
    "load_schema_dict",
    "load_schema_file",
    "values",
    "Validator",
    # Schema classes
    "TableDefinition",
    "TableSnapshot",
    "SchemaResolver",
    "EntSchema",
    "EntConfig",
    "DatabaseConnection",
    # Edges
    "EdgeConfig",
    "SingleFieldEdge",
    "SingleRefEdge",
    "PendingEdges",
    "MultipleFieldEdge",
    "MultipleRefEdge",
    # Types
    "FieldType",
    "Cardinality",
    "EdgeType",
    "SchemaOptions",
    "FieldInfo",
    "IndexInfo",
    "EdgeInfo",
    "TableInfo",
    "SchemaInfo",
    # Exceptions
    "EntSchemaError",
    "ConnectionError",
    "SchemaFileError",
    "DeclarationError",
    "DuplicateFieldError",
    "DuplicateEdgeError",
    "DuplicateIndexError",
    "InvalidIndexError",
    "InvalidEdgeOptionsError",
    "AmbiguousInverseEdgeError",
    "ConflictingOptionalEdgesError",
    "InvalidInverseEdgeTypeError",
    "RefFieldMismatchError",
    "InvalidManyToOneInverseError",
    "InverseEdgeAlreadyPairedError",
    "JunctionTableConflictError",
]
