"""Core types and specifications for entschema.

All types are designed to be JSON-serializable for agent consumption.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from entschema.core.compat import StrEnum

# System fields present on every document
ID_FIELD = "_id"
CREATION_TIME_FIELD = "_creationTime"
SYSTEM_FIELDS = (ID_FIELD, CREATION_TIME_FIELD)


class FieldType(StrEnum):
    """Value kinds a field validator can describe."""

    STRING = "string"
    INT = "int64"
    FLOAT = "float64"
    BOOL = "boolean"
    BYTES = "bytes"
    JSON = "any"
    ID = "id"
    OBJECT = "object"
    ARRAY = "array"
    LITERAL = "literal"
    UNION = "union"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid field type values."""
        return [t.value for t in cls]


class Cardinality(StrEnum):
    """How many documents an edge can point at."""

    SINGLE = "single"  # 0 or 1 related document
    MULTIPLE = "multiple"  # 0..n related documents

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid cardinality values."""
        return [c.value for c in cls]


class EdgeType(StrEnum):
    """Where an edge is stored."""

    FIELD = "field"  # foreign key on a document
    REF = "ref"  # stored elsewhere, this side only reads it

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid edge type values."""
        return [t.value for t in cls]


class EdgeOptions(BaseModel):
    """Options for a single edge declaration.

    A required edge stores the foreign key (optionally under a custom `field`),
    an optional edge reads it from the inverse side (optionally checked against `ref`).
    """

    model_config = ConfigDict(extra="forbid")

    optional: bool = Field(default=False, description="Whether this side skips storing the key")
    field: str | None = Field(
        default=None, description="Foreign key field name (defaults to '{name}Id')"
    )
    ref: str | None = Field(
        default=None, description="Expected foreign key field on the inverse edge"
    )

    @model_validator(mode="after")
    def _check_storage_side(self) -> EdgeOptions:
        if self.optional and self.field is not None:
            raise ValueError("`field` cannot be combined with `optional`, use `ref` instead")
        if not self.optional and self.ref is not None:
            raise ValueError("`ref` is only valid for optional edges")
        return self


class EdgesOptions(BaseModel):
    """Options for a multiple edges declaration."""

    model_config = ConfigDict(extra="forbid")

    to: str | None = Field(default=None, description="Target table (defaults to the edge name)")
    inverse: str | None = Field(
        default=None, description="Name of the inverse edge declared on this same table"
    )


class SchemaOptions(BaseModel):
    """Options for assembling a schema."""

    schema_validation: bool = Field(
        default=True,
        description="Register typed columns and foreign keys instead of untyped JSON columns",
    )


class FieldInfo(BaseModel):
    """Information about a declared field (output format)."""

    name: str
    type: str
    optional: bool
    unique: bool = False
    default: Any = None
    target_table: str | None = None


class IndexInfo(BaseModel):
    """Information about an index (output format)."""

    name: str
    kind: str = "index"  # index, search or vector
    fields: list[str]


class EdgeInfo(BaseModel):
    """Information about a resolved edge (output format)."""

    name: str
    to: str
    cardinality: str
    type: str | None
    field: str | None = None
    ref: str | None = None
    table: str | None = None
    unique: bool = False
    symmetric: bool = False
    inverse: bool = False


class TableInfo(BaseModel):
    """Information about a table of a resolved schema (output format)."""

    name: str
    is_junction: bool = False
    fields: list[FieldInfo]
    indexes: list[IndexInfo] = Field(default_factory=list)
    edges: list[EdgeInfo] = Field(default_factory=list)


class SchemaInfo(BaseModel):
    """Full schema information (output format)."""

    tables: dict[str, TableInfo]
    total_tables: int
    total_edges: int
    junction_tables: list[str] = Field(default_factory=list)
