"""Table builder: the chained declaration API for one table.

A TableDefinition accumulates fields, indexes, search/vector indexes and edge
declarations. Nothing here looks at other tables; edges are left partially
specified until the schema resolver sees every table at once.

Example:
    from entschema import define_table, values as v

    users = (
        define_table({"name": v.string()})
        .field("email", v.string(), unique=True)
        .edge("profile", optional=True)
        .edges("followers", to="users", inverse="followees")
    )
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from types import EllipsisType
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from entschema.core.types import CREATION_TIME_FIELD, EdgeOptions, EdgesOptions
from entschema.exceptions import (
    DuplicateEdgeError,
    DuplicateFieldError,
    DuplicateIndexError,
    InvalidEdgeOptionsError,
    InvalidIndexError,
)
from entschema.schema.edges import EdgeConfig, PendingEdges, SingleFieldEdge, SingleRefEdge
from entschema.values import Validator, id_of

logger = logging.getLogger(__name__)


class IndexConfig(BaseModel):
    """Database index over an ordered list of field paths."""

    model_config = ConfigDict(frozen=True)

    name: str
    fields: tuple[str, ...]

    @property
    def sort_fields(self) -> tuple[str, ...]:
        """Indexed fields with the creation time appended as final sort key."""
        return (*self.fields, CREATION_TIME_FIELD)

    def to_dict(self) -> dict[str, Any]:
        return {"indexDescriptor": self.name, "fields": list(self.sort_fields)}


class SearchIndexConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    search_field: str
    filter_fields: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "indexDescriptor": self.name,
            "searchField": self.search_field,
            "filterFields": list(self.filter_fields),
        }


class VectorIndexConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    vector_field: str
    dimensions: int
    filter_fields: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "indexDescriptor": self.name,
            "vectorField": self.vector_field,
            "dimensions": self.dimensions,
            "filterFields": list(self.filter_fields),
        }


class FieldConfig(BaseModel):
    """Uniqueness metadata for a field."""

    model_config = ConfigDict(frozen=True)

    name: str
    unique: bool


class TableSnapshot(BaseModel):
    """Frozen state of one table, as read and produced by the resolver."""

    model_config = ConfigDict(frozen=True)

    document_schema: dict[str, Validator]
    indexes: tuple[IndexConfig, ...] = ()
    search_indexes: tuple[SearchIndexConfig, ...] = ()
    vector_indexes: tuple[VectorIndexConfig, ...] = ()
    defaults: dict[str, Any] = {}
    field_configs: dict[str, FieldConfig] = {}
    edges: dict[str, EdgeConfig] = {}
    is_junction: bool = False

    def with_edges(self, edges: dict[str, EdgeConfig]) -> TableSnapshot:
        """Return a copy carrying the given edge records."""
        return self.model_copy(update={"edges": dict(edges)})

    def export(self) -> dict[str, Any]:
        """Export the table in the shape the registration layer consumes."""
        return {
            "indexes": [i.to_dict() for i in self.indexes],
            "searchIndexes": [i.to_dict() for i in self.search_indexes],
            "vectorIndexes": [i.to_dict() for i in self.vector_indexes],
            "documentType": {
                "type": "object",
                "fields": {name: v.to_dict() for name, v in self.document_schema.items()},
            },
        }


class TableDefinition:
    """Mutable builder for one table.

    Each declaration method mutates the builder and returns it, so calls chain.
    Call snapshot() to get the immutable TableSnapshot handed to the resolver.
    """

    def __init__(self, document_schema: dict[str, Validator] | None = None) -> None:
        """Initialize the builder.

        Args:
            document_schema: Initial fields (name -> validator)
        """
        self._document_schema: dict[str, Validator] = dict(document_schema or {})
        self._indexes: list[IndexConfig] = []
        self._search_indexes: list[SearchIndexConfig] = []
        self._vector_indexes: list[VectorIndexConfig] = []
        self._defaults: dict[str, Any] = {}
        self._field_configs: dict[str, FieldConfig] = {}
        self._edges: dict[str, EdgeConfig] = {}

    @property
    def document_schema(self) -> dict[str, Validator]:
        return dict(self._document_schema)

    @property
    def edge_configs(self) -> dict[str, EdgeConfig]:
        return dict(self._edges)

    def _index_names(self) -> set[str]:
        return (
            {i.name for i in self._indexes}
            | {i.name for i in self._search_indexes}
            | {i.name for i in self._vector_indexes}
        )

    def _add_index(self, name: str, fields: Sequence[str]) -> None:
        if name in self._index_names():
            raise DuplicateIndexError(name)
        self._indexes.append(IndexConfig(name=name, fields=tuple(fields)))

    def _add_field(self, name: str, validator: Validator) -> None:
        if name in self._document_schema:
            raise DuplicateFieldError(name)
        self._document_schema[name] = validator

    def field(
        self,
        name: str,
        validator: Validator,
        *,
        index: bool = False,
        unique: bool = False,
        default: Any | EllipsisType = ...,  # Use ... as sentinel, None is a valid default
    ) -> TableDefinition:
        """Declare a field.

        Args:
            name: Field name
            validator: Value validator of the field
            index: Add a single-field index named after the field
            unique: Index the field and record it as unique
            default: Value applied when a document omits the field; makes it optional

        Returns:
            This builder

        Raises:
            DuplicateFieldError: If the field is already declared
        """
        has_default = not isinstance(default, EllipsisType)
        if name in self._document_schema:
            raise DuplicateFieldError(name)
        if (unique or index) and name in self._index_names():
            raise DuplicateIndexError(name)
        self._add_field(name, validator.as_optional() if has_default else validator)
        if unique or index:
            self._add_index(name, [name])
        if has_default:
            self._defaults[name] = default
        if unique:
            self._field_configs[name] = FieldConfig(name=name, unique=True)
        logger.debug(f"Declared field '{name}' ({validator.kind.value})")
        return self

    def index(self, name: str, fields: Sequence[str]) -> TableDefinition:
        """Declare a compound index.

        The creation time is implicitly appended as the last sort key.

        Raises:
            InvalidIndexError: If `fields` is empty
            DuplicateIndexError: If the index name is taken
        """
        if isinstance(fields, str) or not fields:
            raise InvalidIndexError(name, "must specify a non-empty list of fields")
        self._add_index(name, fields)
        return self

    def search_index(
        self,
        name: str,
        *,
        search_field: str,
        filter_fields: Sequence[str] = (),
    ) -> TableDefinition:
        """Declare a full text search index."""
        if name in self._index_names():
            raise DuplicateIndexError(name)
        self._search_indexes.append(
            SearchIndexConfig(
                name=name, search_field=search_field, filter_fields=tuple(filter_fields)
            )
        )
        return self

    def vector_index(
        self,
        name: str,
        *,
        vector_field: str,
        dimensions: int,
        filter_fields: Sequence[str] = (),
    ) -> TableDefinition:
        """Declare a vector search index."""
        if name in self._index_names():
            raise DuplicateIndexError(name)
        if isinstance(dimensions, bool) or not isinstance(dimensions, int) or dimensions <= 0:
            raise InvalidIndexError(name, f"dimensions must be a positive integer, got {dimensions}")
        self._vector_indexes.append(
            VectorIndexConfig(
                name=name,
                vector_field=vector_field,
                dimensions=dimensions,
                filter_fields=tuple(filter_fields),
            )
        )
        return self

    def edge(
        self,
        name: str,
        *,
        optional: bool = False,
        field: str | None = None,
        ref: str | None = None,
    ) -> TableDefinition:
        """Declare an edge to at most one document of table '{name}s'.

        A required edge stores the foreign key on this table (field '{name}Id'
        unless `field` is given) and indexes it. An optional edge stores nothing;
        the resolver finds the key on the inverse edge.

        Raises:
            DuplicateEdgeError: If the edge name is already declared
            DuplicateFieldError: If the foreign key field is already declared
            InvalidEdgeOptionsError: If the options are contradictory
        """
        if name in self._edges:
            raise DuplicateEdgeError(name)
        try:
            options = EdgeOptions(optional=optional, field=field, ref=ref)
        except ValidationError as e:
            reason = "; ".join(err["msg"] for err in e.errors())
            raise InvalidEdgeOptionsError(name, reason) from e

        to = f"{name}s"
        if not options.optional:
            field_name = options.field or f"{name}Id"
            if field_name in self._document_schema:
                raise DuplicateFieldError(field_name)
            if field_name in self._index_names():
                raise DuplicateIndexError(field_name)
            self._add_field(field_name, id_of(to))
            self._add_index(field_name, [field_name])
            self._edges[name] = SingleFieldEdge(name=name, to=to, field=field_name)
        else:
            self._edges[name] = SingleRefEdge(name=name, to=to, ref=options.ref)
        logger.debug(f"Declared edge '{name}' -> '{to}' (optional={options.optional})")
        return self

    def edges(
        self,
        name: str,
        *,
        to: str | None = None,
        inverse: str | None = None,
    ) -> TableDefinition:
        """Declare an edge to many documents of table `to` (defaults to `name`).

        With `inverse`, a second edge of that name is declared on this table too,
        so a self-referential relation such as followers/followees is fully
        described in one place.

        Raises:
            DuplicateEdgeError: If either edge name is already declared
            InvalidEdgeOptionsError: If `inverse` equals `name`
        """
        options = EdgesOptions(to=to, inverse=inverse)
        if options.inverse == name:
            raise InvalidEdgeOptionsError(name, "the inverse edge needs a different name")
        for edge_name in (name, options.inverse):
            if edge_name is not None and edge_name in self._edges:
                raise DuplicateEdgeError(edge_name)

        target = options.to or name
        self._edges[name] = PendingEdges(name=name, to=target)
        if options.inverse is not None:
            self._edges[options.inverse] = PendingEdges(
                name=options.inverse, to=target, inverse=True, inverse_of=name
            )
        logger.debug(f"Declared edges '{name}' -> '{target}' (inverse={options.inverse})")
        return self

    def snapshot(self) -> TableSnapshot:
        """Freeze the current declarations."""
        return TableSnapshot(
            document_schema=dict(self._document_schema),
            indexes=tuple(self._indexes),
            search_indexes=tuple(self._search_indexes),
            vector_indexes=tuple(self._vector_indexes),
            defaults=dict(self._defaults),
            field_configs=dict(self._field_configs),
            edges=dict(self._edges),
        )


def define_table(document_schema: dict[str, Validator] | None = None) -> TableDefinition:
    """Start declaring a table with the given initial fields."""
    return TableDefinition(document_schema)
