"""Custom exceptions for entschema.

All exceptions are raised while a schema is being declared or resolved and are
fatal to the schema build:
- Actionable error messages that tell what went wrong AND how to fix it
- Include the offending table and edge names, and every conflicting candidate
"""

from __future__ import annotations

from typing import Any


class EntSchemaError(Exception):
    """Base exception for all entschema errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict for agent consumption."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConnectionError(EntSchemaError):
    """Failed to connect to the database the schema is registered into."""

    pass


class SchemaFileError(EntSchemaError):
    """A schema document could not be loaded."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message, {"path": path})
        self.path = path


# === Declaration Errors ===


class DeclarationError(EntSchemaError):
    """Error raised by a table builder.

    Builders do not know the name their table is registered under, so the
    table name can be attached later with `set_table()`.
    """

    def __init__(self, context: dict[str, Any], table_name: str | None = None) -> None:
        self.table_name = table_name
        super().__init__(self._describe(self._where()), {**context, "table_name": table_name})

    def _where(self) -> str:
        return f" in table '{self.table_name}'" if self.table_name else ""

    def _describe(self, where: str) -> str:
        raise NotImplementedError

    def set_table(self, table_name: str) -> None:
        """Name the table the failed declaration belongs to."""
        self.table_name = table_name
        self.context["table_name"] = table_name
        self.message = self._describe(self._where())
        self.args = (self.message,)


class DuplicateFieldError(DeclarationError):
    """Field is already declared on the table."""

    def __init__(self, field_name: str, table_name: str | None = None) -> None:
        self.field_name = field_name
        super().__init__({"field_name": field_name}, table_name)

    def _describe(self, where: str) -> str:
        return (
            f"Duplicate field '{self.field_name}'{where}. "
            "Rename the field, or pass `field=...` to the edge that generates it."
        )


class DuplicateEdgeError(DeclarationError):
    """Edge is already declared on the table."""

    def __init__(self, edge_name: str, table_name: str | None = None) -> None:
        self.edge_name = edge_name
        super().__init__({"edge_name": edge_name}, table_name)

    def _describe(self, where: str) -> str:
        return f"Duplicate edge '{self.edge_name}'{where}. Each edge name must be unique per table."


class DuplicateIndexError(DeclarationError):
    """Index name is already used on the table."""

    def __init__(self, index_name: str, table_name: str | None = None) -> None:
        self.index_name = index_name
        super().__init__({"index_name": index_name}, table_name)

    def _describe(self, where: str) -> str:
        return f"Duplicate index '{self.index_name}'{where}. Use a different index name."


class InvalidIndexError(DeclarationError):
    """Index declaration is malformed or refers to an unknown field."""

    def __init__(self, index_name: str, reason: str, table_name: str | None = None) -> None:
        self.index_name = index_name
        self.reason = reason
        super().__init__({"index_name": index_name, "reason": reason}, table_name)

    def _describe(self, where: str) -> str:
        return f"Invalid index '{self.index_name}'{where}: {self.reason}"


class InvalidEdgeOptionsError(DeclarationError):
    """Edge options are contradictory."""

    def __init__(self, edge_name: str, reason: str, table_name: str | None = None) -> None:
        self.edge_name = edge_name
        self.reason = reason
        super().__init__({"edge_name": edge_name, "reason": reason}, table_name)

    def _describe(self, where: str) -> str:
        return f"Invalid options for edge '{self.edge_name}'{where}: {self.reason}"


# === Resolution Errors ===


class AmbiguousInverseEdgeError(EntSchemaError):
    """More than one edge on the target table could be the inverse."""

    def __init__(self, table_name: str, edge_name: str, candidates: list[str]) -> None:
        listed = ", ".join(f"'{c}'" for c in candidates)
        message = (
            f"Too many potential inverse edges for edge '{edge_name}' in table '{table_name}', "
            f"all eligible: {listed}. Rename the edges or point them at different tables."
        )
        super().__init__(
            message,
            {"table_name": table_name, "edge_name": edge_name, "candidates": candidates},
        )
        self.table_name = table_name
        self.edge_name = edge_name
        self.candidates = candidates


class ConflictingOptionalEdgesError(EntSchemaError):
    """Both sides of a 1:1 edge are optional, so neither stores the key."""

    def __init__(
        self, table_name: str, edge_name: str, other_table: str, other_edge: str
    ) -> None:
        message = (
            f"Both edge '{edge_name}' in table '{table_name}' and "
            f"edge '{other_edge}' in table '{other_table}' are marked "
            "as optional, choose one to be required."
        )
        super().__init__(
            message,
            {
                "table_name": table_name,
                "edge_name": edge_name,
                "other_table": other_table,
                "other_edge": other_edge,
            },
        )
        self.table_name = table_name
        self.edge_name = edge_name
        self.other_table = other_table
        self.other_edge = other_edge


class InvalidInverseEdgeTypeError(EntSchemaError):
    """An optional single edge is not paired with a required single edge."""

    def __init__(
        self,
        table_name: str,
        edge_name: str,
        other_table: str,
        other_edge: str | None,
    ) -> None:
        if other_edge is None:
            found = f"no inverse edge in table '{other_table}'"
        else:
            found = f"edge '{other_edge}' in table '{other_table}'"
        message = (
            f"Optional edge '{edge_name}' in table '{table_name}' must be paired with a "
            f"required single edge pointing back at '{table_name}', found {found}."
        )
        super().__init__(
            message,
            {
                "table_name": table_name,
                "edge_name": edge_name,
                "other_table": other_table,
                "other_edge": other_edge,
            },
        )
        self.table_name = table_name
        self.edge_name = edge_name
        self.other_table = other_table
        self.other_edge = other_edge


class RefFieldMismatchError(EntSchemaError):
    """Explicit `ref` of an optional edge disagrees with the inverse's field."""

    def __init__(
        self,
        table_name: str,
        edge_name: str,
        ref: str,
        other_table: str,
        other_edge: str,
        other_field: str,
    ) -> None:
        message = (
            f"The edge '{other_edge}' in table '{other_table}' must have its `field` "
            f"option set to '{ref}' (currently '{other_field}'), to match the inverse "
            f"edge '{edge_name}' in table '{table_name}'."
        )
        super().__init__(
            message,
            {
                "table_name": table_name,
                "edge_name": edge_name,
                "ref": ref,
                "other_table": other_table,
                "other_edge": other_edge,
                "other_field": other_field,
            },
        )
        self.table_name = table_name
        self.edge_name = edge_name
        self.ref = ref
        self.other_table = other_table
        self.other_edge = other_edge
        self.other_field = other_field


class InvalidManyToOneInverseError(EntSchemaError):
    """The "one" side of a 1:many edge is optional and cannot store the key."""

    def __init__(
        self, table_name: str, edge_name: str, other_table: str, other_edge: str
    ) -> None:
        message = (
            f"The edge '{other_edge}' in table '{other_table}' cannot be optional, "
            "as it must store the 1:many edge as a field. "
            f"Check its inverse edge '{edge_name}' in table '{table_name}'."
        )
        super().__init__(
            message,
            {
                "table_name": table_name,
                "edge_name": edge_name,
                "other_table": other_table,
                "other_edge": other_edge,
            },
        )
        self.table_name = table_name
        self.edge_name = edge_name
        self.other_table = other_table
        self.other_edge = other_edge


class InverseEdgeAlreadyPairedError(EntSchemaError):
    """Two edges resolved onto the same inverse edge."""

    def __init__(
        self,
        table_name: str,
        edge_name: str,
        other_table: str,
        other_edge: str,
        paired_with: str,
    ) -> None:
        message = (
            f"Edge '{other_edge}' in table '{other_table}' is already paired with "
            f"{paired_with}, it cannot also be the inverse of edge '{edge_name}' in "
            f"table '{table_name}'. Declare a separate edge for each relationship."
        )
        super().__init__(
            message,
            {
                "table_name": table_name,
                "edge_name": edge_name,
                "other_table": other_table,
                "other_edge": other_edge,
                "paired_with": paired_with,
            },
        )
        self.table_name = table_name
        self.edge_name = edge_name
        self.other_table = other_table
        self.other_edge = other_edge
        self.paired_with = paired_with


class JunctionTableConflictError(EntSchemaError):
    """A synthesized junction table name is already taken."""

    def __init__(self, junction_table: str, table_name: str, edge_name: str) -> None:
        message = (
            f"Cannot create junction table '{junction_table}' for edge '{edge_name}' in "
            f"table '{table_name}': a table with that name already exists. Rename the table "
            "or the edge."
        )
        super().__init__(
            message,
            {
                "junction_table": junction_table,
                "table_name": table_name,
                "edge_name": edge_name,
            },
        )
        self.junction_table = junction_table
        self.table_name = table_name
        self.edge_name = edge_name
