"""Value validators describing the shape of document fields.

Validators only describe a value's type; checking documents against them
happens in the storage layer, not here.

Example:
    from entschema import values as v

    define_table({"name": v.string(), "age": v.optional(v.int64())})
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from entschema.core.types import FieldType


class Validator(BaseModel):
    """Immutable description of a field value."""

    model_config = ConfigDict(frozen=True)

    kind: FieldType
    optional: bool = False
    table_name: str | None = None  # target table of an id
    fields: dict[str, Validator] | None = None  # object members
    element: Validator | None = None  # array element
    value: str | int | float | bool | None = None  # literal value
    members: tuple[Validator, ...] = ()  # union members

    def as_optional(self) -> Validator:
        """Return the same validator with `optional` set."""
        if self.optional:
            return self
        return self.model_copy(update={"optional": True})

    def field_paths(self) -> list[str]:
        """Dotted paths addressable inside this value (objects only)."""
        if self.kind != FieldType.OBJECT or not self.fields:
            return []
        paths = []
        for name, member in self.fields.items():
            paths.append(name)
            paths.extend(f"{name}.{sub}" for sub in member.field_paths())
        return paths

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-ready dictionary."""
        result: dict[str, Any] = {"type": self.kind.value}
        if self.optional:
            result["optional"] = True
        if self.table_name is not None:
            result["tableName"] = self.table_name
        if self.fields is not None:
            result["fields"] = {name: f.to_dict() for name, f in self.fields.items()}
        if self.element is not None:
            result["element"] = self.element.to_dict()
        if self.kind == FieldType.LITERAL:
            result["value"] = self.value
        if self.members:
            result["members"] = [m.to_dict() for m in self.members]
        return result


Validator.model_rebuild()


def from_dict(data: str | dict[str, Any]) -> Validator:
    """Build a validator from its dictionary form.

    Accepts either a bare kind (``"string"``) or a dict such as
    ``{"type": "id", "table": "users", "optional": true}``.

    Raises:
        ValueError: If the kind is unknown or required keys are missing
    """
    if isinstance(data, str):
        data = {"type": data}
    try:
        kind = FieldType(data["type"])
    except KeyError as e:
        raise ValueError(f"Validator is missing 'type': {data}") from e
    except ValueError as e:
        raise ValueError(
            f"Invalid field type '{data['type']}'. Valid types: {', '.join(FieldType.values())}"
        ) from e

    if kind == FieldType.ID:
        table = data.get("table", data.get("tableName"))
        if not table:
            raise ValueError("Validator of type 'id' requires 'table'")
        validator = id_of(table)
    elif kind == FieldType.OBJECT:
        validator = object_of({k: from_dict(f) for k, f in data.get("fields", {}).items()})
    elif kind == FieldType.ARRAY:
        if "element" not in data:
            raise ValueError("Validator of type 'array' requires 'element'")
        validator = array_of(from_dict(data["element"]))
    elif kind == FieldType.LITERAL:
        validator = literal(data.get("value"))
    elif kind == FieldType.UNION:
        validator = union(*(from_dict(m) for m in data.get("members", [])))
    else:
        validator = Validator(kind=kind)

    if data.get("optional"):
        validator = validator.as_optional()
    return validator


def string() -> Validator:
    return Validator(kind=FieldType.STRING)


def int64() -> Validator:
    return Validator(kind=FieldType.INT)


def float64() -> Validator:
    return Validator(kind=FieldType.FLOAT)


def boolean() -> Validator:
    return Validator(kind=FieldType.BOOL)


def binary() -> Validator:
    return Validator(kind=FieldType.BYTES)


def any_json() -> Validator:
    return Validator(kind=FieldType.JSON)


def id_of(table_name: str) -> Validator:
    """Reference to a document of `table_name`."""
    return Validator(kind=FieldType.ID, table_name=table_name)


def object_of(fields: dict[str, Validator]) -> Validator:
    return Validator(kind=FieldType.OBJECT, fields=dict(fields))


def array_of(element: Validator) -> Validator:
    return Validator(kind=FieldType.ARRAY, element=element)


def literal(value: str | int | float | bool) -> Validator:
    return Validator(kind=FieldType.LITERAL, value=value)


def union(*members: Validator) -> Validator:
    if not members:
        raise ValueError("union() requires at least one member")
    return Validator(kind=FieldType.UNION, members=tuple(members))


def optional(validator: Validator) -> Validator:
    """Mark a validator as optional (the field may be absent)."""
    return validator.as_optional()
