"""Build schemas from JSON documents.

Document shape:

    {
        "schema_validation": true,
        "tables": {
            "users": {
                "fields": {
                    "name": "string",
                    "email": {"type": "string", "unique": true},
                    "height": {"type": "float64", "optional": true, "index": true}
                },
                "indexes": {"byName": ["name"]},
                "edges": [
                    {"edge": "profile", "optional": true},
                    {"edges": "followers", "to": "users", "inverse": "followees"}
                ]
            }
        }
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from entschema.core.types import EdgeOptions, EdgesOptions
from entschema.exceptions import DeclarationError, SchemaFileError
from entschema.schema.assembler import EntSchema, define_schema
from entschema.schema.definition import TableDefinition, define_table
from entschema.values import from_dict

logger = logging.getLogger(__name__)

# Field entry keys that configure the declaration rather than the validator
_FIELD_OPTIONS = ("index", "unique", "default")


def _build_field(table: TableDefinition, table_name: str, name: str, spec: Any) -> None:
    options: dict[str, Any] = {}
    if isinstance(spec, dict):
        options = {k: spec[k] for k in _FIELD_OPTIONS if k in spec}
        spec = {k: v for k, v in spec.items() if k not in _FIELD_OPTIONS}
    try:
        validator = from_dict(spec)
    except (ValueError, TypeError) as e:
        raise SchemaFileError(f"Invalid field '{name}' in table '{table_name}': {e}") from e
    table.field(
        name,
        validator,
        index=bool(options.get("index", False)),
        unique=bool(options.get("unique", False)),
        default=options.get("default", ...),
    )


def _build_edge(table: TableDefinition, table_name: str, spec: Any) -> None:
    if not isinstance(spec, dict):
        raise SchemaFileError(f"Edge entries of table '{table_name}' must be objects, got {spec!r}")
    spec = dict(spec)
    try:
        if "edge" in spec:
            name = spec.pop("edge")
            options = EdgeOptions.model_validate(spec)
            table.edge(name, optional=options.optional, field=options.field, ref=options.ref)
        elif "edges" in spec:
            name = spec.pop("edges")
            edges_options = EdgesOptions.model_validate(spec)
            table.edges(name, to=edges_options.to, inverse=edges_options.inverse)
        else:
            raise SchemaFileError(
                f"Edge entry {spec!r} of table '{table_name}' needs an 'edge' or 'edges' key"
            )
    except ValidationError as e:
        reason = "; ".join(
            f"{err['loc'][0]}: {err['msg']}" if err["loc"] else err["msg"]
            for err in e.errors()
        )
        raise SchemaFileError(f"Invalid edge in table '{table_name}': {reason}") from e


def _build_table(table_name: str, spec: Any) -> TableDefinition:
    if not isinstance(spec, dict):
        raise SchemaFileError(f"Table '{table_name}' must be an object")

    table = define_table()
    for name, field_spec in spec.get("fields", {}).items():
        _build_field(table, table_name, name, field_spec)
    for name, fields in spec.get("indexes", {}).items():
        table.index(name, fields)
    for name, index_spec in spec.get("search_indexes", {}).items():
        table.search_index(
            name,
            search_field=index_spec["search_field"],
            filter_fields=index_spec.get("filter_fields", ()),
        )
    for name, index_spec in spec.get("vector_indexes", {}).items():
        table.vector_index(
            name,
            vector_field=index_spec["vector_field"],
            dimensions=index_spec["dimensions"],
            filter_fields=index_spec.get("filter_fields", ()),
        )
    for edge_spec in spec.get("edges", []):
        _build_edge(table, table_name, edge_spec)
    return table


def load_schema_dict(data: dict[str, Any]) -> EntSchema:
    """Build and resolve a schema from its dict form.

    Raises:
        SchemaFileError: If the document is malformed
        EntSchemaError: If the declarations cannot be resolved
    """
    if not isinstance(data, dict) or not isinstance(data.get("tables"), dict):
        raise SchemaFileError("Schema document must be an object with a 'tables' object")

    tables: dict[str, TableDefinition] = {}
    for table_name, spec in data["tables"].items():
        try:
            tables[table_name] = _build_table(table_name, spec)
        except SchemaFileError:
            raise
        except KeyError as e:
            raise SchemaFileError(f"Table '{table_name}' is missing key {e}") from e
        except DeclarationError as e:
            if e.table_name is None:
                e.set_table(table_name)
            raise
    return define_schema(tables, schema_validation=bool(data.get("schema_validation", True)))


def load_schema_file(path: str | Path) -> EntSchema:
    """Build and resolve a schema from a JSON file.

    Raises:
        SchemaFileError: If the file is missing, not JSON, or malformed
    """
    file_path = Path(path)
    if not file_path.exists():
        raise SchemaFileError(f"File not found: {path}", str(path))
    try:
        with file_path.open("r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SchemaFileError(f"Invalid JSON in {path}: {e.msg} (line {e.lineno})", str(path)) from e

    logger.debug(f"Loading schema from {file_path}")
    try:
        return load_schema_dict(data)
    except SchemaFileError as e:
        if e.path is None:
            e.path = str(path)
            e.context["path"] = str(path)
        raise
