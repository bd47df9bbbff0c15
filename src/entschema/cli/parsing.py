"""Input parsing utilities for CLI commands."""

import importlib
from collections.abc import Mapping
from pathlib import Path

from entschema.schema.assembler import EntSchema, define_schema
from entschema.schema.loader import load_schema_file


def load_target(target: str) -> EntSchema:
    """Load the schema a command operates on.

    Formats:
        "schema.json"                 -> JSON schema document
        "myapp.schema:schema"         -> EntSchema attribute of an importable module
        "myapp.schema:tables"         -> mapping of table name -> table definition

    Raises:
        ValueError: If the target format is invalid or the attribute is not a schema
        SchemaFileError: If the JSON document cannot be loaded
    """
    if target.endswith(".json") or Path(target).is_file():
        return load_schema_file(target)

    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(
            f"Invalid target: '{target}'. Expected a .json file or 'module.path:attribute'"
        )

    module = importlib.import_module(module_name)
    try:
        obj = getattr(module, attr)
    except AttributeError as e:
        raise ValueError(f"Module '{module_name}' has no attribute '{attr}'") from e

    if isinstance(obj, EntSchema):
        return obj
    if isinstance(obj, Mapping):
        return define_schema(obj)
    raise ValueError(
        f"'{target}' is a {type(obj).__name__}, expected an EntSchema or a mapping of tables"
    )
