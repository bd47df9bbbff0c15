"""Registration of resolved schemas into SQLAlchemy metadata."""

from entschema.storage.metadata import JSONType, build_metadata, build_table, render_ddl

__all__ = ["JSONType", "build_metadata", "build_table", "render_ddl"]
