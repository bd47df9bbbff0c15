"""Shared test fixtures for entschema."""

import os
from collections.abc import Generator

import pytest
from sqlalchemy import Engine, create_engine

from entschema import EntSchema, TableDefinition, define_schema, define_table
from entschema import values as v


def _psycopg_available() -> bool:
    """Check if psycopg is installed."""
    try:
        import psycopg  # noqa: F401

        return True
    except ImportError:
        return False


@pytest.fixture
def postgresql_url() -> str:
    """Get PostgreSQL URL from environment or skip."""
    url = os.environ.get("TEST_DATABASE_URL")
    if not url:
        pytest.skip("TEST_DATABASE_URL not set")
    if not _psycopg_available():
        pytest.skip("psycopg not installed")
    return url


def build_tables() -> dict[str, TableDefinition]:
    """Tables exercising every kind of edge.

    - messages <-> users: 1:many through messages.userId
    - messages <-> tags: many:many through a junction table
    - users.followers / users.followees: self-referential pair
    - users.friends: symmetric self-referential edge
    - users.profile <-> profiles.user: 1:1 through profiles.userId
    - users.secret <-> secrets.user: 1:1 through a custom field name
    """
    return {
        "messages": define_table({"text": v.string()}).edge("user").edges("tags"),
        "users": (
            define_table({"name": v.string()})
            .field("email", v.string(), unique=True)
            .field("height", v.optional(v.float64()), index=True)
            .edge("profile", optional=True)
            .edges("messages")
            .edges("followers", to="users", inverse="followees")
            .edges("friends", to="users")
            .edge("secret", optional=True, ref="ownerId")
        ),
        "profiles": define_table({"bio": v.string()}).edge("user"),
        "tags": define_table({"name": v.string()}).edges("messages"),
        "posts": (
            define_table({"text": v.string()})
            .field("numLikes", v.int64(), default=0)
            .field(
                "type",
                v.union(v.literal("text"), v.literal("video"), v.literal("image")),
                default="text",
            )
            .index("numLikesAndType", ["type", "numLikes"])
            .search_index("text", search_field="text", filter_fields=["type"])
        ),
        "secrets": define_table({"value": v.string()}).edge("user", field="ownerId"),
    }


@pytest.fixture
def tables() -> dict[str, TableDefinition]:
    """Fresh, unresolved table builders."""
    return build_tables()


@pytest.fixture
def schema(tables: dict[str, TableDefinition]) -> EntSchema:
    """Resolved schema with typed columns."""
    return define_schema(tables)


@pytest.fixture
def untyped_schema(tables: dict[str, TableDefinition]) -> EntSchema:
    """Resolved schema registered with untyped JSON columns."""
    return define_schema(tables, schema_validation=False)


@pytest.fixture
def memory_engine() -> Generator[Engine, None, None]:
    """In-memory SQLite engine."""
    engine = create_engine("sqlite://")
    yield engine
    engine.dispose()

