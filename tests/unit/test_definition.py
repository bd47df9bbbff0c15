"""Tests for the table builder."""

import logging

import pytest

from entschema import (
    DuplicateEdgeError,
    DuplicateFieldError,
    DuplicateIndexError,
    InvalidEdgeOptionsError,
    InvalidIndexError,
    PendingEdges,
    SingleFieldEdge,
    SingleRefEdge,
    define_table,
)
from entschema import values as v


class TestFields:
    """Tests for field declarations."""

    def test_initial_document_schema(self):
        """Fields passed to define_table() are kept."""
        table = define_table({"name": v.string()})
        assert table.document_schema == {"name": v.string()}

    def test_chaining_returns_same_builder(self):
        table = define_table()
        assert table.field("name", v.string()) is table

    def test_duplicate_field(self):
        """A field cannot be declared twice."""
        table = define_table({"name": v.string()})
        with pytest.raises(DuplicateFieldError) as exc_info:
            table.field("name", v.string())
        assert exc_info.value.field_name == "name"

    def test_error_names_table_once_known(self):
        """Builder errors can be tagged with the table they belong to."""
        table = define_table({"name": v.string()})
        with pytest.raises(DuplicateFieldError) as exc_info:
            table.field("name", v.string())
        error = exc_info.value
        assert error.table_name is None
        error.set_table("users")
        assert error.table_name == "users"
        assert error.context["table_name"] == "users"
        assert str(error).startswith("Duplicate field 'name' in table 'users'.")

    def test_index_flag(self):
        """index=True adds a single-field index named after the field."""
        snapshot = define_table().field("height", v.float64(), index=True).snapshot()
        assert [i.name for i in snapshot.indexes] == ["height"]
        assert snapshot.indexes[0].fields == ("height",)
        assert snapshot.field_configs == {}

    def test_unique_flag(self):
        """unique=True indexes the field and records it as unique."""
        snapshot = define_table().field("email", v.string(), unique=True).snapshot()
        assert [i.name for i in snapshot.indexes] == ["email"]
        assert snapshot.field_configs["email"].unique is True

    def test_default_makes_field_optional(self):
        """A default value wraps the validator in optional()."""
        snapshot = define_table().field("numLikes", v.int64(), default=0).snapshot()
        assert snapshot.document_schema["numLikes"] == v.optional(v.int64())
        assert snapshot.defaults == {"numLikes": 0}

    def test_none_is_a_valid_default(self):
        """None is a default; only the sentinel means 'no default'."""
        snapshot = define_table().field("note", v.string(), default=None).snapshot()
        assert snapshot.defaults == {"note": None}
        assert snapshot.document_schema["note"].optional is True

    def test_no_default(self):
        snapshot = define_table().field("note", v.string()).snapshot()
        assert snapshot.defaults == {}
        assert snapshot.document_schema["note"].optional is False


class TestIndexes:
    """Tests for index declarations."""

    def test_compound_index_appends_creation_time(self):
        """The creation time is the final sort key of every index."""
        snapshot = define_table().index("byTypeAndLikes", ["type", "numLikes"]).snapshot()
        index = snapshot.indexes[0]
        assert index.fields == ("type", "numLikes")
        assert index.sort_fields == ("type", "numLikes", "_creationTime")
        assert index.to_dict() == {
            "indexDescriptor": "byTypeAndLikes",
            "fields": ["type", "numLikes", "_creationTime"],
        }

    def test_empty_index(self):
        """An index needs at least one field."""
        with pytest.raises(InvalidIndexError, match="non-empty"):
            define_table().index("empty", [])

    def test_bare_string_fields_rejected(self):
        """A single string is not treated as a sequence of characters."""
        with pytest.raises(InvalidIndexError):
            define_table().index("byName", "name")

    def test_duplicate_index_name(self):
        """Index names are unique across index kinds."""
        table = define_table().index("text", ["text"])
        with pytest.raises(DuplicateIndexError):
            table.search_index("text", search_field="text")

    def test_duplicate_field_reported_before_index(self):
        """A clashing field leaves the builder untouched."""
        table = define_table({"email": v.string()}).index("email", ["email"])
        with pytest.raises(DuplicateFieldError):
            table.field("email", v.string(), unique=True)
        assert len(table.snapshot().indexes) == 1

    def test_search_index(self):
        snapshot = (
            define_table({"text": v.string(), "type": v.string()})
            .search_index("text", search_field="text", filter_fields=["type"])
            .snapshot()
        )
        assert snapshot.search_indexes[0].to_dict() == {
            "indexDescriptor": "text",
            "searchField": "text",
            "filterFields": ["type"],
        }

    def test_vector_index(self):
        snapshot = (
            define_table({"embedding": v.array_of(v.float64())})
            .vector_index("embedding", vector_field="embedding", dimensions=1536)
            .snapshot()
        )
        assert snapshot.vector_indexes[0].to_dict() == {
            "indexDescriptor": "embedding",
            "vectorField": "embedding",
            "dimensions": 1536,
            "filterFields": [],
        }

    @pytest.mark.parametrize("dimensions", [0, -3, True])
    def test_vector_index_dimensions(self, dimensions):
        """Dimensions must be a positive integer."""
        with pytest.raises(InvalidIndexError, match="dimensions"):
            define_table().vector_index("embedding", vector_field="embedding", dimensions=dimensions)


class TestSingleEdges:
    """Tests for edge() declarations."""

    def test_required_edge_adds_field_and_index(self):
        """A required edge stores '{name}Id' pointing at '{name}s'."""
        snapshot = define_table().edge("user").snapshot()
        assert snapshot.document_schema["userId"] == v.id_of("users")
        assert [i.name for i in snapshot.indexes] == ["userId"]
        assert snapshot.edges["user"] == SingleFieldEdge(name="user", to="users", field="userId")

    def test_custom_field(self):
        snapshot = define_table().edge("user", field="ownerId").snapshot()
        assert "ownerId" in snapshot.document_schema
        assert snapshot.edges["user"].field == "ownerId"

    def test_optional_edge_stores_nothing(self):
        """An optional edge adds no field and no index."""
        snapshot = define_table().edge("profile", optional=True).snapshot()
        assert snapshot.document_schema == {}
        assert snapshot.indexes == ()
        assert snapshot.edges["profile"] == SingleRefEdge(name="profile", to="profiles")

    def test_optional_edge_with_ref(self):
        snapshot = define_table().edge("secret", optional=True, ref="ownerId").snapshot()
        assert snapshot.edges["secret"].ref == "ownerId"

    def test_field_and_optional_rejected(self):
        with pytest.raises(InvalidEdgeOptionsError) as exc_info:
            define_table().edge("user", optional=True, field="ownerId")
        assert exc_info.value.edge_name == "user"

    def test_ref_without_optional_rejected(self):
        with pytest.raises(InvalidEdgeOptionsError):
            define_table().edge("user", ref="ownerId")

    def test_duplicate_edge(self):
        table = define_table().edge("user")
        with pytest.raises(DuplicateEdgeError):
            table.edge("user", optional=True)

    def test_field_collision(self):
        """The generated key field cannot shadow a declared field."""
        table = define_table({"userId": v.string()})
        with pytest.raises(DuplicateFieldError):
            table.edge("user")
        assert table.edge_configs == {}


class TestMultipleEdges:
    """Tests for edges() declarations."""

    def test_target_defaults_to_name(self):
        snapshot = define_table().edges("messages").snapshot()
        assert snapshot.edges["messages"] == PendingEdges(name="messages", to="messages")

    def test_explicit_target(self):
        snapshot = define_table().edges("friends", to="users").snapshot()
        assert snapshot.edges["friends"].to == "users"

    def test_inverse_declares_second_edge(self):
        """inverse= declares the inverse edge on the same table."""
        snapshot = define_table().edges("followers", to="users", inverse="followees").snapshot()
        assert list(snapshot.edges) == ["followers", "followees"]
        followees = snapshot.edges["followees"]
        assert followees.to == "users"
        assert followees.inverse is True
        assert followees.inverse_of == "followers"
        assert snapshot.edges["followers"].inverse is False

    def test_inverse_named_like_edge(self):
        with pytest.raises(InvalidEdgeOptionsError, match="different name"):
            define_table().edges("friends", to="users", inverse="friends")

    def test_inverse_name_taken(self):
        table = define_table().edge("followees", optional=True)
        with pytest.raises(DuplicateEdgeError):
            table.edges("followers", to="users", inverse="followees")
        assert "followers" not in table.edge_configs


class TestSnapshot:
    """Tests for TableSnapshot."""

    def test_snapshot_is_detached(self):
        """Later declarations do not leak into an earlier snapshot."""
        table = define_table({"name": v.string()})
        snapshot = table.snapshot()
        table.field("email", v.string()).edge("user")
        assert list(snapshot.document_schema) == ["name"]
        assert snapshot.edges == {}

    def test_export(self):
        """export() renders indexes and the document type."""
        exported = define_table({"name": v.string()}).edge("user").snapshot().export()
        assert exported == {
            "indexes": [{"indexDescriptor": "userId", "fields": ["userId", "_creationTime"]}],
            "searchIndexes": [],
            "vectorIndexes": [],
            "documentType": {
                "type": "object",
                "fields": {
                    "name": {"type": "string"},
                    "userId": {"type": "id", "tableName": "users"},
                },
            },
        }

    def test_declarations_are_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="entschema.schema.definition"):
            define_table().edge("user")
        assert "Declared edge 'user'" in caplog.text
