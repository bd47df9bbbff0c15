"""Tests for schema assembly and description."""

import pytest

from entschema import (
    EntSchema,
    MultipleFieldEdge,
    define_schema,
    define_table,
    get_ent_definitions,
)
from entschema import values as v


class TestDefineSchema:
    """Tests for define_schema()."""

    def test_returns_resolved_schema(self, schema):
        assert isinstance(schema, EntSchema)
        assert isinstance(schema.tables["users"].edges["messages"], MultipleFieldEdge)

    def test_options(self, schema, untyped_schema):
        assert schema.options.schema_validation is True
        assert untyped_schema.options.schema_validation is False

    def test_junction_tables(self, schema):
        assert schema.junction_tables == [
            "messages_to_tags",
            "users_followees_to_followers",
            "users_friends",
        ]

    def test_tables_are_read_only(self, schema):
        with pytest.raises(TypeError):
            schema.tables["extra"] = schema.tables["users"]

    def test_mapping_access(self, schema):
        assert "users" in schema
        assert schema["posts"] is schema.tables["posts"]
        assert len(schema) == 9
        assert list(schema)[:2] == ["messages", "users"]

    def test_builders_can_be_reused(self, tables):
        """Builders are snapshotted, so resolving twice gives equal schemas."""
        first = define_schema(tables)
        second = define_schema(tables)
        assert dict(first.tables) == dict(second.tables)


class TestEntDefinitions:
    """Tests for get_ent_definitions()."""

    def test_per_table_config(self, schema):
        definitions = get_ent_definitions(schema)
        users = definitions["users"]
        assert users.fields["email"].unique is True
        assert users.edges["messages"].ref == "userId"
        assert definitions["posts"].defaults == {"numLikes": 0, "type": "text"}

    def test_includes_junction_tables(self, schema):
        definitions = get_ent_definitions(schema)
        assert definitions["users_friends"].edges == {}

    def test_read_only(self, schema):
        definitions = get_ent_definitions(schema)
        with pytest.raises(TypeError):
            definitions["users"] = definitions["posts"]


class TestExport:
    """Tests for EntSchema.export()."""

    def test_export_shape(self, untyped_schema):
        exported = untyped_schema.export()
        assert exported["schemaValidation"] is False
        posts = exported["tables"]["posts"]
        assert posts["indexes"] == [
            {"indexDescriptor": "numLikesAndType", "fields": ["type", "numLikes", "_creationTime"]}
        ]
        assert posts["searchIndexes"] == [
            {"indexDescriptor": "text", "searchField": "text", "filterFields": ["type"]}
        ]
        assert posts["documentType"]["fields"]["numLikes"] == {"type": "int64", "optional": True}

    def test_export_junction(self, schema):
        junction = schema.export()["tables"]["users_followees_to_followers"]
        assert junction["documentType"]["fields"] == {
            "followeesId": {"type": "id", "tableName": "users"},
            "followersId": {"type": "id", "tableName": "users"},
        }


class TestDescribe:
    """Tests for EntSchema.describe()."""

    def test_totals(self, schema):
        info = schema.describe()
        assert info.total_tables == 9
        # messages: 2, users: 6, profiles: 1, tags: 1, secrets: 1
        assert info.total_edges == 11
        assert info.junction_tables == schema.junction_tables

    def test_fields(self, schema):
        users = schema.describe().tables["users"]
        email = next(f for f in users.fields if f.name == "email")
        height = next(f for f in users.fields if f.name == "height")
        assert email.unique is True and email.optional is False
        assert height.optional is True and height.type == "float64"

        messages = schema.describe().tables["messages"]
        user_id = next(f for f in messages.fields if f.name == "userId")
        assert user_id.type == "id"
        assert user_id.target_table == "users"

    def test_indexes(self, schema):
        posts = schema.describe().tables["posts"]
        assert [(i.name, i.kind) for i in posts.indexes] == [
            ("numLikesAndType", "index"),
            ("text", "search"),
        ]
        assert posts.indexes[1].fields == ["text", "type"]

    def test_edges(self, schema):
        users = schema.describe().tables["users"]
        friends = next(e for e in users.edges if e.name == "friends")
        assert friends.cardinality == "multiple"
        assert friends.type == "ref"
        assert friends.table == "users_friends"
        assert friends.symmetric is True

    def test_junction_flag(self, schema):
        tables = schema.describe().tables
        assert tables["messages_to_tags"].is_junction is True
        assert tables["messages"].is_junction is False


class TestEdgeDicts:
    """Tests for the plain dict form of resolved edges."""

    def test_multiple_ref_edge(self, schema):
        assert schema.tables["users"].edges["followees"].to_dict() == {
            "name": "followees",
            "to": "users",
            "cardinality": "multiple",
            "type": "ref",
            "table": "users_followees_to_followers",
            "field": "followersId",
            "ref": "followeesId",
            "symmetric": False,
            "inverse": True,
        }

    def test_single_ref_edge(self, schema):
        assert schema.tables["users"].edges["profile"].to_dict() == {
            "name": "profile",
            "to": "profiles",
            "cardinality": "single",
            "type": "ref",
            "ref": "userId",
        }

    def test_pending_edge_keeps_null_type(self):
        schema = define_schema(
            {"users": define_table().edges("tags"), "tags": define_table({"name": v.string()})}
        )
        data = schema.tables["users"].edges["tags"].to_dict()
        assert data["type"] is None
        assert "inverse_of" not in data
