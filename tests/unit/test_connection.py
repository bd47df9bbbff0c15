"""Tests for database connection."""

import pytest
from sqlalchemy import MetaData

from entschema.core.connection import DatabaseConnection, _normalize_postgresql_url
from entschema.exceptions import ConnectionError


class TestUrlNormalization:
    """Tests for PostgreSQL URL normalization."""

    def test_plain_url_uses_psycopg3(self):
        assert (
            _normalize_postgresql_url("postgresql://localhost/app")
            == "postgresql+psycopg://localhost/app"
        )

    def test_explicit_driver_kept(self):
        url = "postgresql+psycopg2://localhost/app"
        assert _normalize_postgresql_url(url) == url

    def test_connection_normalizes(self):
        conn = DatabaseConnection("postgresql://localhost/app")
        assert conn.url == "postgresql+psycopg://localhost/app"


class TestDatabaseConnection:
    """Tests for DatabaseConnection class."""

    def test_engine_created_lazily(self):
        """Engine is not created until accessed."""
        conn = DatabaseConnection("sqlite:///:memory:")
        assert conn._engine is None
        _ = conn.engine
        assert conn._engine is not None
        conn.close()

    def test_sqlite_supported(self):
        conn = DatabaseConnection("sqlite:///:memory:")
        assert conn.test_connection() is True
        assert conn.dialect == "sqlite"
        conn.close()

    def test_context_manager(self, tmp_path):
        with DatabaseConnection(f"sqlite:///{tmp_path / 'test.db'}") as conn:
            assert conn.test_connection() is True

    def test_close_disposes_engine(self):
        conn = DatabaseConnection("sqlite:///:memory:")
        _ = conn.engine
        conn.close()
        assert conn._engine is None

    def test_invalid_url(self):
        """Invalid URL raises ConnectionError."""
        conn = DatabaseConnection("invalid://not-a-real-db")
        with pytest.raises(ConnectionError, match="Failed to create database engine"):
            conn.test_connection()

    def test_create_tables(self, schema, tmp_path):
        """Only missing tables are created."""
        conn = DatabaseConnection(f"sqlite:///{tmp_path / 'test.db'}")
        created = conn.create_tables(schema.metadata)
        assert sorted(created) == sorted(schema.tables)
        assert sorted(conn.table_names()) == sorted(schema.tables)
        assert conn.create_tables(schema.metadata) == []
        conn.close()

    def test_create_tables_empty_metadata(self):
        conn = DatabaseConnection("sqlite:///:memory:")
        assert conn.create_tables(MetaData()) == []
        conn.close()


class TestPostgreSQL:
    """Tests against a live PostgreSQL server (TEST_DATABASE_URL)."""

    def test_connection(self, postgresql_url: str):
        conn = DatabaseConnection(postgresql_url)
        assert conn.test_connection() is True
        assert conn.dialect == "postgresql"
        conn.close()

    def test_create_untyped_schema(self, untyped_schema, postgresql_url: str):
        conn = DatabaseConnection(postgresql_url)
        try:
            untyped_schema.create_all(conn)
            assert set(untyped_schema.tables) <= set(conn.table_names())
        finally:
            untyped_schema.metadata.drop_all(conn.engine)
            conn.close()
