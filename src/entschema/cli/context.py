"""CLI context management for database connections and shared state."""

import os
from dataclasses import dataclass, field

from entschema.core.connection import DatabaseConnection


def get_database_url(url: str | None) -> str:
    """Resolve database URL from CLI arg, environment variable, or default.

    Priority:
    1. Explicit URL argument
    2. ENTSCHEMA_URL environment variable
    3. Default: sqlite:///./entschema.db
    """
    if url:
        return url
    if env_url := os.getenv("ENTSCHEMA_URL"):
        return env_url
    return "sqlite:///./entschema.db"


@dataclass
class CLIContext:
    """Shared context for CLI commands.

    The database connection is only opened by commands that write to it.
    """

    database_url: str
    echo: bool
    json_output: bool
    _connection: DatabaseConnection | None = field(default=None, init=False, repr=False)

    def get_connection(self) -> DatabaseConnection:
        """Get or create the database connection (lazy initialization)."""
        if self._connection is None:
            self._connection = DatabaseConnection(self.database_url, echo=self.echo)
        return self._connection

    def close(self) -> None:
        """Close database connection if open."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
