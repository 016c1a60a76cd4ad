# dbsession/database/sqlite_connector.py
"""
SQLite database connector implementation.

This module provides a concrete implementation of the `DatabaseConnector`
for a local SQLite database file (or `:memory:`). It wraps the standard
`sqlite3` library. Only the 'database' connection option is used; it holds
the file path.
"""

import sqlite3
from typing import Any, Dict, Iterable

import structlog

from dbsession.database.base_connector import DatabaseConnector

log = structlog.get_logger(__name__)


class SQLiteConnector(DatabaseConnector):
    """
    Opens SQLite connections and renders SQLite's SQL dialect.

    Upserts use `ON CONFLICT DO UPDATE SET`, which requires SQLite 3.35 or
    newer for the conflict-target-free form.
    """

    name = "sqlite"
    positional_placeholder = "?"

    @property
    def driver_errors(self):
        return (sqlite3.Error,)

    def connect(self, options: Dict[str, Any]) -> sqlite3.Connection:
        """
        Opens the database file in autocommit mode.

        Workflow:
        1.  Calls `sqlite3.connect()` with `isolation_level=None`, so no
            implicit transaction is ever left open.
        2.  Enables foreign key support with a PRAGMA command for data integrity.
        """
        conn = sqlite3.connect(options["database"], isolation_level=None)
        # This PRAGMA is essential for enforcing foreign key constraints.
        conn.execute("PRAGMA foreign_keys = ON;")
        log.debug("SQLite connection opened.", path=options["database"])
        return conn

    def placeholder(self, name: str) -> str:
        return f":{name}"

    def upsert_clause(self, columns: Iterable[str]) -> str:
        assignments = ", ".join(f"{column}={self.placeholder(column)}" for column in columns)
        return f"ON CONFLICT DO UPDATE SET {assignments}"
