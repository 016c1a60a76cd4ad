# dbsession/database/mysql_connector.py
"""
MySQL / MariaDB database connector implementation.

This module provides the default `DatabaseConnector`, built on the
`mysql-connector-python` driver. The driver uses the "pyformat" parameter
style, so raw queries bind positional values with `%s` and the statement
builders bind by name with `%(name)s`.
"""

from typing import Any, Dict, Iterable

import mysql.connector
import structlog

from dbsession.database.base_connector import DatabaseConnector

log = structlog.get_logger(__name__)


class MySQLConnector(DatabaseConnector):
    """
    Opens MySQL connections and renders MySQL's SQL dialect.

    Upserts use `ON DUPLICATE KEY UPDATE`. Note that MySQL reports 2 affected
    rows when an upsert updates an existing row, 1 when it inserts and 0 when
    the existing row already held the same values.
    """

    name = "mysql"
    positional_placeholder = "%s"

    @property
    def driver_errors(self):
        return (mysql.connector.Error,)

    def connect(self, options: Dict[str, Any]):
        """
        Opens a connection with autocommit enabled.

        The driver reports every failure by raising, which is the behavior the
        session relies on.
        """
        try:
            port = int(options["port"])
        except (TypeError, ValueError):
            raise mysql.connector.InterfaceError(
                f"Invalid port {options['port']!r}."
            ) from None
        conn = mysql.connector.connect(
            host=options["host"],
            port=port,
            database=options["database"],
            user=options["username"],
            password=options["password"],
            autocommit=True,
        )
        log.debug(
            "MySQL connection opened.",
            host=options["host"],
            port=options["port"],
            database=options["database"],
        )
        return conn

    def cursor(self, connection):
        # Buffered, so rowcount is known for SELECTs and a new statement never
        # hits "Unread result found" on the shared connection.
        return connection.cursor(buffered=True)

    def placeholder(self, name: str) -> str:
        return f"%({name})s"

    def upsert_clause(self, columns: Iterable[str]) -> str:
        assignments = ", ".join(f"{column}={self.placeholder(column)}" for column in columns)
        return f"ON DUPLICATE KEY UPDATE {assignments}"
