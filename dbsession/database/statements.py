# dbsession/database/statements.py
"""
Parametrized SQL builders for INSERT, UPDATE and UPSERT statements.

Only table and column identifiers are ever written into the SQL text, and each
one is checked against a strict allow-list pattern first. Values always travel
separately as bound parameters, keyed by their placeholder name.

Every builder returns a `(sql, params)` pair ready for `cursor.execute()`.
"""

import re
from typing import Any, Dict, Mapping, Optional, Tuple

from dbsession.database.base_connector import DatabaseConnector

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Suffix for WHERE bind names, so `update(t, {"id": 2}, {"id": 1})` binds
# both values.
WHERE_SUFFIX = "_where"


class StatementBuildError(ValueError):
    """Raised when a statement cannot be built from the given names or data."""


def validate_identifier(name: str, allow_qualified: bool = False) -> str:
    """
    Checks that `name` is a plain SQL identifier and returns it unchanged.

    Args:
        - name (str): The table or column name.
        - allow_qualified (bool): Accept one `schema.table` qualifier.

    Raises:
        - StatementBuildError: If the name is not a string or does not match
          the allow-list.
    """
    if not isinstance(name, str):
        raise StatementBuildError(f"Identifier must be a string, got {type(name).__name__}.")
    parts = name.split(".") if allow_qualified else [name]
    if len(parts) > 2 or not all(IDENTIFIER_PATTERN.match(part) for part in parts):
        raise StatementBuildError(f"Invalid SQL identifier: {name!r}")
    return name


def _columns(data: Mapping[str, Any]) -> list:
    if not data:
        raise StatementBuildError("At least one column is required.")
    return [validate_identifier(column) for column in data]


def build_insert(
    connector: DatabaseConnector, table: str, data: Mapping[str, Any]
) -> Tuple[str, Dict[str, Any]]:
    """Builds `INSERT INTO table (cols) VALUES (placeholders)`."""
    validate_identifier(table, allow_qualified=True)
    columns = _columns(data)
    fields = ", ".join(columns)
    values = ", ".join(connector.placeholder(column) for column in columns)
    sql = f"INSERT INTO {table} ({fields}) VALUES ({values})"
    return sql, dict(data)


def build_update(
    connector: DatabaseConnector,
    table: str,
    data: Mapping[str, Any],
    where: Optional[Mapping[str, Any]] = None,
) -> Tuple[str, Dict[str, Any]]:
    """
    Builds `UPDATE table SET col=:col, ... [WHERE key=:key_where AND ...]`.

    An absent `where` produces an UPDATE without a WHERE clause, which touches
    every row of the table. An empty `where` mapping is rejected.
    """
    validate_identifier(table, allow_qualified=True)
    columns = _columns(data)
    params = dict(data)

    assignments = ", ".join(f"{column}={connector.placeholder(column)}" for column in columns)
    sql = f"UPDATE {table} SET {assignments}"

    if where is not None:
        if not where:
            raise StatementBuildError("At least one WHERE column is required.")
        conditions = []
        for column, value in where.items():
            validate_identifier(column)
            bind_name = f"{column}{WHERE_SUFFIX}"
            conditions.append(f"{column}={connector.placeholder(bind_name)}")
            params[bind_name] = value
        sql += " WHERE " + " AND ".join(conditions)

    return sql, params


def build_upsert(
    connector: DatabaseConnector, table: str, data: Mapping[str, Any]
) -> Tuple[str, Dict[str, Any]]:
    """Builds an INSERT that updates every given column on a key conflict."""
    sql, params = build_insert(connector, table, data)
    return f"{sql} {connector.upsert_clause(params)}", params
