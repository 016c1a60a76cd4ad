# dbsession/database/session.py
"""
The database session: one connection, one current statement, one error log.

`Session` wraps a DB-API connection opened through a `DatabaseConnector` and
exposes connect / query / insert / update / upsert / fetch operations. Driver
exceptions never escape a session method. Each failure is logged, appended to
the session's error log and reported by returning a falsy `OperationResult`.
The error log is append-only and shared by all calls, so a failed result can
only be matched to its log entry by order.

The session is synchronous and holds no locks; callers must not share one
session across threads.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import structlog

from dbsession.config import FETCH_INTO, mask_sensitive_data
from dbsession.database.base_connector import DatabaseConnector
from dbsession.database.mysql_connector import MySQLConnector
from dbsession.database.statements import (
    StatementBuildError,
    build_insert,
    build_update,
    build_upsert,
)

log = structlog.get_logger(__name__)


class BackendOperationFailed(Exception):
    """A connect, prepare, execute or fetch call failed in the driver."""


@dataclass(frozen=True)
class OperationResult:
    """
    Outcome of a fallible session operation.

    Truthy when the operation succeeded, so `if session.insert(...):` reads
    like a plain boolean check. `error` holds the message that was also
    appended to the session's error log.
    """

    ok: bool
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok


SUCCESS = OperationResult(ok=True)


class Session:
    """
    Owns exactly one connection and at most one open statement.

    Attributes:
        - connector: Backend-specific connection and dialect helper.
        - connection: The open DB-API connection, or None.
        - statement: The cursor left by the last successful `query()`, or None.
        - affected_row_count: Rows affected by the last successful statement.
        - last_insert_id: Id generated by the last successful insert/upsert.
        - errors: Every error message recorded so far, oldest first.
    """

    def __init__(self, connector: Optional[DatabaseConnector] = None):
        self.connector = connector if connector is not None else MySQLConnector()
        self.connection = None
        self.statement = None
        self.affected_row_count = 0
        self.last_insert_id = None
        self.errors: List[str] = []

    # --- Connection lifecycle ---

    def connect(self, options: Dict[str, Any]) -> OperationResult:
        """
        Opens the connection described by `options`.

        All five option keys ('host', 'port', 'database', 'username',
        'password') are expected to be present; they are not validated.
        An already open connection is closed first.
        """
        if self.connection is not None:
            self.close()
        try:
            self.connection = self.connector.connect(options)
        except self.connector.driver_errors as e:
            return self._fail("Database connection failed.", BackendOperationFailed(str(e)))
        log.info(
            "Database connection successful.",
            backend=self.connector.name,
            options=mask_sensitive_data(options),
        )
        return SUCCESS

    def close(self) -> bool:
        """Releases the connection. Safe to call any number of times."""
        self._discard_statement()
        if self.connection is not None:
            try:
                self.connection.close()
            except self.connector.driver_errors as e:
                log.warning("Error while closing connection.", error=str(e))
            self.connection = None
            log.info("Database connection closed.", backend=self.connector.name)
        return True

    # --- Statements ---

    def query(self, sql: str, parameters: Sequence[Any] = ()) -> OperationResult:
        """
        Executes `sql`, binding `parameters` to its positional placeholders in
        order, and keeps the cursor for the fetch methods.

        A failed query leaves the previous statement and row count in place.
        """
        try:
            cursor = self._execute(sql, tuple(parameters))
        except BackendOperationFailed as e:
            return self._fail("Query failed.", e, sql=sql)
        self._discard_statement()
        self.affected_row_count = cursor.rowcount
        # Only statements that generated a key move the insert id.
        generated_id = self.connector.last_insert_id(cursor)
        if generated_id:
            self.last_insert_id = generated_id
        self.statement = cursor
        return SUCCESS

    def insert(self, table: str, data: Mapping[str, Any]) -> OperationResult:
        """
        Inserts one row. `data` maps column names to values.
        """
        return self._write("Insert failed.", build_insert, table, data)

    def update(
        self,
        table: str,
        data: Mapping[str, Any],
        where: Optional[Mapping[str, Any]] = None,
    ) -> OperationResult:
        """
        Sets the columns in `data` on every row matching all `where` pairs.

        Without `where` every row in the table is updated.
        """
        return self._write(
            "Update failed.", build_update, table, data, where, records_insert_id=False
        )

    def upsert(self, table: str, data: Mapping[str, Any]) -> OperationResult:
        """
        Inserts one row, or updates all given columns of the existing row when
        the insert hits a unique key.
        """
        return self._write("Upsert failed.", build_upsert, table, data)

    # --- Fetching ---

    def fetch(self, fetch_style: Optional[str] = None, target: Any = None):
        """
        Returns the next row of the current statement, then closes it.

        Args:
            - fetch_style (str): 'into' copies the row onto `target` as
              attributes and returns `target`. Anything else, including None
              and 'assoc', returns the row as a dict.
            - target: The object to populate for 'into'.

        Returns:
            - The row, or None when there is no statement or no row left.
              A second call without a new `query()` always returns None.
        """
        if fetch_style == FETCH_INTO and target is None:
            raise ValueError("fetch_style 'into' requires a target object.")
        cursor = self._take_statement()
        if cursor is None:
            return None
        try:
            row = cursor.fetchone()
            columns = self._column_names(cursor)
        except self.connector.driver_errors as e:
            self._fail("Fetch failed.", BackendOperationFailed(str(e)))
            return None
        finally:
            cursor.close()
        if row is None:
            return None
        return self._shape_row(columns, row, fetch_style, target)

    def fetch_all(self, fetch_style: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Returns all remaining rows as dicts, then closes the statement.

        An empty result set, or no statement at all, yields an empty list.
        """
        if fetch_style == FETCH_INTO:
            raise ValueError("fetch_style 'into' is only supported by fetch().")
        cursor = self._take_statement()
        if cursor is None:
            return []
        try:
            rows = cursor.fetchall()
            columns = self._column_names(cursor)
        except self.connector.driver_errors as e:
            self._fail("Fetch failed.", BackendOperationFailed(str(e)))
            return []
        finally:
            cursor.close()
        return [self._shape_row(columns, row, fetch_style) for row in rows]

    def fetch_column(self, column_index: int = 0):
        """
        Returns the value at zero-based `column_index` of the next row, then
        closes the statement. Returns False when no row is left.
        """
        if column_index < 0:
            raise ValueError("column_index must be greater than or equal to 0.")
        cursor = self._take_statement()
        if cursor is None:
            return False
        try:
            row = cursor.fetchone()
        except self.connector.driver_errors as e:
            self._fail("Fetch failed.", BackendOperationFailed(str(e)))
            return False
        finally:
            cursor.close()
        if row is None:
            return False
        return row[column_index]

    # --- Accessors ---

    def affected_rows(self) -> int:
        """Returns the number of rows affected by the last successful statement."""
        return self.affected_row_count

    def insert_id(self):
        """Returns the id generated by the last successful insert or upsert."""
        return self.last_insert_id

    def get_errors(self) -> Tuple[str, ...]:
        """Returns a snapshot of every error recorded so far."""
        return tuple(self.errors)

    # --- Internals ---

    def _execute(self, sql: str, parameters):
        if self.connection is None:
            raise BackendOperationFailed("Not connected. Call connect() first.")
        log.debug("Executing statement.", sql=sql)
        try:
            cursor = self.connector.cursor(self.connection)
        except self.connector.driver_errors as e:
            raise BackendOperationFailed(str(e)) from e
        try:
            if parameters:
                cursor.execute(sql, parameters)
            else:
                # Unbound SQL may hold a literal '%' the driver must not parse.
                cursor.execute(sql)
        except self.connector.driver_errors as e:
            cursor.close()
            raise BackendOperationFailed(str(e)) from e
        return cursor

    def _write(
        self, message: str, builder, table: str, *args, records_insert_id: bool = True
    ) -> OperationResult:
        try:
            sql, params = builder(self.connector, table, *args)
        except StatementBuildError as e:
            return self._fail(message, e, table=table)
        try:
            cursor = self._execute(sql, params)
        except BackendOperationFailed as e:
            return self._fail(message, e, table=table, sql=sql)
        self.affected_row_count = cursor.rowcount
        if records_insert_id:
            self.last_insert_id = self.connector.last_insert_id(cursor)
        cursor.close()
        return SUCCESS

    def _fail(self, message: str, error: Exception, **context) -> OperationResult:
        text = str(error)
        self.errors.append(text)
        log.error(message, backend=self.connector.name, error=text, **context)
        return OperationResult(ok=False, error=text)

    def _take_statement(self):
        cursor, self.statement = self.statement, None
        return cursor

    def _discard_statement(self):
        cursor = self._take_statement()
        if cursor is not None:
            try:
                cursor.close()
            except self.connector.driver_errors as e:
                log.warning("Error while closing statement.", error=str(e))

    @staticmethod
    def _column_names(cursor) -> List[str]:
        return [column[0] for column in cursor.description or ()]

    @staticmethod
    def _shape_row(columns, row, fetch_style, target=None):
        if fetch_style == FETCH_INTO:
            for column, value in zip(columns, row):
                setattr(target, column, value)
            return target
        # 'assoc' and every other style give a dict.
        return dict(zip(columns, row))
