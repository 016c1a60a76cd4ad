# dbsession/database/base_connector.py
"""
Defines the abstract base class for all database connectors.

A connector knows how to talk to one database backend: how to open a driver
connection from the connection options, which exceptions the driver raises,
and how the backend spells bind placeholders and insert-or-update. The
`Session` owns the connection and the current statement; the connector only
supplies the backend-specific pieces, so the session logic stays the same for
every backend.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Tuple, Type


class DatabaseConnector(ABC):
    """
    Abstract Base Class that defines the interface for database connectors.

    Any class that inherits from DatabaseConnector MUST implement all methods
    decorated with `@abstractmethod`.
    """

    #: Registry label, also used in log records.
    name: str = ""

    #: Bind marker for the n-th positional parameter of a raw query.
    positional_placeholder: str = "?"

    @property
    @abstractmethod
    def driver_errors(self) -> Tuple[Type[BaseException], ...]:
        """
        The exception classes the driver raises for connect, prepare and
        execute failures. The session catches exactly these.
        """

    @abstractmethod
    def connect(self, options: Dict[str, Any]):
        """
        Opens and returns a DB-API connection.

        The connection must be in autocommit mode: the session has no
        transaction API, so every statement takes effect on its own.

        Args:
            - options (Dict[str, Any]): Connection options with the keys
              'host', 'port', 'database', 'username' and 'password'.
        """

    def cursor(self, connection):
        """Returns a fresh cursor for `connection`."""
        return connection.cursor()

    @abstractmethod
    def placeholder(self, name: str) -> str:
        """Returns the bind marker for the named parameter `name`."""

    @abstractmethod
    def upsert_clause(self, columns: Iterable[str]) -> str:
        """
        Returns the SQL tail that turns an INSERT into an insert-or-update of
        `columns` when a uniqueness constraint is hit.
        """

    def last_insert_id(self, cursor):
        """Returns the id generated by the statement `cursor` just ran."""
        return cursor.lastrowid
