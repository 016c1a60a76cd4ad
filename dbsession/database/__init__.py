"""Database session, backend connectors and SQL statement builders."""

from typing import Dict, Type

from dbsession.database.base_connector import DatabaseConnector
from dbsession.database.mysql_connector import MySQLConnector
from dbsession.database.sqlite_connector import SQLiteConnector

CONNECTORS: Dict[str, Type[DatabaseConnector]] = {
    MySQLConnector.name: MySQLConnector,
    SQLiteConnector.name: SQLiteConnector,
}


def get_connector(name: str) -> DatabaseConnector:
    """Returns a new connector for the backend called `name`."""
    try:
        return CONNECTORS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown database backend {name!r}. Choose from: {', '.join(sorted(CONNECTORS))}"
        ) from None
