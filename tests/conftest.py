"""Shared test fixtures for the dbsession test suite."""

from unittest.mock import MagicMock

import pytest

from dbsession.database.session import Session
from dbsession.database.sqlite_connector import SQLiteConnector


SQLITE_OPTIONS = {
    "host": "",
    "port": "",
    "database": ":memory:",
    "username": "",
    "password": "",
}

MYSQL_OPTIONS = {
    "host": "db.example.test",
    "port": "3306",
    "database": "app",
    "username": "app_user",
    "password": "s3cret",
}


# ---------------------------------------------------------------------------
# SQLite-backed sessions
# ---------------------------------------------------------------------------

@pytest.fixture
def session():
    """Connected in-memory SQLite session with an `items` table."""
    sess = Session(SQLiteConnector())
    assert sess.connect(SQLITE_OPTIONS)
    sess.query("CREATE TABLE items (id INTEGER PRIMARY KEY, v TEXT NOT NULL)")
    yield sess
    sess.close()


@pytest.fixture
def seeded_session(session):
    """Session whose `items` table holds rows 1='a' and 2='b'."""
    assert session.insert("items", {"id": 1, "v": "a"})
    assert session.insert("items", {"id": 2, "v": "b"})
    return session


# ---------------------------------------------------------------------------
# Mocked MySQL driver
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_cursor():
    """Mock DB-API cursor with one row queued."""
    cursor = MagicMock()
    cursor.rowcount = 1
    cursor.lastrowid = 7
    cursor.description = [("id",), ("v",)]
    cursor.fetchone.return_value = (1, "a")
    cursor.fetchall.return_value = [(1, "a"), (2, "b")]
    return cursor


@pytest.fixture
def mock_connection(mock_cursor):
    conn = MagicMock()
    conn.cursor.return_value = mock_cursor
    return conn


@pytest.fixture
def sqlite_options():
    return dict(SQLITE_OPTIONS)


@pytest.fixture
def mysql_options():
    return dict(MYSQL_OPTIONS)
