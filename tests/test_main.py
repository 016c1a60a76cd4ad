"""Tests for the dbsession command-line interface."""

import json
from unittest.mock import patch

import pytest

from dbsession.main import main


@pytest.fixture
def sqlite_env(monkeypatch):
    for name in ["DB_HOST", "DB_PORT", "DB_USERNAME", "DB_PASSWORD"]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DB_BACKEND", "sqlite")
    monkeypatch.setenv("DB_DATABASE", ":memory:")
    return monkeypatch


def run_cli(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestMain:
    def test_ping(self, sqlite_env):
        assert run_cli(["ping"]) == 0

    def test_query_prints_rows(self, sqlite_env, capsys):
        assert run_cli(["query", "SELECT ? AS one, 'x' AS two", "1"]) == 0
        assert json.loads(capsys.readouterr().out) == [{"one": "1", "two": "x"}]

    def test_query_fetch_column(self, sqlite_env, capsys):
        assert run_cli(["query", "SELECT 41 + 1", "--fetch", "column"]) == 0
        assert json.loads(capsys.readouterr().out) == 42

    def test_query_failure_exits_nonzero(self, sqlite_env, capsys):
        assert run_cli(["query", "SELECT * FROM missing"]) == 1
        assert capsys.readouterr().out == ""

    def test_connect_failure_exits_nonzero(self, sqlite_env):
        sqlite_env.setenv("DB_DATABASE", "/nonexistent-dir/deeper/db.sqlite")
        assert run_cli(["ping"]) == 1

    def test_backend_flag_overrides_env(self, sqlite_env):
        sqlite_env.setenv("DB_BACKEND", "mysql")
        assert run_cli(["--backend", "sqlite", "ping"]) == 0

    def test_unexpected_error_exits_nonzero(self, sqlite_env):
        with patch("dbsession.main.Session", side_effect=RuntimeError("boom")):
            assert run_cli(["ping"]) == 1
