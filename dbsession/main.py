# dbsession/main.py
"""
Command-line interface for running ad-hoc statements through a Session.
Connection options come from the DB_* environment variables.
"""

import argparse
import json
import sys

import structlog

from dbsession.config import get_backend_from_env, get_connection_options_from_env, setup_logging
from dbsession.database import CONNECTORS, get_connector
from dbsession.database.session import Session

log = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dbsession",
        description="Run statements against a MySQL or SQLite database.",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "--backend",
        choices=sorted(CONNECTORS),
        default=None,
        help="Database backend. Defaults to $DB_BACKEND, then 'mysql'.",
    )
    subparsers = parser.add_subparsers(
        dest="command", required=True, help="Available commands"
    )

    # --- 'ping' command ---
    subparsers.add_parser("ping", help="Check that a connection can be opened.")

    # --- 'query' command ---
    parser_query = subparsers.add_parser(
        "query", help="Run one SQL statement and print its result as JSON."
    )
    parser_query.add_argument("sql", help="The SQL statement to execute.")
    parser_query.add_argument(
        "params", nargs="*", help="Values bound to the positional placeholders, in order."
    )
    parser_query.add_argument(
        "--fetch",
        choices=["all", "one", "column", "none"],
        default="all",
        help="How to read the result (default: all rows).",
    )
    parser_query.add_argument(
        "--column", type=int, default=0, help="Zero-based column index for --fetch column."
    )
    return parser


def run_query(session: Session, args) -> int:
    """Runs the 'query' command on an open session and prints the result."""
    if not session.query(args.sql, args.params):
        return 1

    if args.fetch == "all":
        result = session.fetch_all()
    elif args.fetch == "one":
        result = session.fetch()
    elif args.fetch == "column":
        result = session.fetch_column(args.column)
    else:
        result = {"affected_rows": session.affected_rows()}

    print(json.dumps(result, default=str, ensure_ascii=False, indent=2))
    return 0


def main(argv=None):
    """Parses command-line arguments and executes the requested action."""
    setup_logging()
    args = build_parser().parse_args(argv)
    backend = args.backend or get_backend_from_env()

    try:
        session = Session(get_connector(backend))
        options = get_connection_options_from_env(backend)

        if not session.connect(options):
            status = 1
        elif args.command == "ping":
            log.info("Ping successful.", backend=backend)
            status = 0
        else:
            status = run_query(session, args)

        session.close()
        for error in session.get_errors():
            log.error("Session error.", error=error)
    except Exception:
        log.exception("A fatal error occurred in the dbsession command.")
        sys.exit(1)

    sys.exit(status)


if __name__ == "__main__":
    main()
