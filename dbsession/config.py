# dbsession/config.py
"""
Centralized configuration management, project-wide constants, and logging setup.

This module acts as the single source of truth for configurable parameters,
preventing the use of "magic strings" or numbers throughout the package.
It also initializes the logging system so that every session, connector and
CLI command emits consistent, structured logs.
"""

import logging
import os
import sys
from typing import Dict, Any

import structlog

# --- Project Constants ---

# --- Backends ---
# The backend used when neither the caller nor DB_BACKEND picks one.
DEFAULT_BACKEND = "mysql"
DEFAULT_MYSQL_PORT = 3306

# --- Environment Variables ---
# Maps each connection option to the environment variable it is read from.
ENV_OPTIONS: Dict[str, str] = {
    "host": "DB_HOST",
    "port": "DB_PORT",
    "database": "DB_DATABASE",
    "username": "DB_USERNAME",
    "password": "DB_PASSWORD",
}
ENV_BACKEND = "DB_BACKEND"
ENV_LOG_JSON = "DBSESSION_LOG_JSON"

# Options a file-based backend actually needs.
SQLITE_REQUIRED_OPTIONS = ("database",)

# --- Fetch Styles ---
FETCH_ASSOC = "assoc"
FETCH_INTO = "into"

# Substrings that mark a key as holding a secret.
SENSITIVE_KEYS = ["password", "passwd", "token", "secret"]


# --- Logging Setup ---


def setup_logging(level: int = logging.INFO):
    """
    Configures structlog for context-aware, structured logging.

    Workflow:
    1.  Sets up Python's standard logging module as the base.
    2.  Configures structlog to wrap this base logger.
    3.  Defines a chain of processors that add context, timestamps, log
        levels and exception information.
    4.  Renders to a colorized console line, or to JSON lines when the
        DBSESSION_LOG_JSON environment variable is set.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",  # structlog does the formatting.
        stream=sys.stderr,  # stdout is reserved for CLI output.
    )

    if os.getenv(ENV_LOG_JSON):
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# --- Connection Configuration ---


def get_backend_from_env() -> str:
    """Returns the backend name from DB_BACKEND, or the default backend."""
    return os.getenv(ENV_BACKEND, DEFAULT_BACKEND).strip().lower()


def get_connection_options_from_env(backend: str = DEFAULT_BACKEND) -> Dict[str, Any]:
    """
    Loads connection options from environment variables.

    Workflow:
    1.  Reads DB_HOST, DB_PORT, DB_DATABASE, DB_USERNAME and DB_PASSWORD.
    2.  Fills in the default MySQL port when DB_PORT is unset.
    3.  Checks the options the chosen backend requires. SQLite only needs
        DB_DATABASE; every other backend needs all of them except the port.
    4.  If any are missing, it terminates the application.

    Returns:
        - A dictionary with the keys 'host', 'port', 'database', 'username'
          and 'password'.

    Raises:
        - SystemExit: If any required environment variable is not set.
    """
    log = structlog.get_logger("dbsession.config")
    options = {key: os.getenv(env_name) for key, env_name in ENV_OPTIONS.items()}
    if not options["port"]:
        options["port"] = DEFAULT_MYSQL_PORT

    if backend == "sqlite":
        required = SQLITE_REQUIRED_OPTIONS
    else:
        # An empty password is legitimate for local servers.
        required = ("host", "database", "username")

    missing_keys = [key for key in required if not options.get(key)]
    if missing_keys:
        log.error(
            "Connection config missing from environment",
            missing_keys=[ENV_OPTIONS[key] for key in missing_keys],
            error_type="ConfigurationError",
        )
        sys.exit("Error: Required database environment variables are not set. Exiting.")

    if options["password"] is None:
        options["password"] = ""

    log.info(
        "Connection configuration loaded from environment variables",
        backend=backend,
        options=mask_sensitive_data(options),
    )
    return options


def mask_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Creates a copy of a dictionary and masks sensitive values for safe logging.

    Keeps passwords and tokens out of log files and console output. Keys are
    matched case-insensitively against SENSITIVE_KEYS; only string values are
    masked.

    Args:
        - data (Dict[str, Any]): The dictionary to process.

    Returns:
        - A new dictionary with sensitive values replaced by '***REDACTED***'.
    """
    safe_data = dict(data)
    for key, value in safe_data.items():
        if any(sens_key in key.lower() for sens_key in SENSITIVE_KEYS):
            if isinstance(value, str):
                safe_data[key] = "***REDACTED***"
    return safe_data
