"""dbsession: a small session wrapper over DB-API database drivers."""

from dbsession.database import get_connector
from dbsession.database.session import BackendOperationFailed, OperationResult, Session
from dbsession.database.statements import StatementBuildError

__all__ = [
    "BackendOperationFailed",
    "OperationResult",
    "Session",
    "StatementBuildError",
    "get_connector",
]
