"""Infrastructure - Database and logging."""

from app.infra.database import DatabaseSession, close_db_engine, get_db_session, init_db
from app.infra.logging import get_logger, setup_logging

__all__ = [
    "get_db_session",
    "DatabaseSession",
    "close_db_engine",
    "init_db",
    "setup_logging",
    "get_logger",
]
