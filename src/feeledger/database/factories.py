"""Database factory functions for creating database instances."""

from typing import Optional

from feeledger.config import LedgerSettings
from feeledger.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(
    database_path: Optional[str] = None, settings: Optional[LedgerSettings] = None
) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks FEELEDGER_DB_PATH
            environment variable, then defaults to ~/.feeledger/feeledger.db
        settings: Settings supplying the busy timeout; read from the
            environment when omitted

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if settings is None:
        settings = LedgerSettings.from_env()
    if database_path is not None:
        settings = settings.with_overrides(database_path=database_path)

    database_url = f"sqlite:///{settings.resolve_database_path()}"
    return SQLAlchemyDatabase(database_url, busy_timeout=settings.busy_timeout)


def create_database(database_url: str, busy_timeout: Optional[float] = None) -> SQLAlchemyDatabase:
    """Create a database instance for any SQLAlchemy URL."""
    return SQLAlchemyDatabase(database_url, busy_timeout=busy_timeout)
