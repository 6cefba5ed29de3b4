"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from pointledger.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV = "POINTLEDGER_DB_PATH"
DATABASE_URL_ENV = "POINTLEDGER_DATABASE_URL"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks POINTLEDGER_DB_PATH
            environment variable, then defaults to ~/.pointledger/pointledger.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get(DB_PATH_ENV)

    if database_path is None:
        # Default to ~/.pointledger/pointledger.db
        home = Path.home()
        db_dir = home / ".pointledger"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "pointledger.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def create_database(
    database_url: Optional[str] = None, database_path: Optional[str] = None
) -> SQLAlchemyDatabase:
    """Create a database instance from a URL, falling back to SQLite.

    Args:
        database_url: Full SQLAlchemy URL. If None, checks POINTLEDGER_DATABASE_URL.
        database_path: SQLite path used when no URL is configured

    Returns:
        SQLAlchemyDatabase instance
    """
    if database_url is None:
        database_url = os.environ.get(DATABASE_URL_ENV)

    if database_url:
        return SQLAlchemyDatabase(database_url)
    return create_sqlite_database(database_path=database_path)
