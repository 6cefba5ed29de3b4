"""Database layer for pointledger."""

from pointledger.database.base import Database
from pointledger.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
