"""Database layer for atmledger application."""

from atmledger.database.base import Database
from atmledger.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
