"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from atmledger.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(
    database_path: Optional[str] = None, timeout: Optional[float] = None
) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks ATMLEDGER_DB_PATH
            environment variable, then defaults to ~/.atmledger/atmledger.db
        timeout: Seconds to wait for the database write lock. If None, checks
            ATMLEDGER_DB_TIMEOUT, then defaults to 30

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("ATMLEDGER_DB_PATH")

    if database_path is None:
        # Default to ~/.atmledger/atmledger.db
        home = Path.home()
        db_dir = home / ".atmledger"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "atmledger.db")

    if timeout is None:
        timeout = float(os.environ.get("ATMLEDGER_DB_TIMEOUT", "30"))

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url, timeout=timeout)
