"""Store factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from ledgersync.database.sqlalchemy_db import SQLAlchemyStore


def create_sqlite_store(database_path: Optional[str] = None) -> SQLAlchemyStore:
    """Create a SQLite-backed store.

    Args:
        database_path: Path to SQLite database file. If None, checks LEDGERSYNC_DB_PATH
            environment variable, then defaults to ~/.ledgersync/ledgersync.db

    Returns:
        SQLAlchemyStore instance configured for SQLite via aiosqlite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("LEDGERSYNC_DB_PATH")

    if database_path is None:
        # Default to ~/.ledgersync/ledgersync.db
        home = Path.home()
        db_dir = home / ".ledgersync"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "ledgersync.db")

    database_url = f"sqlite+aiosqlite:///{database_path}"
    return SQLAlchemyStore(database_url)
