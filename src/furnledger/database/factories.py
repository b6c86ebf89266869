"""Database factory functions for creating database instances."""

from pathlib import Path
from typing import Optional

from furnledger.config import Settings, load_settings
from furnledger.database.sqlalchemy_db import SQLAlchemyDatabase

DEFAULT_DATA_DIR = ".furnledger"
DEFAULT_DB_NAME = "furnledger.db"


def default_database_path() -> Path:
    """Return ~/.furnledger/furnledger.db, creating the directory if needed."""
    data_dir = Path.home() / DEFAULT_DATA_DIR
    data_dir.mkdir(exist_ok=True)
    return data_dir / DEFAULT_DB_NAME


def create_sqlite_database(
    database_path: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, the configured
            FURNLEDGER_DB_PATH is used, then the default location
        settings: Settings to read the configured path from; loaded from the
            environment if None

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = (settings or load_settings()).database_path
    if database_path is None:
        database_path = str(default_database_path())

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")
