"""Database layer for furnledger application."""

from furnledger.database.base import Database
from furnledger.database.factories import create_sqlite_database, default_database_path
from furnledger.database.sqlalchemy_db import SQLAlchemyDatabase

__all__ = ["Database", "SQLAlchemyDatabase", "create_sqlite_database", "default_database_path"]
