"""Database layer for bilanzkit application."""

from bilanzkit.database.base import Database
from bilanzkit.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
