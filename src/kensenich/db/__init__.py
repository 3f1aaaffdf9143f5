"""
KensenichManager - Database.

SQLite access through a single parameterized-query abstraction.
"""

from kensenich.db.client import Database, get_database
from kensenich.db.schema import init_schema

__all__ = [
    "Database",
    "get_database",
    "init_schema",
]
