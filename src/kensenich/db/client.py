"""
KensenichManager - SQLite Client.

Low-level database access. All queries go through here.

Every method takes a SQL string with `?` placeholders and a parameter
sequence; values are never interpolated into SQL by this layer.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Any, Sequence

from kensenich.config import settings

logger = logging.getLogger(__name__)

IN_MEMORY = ":memory:"


class Database:
    """
    Thin async-facing wrapper around one shared sqlite3 connection.

    Rows come back as plain dicts. Writes are committed immediately;
    a failing statement is rolled back and the sqlite3 error re-raised.
    """

    def __init__(self, path: str | Path = IN_MEMORY):
        self.path = str(path)
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            if self.path != IN_MEMORY:
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            logger.info(f"Opened database {self.path}")
        return self._conn

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a write statement and commit. Returns the affected row count."""
        logger.debug(f"SQL {sql.strip()} params={list(params)}")
        conn = self.connection
        try:
            cursor = conn.execute(sql, params)
        except sqlite3.Error:
            conn.rollback()
            raise
        conn.commit()
        return cursor.rowcount

    async def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any] | None:
        """Run a query and return the first row, or None."""
        logger.debug(f"SQL {sql.strip()} params={list(params)}")
        row = self.connection.execute(sql, params).fetchone()
        return dict(row) if row is not None else None

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Run a query and return every row."""
        logger.debug(f"SQL {sql.strip()} params={list(params)}")
        rows = self.connection.execute(sql, params).fetchall()
        return [dict(row) for row in rows]

    async def fetch_value(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Run a query and return the first column of the first row."""
        row = await self.fetch_one(sql, params)
        if row is None:
            return None
        return next(iter(row.values()))

    def executescript(self, script: str) -> None:
        """Run a multi-statement DDL script."""
        self.connection.executescript(script)

    def columns(self, table: str) -> list[str]:
        """Column names of `table`, empty if the table does not exist."""
        rows = self.connection.execute(
            "SELECT name FROM pragma_table_info(?)", (table,)
        ).fetchall()
        return [row["name"] for row in rows]

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None


# Singleton instance for the CLI and the default app
_database: Database | None = None


def get_database() -> Database:
    """
    Get the process-wide database.

    Uses singleton pattern to reuse the connection.
    """
    global _database

    if _database is None:
        _database = Database(settings.database_path)

    return _database
