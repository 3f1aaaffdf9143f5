"""
Generic CRUD operations over one table.

Every operation is driven by a TableSchema. Column names only ever come
from the schema (or from hooks, which are application code); request
values are always bound as `?` parameters.
"""

import json
import logging
from typing import Any, Mapping

from fastapi import Request

from kensenich.crud.schema import TableSchema
from kensenich.db.client import Database
from kensenich.db.records import METADATA_FIELDS, generate_id, next_timestamp, now_iso
from kensenich.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000

# Largest OFFSET sqlite3 can bind (signed 64-bit)
MAX_OFFSET = 2**63 - 1

# Query parameters consumed by the list operation itself
RESERVED_PARAMS = frozenset({"page", "limit", "search"})


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def to_column_value(value: Any) -> Any:
    """Convert a JSON body value into something sqlite3 can bind."""
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


class CRUDService:
    """List / get / create / update / delete for a single TableSchema."""

    def __init__(self, schema: TableSchema, db: Database):
        self.schema = schema
        self.db = db

    @property
    def table(self) -> str:
        return self.schema.table

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    async def list_records(
        self,
        filters: Mapping[str, Any] | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = DEFAULT_LIMIT,
    ) -> list[dict[str, Any]]:
        """
        List records with equality filters, search and pagination.

        Raises:
            ValidationError: if a filter key is not in the filterable set
        """
        filters = dict(filters or {})
        unknown = sorted(set(filters) - self.schema.filterable)
        if unknown:
            raise ValidationError(f"Unknown filter field(s): {', '.join(unknown)}")

        clauses: list[str] = []
        params: list[Any] = []

        for key, value in filters.items():
            clauses.append(f"{key} = ?")
            params.append(value)

        if search and self.schema.search_fields:
            pattern = f"%{escape_like(search)}%"
            ors = [f"{col} LIKE ? ESCAPE '\\'" for col in self.schema.search_fields]
            clauses.append(f"({' OR '.join(ors)})")
            params.extend([pattern] * len(ors))

        sql = f"SELECT * FROM {self.table}"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        offset = (page - 1) * limit
        if offset > MAX_OFFSET:
            return []

        sql += f" ORDER BY {self.schema.order_by} LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        return await self.db.fetch_all(sql, params)

    async def find(self, record_id: str) -> dict[str, Any] | None:
        return await self.db.fetch_one(f"SELECT * FROM {self.table} WHERE id = ?", (record_id,))

    async def get(self, record_id: str) -> dict[str, Any]:
        """Fetch one record or raise NotFoundError."""
        record = await self.find(record_id)
        if record is None:
            raise NotFoundError(f"{self.schema.display_name} not found")
        return record

    # -------------------------------------------------------------------------
    # Write
    # -------------------------------------------------------------------------

    async def create(self, body: Mapping[str, Any], request: Request | None = None) -> dict[str, Any]:
        data = {
            field: to_column_value(body[field])
            for field in self.schema.create_fields
            if field in body
        }

        timestamp = now_iso()
        data["id"] = generate_id()
        data["created_at"] = timestamp
        data["updated_at"] = timestamp
        if self.schema.versioned:
            data["version"] = 1

        await self.schema.hooks.before_create(data, request)

        if not set(data) - METADATA_FIELDS:
            raise ValidationError("No valid fields provided")

        columns = ", ".join(data)
        placeholders = ", ".join("?" for _ in data)
        await self.db.execute(
            f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders})",
            list(data.values()),
        )

        logger.info(f"Created {self.table} record {data['id']}")
        return await self.get(data["id"])

    async def update(
        self,
        record_id: str,
        body: Mapping[str, Any],
        request: Request | None = None,
    ) -> dict[str, Any]:
        existing = await self.get(record_id)

        expected_version = None
        if self.schema.versioned and body.get("version") is not None:
            expected_version = _parse_version(body["version"])
            if expected_version != existing.get("version"):
                raise ConflictError(
                    f"{self.schema.display_name} was modified concurrently",
                    details={"expected": expected_version, "current": existing.get("version")},
                )

        data = {
            field: to_column_value(body[field])
            for field in self.schema.update_fields
            if field in body
        }
        if not data:
            raise ValidationError("No valid fields to update")

        data["updated_at"] = next_timestamp(existing.get("updated_at"))
        await self.schema.hooks.before_update(data, existing, request)

        assignments = ", ".join(f"{column} = ?" for column in data)
        params = list(data.values())
        sql = f"UPDATE {self.table} SET {assignments}"

        if self.schema.versioned:
            current = existing.get("version") or 1
            sql += ", version = ? WHERE id = ? AND version = ?"
            params.extend([current + 1, record_id, current])
        else:
            sql += " WHERE id = ?"
            params.append(record_id)

        changed = await self.db.execute(sql, params)
        if self.schema.versioned and changed == 0:
            raise ConflictError(f"{self.schema.display_name} was modified concurrently")

        logger.info(f"Updated {self.table} record {record_id}")
        return await self.get(record_id)

    async def delete(self, record_id: str, request: Request | None = None) -> dict[str, Any]:
        existing = await self.get(record_id)
        await self.schema.hooks.before_delete(existing, request)

        await self.db.execute(f"DELETE FROM {self.table} WHERE id = ?", (record_id,))

        logger.info(f"Deleted {self.table} record {record_id}")
        return {"message": "Deleted successfully", "id": record_id}


def _parse_version(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError("version must be an integer")
