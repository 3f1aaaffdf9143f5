"""
Table schema descriptors.

A TableSchema describes one table for the generic CRUD router:
which fields callers may create, update and filter on, how lists are
ordered and searched, and which hooks and custom routes apply.

Example:
    TASKS = TableSchema(
        table="tasks",
        path="/tasks",
        create_fields=["title", "description", "priority"],
        update_fields=["title", "description", "priority", "status"],
        order_by="priority DESC, created_at DESC",
        search_fields=["title", "description"],
        hooks=TaskHooks(),
    )
"""

import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable

from kensenich.crud.hooks import CRUDHooks
from kensenich.errors import SchemaMismatchError

# Column and table names are interpolated into SQL, so they must be plain identifiers
IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

HTTP_METHODS = {"GET", "POST", "PUT", "PATCH", "DELETE"}


@dataclass
class CustomRoute:
    """
    An extra endpoint layered onto a table's router.

    Attributes:
        method: HTTP method ("GET", "POST", ...)
        path: Path relative to the table path (e.g. "/{id}/use")
        handler: FastAPI endpoint function
        status_code: Success status, framework default if None
    """

    method: str
    path: str
    handler: Callable[..., Awaitable[Any]]
    status_code: int | None = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        if self.method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {self.method}")
        if not self.path.startswith("/"):
            raise ValueError(f"Custom route path must start with '/': {self.path}")


@dataclass
class TableSchema:
    """
    Configuration for one CRUD-exposed table.

    Attributes:
        table: Database table name
        path: Mount path for the router (e.g. "/crm/contacts")
        create_fields: Body keys copied on create (everything else is dropped)
        update_fields: Body keys copied on update
        order_by: ORDER BY expression for list queries
        search_fields: Columns matched by the `search` query parameter
        filter_fields: Columns usable as equality filters; defaults to
            id + create_fields + update_fields
        allow_delete: Whether DELETE /{id} is exposed
        hooks: Lifecycle hooks (pass-through by default)
        custom_routes: Extra endpoints for table-specific behavior
        versioned: Enforce optimistic concurrency on a `version` column
        label: Human-readable name for error messages
    """

    table: str
    path: str
    create_fields: list[str]
    update_fields: list[str]
    order_by: str = "created_at DESC, id"
    search_fields: list[str] = field(default_factory=list)
    filter_fields: list[str] | None = None
    allow_delete: bool = True
    hooks: CRUDHooks = field(default_factory=CRUDHooks)
    custom_routes: list[CustomRoute] = field(default_factory=list)
    versioned: bool = False
    label: str | None = None

    def __post_init__(self) -> None:
        if not self.path.startswith("/"):
            raise ValueError(f"Table path must start with '/': {self.path}")

        bad = [name for name in [self.table, *self.declared_fields] if not IDENTIFIER_RE.match(name)]
        if bad:
            raise ValueError(f"Invalid identifier(s) in schema for '{self.table}': {', '.join(bad)}")

    @property
    def display_name(self) -> str:
        return self.label or self.table.replace("_", " ")

    @property
    def filterable(self) -> frozenset[str]:
        """Explicit allow-list of columns accepted as list filters."""
        if self.filter_fields is not None:
            return frozenset(self.filter_fields)
        return frozenset(["id", *self.create_fields, *self.update_fields])

    @property
    def declared_fields(self) -> set[str]:
        fields = set(self.create_fields) | set(self.update_fields) | set(self.search_fields)
        if self.filter_fields is not None:
            fields |= set(self.filter_fields)
        if self.versioned:
            fields.add("version")
        return fields

    def validate_columns(self, columns: Iterable[str]) -> None:
        """
        Check every declared field against the table's real columns.

        Raises:
            SchemaMismatchError: if the table is missing or lacks a declared field
        """
        actual = set(columns)
        required = self.declared_fields | {"id", "created_at", "updated_at"}
        missing = sorted(required - actual)
        if missing:
            raise SchemaMismatchError(self.table, missing)
