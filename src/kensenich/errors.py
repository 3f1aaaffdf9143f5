"""
KensenichManager - API error types.

Client errors are raised where they are detected and rendered by the
exception handlers in kensenich.web.app as {"error": message}.
Store failures (sqlite3.Error) are never wrapped here; they propagate
to the application boundary and become a generic 500.
"""

from typing import Any


class APIError(Exception):
    """Base error carrying an HTTP status code and optional details."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class NotFoundError(APIError):
    """Requested identifier does not exist."""

    status_code = 404


class ValidationError(APIError):
    """Empty or invalid field set after allow-listing."""

    status_code = 400


class ConflictError(APIError):
    """Optimistic concurrency check failed on a versioned table."""

    status_code = 409


class SchemaMismatchError(Exception):
    """A table descriptor declares fields the database table does not have."""

    def __init__(self, table: str, missing: list[str]):
        self.table = table
        self.missing = missing
        super().__init__(
            f"Table '{table}' has no column(s): {', '.join(missing)}"
        )
