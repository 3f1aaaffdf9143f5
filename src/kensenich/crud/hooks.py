"""
CRUD lifecycle hooks.

The hooks pattern separates table-specific rules (required fields,
defaults, derived columns) from the generic CRUD algorithm. The generic
service handles allow-listing, metadata injection and query building;
the hooks mutate or validate the field map right before it is written.

Override methods in table-specific subclasses. Default implementations
are pass-throughs (no modification).
"""

from typing import Any, Iterable

from fastapi import Request

from kensenich.errors import ValidationError


class CRUDHooks:
    """Base class for table-specific CRUD hooks."""

    async def before_create(self, data: dict[str, Any], request: Request | None) -> None:
        """
        Called with the assembled field map before INSERT.

        `data` already contains the allow-listed body fields plus the
        injected id and timestamps. Mutate it in place; raise
        ValidationError to reject the request.
        """

    async def before_update(
        self,
        data: dict[str, Any],
        existing: dict[str, Any],
        request: Request | None,
    ) -> None:
        """
        Called with the new field map and the stored record before UPDATE.

        `data` contains only the fields being changed (plus updated_at).
        """

    async def before_delete(self, existing: dict[str, Any], request: Request | None) -> None:
        """Called with the stored record before DELETE."""


class RequiredFieldsHooks(CRUDHooks):
    """
    Hooks that enforce a set of required business fields.

    Creates must provide a non-empty value for every required field;
    updates may omit them but may not blank them out.
    """

    required: tuple[str, ...] = ()

    def __init__(self, required: Iterable[str] | None = None):
        if required is not None:
            self.required = tuple(required)

    async def before_create(self, data: dict[str, Any], request: Request | None) -> None:
        missing = [f for f in self.required if _is_blank(data.get(f))]
        if missing:
            raise ValidationError(f"Missing required field(s): {', '.join(missing)}")

    async def before_update(
        self,
        data: dict[str, Any],
        existing: dict[str, Any],
        request: Request | None,
    ) -> None:
        blanked = [f for f in self.required if f in data and _is_blank(data[f])]
        if blanked:
            raise ValidationError(f"Required field(s) cannot be empty: {', '.join(blanked)}")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False
