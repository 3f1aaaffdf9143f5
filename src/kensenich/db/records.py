"""
Record helpers: identifiers and timestamps.

Timestamps are ISO 8601 strings in UTC with microseconds, so they sort
lexicographically in the same order as chronologically.
"""

import uuid
from datetime import datetime, timedelta, timezone

# Fields injected by the store layer rather than supplied by callers
METADATA_FIELDS = frozenset({"id", "created_at", "updated_at", "version"})


def generate_id() -> str:
    """Generate a new UUID4 record identifier."""
    return str(uuid.uuid4())


def now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def next_timestamp(previous: str | None) -> str:
    """
    Current time, guaranteed to sort strictly after `previous`.

    Two writes inside one clock tick would otherwise share a timestamp.
    """
    current = datetime.now(timezone.utc)
    if previous:
        try:
            prior = datetime.fromisoformat(previous)
        except ValueError:
            return current.isoformat(timespec="microseconds")
        if prior.tzinfo is None:
            prior = prior.replace(tzinfo=timezone.utc)
        if current <= prior:
            current = prior + timedelta(microseconds=1)
    return current.isoformat(timespec="microseconds")


def today_iso() -> str:
    """Current UTC date as YYYY-MM-DD."""
    return datetime.now(timezone.utc).date().isoformat()
