"""
Pytest configuration and fixtures for KensenichManager tests.
"""

import asyncio
import os

import pytest

# Set test environment before importing kensenich modules
os.environ["KENSENICH_ENV"] = "development"
os.environ["DATABASE_PATH"] = ":memory:"
os.environ["AGENT_MAX_TOOL_ROUNDS"] = "2"

from fastapi.testclient import TestClient  # noqa: E402

from kensenich.agent.tools import build_default_registry  # noqa: E402
from kensenich.db import Database, init_schema  # noqa: E402
from kensenich.web.app import create_app  # noqa: E402


class FakeCompletion:
    """
    Scripted stand-in for the chat completion function.

    Returns the queued replies in order, then `default` forever, and
    records every call so tests can inspect what the model was sent.
    """

    def __init__(self, *replies: str, default: str = "Done."):
        self.replies = list(replies)
        self.default = default
        self.calls: list[dict] = []

    async def __call__(self, *, system_prompt: str, messages: list[dict]) -> str:
        self.calls.append({
            "system_prompt": system_prompt,
            "messages": [dict(m) for m in messages],
        })
        if self.replies:
            return self.replies.pop(0)
        return self.default


@pytest.fixture
def db():
    """Fresh in-memory database with the full schema and default habits."""
    database = Database(":memory:")
    asyncio.run(init_schema(database))
    yield database
    database.close()


@pytest.fixture
def bare_db():
    """In-memory database without any tables."""
    database = Database(":memory:")
    yield database
    database.close()


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def make_client(db, registry):
    """Factory for a TestClient whose assistant uses the given completion."""
    clients = []

    def _make(complete=None) -> TestClient:
        app = create_app(db=db, registry=registry, complete=complete or FakeCompletion("Hello!"))
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()
