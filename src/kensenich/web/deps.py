"""
Shared FastAPI dependencies.

The database and tool registry live on `app.state`, set by create_app().
"""

from fastapi import Request

from kensenich.agent.registry import ToolRegistry
from kensenich.db.client import Database


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_registry(request: Request) -> ToolRegistry:
    return request.app.state.registry
