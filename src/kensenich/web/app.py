"""
KensenichManager - FastAPI application.

create_app() wires the database, the tool registry and the completion
function onto app.state, mounts one CRUD router per configured table
plus the assistant routes under /api, and installs the error handlers
that render every failure as {"error": message}.
"""

import logging
import sqlite3
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from kensenich import __version__
from kensenich.agent.chat import CompletionFn
from kensenich.agent.registry import ToolRegistry
from kensenich.agent.tools import build_default_registry
from kensenich.config import settings
from kensenich.crud import create_crud_router
from kensenich.db.client import Database, get_database
from kensenich.db.records import now_iso
from kensenich.db.schema import init_schema
from kensenich.errors import APIError
from kensenich.llm.client import complete_chat
from kensenich.observability import log_requests
from kensenich.tables import TABLES
from kensenich.web import agent_routes

logger = logging.getLogger(__name__)


async def prepare_database(db: Database) -> None:
    """Create the schema and check every table descriptor against it."""
    await init_schema(db)
    for schema in TABLES:
        schema.validate_columns(db.columns(schema.table))
    logger.info(f"Validated {len(TABLES)} table schemas")


def create_app(
    db: Database | None = None,
    registry: ToolRegistry | None = None,
    complete: CompletionFn | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        db: Database to use (defaults to the configured file database)
        registry: Tool registry (defaults to the frozen built-in registry)
        complete: Chat completion function (defaults to the OpenAI client)
    """
    owns_db = db is None
    database = db if db is not None else get_database()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"KensenichManager starting (env={settings.kensenich_env}, db={database.path})")
        await prepare_database(database)
        yield
        logger.info("KensenichManager shutting down")
        if owns_db:
            database.close()

    app = FastAPI(title="KensenichManager", version=__version__, lifespan=lifespan)
    app.state.db = database
    app.state.registry = registry if registry is not None else build_default_registry()
    app.state.complete = complete if complete is not None else complete_chat

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)

    install_error_handlers(app)

    @app.get("/api/health")
    async def health():
        """Liveness plus a database round trip."""
        try:
            await database.fetch_value("SELECT 1")
        except sqlite3.Error as e:
            logger.error(f"Health check failed: {e}")
            return JSONResponse(
                status_code=503,
                content={"status": "degraded", "timestamp": now_iso(), "database": "error"},
            )
        return {"status": "ok", "timestamp": now_iso(), "database": "connected"}

    for schema in TABLES:
        app.include_router(create_crud_router(schema), prefix="/api")
    app.include_router(agent_routes.router, prefix="/api")

    return app


# =============================================================================
# Error handlers
# =============================================================================


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Validation failed", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(sqlite3.Error)
    async def store_error_handler(request: Request, exc: sqlite3.Error):
        logger.exception(f"Database error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def run_server(host: str | None = None, port: int | None = None, reload: bool = False) -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "kensenich.web.app:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )
