"""
CRUD router factory.

create_crud_router() turns a TableSchema into a FastAPI router with the
standard endpoints:

    GET    {path}          list (page, limit, search, equality filters)
    GET    {path}/{id}     get one
    POST   {path}          create (201)
    PUT    {path}/{id}     update
    DELETE {path}/{id}     delete (only when schema.allow_delete)

Custom routes are registered first so static segments like
`/pending` or `/stats/overview` are not captured by `/{id}`.
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Query, Request

from kensenich.crud.schema import TableSchema
from kensenich.crud.service import DEFAULT_LIMIT, MAX_LIMIT, RESERVED_PARAMS, CRUDService
from kensenich.db.client import Database
from kensenich.web.deps import get_db

logger = logging.getLogger(__name__)


def create_crud_router(schema: TableSchema, prefix: str | None = None) -> APIRouter:
    """
    Build the router for one table.

    Args:
        schema: Table descriptor
        prefix: Mount path override (defaults to schema.path)
    """
    router = APIRouter(prefix=prefix if prefix is not None else schema.path, tags=[schema.table])

    # =========================================================================
    # Custom routes
    # =========================================================================

    for route in schema.custom_routes:
        extra: dict[str, Any] = {}
        if route.status_code is not None:
            extra["status_code"] = route.status_code
        router.add_api_route(
            route.path,
            route.handler,
            methods=[route.method],
            name=f"{schema.table}_{route.handler.__name__}",
            **extra,
        )

    # =========================================================================
    # Standard routes
    # =========================================================================

    async def list_records(
        request: Request,
        page: int = Query(1, ge=1),
        limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
        search: str | None = None,
        db: Database = Depends(get_db),
    ) -> list[dict[str, Any]]:
        filters = {
            key: value
            for key, value in request.query_params.items()
            if key not in RESERVED_PARAMS
        }
        return await CRUDService(schema, db).list_records(
            filters=filters, search=search, page=page, limit=limit
        )

    async def get_record(id: str, db: Database = Depends(get_db)) -> dict[str, Any]:
        return await CRUDService(schema, db).get(id)

    async def create_record(
        request: Request,
        body: dict[str, Any] = Body(...),
        db: Database = Depends(get_db),
    ) -> dict[str, Any]:
        return await CRUDService(schema, db).create(body, request)

    async def update_record(
        id: str,
        request: Request,
        body: dict[str, Any] = Body(...),
        db: Database = Depends(get_db),
    ) -> dict[str, Any]:
        return await CRUDService(schema, db).update(id, body, request)

    async def delete_record(
        id: str,
        request: Request,
        db: Database = Depends(get_db),
    ) -> dict[str, Any]:
        return await CRUDService(schema, db).delete(id, request)

    router.add_api_route("", list_records, methods=["GET"], name=f"list_{schema.table}")
    router.add_api_route("", create_record, methods=["POST"], status_code=201, name=f"create_{schema.table}")
    router.add_api_route("/{id}", get_record, methods=["GET"], name=f"get_{schema.table}")
    router.add_api_route("/{id}", update_record, methods=["PUT"], name=f"update_{schema.table}")
    if schema.allow_delete:
        router.add_api_route("/{id}", delete_record, methods=["DELETE"], name=f"delete_{schema.table}")

    logger.debug(
        f"CRUD router for {schema.table} at {router.prefix} "
        f"({len(schema.custom_routes)} custom route(s), delete={'on' if schema.allow_delete else 'off'})"
    )
    return router
