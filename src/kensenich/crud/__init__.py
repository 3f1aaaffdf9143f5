"""
KensenichManager - Generic CRUD.

One list/get/create/update/delete algorithm, configured per table by a
TableSchema and extended by CRUDHooks and CustomRoutes.
"""

from kensenich.crud.hooks import CRUDHooks, RequiredFieldsHooks
from kensenich.crud.router import create_crud_router
from kensenich.crud.schema import CustomRoute, TableSchema
from kensenich.crud.service import CRUDService

__all__ = [
    "CRUDHooks",
    "CRUDService",
    "CustomRoute",
    "RequiredFieldsHooks",
    "TableSchema",
    "create_crud_router",
]
