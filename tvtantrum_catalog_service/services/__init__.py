"""Service classes"""

from .admin_service import AdminService
from .catalog_service import CatalogService

__all__ = ["AdminService", "CatalogService"]
