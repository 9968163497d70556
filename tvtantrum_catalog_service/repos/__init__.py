"""Repository classes"""

from tvtantrum_catalog_service.repos.category_repository import CategoryRepository
from tvtantrum_catalog_service.repos.lookup_repository import LookupRepository
from tvtantrum_catalog_service.repos.research_repository import ResearchRepository
from tvtantrum_catalog_service.repos.show_query_executor import ShowQueryExecutor
from tvtantrum_catalog_service.repos.show_repository import ShowRepository

__all__ = [
    "CategoryRepository",
    "LookupRepository",
    "ResearchRepository",
    "ShowQueryExecutor",
    "ShowRepository",
]
