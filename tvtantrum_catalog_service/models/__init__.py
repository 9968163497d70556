"""SQLAlchemy models"""

from tvtantrum_catalog_service.models.base import Base
from tvtantrum_catalog_service.models.homepage_category import HomepageCategory
from tvtantrum_catalog_service.models.lookup import Platform, Theme
from tvtantrum_catalog_service.models.research_summary import ResearchSummary
from tvtantrum_catalog_service.models.tv_show import TvShow, TvShowTheme

__all__ = [
    "Base",
    "HomepageCategory",
    "Platform",
    "ResearchSummary",
    "Theme",
    "TvShow",
    "TvShowTheme",
]
