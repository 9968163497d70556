"""Admin writes with cache invalidation."""

import logging
from typing import Any, Callable, Mapping, Optional

from sqlalchemy.orm import Session

from tvtantrum_catalog_service.cache import CacheKeys, CacheStore, make_key
from tvtantrum_catalog_service.models.database import SessionLocal
from tvtantrum_catalog_service.repos import CategoryRepository, ResearchRepository, ShowRepository
from tvtantrum_catalog_service.repos.category_repository import category_to_dict
from tvtantrum_catalog_service.repos.research_repository import research_to_dict
from tvtantrum_catalog_service.repos.show_query_executor import normalize_show_row
from tvtantrum_catalog_service.resilience import guarded_write

logger = logging.getLogger(__name__)


class AdminService:
    """
    Catalog writes for administrators.

    Every successful write drops the affected cache entries before
    returning, so the next read goes to the database. Writes are not
    retried.
    """

    def __init__(self, cache: CacheStore, session_factory: Optional[Callable[[], Session]] = None):
        self.cache = cache
        self.session_factory = session_factory or SessionLocal

    def _write(self, description: str, work: Callable[[Session], Any]) -> Any:
        db = self.session_factory()
        try:
            with guarded_write(db, description):
                return work(db)
        finally:
            db.close()

    # ===== SHOWS =====

    def create_show(self, payload: Mapping[str, Any]) -> dict:
        """
        Create a show.

        Args:
            payload: camelCase show fields; name, description, ageRange,
                episodeLength and stimulationScore are required

        Returns:
            The stored show record

        Raises:
            ValidationError: If the payload is invalid
        """
        record = self._write(
            "create show",
            lambda db: normalize_show_row(ShowRepository(db).create_show(payload).to_row()),
        )
        self._invalidate_show(record["id"], featured=record["isFeatured"])
        return record

    def update_show(self, show_id: int, payload: Mapping[str, Any]) -> dict | None:
        """
        Apply a partial update to a show.

        Returns:
            The updated show record, or None if not found
        """
        def work(db: Session):
            show = ShowRepository(db).update_show(show_id, payload)
            return normalize_show_row(show.to_row()) if show else None

        record = self._write("update show", work)
        if record is not None:
            self._invalidate_show(show_id, featured=payload.get("isFeatured") is True)
        return record

    def delete_show(self, show_id: int) -> bool:
        """Delete a show. Returns False if it did not exist."""
        deleted = self._write("delete show", lambda db: ShowRepository(db).delete_show(show_id))
        if deleted:
            self._invalidate_show(show_id)
        return deleted

    def set_featured_show(self, show_id: int) -> dict | None:
        """
        Make show_id the only featured show.

        Returns:
            The featured show record, or None if not found
        """
        def work(db: Session):
            show = ShowRepository(db).set_featured(show_id)
            return normalize_show_row(show.to_row()) if show else None

        record = self._write("set featured show", work)
        if record is not None:
            self._invalidate_show(show_id, featured=True)
        return record

    def _invalidate_show(self, show_id: int, featured: bool = False) -> None:
        if featured:
            # The previously featured show changed too
            self.cache.invalidate(CacheKeys.SHOW_BY_ID, pattern=True)
        else:
            self.cache.invalidate(make_key(CacheKeys.SHOW_BY_ID, show_id))
        removed = self.cache.invalidate(CacheKeys.LISTS, pattern=True)
        removed += self.cache.invalidate(CacheKeys.REFERENCE, pattern=True)
        logger.info(f"Invalidated show {show_id} and {removed} list/reference cache entries")

    # ===== HOMEPAGE CATEGORIES =====

    def create_category(self, payload: Mapping[str, Any]) -> dict:
        """Create a homepage category."""
        category = self._write(
            "create category",
            lambda db: category_to_dict(CategoryRepository(db).create_category(payload)),
        )
        self._invalidate_categories()
        return category

    def update_category(self, category_id: int, payload: Mapping[str, Any]) -> dict | None:
        """Apply a partial update to a category; None if not found."""
        def work(db: Session):
            category = CategoryRepository(db).update_category(category_id, payload)
            return category_to_dict(category) if category else None

        category = self._write("update category", work)
        if category is not None:
            self._invalidate_categories()
        return category

    def delete_category(self, category_id: int) -> bool:
        """Delete a category. Returns False if it did not exist."""
        deleted = self._write("delete category", lambda db: CategoryRepository(db).delete_category(category_id))
        if deleted:
            self._invalidate_categories()
        return deleted

    def reorder_categories(self, category_ids: list[int]) -> list[dict]:
        """Set display order from a list of category IDs."""
        categories = self._write(
            "reorder categories",
            lambda db: [category_to_dict(c) for c in CategoryRepository(db).reorder_categories(category_ids)],
        )
        self._invalidate_categories()
        return categories

    def _invalidate_categories(self) -> None:
        removed = self.cache.invalidate(CacheKeys.CATEGORIES, pattern=True)
        logger.info(f"Invalidated {removed} category cache entries")

    # ===== RESEARCH =====

    def create_research(self, payload: Mapping[str, Any]) -> dict:
        """Create a research summary."""
        research = self._write(
            "create research summary",
            lambda db: research_to_dict(ResearchRepository(db).create_summary(payload)),
        )
        self._invalidate_research(research["id"])
        return research

    def update_research(self, research_id: int, payload: Mapping[str, Any]) -> dict | None:
        """Apply a partial update to a research summary; None if not found."""
        def work(db: Session):
            research = ResearchRepository(db).update_summary(research_id, payload)
            return research_to_dict(research) if research else None

        research = self._write("update research summary", work)
        if research is not None:
            self._invalidate_research(research_id)
        return research

    def delete_research(self, research_id: int) -> bool:
        """Delete a research summary. Returns False if it did not exist."""
        deleted = self._write(
            "delete research summary", lambda db: ResearchRepository(db).delete_summary(research_id)
        )
        if deleted:
            self._invalidate_research(research_id)
        return deleted

    def _invalidate_research(self, research_id: int) -> None:
        self.cache.invalidate(make_key(CacheKeys.RESEARCH_BY_ID, research_id))
        self.cache.invalidate(CacheKeys.RESEARCH, pattern=True)
