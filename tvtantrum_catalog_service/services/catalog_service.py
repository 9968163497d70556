"""Cache-aware read service for the public catalog."""

import logging
from typing import Any, Callable, Mapping, Optional

from sqlalchemy.orm import Session

from tvtantrum_catalog_service.cache import CacheKeys, CacheStore, CacheTTL, make_key
from tvtantrum_catalog_service.errors import StorageUnavailableError, ValidationError
from tvtantrum_catalog_service.filters import FilterSpec, filter_config_to_spec
from tvtantrum_catalog_service.models.database import SessionLocal
from tvtantrum_catalog_service.repos import CategoryRepository, LookupRepository, ResearchRepository, ShowQueryExecutor
from tvtantrum_catalog_service.repos.category_repository import category_to_dict
from tvtantrum_catalog_service.repos.research_repository import research_to_dict
from tvtantrum_catalog_service.repos.show_query_executor import (
    DEFAULT_POPULAR_LIMIT,
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_SIMILAR_LIMIT,
)
from tvtantrum_catalog_service.resilience import RetryPolicy, run_read

logger = logging.getLogger(__name__)

MAX_RESULT_LIMIT = 100


def _check_limit(limit: Any, field: str = "limit") -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= MAX_RESULT_LIMIT:
        raise ValidationError(f"{field} must be an integer between 1 and {MAX_RESULT_LIMIT}", field=field)
    return limit


class CatalogService:
    """
    Read side of the catalog with an in-memory cache in front.

    Results are cached under keys derived from the request. Returned values
    are shared with the cache and must be treated as read-only. When the
    database stays unreachable after retries, an expired cache entry for the
    same key is served if one is still held.
    """

    def __init__(
            self,
            cache: CacheStore,
            executor: Optional[ShowQueryExecutor] = None,
            session_factory: Optional[Callable[[], Session]] = None,
            retry_policy: Optional[RetryPolicy] = None
    ):
        """
        Initialize the service.

        Args:
            cache: Shared cache store
            executor: Show query executor (default: built from session_factory)
            session_factory: Callable returning a new Session (default: SessionLocal)
            retry_policy: Retry policy for reads (default: from config)
        """
        self.cache = cache
        self.session_factory = session_factory or SessionLocal
        self.retry_policy = retry_policy or RetryPolicy.from_config()
        self.executor = executor or ShowQueryExecutor(self.session_factory, self.retry_policy)

    def _cached(self, key: str, ttl: int, load: Callable[[], Any]) -> Any:
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        # A write that lands during load() must not be papered over
        generation = self.cache.generation
        try:
            value = load()
        except StorageUnavailableError:
            stale = self.cache.get_stale(key)
            if stale is None:
                raise
            logger.warning(f"Storage unavailable, serving stale cache entry '{key}'")
            return stale

        # Not-found results are not cached so a later create shows up at once
        if value is not None:
            self.cache.set(key, value, ttl, generation=generation)
        return value

    def _read(self, description: str, work: Callable[[Session], Any]) -> Any:
        return run_read(self.session_factory, work, self.retry_policy, description)

    # ===== SHOWS =====

    def list_shows(self, filters: FilterSpec | Mapping[str, Any] | None = None) -> list[dict]:
        """
        Shows matching a filter, served from cache when possible.

        Args:
            filters: FilterSpec, or a camelCase mapping validated into one

        Returns:
            List of show records

        Raises:
            ValidationError: If the mapping is not a valid filter
        """
        spec = filters if isinstance(filters, FilterSpec) else FilterSpec.from_dict(filters)
        key = CacheKeys.SHOW_LIST + spec.cache_key()
        ttl = CacheTTL.SEARCH if spec.search else CacheTTL.LIST
        return self._cached(key, ttl, lambda: self.executor.fetch_shows(spec))

    def get_show_by_id(self, show_id: int) -> dict | None:
        """A single show record, or None."""
        key = make_key(CacheKeys.SHOW_BY_ID, show_id)
        return self._cached(key, CacheTTL.DETAIL, lambda: self.executor.fetch_show(show_id))

    def get_featured_show(self) -> dict | None:
        """The featured show, or None when no show is featured."""
        return self._cached(CacheKeys.FEATURED_SHOW, CacheTTL.LIST, self.executor.fetch_featured)

    def get_popular_shows(self, limit: int = DEFAULT_POPULAR_LIMIT) -> list[dict]:
        """Featured and calmest shows first."""
        limit = _check_limit(limit)
        key = make_key(CacheKeys.POPULAR_SHOWS, limit)
        return self._cached(key, CacheTTL.LIST, lambda: self.executor.fetch_popular(limit))

    def search_shows(self, term: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[dict]:
        """Ranked free-text search; blank terms return an empty list."""
        limit = _check_limit(limit)
        term = (term or "").strip()
        if not term:
            return []
        key = make_key(CacheKeys.SEARCH_RESULTS, term.lower(), limit)
        return self._cached(key, CacheTTL.SEARCH, lambda: self.executor.search_ranked(term, limit))

    def get_similar_shows(self, show_id: int, limit: int = DEFAULT_SIMILAR_LIMIT) -> list[dict] | None:
        """Shows similar to show_id, or None when that show does not exist."""
        limit = _check_limit(limit)
        key = make_key(CacheKeys.SIMILAR_SHOWS, show_id, limit)
        return self._cached(key, CacheTTL.LIST, lambda: self.executor.fetch_similar(show_id, limit))

    # ===== REFERENCE DATA =====

    def get_themes(self) -> list[dict]:
        """Theme vocabulary."""
        return self._cached(
            CacheKeys.THEMES,
            CacheTTL.REFERENCE,
            lambda: self._read("fetch themes", lambda db: LookupRepository(db).get_themes()),
        )

    def get_platforms(self) -> list[dict]:
        """Platform vocabulary."""
        return self._cached(
            CacheKeys.PLATFORMS,
            CacheTTL.REFERENCE,
            lambda: self._read("fetch platforms", lambda db: LookupRepository(db).get_platforms()),
        )

    def get_unique_themes(self) -> list[str]:
        """Distinct themes actually used by shows."""
        return self._cached(CacheKeys.UNIQUE_THEMES, CacheTTL.REFERENCE, self.executor.fetch_unique_themes)

    # ===== HOMEPAGE CATEGORIES =====

    def get_homepage_categories(self) -> list[dict]:
        """Active categories in display order, each with its showCount."""
        return self._cached(
            CacheKeys.ACTIVE_CATEGORIES, CacheTTL.LIST, lambda: self._load_categories(active_only=True)
        )

    def get_all_homepage_categories(self) -> list[dict]:
        """Every category (admin view), each with its showCount."""
        return self._cached(
            CacheKeys.ALL_CATEGORIES, CacheTTL.LIST, lambda: self._load_categories(active_only=False)
        )

    def resolve_category(self, category_id: int) -> list[dict] | None:
        """
        Shows for a homepage category.

        Args:
            category_id: Category ID

        Returns:
            List of show records, or None when the category does not exist
        """
        key = make_key(CacheKeys.CATEGORY_SHOWS, category_id)
        return self._cached(key, CacheTTL.LIST, lambda: self._load_category_shows(category_id))

    def _load_categories(self, active_only: bool) -> list[dict]:
        categories = self._read(
            "fetch homepage categories",
            lambda db: [
                category_to_dict(category)
                for category in CategoryRepository(db).get_categories(active_only=active_only)
            ],
        )
        for category in categories:
            spec = filter_config_to_spec(category["filterConfig"])
            category["showCount"] = self.executor.count_shows(spec)
            logger.debug(f"Category '{category['name']}' ({category['id']}) has {category['showCount']} shows")
        return categories

    def _load_category_shows(self, category_id: int) -> list[dict] | None:
        config = self._read(
            "fetch homepage category",
            lambda db: self._category_config(db, category_id),
        )
        if config is None:
            return None
        return self.executor.fetch_shows(filter_config_to_spec(config))

    @staticmethod
    def _category_config(db: Session, category_id: int) -> dict | None:
        category = CategoryRepository(db).get_category(category_id)
        return category_to_dict(category)["filterConfig"] if category else None

    # ===== RESEARCH =====

    def get_research_summaries(self, category: str | None = None, limit: int | None = None) -> list[dict]:
        """Research summaries, newest first, optionally by category."""
        if limit is not None:
            limit = _check_limit(limit)
        key = make_key(CacheKeys.RESEARCH, category or "*", limit or "*")
        return self._cached(
            key,
            CacheTTL.LIST,
            lambda: self._read(
                "fetch research summaries",
                lambda db: [
                    research_to_dict(research)
                    for research in ResearchRepository(db).get_summaries(category=category, limit=limit)
                ],
            ),
        )

    def get_research_summary(self, research_id: int) -> dict | None:
        """A single research summary, or None."""
        key = make_key(CacheKeys.RESEARCH_BY_ID, research_id)

        def load(db: Session):
            research = ResearchRepository(db).get_summary(research_id)
            return research_to_dict(research) if research else None

        return self._cached(key, CacheTTL.DETAIL, lambda: self._read("fetch research summary", load))

    # ===== MONITORING =====

    def get_cache_stats(self) -> dict:
        """Cache counters."""
        return self.cache.stats()
