"""Process-wide wiring of the cache, services and request gate."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.orm import Session

from tvtantrum_catalog_service.cache import CacheStore
from tvtantrum_catalog_service.config import (
    get_cache_check_period,
    get_cache_max_entries,
    get_log_level,
    get_max_concurrent_requests,
)
from tvtantrum_catalog_service.resilience import RequestGate, RetryPolicy
from tvtantrum_catalog_service.services import AdminService, CatalogService

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "tvtantrum_catalog_service"


@dataclass
class AppContext:
    """Objects shared by every request in this process."""
    cache: CacheStore
    catalog_service: CatalogService
    admin_service: AdminService
    request_gate: RequestGate

    def close(self) -> None:
        """Release process-level state at shutdown."""
        entries = len(self.cache)
        self.cache.clear()
        logger.info(f"Catalog context closed ({entries} cache entries dropped)")


def configure_logging() -> None:
    """Apply LOG_LEVEL to the package logger."""
    level = get_log_level()
    try:
        logging.getLogger(PACKAGE_LOGGER).setLevel(level)
    except ValueError:
        logger.warning(f"Unknown LOG_LEVEL {level!r}, keeping default")


def create_app_context(session_factory: Optional[Callable[[], Session]] = None) -> AppContext:
    """
    Build the cache, services and request gate from configuration.

    Args:
        session_factory: Callable returning a new Session (default: SessionLocal)

    Returns:
        AppContext sharing one cache between the read and write services
    """
    configure_logging()

    cache = CacheStore(
        max_entries=get_cache_max_entries(),
        check_period=get_cache_check_period(),
    )
    retry_policy = RetryPolicy.from_config()

    context = AppContext(
        cache=cache,
        catalog_service=CatalogService(cache, session_factory=session_factory, retry_policy=retry_policy),
        admin_service=AdminService(cache, session_factory=session_factory),
        request_gate=RequestGate(get_max_concurrent_requests()),
    )

    logger.info(
        f"✓ Catalog context ready (cache max {cache.max_entries} entries, "
        f"{context.request_gate.max_concurrent} concurrent requests)"
    )
    return context
