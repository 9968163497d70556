"""Tests for tvtantrum_catalog_service.app_context."""
import logging

from tvtantrum_catalog_service.app_context import AppContext, configure_logging, create_app_context


class TestCreateAppContext:
    """Tests for create_app_context function."""

    def test_services_share_one_cache(self, session_factory, monkeypatch):
        """Test that admin writes invalidate the cache the read side uses."""
        # Arrange
        monkeypatch.setenv('CACHE_MAX_ENTRIES', '123')
        monkeypatch.setenv('MAX_CONCURRENT_REQUESTS', '7')

        # Act
        context = create_app_context(session_factory)

        # Assert
        assert isinstance(context, AppContext)
        assert context.catalog_service.cache is context.cache
        assert context.admin_service.cache is context.cache
        assert context.cache.max_entries == 123
        assert context.request_gate.max_concurrent == 7
        assert context.catalog_service.session_factory is session_factory

    def test_close_clears_cache(self, session_factory):
        # Arrange
        context = create_app_context(session_factory)
        context.cache.set('lists:featured', {'id': 1})

        # Act
        context.close()

        # Assert
        assert len(context.cache) == 0


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_sets_package_level(self, monkeypatch):
        # Arrange
        monkeypatch.setenv('LOG_LEVEL', 'warning')
        package_logger = logging.getLogger('tvtantrum_catalog_service')
        original = package_logger.level

        try:
            # Act
            configure_logging()

            # Assert
            assert package_logger.level == logging.WARNING
        finally:
            package_logger.setLevel(original)

    def test_unknown_level_ignored(self, monkeypatch):
        """Test that a bad LOG_LEVEL does not break startup."""
        # Arrange
        monkeypatch.setenv('LOG_LEVEL', 'chatty')
        package_logger = logging.getLogger('tvtantrum_catalog_service')
        original = package_logger.level

        # Act
        configure_logging()

        # Assert
        assert package_logger.level == original
