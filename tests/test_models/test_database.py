"""Unit tests for tvtantrum_catalog_service.models.database."""
from unittest.mock import patch

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

import tvtantrum_catalog_service.models.database as db_module


class TestEngineOptions:
    """Tests for engine_options function."""

    def test_sqlite_skips_pool_sizing(self):
        """Test that SQLite URLs get no QueuePool arguments."""
        # Act
        options = db_module.engine_options('sqlite:///:memory:')

        # Assert
        assert options['pool_pre_ping'] is True
        assert 'pool_size' not in options
        assert 'pool_timeout' not in options

    @patch('tvtantrum_catalog_service.models.database.get_db_pool_timeout', return_value=7.5)
    @patch('tvtantrum_catalog_service.models.database.get_db_max_overflow', return_value=0)
    @patch('tvtantrum_catalog_service.models.database.get_db_pool_size', return_value=12)
    def test_server_database_gets_bounded_pool(self, mock_size, mock_overflow, mock_timeout):
        """Test that MySQL URLs get the configured pool bounds."""
        # Act
        options = db_module.engine_options('mysql+pymysql://user:pw@db/catalog')

        # Assert
        assert options['pool_size'] == 12
        assert options['max_overflow'] == 0
        assert options['pool_timeout'] == 7.5
        assert options['pool_recycle'] == 3600


class TestDatabaseModule:
    """Tests for database module objects."""

    def test_engine_is_created(self):
        """Test that SQLAlchemy engine is created."""
        assert isinstance(db_module.engine, Engine)

    def test_session_local_creates_sessions(self):
        """Test that SessionLocal produces sessions bound to the engine."""
        # Act
        session = db_module.SessionLocal()

        try:
            # Assert
            assert isinstance(session, Session)
            assert session.bind is db_module.engine
        finally:
            session.close()

    def test_get_db_yields_and_closes_session(self):
        """Test the get_db generator."""
        # Arrange
        generator = db_module.get_db()

        # Act
        session = next(generator)

        # Assert
        assert isinstance(session, Session)
        with patch.object(session, 'close') as mock_close:
            generator.close()
            mock_close.assert_called_once()
