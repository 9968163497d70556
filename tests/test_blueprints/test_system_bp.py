"""Tests for the health and monitoring endpoints."""
import json
from unittest.mock import Mock, patch

import azure.functions as func

from tvtantrum_catalog_service.blueprints.system_bp import get_cache_stats, health_check


class TestHealthCheck:
    """Tests for health_check function."""

    def test_health_check_returns_healthy_status(self):
        """Test health check endpoint."""
        # Arrange
        mock_req = Mock(spec=func.HttpRequest)

        # Act
        response = health_check(mock_req)

        # Assert
        assert response.status_code == 200
        body = json.loads(response.get_body())
        assert body['status'] == 'healthy'
        assert body['service'] == 'tvtantrum-catalog-service'


class TestGetCacheStats:
    """Tests for get_cache_stats function."""

    @patch('tvtantrum_catalog_service.blueprints.system_bp.catalog_service')
    def test_cache_stats_include_active_requests(self, mock_service):
        """Test that the stats include the request being served."""
        # Arrange
        mock_service.get_cache_stats.return_value = {'keys': 3, 'hits': 10, 'misses': 2}

        # Act
        response = get_cache_stats(Mock(spec=func.HttpRequest))

        # Assert
        body = json.loads(response.get_body())
        assert body['keys'] == 3
        assert body['activeRequests'] == 1
