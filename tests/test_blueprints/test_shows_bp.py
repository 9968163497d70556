"""Tests for the public show endpoints."""
import json
from unittest.mock import Mock, patch

import azure.functions as func

from tvtantrum_catalog_service.blueprints.shows_bp import (
    get_featured_show,
    get_platforms,
    get_popular_shows,
    get_similar_tv_shows,
    get_themes,
    get_tv_show,
    get_unique_themes,
    list_tv_shows,
    search_tv_shows,
)
from tvtantrum_catalog_service.errors import StorageUnavailableError
from tvtantrum_catalog_service.filters import FilterSpec, IntRange, ThemeMatchMode

SERVICE = 'tvtantrum_catalog_service.blueprints.shows_bp.catalog_service'


def make_request(route_params=None, params=None):
    mock_req = Mock(spec=func.HttpRequest)
    mock_req.route_params = route_params or {}
    mock_req.params = params or {}
    return mock_req


class TestListTvShows:
    """Tests for list_tv_shows function."""

    @patch(SERVICE)
    def test_list_shows_with_filters(self, mock_service):
        """Test that query parameters become a FilterSpec."""
        # Arrange
        mock_service.list_shows.return_value = [{'id': 1, 'name': 'Bluey', 'interactivityLevel': 'High'}]
        mock_req = make_request(params={
            'themes': 'Friendship',
            'themeMatchMode': 'OR',
            'stimulationScoreRange': '{"min": 1, "max": 2}',
        })

        # Act
        response = list_tv_shows(mock_req)

        # Assert
        assert response.status_code == 200
        assert response.mimetype == 'application/json'
        mock_service.list_shows.assert_called_once_with(FilterSpec(
            stimulation_score_range=IntRange(1, 2),
            themes=('Friendship',),
            theme_match_mode=ThemeMatchMode.OR,
        ))
        body = json.loads(response.get_body())
        assert body[0]['name'] == 'Bluey'
        assert body[0]['interactivityLevel'] == 'High'
        assert body[0]['musicTempo'] == 'Moderate'

    @patch(SERVICE)
    def test_invalid_filter_is_400(self, mock_service):
        """Test that a bad filter is reported with its field."""
        # Act
        response = list_tv_shows(make_request(params={'sortBy': 'random'}))

        # Assert
        assert response.status_code == 400
        assert json.loads(response.get_body())['field'] == 'sortBy'
        mock_service.list_shows.assert_not_called()

    @patch(SERVICE)
    def test_storage_down_is_503(self, mock_service):
        mock_service.list_shows.side_effect = StorageUnavailableError('down')

        response = list_tv_shows(make_request())

        assert response.status_code == 503


class TestGetTvShow:
    """Tests for get_tv_show function."""

    @patch(SERVICE)
    def test_get_show(self, mock_service):
        # Arrange
        mock_service.get_show_by_id.return_value = {'id': 7, 'name': 'Octonauts'}

        # Act
        response = get_tv_show(make_request(route_params={'show_id': '7'}))

        # Assert
        assert response.status_code == 200
        assert json.loads(response.get_body())['name'] == 'Octonauts'
        mock_service.get_show_by_id.assert_called_once_with(7)

    @patch(SERVICE)
    def test_missing_show_is_404(self, mock_service):
        mock_service.get_show_by_id.return_value = None

        response = get_tv_show(make_request(route_params={'show_id': '999999'}))

        assert response.status_code == 404
        assert json.loads(response.get_body()) == {'error': 'Show not found'}

    @patch(SERVICE)
    def test_non_numeric_id_is_400(self, mock_service):
        response = get_tv_show(make_request(route_params={'show_id': 'bluey'}))

        assert response.status_code == 400
        mock_service.get_show_by_id.assert_not_called()


class TestDerivedShowLists:
    """Tests for similar, featured, popular and search endpoints."""

    @patch(SERVICE)
    def test_similar_default_limit(self, mock_service):
        mock_service.get_similar_shows.return_value = []

        response = get_similar_tv_shows(make_request(route_params={'show_id': '3'}))

        assert response.status_code == 200
        mock_service.get_similar_shows.assert_called_once_with(3, 6)

    @patch(SERVICE)
    def test_similar_missing_show_is_404(self, mock_service):
        mock_service.get_similar_shows.return_value = None

        response = get_similar_tv_shows(make_request(route_params={'show_id': '3'}, params={'limit': '2'}))

        assert response.status_code == 404
        mock_service.get_similar_shows.assert_called_once_with(3, 2)

    @patch(SERVICE)
    def test_featured(self, mock_service):
        mock_service.get_featured_show.return_value = {'id': 2, 'name': 'Peppa Pig'}

        response = get_featured_show(make_request())

        assert json.loads(response.get_body())['name'] == 'Peppa Pig'

    @patch(SERVICE)
    def test_no_featured_is_404(self, mock_service):
        mock_service.get_featured_show.return_value = None

        response = get_featured_show(make_request())

        assert response.status_code == 404

    @patch(SERVICE)
    def test_popular_limit(self, mock_service):
        mock_service.get_popular_shows.return_value = [{'id': 1}, {'id': 2}]

        response = get_popular_shows(make_request(params={'limit': '2'}))

        assert len(json.loads(response.get_body())) == 2
        mock_service.get_popular_shows.assert_called_once_with(2)

    @patch(SERVICE)
    def test_search(self, mock_service):
        mock_service.search_shows.return_value = [{'id': 1, 'name': 'Paw Patrol'}]

        response = search_tv_shows(make_request(params={'q': 'paw'}))

        assert response.status_code == 200
        mock_service.search_shows.assert_called_once_with('paw', 20)

    @patch(SERVICE)
    def test_search_bad_limit_is_400(self, mock_service):
        response = search_tv_shows(make_request(params={'q': 'paw', 'limit': 'lots'}))

        assert response.status_code == 400


class TestReferenceEndpoints:
    """Tests for themes and platforms endpoints."""

    @patch(SERVICE)
    def test_themes(self, mock_service):
        mock_service.get_themes.return_value = [{'id': 1, 'name': 'Music'}]

        response = get_themes(make_request())

        assert json.loads(response.get_body()) == [{'id': 1, 'name': 'Music'}]

    @patch(SERVICE)
    def test_unique_themes(self, mock_service):
        mock_service.get_unique_themes.return_value = ['Adventure', 'Music']

        response = get_unique_themes(make_request())

        assert json.loads(response.get_body()) == ['Adventure', 'Music']

    @patch(SERVICE)
    def test_platforms_unexpected_error_is_500(self, mock_service):
        mock_service.get_platforms.side_effect = RuntimeError('boom')

        response = get_platforms(make_request())

        assert response.status_code == 500
