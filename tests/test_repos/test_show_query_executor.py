"""Tests for tvtantrum_catalog_service.repos.show_query_executor."""
from unittest.mock import Mock

import pytest
from sqlalchemy import exc as sa_exc

from tvtantrum_catalog_service.errors import StorageUnavailableError
from tvtantrum_catalog_service.filters import FilterSpec, IntRange, SortBy, ThemeMatchMode
from tvtantrum_catalog_service.repos.show_query_executor import (
    ShowQueryExecutor,
    normalize_show_row,
    with_sensory_defaults,
)
from tvtantrum_catalog_service.resilience import RetryPolicy


def names(shows):
    return [show['name'] for show in shows]


class TestNormalizeShowRow:
    """Tests for normalize_show_row function."""

    def test_raw_sql_row(self):
        """Test a row as returned by a raw query on SQLite or MySQL."""
        # Arrange
        row = {
            'id': '4',
            'name': 'Octonauts',
            'age_range': '3-6',
            'themes': '["Adventure", " Music ", ""]',
            'available_on': None,
            'is_featured': 1,
            'is_ongoing': 0,
            'stimulation_score': 3,
            'interactivity_level': 'medium',
            'music_tempo': 'Extreme',
            'dialogue_intensity': None,
            'search_rank': 2,
        }

        # Act
        record = normalize_show_row(row)

        # Assert
        assert record['id'] == 4
        assert record['ageRange'] == '3-6'
        assert record['themes'] == ['Adventure', 'Music']
        assert record['availableOn'] == []
        assert record['isFeatured'] is True
        assert record['isOngoing'] is False
        assert record['hasOmdbData'] is False
        assert record['interactivityLevel'] == 'Moderate'
        assert record['musicTempo'] == 'Extreme'
        assert record['dialogueIntensity'] is None
        assert 'search_rank' not in record

    def test_comma_separated_list_fallback(self):
        """Test that non-JSON list text is split on commas."""
        record = normalize_show_row({'themes': 'Music, Dance'})

        assert record['themes'] == ['Music', 'Dance']

    def test_camel_case_input_is_stable(self):
        """Test that normalizing a record again changes nothing."""
        # Arrange
        record = normalize_show_row({'id': 1, 'name': 'Bluey', 'themes': ['Family'], 'is_featured': True})

        # Act / Assert
        assert normalize_show_row(record) == record

    def test_with_sensory_defaults_fills_missing_levels(self):
        """Test that missing levels are presented as Moderate without touching the input."""
        # Arrange
        record = normalize_show_row({'id': 1, 'interactivity_level': 'High'})

        # Act
        presented = with_sensory_defaults(record)

        # Assert
        assert presented['interactivityLevel'] == 'High'
        assert presented['musicTempo'] == 'Moderate'
        assert record['musicTempo'] is None


class TestFetchShows:
    """Tests for fetch_shows and count_shows."""

    def test_no_filter_returns_all_by_name(self, query_executor, seeded_shows):
        """Test the default ordering."""
        shows = query_executor.fetch_shows(FilterSpec())

        assert names(shows) == [
            'Bluey', "Daniel Tiger's Neighborhood", 'Octonauts', 'Paw Patrol', 'Peppa Pig',
        ]

    def test_records_are_normalized(self, query_executor, seeded_shows):
        """Test that JSON columns and booleans come back as Python values."""
        # Act
        bluey = query_executor.fetch_shows(FilterSpec(search='Bluey'))[0]

        # Assert
        assert bluey['themes'] == ['Friendship', 'Family', 'Imagination']
        assert bluey['availableOn'] == ['Disney+']
        assert bluey['isOngoing'] is True
        assert bluey['isFeatured'] is False
        assert bluey['stimulationScore'] == 2
        assert bluey['soundEffectsLevel'] == 'Low-Moderate'

    def test_calm_friendship_shows(self, query_executor, seeded_shows):
        """Test score 1-2 with the Friendship theme returns the two calm shows alphabetically."""
        # Arrange
        spec = FilterSpec.from_dict({
            'stimulationScoreRange': {'min': 1, 'max': 2},
            'themes': ['Friendship'],
            'themeMatchMode': 'OR',
        })

        # Act
        shows = query_executor.fetch_shows(spec)

        # Assert
        assert names(shows) == ['Bluey', "Daniel Tiger's Neighborhood"]

    def test_and_themes_require_every_theme(self, query_executor, seeded_shows):
        """Test that every AND result carries all requested themes."""
        # Act
        shows = query_executor.fetch_shows(FilterSpec(themes=('Adventure', 'Music')))

        # Assert
        assert names(shows) == ['Octonauts', 'Peppa Pig']
        for show in shows:
            assert {'Adventure', 'Music'} <= set(show['themes'])

    def test_or_themes_require_any_theme(self, query_executor, seeded_shows):
        """Test that every OR result carries at least one requested theme."""
        # Act
        shows = query_executor.fetch_shows(
            FilterSpec(themes=('Emotions', 'Science'), theme_match_mode=ThemeMatchMode.OR)
        )

        # Assert
        assert names(shows) == ["Daniel Tiger's Neighborhood", 'Octonauts']
        for show in shows:
            assert {'Emotions', 'Science'} & set(show['themes'])

    def test_theme_match_is_exact(self, query_executor, seeded_shows):
        """Test that a theme does not match as a substring."""
        assert query_executor.fetch_shows(FilterSpec(themes=('Friend',))) == []

    def test_stimulation_range_inclusive_and_excludes_unscored(self, query_executor, seeded_shows, legacy_show):
        """Test both range bounds and that unscored shows never match a range."""
        # Act
        shows = query_executor.fetch_shows(FilterSpec(stimulation_score_range=IntRange(2, 3)))
        everything = query_executor.fetch_shows(FilterSpec(stimulation_score_range=IntRange(1, 5)))

        # Assert
        assert names(shows) == ['Bluey', 'Octonauts', 'Peppa Pig']
        assert 'Legacy Cartoon' not in names(everything)
        assert len(everything) == 5

    def test_age_group_exact(self, query_executor, seeded_shows):
        shows = query_executor.fetch_shows(FilterSpec(age_group='3-6'))

        assert names(shows) == ['Octonauts', 'Paw Patrol']

    def test_age_range_patterns(self, query_executor, seeded_shows):
        """Test that ageRange 2-2 matches stored ranges starting at 2."""
        shows = query_executor.fetch_shows(FilterSpec(age_range=IntRange(2, 2)))

        assert names(shows) == ["Daniel Tiger's Neighborhood", 'Peppa Pig']

    def test_search_filter(self, query_executor, seeded_shows):
        """Test the search condition over name, description and creator."""
        assert names(query_executor.fetch_shows(FilterSpec(search='PIG'))) == ['Peppa Pig']
        assert names(query_executor.fetch_shows(FilterSpec(search='chapman'))) == ['Paw Patrol']

    def test_search_wildcards_match_literally(self, query_executor, seeded_shows):
        """Test that % in a search term is not a wildcard."""
        assert query_executor.fetch_shows(FilterSpec(search='%')) == []

    def test_level_filter_matches_legacy_spelling(self, query_executor, seeded_shows, legacy_show):
        """Test that Moderate matches rows stored as Medium."""
        # Act
        shows = query_executor.fetch_shows(FilterSpec(interactivity_level='Moderate'))

        # Assert
        assert names(shows) == ['Bluey', 'Legacy Cartoon']
        assert shows[1]['interactivityLevel'] == 'Moderate'

    def test_sort_by_name_ignores_case(self, query_executor, show_repository, seeded_shows, sample_show_payload):
        """Test that lowercase names sort among capitalized ones."""
        # Arrange
        show_repository.create_show({**sample_show_payload, 'name': 'arthur'})

        # Act
        shows = query_executor.fetch_shows(FilterSpec(sort_by=SortBy.NAME, limit=2))

        # Assert
        assert names(shows) == ['arthur', 'Bluey']

    def test_sort_by_stimulation_score_nulls_last(self, query_executor, seeded_shows, legacy_show):
        """Test ascending score order with unscored shows at the end."""
        shows = query_executor.fetch_shows(FilterSpec(sort_by=SortBy.STIMULATION_SCORE))

        assert names(shows) == [
            "Daniel Tiger's Neighborhood", 'Bluey', 'Peppa Pig', 'Octonauts', 'Paw Patrol', 'Legacy Cartoon',
        ]

    def test_sort_by_interactivity_level(self, query_executor, seeded_shows):
        """Test most interactive first, unrated last."""
        shows = query_executor.fetch_shows(FilterSpec(sort_by=SortBy.INTERACTIVITY_LEVEL))

        assert names(shows) == [
            "Daniel Tiger's Neighborhood", 'Bluey', 'Paw Patrol', 'Octonauts', 'Peppa Pig',
        ]

    def test_sort_by_release_year(self, query_executor, seeded_shows):
        """Test newest first."""
        shows = query_executor.fetch_shows(FilterSpec(sort_by=SortBy.RELEASE_YEAR))

        assert names(shows) == [
            'Bluey', 'Paw Patrol', "Daniel Tiger's Neighborhood", 'Octonauts', 'Peppa Pig',
        ]

    def test_limit_and_offset(self, query_executor, seeded_shows):
        """Test pagination over the name ordering."""
        shows = query_executor.fetch_shows(FilterSpec(limit=2, offset=1))

        assert names(shows) == ["Daniel Tiger's Neighborhood", 'Octonauts']

    def test_count_ignores_pagination(self, query_executor, seeded_shows):
        """Test that counts cover every match."""
        spec = FilterSpec(themes=('Friendship',), limit=1, offset=1, sort_by=SortBy.POPULAR)

        assert query_executor.count_shows(spec) == 3

    def test_count_without_filter(self, query_executor, seeded_shows):
        assert query_executor.count_shows(FilterSpec()) == 5


class TestFetchSingleShows:
    """Tests for fetch_show and fetch_featured."""

    def test_fetch_show(self, query_executor, seeded_shows):
        """Test fetching one show by id."""
        show_id = seeded_shows['Octonauts']['id']

        show = query_executor.fetch_show(show_id)

        assert show == seeded_shows['Octonauts']

    def test_fetch_missing_show(self, query_executor, seeded_shows):
        assert query_executor.fetch_show(999999) is None

    def test_no_featured_show(self, query_executor, seeded_shows):
        assert query_executor.fetch_featured() is None

    def test_featured_show(self, query_executor, show_repository, seeded_shows):
        """Test that the featured show is returned."""
        # Arrange
        show_repository.set_featured(seeded_shows['Paw Patrol']['id'])

        # Act
        featured = query_executor.fetch_featured()

        # Assert
        assert featured['name'] == 'Paw Patrol'
        assert featured['isFeatured'] is True


class TestFetchPopular:
    """Tests for fetch_popular."""

    def test_calmest_first(self, query_executor, seeded_shows, legacy_show):
        """Test ordering by score with unscored shows last."""
        shows = query_executor.fetch_popular(limit=10)

        assert names(shows) == [
            "Daniel Tiger's Neighborhood", 'Bluey', 'Peppa Pig', 'Octonauts', 'Paw Patrol', 'Legacy Cartoon',
        ]

    def test_featured_first(self, query_executor, show_repository, seeded_shows):
        """Test that the featured show leads regardless of score."""
        # Arrange
        show_repository.set_featured(seeded_shows['Paw Patrol']['id'])

        # Act
        shows = query_executor.fetch_popular(limit=2)

        # Assert
        assert names(shows) == ['Paw Patrol', "Daniel Tiger's Neighborhood"]


class TestSearchRanked:
    """Tests for search_ranked."""

    def test_exact_name_first(self, query_executor, seeded_shows):
        assert names(query_executor.search_ranked('bluey')) == ['Bluey']

    def test_prefix_before_substring(self, query_executor, seeded_shows):
        """Test that a name prefix outranks a name substring."""
        assert names(query_executor.search_ranked('pa')) == ['Paw Patrol', 'Peppa Pig']

    def test_description_matches_ranked_by_name(self, query_executor, seeded_shows):
        """Test description-only matches, tied and ordered by name."""
        assert names(query_executor.search_ranked('family')) == ['Bluey', 'Peppa Pig']

    def test_limit(self, query_executor, seeded_shows):
        assert len(query_executor.search_ranked('a', limit=2)) == 2

    def test_blank_term(self, query_executor, seeded_shows):
        assert query_executor.search_ranked('   ') == []


class TestFetchSimilar:
    """Tests for fetch_similar."""

    def test_similar_ranked_and_excludes_source(self, query_executor, seeded_shows):
        """Test ranking: same score beats a shared theme; unrelated shows are left out."""
        # Act
        shows = query_executor.fetch_similar(seeded_shows['Bluey']['id'])

        # Assert
        assert names(shows) == ['Peppa Pig', "Daniel Tiger's Neighborhood", 'Paw Patrol']

    def test_same_age_range_ranks_highest(self, query_executor, seeded_shows):
        """Test that a matching age range outranks everything else."""
        shows = query_executor.fetch_similar(seeded_shows['Octonauts']['id'], limit=2)

        assert names(shows) == ['Paw Patrol', 'Peppa Pig']

    def test_missing_source(self, query_executor, seeded_shows):
        assert query_executor.fetch_similar(999999) is None


class TestFetchUniqueThemes:
    """Tests for fetch_unique_themes."""

    def test_unique_themes_sorted(self, query_executor, seeded_shows):
        assert query_executor.fetch_unique_themes() == [
            'Adventure', 'Emotions', 'Family', 'Friendship', 'Imagination', 'Music', 'Science', 'Teamwork',
        ]

    def test_empty_catalog(self, query_executor):
        assert query_executor.fetch_unique_themes() == []


class TestExecutorRetries:
    """Tests for retry behavior on storage errors."""

    def test_storage_unavailable_after_retries(self):
        """Test that a database that stays down surfaces as StorageUnavailableError."""
        # Arrange
        session = Mock()
        session.execute.side_effect = sa_exc.OperationalError('SELECT', {}, Exception('gone away'))
        factory = Mock(return_value=session)
        executor = ShowQueryExecutor(factory, RetryPolicy(max_attempts=2, base_delay=0, max_delay=0))

        # Act / Assert
        with pytest.raises(StorageUnavailableError):
            executor.fetch_shows(FilterSpec())

        assert factory.call_count == 2
        assert session.close.call_count == 2
