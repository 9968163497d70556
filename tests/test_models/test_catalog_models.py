"""Unit tests for category, research and lookup models."""
from tvtantrum_catalog_service.models import HomepageCategory, Platform, ResearchSummary, Theme


class TestHomepageCategoryModel:
    """Tests for HomepageCategory model."""

    def test_create_category_sets_timestamps(self, test_db_session):
        """Test that created_at and updated_at are filled in."""
        # Arrange
        category = HomepageCategory(
            name='Calm Picks',
            description='Low stimulation',
            display_order=1,
            filter_config={'logic': 'AND', 'rules': []},
        )

        # Act
        test_db_session.add(category)
        test_db_session.commit()

        # Assert
        assert category.id is not None
        assert category.is_active is True
        assert category.created_at is not None
        assert category.updated_at is not None
        assert category.filter_config == {'logic': 'AND', 'rules': []}

    def test_repr(self):
        """Test string representation."""
        category = HomepageCategory(id=2, name='Music', display_order=4)

        assert repr(category) == "<HomepageCategory(id=2, name='Music', order=4)>"


class TestResearchSummaryModel:
    """Tests for ResearchSummary model."""

    def test_create_research_summary(self, test_db_session):
        """Test storing a research summary."""
        # Arrange
        research = ResearchSummary(title='Pacing', category='Attention', original_url='https://example.org')

        # Act
        test_db_session.add(research)
        test_db_session.commit()

        # Assert
        stored = test_db_session.get(ResearchSummary, research.id)
        assert stored.original_url == 'https://example.org'
        assert stored.created_at is not None


class TestLookupModels:
    """Tests for Theme and Platform models."""

    def test_create_theme_and_platform(self, test_db_session):
        """Test storing vocabulary rows."""
        # Act
        test_db_session.add_all([Theme(name='Music'), Platform(name='Netflix', url='https://netflix.com')])
        test_db_session.commit()

        # Assert
        assert test_db_session.query(Theme).one().name == 'Music'
        assert test_db_session.query(Platform).one().url == 'https://netflix.com'
