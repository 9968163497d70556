"""Shared test fixtures and configuration for pytest."""
import os

# Modules below build the engine at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("READ_RETRY_BASE_DELAY", "0")

import pytest
from typing import Dict, List
from unittest.mock import Mock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tvtantrum_catalog_service.cache import CacheStore
from tvtantrum_catalog_service.models import TvShow, TvShowTheme
from tvtantrum_catalog_service.models.base import Base
from tvtantrum_catalog_service.repos import ShowQueryExecutor, ShowRepository
from tvtantrum_catalog_service.repos.show_query_executor import normalize_show_row
from tvtantrum_catalog_service.resilience import RetryPolicy
from tvtantrum_catalog_service.services import AdminService, CatalogService


# ===== Database Fixtures =====

@pytest.fixture(scope="function")
def test_db_engine():
    """Create an in-memory SQLite database engine shared by every session in a test."""
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(test_db_engine):
    """Session factory bound to the test engine."""
    return sessionmaker(bind=test_db_engine, expire_on_commit=True)


@pytest.fixture(scope="function")
def test_db_session(session_factory):
    """Create a database session for testing."""
    session = session_factory()
    yield session
    session.close()


# ===== Core Object Fixtures =====

@pytest.fixture
def cache() -> CacheStore:
    """Fresh cache per test."""
    return CacheStore(max_entries=1000)


@pytest.fixture
def fast_retry() -> RetryPolicy:
    """Retry policy without backoff delays."""
    return RetryPolicy(max_attempts=3, base_delay=0, max_delay=0)


@pytest.fixture
def query_executor(session_factory, fast_retry) -> ShowQueryExecutor:
    return ShowQueryExecutor(session_factory=session_factory, retry_policy=fast_retry)


@pytest.fixture
def catalog_service(cache, session_factory, fast_retry) -> CatalogService:
    return CatalogService(cache, session_factory=session_factory, retry_policy=fast_retry)


@pytest.fixture
def admin_service(cache, session_factory) -> AdminService:
    return AdminService(cache, session_factory=session_factory)


@pytest.fixture
def show_repository(test_db_session) -> ShowRepository:
    return ShowRepository(test_db_session)


# ===== Sample Data Fixtures =====

@pytest.fixture
def sample_show_payload() -> Dict:
    """A complete, valid admin payload for one show."""
    return {
        "name": "Bluey",
        "description": "A Blue Heeler puppy turns everyday family life into play.",
        "ageRange": "3-5",
        "episodeLength": 7,
        "creator": "Joe Brumm",
        "releaseYear": 2018,
        "isOngoing": True,
        "seasons": 3,
        "stimulationScore": 2,
        "interactivityLevel": "Moderate",
        "dialogueIntensity": "Moderate",
        "soundEffectsLevel": "Low-Moderate",
        "musicTempo": "Moderate",
        "themes": ["Friendship", "Family", "Imagination"],
        "availableOn": ["Disney+"],
        "animationStyle": "2D",
    }


@pytest.fixture
def sample_show_payloads(sample_show_payload) -> List[Dict]:
    """Five shows: two calm Friendship shows, three that are not."""
    return [
        sample_show_payload,
        {
            "name": "Daniel Tiger's Neighborhood",
            "description": "Daniel learns social and emotional skills.",
            "ageRange": "2-4",
            "episodeLength": 28,
            "creator": "Angela Santomero",
            "releaseYear": 2012,
            "stimulationScore": 1,
            "dialogueIntensity": "Low",
            "interactivityLevel": "High",
            "themes": ["Friendship", "Emotions"],
            "availableOn": ["PBS Kids"],
        },
        {
            "name": "Paw Patrol",
            "description": "A team of rescue pups led by a tech-savvy boy.",
            "ageRange": "3-6",
            "episodeLength": 22,
            "creator": "Keith Chapman",
            "releaseYear": 2013,
            "stimulationScore": 4,
            "interactivityLevel": "Low",
            "themes": ["Adventure", "Friendship", "Teamwork"],
            "availableOn": ["Nick Jr.", "Paramount+"],
        },
        {
            "name": "Octonauts",
            "description": "Underwater explorers rescue sea creatures.",
            "ageRange": "3-6",
            "episodeLength": 11,
            "creator": "Meomi",
            "releaseYear": 2010,
            "stimulationScore": 3,
            "themes": ["Adventure", "Music", "Science"],
            "availableOn": ["Netflix"],
        },
        {
            "name": "Peppa Pig",
            "description": "A little pig and her family go on small adventures.",
            "ageRange": "2-5",
            "episodeLength": 5,
            "creator": "Neville Astley",
            "releaseYear": 2004,
            "stimulationScore": 2,
            "themes": ["Family", "Music", "Adventure"],
            "availableOn": ["Nick Jr."],
        },
    ]


@pytest.fixture
def seeded_shows(show_repository, sample_show_payloads) -> Dict[str, Dict]:
    """Store the sample shows and return their records keyed by name."""
    records = {}
    for payload in sample_show_payloads:
        show = show_repository.create_show(payload)
        records[show.name] = normalize_show_row(show.to_row())
    return records


@pytest.fixture
def legacy_show(test_db_session) -> TvShow:
    """A pre-validation row: no stimulation score and a legacy 'Medium' level."""
    show = TvShow(
        name="Legacy Cartoon",
        description="Imported before scores were required.",
        age_range="4-7",
        episode_length=12,
        stimulation_score=None,
        interactivity_level="Medium",
        themes=["Friendship"],
        available_on=[],
    )
    show.theme_index = [TvShowTheme(theme="Friendship")]
    test_db_session.add(show)
    test_db_session.commit()
    return show


@pytest.fixture
def sample_category_payload() -> Dict:
    """Category whose rules require both Adventure and Music."""
    return {
        "name": "Musical Adventures",
        "description": "Adventure shows with music",
        "filterConfig": {
            "logic": "AND",
            "rules": [
                {"field": "themes", "operator": "contains", "value": "Adventure"},
                {"field": "themes", "operator": "contains", "value": "Music"},
            ],
        },
    }


@pytest.fixture
def sample_research_payload() -> Dict:
    return {
        "title": "Screen Pace and Executive Function",
        "category": "Attention",
        "summary": "Fast-paced cartoons were linked to short-term attention dips.",
        "source": "Pediatrics",
        "originalStudyUrl": "https://example.org/study",
        "publishedDate": "2011-09-12",
    }


# ===== Azure Functions Fixtures =====

@pytest.fixture
def mock_http_request():
    """Mock Azure Functions HttpRequest."""
    mock_req = Mock()
    mock_req.route_params = {}
    mock_req.params = {}
    mock_req.get_json.return_value = {}
    return mock_req
