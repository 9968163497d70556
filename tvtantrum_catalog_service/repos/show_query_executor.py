"""Read-side show queries and show record normalization."""

import json
import logging
from dataclasses import replace
from typing import Any, Callable, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from tvtantrum_catalog_service.filters import FilterSpec, FilterTranslator, build_select
from tvtantrum_catalog_service.filters.filter_translator import (
    LIKE_ESCAPE,
    SHOWS_TABLE,
    THEME_INDEX_TABLE,
    escape_like,
)
from tvtantrum_catalog_service.models.database import SessionLocal
from tvtantrum_catalog_service.resilience import RetryPolicy, run_read
from tvtantrum_catalog_service.sensory import DEFAULT_SENSORY_LEVEL, SENSORY_FIELDS, canonical_level

logger = logging.getLogger(__name__)

# Public record field -> tv_shows column, in record order
SHOW_FIELDS = {
    "id": "id",
    "name": "name",
    "description": "description",
    "ageRange": "age_range",
    "episodeLength": "episode_length",
    "creator": "creator",
    "releaseYear": "release_year",
    "endYear": "end_year",
    "isOngoing": "is_ongoing",
    "seasons": "seasons",
    "stimulationScore": "stimulation_score",
    **SENSORY_FIELDS,
    "creativityRating": "creativity_rating",
    "availableOn": "available_on",
    "themes": "themes",
    "animationStyle": "animation_style",
    "imageUrl": "image_url",
    "isFeatured": "is_featured",
    "subscriberCount": "subscriber_count",
    "videoCount": "video_count",
    "channelId": "channel_id",
    "isYouTubeChannel": "is_youtube_channel",
    "publishedAt": "published_at",
    "hasOmdbData": "has_omdb_data",
    "hasYoutubeData": "has_youtube_data",
}

LIST_FIELDS = ("themes", "availableOn")
BOOL_FIELDS = ("isOngoing", "isFeatured", "isYouTubeChannel", "hasOmdbData", "hasYoutubeData")
INT_FIELDS = ("id", "episodeLength", "releaseYear", "endYear", "seasons", "stimulationScore", "creativityRating")

DEFAULT_POPULAR_LIMIT = 10
DEFAULT_SEARCH_LIMIT = 20
DEFAULT_SIMILAR_LIMIT = 6

_NAME_ORDER = "LOWER(ts.name) ASC, ts.id ASC"


def _parse_list(value: Any) -> list[str]:
    """Text JSON columns come back as strings from raw SQL."""
    if value is None:
        return []
    if isinstance(value, (bytes, str)):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            value = str(value).split(",")
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def _parse_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_show_row(row: Mapping[str, Any]) -> dict:
    """
    Convert a database row into a show record.

    Accepts snake_case column keys or camelCase record keys, so rows from
    raw SQL, ORM ``to_row()`` output and already-normalized records all
    produce the same shape. Extra keys (ranking columns and the like) are
    dropped. Null sensory levels stay null.

    Args:
        row: Mapping of column or field names to values

    Returns:
        Show record dict keyed by camelCase field names
    """
    record: dict[str, Any] = {}
    for field, column in SHOW_FIELDS.items():
        value = row[column] if column in row else row.get(field)

        if field in LIST_FIELDS:
            value = _parse_list(value)
        elif field in BOOL_FIELDS:
            value = bool(value) if value is not None else False
        elif field in INT_FIELDS:
            value = _parse_int(value)
        elif field in SENSORY_FIELDS:
            value = canonical_level(value) or (value if value else None)

        record[field] = value
    return record


def with_sensory_defaults(record: Mapping[str, Any]) -> dict:
    """Copy of a show record with missing sensory levels shown as Moderate."""
    result = dict(record)
    for field in SENSORY_FIELDS:
        if not result.get(field):
            result[field] = DEFAULT_SENSORY_LEVEL
    return result


class ShowQueryExecutor:
    """
    Runs show read queries against the database.

    Each call opens its own session and is retried on transient storage
    errors; every result is passed through ``normalize_show_row``.
    """

    def __init__(
            self,
            session_factory: Optional[Callable[[], Session]] = None,
            retry_policy: Optional[RetryPolicy] = None,
            translator: Optional[FilterTranslator] = None
    ):
        """
        Initialize the executor.

        Args:
            session_factory: Callable returning a new Session (default: SessionLocal)
            retry_policy: Retry policy for reads (default: from config)
            translator: Filter translator (default: FilterTranslator())
        """
        self.session_factory = session_factory or SessionLocal
        self.retry_policy = retry_policy or RetryPolicy.from_config()
        self.translator = translator or FilterTranslator()

    def _read(self, description: str, work: Callable[[Session], Any]) -> Any:
        return run_read(self.session_factory, work, self.retry_policy, description)

    def _rows(self, db: Session, sql: str, params: Optional[dict] = None) -> list[dict]:
        result = db.execute(text(sql), params or {})
        return [normalize_show_row(row) for row in result.mappings().all()]

    def fetch_shows(self, spec: FilterSpec) -> list[dict]:
        """
        Fetch shows matching a filter specification.

        Args:
            spec: Validated filter specification

        Returns:
            List of show records in the requested order
        """
        query = self.translator.translate(spec)
        sql = build_select(query)
        shows = self._read("fetch shows", lambda db: self._rows(db, sql, query.params))
        logger.debug(f"Fetched {len(shows)} shows for filter {spec.cache_key()}")
        return shows

    def count_shows(self, spec: FilterSpec) -> int:
        """Count shows matching a filter, ignoring its sort and pagination."""
        query = self.translator.translate(replace(spec, sort_by=None, limit=None, offset=None))
        sql = f"SELECT COUNT(*) FROM {SHOWS_TABLE} ts"
        if query.where_clause:
            sql += f" WHERE {query.where_clause}"
        return self._read("count shows", lambda db: db.execute(text(sql), query.params).scalar_one())

    def fetch_show(self, show_id: int) -> dict | None:
        """Fetch one show by id, or None."""
        sql = f"SELECT ts.* FROM {SHOWS_TABLE} ts WHERE ts.id = :show_id"
        rows = self._read("fetch show", lambda db: self._rows(db, sql, {"show_id": show_id}))
        return rows[0] if rows else None

    def fetch_featured(self) -> dict | None:
        """Fetch the featured show, or None when no show is featured."""
        sql = (
            f"SELECT ts.* FROM {SHOWS_TABLE} ts WHERE ts.is_featured = :featured"
            f" ORDER BY ts.id ASC LIMIT 1"
        )
        rows = self._read("fetch featured show", lambda db: self._rows(db, sql, {"featured": True}))
        return rows[0] if rows else None

    def fetch_popular(self, limit: int = DEFAULT_POPULAR_LIMIT) -> list[dict]:
        """Featured first, then calmest shows first."""
        sql = (
            f"SELECT ts.* FROM {SHOWS_TABLE} ts"
            f" ORDER BY ts.is_featured DESC, ts.stimulation_score IS NULL,"
            f" ts.stimulation_score ASC, {_NAME_ORDER}"
            f" LIMIT :limit"
        )
        return self._read("fetch popular shows", lambda db: self._rows(db, sql, {"limit": limit}))

    def search_ranked(self, term: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[dict]:
        """
        Search name, description and creator, best matches first.

        Ranking: exact name, name prefix, name substring, description
        substring, then creator-only matches; ties by name.

        Args:
            term: Free text; blank terms return an empty list
            limit: Maximum results

        Returns:
            List of show records
        """
        term = (term or "").strip().lower()
        if not term:
            return []

        escaped = escape_like(term)
        params = {
            "exact": term,
            "prefix": f"{escaped}%",
            "pattern": f"%{escaped}%",
            "limit": limit,
        }
        escape = f"ESCAPE '{LIKE_ESCAPE}'"
        sql = (
            f"SELECT ts.*, CASE"
            f" WHEN LOWER(ts.name) = :exact THEN 1"
            f" WHEN LOWER(ts.name) LIKE :prefix {escape} THEN 2"
            f" WHEN LOWER(ts.name) LIKE :pattern {escape} THEN 3"
            f" WHEN LOWER(ts.description) LIKE :pattern {escape} THEN 4"
            f" ELSE 5 END AS search_rank"
            f" FROM {SHOWS_TABLE} ts"
            f" WHERE LOWER(ts.name) LIKE :pattern {escape}"
            f" OR LOWER(ts.description) LIKE :pattern {escape}"
            f" OR LOWER(ts.creator) LIKE :pattern {escape}"
            f" ORDER BY search_rank ASC, {_NAME_ORDER}"
            f" LIMIT :limit"
        )
        return self._read("search shows", lambda db: self._rows(db, sql, params))

    def fetch_similar(self, show_id: int, limit: int = DEFAULT_SIMILAR_LIMIT) -> list[dict] | None:
        """
        Shows sharing a theme, the age range or the stimulation score.

        Same age range ranks 3, same score 2, a shared theme only 1; ties
        by name. The source show is never included.

        Args:
            show_id: Source show id
            limit: Maximum results

        Returns:
            List of show records, or None when the source show does not exist
        """
        def work(db: Session):
            source = db.execute(
                text(f"SELECT age_range, stimulation_score FROM {SHOWS_TABLE} WHERE id = :show_id"),
                {"show_id": show_id},
            ).mappings().first()
            if source is None:
                return None

            params = {
                "show_id": show_id,
                "age_range": source["age_range"],
                "score": source["stimulation_score"],
                "limit": limit,
            }
            sql = (
                f"SELECT ts.*, CASE"
                f" WHEN ts.age_range = :age_range THEN 3"
                f" WHEN ts.stimulation_score = :score THEN 2"
                f" ELSE 1 END AS similarity_score"
                f" FROM {SHOWS_TABLE} ts"
                f" WHERE ts.id != :show_id AND ("
                f"EXISTS (SELECT 1 FROM {THEME_INDEX_TABLE} st"
                f" WHERE st.tv_show_id = ts.id AND st.theme IN"
                f" (SELECT src.theme FROM {THEME_INDEX_TABLE} src WHERE src.tv_show_id = :show_id))"
                f" OR ts.age_range = :age_range"
                f" OR ts.stimulation_score = :score)"
                f" ORDER BY similarity_score DESC, {_NAME_ORDER}"
                f" LIMIT :limit"
            )
            return self._rows(db, sql, params)

        return self._read("fetch similar shows", work)

    def fetch_unique_themes(self) -> list[str]:
        """Every distinct theme in use, sorted."""
        sql = f"SELECT DISTINCT theme FROM {THEME_INDEX_TABLE} ORDER BY theme"
        themes = self._read("fetch unique themes", lambda db: db.execute(text(sql)).scalars().all())
        return [theme for theme in themes if theme and theme.strip()]
