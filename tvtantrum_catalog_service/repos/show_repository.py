"""Repository for catalog show writes."""

import logging
from typing import Any, Mapping

from sqlalchemy.orm import Session

from tvtantrum_catalog_service.errors import ValidationError
from tvtantrum_catalog_service.filters.filter_spec import MAX_STIMULATION_SCORE, MIN_STIMULATION_SCORE
from tvtantrum_catalog_service.models import TvShow, TvShowTheme
from tvtantrum_catalog_service.repos.lookup_repository import LookupRepository
from tvtantrum_catalog_service.repos.show_query_executor import SHOW_FIELDS
from tvtantrum_catalog_service.sensory import SENSORY_FIELDS, require_level

logger = logging.getLogger(__name__)

REQUIRED_ON_CREATE = ("name", "description", "ageRange", "episodeLength", "stimulationScore")

TEXT_FIELDS = (
    "name", "description", "ageRange", "creator", "animationStyle", "imageUrl",
    "subscriberCount", "videoCount", "channelId", "publishedAt",
)
INT_FIELDS = ("episodeLength", "releaseYear", "endYear", "seasons", "stimulationScore", "creativityRating")
BOOL_FIELDS = ("isOngoing", "isFeatured", "isYouTubeChannel", "hasOmdbData", "hasYoutubeData")
LIST_FIELDS = ("themes", "availableOn")


def _clean_text(value: Any, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    return value.strip() or None


def _clean_int(value: Any, field: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        value = int(value.strip())
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", field=field)
    return value


def _clean_list(value: Any, field: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        raise ValidationError(f"{field} must be a list of strings", field=field)
    cleaned: list[str] = []
    for item in value:
        item = item.strip()
        if item and item not in cleaned:
            cleaned.append(item)
    return cleaned


def validate_show_payload(payload: Mapping[str, Any], partial: bool = False) -> dict:
    """
    Validate an admin show payload and map it onto tv_shows columns.

    Args:
        payload: camelCase show fields
        partial: True for updates, where only supplied fields are checked

    Returns:
        Dict of column name to cleaned value

    Raises:
        ValidationError: On unknown or immutable fields, missing required
            fields, wrong types or a stimulation score outside 1-5
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Show payload must be an object")

    if "id" in payload:
        raise ValidationError("id cannot be set", field="id")
    unknown = sorted(set(payload) - set(SHOW_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown show field(s): {', '.join(unknown)}", field=unknown[0])

    fields: dict[str, Any] = {}
    for field, value in payload.items():
        if field in TEXT_FIELDS:
            cleaned = _clean_text(value, field)
        elif field in INT_FIELDS:
            cleaned = _clean_int(value, field)
        elif field in BOOL_FIELDS:
            if value is not None and not isinstance(value, bool):
                raise ValidationError(f"{field} must be true or false", field=field)
            cleaned = bool(value)
        elif field in LIST_FIELDS:
            cleaned = _clean_list(value, field)
        elif field in SENSORY_FIELDS:
            cleaned = require_level(value, field)
        else:
            cleaned = value
        fields[field] = cleaned

    required = REQUIRED_ON_CREATE if not partial else [f for f in REQUIRED_ON_CREATE if f in fields]
    for field in required:
        if fields.get(field) is None:
            raise ValidationError(f"{field} is required", field=field)

    score = fields.get("stimulationScore")
    if score is not None and not MIN_STIMULATION_SCORE <= score <= MAX_STIMULATION_SCORE:
        raise ValidationError(
            f"stimulationScore must be between {MIN_STIMULATION_SCORE} and {MAX_STIMULATION_SCORE}",
            field="stimulationScore",
        )

    return {SHOW_FIELDS[field]: value for field, value in fields.items()}


class ShowRepository:
    """
    Repository for creating, updating and deleting shows.

    Keeps the ``tv_show_themes`` index and the theme/platform vocabularies
    in step with every write.
    """

    def __init__(self, db: Session):
        self.db = db
        self.lookups = LookupRepository(db)

    def get_show(self, show_id: int) -> TvShow | None:
        """Get a show by ID."""
        return self.db.get(TvShow, show_id)

    def create_show(self, payload: Mapping[str, Any]) -> TvShow:
        """
        Create a show.

        Args:
            payload: camelCase show fields

        Returns:
            The stored TvShow
        """
        fields = validate_show_payload(payload)
        fields.setdefault("themes", [])
        fields.setdefault("available_on", [])

        if fields.get("is_featured"):
            self._clear_featured()

        show = TvShow(**fields)
        self._index_themes(show, fields["themes"])
        self.db.add(show)
        self._sync_vocabularies(fields)

        self.db.commit()
        self.db.refresh(show)

        logger.info(f"✓ Created show {show.id} '{show.name}'")
        return show

    def update_show(self, show_id: int, payload: Mapping[str, Any]) -> TvShow | None:
        """
        Apply a partial update.

        Args:
            show_id: Show ID
            payload: camelCase fields to change

        Returns:
            The updated TvShow, or None if not found
        """
        fields = validate_show_payload(payload, partial=True)

        show = self.get_show(show_id)
        if show is None:
            return None

        if fields.get("is_featured"):
            self._clear_featured()

        for column, value in fields.items():
            setattr(show, column, value)
        if "themes" in fields:
            self._index_themes(show, fields["themes"])
        self._sync_vocabularies(fields)

        self.db.commit()
        self.db.refresh(show)

        logger.info(f"✓ Updated show {show_id} ({', '.join(sorted(fields)) or 'no changes'})")
        return show

    def delete_show(self, show_id: int) -> bool:
        """
        Delete a show and its theme index rows.

        Args:
            show_id: Show ID to delete

        Returns:
            True if deleted, False if not found
        """
        show = self.get_show(show_id)
        if show is None:
            return False

        self.db.delete(show)
        self.db.commit()

        logger.info(f"✓ Deleted show {show_id}")
        return True

    def set_featured(self, show_id: int) -> TvShow | None:
        """
        Make one show the featured show, un-featuring all others.

        Both steps commit together so readers never see two featured shows.

        Returns:
            The featured TvShow, or None if not found
        """
        show = self.get_show(show_id)
        if show is None:
            return None

        self._clear_featured()
        show.is_featured = True  # type: ignore[assignment]

        self.db.commit()
        self.db.refresh(show)

        logger.info(f"✓ Featured show {show_id}")
        return show

    def bulk_store_shows(
            self,
            payloads: list[Mapping[str, Any]],
            batch_size: int = 100,
            clear_existing: bool = False
    ) -> int:
        """
        Store many shows, committing in batches.

        Invalid payloads are skipped with a warning.

        Args:
            payloads: List of camelCase show payloads
            batch_size: Number of shows per commit
            clear_existing: Whether to delete all shows first

        Returns:
            Number of shows stored
        """
        if clear_existing:
            logger.info("Clearing existing shows...")
            self.db.query(TvShowTheme).delete()
            self.db.query(TvShow).delete()
            self.db.commit()

        count = 0
        pending = 0
        for index, payload in enumerate(payloads):
            try:
                fields = validate_show_payload(payload)
            except ValidationError as e:
                logger.warning(f"Skipping show #{index} ({payload.get('name')!r}): {e}")
                continue

            fields.setdefault("themes", [])
            fields.setdefault("available_on", [])
            if fields.get("is_featured"):
                self.db.flush()
                self._clear_featured()

            show = TvShow(**fields)
            self._index_themes(show, fields["themes"])
            self.db.add(show)
            self._sync_vocabularies(fields)
            pending += 1

            if pending >= batch_size:
                self.db.commit()
                count += pending
                pending = 0
                logger.info(f"Stored {count} shows...")

        self.db.commit()
        count += pending

        logger.info(f"✓ Stored {count} shows")
        return count

    # noinspection PyTypeChecker
    def count_shows(self) -> int:
        """Count stored shows."""
        return self.db.query(TvShow).count()

    def _clear_featured(self) -> None:
        self.db.query(TvShow).filter(TvShow.is_featured.is_(True)).update(
            {TvShow.is_featured: False}, synchronize_session="fetch"
        )

    def _index_themes(self, show: TvShow, themes: list[str]) -> None:
        show.theme_index = [TvShowTheme(theme=theme) for theme in themes]  # type: ignore[assignment]

    def _sync_vocabularies(self, fields: Mapping[str, Any]) -> None:
        if fields.get("themes"):
            self.lookups.ensure_themes(fields["themes"])
        if fields.get("available_on"):
            self.lookups.ensure_platforms(fields["available_on"])
