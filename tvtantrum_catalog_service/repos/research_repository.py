"""Repository for research summaries."""

import logging
from typing import Any, Mapping

from sqlalchemy.orm import Session

from tvtantrum_catalog_service.errors import ValidationError
from tvtantrum_catalog_service.models import ResearchSummary

logger = logging.getLogger(__name__)

RESEARCH_FIELDS = {
    "title": "title",
    "summary": "summary",
    "fullText": "full_text",
    "category": "category",
    "imageUrl": "image_url",
    "source": "source",
    "originalStudyUrl": "original_url",
    "publishedDate": "published_date",
    "headline": "headline",
    "subHeadline": "sub_headline",
    "keyFindings": "key_findings",
}

REQUIRED_ON_CREATE = ("title", "category")


def research_to_dict(research: ResearchSummary) -> dict:
    """camelCase view of a research summary row."""
    result = {"id": research.id}
    for field, column in RESEARCH_FIELDS.items():
        result[field] = getattr(research, column)
    result["createdAt"] = research.created_at.isoformat() if research.created_at else None
    result["updatedAt"] = research.updated_at.isoformat() if research.updated_at else None
    return result


def validate_research_payload(payload: Mapping[str, Any], partial: bool = False) -> dict:
    """
    Validate an admin research payload.

    Every field is text. ``title`` and ``category`` are required on create
    and may not be blanked on update.

    Raises:
        ValidationError: On unknown fields, non-string values or missing
            required fields
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Research payload must be an object")

    unknown = sorted(set(payload) - set(RESEARCH_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown research field(s): {', '.join(unknown)}", field=unknown[0])

    fields = {}
    for field, value in payload.items():
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"{field} must be a string", field=field)
        fields[field] = value.strip() if isinstance(value, str) else None

    required = REQUIRED_ON_CREATE if not partial else [f for f in REQUIRED_ON_CREATE if f in fields]
    for field in required:
        if not fields.get(field):
            raise ValidationError(f"{field} is required", field=field)

    return {RESEARCH_FIELDS[field]: value for field, value in fields.items()}


class ResearchRepository:
    """
    Repository for research summaries.
    """

    def __init__(self, db: Session):
        self.db = db

    # noinspection PyTypeChecker
    def get_summaries(self, category: str | None = None, limit: int | None = None) -> list[ResearchSummary]:
        """
        Research summaries, newest first.

        Args:
            category: Only summaries in this category
            limit: Maximum number to return
        """
        query = self.db.query(ResearchSummary)
        if category:
            query = query.filter(ResearchSummary.category == category)
        query = query.order_by(ResearchSummary.created_at.desc(), ResearchSummary.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    def get_summary(self, research_id: int) -> ResearchSummary | None:
        """Get a research summary by ID."""
        return self.db.get(ResearchSummary, research_id)

    def create_summary(self, payload: Mapping[str, Any]) -> ResearchSummary:
        """Create a research summary."""
        fields = validate_research_payload(payload)

        research = ResearchSummary(**fields)
        self.db.add(research)
        self.db.commit()
        self.db.refresh(research)

        logger.info(f"✓ Created research summary {research.id} '{research.title}'")
        return research

    def update_summary(self, research_id: int, payload: Mapping[str, Any]) -> ResearchSummary | None:
        """
        Apply a partial update.

        Returns:
            The updated ResearchSummary, or None if not found
        """
        fields = validate_research_payload(payload, partial=True)

        research = self.get_summary(research_id)
        if research is None:
            return None

        for column, value in fields.items():
            setattr(research, column, value)

        self.db.commit()
        self.db.refresh(research)

        logger.info(f"✓ Updated research summary {research_id}")
        return research

    def delete_summary(self, research_id: int) -> bool:
        """
        Delete a research summary.

        Returns:
            True if deleted, False if not found
        """
        count = self.db.query(ResearchSummary).filter(ResearchSummary.id == research_id).delete()
        self.db.commit()

        return count > 0
