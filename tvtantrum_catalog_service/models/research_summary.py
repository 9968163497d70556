"""Research summaries shown on the research pages."""
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from tvtantrum_catalog_service.models.base import Base


def _utcnow():
    return datetime.now(UTC)


class ResearchSummary(Base):
    __tablename__ = "research_summaries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False)
    summary = Column(Text, nullable=True)
    full_text = Column(Text, nullable=True)
    category = Column(String(255), nullable=False)
    image_url = Column(Text, nullable=True)
    source = Column(String(500), nullable=True)
    original_url = Column(Text, nullable=True)
    published_date = Column(String(50), nullable=True)
    headline = Column(Text, nullable=True)
    sub_headline = Column(Text, nullable=True)
    key_findings = Column(Text, nullable=True)

    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return f"<ResearchSummary(id={self.id}, title='{self.title}')>"
