"""Admin-curated homepage rows."""
from datetime import UTC, datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.dialects.mysql import JSON

from tvtantrum_catalog_service.models.base import Base


def _utcnow():
    return datetime.now(UTC)


class HomepageCategory(Base):
    """A named, ordered filter config rendered as a row on the home page."""
    __tablename__ = "homepage_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    filter_config = Column(JSON, nullable=False)

    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self):
        return f"<HomepageCategory(id={self.id}, name='{self.name}', order={self.display_order})>"
