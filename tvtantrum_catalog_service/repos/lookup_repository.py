"""Repository for the theme and platform vocabularies."""

import logging
from typing import Iterable

from sqlalchemy.orm import Session

from tvtantrum_catalog_service.models import Platform, Theme

logger = logging.getLogger(__name__)


class LookupRepository:
    """
    Repository for theme and platform lookup tables.
    """

    def __init__(self, db: Session):
        self.db = db

    # noinspection PyTypeChecker
    def get_themes(self) -> list[dict]:
        """All themes ordered by name."""
        themes = self.db.query(Theme).order_by(Theme.name).all()
        return [{"id": theme.id, "name": theme.name} for theme in themes]

    # noinspection PyTypeChecker
    def get_platforms(self) -> list[dict]:
        """All platforms ordered by name."""
        platforms = self.db.query(Platform).order_by(Platform.name).all()
        return [
            {
                "id": platform.id,
                "name": platform.name,
                "url": platform.url,
                "iconUrl": platform.icon_url,
            }
            for platform in platforms
        ]

    def ensure_themes(self, names: Iterable[str]) -> int:
        """
        Add any theme names not yet in the vocabulary.

        Flushes but does not commit; the caller's transaction owns the insert.

        Returns:
            Number of themes added
        """
        return self._ensure(Theme, names)

    def ensure_platforms(self, names: Iterable[str]) -> int:
        """Add any platform names not yet in the vocabulary (no commit)."""
        return self._ensure(Platform, names)

    def _ensure(self, model, names: Iterable[str]) -> int:
        wanted = {name for name in names if name}
        if not wanted:
            return 0

        existing = {
            row[0] for row in self.db.query(model.name).filter(model.name.in_(wanted)).all()
        }
        missing = sorted(wanted - existing)
        for name in missing:
            self.db.add(model(name=name))

        if missing:
            self.db.flush()
            logger.info(f"Adding {len(missing)} new {model.__tablename__}: {', '.join(missing)}")
        return len(missing)
