"""Repository for homepage categories."""

import logging
from typing import Any, Mapping

from sqlalchemy import func
from sqlalchemy.orm import Session

from tvtantrum_catalog_service.errors import ValidationError
from tvtantrum_catalog_service.filters import load_filter_config, validate_filter_config
from tvtantrum_catalog_service.models import HomepageCategory

logger = logging.getLogger(__name__)

CATEGORY_FIELDS = {
    "name": "name",
    "description": "description",
    "displayOrder": "display_order",
    "isActive": "is_active",
    "filterConfig": "filter_config",
}


def category_to_dict(category: HomepageCategory) -> dict:
    """camelCase view of a category row."""
    return {
        "id": category.id,
        "name": category.name,
        "description": category.description,
        "displayOrder": category.display_order,
        "isActive": bool(category.is_active),
        "filterConfig": load_filter_config(category.filter_config),
        "createdAt": category.created_at.isoformat() if category.created_at else None,
        "updatedAt": category.updated_at.isoformat() if category.updated_at else None,
    }


def validate_category_payload(payload: Mapping[str, Any], partial: bool = False) -> dict:
    """
    Validate an admin category payload.

    Returns:
        Dict of column name to cleaned value

    Raises:
        ValidationError: On unknown fields, wrong types or a bad filter config
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Category payload must be an object")

    unknown = sorted(set(payload) - set(CATEGORY_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown category field(s): {', '.join(unknown)}", field=unknown[0])

    fields: dict[str, Any] = {}
    for field in ("name", "description"):
        if field in payload:
            value = payload[field]
            if not isinstance(value, str) or (field == "name" and not value.strip()):
                raise ValidationError(f"{field} must be a non-empty string", field=field)
            fields[CATEGORY_FIELDS[field]] = value.strip()

    if payload.get("displayOrder") is not None:
        order = payload["displayOrder"]
        if isinstance(order, bool) or not isinstance(order, int) or order < 0:
            raise ValidationError("displayOrder must be a non-negative integer", field="displayOrder")
        fields["display_order"] = order

    if "isActive" in payload:
        if not isinstance(payload["isActive"], bool):
            raise ValidationError("isActive must be true or false", field="isActive")
        fields["is_active"] = payload["isActive"]

    if "filterConfig" in payload:
        fields["filter_config"] = validate_filter_config(payload["filterConfig"])

    if not partial:
        if "name" not in fields:
            raise ValidationError("name is required", field="name")
        if "filter_config" not in fields:
            raise ValidationError("filterConfig is required", field="filterConfig")
        fields.setdefault("description", "")

    return fields


class CategoryRepository:
    """
    Repository for homepage categories.
    """

    def __init__(self, db: Session):
        self.db = db

    # noinspection PyTypeChecker
    def get_categories(self, active_only: bool = False) -> list[HomepageCategory]:
        """Categories ordered by display order, then name."""
        query = self.db.query(HomepageCategory)
        if active_only:
            query = query.filter(HomepageCategory.is_active.is_(True))
        return query.order_by(HomepageCategory.display_order, HomepageCategory.name).all()

    def get_category(self, category_id: int) -> HomepageCategory | None:
        """Get a category by ID."""
        return self.db.get(HomepageCategory, category_id)

    def create_category(self, payload: Mapping[str, Any]) -> HomepageCategory:
        """
        Create a category.

        Without a displayOrder the category goes to the end of the list.

        Args:
            payload: camelCase category fields

        Returns:
            The stored HomepageCategory
        """
        fields = validate_category_payload(payload)
        if "display_order" not in fields:
            fields["display_order"] = self._next_display_order()
        fields.setdefault("is_active", True)

        category = HomepageCategory(**fields)
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)

        logger.info(f"✓ Created homepage category {category.id} '{category.name}'")
        return category

    def update_category(self, category_id: int, payload: Mapping[str, Any]) -> HomepageCategory | None:
        """
        Apply a partial update.

        Returns:
            The updated HomepageCategory, or None if not found
        """
        fields = validate_category_payload(payload, partial=True)

        category = self.get_category(category_id)
        if category is None:
            return None

        for column, value in fields.items():
            setattr(category, column, value)

        self.db.commit()
        self.db.refresh(category)

        logger.info(f"✓ Updated homepage category {category_id}")
        return category

    def delete_category(self, category_id: int) -> bool:
        """
        Delete a category.

        Returns:
            True if deleted, False if not found
        """
        count = self.db.query(HomepageCategory).filter(HomepageCategory.id == category_id).delete()
        self.db.commit()

        return count > 0

    def reorder_categories(self, category_ids: list[int]) -> list[HomepageCategory]:
        """
        Set display order from a list of category IDs (first = 1).

        Categories not named keep their order after the named ones.

        Raises:
            ValidationError: If the list is malformed or names unknown IDs
        """
        if not isinstance(category_ids, list) or not all(
                isinstance(cid, int) and not isinstance(cid, bool) for cid in category_ids
        ):
            raise ValidationError("order must be a list of category ids", field="order")
        if len(set(category_ids)) != len(category_ids):
            raise ValidationError("order must not repeat category ids", field="order")

        by_id = {category.id: category for category in self.get_categories()}
        missing = [cid for cid in category_ids if cid not in by_id]
        if missing:
            raise ValidationError(
                f"Unknown category id(s): {', '.join(str(cid) for cid in missing)}", field="order"
            )

        position = 0
        for position, category_id in enumerate(category_ids, start=1):
            by_id[category_id].display_order = position  # type: ignore[assignment]
        for category in by_id.values():
            if category.id not in category_ids:
                position += 1
                category.display_order = position  # type: ignore[assignment]

        self.db.commit()

        logger.info(f"✓ Reordered {len(category_ids)} homepage categories")
        return self.get_categories()

    def _next_display_order(self) -> int:
        current = self.db.query(func.max(HomepageCategory.display_order)).scalar()
        return (current or 0) + 1
