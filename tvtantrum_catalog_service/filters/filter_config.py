"""Homepage category filter configs and their conversion to FilterSpec."""

import json
import logging
from typing import Any, Mapping

from tvtantrum_catalog_service.errors import ValidationError
from tvtantrum_catalog_service.filters.filter_spec import FilterSpec

logger = logging.getLogger(__name__)

RULE_KEYS = ("field", "operator", "value")
LOGIC_VALUES = ("AND", "OR")


def load_filter_config(raw: Any) -> dict:
    """Decode a stored filter_config column, which may arrive as JSON text."""
    if raw is None:
        return {}
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored filter_config is not valid JSON; treating as empty")
            return {}
    return raw if isinstance(raw, dict) else {}


def validate_filter_config(config: Any) -> dict:
    """
    Check the shape of an admin-submitted filter config.

    Only the structure is enforced: ``rules`` must be a list of
    ``{field, operator, value}`` objects and ``logic`` AND/OR. Rule fields
    are not checked against known attributes.

    Raises:
        ValidationError: When the structure is wrong
    """
    if not isinstance(config, dict):
        raise ValidationError("filterConfig must be an object", field="filterConfig")

    logic = config.get("logic", "AND")
    if not isinstance(logic, str) or logic.upper() not in LOGIC_VALUES:
        raise ValidationError("filterConfig.logic must be AND or OR", field="filterConfig")

    rules = config.get("rules", [])
    if not isinstance(rules, list):
        raise ValidationError("filterConfig.rules must be a list", field="filterConfig")

    for index, rule in enumerate(rules):
        if not isinstance(rule, dict) or any(key not in rule for key in RULE_KEYS):
            raise ValidationError(
                f"filterConfig.rules[{index}] must have field, operator and value",
                field="filterConfig",
            )
        if not isinstance(rule["field"], str) or not isinstance(rule["operator"], str):
            raise ValidationError(
                f"filterConfig.rules[{index}] field and operator must be strings",
                field="filterConfig",
            )

    return {**config, "logic": logic.upper(), "rules": rules}


def _split_range(value: Any) -> dict | None:
    """Accept "1-3" or {"min": 1, "max": 3}."""
    if isinstance(value, str):
        parts = value.split("-")
        if len(parts) == 2:
            try:
                return {"min": int(parts[0]), "max": int(parts[1])}
            except ValueError:
                return None
        return None
    if isinstance(value, Mapping):
        return {"min": value.get("min") or 1, "max": value.get("max") or 5}
    return None


def _rule_to_filters(rule: Mapping) -> dict:
    field = rule.get("field")
    operator = rule.get("operator")
    value = rule.get("value")

    if field == "stimulationScore":
        if operator == "range" and value:
            bounds = _split_range(value)
            return {"stimulationScoreRange": bounds} if bounds else {}
        if operator == "equals" and value is not None:
            try:
                score = int(value)
            except (TypeError, ValueError):
                return {}
            return {"stimulationScoreRange": {"min": score, "max": score}}
    elif field == "ageGroup" and operator == "equals":
        return {"ageGroup": value}
    elif field == "ageRange" and operator == "range" and isinstance(value, str):
        bounds = _split_range(value)
        return {"ageRange": bounds} if bounds else {}
    elif field == "themes":
        if operator == "in" and isinstance(value, list):
            return {"themes": value}
        if operator == "contains":
            return {"themes": [value]}
    elif field in ("interactivityLevel", "dialogueIntensity") and operator == "equals":
        return {field: value}
    else:
        logger.debug(f"Ignoring unrecognized category rule field '{field}'")
    return {}


def filter_config_to_spec(config: Any) -> FilterSpec:
    """
    Convert a stored homepage category filter config into a FilterSpec.

    Stored rules may reference retired fields or hold malformed values; such
    rules are skipped with a warning instead of failing the whole category.
    Theme rules accumulate, and the config's ``logic`` decides AND/OR.

    Args:
        config: Decoded filter config dict (or raw JSON text)

    Returns:
        FilterSpec for the category
    """
    config = load_filter_config(config)
    rules = config.get("rules")
    if not isinstance(rules, list):
        return FilterSpec()

    filters: dict[str, Any] = {}
    themes: list = []

    for rule in rules:
        if not isinstance(rule, Mapping):
            continue
        candidate = _rule_to_filters(rule)
        if not candidate:
            continue
        try:
            FilterSpec.from_dict(candidate)
        except ValidationError as e:
            logger.warning(f"Skipping invalid category rule {dict(rule)}: {e}")
            continue
        if "themes" in candidate:
            themes.extend(candidate.pop("themes"))
        filters.update(candidate)

    if themes:
        filters["themes"] = themes
        logic = config.get("logic") or "AND"
        filters["themeMatchMode"] = logic if isinstance(logic, str) else "AND"

    try:
        return FilterSpec.from_dict(filters)
    except ValidationError as e:
        logger.warning(f"Category filter config could not be applied ({e}); showing all shows")
        return FilterSpec()
