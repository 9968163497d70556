"""Translate a FilterSpec into parameterized SQL."""

from dataclasses import dataclass, field
from typing import Any

from tvtantrum_catalog_service.filters.filter_spec import FilterSpec, SortBy, ThemeMatchMode
from tvtantrum_catalog_service.sensory import LEVEL_ORDINALS, LEVEL_SYNONYMS

SHOWS_TABLE = "tv_shows"
THEME_INDEX_TABLE = "tv_show_themes"

# Upper bound used when expanding an age range into "lo-hi" strings
MAX_PATTERN_AGE = 12
AGE_PATTERN_SPREAD = 5

LIKE_ESCAPE = "!"


@dataclass(frozen=True)
class TranslatedQuery:
    """SQL fragments plus the bound parameters they reference, in order."""

    where_clause: str
    params: dict[str, Any] = field(default_factory=dict)
    order_by: str = ""
    pagination: str = ""

    @property
    def ordered_params(self) -> list:
        return list(self.params.values())


class _ParamCollector:
    """Hands out sequential named placeholders."""

    def __init__(self):
        self.values: dict[str, Any] = {}

    def add(self, value: Any) -> str:
        name = f"p_{len(self.values)}"
        self.values[name] = value
        return f":{name}"


def age_range_patterns(min_age: int, max_age: int) -> list[str]:
    """
    Enumerate the stored ``"lo-hi"`` strings an age range filter matches.

    ``lo`` runs over [min_age, max_age] and ``hi`` over
    [lo, min(max_age + 5, 12)]. This approximates an interval overlap on a
    free-form string column and misses values like "13+" or "All ages".
    """
    patterns = []
    # No pattern exists once low passes the cap
    for low in range(min_age, min(max_age, MAX_PATTERN_AGE) + 1):
        for high in range(low, min(max_age + AGE_PATTERN_SPREAD, MAX_PATTERN_AGE) + 1):
            patterns.append(f"{low}-{high}")
    return patterns


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def _level_variants(level: str) -> list[str]:
    variants = [level.lower()]
    variants.extend(alias for alias, canonical in LEVEL_SYNONYMS.items() if canonical == level)
    return variants


def _ordinal_case(column: str) -> str:
    branches = [f"WHEN '{level.lower()}' THEN {rank}" for level, rank in LEVEL_ORDINALS.items()]
    branches.extend(
        f"WHEN '{alias}' THEN {LEVEL_ORDINALS[canonical]}" for alias, canonical in LEVEL_SYNONYMS.items()
    )
    return f"CASE LOWER({column}) {' '.join(branches)} ELSE 0 END"


_NAME_ORDER = "LOWER(ts.name) ASC, ts.id ASC"

_ORDER_BY = {
    SortBy.NAME: _NAME_ORDER,
    SortBy.STIMULATION_SCORE: f"ts.stimulation_score IS NULL, ts.stimulation_score ASC, {_NAME_ORDER}",
    SortBy.INTERACTIVITY_LEVEL: f"{_ordinal_case('ts.interactivity_level')} DESC, {_NAME_ORDER}",
    SortBy.POPULAR: f"ts.is_featured DESC, {_NAME_ORDER}",
    SortBy.RELEASE_YEAR: f"ts.release_year IS NULL, ts.release_year DESC, {_NAME_ORDER}",
}


class FilterTranslator:
    """
    Pure translation of a FilterSpec into SQL text and bound parameters.

    The generated SQL refers to the shows table as ``ts``. User supplied
    values never appear in the SQL text, only in ``params``.
    """

    def translate(self, spec: FilterSpec) -> TranslatedQuery:
        """
        Translate a filter specification.

        Args:
            spec: Validated filter specification

        Returns:
            TranslatedQuery with WHERE, ORDER BY and pagination fragments
        """
        params = _ParamCollector()
        conditions: list[str] = []

        if spec.search:
            term = params.add(f"%{escape_like(spec.search.lower())}%")
            conditions.append(
                f"(LOWER(ts.name) LIKE {term} ESCAPE '{LIKE_ESCAPE}'"
                f" OR LOWER(ts.description) LIKE {term} ESCAPE '{LIKE_ESCAPE}'"
                f" OR LOWER(ts.creator) LIKE {term} ESCAPE '{LIKE_ESCAPE}')"
            )

        if spec.age_group:
            conditions.append(f"ts.age_range = {params.add(spec.age_group)}")

        if spec.age_range:
            patterns = age_range_patterns(spec.age_range.min, spec.age_range.max)
            if patterns:
                placeholders = ", ".join(params.add(pattern) for pattern in patterns)
                conditions.append(f"ts.age_range IN ({placeholders})")

        if spec.stimulation_score_range:
            low = params.add(spec.stimulation_score_range.min)
            high = params.add(spec.stimulation_score_range.max)
            conditions.append(f"ts.stimulation_score BETWEEN {low} AND {high}")

        if spec.themes:
            conditions.extend(self._theme_conditions(spec, params))

        for column, level in (
                ("ts.interactivity_level", spec.interactivity_level),
                ("ts.dialogue_intensity", spec.dialogue_intensity),
        ):
            if level:
                placeholders = ", ".join(params.add(variant) for variant in _level_variants(level))
                conditions.append(f"LOWER({column}) IN ({placeholders})")

        order_by = _ORDER_BY.get(spec.sort_by, _NAME_ORDER)

        pagination = ""
        if spec.limit:
            pagination = f"LIMIT {params.add(spec.limit)}"
            if spec.offset:
                pagination += f" OFFSET {params.add(spec.offset)}"

        return TranslatedQuery(
            where_clause=" AND ".join(conditions),
            params=params.values,
            order_by=order_by,
            pagination=pagination,
        )

    def _theme_conditions(self, spec: FilterSpec, params: _ParamCollector) -> list[str]:
        base = (
            f"EXISTS (SELECT 1 FROM {THEME_INDEX_TABLE} st"
            f" WHERE st.tv_show_id = ts.id AND st.theme"
        )
        if spec.theme_match_mode is ThemeMatchMode.OR:
            placeholders = ", ".join(params.add(theme) for theme in spec.themes)
            return [f"{base} IN ({placeholders}))"]

        # AND: one containment check per requested theme
        return [f"{base} = {params.add(theme)})" for theme in spec.themes]


def build_select(query: TranslatedQuery, columns: str = "ts.*") -> str:
    """Assemble a full SELECT statement from translated fragments."""
    sql = f"SELECT {columns} FROM {SHOWS_TABLE} ts"
    if query.where_clause:
        sql += f" WHERE {query.where_clause}"
    if query.order_by:
        sql += f" ORDER BY {query.order_by}"
    if query.pagination:
        sql += f" {query.pagination}"
    return sql
