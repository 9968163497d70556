"""Show filtering"""

from tvtantrum_catalog_service.filters.filter_config import (
    filter_config_to_spec,
    load_filter_config,
    validate_filter_config,
)
from tvtantrum_catalog_service.filters.filter_spec import FilterSpec, IntRange, SortBy, ThemeMatchMode
from tvtantrum_catalog_service.filters.filter_translator import (
    FilterTranslator,
    TranslatedQuery,
    age_range_patterns,
    build_select,
)
from tvtantrum_catalog_service.filters.query_params import filter_spec_from_params

__all__ = [
    "FilterSpec",
    "FilterTranslator",
    "IntRange",
    "SortBy",
    "ThemeMatchMode",
    "TranslatedQuery",
    "age_range_patterns",
    "build_select",
    "filter_config_to_spec",
    "filter_spec_from_params",
    "load_filter_config",
    "validate_filter_config",
]
