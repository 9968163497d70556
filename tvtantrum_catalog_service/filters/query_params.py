"""Build a FilterSpec from HTTP query parameters."""

from typing import Mapping

from tvtantrum_catalog_service.filters.filter_spec import FilterSpec

# Added by the Functions host, never part of a filter
TRANSPORT_PARAMS = frozenset({"code"})


def filter_spec_from_params(params: Mapping[str, str]) -> FilterSpec:
    """
    Parse query string values into a validated FilterSpec.

    ``themes`` is a comma separated list; ``stimulationScoreRange`` and
    ``ageRange`` are JSON objects. A non-JSON ``ageRange`` such as "3-5" is
    treated as an exact ``ageGroup`` for older clients.

    Raises:
        ValidationError: On unknown parameters or malformed values
    """
    data = {
        key: value
        for key, value in params.items()
        if key not in TRANSPORT_PARAMS and value not in (None, "")
    }

    age_range = data.get("ageRange")
    if isinstance(age_range, str) and not age_range.lstrip().startswith("{"):
        data.pop("ageRange")
        data.setdefault("ageGroup", age_range)

    return FilterSpec.from_dict(data)
