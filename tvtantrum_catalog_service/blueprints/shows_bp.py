"""Public show endpoints."""
import azure.functions as func

from tvtantrum_catalog_service.blueprints.context import app_context
from tvtantrum_catalog_service.blueprints.http_utils import (
    catalog_endpoint,
    json_response,
    not_found,
    query_int,
    route_int,
)
from tvtantrum_catalog_service.filters import filter_spec_from_params
from tvtantrum_catalog_service.repos.show_query_executor import (
    DEFAULT_POPULAR_LIMIT,
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_SIMILAR_LIMIT,
    with_sensory_defaults,
)

# Initialize blueprint
bp = func.Blueprint()

catalog_service = app_context.catalog_service


def _present(shows: list[dict]) -> list[dict]:
    return [with_sensory_defaults(show) for show in shows]


@bp.route(route="tv-shows", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
@catalog_endpoint("listing shows")
def list_tv_shows(req: func.HttpRequest) -> func.HttpResponse:
    """
    List shows matching the query string filter.

    Query Parameters:
        - search, ageGroup, sortBy, themeMatchMode, interactivityLevel,
          dialogueIntensity, limit, offset
        - themes: comma separated list
        - ageRange, stimulationScoreRange: JSON objects {"min": x, "max": y}
    """
    spec = filter_spec_from_params(req.params)
    shows = catalog_service.list_shows(spec)
    return json_response(_present(shows))


@bp.route(route="tv-shows/{show_id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
@catalog_endpoint("getting show")
def get_tv_show(req: func.HttpRequest) -> func.HttpResponse:
    """Get a single show."""
    show = catalog_service.get_show_by_id(route_int(req, "show_id"))
    if show is None:
        return not_found("Show")
    return json_response(with_sensory_defaults(show))


@bp.route(route="tv-shows/{show_id}/similar", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
@catalog_endpoint("getting similar shows")
def get_similar_tv_shows(req: func.HttpRequest) -> func.HttpResponse:
    """
    Shows similar to a show.

    Query Parameters:
        - limit: Number of shows (default: 6)
    """
    show_id = route_int(req, "show_id")
    shows = catalog_service.get_similar_shows(show_id, query_int(req, "limit", DEFAULT_SIMILAR_LIMIT))
    if shows is None:
        return not_found("Show")
    return json_response(_present(shows))


# noinspection PyUnusedLocal
@bp.route(route="shows/featured", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
@catalog_endpoint("getting featured show")
def get_featured_show(req: func.HttpRequest) -> func.HttpResponse:
    """The featured show."""
    show = catalog_service.get_featured_show()
    if show is None:
        return not_found("Featured show")
    return json_response(with_sensory_defaults(show))


@bp.route(route="shows/popular", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
@catalog_endpoint("getting popular shows")
def get_popular_shows(req: func.HttpRequest) -> func.HttpResponse:
    """Popular shows (query parameter ``limit``, default 10)."""
    shows = catalog_service.get_popular_shows(query_int(req, "limit", DEFAULT_POPULAR_LIMIT))
    return json_response(_present(shows))


@bp.route(route="search", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
@catalog_endpoint("searching shows")
def search_tv_shows(req: func.HttpRequest) -> func.HttpResponse:
    """
    Ranked show search.

    Query Parameters:
        - q: Search text (blank returns an empty list)
        - limit: Maximum results (default: 20)
    """
    term = req.params.get("q", "")
    shows = catalog_service.search_shows(term, query_int(req, "limit", DEFAULT_SEARCH_LIMIT))
    return json_response(_present(shows))


# noinspection PyUnusedLocal
@bp.route(route="themes", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
@catalog_endpoint("getting themes")
def get_themes(req: func.HttpRequest) -> func.HttpResponse:
    """Theme vocabulary."""
    return json_response(catalog_service.get_themes())


# noinspection PyUnusedLocal
@bp.route(route="themes/unique", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
@catalog_endpoint("getting unique themes")
def get_unique_themes(req: func.HttpRequest) -> func.HttpResponse:
    """Themes in use by at least one show."""
    return json_response(catalog_service.get_unique_themes())


# noinspection PyUnusedLocal
@bp.route(route="platforms", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
@catalog_endpoint("getting platforms")
def get_platforms(req: func.HttpRequest) -> func.HttpResponse:
    """Platform vocabulary."""
    return json_response(catalog_service.get_platforms())
