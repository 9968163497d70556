"""Public homepage category endpoints."""
import azure.functions as func

from tvtantrum_catalog_service.blueprints.context import app_context
from tvtantrum_catalog_service.blueprints.http_utils import catalog_endpoint, json_response, not_found, route_int
from tvtantrum_catalog_service.repos.show_query_executor import with_sensory_defaults

# Initialize blueprint
bp = func.Blueprint()

catalog_service = app_context.catalog_service


# noinspection PyUnusedLocal
@bp.route(route="homepage-categories", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
@catalog_endpoint("getting homepage categories")
def get_homepage_categories(req: func.HttpRequest) -> func.HttpResponse:
    """Active homepage categories in display order, with show counts."""
    return json_response(catalog_service.get_homepage_categories())


@bp.route(route="homepage-categories/{category_id}/shows", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
@catalog_endpoint("getting category shows")
def get_category_shows(req: func.HttpRequest) -> func.HttpResponse:
    """Shows matching a category's filter config."""
    shows = catalog_service.resolve_category(route_int(req, "category_id"))
    if shows is None:
        return not_found("Category")
    return json_response([with_sensory_defaults(show) for show in shows])
