"""Public research endpoints."""
import azure.functions as func

from tvtantrum_catalog_service.blueprints.context import app_context
from tvtantrum_catalog_service.blueprints.http_utils import (
    catalog_endpoint,
    json_response,
    not_found,
    query_int,
    route_int,
)

# Initialize blueprint
bp = func.Blueprint()

catalog_service = app_context.catalog_service


@bp.route(route="research", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
@catalog_endpoint("getting research summaries")
def get_research_summaries(req: func.HttpRequest) -> func.HttpResponse:
    """
    Research summaries, newest first.

    Query Parameters:
        - category: Only this category
        - limit: Maximum results
    """
    category = req.params.get("category") or None
    summaries = catalog_service.get_research_summaries(category, query_int(req, "limit", None))
    return json_response(summaries)


@bp.route(route="research/{research_id}", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
@catalog_endpoint("getting research summary")
def get_research_summary(req: func.HttpRequest) -> func.HttpResponse:
    """A single research summary."""
    summary = catalog_service.get_research_summary(route_int(req, "research_id"))
    if summary is None:
        return not_found("Research summary")
    return json_response(summary)
