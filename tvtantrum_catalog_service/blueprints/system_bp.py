"""Health and monitoring endpoints."""
import azure.functions as func
import json

from tvtantrum_catalog_service.blueprints.context import app_context
from tvtantrum_catalog_service.blueprints.http_utils import catalog_endpoint, json_response

# Initialize blueprint
bp = func.Blueprint()

catalog_service = app_context.catalog_service


# noinspection PyUnusedLocal
@bp.route(route="health", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
def health_check(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint."""
    return func.HttpResponse(
        json.dumps({
            "status": "healthy",
            "service": "tvtantrum-catalog-service",
            "version": "1.0.0"
        }),
        status_code=200,
        mimetype="application/json"
    )


# noinspection PyUnusedLocal
@bp.route(route="cache/stats", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
@catalog_endpoint("getting cache stats")
def get_cache_stats(req: func.HttpRequest) -> func.HttpResponse:
    """Cache counters and in-flight request count."""
    stats = catalog_service.get_cache_stats()
    stats["activeRequests"] = app_context.request_gate.active
    return json_response(stats)
