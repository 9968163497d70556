"""Admin endpoints for shows, homepage categories and research."""
import azure.functions as func

from tvtantrum_catalog_service.blueprints.context import app_context
from tvtantrum_catalog_service.blueprints.http_utils import (
    catalog_endpoint,
    json_body,
    json_response,
    not_found,
    route_int,
)
from tvtantrum_catalog_service.errors import ValidationError

# Initialize blueprint
bp = func.Blueprint()

admin_service = app_context.admin_service
catalog_service = app_context.catalog_service


def _deleted(deleted: bool, what: str) -> func.HttpResponse:
    if not deleted:
        return not_found(what)
    return json_response({"deleted": True})


# ===== SHOWS =====

@bp.route(route="admin/tv-shows", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
@catalog_endpoint("creating show")
def admin_create_show(req: func.HttpRequest) -> func.HttpResponse:
    """Create a show from a camelCase JSON body."""
    show = admin_service.create_show(json_body(req))
    return json_response(show, status_code=201)


@bp.route(route="admin/tv-shows/{show_id}", methods=["PUT"], auth_level=func.AuthLevel.FUNCTION)
@catalog_endpoint("updating show")
def admin_update_show(req: func.HttpRequest) -> func.HttpResponse:
    """Apply a partial update to a show."""
    show = admin_service.update_show(route_int(req, "show_id"), json_body(req))
    if show is None:
        return not_found("Show")
    return json_response(show)


@bp.route(route="admin/tv-shows/{show_id}", methods=["DELETE"], auth_level=func.AuthLevel.FUNCTION)
@catalog_endpoint("deleting show")
def admin_delete_show(req: func.HttpRequest) -> func.HttpResponse:
    """Delete a show."""
    return _deleted(admin_service.delete_show(route_int(req, "show_id")), "Show")


@bp.route(route="admin/tv-shows/{show_id}/featured", methods=["PUT"], auth_level=func.AuthLevel.FUNCTION)
@catalog_endpoint("setting featured show")
def admin_set_featured_show(req: func.HttpRequest) -> func.HttpResponse:
    """Make a show the only featured show."""
    show = admin_service.set_featured_show(route_int(req, "show_id"))
    if show is None:
        return not_found("Show")
    return json_response(show)


# ===== HOMEPAGE CATEGORIES =====

# noinspection PyUnusedLocal
@bp.route(route="admin/homepage-categories", methods=["GET"], auth_level=func.AuthLevel.FUNCTION)
@catalog_endpoint("getting all homepage categories")
def admin_get_categories(req: func.HttpRequest) -> func.HttpResponse:
    """All categories, including inactive ones, with show counts."""
    return json_response(catalog_service.get_all_homepage_categories())


@bp.route(route="admin/homepage-categories", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
@catalog_endpoint("creating homepage category")
def admin_create_category(req: func.HttpRequest) -> func.HttpResponse:
    """Create a category."""
    category = admin_service.create_category(json_body(req))
    return json_response(category, status_code=201)


@bp.route(route="admin/homepage-categories/order", methods=["PUT"], auth_level=func.AuthLevel.FUNCTION)
@catalog_endpoint("reordering homepage categories")
def admin_reorder_categories(req: func.HttpRequest) -> func.HttpResponse:
    """
    Reorder categories.

    Body: {"order": [category_id, ...]}, first id is shown first.
    """
    body = json_body(req)
    if not isinstance(body, dict) or "order" not in body:
        raise ValidationError("Body must be an object with an order list", field="order")
    return json_response(admin_service.reorder_categories(body["order"]))


@bp.route(route="admin/homepage-categories/{category_id}", methods=["PUT"], auth_level=func.AuthLevel.FUNCTION)
@catalog_endpoint("updating homepage category")
def admin_update_category(req: func.HttpRequest) -> func.HttpResponse:
    """Apply a partial update to a category."""
    category = admin_service.update_category(route_int(req, "category_id"), json_body(req))
    if category is None:
        return not_found("Category")
    return json_response(category)


@bp.route(route="admin/homepage-categories/{category_id}", methods=["DELETE"], auth_level=func.AuthLevel.FUNCTION)
@catalog_endpoint("deleting homepage category")
def admin_delete_category(req: func.HttpRequest) -> func.HttpResponse:
    """Delete a category."""
    return _deleted(admin_service.delete_category(route_int(req, "category_id")), "Category")


# ===== RESEARCH =====

@bp.route(route="admin/research", methods=["POST"], auth_level=func.AuthLevel.FUNCTION)
@catalog_endpoint("creating research summary")
def admin_create_research(req: func.HttpRequest) -> func.HttpResponse:
    """Create a research summary."""
    research = admin_service.create_research(json_body(req))
    return json_response(research, status_code=201)


@bp.route(route="admin/research/{research_id}", methods=["PUT"], auth_level=func.AuthLevel.FUNCTION)
@catalog_endpoint("updating research summary")
def admin_update_research(req: func.HttpRequest) -> func.HttpResponse:
    """Apply a partial update to a research summary."""
    research = admin_service.update_research(route_int(req, "research_id"), json_body(req))
    if research is None:
        return not_found("Research summary")
    return json_response(research)


@bp.route(route="admin/research/{research_id}", methods=["DELETE"], auth_level=func.AuthLevel.FUNCTION)
@catalog_endpoint("deleting research summary")
def admin_delete_research(req: func.HttpRequest) -> func.HttpResponse:
    """Delete a research summary."""
    return _deleted(admin_service.delete_research(route_int(req, "research_id")), "Research summary")
