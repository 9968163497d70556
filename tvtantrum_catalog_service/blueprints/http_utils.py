"""Response helpers and error mapping shared by the blueprints."""
import functools
import json
import logging
from typing import Any, Callable

import azure.functions as func

from tvtantrum_catalog_service.blueprints import context
from tvtantrum_catalog_service.errors import CapacityError, StorageUnavailableError, ValidationError

logger = logging.getLogger(__name__)


def json_response(body: Any, status_code: int = 200, headers: dict | None = None) -> func.HttpResponse:
    """Serialize body as a JSON response."""
    return func.HttpResponse(
        json.dumps(body, default=str),  # default=str handles datetime
        status_code=status_code,
        mimetype="application/json",
        headers=headers,
    )


def error_response(message: str, status_code: int, headers: dict | None = None) -> func.HttpResponse:
    return json_response({"error": message}, status_code=status_code, headers=headers)


def not_found(what: str) -> func.HttpResponse:
    return error_response(f"{what} not found", 404)


def route_int(req: func.HttpRequest, name: str) -> int:
    """Integer route parameter, or ValidationError."""
    value = req.route_params.get(name)
    if not value:
        raise ValidationError(f"{name} is required", field=name)
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer", field=name) from None


def query_int(req: func.HttpRequest, name: str, default: int | None) -> int | None:
    """Optional integer query parameter, or ValidationError."""
    value = req.params.get(name)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer", field=name) from None


def json_body(req: func.HttpRequest) -> Any:
    """Parsed JSON request body, or ValidationError."""
    try:
        return req.get_json()
    except ValueError:
        raise ValidationError("Request body must be valid JSON") from None


def catalog_endpoint(action: str) -> Callable:
    """
    Admit a handler through the request gate and map errors to responses.

    ValidationError -> 400, CapacityError -> 503 with Retry-After,
    StorageUnavailableError -> 503, anything else -> 500 (logged).

    Args:
        action: Short description used in error logs, e.g. "listing shows"
    """
    def decorator(handler: Callable[[func.HttpRequest], func.HttpResponse]):
        @functools.wraps(handler)
        def wrapper(req: func.HttpRequest) -> func.HttpResponse:
            try:
                with context.app_context.request_gate.admit():
                    return handler(req)
            except ValidationError as e:
                body = {"error": str(e)}
                if e.field:
                    body["field"] = e.field
                return json_response(body, status_code=400)
            except CapacityError as e:
                return error_response(str(e), 503, headers={"Retry-After": str(e.retry_after)})
            except StorageUnavailableError as e:
                logger.error(f"Storage unavailable while {action}: {str(e)}")
                return error_response("Service temporarily unavailable", 503)
            except Exception as e:
                logger.error(f"Error {action}: {str(e)}", exc_info=True)
                return error_response("Internal server error", 500)

        return wrapper

    return decorator
