# Overview: Request helpers and decorators for API routes.

from functools import wraps
from flask import request

from .responses import error_response
from .services.pin_service import PinRejectedError, get_pin_gate
from .validation import ValidationError


def _request_values() -> dict:
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict() if request.form else {}


def json_object() -> dict:
    """JSON request body as a dict; a missing body reads as empty."""
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def require_admin_pin(field: str = "admin_pin", aliases: tuple = ()):
    """
    Gate a route behind the shared admin PIN.

    Runs before the handler parses or validates the body, so a wrong or
    missing PIN is always a 403 and nothing is mutated.

    Usage:
        @stock_bp.put("/<int:product_id>/update")
        @require_admin_pin()
        def update_stock_route(product_id):
            ...
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            values = _request_values()
            supplied = values.get(field)
            for alias in aliases:
                if supplied not in (None, ""):
                    break
                supplied = values.get(alias)

            try:
                get_pin_gate().require(supplied)
            except PinRejectedError as e:
                return error_response(str(e), 403)

            return f(*args, **kwargs)

        return decorated_function

    return decorator
