# backend/offerdesk/routes/stock.py
"""
Regular (sellable) stock routes.

- add: positive delta, no PIN
- update: absolute value, admin PIN required
- threshold: low_stock_threshold only, quantity untouched

Every quantity change writes one stock_history row in the same transaction.
"""
from flask import Blueprint, current_app

from ..decorators import json_object, require_admin_pin
from ..responses import error_response, internal_error, success_response
from ..services import ledger_service
from ..services.ledger_service import STOCK
from ..validation import NotFoundError, ValidationError, parse_reason

stock_bp = Blueprint("stock", __name__, url_prefix="/api/stock")


@stock_bp.get("")
def list_stock_route():
    return success_response([r.to_dict() for r in ledger_service.list_records(STOCK)])


@stock_bp.get("/product/<int:product_id>")
def get_product_stock_route(product_id: int):
    try:
        record = ledger_service.get_record(STOCK, product_id)
    except NotFoundError as e:
        return error_response(str(e), 404)
    return success_response(record.to_dict())


@stock_bp.post("/<int:product_id>/add")
def add_stock_route(product_id: int):
    try:
        payload = json_object()
        reason = parse_reason(payload.get("reason_type"), payload.get("reason_note"))
        change = ledger_service.add_quantity(STOCK, product_id, payload.get("quantity"), reason)
    except ValidationError as e:
        return error_response(str(e), 400)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except Exception:
        current_app.logger.exception("Failed to add stock")
        return internal_error()

    return success_response(change.record.to_dict(), "Stock added successfully")


@stock_bp.put("/<int:product_id>/update")
@require_admin_pin()
def update_stock_route(product_id: int):
    try:
        payload = json_object()
        reason = parse_reason(payload.get("reason_type"), payload.get("reason_note"))
        change = ledger_service.set_quantity(STOCK, product_id, payload.get("quantity"), reason)
    except ValidationError as e:
        return error_response(str(e), 400)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except Exception:
        current_app.logger.exception("Failed to update stock")
        return internal_error()

    return success_response(change.record.to_dict(), "Stock updated successfully")


@stock_bp.put("/<int:product_id>/threshold")
def update_threshold_route(product_id: int):
    try:
        payload = json_object()
        record = ledger_service.set_low_stock_threshold(STOCK, product_id, payload.get("low_stock_threshold"))
    except ValidationError as e:
        return error_response(str(e), 400)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except Exception:
        current_app.logger.exception("Failed to update low stock threshold")
        return internal_error()

    return success_response(record.to_dict(), "Low stock threshold updated")


@stock_bp.get("/history")
def list_stock_history_route():
    entries = ledger_service.list_history(STOCK)
    return success_response([e.to_dict(include_product=True) for e in entries])


@stock_bp.get("/history/<int:product_id>")
def product_stock_history_route(product_id: int):
    entries = ledger_service.list_history(STOCK, product_id)
    return success_response([e.to_dict() for e in entries])
