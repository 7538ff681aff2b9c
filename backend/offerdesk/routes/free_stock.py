# backend/offerdesk/routes/free_stock.py
"""
Free (promotional) stock routes.

Same add/update contract as regular stock. Whenever free stock grows, the
response also lists inactive free-item offers that would now pass the
activation check (inactive_offers). They are reported, never activated.
"""
from flask import Blueprint, current_app

from ..decorators import json_object, require_admin_pin
from ..responses import error_response, internal_error, success_response
from ..services import ledger_service
from ..services.ledger_service import FREE_STOCK
from ..services.offers_service import find_activatable_offers
from ..validation import NotFoundError, ValidationError, parse_reason

free_stock_bp = Blueprint("free_stock", __name__, url_prefix="/api/free-stock")


def _activatable(product_id: int, change) -> list[dict]:
    if change.change_amount <= 0:
        return []
    return [o.to_summary() for o in find_activatable_offers(product_id)]


@free_stock_bp.get("")
def list_free_stock_route():
    return success_response([r.to_dict() for r in ledger_service.list_records(FREE_STOCK)])


@free_stock_bp.get("/product/<int:product_id>")
def get_product_free_stock_route(product_id: int):
    try:
        record = ledger_service.get_record(FREE_STOCK, product_id)
    except NotFoundError as e:
        return error_response(str(e), 404)
    return success_response(record.to_dict())


@free_stock_bp.post("/<int:product_id>/add")
def add_free_stock_route(product_id: int):
    try:
        payload = json_object()
        reason = parse_reason(payload.get("reason_type"), payload.get("reason_note"))
        change = ledger_service.add_quantity(FREE_STOCK, product_id, payload.get("quantity"), reason)
        inactive_offers = _activatable(product_id, change)
    except ValidationError as e:
        return error_response(str(e), 400)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except Exception:
        current_app.logger.exception("Failed to add free stock")
        return internal_error()

    message = "Free stock added successfully"
    if inactive_offers:
        message += f". {len(inactive_offers)} inactive offer(s) can now be activated"
    return success_response(change.record.to_dict(), message, inactive_offers=inactive_offers)


@free_stock_bp.put("/<int:product_id>/update")
@require_admin_pin()
def update_free_stock_route(product_id: int):
    try:
        payload = json_object()
        reason = parse_reason(payload.get("reason_type"), payload.get("reason_note"))
        change = ledger_service.set_quantity(FREE_STOCK, product_id, payload.get("quantity"), reason)
        inactive_offers = _activatable(product_id, change)
    except ValidationError as e:
        return error_response(str(e), 400)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except Exception:
        current_app.logger.exception("Failed to update free stock")
        return internal_error()

    return success_response(
        change.record.to_dict(), "Free stock updated successfully", inactive_offers=inactive_offers
    )


@free_stock_bp.get("/history")
def list_free_stock_history_route():
    entries = ledger_service.list_history(FREE_STOCK)
    return success_response([e.to_dict(include_product=True) for e in entries])


@free_stock_bp.get("/history/<int:product_id>")
def product_free_stock_history_route(product_id: int):
    entries = ledger_service.list_history(FREE_STOCK, product_id)
    return success_response([e.to_dict() for e in entries])
