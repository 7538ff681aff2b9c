# backend/offerdesk/routes/external_items.py
"""
External (non-catalog) give-away items and their stock ledger.
"""
from flask import Blueprint, current_app, request

from ..decorators import json_object, require_admin_pin
from ..responses import error_response, internal_error, success_response
from ..services import external_items_service, ledger_service
from ..services.ledger_service import EXTERNAL_ITEM
from ..services.storage_service import get_image_store
from ..validation import NotFoundError, ValidationError, parse_reason

external_items_bp = Blueprint("external_items", __name__, url_prefix="/api/external-items")


@external_items_bp.post("")
def create_external_item_route():
    try:
        item = external_items_service.create_external_item(
            request.form, request.files.get("item_image"), get_image_store()
        )
    except ValidationError as e:
        return error_response(str(e), 400)
    except Exception:
        current_app.logger.exception("Failed to create external item")
        return internal_error()
    return success_response(item.to_dict(), "External item added successfully", 201)


@external_items_bp.get("")
def list_external_items_route():
    return success_response([i.to_dict() for i in external_items_service.list_external_items()])


@external_items_bp.get("/<int:item_id>")
def get_external_item_route(item_id: int):
    try:
        item = external_items_service.get_external_item(item_id)
    except NotFoundError as e:
        return error_response(str(e), 404)
    return success_response(item.to_dict())


@external_items_bp.post("/<int:item_id>/add")
def add_external_item_stock_route(item_id: int):
    try:
        payload = json_object()
        reason = parse_reason(payload.get("reason_type"), payload.get("reason_note"))
        change = ledger_service.add_quantity(EXTERNAL_ITEM, item_id, payload.get("quantity"), reason)
    except ValidationError as e:
        return error_response(str(e), 400)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except Exception:
        current_app.logger.exception("Failed to add external item stock")
        return internal_error()

    return success_response(change.record.to_dict(), "Stock added successfully")


@external_items_bp.put("/<int:item_id>/update")
@require_admin_pin()
def update_external_item_stock_route(item_id: int):
    try:
        payload = json_object()
        reason = parse_reason(payload.get("reason_type"), payload.get("reason_note"))
        change = ledger_service.set_quantity(EXTERNAL_ITEM, item_id, payload.get("quantity"), reason)
    except ValidationError as e:
        return error_response(str(e), 400)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except Exception:
        current_app.logger.exception("Failed to update external item stock")
        return internal_error()

    return success_response(change.record.to_dict(), "Stock updated successfully")


@external_items_bp.get("/history/<int:item_id>")
def external_item_history_route(item_id: int):
    entries = ledger_service.list_history(EXTERNAL_ITEM, item_id)
    return success_response([e.to_dict() for e in entries])


@external_items_bp.delete("/<int:item_id>")
@require_admin_pin()
def delete_external_item_route(item_id: int):
    try:
        name = external_items_service.delete_external_item(item_id)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except ValidationError as e:
        return error_response(str(e), 400)
    except Exception:
        current_app.logger.exception("Failed to delete external item")
        return internal_error()
    return success_response(message=f'External item "{name}" deleted successfully')
