# backend/offerdesk/routes/offers.py
"""
Promotional offer routes.

Creation never fails for lack of free stock: the offer is stored inactive and
the message says why. Overlapping active offers are returned as a warning.
"""
from flask import Blueprint, current_app

from ..decorators import json_object
from ..responses import error_response, internal_error, success_response
from ..services import offers_service
from ..validation import NotFoundError, ValidationError

offers_bp = Blueprint("offers", __name__, url_prefix="/api/offers")


@offers_bp.post("")
def create_offer_route():
    try:
        payload = json_object()
        created = offers_service.create_offer(payload)
    except ValidationError as e:
        return error_response(str(e), 400)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except Exception:
        current_app.logger.exception("Failed to create offer")
        return internal_error()

    return success_response(created.offer.to_dict(), created.message, 201, overlaps=created.overlaps)


@offers_bp.get("")
def list_offers_route():
    return success_response([o.to_dict() for o in offers_service.list_offers()])


@offers_bp.get("/<int:offer_id>")
def get_offer_route(offer_id: int):
    try:
        offer = offers_service.get_offer(offer_id)
    except NotFoundError as e:
        return error_response(str(e), 404)
    return success_response(offer.to_dict())


@offers_bp.put("/<int:offer_id>")
def toggle_offer_route(offer_id: int):
    try:
        payload = json_object()
        offer = offers_service.set_offer_active(offer_id, payload.get("is_active"))
    except ValidationError as e:
        return error_response(str(e), 400)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except Exception:
        current_app.logger.exception("Failed to update offer")
        return internal_error()

    state = "activated" if offer.is_active else "deactivated"
    return success_response(offer.to_dict(), f"Offer {state} successfully")


@offers_bp.delete("/<int:offer_id>")
def delete_offer_route(offer_id: int):
    try:
        offers_service.delete_offer(offer_id)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except Exception:
        current_app.logger.exception("Failed to delete offer")
        return internal_error()
    return success_response(message="Offer deleted successfully")


@offers_bp.get("/check-overlaps/<int:product_id>")
def check_overlaps_route(product_id: int):
    try:
        overlaps = offers_service.find_overlaps(product_id)
    except NotFoundError as e:
        return error_response(str(e), 404)
    return success_response(overlaps, has_overlaps=bool(overlaps))
