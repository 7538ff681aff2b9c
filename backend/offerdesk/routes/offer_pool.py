# backend/offerdesk/routes/offer_pool.py
"""
Offer pool routes.

Transfer and deduct require the admin PIN. A transfer moves units from the
pool into the product's regular or free stock in one transaction; a deduct
writes units off without touching any stock ledger.
"""
from flask import Blueprint, current_app

from ..decorators import json_object, require_admin_pin
from ..responses import error_response, internal_error, success_response
from ..services import offer_pool_service
from ..services.offers_service import find_activatable_offers
from ..validation import NotFoundError, ValidationError

offer_pool_bp = Blueprint("offer_pool", __name__, url_prefix="/api/offer-pool")


@offer_pool_bp.get("")
def list_pools_route():
    return success_response([p.to_dict() for p in offer_pool_service.list_pools()])


@offer_pool_bp.get("/<int:pool_id>")
def get_pool_route(pool_id: int):
    try:
        pool = offer_pool_service.get_pool(pool_id)
    except NotFoundError as e:
        return error_response(str(e), 404)
    return success_response(pool.to_dict())


@offer_pool_bp.get("/history/<int:pool_id>")
def pool_history_route(pool_id: int):
    entries = offer_pool_service.list_pool_history(pool_id)
    return success_response([e.to_dict() for e in entries])


@offer_pool_bp.post("/<int:pool_id>/transfer")
@require_admin_pin()
def transfer_route(pool_id: int):
    try:
        payload = json_object()
        destination = payload.get("transfer_to")
        movement = offer_pool_service.transfer(pool_id, payload.get("quantity"), destination)
        inactive_offers = []
        if destination == "free":
            inactive_offers = [o.to_summary() for o in find_activatable_offers(movement.pool.product_id)]
    except ValidationError as e:
        return error_response(str(e), 400)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except Exception:
        current_app.logger.exception("Failed to transfer from offer pool")
        return internal_error()

    return success_response(
        movement.pool.to_dict(),
        f"Transferred {movement.quantity} items to {destination} stock",
        inactive_offers=inactive_offers,
    )


@offer_pool_bp.post("/<int:pool_id>/deduct")
@require_admin_pin()
def deduct_route(pool_id: int):
    try:
        payload = json_object()
        movement = offer_pool_service.deduct(pool_id, payload.get("quantity"), payload.get("reason"))
    except ValidationError as e:
        return error_response(str(e), 400)
    except NotFoundError as e:
        return error_response(str(e), 404)
    except Exception:
        current_app.logger.exception("Failed to deduct from offer pool")
        return internal_error()

    return success_response(movement.pool.to_dict(), f"Deducted {movement.quantity} items from pool")
