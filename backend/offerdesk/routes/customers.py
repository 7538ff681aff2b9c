# backend/offerdesk/routes/customers.py
"""
Customer self-signup, proximity search and the geocoding proxy.
"""
from flask import Blueprint, current_app, request

from ..decorators import json_object
from ..responses import error_response, internal_error, success_response
from ..services import customer_service
from ..services.geocoding_service import GeocodingError, get_geocoder
from ..validation import ConflictError, ValidationError, parse_float

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.post("")
def create_customer_route():
    try:
        payload = json_object()
        customer = customer_service.create_customer(payload)
    except (ValidationError, ConflictError) as e:
        return error_response(str(e), 400)
    except Exception:
        current_app.logger.exception("Failed to register customer")
        return internal_error()

    return success_response(customer.to_dict(), "Customer registered successfully", 201)


@customers_bp.get("")
def list_customers_route():
    return success_response([c.to_dict() for c in customer_service.list_customers()])


@customers_bp.get("/nearby")
def nearby_customers_route():
    args = request.args
    try:
        results = customer_service.find_nearby(args.get("latitude"), args.get("longitude"), args.get("radius"))
    except ValidationError as e:
        return error_response(str(e), 400)
    return success_response(results)


@customers_bp.get("/geocode")
def geocode_route():
    query = (request.args.get("q") or "").strip()
    if not query:
        return error_response("Query parameter q is required", 400)

    try:
        places = get_geocoder().search(query)
    except GeocodingError as e:
        current_app.logger.warning("Geocoding failed for %r: %s", query, e)
        return error_response("Geocoding service unavailable", 502)
    return success_response(places)


@customers_bp.get("/reverse-geocode")
def reverse_geocode_route():
    try:
        lat = parse_float(request.args.get("lat"), "lat")
        lng = parse_float(request.args.get("lng"), "lng")
    except ValidationError as e:
        return error_response(str(e), 400)

    try:
        place = get_geocoder().reverse(lat, lng)
    except GeocodingError as e:
        current_app.logger.warning("Reverse geocoding failed for %s,%s: %s", lat, lng, e)
        return error_response("Geocoding service unavailable", 502)

    if place is None:
        return error_response("No address found for these coordinates", 404)
    return success_response(place)
