# Overview: Retailer sign-up records and proximity search.

from __future__ import annotations

import math
import re

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import Customer
from ..validation import ConflictError, ValidationError, optional_text, parse_float

GST_PATTERN = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z]{1}[1-9A-Z]{1}Z[0-9A-Z]{1}$")
MOBILE_PATTERN = re.compile(r"^[6-9]\d{9}$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

EARTH_RADIUS_METERS = 6371000.0
DEFAULT_RADIUS_METERS = 5000

REQUIRED_FIELDS = (
    "customer_name",
    "business_name",
    "contact_number",
    "street_address",
    "latitude",
    "longitude",
    "gst_number",
    "food_licence_number",
)


def distance_meters(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle (haversine) distance in metres."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(a)))


def bounding_box(latitude: float, longitude: float, radius_m: float) -> dict:
    """Coarse lat/lng window around a point, used to prefilter rows in SQL."""
    delta_lat = math.degrees(radius_m / EARTH_RADIUS_METERS)
    cos_lat = max(math.cos(math.radians(latitude)), 1e-6)
    delta_lon = math.degrees(radius_m / EARTH_RADIUS_METERS) / cos_lat
    return {
        "min_lat": latitude - delta_lat,
        "max_lat": latitude + delta_lat,
        "min_lon": longitude - delta_lon,
        "max_lon": longitude + delta_lon,
    }


def _clean_phone(raw) -> str:
    phone = str(raw).strip()
    # Separators are ignored for the check; the number is stored as entered
    if not MOBILE_PATTERN.match(re.sub(r"\D", "", phone)):
        raise ValidationError("Invalid contact number. Enter a 10-digit Indian mobile number")
    return phone


def _coordinate(value, field: str, limit: float) -> float:
    number = parse_float(value, field)
    if not math.isfinite(number) or abs(number) > limit:
        raise ValidationError(f"{field} is out of range")
    return number


def _ensure_unique(column, value, message: str) -> None:
    if value is None:
        return
    if db.session.query(Customer.id).filter(column == value).first() is not None:
        raise ConflictError(message)


def create_customer(payload: dict) -> Customer:
    missing = [f for f in REQUIRED_FIELDS if payload.get(f) in (None, "")]
    if missing:
        raise ValidationError("All required fields must be filled")

    gst = str(payload["gst_number"]).strip().upper()
    if not GST_PATTERN.match(gst):
        raise ValidationError("Invalid GST number format")

    licence = str(payload["food_licence_number"]).strip().upper()
    email = optional_text(payload.get("email"))
    if email is not None:
        email = email.lower()
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Invalid email address")

    customer = Customer(
        customer_name=str(payload["customer_name"]).strip(),
        business_name=str(payload["business_name"]).strip(),
        contact_number=_clean_phone(payload["contact_number"]),
        street_address=str(payload["street_address"]).strip(),
        latitude=_coordinate(payload["latitude"], "latitude", 90),
        longitude=_coordinate(payload["longitude"], "longitude", 180),
        gst_number=gst,
        food_licence_number=licence,
        email=email,
    )

    _ensure_unique(Customer.gst_number, gst, "GST number already registered")
    _ensure_unique(Customer.food_licence_number, licence, "Food licence number already registered")
    _ensure_unique(func.lower(Customer.email), email, "Email already registered")

    db.session.add(customer)
    db.session.commit()
    current_app.logger.info("customer %s registered (%s)", customer.id, customer.business_name)
    return customer


def list_customers() -> list[Customer]:
    return db.session.query(Customer).order_by(Customer.created_at.desc(), Customer.id.desc()).all()


def find_nearby(latitude, longitude, radius=None) -> list[dict]:
    """Customers within radius metres of a point, nearest first."""
    lat = _coordinate(latitude, "latitude", 90)
    lng = _coordinate(longitude, "longitude", 180)
    radius_m = DEFAULT_RADIUS_METERS if radius in (None, "") else parse_float(radius, "radius")
    if radius_m <= 0:
        raise ValidationError("radius must be greater than 0")

    box = bounding_box(lat, lng, radius_m)
    candidates = (
        db.session.query(Customer)
        .filter(
            Customer.latitude.between(box["min_lat"], box["max_lat"]),
            Customer.longitude.between(box["min_lon"], box["max_lon"]),
        )
        .all()
    )

    results = []
    for customer in candidates:
        distance = distance_meters(lat, lng, customer.latitude, customer.longitude)
        if distance <= radius_m:
            row = customer.to_dict()
            row["distance_meters"] = round(distance, 1)
            results.append(row)
    results.sort(key=lambda r: r["distance_meters"])
    return results
