# Overview: Offer creation, activation checks, overlap warnings and toggling.

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from flask import current_app
from sqlalchemy import or_, and_

from ..extensions import db
from ..models import Offer, OfferPool, Product, Company, ExternalItem, FreeStockRecord
from ..models.offers import OFFER_TYPES, FREE_ITEM_TYPES, DISCOUNT_TYPES
from ..validation import (
    NotFoundError,
    ValidationError,
    optional_text,
    parse_bool,
    parse_decimal,
    parse_int,
)
"""
Offer activation rules (authoritative)

- Only free_item offers are stock-checked, and only at creation.
- Stock subject: same_product -> the offer's product; different_product -> the
  free-item product; external -> none (always eligible).
- Eligible iff free_stock_quantity - allocated_to_offers > 0 for the subject.
- A request for is_active=true that fails the check stores the offer inactive
  with an explanatory message; creation itself never fails for lack of stock.
- After free stock grows, matching inactive offers are reported, never auto-activated.
"""


@dataclass
class OfferCreation:
    offer: Offer
    message: str
    overlaps: list[dict] = field(default_factory=list)


def _stock_subject_id(offer: Offer) -> int | None:
    if offer.free_item_type == "same_product":
        return offer.product_id
    if offer.free_item_type == "different_product":
        return offer.free_item_product_id
    return None


def available_free_stock(product_id: int) -> int:
    record = db.session.query(FreeStockRecord).filter_by(product_id=product_id).first()
    return record.available if record else 0


def can_activate(offer: Offer) -> bool:
    """Whether a free_item offer has free stock to give away. Discount offers always pass."""
    if offer.offer_type != "free_item":
        return True
    if offer.free_item_type == "external":
        return True
    subject_id = _stock_subject_id(offer)
    if subject_id is None:
        return False
    return available_free_stock(subject_id) > 0


def find_activatable_offers(product_id: int) -> list[Offer]:
    """Inactive free_item offers touching product_id that would now pass can_activate."""
    candidates = (
        db.session.query(Offer)
        .filter(
            Offer.offer_type == "free_item",
            Offer.is_active.is_(False),
            or_(Offer.product_id == product_id, Offer.free_item_product_id == product_id),
        )
        .order_by(Offer.id.asc())
        .all()
    )
    return [o for o in candidates if can_activate(o)]


def find_overlaps(product_id: int, *, exclude_offer_id: int | None = None) -> list[dict]:
    """
    Active offers that already apply to product_id.

    Covers offers on the product, offers giving the product away, and
    company-wide offers of the product's company. Read-only; never blocks.
    """
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")

    q = db.session.query(Offer).filter(
        Offer.is_active.is_(True),
        or_(
            Offer.product_id == product_id,
            Offer.free_item_product_id == product_id,
            and_(Offer.product_id.is_(None), Offer.company_id == product.company_id),
        ),
    )
    if exclude_offer_id is not None:
        q = q.filter(Offer.id != exclude_offer_id)

    overlaps = []
    for offer in q.order_by(Offer.created_at.desc(), Offer.id.desc()).all():
        summary = offer.to_summary()
        summary["role"] = "free_item" if offer.free_item_product_id == product_id else "primary"
        overlaps.append(summary)
    return overlaps


def list_offers() -> list[Offer]:
    return db.session.query(Offer).order_by(Offer.created_at.desc(), Offer.id.desc()).all()


def get_offer(offer_id: int) -> Offer:
    offer = db.session.get(Offer, offer_id)
    if offer is None:
        raise NotFoundError("Offer not found")
    return offer


def _apply_scope(offer: Offer, payload: dict) -> None:
    product_id = payload.get("product_id")
    company_id = payload.get("company_id")

    if product_id not in (None, ""):
        product = db.session.get(Product, parse_int(product_id, "product_id"))
        if product is None:
            raise ValidationError("Product not found")
        offer.product_id = product.id
        offer.company_id = product.company_id
        return

    if company_id in (None, ""):
        raise ValidationError("Either product_id or company_id is required")
    company = db.session.get(Company, parse_int(company_id, "company_id"))
    if company is None:
        raise ValidationError("Company not found")
    offer.company_id = company.id


def _apply_free_item(offer: Offer, payload: dict) -> None:
    free_item_type = payload.get("free_item_type")
    if free_item_type not in FREE_ITEM_TYPES:
        raise ValidationError(f"free_item_type must be one of {', '.join(FREE_ITEM_TYPES)}")
    offer.free_item_type = free_item_type

    qty = payload.get("free_item_quantity")
    offer.free_item_quantity = parse_int(qty, "free_item_quantity") if qty not in (None, "") else 1
    if offer.free_item_quantity <= 0:
        raise ValidationError("free_item_quantity must be greater than 0")

    if free_item_type == "same_product":
        if offer.product_id is None:
            raise ValidationError("same_product offers need a product")

    elif free_item_type == "different_product":
        raw = payload.get("free_item_product_id")
        if raw in (None, ""):
            raise ValidationError("free_item_product_id is required for different_product offers")
        free_product = db.session.get(Product, parse_int(raw, "free_item_product_id"))
        if free_product is None:
            raise ValidationError("Free item product not found")
        offer.free_item_product_id = free_product.id

    else:
        raw_item = payload.get("external_item_id")
        item = None
        if raw_item not in (None, ""):
            item = db.session.get(ExternalItem, parse_int(raw_item, "external_item_id"))
            if item is None:
                raise ValidationError("External item not found")
            offer.external_item_id = item.id
        name = optional_text(payload.get("free_item_external_name")) or (item.item_name if item else None)
        if not name:
            raise ValidationError("free_item_external_name is required for external offers")
        offer.free_item_external_name = name
        offer.free_item_external_description = (
            optional_text(payload.get("free_item_external_description"))
            or (item.item_description if item else None)
        )


def _apply_discount(offer: Offer, payload: dict) -> None:
    discount_type = payload.get("discount_type")
    if discount_type not in DISCOUNT_TYPES:
        raise ValidationError(f"discount_type must be one of {', '.join(DISCOUNT_TYPES)}")
    value = parse_decimal(payload.get("discount_value"), "discount_value", required=True)
    if value <= 0:
        raise ValidationError("discount_value must be greater than 0")
    if discount_type == "percentage" and value > Decimal("100"):
        raise ValidationError("percentage discount cannot exceed 100")
    offer.discount_type = discount_type
    offer.discount_value = value


def create_offer(payload: dict) -> OfferCreation:
    """
    Validate and store an offer; free_item offers also get their pool.

    Requested activation is downgraded when the activation check fails.
    """
    offer_type = payload.get("offer_type")
    if offer_type not in OFFER_TYPES:
        raise ValidationError(f"offer_type must be one of {', '.join(OFFER_TYPES)}")

    offer = Offer(offer_type=offer_type)
    _apply_scope(offer, payload)
    offer.min_product_weight = parse_decimal(payload.get("min_product_weight"), "min_product_weight")
    offer.min_product_mrp = parse_decimal(payload.get("min_product_mrp"), "min_product_mrp")

    if offer_type == "free_item":
        _apply_free_item(offer, payload)
    else:
        _apply_discount(offer, payload)

    requested_active = parse_bool(payload.get("is_active"), default=True)
    message = "Offer added successfully"
    offer.is_active = requested_active
    if requested_active and not can_activate(offer):
        offer.is_active = False
        message = (
            "Offer saved as inactive: no free stock available for the free item. "
            "Add free stock, then activate the offer."
        )

    if offer_type == "free_item":
        pool_product_id = _stock_subject_id(offer)
        offer.pool = OfferPool(product_id=pool_product_id)

    try:
        db.session.add(offer)
        db.session.flush()
        overlaps = find_overlaps(offer.product_id, exclude_offer_id=offer.id) if offer.product_id else []
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("offer %s created (type=%s, active=%s)", offer.id, offer.offer_type, offer.is_active)
    return OfferCreation(offer=offer, message=message, overlaps=overlaps)


def set_offer_active(offer_id: int, is_active) -> Offer:
    if is_active is None:
        raise ValidationError("is_active is required")
    offer = get_offer(offer_id)
    offer.is_active = parse_bool(is_active)
    db.session.commit()
    return offer


def delete_offer(offer_id: int) -> None:
    offer = get_offer(offer_id)
    db.session.delete(offer)
    db.session.commit()
