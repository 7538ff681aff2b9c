# Overview: Third-party give-away items (not catalog products) and their stock ledger rows.

from __future__ import annotations

from flask import current_app
from werkzeug.datastructures import FileStorage

from ..extensions import db
from ..models import ExternalItem, Offer
from ..validation import NotFoundError, ValidationError, optional_text, parse_int, require_text
from .storage_service import ImageStore


def list_external_items() -> list[ExternalItem]:
    return db.session.query(ExternalItem).order_by(ExternalItem.item_name.asc()).all()


def get_external_item(item_id: int) -> ExternalItem:
    item = db.session.get(ExternalItem, item_id)
    if item is None:
        raise NotFoundError("External item not found")
    return item


def _nonneg(form: dict, key: str, default: int) -> int:
    raw = form.get(key)
    if raw in (None, ""):
        return default
    value = parse_int(raw, key)
    if value < 0:
        raise ValidationError(f"{key} must be >= 0")
    return value


def create_external_item(form: dict, image: FileStorage | None, store: ImageStore) -> ExternalItem:
    """
    Create an external item.

    A failed image upload does not block creation; the item is stored without an image.
    """
    name = require_text(form.get("item_name"), "Item name is required")
    quantity = _nonneg(form, "stock_quantity", 0)
    threshold = _nonneg(form, "low_stock_threshold", 50)

    image_url = None
    if image:
        try:
            image_url = store.save(image, "external-item-images")
        except (ValidationError, OSError):
            current_app.logger.exception("Failed to store external item image for %r", name)

    item = ExternalItem(
        item_name=name,
        item_description=optional_text(form.get("item_description")),
        item_image=image_url,
        stock_quantity=quantity,
        low_stock_threshold=threshold,
    )
    db.session.add(item)
    db.session.commit()
    current_app.logger.info("external_item %s created with %s units", item.id, quantity)
    return item


def delete_external_item(item_id: int) -> str:
    """Remove an item and its history. Refused while an offer gives it away."""
    item = get_external_item(item_id)
    in_use = db.session.query(Offer.id).filter(Offer.external_item_id == item.id).first()
    if in_use is not None:
        raise ValidationError("External item is used by an offer and cannot be deleted")
    name = item.item_name
    db.session.delete(item)
    db.session.commit()
    return name
