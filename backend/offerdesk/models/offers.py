from __future__ import annotations

from ..extensions import db
from offerdesk.time_utils import to_utc_z, utcnow


OFFER_TYPES = ("free_item", "discount")
FREE_ITEM_TYPES = ("same_product", "different_product", "external")
DISCOUNT_TYPES = ("fixed", "percentage")


def _number(value):
    return float(value) if value is not None else None


class Offer(db.Model):
    """
    Promotional offer.

    Scope: product_id set -> product offer; product_id NULL -> company-wide
    offer for company_id. free_item offers own exactly one OfferPool.
    """
    __tablename__ = "offers"
    __table_args__ = (
        db.Index("ix_offers_product_active", "product_id", "is_active"),
        db.Index("ix_offers_free_product_active", "free_item_product_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    offer_type = db.Column(db.String(16), nullable=False)  # free_item, discount

    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=True)
    company_id = db.Column(db.Integer, db.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)

    min_product_weight = db.Column(db.Numeric(10, 3), nullable=True)
    min_product_mrp = db.Column(db.Numeric(12, 2), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    # free_item fields
    free_item_type = db.Column(db.String(32), nullable=True)  # same_product, different_product, external
    free_item_product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=True)
    external_item_id = db.Column(db.Integer, db.ForeignKey("external_items.id"), nullable=True, index=True)
    free_item_external_name = db.Column(db.String(255), nullable=True)
    free_item_external_description = db.Column(db.Text, nullable=True)
    free_item_quantity = db.Column(db.Integer, nullable=True)

    # discount fields
    discount_type = db.Column(db.String(16), nullable=True)  # fixed, percentage
    discount_value = db.Column(db.Numeric(12, 2), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    product = db.relationship("Product", back_populates="offers", foreign_keys=[product_id])
    free_item_product = db.relationship("Product", back_populates="free_item_offers", foreign_keys=[free_item_product_id])
    company = db.relationship("Company", back_populates="offers", foreign_keys=[company_id])
    external_item = db.relationship("ExternalItem")
    pool = db.relationship("OfferPool", back_populates="offer", uselist=False, cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Offer id={self.id} type={self.offer_type} product_id={self.product_id} active={self.is_active}>"

    def free_item_description(self) -> str | None:
        if self.offer_type != "free_item":
            return None
        qty = self.free_item_quantity or 1
        if self.free_item_type == "same_product":
            name = self.product.product_name if self.product else "same product"
        elif self.free_item_type == "different_product":
            name = self.free_item_product.product_name if self.free_item_product else "product"
        else:
            name = self.free_item_external_name or "external item"
        return f"{qty} x {name} free"

    def discount_description(self) -> str | None:
        if self.offer_type != "discount" or self.discount_value is None:
            return None
        value = _number(self.discount_value)
        if self.discount_type == "percentage":
            return f"{value:g}% off"
        return f"Rs. {value:g} off"

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "offer_type": self.offer_type,
            "scope": "product" if self.product_id else "company",
            "product_id": self.product_id,
            "company_id": self.company_id,
            "min_product_weight": _number(self.min_product_weight),
            "min_product_mrp": _number(self.min_product_mrp),
            "free_item_description": self.free_item_description(),
            "discount_description": self.discount_description(),
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "offer_type": self.offer_type,
            "product_id": self.product_id,
            "company_id": self.company_id,
            "min_product_weight": _number(self.min_product_weight),
            "min_product_mrp": _number(self.min_product_mrp),
            "is_active": self.is_active,
            "free_item_type": self.free_item_type,
            "free_item_product_id": self.free_item_product_id,
            "external_item_id": self.external_item_id,
            "free_item_external_name": self.free_item_external_name,
            "free_item_external_description": self.free_item_external_description,
            "free_item_quantity": self.free_item_quantity,
            "discount_type": self.discount_type,
            "discount_value": _number(self.discount_value),
            "product_name": self.product.product_name if self.product else None,
            "company_name": self.company.company_name if self.company else None,
            "offer_pool_id": self.pool.id if self.pool else None,
            "created_at": to_utc_z(self.created_at),
        }


class OfferPool(db.Model):
    """
    Unclaimed free-item units of one free_item offer.

    product_id is the product whose ledgers receive transferred units;
    NULL for external give-aways (deduct only).
    """
    __tablename__ = "offer_pool"
    __table_args__ = (
        db.CheckConstraint("accumulated_quantity >= 0", name="ck_offer_pool_accumulated_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    offer_id = db.Column(
        db.Integer, db.ForeignKey("offers.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=True, index=True)

    accumulated_quantity = db.Column(db.Integer, nullable=False, default=0)
    total_transferred_to_regular = db.Column(db.Integer, nullable=False, default=0)
    total_transferred_to_free = db.Column(db.Integer, nullable=False, default=0)
    total_deducted = db.Column(db.Integer, nullable=False, default=0)
    last_updated = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    offer = db.relationship("Offer", back_populates="pool")
    product = db.relationship("Product")
    history = db.relationship(
        "OfferPoolHistory",
        back_populates="pool",
        cascade="all, delete-orphan",
        order_by="OfferPoolHistory.id.desc()",
    )

    def __repr__(self) -> str:
        return f"<OfferPool id={self.id} offer_id={self.offer_id} accumulated={self.accumulated_quantity}>"

    def to_dict(self) -> dict:
        offer = self.offer
        return {
            "id": self.id,
            "offer_id": self.offer_id,
            "product_id": self.product_id,
            "accumulated_quantity": self.accumulated_quantity,
            "total_transferred_to_regular": self.total_transferred_to_regular,
            "total_transferred_to_free": self.total_transferred_to_free,
            "total_deducted": self.total_deducted,
            "last_updated": to_utc_z(self.last_updated),
            "offer": {
                "id": offer.id,
                "product_id": offer.product_id,
                "min_product_weight": _number(offer.min_product_weight),
                "min_product_mrp": _number(offer.min_product_mrp),
                "free_item_type": offer.free_item_type,
                "free_item_quantity": offer.free_item_quantity,
                "is_active": offer.is_active,
            } if offer else None,
            "product": self.product.to_summary() if self.product else None,
        }


class OfferPoolHistory(db.Model):
    __tablename__ = "offer_pool_history"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    offer_pool_id = db.Column(
        db.Integer, db.ForeignKey("offer_pool.id", ondelete="CASCADE"), nullable=False, index=True
    )
    action_type = db.Column(db.String(32), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.Text, nullable=True)
    admin_pin_used = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    pool = db.relationship("OfferPool", back_populates="history")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "offer_pool_id": self.offer_pool_id,
            "action_type": self.action_type,
            "quantity": self.quantity,
            "reason": self.reason,
            "admin_pin_used": self.admin_pin_used,
            "created_at": to_utc_z(self.created_at),
        }
