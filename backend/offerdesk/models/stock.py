from __future__ import annotations

from ..extensions import db
from offerdesk.time_utils import to_utc_z, utcnow

"""
Ledger tables.

- One quantity field per subject: stock.quantity, free_stock.free_stock_quantity,
  external_items.stock_quantity.
- version_id is SQLAlchemy's version_id_col: a concurrent writer fails with
  StaleDataError instead of silently overwriting.
- History tables are append-only; one row per ledger mutation.
"""


class StockRecord(db.Model):
    """Sellable stock for one product."""
    __tablename__ = "stock"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_stock_quantity_nonneg"),
        db.CheckConstraint("low_stock_threshold >= 0", name="ck_stock_threshold_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    quantity = db.Column(db.Integer, nullable=False, default=0)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=50)
    last_updated = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    product = db.relationship("Product", back_populates="stock")

    def __repr__(self) -> str:
        return f"<StockRecord product_id={self.product_id} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "low_stock_threshold": self.low_stock_threshold,
            "is_low_stock": self.quantity <= self.low_stock_threshold,
            "last_updated": to_utc_z(self.last_updated),
            "product": self.product.to_summary() if self.product else None,
        }


class FreeStockRecord(db.Model):
    """
    Promotional stock for one product.

    allocated_to_offers is maintained outside the HTTP surface (CLI only);
    available is derived, never stored.
    """
    __tablename__ = "free_stock"
    __table_args__ = (
        db.CheckConstraint("free_stock_quantity >= 0", name="ck_free_stock_quantity_nonneg"),
        db.CheckConstraint("allocated_to_offers >= 0", name="ck_free_stock_allocated_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    free_stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    allocated_to_offers = db.Column(db.Integer, nullable=False, default=0)
    last_updated = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    product = db.relationship("Product", back_populates="free_stock")

    @property
    def available(self) -> int:
        return max(0, (self.free_stock_quantity or 0) - (self.allocated_to_offers or 0))

    def __repr__(self) -> str:
        return f"<FreeStockRecord product_id={self.product_id} qty={self.free_stock_quantity} allocated={self.allocated_to_offers}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "free_stock_quantity": self.free_stock_quantity,
            "allocated_to_offers": self.allocated_to_offers,
            "available": self.available,
            "last_updated": to_utc_z(self.last_updated),
            "product": self.product.to_summary() if self.product else None,
        }


class ExternalItem(db.Model):
    """Non-catalog give-away (tote bag, calendar, ...) with its own stock counter."""
    __tablename__ = "external_items"
    __table_args__ = (
        db.CheckConstraint("stock_quantity >= 0", name="ck_external_items_quantity_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    item_name = db.Column(db.String(255), nullable=False)
    item_description = db.Column(db.Text, nullable=True)
    item_image = db.Column(db.String(1024), nullable=True)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    low_stock_threshold = db.Column(db.Integer, nullable=False, default=50)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    last_updated = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version_id}

    history = db.relationship(
        "ExternalItemStockHistory",
        back_populates="external_item",
        cascade="all, delete-orphan",
        order_by="ExternalItemStockHistory.id.desc()",
    )

    def __repr__(self) -> str:
        return f"<ExternalItem id={self.id} name={self.item_name!r} qty={self.stock_quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_name": self.item_name,
            "item_description": self.item_description,
            "item_image": self.item_image,
            "stock_quantity": self.stock_quantity,
            "low_stock_threshold": self.low_stock_threshold,
            "is_low_stock": self.stock_quantity <= self.low_stock_threshold,
            "created_at": to_utc_z(self.created_at),
            "last_updated": to_utc_z(self.last_updated),
        }


class _LedgerHistoryColumns:
    id = db.Column(db.Integer, primary_key=True)
    action_type = db.Column(db.String(32), nullable=False, index=True)
    previous_quantity = db.Column(db.Integer, nullable=False)
    new_quantity = db.Column(db.Integer, nullable=False)
    change_amount = db.Column(db.Integer, nullable=False)
    reason_type = db.Column(db.String(32), nullable=False)
    reason_note = db.Column(db.Text, nullable=True)
    admin_pin_used = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def _history_dict(self) -> dict:
        return {
            "id": self.id,
            "action_type": self.action_type,
            "previous_quantity": self.previous_quantity,
            "new_quantity": self.new_quantity,
            "change_amount": self.change_amount,
            "reason_type": self.reason_type,
            "reason_note": self.reason_note,
            "admin_pin_used": self.admin_pin_used,
            "created_at": to_utc_z(self.created_at),
        }


class StockHistory(_LedgerHistoryColumns, db.Model):
    __tablename__ = "stock_history"
    __table_args__ = (
        db.Index("ix_stock_history_product_created", "product_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    product_id = db.Column(
        db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product = db.relationship(
        "Product", backref=db.backref("stock_history", cascade="all, delete-orphan", lazy=True)
    )

    def to_dict(self, include_product: bool = False) -> dict:
        data = {**self._history_dict(), "product_id": self.product_id}
        if include_product:
            data["product"] = self.product.to_summary() if self.product else None
        return data


class FreeStockHistory(_LedgerHistoryColumns, db.Model):
    __tablename__ = "free_stock_history"
    __table_args__ = (
        db.Index("ix_free_stock_history_product_created", "product_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    product_id = db.Column(
        db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product = db.relationship(
        "Product", backref=db.backref("free_stock_history", cascade="all, delete-orphan", lazy=True)
    )

    def to_dict(self, include_product: bool = False) -> dict:
        data = {**self._history_dict(), "product_id": self.product_id}
        if include_product:
            data["product"] = self.product.to_summary() if self.product else None
        return data


class ExternalItemStockHistory(_LedgerHistoryColumns, db.Model):
    __tablename__ = "external_item_stock_history"
    __table_args__ = (
        db.Index("ix_external_item_history_item_created", "external_item_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    external_item_id = db.Column(
        db.Integer, db.ForeignKey("external_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    external_item = db.relationship("ExternalItem", back_populates="history")

    def to_dict(self, include_product: bool = False) -> dict:
        return {**self._history_dict(), "external_item_id": self.external_item_id}
