from __future__ import annotations

from ..extensions import db
from offerdesk.time_utils import to_utc_z


def _money(value):
    return float(value) if value is not None else None


class Company(db.Model):
    """A manufacturer / brand whose products the distributor carries."""
    __tablename__ = "companies"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    company_name = db.Column(db.String(255), nullable=False, index=True)
    company_logo = db.Column(db.String(1024), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    products = db.relationship(
        "Product",
        back_populates="company",
        cascade="all, delete-orphan",
    )
    offers = db.relationship(
        "Offer",
        back_populates="company",
        cascade="all, delete-orphan",
        foreign_keys="Offer.company_id",
    )

    def __repr__(self) -> str:
        return f"<Company id={self.id} name={self.company_name!r}>"

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "company_name": self.company_name,
            "company_logo": self.company_logo,
        }

    def to_dict(self) -> dict:
        return {
            **self.to_summary(),
            "created_at": to_utc_z(self.created_at),
        }


class Product(db.Model):
    """
    Catalog product.

    Every product owns exactly one StockRecord and one FreeStockRecord,
    created alongside it by catalog_service.create_product.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_company_name", "company_id", "product_name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    company_id = db.Column(
        db.Integer, db.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True
    )

    product_name = db.Column(db.String(255), nullable=False)
    product_desc = db.Column(db.Text, nullable=True)
    product_images = db.Column(db.JSON, nullable=False, default=list)

    weight = db.Column(db.Numeric(10, 3), nullable=True)
    mrp = db.Column(db.Numeric(12, 2), nullable=False)
    buying_price = db.Column(db.Numeric(12, 2), nullable=False)
    selling_price = db.Column(db.Numeric(12, 2), nullable=False)
    gst_percentage = db.Column(db.Numeric(5, 2), nullable=True)
    items_per_box = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    company = db.relationship("Company", back_populates="products")
    stock = db.relationship(
        "StockRecord", back_populates="product", uselist=False, cascade="all, delete-orphan"
    )
    free_stock = db.relationship(
        "FreeStockRecord", back_populates="product", uselist=False, cascade="all, delete-orphan"
    )
    offers = db.relationship(
        "Offer",
        back_populates="product",
        cascade="all, delete-orphan",
        foreign_keys="Offer.product_id",
    )
    # Offers elsewhere in the catalog that give this product away
    free_item_offers = db.relationship(
        "Offer",
        back_populates="free_item_product",
        cascade="all, delete-orphan",
        foreign_keys="Offer.free_item_product_id",
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.product_name!r} company_id={self.company_id}>"

    @property
    def has_offer(self) -> bool:
        return any(o.is_active for o in self.offers)

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "product_name": self.product_name,
            "product_images": list(self.product_images or []),
            "weight": _money(self.weight),
            "mrp": _money(self.mrp),
            "selling_price": _money(self.selling_price),
            "company": self.company.to_summary() if self.company else None,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "company_id": self.company_id,
            "product_name": self.product_name,
            "product_desc": self.product_desc,
            "product_images": list(self.product_images or []),
            "weight": _money(self.weight),
            "mrp": _money(self.mrp),
            "buying_price": _money(self.buying_price),
            "selling_price": _money(self.selling_price),
            "gst_percentage": _money(self.gst_percentage),
            "items_per_box": self.items_per_box,
            "has_offer": self.has_offer,
            "company": self.company.to_summary() if self.company else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
