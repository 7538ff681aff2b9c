# backend/offerdesk/services/catalog_service.py
"""
Companies and products.

Creating a product also creates its stock and free-stock ledger rows, so every
catalog product always has both ledgers. Deleting a company or product cascades
through the ORM relationships (products, ledgers, history, offers, pools).
"""
from __future__ import annotations

from decimal import Decimal

from werkzeug.datastructures import FileStorage

from ..extensions import db
from ..models import Company, Product, StockRecord, FreeStockRecord
from ..validation import (
    NotFoundError,
    ValidationError,
    optional_text,
    parse_bool,
    parse_decimal,
    parse_int,
    require_text,
)
from .storage_service import ImageStore

MAX_PRODUCT_IMAGES = 10


# ---------------------------------------------------------------------------
# Companies
# ---------------------------------------------------------------------------

def list_companies() -> list[Company]:
    return db.session.query(Company).order_by(Company.company_name.asc()).all()


def get_company(company_id: int) -> Company:
    company = db.session.get(Company, company_id)
    if company is None:
        raise NotFoundError("Company not found")
    return company


def create_company(form: dict, logo: FileStorage | None, store: ImageStore) -> Company:
    name = require_text(form.get("company_name"), "Company name is required")
    logo_url = store.save(logo, "company-logos") if logo else None

    company = Company(company_name=name, company_logo=logo_url)
    db.session.add(company)
    db.session.commit()
    return company


def update_company(company_id: int, form: dict, logo: FileStorage | None, store: ImageStore) -> Company:
    company = get_company(company_id)
    name = require_text(form.get("company_name"), "Company name is required")

    # Only replace the logo when a new one was uploaded
    if logo:
        company.company_logo = store.save(logo, "company-logos")
    company.company_name = name
    db.session.commit()
    return company


def delete_company(company_id: int) -> str:
    company = get_company(company_id)
    name = company.company_name
    db.session.delete(company)
    db.session.commit()
    return name


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

def _product_fields(form: dict) -> dict:
    missing = [
        f for f in ("product_name", "company_id", "mrp", "buying_price", "selling_price")
        if form.get(f) in (None, "")
    ]
    if missing:
        raise ValidationError(
            "Product name, company, MRP, buying price, and selling price are required"
        )

    company_id = parse_int(form.get("company_id"), "company_id")
    if db.session.get(Company, company_id) is None:
        raise ValidationError("Company not found")

    items_per_box = form.get("items_per_box")
    gst = parse_decimal(form.get("gst_percentage"), "gst_percentage")
    if gst is not None and gst > Decimal("100"):
        raise ValidationError("gst_percentage must be <= 100")

    return {
        "product_name": require_text(form.get("product_name"), "Product name is required"),
        "company_id": company_id,
        "weight": parse_decimal(form.get("weight"), "weight"),
        "mrp": parse_decimal(form.get("mrp"), "mrp", required=True),
        "buying_price": parse_decimal(form.get("buying_price"), "buying_price", required=True),
        "selling_price": parse_decimal(form.get("selling_price"), "selling_price", required=True),
        "gst_percentage": gst,
        "product_desc": optional_text(form.get("product_desc")),
        "items_per_box": parse_int(items_per_box, "items_per_box") if items_per_box not in (None, "") else None,
    }


def _optional_nonneg_int(form: dict, key: str, default: int) -> int:
    raw = form.get(key)
    if raw in (None, ""):
        return default
    value = parse_int(raw, key)
    if value < 0:
        raise ValidationError(f"{key} must be >= 0")
    return value


def list_products() -> list[Product]:
    return db.session.query(Product).order_by(Product.created_at.desc(), Product.id.desc()).all()


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def create_product(form: dict, images: list[FileStorage], store: ImageStore) -> Product:
    fields = _product_fields(form)
    initial_stock = _optional_nonneg_int(form, "initial_stock", 0)
    threshold = _optional_nonneg_int(form, "low_stock_threshold", 50)

    if not images:
        raise ValidationError("At least one product image is required")
    if len(images) > MAX_PRODUCT_IMAGES:
        raise ValidationError(f"At most {MAX_PRODUCT_IMAGES} product images are allowed")

    urls = store.save_many(images, "product-images")

    product = Product(product_images=urls, **fields)
    product.stock = StockRecord(quantity=initial_stock, low_stock_threshold=threshold)
    product.free_stock = FreeStockRecord(free_stock_quantity=0, allocated_to_offers=0)
    db.session.add(product)
    db.session.commit()
    return product


def update_product(product_id: int, form: dict, images: list[FileStorage], store: ImageStore) -> Product:
    product = get_product(product_id)
    fields = _product_fields(form)

    keep_existing = parse_bool(form.get("keep_existing_images"))
    existing = list(product.product_images or []) if keep_existing else []
    if len(existing) + len(images) > MAX_PRODUCT_IMAGES:
        raise ValidationError(f"At most {MAX_PRODUCT_IMAGES} product images are allowed")

    # No uploads: current images stay untouched
    if images:
        product.product_images = existing + store.save_many(images, "product-images")

    for key, value in fields.items():
        setattr(product, key, value)
    db.session.commit()
    return product


def delete_product(product_id: int) -> str:
    product = get_product(product_id)
    name = product.product_name
    db.session.delete(product)
    db.session.commit()
    return name
