"""
Pytest fixtures for offerdesk backend tests.

Provides the application (in-memory SQLite, known admin PIN, temp upload
folder), the test client, a per-test clean database and catalog factories.
"""

import io
from decimal import Decimal

import pytest
from offerdesk import create_app
from offerdesk.extensions import db
from offerdesk.models import (
    Company,
    Product,
    StockRecord,
    FreeStockRecord,
    ExternalItem,
    Offer,
    OfferPool,
)

ADMIN_PIN = "4321"
WRONG_PIN = "0000"

# Smallest valid PNG (1x1 transparent pixel)
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
    b"\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'ADMIN_DELETE_PIN': ADMIN_PIN,
        'UPLOAD_FOLDER': str(tmp_path_factory.mktemp("uploads")),
        'GEOCODER_BASE_URL': 'https://geocoder.test',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def png_upload(name="pack.png"):
    """(stream, filename, content_type) tuple for multipart test requests."""
    return (io.BytesIO(PNG_BYTES), name, "image/png")


@pytest.fixture(scope='function')
def company(db_session):
    company = Company(company_name="Parle Agro")
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture(scope='function')
def make_product(db_session, company):
    """Factory: catalog product with both ledger rows."""

    def _make(name="Frooti 200ml", stock=0, free_stock=0, allocated=0, threshold=50, owner=None):
        product = Product(
            company_id=(owner or company).id,
            product_name=name,
            product_images=["/uploads/product-images/seed.png"],
            weight=Decimal("0.200"),
            mrp=Decimal("20.00"),
            buying_price=Decimal("14.50"),
            selling_price=Decimal("18.00"),
        )
        product.stock = StockRecord(quantity=stock, low_stock_threshold=threshold)
        product.free_stock = FreeStockRecord(free_stock_quantity=free_stock, allocated_to_offers=allocated)
        db_session.add(product)
        db_session.commit()
        return product

    return _make


@pytest.fixture(scope='function')
def product(make_product):
    """Product with 100 units of regular stock and no free stock."""
    return make_product(stock=100)


@pytest.fixture(scope='function')
def external_item(db_session):
    item = ExternalItem(item_name="Steel tumbler", item_description="Branded 250ml tumbler", stock_quantity=30)
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture(scope='function')
def make_pool(db_session):
    """Factory: free_item offer on product with a pool already holding units."""

    def _make(product, accumulated=50, free_item_type="same_product", free_item_product=None):
        offer = Offer(
            offer_type="free_item",
            product_id=product.id,
            company_id=product.company_id,
            is_active=True,
            free_item_type=free_item_type,
            free_item_product_id=free_item_product.id if free_item_product else None,
            free_item_quantity=1,
        )
        subject = free_item_product or product
        offer.pool = OfferPool(product_id=subject.id, accumulated_quantity=accumulated)
        db_session.add(offer)
        db_session.commit()
        return offer.pool

    return _make
