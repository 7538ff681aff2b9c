"""Initial offerdesk schema: catalog, ledgers, offers, offer pool, customers

Revision ID: 20261019_initial
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_initial"
down_revision = None
branch_labels = None
depends_on = None


def _ledger_history_columns():
    return [
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("action_type", sa.String(32), nullable=False),
        sa.Column("previous_quantity", sa.Integer(), nullable=False),
        sa.Column("new_quantity", sa.Integer(), nullable=False),
        sa.Column("change_amount", sa.Integer(), nullable=False),
        sa.Column("reason_type", sa.String(32), nullable=False),
        sa.Column("reason_note", sa.Text(), nullable=True),
        sa.Column("admin_pin_used", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
    ]


def upgrade():
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_name", sa.String(255), nullable=False),
        sa.Column("company_logo", sa.String(1024), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("companies", schema=None) as batch_op:
        batch_op.create_index("ix_companies_company_name", ["company_name"], unique=False)

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("product_name", sa.String(255), nullable=False),
        sa.Column("product_desc", sa.Text(), nullable=True),
        sa.Column("product_images", sa.JSON(), nullable=False),
        sa.Column("weight", sa.Numeric(10, 3), nullable=True),
        sa.Column("mrp", sa.Numeric(12, 2), nullable=False),
        sa.Column("buying_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("selling_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("gst_percentage", sa.Numeric(5, 2), nullable=True),
        sa.Column("items_per_box", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("products", schema=None) as batch_op:
        batch_op.create_index("ix_products_company_id", ["company_id"], unique=False)
        batch_op.create_index("ix_products_company_name", ["company_id", "product_name"], unique=False)

    op.create_table(
        "stock",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("low_stock_threshold", sa.Integer(), nullable=False, server_default=sa.text("50")),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.CheckConstraint("quantity >= 0", name="ck_stock_quantity_nonneg"),
        sa.CheckConstraint("low_stock_threshold >= 0", name="ck_stock_threshold_nonneg"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("stock", schema=None) as batch_op:
        batch_op.create_index("ix_stock_product_id", ["product_id"], unique=True)

    op.create_table(
        "free_stock",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("free_stock_quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("allocated_to_offers", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.CheckConstraint("free_stock_quantity >= 0", name="ck_free_stock_quantity_nonneg"),
        sa.CheckConstraint("allocated_to_offers >= 0", name="ck_free_stock_allocated_nonneg"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("free_stock", schema=None) as batch_op:
        batch_op.create_index("ix_free_stock_product_id", ["product_id"], unique=True)

    op.create_table(
        "external_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("item_name", sa.String(255), nullable=False),
        sa.Column("item_description", sa.Text(), nullable=True),
        sa.Column("item_image", sa.String(1024), nullable=True),
        sa.Column("stock_quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("low_stock_threshold", sa.Integer(), nullable=False, server_default=sa.text("50")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.CheckConstraint("stock_quantity >= 0", name="ck_external_items_quantity_nonneg"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )

    op.create_table(
        "stock_history",
        *_ledger_history_columns(),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("stock_history", schema=None) as batch_op:
        batch_op.create_index("ix_stock_history_product_id", ["product_id"], unique=False)
        batch_op.create_index("ix_stock_history_action_type", ["action_type"], unique=False)
        batch_op.create_index("ix_stock_history_created_at", ["created_at"], unique=False)
        batch_op.create_index("ix_stock_history_product_created", ["product_id", "created_at"], unique=False)

    op.create_table(
        "free_stock_history",
        *_ledger_history_columns(),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("free_stock_history", schema=None) as batch_op:
        batch_op.create_index("ix_free_stock_history_product_id", ["product_id"], unique=False)
        batch_op.create_index("ix_free_stock_history_action_type", ["action_type"], unique=False)
        batch_op.create_index("ix_free_stock_history_created_at", ["created_at"], unique=False)
        batch_op.create_index("ix_free_stock_history_product_created", ["product_id", "created_at"], unique=False)

    op.create_table(
        "external_item_stock_history",
        *_ledger_history_columns(),
        sa.Column("external_item_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["external_item_id"], ["external_items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("external_item_stock_history", schema=None) as batch_op:
        batch_op.create_index("ix_external_item_stock_history_external_item_id", ["external_item_id"], unique=False)
        batch_op.create_index("ix_external_item_stock_history_action_type", ["action_type"], unique=False)
        batch_op.create_index("ix_external_item_stock_history_created_at", ["created_at"], unique=False)
        batch_op.create_index("ix_external_item_history_item_created", ["external_item_id", "created_at"], unique=False)

    op.create_table(
        "offers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("offer_type", sa.String(16), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=True),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("min_product_weight", sa.Numeric(10, 3), nullable=True),
        sa.Column("min_product_mrp", sa.Numeric(12, 2), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("free_item_type", sa.String(32), nullable=True),
        sa.Column("free_item_product_id", sa.Integer(), nullable=True),
        sa.Column("external_item_id", sa.Integer(), nullable=True),
        sa.Column("free_item_external_name", sa.String(255), nullable=True),
        sa.Column("free_item_external_description", sa.Text(), nullable=True),
        sa.Column("free_item_quantity", sa.Integer(), nullable=True),
        sa.Column("discount_type", sa.String(16), nullable=True),
        sa.Column("discount_value", sa.Numeric(12, 2), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["free_item_product_id"], ["products.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["external_item_id"], ["external_items.id"]),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("offers", schema=None) as batch_op:
        batch_op.create_index("ix_offers_company_id", ["company_id"], unique=False)
        batch_op.create_index("ix_offers_is_active", ["is_active"], unique=False)
        batch_op.create_index("ix_offers_external_item_id", ["external_item_id"], unique=False)
        batch_op.create_index("ix_offers_product_active", ["product_id", "is_active"], unique=False)
        batch_op.create_index("ix_offers_free_product_active", ["free_item_product_id", "is_active"], unique=False)

    op.create_table(
        "offer_pool",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("offer_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=True),
        sa.Column("accumulated_quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_transferred_to_regular", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_transferred_to_free", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_deducted", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_updated", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.CheckConstraint("accumulated_quantity >= 0", name="ck_offer_pool_accumulated_nonneg"),
        sa.ForeignKeyConstraint(["offer_id"], ["offers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("offer_pool", schema=None) as batch_op:
        batch_op.create_index("ix_offer_pool_offer_id", ["offer_id"], unique=True)
        batch_op.create_index("ix_offer_pool_product_id", ["product_id"], unique=False)

    op.create_table(
        "offer_pool_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("offer_pool_id", sa.Integer(), nullable=False),
        sa.Column("action_type", sa.String(32), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("admin_pin_used", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.ForeignKeyConstraint(["offer_pool_id"], ["offer_pool.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sqlite_autoincrement=True,
    )
    with op.batch_alter_table("offer_pool_history", schema=None) as batch_op:
        batch_op.create_index("ix_offer_pool_history_offer_pool_id", ["offer_pool_id"], unique=False)

    op.create_table(
        "customers",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("customer_name", sa.String(255), nullable=False),
        sa.Column("business_name", sa.String(255), nullable=False),
        sa.Column("contact_number", sa.String(32), nullable=False),
        sa.Column("street_address", sa.Text(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("gst_number", sa.String(15), nullable=False),
        sa.Column("food_licence_number", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("(CURRENT_TIMESTAMP)"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("gst_number", name="uq_customers_gst_number"),
        sa.UniqueConstraint("food_licence_number", name="uq_customers_food_licence_number"),
        sa.UniqueConstraint("email", name="uq_customers_email"),
        sqlite_autoincrement=True,
    )


def downgrade():
    op.drop_table("customers")
    op.drop_table("offer_pool_history")
    op.drop_table("offer_pool")
    op.drop_table("offers")
    op.drop_table("external_item_stock_history")
    op.drop_table("free_stock_history")
    op.drop_table("stock_history")
    op.drop_table("external_items")
    op.drop_table("free_stock")
    op.drop_table("stock")
    op.drop_table("products")
    op.drop_table("companies")
