"""initial pantry schema

Revision ID: 0001_initial
Revises: 
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False, unique=True),
    )
    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id"), nullable=False),
        sa.Column("barcode", sa.String(length=64)),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "name", name="uq_item_user_name"),
    )
    op.create_table(
        "inventory",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("items.id"), nullable=False),
        sa.Column("purchase_date", sa.Date()),
        sa.Column("expiry_date", sa.Date()),
        sa.Column("initial_quantity", sa.Numeric(14, 3), nullable=False),
        sa.Column("remaining_quantity", sa.Numeric(14, 3), nullable=False),
        sa.Column("unit", sa.String(length=50), nullable=False),
        sa.Column("location", sa.String(length=100)),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("initial_quantity > 0", name="ck_inventory_initial_quantity_positive"),
        sa.CheckConstraint("remaining_quantity >= 0", name="ck_inventory_remaining_quantity_non_negative"),
        sa.CheckConstraint("remaining_quantity <= initial_quantity", name="ck_inventory_remaining_within_initial"),
    )
    op.create_index("ix_inventory_item_id", "inventory", ["item_id"])
    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("inventory_id", sa.Integer(), nullable=False),
        sa.Column("transaction_type", sa.String(length=20), nullable=False),
        sa.Column("quantity_changed", sa.Numeric(14, 3), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_transactions_inventory_id", "transactions", ["inventory_id"])
    op.create_table(
        "restock_alerts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("items.id"), nullable=False, unique=True),
        sa.Column("min_quantity", sa.Numeric(14, 3), nullable=False),
        sa.Column("alert_enabled", sa.Boolean(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "recipes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text()),
    )
    op.create_table(
        "recipe_ingredients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("recipe_id", sa.Integer(), sa.ForeignKey("recipes.id"), nullable=False),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("items.id"), nullable=False),
        sa.Column("quantity_needed", sa.Numeric(14, 3), nullable=False),
        sa.Column("unit", sa.String(length=50)),
    )


def downgrade() -> None:
    op.drop_table("recipe_ingredients")
    op.drop_table("recipes")
    op.drop_table("restock_alerts")
    op.drop_index("ix_transactions_inventory_id", table_name="transactions")
    op.drop_table("transactions")
    op.drop_index("ix_inventory_item_id", table_name="inventory")
    op.drop_table("inventory")
    op.drop_table("items")
    op.drop_table("categories")
    op.drop_table("users")
