from datetime import datetime
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .db import Base


TRANSACTION_ADD = "add"
TRANSACTION_CONSUME = "consume"
TRANSACTION_REMOVE = "remove"
TRANSACTION_TYPES = (TRANSACTION_ADD, TRANSACTION_CONSUME, TRANSACTION_REMOVE)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    items = relationship("Item", back_populates="user")


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)

    items = relationship("Item", back_populates="category")


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    name = Column(String(200), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    barcode = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="items")
    category = relationship("Category", back_populates="items")
    batches = relationship("InventoryBatch", back_populates="item")
    restock_alert = relationship("RestockAlert", back_populates="item", uselist=False)

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_item_user_name"),
    )


class InventoryBatch(Base):
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False, index=True)
    purchase_date = Column(Date, nullable=True)
    expiry_date = Column(Date, nullable=True)
    initial_quantity = Column(Numeric(14, 3), nullable=False)
    remaining_quantity = Column(Numeric(14, 3), nullable=False)
    unit = Column(String(50), nullable=False)
    location = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    item = relationship("Item", back_populates="batches")

    __table_args__ = (
        CheckConstraint("initial_quantity > 0", name="ck_inventory_initial_quantity_positive"),
        CheckConstraint("remaining_quantity >= 0", name="ck_inventory_remaining_quantity_non_negative"),
        CheckConstraint(
            "remaining_quantity <= initial_quantity",
            name="ck_inventory_remaining_within_initial",
        ),
    )


class InventoryTransaction(Base):
    """Ledger entry. References its batch by id only so it can outlive it."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    inventory_id = Column(Integer, nullable=False, index=True)
    transaction_type = Column(String(20), nullable=False)
    quantity_changed = Column(Numeric(14, 3), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class RestockAlert(Base):
    __tablename__ = "restock_alerts"

    id = Column(Integer, primary_key=True)
    item_id = Column(Integer, ForeignKey("items.id"), unique=True, nullable=False)
    min_quantity = Column(Numeric(14, 3), nullable=False)
    alert_enabled = Column(Boolean, default=True, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    item = relationship("Item", back_populates="restock_alert")


class Recipe(Base):
    __tablename__ = "recipes"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    ingredients = relationship("RecipeIngredient", back_populates="recipe", cascade="all, delete-orphan")


class RecipeIngredient(Base):
    __tablename__ = "recipe_ingredients"

    id = Column(Integer, primary_key=True)
    recipe_id = Column(Integer, ForeignKey("recipes.id"), nullable=False)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    quantity_needed = Column(Numeric(14, 3), nullable=False)
    unit = Column(String(50), nullable=True)

    recipe = relationship("Recipe", back_populates="ingredients")
    item = relationship("Item")
