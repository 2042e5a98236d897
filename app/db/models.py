"""Database models."""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Float, Numeric
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InventoryItem(Base):
    """Stocked ingredient model."""

    __tablename__ = "inventory_items"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    quantity = Column(Float, default=0, nullable=False)
    unit = Column(String, nullable=False, default="pieces")
    min_level = Column(Float, default=0, nullable=False)
    category = Column(String, default="other", nullable=False)  # meat, bread, vegetable, dairy, condiment, other
    wastages = Column(Float, default=0, nullable=True)


class MenuItem(Base):
    """Sellable menu item model."""

    __tablename__ = "menu_items"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String, nullable=False)  # main, side, drink, dessert
    image_url = Column(String, nullable=True)

    # Relationships
    ingredients = relationship(
        "MenuItemIngredient", back_populates="menu_item", cascade="all, delete-orphan"
    )


class MenuItemIngredient(Base):
    """Join between menu items and the inventory they consume."""

    __tablename__ = "menu_item_ingredients"

    id = Column(Integer, primary_key=True, index=True)
    menu_item_id = Column(String, ForeignKey("menu_items.id"), nullable=False)
    # Not a foreign key: requirements may point at inventory that is missing
    inventory_item_id = Column(String, index=True, nullable=False)
    quantity = Column(Float, nullable=False)

    # Relationships
    menu_item = relationship("MenuItem", back_populates="ingredients")


class Order(Base):
    """Order model."""

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, index=True)
    total = Column(Numeric(10, 2), nullable=False)
    timestamp = Column(DateTime(timezone=True), default=_utcnow, nullable=False, index=True)

    # Relationships
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    """Order line item model (name and price are point-in-time snapshots)."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False)
    menu_item_id = Column(String, nullable=False)
    name = Column(String, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)

    # Relationships
    order = relationship("Order", back_populates="items")
