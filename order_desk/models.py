"""
SQLAlchemy Database Models

Dine-in ordering schema:
- Orders placed from a table, with one row per dish/customization
- Menu items grouped by category
- Staff accounts for the back office

Author: Order Desk Team
Version: 1.0.0
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from order_desk.database import Base
import enum


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses shown on the kitchen / front-of-house active list
ACTIVE_ORDER_STATUSES = (
    OrderStatus.PENDING.value,
    OrderStatus.CONFIRMED.value,
    OrderStatus.PREPARING.value,
    OrderStatus.READY.value,
)


class Order(Base):
    """
    Order header - one row per customer order.

    ``total_amount`` is written by the submission service after every item
    row is in place; status and timestamps are owned by the database.
    """
    __tablename__ = "orders"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # =========================================================================
    # IDENTIFICATION
    # =========================================================================
    order_number = Column(String(20), nullable=False, unique=True, index=True)
    session_id = Column(String(64), nullable=False, index=True)
    table_id = Column(Integer, nullable=False, default=1)
    queue_number = Column(String(10), nullable=False, default="A00")

    # =========================================================================
    # ORDER DETAILS
    # =========================================================================
    total_amount = Column(Float, nullable=False, default=0.0)
    special_instructions = Column(Text, nullable=True)

    # =========================================================================
    # STATUS & TIMESTAMPS
    # =========================================================================
    status = Column(
        String(20),
        default=OrderStatus.PENDING.value,
        server_default=OrderStatus.PENDING.value,
        nullable=False,
        index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def __repr__(self):
        return f"<Order #{self.id} - {self.order_number} - table {self.table_id} - {self.status}>"


class OrderItem(Base):
    """
    One line of an order. Owned by exactly one Order.

    ``customer_id`` separates diners sharing a table; ``menu_item_id`` is
    stored as given.
    """
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    customer_id = Column(String(50), nullable=True)
    menu_item_id = Column(Integer, nullable=False)

    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)

    # Customization
    spicy_level = Column(Integer, nullable=False, default=0)
    protein_choice = Column(String(50), nullable=False, default="Original")
    special_notes = Column(Text, nullable=True)

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem #{self.id} - order {self.order_id} - menu {self.menu_item_id} x{self.quantity}>"


class Category(Base):
    """Menu category (Starters, Noodles, Drinks...)."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name_en = Column(String(100), nullable=False)
    slug = Column(String(100), nullable=False, unique=True)


class MenuItem(Base):
    """A dish on the menu."""
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    name_en = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    is_available = Column(Boolean, nullable=False, default=True)

    category = relationship("Category")

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.name_en}>"


class User(Base):
    """Staff account. Passwords are stored as bcrypt hashes only."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="staff")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<User {self.username} ({self.role})>"
