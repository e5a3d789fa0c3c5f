"""
SQLAlchemy Database Models

One row class per remote table:
- users / profiles: identities and staff roles
- restaurants, menu_categories, menu_items, restaurant_tables
- orders / order_items: customer orders and their lines
- revoked_tokens: signed-out access tokens
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from servelink.database import Base
from servelink.enums import OrderStatus, StaffRole


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(Base):
    """Credential store behind sign-in / sign-out."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    def __repr__(self):
        return f"<User {self.email}>"


class Profile(Base):
    """
    Staff profile - links a user to a restaurant with a role.

    Owners usually have no restaurant_id here; their restaurant is found
    through restaurants.owner_id instead.
    """
    __tablename__ = "profiles"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    full_name = Column(String(100), nullable=True)
    role = Column(
        Enum(StaffRole, name="staff_role", values_callable=_enum_values),
        nullable=True,
    )
    restaurant_id = Column(
        String(36),
        ForeignKey("restaurants.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    def __repr__(self):
        role = self.role.value if self.role else "none"
        return f"<Profile {self.user_id} - {role}>"


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(150), nullable=False)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    def __repr__(self):
        return f"<Restaurant {self.name}>"


class MenuCategory(Base):
    __tablename__ = "menu_categories"

    id = Column(String(36), primary_key=True, default=new_id)
    restaurant_id = Column(
        String(36),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    display_order = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<MenuCategory {self.name}>"


class MenuItem(Base):
    """
    A dish on the menu.

    category_id is optional; nothing checks that it names a category of
    the same restaurant.
    """
    __tablename__ = "menu_items"

    id = Column(String(36), primary_key=True, default=new_id)
    restaurant_id = Column(
        String(36),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category_id = Column(
        String(36),
        ForeignKey("menu_categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    preparation_time = Column(Integer, default=15, nullable=True)
    is_veg = Column(Boolean, default=True, nullable=False)
    is_available = Column(Boolean, default=True, nullable=False)
    image_url = Column(String(500), nullable=True)

    def __repr__(self):
        return f"<MenuItem {self.name} - {self.price}>"


class RestaurantTable(Base):
    """A physical table; qr_code holds a PNG data URL pointing at the menu."""
    __tablename__ = "restaurant_tables"

    id = Column(String(36), primary_key=True, default=new_id)
    restaurant_id = Column(
        String(36),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    table_number = Column(String(20), nullable=False)
    capacity = Column(Integer, default=4, nullable=False)
    qr_code = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Table {self.table_number}>"


class Order(Base):
    """
    Customer order.

    total_amount is computed by the caller at checkout and trusted; it is
    never recomputed from order_items.
    """
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_id)
    restaurant_id = Column(
        String(36),
        ForeignKey("restaurants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    table_id = Column(
        String(36),
        ForeignKey("restaurant_tables.id", ondelete="SET NULL"),
        nullable=True,
    )
    order_number = Column(String(20), nullable=False)
    status = Column(
        Enum(OrderStatus, name="order_status", values_callable=_enum_values),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True,
    )
    total_amount = Column(Float, nullable=True)
    customer_notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    table = relationship("RestaurantTable", lazy="selectin")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def table_number(self):
        return self.table.table_number if self.table else None

    def __repr__(self):
        return f"<Order #{self.order_number} - {self.status.value}>"


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=new_id)
    order_id = Column(
        String(36),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    menu_item_id = Column(String(36), ForeignKey("menu_items.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    special_instructions = Column(Text, nullable=True)

    order = relationship("Order", back_populates="items")
    menu_item = relationship("MenuItem", lazy="selectin")

    @property
    def menu_item_name(self):
        return self.menu_item.name if self.menu_item else None

    @property
    def preparation_time(self):
        return self.menu_item.preparation_time if self.menu_item else None

    def __repr__(self):
        return f"<OrderItem {self.quantity}x {self.menu_item_id}>"


class RevokedToken(Base):
    """Access tokens invalidated by sign-out, keyed by JWT id."""
    __tablename__ = "revoked_tokens"

    jti = Column(String(64), primary_key=True)
    revoked_at = Column(DateTime(timezone=True), default=utcnow)
