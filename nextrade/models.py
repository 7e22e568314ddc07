import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, enum.Enum):
    ADMIN = "admin"
    WHOLESALER = "wholesaler"
    RETAILER = "retailer"


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    # salted one-way hash; never exposed by any read schema
    password_hash = Column(String, nullable=False)
    role = Column(Enum(Role, values_callable=lambda e: [m.value for m in e], name="user_role"), nullable=False, index=True)
    business_name = Column(String, nullable=True)
    gst_number = Column(String, nullable=True)
    shop_name = Column(String, nullable=True)
    shop_address = Column(String, nullable=True)

    products = relationship("Product", back_populates="wholesaler")


class Product(TimestampMixin, Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    price = Column(Float, nullable=False)
    category = Column(String, nullable=True, index=True)
    image = Column(String, nullable=True)
    # set from the caller's token at creation, never from the payload
    wholesaler_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    wholesaler = relationship("User", back_populates="products")


class Order(TimestampMixin, Base):
    """Denormalised order snapshot: no foreign key to a user or product."""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    product_name = Column(String, nullable=False)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False)
    address = Column(String, nullable=True)
    payment_method = Column(String, nullable=True)
    payment_status = Column(String, nullable=False, default="Pending")
    razorpay_order_id = Column(String, nullable=True)
    razorpay_payment_id = Column(String, nullable=True)
    customer_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    status = Column(String, nullable=False, default="Processing")
