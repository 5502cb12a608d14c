from sqlalchemy import Column, Integer, String, DateTime, Numeric, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from storefront.infrastructure.database import Base

PAYMENT_UNPAID = "Unpaid"
PAYMENT_PAID = "Paid"
ORDER_PENDING = "Pending"

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, default="")
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String, default="")
    stock = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    firstname = Column(String, nullable=False)
    lastname = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    phone = Column(String, default="")
    street_address = Column(String, default="")
    postal_code = Column(String, default="")
    city = Column(String, default="")
    country = Column(String, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    orders = relationship("Order", back_populates="customer")


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), index=True)
    total_price = Column(Numeric(10, 2), nullable=False)
    payment_status = Column(String, default=PAYMENT_UNPAID)  # Unpaid, Paid, or whatever Stripe reports
    payment_id = Column(String, default="", index=True)  # Stripe checkout session id
    order_status = Column(String, default=ORDER_PENDING)

    # Contact/address snapshot taken at checkout
    customer_firstname = Column(String, default="")
    customer_lastname = Column(String, default="")
    customer_email = Column(String, default="")
    customer_phone = Column(String, default="")
    customer_street_address = Column(String, default="")
    customer_postal_code = Column(String, default="")
    customer_city = Column(String, default="")
    customer_country = Column(String, default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship("Customer", back_populates="orders")
    order_items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    product_id = Column(Integer, nullable=False)

    # Name and price are copied so later product edits don't rewrite history
    product_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="order_items")
