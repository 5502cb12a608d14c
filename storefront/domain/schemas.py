"""
Request and response bodies for the REST API.

Field names follow the JSON the shopper client sends and reads
(``customer_firstname``, ``order_items``, ``sessionId`` ...).
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from storefront.domain.models import ORDER_PENDING, PAYMENT_UNPAID


# ---------------------------------------------------------
# PRODUCTS
# ---------------------------------------------------------
class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    price: Decimal = Field(..., ge=0)
    image: str = ""
    stock: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    image: Optional[str] = None
    stock: Optional[int] = Field(None, ge=0)


class ProductRead(ProductCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int


# ---------------------------------------------------------
# CUSTOMERS
# ---------------------------------------------------------
class CustomerCreate(BaseModel):
    firstname: str
    lastname: str
    email: str = Field(..., min_length=3)
    password: str
    phone: str = ""
    street_address: str = ""
    postal_code: str = ""
    city: str = ""
    country: str = ""


class CustomerUpdate(BaseModel):
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    email: Optional[str] = Field(None, min_length=3)
    password: Optional[str] = None
    phone: Optional[str] = None
    street_address: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


class CustomerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    firstname: str
    lastname: str
    email: str
    phone: str = ""
    street_address: str = ""
    postal_code: str = ""
    city: str = ""
    country: str = ""
    created_at: Optional[datetime] = None


# ---------------------------------------------------------
# ORDERS
# ---------------------------------------------------------
class OrderItemCreate(BaseModel):
    # The client sends id=None / order_id=0 placeholders; they are ignored.
    product_id: int
    product_name: str
    quantity: int = Field(..., ge=1)
    unit_price: Decimal = Field(..., ge=0)


class OrderItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal


class OrderItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseModel):
    customer_id: int
    total_price: Decimal = Field(..., ge=0)
    payment_status: str = PAYMENT_UNPAID
    payment_id: str = ""
    order_status: str = ORDER_PENDING
    customer_firstname: str = ""
    customer_lastname: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    customer_street_address: str = ""
    customer_postal_code: str = ""
    customer_city: str = ""
    customer_country: str = ""
    order_items: List[OrderItemCreate] = Field(..., min_length=1)

    @model_validator(mode="after")
    def total_matches_items(self):
        expected = sum((item.unit_price * item.quantity for item in self.order_items), Decimal("0"))
        if expected != self.total_price:
            raise ValueError(f"total_price {self.total_price} does not match order items total {expected}")
        return self


class OrderUpdate(BaseModel):
    payment_status: Optional[str] = None
    payment_id: Optional[str] = None
    order_status: Optional[str] = None


class OrderSummaryRead(BaseModel):
    """An order as listed by ``GET /orders`` (no line items)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: Optional[int] = None
    total_price: Decimal
    payment_status: str
    payment_id: str = ""
    order_status: str
    customer_firstname: str = ""
    customer_lastname: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    customer_street_address: str = ""
    customer_postal_code: str = ""
    customer_city: str = ""
    customer_country: str = ""
    created_at: Optional[datetime] = None


class OrderRead(OrderSummaryRead):
    order_items: List[OrderItemRead] = []


# ---------------------------------------------------------
# PAYMENTS
# ---------------------------------------------------------
class CheckoutLine(BaseModel):
    """One cart line as the client posts it to create a checkout session."""

    id: Optional[int] = None
    name: str
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(1, ge=1)


class CheckoutSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cart: List[CheckoutLine] = []
    customer_id: Optional[int] = Field(None, alias="customerId")
    success_url: Optional[str] = None
    cancel_url: Optional[str] = None


class CheckoutSessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId")
    url: Optional[str] = None


class SessionStatus(BaseModel):
    status: Optional[str] = None
    payment_status: Optional[str] = None
    customer_email: Optional[str] = None


class PaymentDetails(BaseModel):
    order_id: int
    payment_status: str
