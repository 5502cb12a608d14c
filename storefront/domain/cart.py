"""Shopper-side models: cart lines, the checkout form, and the receipt snapshot."""
from decimal import Decimal
from typing import Iterable, List

from pydantic import BaseModel, Field

from storefront.domain.schemas import OrderItemCreate


class CartLine(BaseModel):
    product_id: int
    name: str
    price: Decimal
    quantity: int = 1
    description: str = ""
    image: str = ""

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class CustomerInfo(BaseModel):
    firstname: str = ""
    lastname: str = ""
    email: str = ""
    password: str = ""
    phone: str = ""
    street_address: str = ""
    postal_code: str = ""
    city: str = ""
    country: str = ""

    def missing_fields(self) -> List[str]:
        return [name for name, value in self if not value.strip()]

    def is_complete(self) -> bool:
        return not self.missing_fields()


class OrderSummary(BaseModel):
    """What the shopper sees after paying; captured before the cart is cleared."""

    customer: CustomerInfo
    products: List[CartLine] = Field(default_factory=list)
    total: Decimal = Decimal("0")

    def render(self) -> str:
        c = self.customer
        lines = [
            "Order Summary",
            "",
            "Customer Information",
            f"{c.firstname} {c.lastname}",
            f"Email: {c.email}",
            f"Phone: {c.phone}",
            f"Address: {c.street_address}, {c.postal_code} {c.city}, {c.country}",
            "",
            "Products",
        ]
        lines += [f"- {p.name} - ${p.price} x {p.quantity}" for p in self.products]
        lines += ["", f"Total: ${self.total:.2f}"]
        return "\n".join(lines)


def calculate_total_price(cart: Iterable[CartLine]) -> Decimal:
    return sum((line.price * line.quantity for line in cart), Decimal("0"))


def map_cart_to_order_items(cart: Iterable[CartLine]) -> List[OrderItemCreate]:
    return [
        OrderItemCreate(
            product_id=line.product_id,
            product_name=line.name,
            quantity=line.quantity,
            unit_price=line.price,
        )
        for line in cart
    ]
