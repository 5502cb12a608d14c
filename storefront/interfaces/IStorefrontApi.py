"""
Shopper-side contracts for the storefront's remote collaborators.

Implementations raise ``NotFoundError`` for a 404 and ``DependencyError`` for
every other failure; callers decide whether to recover or surface.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from storefront.domain.cart import CartLine
from storefront.domain.schemas import (
    CustomerCreate,
    CustomerRead,
    CustomerUpdate,
    OrderCreate,
    OrderRead,
    OrderSummaryRead,
    PaymentDetails,
    ProductCreate,
    ProductRead,
    ProductUpdate,
    SessionStatus,
)


class IProductCatalog(ABC):
    @abstractmethod
    async def create(self, product: ProductCreate) -> ProductRead:
        pass

    @abstractmethod
    async def list(self) -> List[ProductRead]:
        pass

    @abstractmethod
    async def get(self, product_id: int) -> ProductRead:
        pass

    @abstractmethod
    async def update(self, product_id: int, updates: ProductUpdate) -> None:
        pass

    @abstractmethod
    async def delete(self, product_id: int) -> None:
        pass


class ICustomerDirectory(ABC):
    @abstractmethod
    async def create(self, customer: CustomerCreate) -> Optional[CustomerRead]:
        """Returns None when the created record carries no usable id."""

    @abstractmethod
    async def list(self) -> List[CustomerRead]:
        pass

    @abstractmethod
    async def get(self, customer_id: int) -> CustomerRead:
        """Raises NotFoundError when the id is unknown."""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[CustomerRead]:
        """Raises NotFoundError when no customer has this email."""

    @abstractmethod
    async def update(self, customer_id: int, updates: CustomerUpdate) -> None:
        pass

    @abstractmethod
    async def delete(self, customer_id: int) -> None:
        pass


class IOrderLedger(ABC):
    @abstractmethod
    async def create(self, order: OrderCreate) -> OrderRead:
        pass

    @abstractmethod
    async def list(self) -> List[OrderSummaryRead]:
        pass

    @abstractmethod
    async def list_with_items(self) -> List[OrderRead]:
        pass

    @abstractmethod
    async def get(self, order_id: int) -> OrderRead:
        pass

    @abstractmethod
    async def update(
        self,
        order_id: int,
        *,
        payment_status: Optional[str] = None,
        payment_id: Optional[str] = None,
        order_status: Optional[str] = None,
    ) -> None:
        pass

    @abstractmethod
    async def delete(self, order_id: int) -> None:
        pass

    @abstractmethod
    async def update_item_quantity(self, item_id: int, quantity: int) -> None:
        pass

    @abstractmethod
    async def delete_item(self, item_id: int) -> None:
        pass


class IPaymentGateway(ABC):
    @abstractmethod
    async def create_session(self, cart: List[CartLine], customer_id: int) -> Optional[str]:
        """Returns the checkout session id, or None if the processor gave none."""

    @abstractmethod
    async def fetch_session_status(self, session_id: str) -> SessionStatus:
        pass

    @abstractmethod
    async def fetch_payment_details(self, session_id: str) -> PaymentDetails:
        pass

    @abstractmethod
    async def redirect_to_checkout(self, session_id: str) -> Optional[str]:
        """Hands the shopper to the hosted page. Returns an error message or None."""
