"""
Shopper-side adapters that talk to the storefront REST API over httpx.

Every failure is translated into the storefront error classes: a 404 becomes
``NotFoundError``, anything else (transport errors, other HTTP errors,
unparsable bodies) becomes ``DependencyError``. Nothing is retried.
"""
import asyncio
import logging
import webbrowser
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from storefront.core.config import settings
from storefront.core.errors import DependencyError, NotFoundError
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
from storefront.interfaces.IStorefrontApi import (
    ICustomerDirectory,
    IOrderLedger,
    IPaymentGateway,
    IProductCatalog,
)

logger = logging.getLogger(__name__)


class StorefrontApiClient:
    def __init__(self, base_url: str = settings.API_URL, client: Optional[httpx.AsyncClient] = None):
        self._client = client or httpx.AsyncClient(base_url=base_url)

    async def __aenter__(self) -> "StorefrontApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise DependencyError(f"{method} {path} failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"{method} {path}: not found", status_code=404)
        if response.is_error:
            logger.error(f"{method} {path} -> {response.status_code}: {response.text}")
            raise DependencyError(
                f"{method} {path} -> {response.status_code}", status_code=response.status_code
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise DependencyError(f"{method} {path}: response is not JSON") from e


def _parse(model, data: Any, what: str):
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise DependencyError(f"Unexpected {what} payload: {e}") from e


class HttpProductCatalog(IProductCatalog):
    def __init__(self, api: StorefrontApiClient):
        self.api = api

    async def create(self, product: ProductCreate) -> ProductRead:
        data = await self.api.request("POST", "/products", json=product.model_dump(mode="json"))
        return _parse(ProductRead, data, "product")

    async def list(self) -> List[ProductRead]:
        data = await self.api.request("GET", "/products")
        return [_parse(ProductRead, item, "product") for item in data or []]

    async def get(self, product_id: int) -> ProductRead:
        data = await self.api.request("GET", f"/products/{product_id}")
        return _parse(ProductRead, data, "product")

    async def update(self, product_id: int, updates: ProductUpdate) -> None:
        await self.api.request(
            "PATCH", f"/products/{product_id}", json=updates.model_dump(mode="json", exclude_unset=True)
        )

    async def delete(self, product_id: int) -> None:
        await self.api.request("DELETE", f"/products/{product_id}")


class HttpCustomerDirectory(ICustomerDirectory):
    def __init__(self, api: StorefrontApiClient):
        self.api = api

    @staticmethod
    def _usable(data: Any) -> Optional[CustomerRead]:
        # A body without an id is treated as "no customer", not as a crash
        if not isinstance(data, dict) or not data.get("id"):
            return None
        return _parse(CustomerRead, data, "customer")

    async def create(self, customer: CustomerCreate) -> Optional[CustomerRead]:
        data = await self.api.request("POST", "/customers", json=customer.model_dump(mode="json"))
        return self._usable(data)

    async def list(self) -> List[CustomerRead]:
        data = await self.api.request("GET", "/customers")
        return [_parse(CustomerRead, item, "customer") for item in data or []]

    async def get(self, customer_id: int) -> CustomerRead:
        data = await self.api.request("GET", f"/customers/{customer_id}")
        return _parse(CustomerRead, data, "customer")

    async def get_by_email(self, email: str) -> Optional[CustomerRead]:
        # '#' and '?' are legal in addresses but would cut the path short
        data = await self.api.request("GET", f"/customers/email/{quote(email, safe='@')}")
        return self._usable(data)

    async def update(self, customer_id: int, updates: CustomerUpdate) -> None:
        await self.api.request(
            "PATCH", f"/customers/{customer_id}", json=updates.model_dump(mode="json", exclude_unset=True)
        )

    async def delete(self, customer_id: int) -> None:
        await self.api.request("DELETE", f"/customers/{customer_id}")


class HttpOrderLedger(IOrderLedger):
    def __init__(self, api: StorefrontApiClient):
        self.api = api

    async def create(self, order: OrderCreate) -> OrderRead:
        data = await self.api.request("POST", "/orders", json=order.model_dump(mode="json"))
        return _parse(OrderRead, data, "order")

    async def list(self) -> List[OrderSummaryRead]:
        data = await self.api.request("GET", "/orders")
        return [_parse(OrderSummaryRead, item, "order") for item in data or []]

    async def get(self, order_id: int) -> OrderRead:
        data = await self.api.request("GET", f"/orders/{order_id}")
        return _parse(OrderRead, data, "order")

    async def list_with_items(self) -> List[OrderRead]:
        """One list call, then every order's details fetched concurrently."""
        orders = await self.list()

        async def with_items(order: OrderSummaryRead) -> OrderRead:
            try:
                detailed = await self.get(order.id)
                items = detailed.order_items
            except (NotFoundError, DependencyError) as e:
                logger.warning(f"Error fetching details for order ID {order.id}: {e}")
                items = []
            return OrderRead(**order.model_dump(), order_items=items)

        return list(await asyncio.gather(*(with_items(o) for o in orders)))

    async def update(
        self,
        order_id: int,
        *,
        payment_status: Optional[str] = None,
        payment_id: Optional[str] = None,
        order_status: Optional[str] = None,
    ) -> None:
        updates = {
            "payment_status": payment_status,
            "payment_id": payment_id,
            "order_status": order_status,
        }
        await self.api.request(
            "PATCH", f"/orders/{order_id}", json={k: v for k, v in updates.items() if v is not None}
        )

    async def delete(self, order_id: int) -> None:
        await self.api.request("DELETE", f"/orders/{order_id}")

    async def update_item_quantity(self, item_id: int, quantity: int) -> None:
        await self.api.request("PATCH", f"/order-items/{item_id}", json={"quantity": quantity})

    async def delete_item(self, item_id: int) -> None:
        # The API treats a PATCH without a body as a delete
        await self.api.request("PATCH", f"/order-items/{item_id}")


class HttpPaymentGateway(IPaymentGateway):
    """
    Creates Stripe checkout sessions through the storefront API and opens the
    hosted payment page with ``opener`` (the system browser by default).
    """

    def __init__(
        self,
        api: StorefrontApiClient,
        opener: Callable[[str], bool] = webbrowser.open,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
    ):
        self.api = api
        self.opener = opener
        self.success_url = success_url
        self.cancel_url = cancel_url
        self._hosted_urls: Dict[str, str] = {}

    async def create_session(self, cart: List[CartLine], customer_id: int) -> Optional[str]:
        payload = {
            "cart": [
                {"id": line.product_id, "name": line.name, "price": str(line.price), "quantity": line.quantity}
                for line in cart
            ],
            "customerId": customer_id,
        }
        if self.success_url:
            payload["success_url"] = self.success_url
        if self.cancel_url:
            payload["cancel_url"] = self.cancel_url

        data = await self.api.request("POST", "/create-checkout-session", json=payload)
        if not isinstance(data, dict) or not data.get("sessionId"):
            return None
        session_id = data["sessionId"]
        if data.get("url"):
            self._hosted_urls[session_id] = data["url"]
        return session_id

    async def fetch_session_status(self, session_id: str) -> SessionStatus:
        data = await self.api.request("GET", "/session_status", params={"session_id": session_id})
        return _parse(SessionStatus, data, "session status")

    async def fetch_payment_details(self, session_id: str) -> PaymentDetails:
        data = await self.api.request("GET", "/stripe/payment-details", params={"session_id": session_id})
        return _parse(PaymentDetails, data, "payment details")

    async def redirect_to_checkout(self, session_id: str) -> Optional[str]:
        url = self._hosted_urls.get(session_id)
        if not url:
            return f"No payment page known for session {session_id}"
        try:
            opened = self.opener(url)
        except webbrowser.Error as e:
            return str(e)
        if opened is False:
            return f"Could not open {url}"
        logger.info(f"Shopper sent to payment page for session {session_id}")
        return None
