import json
import logging
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import parse_qs, urlsplit

from pydantic import ValidationError as PydanticValidationError

from storefront.application.cart_store import CartStore
from storefront.application.results import Failure, StepResult, Success
from storefront.core.errors import DependencyError, NotFoundError, StorefrontError, ValidationError
from storefront.domain.cart import CustomerInfo, OrderSummary, calculate_total_price, map_cart_to_order_items
from storefront.domain.models import ORDER_PENDING, PAYMENT_UNPAID
from storefront.domain.schemas import CustomerCreate, CustomerRead, OrderCreate, OrderRead
from storefront.interfaces.IKeyValueStore import IKeyValueStore
from storefront.interfaces.IStorefrontApi import ICustomerDirectory, IOrderLedger, IPaymentGateway

logger = logging.getLogger(__name__)

# Define our States
STATE_CART = "cart"
STATE_CUSTOMER_INFO = "customerInfo"
STATE_SUCCESS = "success"
STATE_ORDER_SUMMARY = "orderSummary"

CUSTOMER_INFO_KEY = "customerInfo"

MSG_EMPTY_CART = "Your cart is empty."
MSG_MISSING_FIELDS = "Please fill in all fields."
MSG_WRONG_STEP = "Customer details can only be submitted from the checkout form."
MSG_INVALID_CART = "Your cart contains an invalid quantity."
MSG_INVALID_CUSTOMER = "Please check your customer details."
MSG_LOOKUP_FAILED = "Failed to check customer existence. Please try again."
MSG_CREATE_CUSTOMER_FAILED = "Failed to create customer. Please try again."
MSG_NO_CUSTOMER = "Failed to retrieve customer information."
MSG_CHECKOUT_FAILED = "Failed to complete the checkout process. Please try again."
MSG_NO_SESSION = "Failed to create checkout session."
MSG_REDIRECT_FAILED = "Failed to redirect to the payment page. Please try again."
MSG_MISSING_SESSION_ID = "Session ID is missing."
MSG_CONFIRM_FAILED = "Failed to confirm the order. Please try again."


@dataclass(frozen=True)
class CheckoutHandoff:
    """What exists once the shopper has been sent to the payment page."""

    order_id: int
    session_id: str
    customer_id: int


def parse_return_url(url: str) -> dict:
    """``https://shop/success?session_id=cs_123`` -> ``{"session_id": "cs_123"}``"""
    query = parse_qs(urlsplit(url).query)
    return {name: values[0] for name, values in query.items() if values}


class CheckoutWorkflow:
    def __init__(
        self,
        cart: CartStore,
        customers: ICustomerDirectory,
        orders: IOrderLedger,
        payments: IPaymentGateway,
        storage: IKeyValueStore,
    ):
        self.cart = cart
        self.customers = customers
        self.orders = orders
        self.payments = payments
        self.storage = storage

        self.state = STATE_CART
        self.error: Optional[str] = None
        self.customer_info = self._load_customer_info()
        self.current_order: Optional[OrderRead] = None
        self.order_summary: Optional[OrderSummary] = None
        self._reconciled_session: Optional[str] = None

    # --- CUSTOMER FORM ---

    def _load_customer_info(self) -> CustomerInfo:
        raw = self.storage.get(CUSTOMER_INFO_KEY)
        if not raw:
            return CustomerInfo()
        try:
            return CustomerInfo.model_validate(json.loads(raw))
        except (ValueError, TypeError, PydanticValidationError) as e:
            logger.warning(f"Stored customer info is unreadable ({e}); starting blank")
            return CustomerInfo()

    def update_customer_info(self, **fields: str) -> CustomerInfo:
        unknown = set(fields) - set(CustomerInfo.model_fields)
        if unknown:
            raise ValueError(f"Unknown customer fields: {', '.join(sorted(unknown))}")
        self.customer_info = self.customer_info.model_copy(update=fields)
        self.storage.set(CUSTOMER_INFO_KEY, self.customer_info.model_dump_json())
        return self.customer_info

    # --- TRANSITIONS ---

    def go_to_checkout(self) -> StepResult:
        if self.state != STATE_CART:
            return self._fail(ValidationError.kind, f"Cannot go to checkout from '{self.state}'.")
        if self.cart.is_empty:
            return self._fail(ValidationError.kind, MSG_EMPTY_CART)
        self._transition(STATE_CUSTOMER_INFO)
        return Success(self.state)

    def back_to_cart(self) -> StepResult:
        # ``success`` only persists when reconciliation failed; the cart is still intact
        if self.state not in (STATE_CUSTOMER_INFO, STATE_SUCCESS):
            return self._fail(ValidationError.kind, f"Cannot go back to the cart from '{self.state}'.")
        self._transition(STATE_CART)
        return Success(self.state)

    async def submit_customer_info(self) -> StepResult:
        """
        Runs the checkout sequence up to the payment hand-off.
        The state stays at ``customerInfo``; the shopper leaves for the
        payment page and comes back through ``complete_payment``.
        """
        if self.state != STATE_CUSTOMER_INFO:
            return self._fail(ValidationError.kind, MSG_WRONG_STEP)
        if self.cart.is_empty:
            return self._fail(ValidationError.kind, MSG_EMPTY_CART)
        missing = self.customer_info.missing_fields()
        if missing:
            logger.info(f"Checkout form incomplete: {', '.join(missing)}")
            return self._fail(ValidationError.kind, MSG_MISSING_FIELDS)
        self.error = None

        # 1. CUSTOMER
        found = await self._find_or_create_customer()
        if not found.ok:
            return found
        customer: Optional[CustomerRead] = found.value
        if customer is None or not customer.id:
            return self._fail(DependencyError.kind, MSG_NO_CUSTOMER)

        # 2. ORDER
        lines = self.cart.lines
        info = self.customer_info
        try:
            new_order = OrderCreate(
                customer_id=customer.id,
                total_price=calculate_total_price(lines),
                payment_status=PAYMENT_UNPAID,
                payment_id="",
                order_status=ORDER_PENDING,
                customer_firstname=info.firstname,
                customer_lastname=info.lastname,
                customer_email=info.email,
                customer_phone=info.phone,
                customer_street_address=info.street_address,
                customer_postal_code=info.postal_code,
                customer_city=info.city,
                customer_country=info.country,
                order_items=map_cart_to_order_items(lines),
            )
        except PydanticValidationError as e:
            logger.warning(f"Cart rejected before order creation: {e}")
            return self._fail(ValidationError.kind, MSG_INVALID_CART)

        try:
            created = await self.orders.create(new_order)
        except StorefrontError as e:
            logger.error(f"Order creation failed: {e}")
            return self._fail(DependencyError.kind, MSG_CHECKOUT_FAILED)
        self.current_order = created
        logger.info(f"Order {created.id} created (total {created.total_price})")

        # 3. PAYMENT SESSION
        try:
            session_id = await self.payments.create_session(lines, customer.id)
        except StorefrontError as e:
            logger.error(f"Checkout session request failed: {e}")
            session_id = None
        if not session_id:
            logger.warning(f"Order {created.id} left Unpaid without a payment id")
            return self._fail(DependencyError.kind, MSG_NO_SESSION)

        try:
            await self.orders.update(
                created.id,
                payment_id=session_id,
                payment_status=PAYMENT_UNPAID,
                order_status=ORDER_PENDING,
            )
        except StorefrontError as e:
            logger.error(f"Attaching payment id {session_id} to order {created.id} failed: {e}")
            return self._fail(DependencyError.kind, MSG_CHECKOUT_FAILED)
        logger.info(f"Order {created.id} updated with payment_id {session_id}")

        # 4. HAND-OFF
        redirect_error = await self.payments.redirect_to_checkout(session_id)
        if redirect_error:
            logger.error(f"Payment page hand-off failed: {redirect_error}")
            return self._fail(DependencyError.kind, MSG_REDIRECT_FAILED)

        return Success(CheckoutHandoff(order_id=created.id, session_id=session_id, customer_id=customer.id))

    async def complete_payment(self, return_context: Mapping[str, str]) -> StepResult:
        """Reconciles the order after the shopper comes back from the payment page."""
        session_id = return_context.get("session_id")

        if self.state == STATE_ORDER_SUMMARY and session_id and session_id == self._reconciled_session:
            return Success(self.order_summary)

        self._transition(STATE_SUCCESS)
        if not session_id:
            return self._fail(ValidationError.kind, MSG_MISSING_SESSION_ID)

        try:
            details = await self.payments.fetch_payment_details(session_id)
            logger.info(f"Payment details for {session_id}: order {details.order_id} is {details.payment_status}")
            await self.orders.update(
                details.order_id,
                payment_status=details.payment_status,
                order_status=ORDER_PENDING,
            )
        except StorefrontError as e:
            logger.error(f"Reconciling session {session_id} failed: {e}")
            return self._fail(DependencyError.kind, MSG_CONFIRM_FAILED)

        summary = OrderSummary(
            customer=self.customer_info.model_copy(),
            products=self.cart.lines,
            total=self.cart.total_price(),
        )
        self.cart.clear()
        self.order_summary = summary
        self._reconciled_session = session_id
        self.error = None
        self._transition(STATE_ORDER_SUMMARY)
        return Success(summary)

    # --- HELPERS ---

    async def _find_or_create_customer(self) -> StepResult:
        info = self.customer_info
        try:
            customer = await self.customers.get_by_email(info.email)
            logger.info(f"Customer already exists: {customer.id if customer else '?'}")
            return Success(customer)
        except NotFoundError:
            logger.info(f"Customer {info.email} does not exist, creating a new one...")
        except StorefrontError as e:
            logger.error(f"Error checking customer existence: {e}")
            return self._fail(DependencyError.kind, MSG_LOOKUP_FAILED)

        try:
            customer = await self.customers.create(CustomerCreate(**info.model_dump()))
        except PydanticValidationError as e:
            logger.info(f"Customer details rejected: {e}")
            return self._fail(ValidationError.kind, MSG_INVALID_CUSTOMER)
        except StorefrontError as e:
            logger.error(f"Error creating customer: {e}")
            return self._fail(DependencyError.kind, MSG_CREATE_CUSTOMER_FAILED)
        return Success(customer)

    def _transition(self, new_state: str) -> None:
        logger.debug(f"Checkout state: {self.state} -> {new_state}")
        self.state = new_state

    def _fail(self, kind: str, reason: str) -> Failure:
        self.error = reason
        return Failure(kind=kind, reason=reason)
