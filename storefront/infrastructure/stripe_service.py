import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

import stripe

from storefront.core.config import settings
from storefront.core.errors import DependencyError
from storefront.domain.schemas import CheckoutLine, CheckoutSessionResponse, SessionStatus
from storefront.interfaces.IPaymentProcessor import IPaymentProcessor

logger = logging.getLogger(__name__)


def to_minor_units(price: Decimal) -> int:
    """Stripe wants integer cents."""
    return int((Decimal(price) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_line_items(cart: List[CheckoutLine], currency: str) -> List[dict]:
    return [
        {
            "price_data": {
                "currency": currency,
                "product_data": {"name": line.name},
                "unit_amount": to_minor_units(line.price),
            },
            "quantity": line.quantity,
        }
        for line in cart
    ]


class StripePaymentProcessor(IPaymentProcessor):
    def __init__(
        self,
        api_key: Optional[str] = settings.STRIPE_SECRET_KEY,
        frontend_url: str = settings.FRONTEND_URL,
        currency: str = settings.STRIPE_CURRENCY,
    ):
        self.api_key = api_key
        self.frontend_url = frontend_url.rstrip("/")
        self.currency = currency
        if not api_key:
            logger.warning("⚠️ StripePaymentProcessor: STRIPE_SECRET_KEY missing. Checkout sessions will fail.")

    def _require_key(self) -> str:
        if not self.api_key:
            raise DependencyError("Payment processor is not configured", status_code=503)
        return self.api_key

    def create_checkout_session(
        self,
        cart: List[CheckoutLine],
        customer_id: int,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
    ) -> CheckoutSessionResponse:
        api_key = self._require_key()
        line_items = to_line_items(cart, self.currency)
        logger.debug(f"Line items for Stripe session: {line_items}")
        try:
            session = stripe.checkout.Session.create(
                api_key=api_key,
                payment_method_types=["card"],
                line_items=line_items,
                mode="payment",
                success_url=success_url or f"{self.frontend_url}/success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=cancel_url or f"{self.frontend_url}/cart",
                client_reference_id=str(customer_id),
            )
        except stripe.StripeError as e:
            logger.error(f"❌ Stripe session creation failed: {e}")
            raise DependencyError("Failed to create checkout session", status_code=502) from e

        logger.info(f"Stripe session {session.id} created for customer {customer_id}")
        return CheckoutSessionResponse(session_id=session.id, url=session.url)

    def retrieve_session(self, session_id: str) -> SessionStatus:
        api_key = self._require_key()
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=api_key)
        except stripe.StripeError as e:
            logger.error(f"❌ Stripe session lookup failed for {session_id}: {e}")
            raise DependencyError("Failed to retrieve session status", status_code=502) from e

        details = session.customer_details
        return SessionStatus(
            status=session.status,
            payment_status=session.payment_status,
            customer_email=details.email if details else None,
        )
