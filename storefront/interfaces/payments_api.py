from fastapi import APIRouter, HTTPException, Request
import logging

from storefront.domain.schemas import (
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    PaymentDetails,
    SessionStatus,
)

router = APIRouter(tags=["payments"])
logger = logging.getLogger(__name__)

# Stripe reports lower-case values; orders store the labels the client shows.
PAYMENT_STATUS_LABELS = {
    "paid": "Paid",
    "unpaid": "Unpaid",
    "no_payment_required": "No payment required",
}


@router.post("/create-checkout-session", response_model=CheckoutSessionResponse)
def create_checkout_session(payload: CheckoutSessionRequest, request: Request):
    logger.info(f"Received request to create checkout session for customer {payload.customer_id} ({len(payload.cart)} lines)")

    if not payload.cart:
        logger.error("Cart validation failed")
        raise HTTPException(status_code=400, detail="Cart is required and must not be empty")
    if not payload.customer_id:
        logger.error("Customer ID validation failed")
        raise HTTPException(status_code=400, detail="Customer ID is required")

    processor = request.app.state.payment_processor
    return processor.create_checkout_session(
        payload.cart,
        payload.customer_id,
        success_url=payload.success_url,
        cancel_url=payload.cancel_url,
    )


@router.get("/session_status", response_model=SessionStatus)
def session_status(request: Request, session_id: str = ""):
    if not session_id:
        raise HTTPException(status_code=400, detail="Session ID is required")
    return request.app.state.payment_processor.retrieve_session(session_id)


@router.get("/stripe/payment-details", response_model=PaymentDetails)
def payment_details(request: Request, session_id: str = ""):
    """Links a returning checkout session back to the order that carries it."""
    if not session_id:
        raise HTTPException(status_code=400, detail="Session ID is required")

    order = request.app.state.order_repo.get_order_by_payment_id(session_id)
    if order is None:
        raise HTTPException(status_code=404, detail="No order for this session")

    session = request.app.state.payment_processor.retrieve_session(session_id)
    raw_status = session.payment_status or "unpaid"
    return PaymentDetails(
        order_id=order.id,
        payment_status=PAYMENT_STATUS_LABELS.get(raw_status, raw_status),
    )
