from decimal import Decimal
from types import SimpleNamespace

import pytest
import stripe

from storefront.core.errors import DependencyError
from storefront.domain.schemas import CheckoutLine
from storefront.infrastructure.stripe_service import StripePaymentProcessor, to_line_items, to_minor_units


def test_prices_are_sent_in_minor_units():
    assert to_minor_units(Decimal("20.00")) == 2000
    assert to_minor_units(Decimal("19.995")) == 2000
    assert to_minor_units(Decimal("0.1")) == 10


def test_line_items_shape():
    cart = [CheckoutLine(id=1, name="Shirt", price=Decimal("20.00"), quantity=2)]
    assert to_line_items(cart, "usd") == [
        {
            "price_data": {"currency": "usd", "product_data": {"name": "Shirt"}, "unit_amount": 2000},
            "quantity": 2,
        }
    ]


def test_create_checkout_session_calls_stripe(monkeypatch):
    calls = {}

    def fake_create(**kwargs):
        calls.update(kwargs)
        return SimpleNamespace(id="cs_test_1", url="https://checkout.stripe.test/cs_test_1")

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
    processor = StripePaymentProcessor(api_key="sk_test", frontend_url="https://shop.test/")

    cart = [CheckoutLine(id=1, name="Shirt", price=Decimal("20.00"), quantity=2)]
    response = processor.create_checkout_session(cart, 7)

    assert response.session_id == "cs_test_1"
    assert calls["client_reference_id"] == "7"
    assert calls["mode"] == "payment"
    assert calls["success_url"] == "https://shop.test/success?session_id={CHECKOUT_SESSION_ID}"
    assert calls["cancel_url"] == "https://shop.test/cart"
    assert calls["api_key"] == "sk_test"


def test_stripe_errors_become_dependency_errors(monkeypatch):
    def fail(*args, **kwargs):
        raise stripe.StripeError("card network down")

    monkeypatch.setattr(stripe.checkout.Session, "retrieve", fail)
    processor = StripePaymentProcessor(api_key="sk_test")
    with pytest.raises(DependencyError) as exc:
        processor.retrieve_session("cs_test_1")
    assert exc.value.status_code == 502


def test_retrieve_session_reads_status_and_email(monkeypatch):
    session = SimpleNamespace(
        status="complete",
        payment_status="paid",
        customer_details=SimpleNamespace(email="ada@example.com"),
    )
    monkeypatch.setattr(stripe.checkout.Session, "retrieve", lambda session_id, api_key: session)
    status = StripePaymentProcessor(api_key="sk_test").retrieve_session("cs_test_1")
    assert (status.status, status.payment_status, status.customer_email) == ("complete", "paid", "ada@example.com")


def test_missing_api_key_fails_without_calling_stripe():
    with pytest.raises(DependencyError) as exc:
        StripePaymentProcessor(api_key=None).create_checkout_session([], 7)
    assert exc.value.status_code == 503
