import asyncio
from decimal import Decimal

import httpx
from argon2 import PasswordHasher

from storefront.core.errors import DependencyError
from storefront.domain.models import Customer
from storefront.infrastructure.api_client import HttpCustomerDirectory, StorefrontApiClient
from storefront.infrastructure.database import SessionLocal


def _create_customer(client, payload):
    response = client.post("/customers", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _order_payload(customer_id, items=None, total="40.00"):
    items = items or [{"product_id": 1, "product_name": "Shirt", "quantity": 2, "unit_price": "20.00"}]
    return {
        "customer_id": customer_id,
        "total_price": total,
        "payment_status": "Unpaid",
        "payment_id": "",
        "order_status": "Pending",
        "customer_firstname": "Ada",
        "customer_lastname": "Lovelace",
        "customer_email": "ada@example.com",
        "order_items": items,
    }


# ---------- Health & products ----------

def test_health_check_reports_active(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "active"


def test_product_crud(client):
    created = client.post("/products", json={"name": "Shirt", "price": "20.00", "stock": 3})
    assert created.status_code == 201
    product = created.json()
    assert Decimal(product["price"]) == Decimal("20.00")

    listed = client.get("/products").json()
    assert [p["name"] for p in listed] == ["Shirt"]

    patched = client.patch(f"/products/{product['id']}", json={"price": "18.50"})
    assert Decimal(patched.json()["price"]) == Decimal("18.50")
    assert patched.json()["name"] == "Shirt"

    assert client.delete(f"/products/{product['id']}").status_code == 204
    assert client.get(f"/products/{product['id']}").status_code == 404
    assert client.delete(f"/products/{product['id']}").status_code == 404


# ---------- Customers ----------

def test_customer_lookup_by_email_returns_404_when_missing(client):
    response = client.get("/customers/email/nobody@example.com")
    assert response.status_code == 404


def test_customer_create_and_lookup_hides_password(client, customer_payload):
    created = _create_customer(client, customer_payload)
    assert "password" not in created
    assert "password_hash" not in created

    found = client.get("/customers/email/ADA@example.com")
    assert found.status_code == 200
    assert found.json()["id"] == created["id"]


def test_customer_password_is_stored_as_argon2_hash(client, customer_payload):
    created = _create_customer(client, customer_payload)
    session = SessionLocal()
    try:
        stored = session.get(Customer, created["id"]).password_hash
    finally:
        session.close()

    assert stored.startswith("$argon2id$")
    assert customer_payload["password"] not in stored
    assert PasswordHasher().verify(stored, customer_payload["password"])


def test_duplicate_customer_email_is_rejected(client, customer_payload):
    _create_customer(client, customer_payload)
    response = client.post("/customers", json=customer_payload)
    assert response.status_code == 409


def test_customer_patch_and_delete(client, customer_payload):
    created = _create_customer(client, customer_payload)
    patched = client.patch(f"/customers/{created['id']}", json={"city": "Paris"})
    assert patched.json()["city"] == "Paris"
    assert patched.json()["firstname"] == "Ada"

    assert client.delete(f"/customers/{created['id']}").status_code == 204
    assert client.get(f"/customers/{created['id']}").status_code == 404


# ---------- Orders ----------

def test_order_create_returns_items_and_list_omits_them(client, customer_payload):
    customer = _create_customer(client, customer_payload)
    created = client.post("/orders", json=_order_payload(customer["id"]))
    assert created.status_code == 201, created.text
    order = created.json()
    assert Decimal(order["total_price"]) == Decimal("40.00")
    assert order["payment_status"] == "Unpaid"
    assert order["payment_id"] == ""
    assert [i["product_name"] for i in order["order_items"]] == ["Shirt"]
    assert order["order_items"][0]["order_id"] == order["id"]

    listed = client.get("/orders").json()
    assert [o["id"] for o in listed] == [order["id"]]
    assert "order_items" not in listed[0]

    detail = client.get(f"/orders/{order['id']}").json()
    assert len(detail["order_items"]) == 1


def test_order_total_must_match_items(client, customer_payload):
    customer = _create_customer(client, customer_payload)
    response = client.post("/orders", json=_order_payload(customer["id"], total="39.99"))
    assert response.status_code == 422


def test_order_for_unknown_customer_is_rejected(client):
    response = client.post("/orders", json=_order_payload(999))
    assert response.status_code == 400


def test_order_patch_is_partial(client, customer_payload):
    customer = _create_customer(client, customer_payload)
    order = client.post("/orders", json=_order_payload(customer["id"])).json()

    patched = client.patch(f"/orders/{order['id']}", json={"payment_id": "cs_test_1"})
    assert patched.status_code == 200
    body = patched.json()
    assert body["payment_id"] == "cs_test_1"
    assert body["payment_status"] == "Unpaid"
    assert body["order_status"] == "Pending"

    assert client.patch("/orders/999", json={"order_status": "Shipped"}).status_code == 404


def test_order_delete_removes_items(client, customer_payload):
    customer = _create_customer(client, customer_payload)
    order = client.post("/orders", json=_order_payload(customer["id"])).json()
    assert client.delete(f"/orders/{order['id']}").status_code == 204
    assert client.get(f"/orders/{order['id']}").status_code == 404


def test_order_item_quantity_patch_recalculates_total(client, customer_payload):
    customer = _create_customer(client, customer_payload)
    items = [
        {"product_id": 1, "product_name": "Shirt", "quantity": 2, "unit_price": "20.00"},
        {"product_id": 2, "product_name": "Hat", "quantity": 1, "unit_price": "5.50"},
    ]
    order = client.post("/orders", json=_order_payload(customer["id"], items=items, total="45.50")).json()
    shirt = order["order_items"][0]

    response = client.patch(f"/order-items/{shirt['id']}", json={"quantity": 3})
    assert response.status_code == 200
    assert response.json()["quantity"] == 3

    detail = client.get(f"/orders/{order['id']}").json()
    assert Decimal(detail["total_price"]) == Decimal("65.50")


def test_order_item_patch_without_body_deletes_it(client, customer_payload):
    customer = _create_customer(client, customer_payload)
    items = [
        {"product_id": 1, "product_name": "Shirt", "quantity": 2, "unit_price": "20.00"},
        {"product_id": 2, "product_name": "Hat", "quantity": 1, "unit_price": "5.50"},
    ]
    order = client.post("/orders", json=_order_payload(customer["id"], items=items, total="45.50")).json()
    hat = order["order_items"][1]

    response = client.patch(f"/order-items/{hat['id']}")
    assert response.status_code == 204

    detail = client.get(f"/orders/{order['id']}").json()
    assert [i["product_name"] for i in detail["order_items"]] == ["Shirt"]
    assert Decimal(detail["total_price"]) == Decimal("40.00")

    assert client.patch(f"/order-items/{hat['id']}").status_code == 404


# ---------- Payments ----------

def test_checkout_session_requires_cart_and_customer(client):
    assert client.post("/create-checkout-session", json={"cart": [], "customerId": 1}).status_code == 400
    line = {"id": 1, "name": "Shirt", "price": "20.00", "quantity": 2}
    assert client.post("/create-checkout-session", json={"cart": [line]}).status_code == 400


def test_checkout_session_returns_session_id(client):
    line = {"id": 1, "name": "Shirt", "price": "20.00", "quantity": 2}
    response = client.post("/create-checkout-session", json={"cart": [line], "customerId": 7})
    assert response.status_code == 200
    body = response.json()
    assert body["sessionId"] == "cs_test_1"
    assert body["url"].endswith("cs_test_1")

    processor = client.app.state.payment_processor
    assert processor.sessions["cs_test_1"]["customer_id"] == 7
    assert processor.sessions["cs_test_1"]["cart"][0].quantity == 2


def test_processor_failure_surfaces_as_bad_gateway(client):
    client.app.state.payment_processor.fail_with = DependencyError("stripe down", status_code=502)
    line = {"id": 1, "name": "Shirt", "price": "20.00", "quantity": 1}
    response = client.post("/create-checkout-session", json={"cart": [line], "customerId": 7})
    assert response.status_code == 502
    assert response.json()["detail"] == "stripe down"


def test_session_status(client):
    assert client.get("/session_status").status_code == 400
    body = client.get("/session_status", params={"session_id": "cs_test_9"}).json()
    assert body == {"status": "complete", "payment_status": "unpaid", "customer_email": "ada@example.com"}


def test_payment_details_links_session_to_order(client, customer_payload):
    customer = _create_customer(client, customer_payload)
    order = client.post("/orders", json=_order_payload(customer["id"])).json()
    client.patch(f"/orders/{order['id']}", json={"payment_id": "cs_test_1"})
    client.app.state.payment_processor.payment_status["cs_test_1"] = "paid"

    response = client.get("/stripe/payment-details", params={"session_id": "cs_test_1"})
    assert response.status_code == 200
    assert response.json() == {"order_id": order["id"], "payment_status": "Paid"}


def test_payment_details_unknown_session_is_404(client):
    response = client.get("/stripe/payment-details", params={"session_id": "cs_missing"})
    assert response.status_code == 404


# ---------- Admin ----------

def test_admin_dashboard_lists_orders(client, customer_payload):
    customer = _create_customer(client, customer_payload)
    client.post("/orders", json=_order_payload(customer["id"]))
    response = client.get("/admin/orders")
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Shirt" in response.text
    assert "$40.00" in response.text


def test_client_finds_customers_whose_email_has_reserved_characters(client, customer_payload):
    emails = ["ann#1@example.com", "bob?x@example.com"]
    ids = [_create_customer(client, {**customer_payload, "email": email})["id"] for email in emails]

    async def lookup():
        transport = httpx.ASGITransport(app=client.app)
        async with StorefrontApiClient(client=httpx.AsyncClient(base_url="http://api.test", transport=transport)) as api:
            directory = HttpCustomerDirectory(api)
            return [await directory.get_by_email(email) for email in emails]

    found = asyncio.run(lookup())
    assert [c.id for c in found] == ids
    assert [c.email for c in found] == emails
