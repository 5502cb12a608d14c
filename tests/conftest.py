import os
import tempfile

# Point settings at a throwaway SQLite file before anything imports storefront
_TMP_DIR = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["REDIS_URL"] = ""
os.environ["DB_MAX_RETRIES"] = "1"
os.environ["DB_RETRY_WAIT_SECONDS"] = "0"

import pytest
from fastapi.testclient import TestClient

from fakes import FakePaymentProcessor


@pytest.fixture
def client():
    from storefront.infrastructure.database import Base, engine
    from storefront.main import app

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    original = app.state.payment_processor
    app.state.payment_processor = FakePaymentProcessor()
    with TestClient(app) as c:
        yield c
    app.state.payment_processor = original


@pytest.fixture
def customer_payload():
    return {
        "firstname": "Ada",
        "lastname": "Lovelace",
        "email": "ada@example.com",
        "password": "analytical",
        "phone": "555-0100",
        "street_address": "12 Engine St",
        "postal_code": "10001",
        "city": "London",
        "country": "UK",
    }
