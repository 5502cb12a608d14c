import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from storefront.core.config import settings
from storefront.core.errors import StorefrontError
from storefront.core.logging import setup_logging

# 1. Infrastructure & Domain Imports
from storefront.domain import models  # noqa: F401  (registers tables on Base)
from storefront.infrastructure.database import Base, engine
from storefront.infrastructure.repositories.customer_repository import PostgresCustomerRepository
from storefront.infrastructure.repositories.order_repository import PostgresOrderRepository
from storefront.infrastructure.repositories.product_repository import PostgresProductRepository
from storefront.infrastructure.stripe_service import StripePaymentProcessor
from storefront.interfaces import admin_dashboard, customers_api, orders_api, payments_api, products_api

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

STATUS_BY_KIND = {"validation": 400, "not_found": 404}


# ---------------------------------------------------------
# DATABASE CONNECTION (With Retry Logic)
# ---------------------------------------------------------
def wait_for_database(max_retries: int = settings.DB_MAX_RETRIES, wait_seconds: float = settings.DB_RETRY_WAIT_SECONDS) -> bool:
    for attempt in range(max_retries):
        try:
            logger.info(f"🔄 Attempting DB connection ({attempt + 1}/{max_retries})...")
            Base.metadata.create_all(bind=engine)
            logger.info("✅ DB Connected and Tables Created.")
            return True
        except OperationalError:
            logger.warning(f"⚠️ DB not ready yet. Waiting {wait_seconds}s...")
            time.sleep(wait_seconds)
    logger.error("❌ Could not connect to DB after retries.")
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.db_ready = wait_for_database()
    yield


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------
# COMPOSITION ROOT
# ---------------------------------------------------------
app.state.product_repo = PostgresProductRepository()
app.state.customer_repo = PostgresCustomerRepository()
app.state.order_repo = PostgresOrderRepository()
app.state.payment_processor = StripePaymentProcessor()


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    status = exc.status_code or STATUS_BY_KIND.get(exc.kind, 500)
    logger.error(f"{request.method} {request.url.path} -> {status}: {exc.message}")
    return JSONResponse(status_code=status, content={"detail": exc.message})


# Include Routers
app.include_router(products_api.router)
app.include_router(customers_api.router)
app.include_router(orders_api.router)
app.include_router(payments_api.router)
app.include_router(admin_dashboard.router)


@app.get("/")
def health_check():
    status = "active" if getattr(app.state, "db_ready", False) else "degraded"
    return {"status": status, "system": settings.PROJECT_NAME}
