from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Service ---
    PROJECT_NAME: str = "Storefront"
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    DATABASE_URL: str = "sqlite:///./storefront.db"
    DB_MAX_RETRIES: int = 10
    DB_RETRY_WAIT_SECONDS: float = 3

    # --- Client storage ---
    REDIS_URL: str | None = None
    CART_SESSION_TTL: int = 3600  # seconds

    # --- Payments ---
    STRIPE_SECRET_KEY: str | None = None
    STRIPE_CURRENCY: str = "usd"

    # --- URLs ---
    FRONTEND_URL: str = "http://localhost:5173"
    API_URL: str = "http://localhost:8000"
    CORS_ORIGINS: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"  # docker-compose .env files carry unrelated keys
    )

settings = Settings()
