# storefront/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Supabase Postgres connection string)
      - SUPABASE_JWT_SECRET (JWT signing secret from Supabase project settings)

    Optional:
      - IDENTITY_COOKIE_SECRET (signs the shopper identity cookie;
        falls back to SUPABASE_JWT_SECRET)
      - MERCHANT_UPI_ID / MERCHANT_NAME (used in UPI payment links)
    """

    PROJECT_NAME: str = "Storefront API"
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    CORS_ORIGINS: list[str] = [
        "http://localhost:8080",
        "http://127.0.0.1:8080",
        "http://localhost:3000",
    ]

    # DB config
    DATABASE_URL: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Shopper identity cookie
    IDENTITY_COOKIE_NAME: str = "shopper_identity"
    IDENTITY_COOKIE_SECRET: str | None = None
    IDENTITY_COOKIE_MAX_AGE: int = 60 * 60 * 24 * 365
    GUEST_PREFIX: str = "guest"

    # Optimistic locking: attempts before a ConflictError reaches the client
    CART_CONFLICT_RETRIES: int = 5

    # Payment link
    MERCHANT_UPI_ID: str = "merchant@bank"
    MERCHANT_NAME: str = "E-Commerce Store"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def identity_cookie_secret(self) -> str:
        return self.IDENTITY_COOKIE_SECRET or self.SUPABASE_JWT_SECRET


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
