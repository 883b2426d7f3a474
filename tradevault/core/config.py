"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here.
"""

from decimal import Decimal
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_default: Default rate limit for all endpoints.
        rate_limit_auth: Rate limit for register/login endpoints.
        cors_origins: Origins allowed by the CORS middleware.

    Database, auth, mail, market data, storage and business-rule
    settings follow. Secrets default to development values only.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "TradeVault"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_default: str = "60/minute"
    rate_limit_auth: str = "10/minute"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Database
    database_url: Optional[str] = None
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "tradevault"

    # Auth
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expiry_minutes: int = 60 * 24
    bcrypt_rounds: int = 12

    # Outbound mail
    notifications_enabled: bool = True
    mail_host: str = "localhost"
    mail_port: int = 465
    mail_user: Optional[str] = None
    mail_password: Optional[str] = None
    mail_from: str = "TradeVault <no-reply@tradevault.local>"
    mail_use_ssl: bool = True
    notification_webhook_url: Optional[str] = None

    # Market data
    finnhub_api_key: Optional[str] = None
    finnhub_base_url: str = "https://finnhub.io/api/v1"
    quote_cache_seconds: int = 60
    http_timeout_seconds: float = 10.0

    # Object storage
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None

    # Business rules
    order_expiry_minutes: int = 30
    withdrawal_daily_limit: Decimal = Decimal("10000")
    plan_price_tolerance: Decimal = Decimal("0.10")

    def get_database_url(self) -> str:
        """Return the effective database URL.

        Priority:
        1. Explicit `DATABASE_URL`
        2. Build a psycopg2 DSN from postgres_* values (Docker Compose or local setups)
        """
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}@"
            f"{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()
