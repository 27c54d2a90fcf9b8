"""Application settings loaded from the environment."""

from typing import Optional

from pydantic import PostgresDsn, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vatcounsel.core.config.enums import Environment, PeriodKind


class Settings(BaseSettings):
    """Pydantic settings class.

    Values are read from environment variables (and a local ``.env`` file when present).
    Database connection parameters are combined into
    ``SQLALCHEMY_ASYNC_DATABASE_URI`` after validation.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=True)

    PROJECT_NAME: str = "VAT Counsel"
    ENVIRONMENT: Environment = Environment.LOCAL
    DEBUG: bool = False
    TESTING: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Database
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_DB: str = "vatcounsel"
    POSTGRES_SSLMODE: str = "prefer"
    SQLALCHEMY_ASYNC_DATABASE_URI: Optional[str] = None
    db_pool_size: int = 10
    db_pool_max_overflow: int = 20
    RUN_ALEMBIC_MIGRATIONS: bool = False

    # Auth (Supabase-issued access tokens)
    AUTH_ENABLED: bool = True
    LOCAL_USER_ID: Optional[str] = None
    SUPABASE_JWT_SECRET: str = ""
    SUPABASE_JWT_AUDIENCE: str = "authenticated"

    # Billing
    STRIPE_ENABLED: bool = False
    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""
    STRIPE_PREMIUM_PRICE_ID: str = ""
    SITE_URL: str = "http://localhost:3000"
    BILLING_CHECKOUT_SUCCESS_PATH: str = "/billing/success"
    BILLING_CHECKOUT_CANCEL_PATH: str = "/billing/cancel"
    BILLING_PORTAL_RETURN_PATH: str = "/app/billing"

    # Usage
    FREE_PLAN_PERIOD_KIND: PeriodKind = PeriodKind.MONTHLY

    @field_validator("SITE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Paths are appended to SITE_URL, so it must not end in a slash."""
        return v.rstrip("/")

    @model_validator(mode="after")
    def assemble_db_connection(self) -> "Settings":
        """Build the async database URI from the POSTGRES_* parts when not given."""
        if self.SQLALCHEMY_ASYNC_DATABASE_URI:
            return self
        self.SQLALCHEMY_ASYNC_DATABASE_URI = str(
            PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=self.POSTGRES_USER,
                password=self.POSTGRES_PASSWORD or None,
                host=self.POSTGRES_HOST,
                port=self.POSTGRES_PORT,
                path=self.POSTGRES_DB,
            )
        )
        return self

    @property
    def is_local(self) -> bool:
        """Whether the app runs in the local environment."""
        return self.ENVIRONMENT == Environment.LOCAL
