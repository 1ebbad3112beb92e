"""Application configuration using Pydantic Settings.

Reads configuration from environment variables with sensible defaults.
All secrets should be provided via environment variables.
"""

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    environment: Literal["prod", "staging", "dev"] = Field(
        default="dev",
        description="Environment name",
    )
    service_name: str = Field(
        default="product-catalog-service",
        description="Service name reported by health checks",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # =========================================================================
    # Database
    # =========================================================================
    db_url: str | None = Field(
        default=None,
        description="Full SQLAlchemy async URL (overrides the db_* parts)",
    )
    db_user: str = Field(
        default="catalog_app",
        description="Database user",
    )
    db_password: str = Field(
        default="",
        description="Database password",
    )
    db_name: str = Field(
        default="product_catalog",
        description="Database name",
    )
    db_host: str = Field(
        default="localhost",
        description="Database host",
    )
    db_port: int = Field(
        default=5432,
        description="Database port",
    )
    db_pool_size: int = Field(
        default=5,
        description="Database connection pool size",
    )
    db_pool_max_overflow: int = Field(
        default=10,
        description="Max overflow connections beyond pool size",
    )
    db_create_tables: bool = Field(
        default=False,
        description="Create missing tables on startup (local development)",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """Build database URL.

        An explicit db_url wins; otherwise a PostgreSQL (asyncpg) URL is
        assembled from the individual parts.
        """
        if self.db_url:
            return self.db_url
        return (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================
    transition_max_retries: int = Field(
        default=3,
        ge=1,
        description="Attempts for a conditional state update before giving up",
    )
    history_default_limit: int = Field(
        default=50,
        ge=1,
        description="Default number of lifecycle history entries returned",
    )
    history_max_limit: int = Field(
        default=500,
        ge=1,
        description="Upper bound for the lifecycle history limit parameter",
    )
    bulk_approve_max_items: int = Field(
        default=200,
        ge=1,
        description="Maximum number of product ids in one bulk approval",
    )

    # =========================================================================
    # Pricing
    # =========================================================================
    pricing_max_discount_percentage: Decimal = Field(
        default=Decimal("50"),
        ge=0,
        le=100,
        description="Cap on the combined discount of one price quote",
    )
    bundle_min_products: int = Field(
        default=3,
        ge=2,
        description="Distinct products needed before the bundle discount applies",
    )
    bundle_discount_percentage: Decimal = Field(
        default=Decimal("5"),
        ge=0,
        le=100,
        description="Extra discount on a qualifying bundle",
    )
    bundle_max_items: int = Field(
        default=50,
        ge=1,
        description="Maximum number of line items in one bundle quote",
    )
    price_history_default_days: int = Field(
        default=30,
        ge=1,
        description="Default look-back window for price history",
    )
    price_history_max_days: int = Field(
        default=365,
        ge=1,
        description="Upper bound for the price history look-back window",
    )

    # =========================================================================
    # Authorization
    # =========================================================================
    authorization_enabled: bool = Field(
        default=True,
        description="Enforce role checks on lifecycle operations",
    )
    access_policy_path: str | None = Field(
        default=None,
        description="Optional YAML file overriding the built-in access policy",
    )

    # =========================================================================
    # Logging
    # =========================================================================
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_json: bool = Field(
        default=True,
        description="Output logs as JSON",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for convenience
settings = get_settings()
