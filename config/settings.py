"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Shopify credentials are optional at import time so the app (and tests)
can start without them; the client factory refuses to build a client
until they are set.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SHOPIFY ADMIN API
    # ===================
    shopify_store_domain: str = Field(
        default="",
        description="Store domain, e.g. my-shop.myshopify.com"
    )
    shopify_admin_token: str = Field(
        default="",
        description="Admin API access token"
    )
    shopify_api_version: str = Field(
        default="2025-01",
        pattern=r"^\d{4}-\d{2}$",
        description="Admin API version"
    )
    shopify_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=120,
        description="HTTP timeout per Admin API call"
    )

    # ===================
    # PAGINATION
    # ===================
    products_page_size: int = Field(
        default=250,
        ge=1,
        le=250,
        description="Products requested per page"
    )
    variants_per_product: int = Field(
        default=100,
        ge=1,
        le=250,
        description="Variants requested per product"
    )
    orders_page_size: int = Field(
        default=100,
        ge=1,
        le=250,
        description="Orders requested per page (kept low to stay under query cost)"
    )
    page_delay_seconds: float = Field(
        default=0.1,
        ge=0,
        le=5,
        description="Pause between page fetches"
    )
    mutation_delay_seconds: float = Field(
        default=0.1,
        ge=0,
        le=5,
        description="Pause between write calls"
    )

    # ===================
    # BULK ACTIONS
    # ===================
    reassign_sku_prefix: str = Field(
        default="IC-",
        min_length=1,
        max_length=20,
        description="Prefix for re-assigned key values (prefix + numeric variant id)"
    )
    preview_ttl_minutes: int = Field(
        default=30,
        ge=1,
        le=240,
        description="How long a pending bulk action stays confirmable"
    )

    # ===================
    # BEST SELLERS
    # ===================
    best_sellers_months: int = Field(
        default=12,
        ge=1,
        le=60,
        description="Months of order history to scan"
    )
    best_sellers_max_orders: int = Field(
        default=10000,
        ge=1,
        le=100000,
        description="Maximum orders inspected per ranking"
    )
    best_sellers_limit: int = Field(
        default=150,
        ge=1,
        le=250,
        description="Number of ranked products returned"
    )

    # ===================
    # FULFIL FROM METAFIELD
    # ===================
    fulfil_from_namespace: str = Field(
        default="custom",
        description="Metafield namespace"
    )
    fulfil_from_key: str = Field(
        default="fulfil_from",
        description="Metafield key"
    )
    fulfil_from_values: str = Field(
        default="US,CN",
        description="Comma-separated list of allowed origins"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed origins"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def shopify_configured(self) -> bool:
        """Check if Admin API credentials are present."""
        return bool(self.shopify_store_domain and self.shopify_admin_token)

    @property
    def shopify_graphql_url(self) -> str:
        domain = self.shopify_store_domain.replace("https://", "").replace("http://", "").strip("/")
        return f"https://{domain}/admin/api/{self.shopify_api_version}/graphql.json"

    @property
    def allowed_fulfil_from(self) -> list[str]:
        return [v.strip().upper() for v in self.fulfil_from_values.split(",") if v.strip()]

    @property
    def allowed_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
