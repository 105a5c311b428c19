"""
Shopify Admin API connection management.

Provides a cached ShopifyAdminClient for services.
"""

from functools import lru_cache
import structlog

from config.settings import settings
from exceptions import ShopifyNotConfiguredError
from integrations.shopify_admin import ShopifyAdminClient

logger = structlog.get_logger(__name__)


@lru_cache()
def get_shopify_client() -> ShopifyAdminClient:
    """
    Get cached Admin API client.

    Uses lru_cache to ensure only one client (and HTTP session) exists.
    Call get_shopify_client.cache_clear() to reconnect.

    Returns:
        ShopifyAdminClient

    Raises:
        ShopifyNotConfiguredError: If domain or token is missing
    """
    if not settings.shopify_configured:
        logger.warning("shopify_not_configured")
        raise ShopifyNotConfiguredError()

    logger.info(
        "creating_shopify_client",
        store=settings.shopify_store_domain,
        api_version=settings.shopify_api_version
    )

    return ShopifyAdminClient(
        graphql_url=settings.shopify_graphql_url,
        access_token=settings.shopify_admin_token,
        timeout=settings.shopify_timeout_seconds,
        products_page_size=settings.products_page_size,
        variants_per_product=settings.variants_per_product,
        orders_page_size=settings.orders_page_size,
    )


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check Admin API reachability.

    Returns:
        dict: Connection status with details
    """
    try:
        shop = get_shopify_client().shop_info()
        return {
            "status": "healthy",
            "shop": shop.get("name"),
            "domain": shop.get("myshopifyDomain"),
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }


def reset_connection():
    """
    Reset the cached client.

    Call this after credential changes.
    """
    get_shopify_client.cache_clear()
    logger.info("shopify_client_reset")
