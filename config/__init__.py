"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    get_shopify_client: Cached Admin API client
    check_connection: Health check function
"""

from config.settings import settings, get_settings, Settings
from config.shopify import (
    get_shopify_client,
    check_connection,
    reset_connection,
)

__all__ = [
    # Settings
    "settings",
    "get_settings",
    "Settings",

    # Shopify
    "get_shopify_client",
    "check_connection",
    "reset_connection",
]
