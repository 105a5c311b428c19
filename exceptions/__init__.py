"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,

    # Shopify
    ShopifyAPIError,
    ShopifyNotConfiguredError,
    BulkWriteError,

    # Collection
    CollectionError,

    # Reference CSV
    ReferenceCSVParseError,
    ReferenceCSVMissingColumnsError,

    # Bulk actions
    PreviewNotFoundError,
    InvalidActionStateError,
    InvalidBulkActionError,
    EmptySelectionError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",

    # Shopify
    "ShopifyAPIError",
    "ShopifyNotConfiguredError",
    "BulkWriteError",

    # Collection
    "CollectionError",

    # Reference CSV
    "ReferenceCSVParseError",
    "ReferenceCSVMissingColumnsError",

    # Bulk actions
    "PreviewNotFoundError",
    "InvalidActionStateError",
    "InvalidBulkActionError",
    "EmptySelectionError",
]
