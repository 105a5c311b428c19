"""
Custom exception classes for the application.

Every error carries a code, a human-readable message and an HTTP status
so routes can return it unchanged.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "COLLECTION_FAILED")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with current state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


# ===================
# SHOPIFY ERRORS
# ===================

class ShopifyAPIError(ExternalServiceError):
    """Admin API call failed (transport error, HTTP error or GraphQL errors)."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="shopify",
            message=message,
            details=details
        )


class ShopifyNotConfiguredError(AppError):
    """Store domain or admin token missing."""

    def __init__(self):
        super().__init__(
            code="SHOPIFY_NOT_CONFIGURED",
            message="Set SHOPIFY_STORE_DOMAIN and SHOPIFY_ADMIN_TOKEN to use the Admin API",
            status_code=503
        )


class BulkWriteError(AppError):
    """A write call returned userErrors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="BULK_WRITE_FAILED",
            message=message,
            status_code=422,
            details=details
        )


# ===================
# COLLECTION ERRORS
# ===================

class CollectionError(AppError):
    """Paging through the catalog failed; nothing was classified."""

    def __init__(self, message: str, pages_fetched: int = 0):
        super().__init__(
            code="COLLECTION_FAILED",
            message=message,
            status_code=502,
            details={"pages_fetched": pages_fetched}
        )


# ===================
# REFERENCE CSV ERRORS
# ===================

class ReferenceCSVParseError(ValidationError):
    """Uploaded CSV could not be read."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="CSV_PARSE_ERROR",
            message=message,
            details=details
        )


class ReferenceCSVMissingColumnsError(ValidationError):
    """Uploaded CSV has no usable key column."""

    def __init__(self, missing: list[str], found: list[str]):
        super().__init__(
            code="CSV_MISSING_COLUMNS",
            message=f"Missing required columns: {', '.join(missing)}",
            details={"missing": missing, "found": found}
        )


# ===================
# BULK ACTION ERRORS
# ===================

class PreviewNotFoundError(NotFoundError):
    """Pending bulk action expired or never existed."""

    def __init__(self, preview_id: str):
        super().__init__(
            resource="Bulk action preview",
            identifier=preview_id,
            code="PREVIEW_NOT_FOUND"
        )


class InvalidActionStateError(ConflictError):
    """Operation not allowed in the session's current state."""

    def __init__(self, current_state: str, operation: str):
        super().__init__(
            code="INVALID_ACTION_STATE",
            message=f"Cannot {operation} while {current_state}",
            details={"current_state": current_state, "operation": operation}
        )


class InvalidBulkActionError(ValidationError):
    """Bulk action request is not usable."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="INVALID_BULK_ACTION",
            message=message,
            details=details
        )


class EmptySelectionError(InvalidBulkActionError):
    """Nothing in the store matched the requested selection."""

    def __init__(self, details: Optional[dict] = None):
        super().__init__(
            message="No variants matched the selection",
            details=details
        )
