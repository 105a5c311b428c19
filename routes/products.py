"""
Product routes.

Product GIDs contain slashes, so ids travel in the request body.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.bulk_action import DeleteProductRequest, DeleteProductResponse
from services.catalog_service import get_catalog_service
from exceptions import AppError, BulkWriteError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.post("/delete", response_model=DeleteProductResponse)
def delete_product(data: DeleteProductRequest):
    """
    Delete a product and all of its variants.

    Deleting an already-deleted product fails and is reported, not retried.

    Raises:
        422: The API refused the delete
        503: Admin API unreachable
    """
    try:
        return get_catalog_service().delete_product(data.product_id)

    except BulkWriteError as e:
        logger.warning("product_delete_rejected", product_id=data.product_id, error=e.message)
        return handle_error(e)
    except Exception as e:
        return handle_error(e)
