"""
Bulk action routes.

Preview-then-confirm flow:
    POST /preview            -> plan batches, session awaits confirmation
    POST /{id}/confirm       -> run batches, one write call per product
    POST /{id}/cancel        -> drop the session
    POST /{id}/retry         -> after a failed run, re-plan the failed products
    GET  /{id}               -> session state, last result, last error
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.bulk_action import BulkActionRequest, BulkActionPreview, BulkActionStatus
from services.bulk_action_service import get_bulk_action_service
from exceptions import AppError

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

@router.post("/preview", response_model=BulkActionPreview)
def preview_bulk_action(data: BulkActionRequest):
    """
    Resolve the selection from the store and plan per-product batches.

    Nothing is written until /confirm is called.

    Raises:
        422: No variant matched, or invalid request
        502: Variant search failed
    """
    try:
        return get_bulk_action_service().preview(data)
    except Exception as e:
        return handle_error(e)


@router.post("/{preview_id}/confirm", response_model=BulkActionStatus)
def confirm_bulk_action(preview_id: str):
    """
    Execute a previewed action.

    Failed batches do not fail the request: the returned status carries
    the aggregated result and the first error.

    Raises:
        404: Preview expired or not found
        409: Session is not awaiting confirmation
    """
    try:
        return get_bulk_action_service().confirm(preview_id)
    except Exception as e:
        return handle_error(e)


@router.post("/{preview_id}/cancel", status_code=204)
def cancel_bulk_action(preview_id: str):
    """Discard a previewed action."""
    try:
        get_bulk_action_service().cancel(preview_id)
        return None
    except Exception as e:
        return handle_error(e)


@router.post("/{preview_id}/retry", response_model=BulkActionPreview)
def retry_bulk_action(preview_id: str):
    """Re-open a failed action for confirmation for the products whose batch failed."""
    try:
        return get_bulk_action_service().retry(preview_id)
    except Exception as e:
        return handle_error(e)


@router.get("/{preview_id}", response_model=BulkActionStatus)
def get_bulk_action(preview_id: str):
    try:
        return get_bulk_action_service().status(preview_id)
    except Exception as e:
        return handle_error(e)
