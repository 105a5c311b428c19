"""
Fulfil-from routes: tag variants from a CSV, view the current split.
"""

from fastapi import APIRouter, UploadFile, File, Form, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.fulfilment import FulfilFromAssignResult, FulfilFromReport
from services.fulfilment_service import get_fulfilment_service
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

@router.post("/assign", response_model=FulfilFromAssignResult)
def assign_fulfil_from(
    file: UploadFile = File(..., description="CSV with a SKU column"),
    fulfil_from: str = Form(..., description="Warehouse value, e.g. US or CN"),
):
    """
    Set the fulfil-from metafield on every variant listed in the CSV.

    Per-variant failures are reported in the result, not raised.

    Raises:
        422: Bad value or unreadable file
        502: Catalog scan failed
    """
    try:
        content = file.file.read()
        return get_fulfilment_service().assign_from_csv(
            content,
            fulfil_from,
            filename=file.filename,
        )
    except Exception as e:
        return handle_error(e)


@router.get("", response_model=FulfilFromReport)
def view_fulfil_from(
    search: Optional[str] = Query(None, description="Filter by product, variant, SKU or barcode")
):
    """Variants with a SKU, grouped by fulfil-from value."""
    try:
        return get_fulfilment_service().get_report(search=search)
    except Exception as e:
        return handle_error(e)
