"""
Variant finder routes: duplicate and missing SKUs / barcodes.

Every call scans the whole catalog; nothing is cached between calls.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.variant import KeyField
from models.reconciliation import DuplicateKeyReport, MissingKeyReport
from services.catalog_service import get_catalog_service
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
# DUPLICATES
# ===================

@router.get("/duplicate-skus", response_model=DuplicateKeyReport)
def duplicate_skus():
    """
    Variants sharing a SKU, largest groups first.

    Raises:
        502: Catalog scan failed
        503: Store not configured
    """
    try:
        return get_catalog_service().find_duplicates(KeyField.SKU)
    except Exception as e:
        return handle_error(e)


@router.get("/duplicate-barcodes", response_model=DuplicateKeyReport)
def duplicate_barcodes():
    """Variants sharing a barcode, largest groups first."""
    try:
        return get_catalog_service().find_duplicates(KeyField.BARCODE)
    except Exception as e:
        return handle_error(e)


# ===================
# MISSING
# ===================

@router.get("/missing-skus", response_model=MissingKeyReport)
def missing_skus(
    search: Optional[str] = Query(None, description="Filter by product, variant, SKU or barcode")
):
    """Variants without a SKU."""
    try:
        return get_catalog_service().find_missing(KeyField.SKU, search=search)
    except Exception as e:
        return handle_error(e)


@router.get("/missing-barcodes", response_model=MissingKeyReport)
def missing_barcodes(
    search: Optional[str] = Query(None, description="Filter by product, variant, SKU or barcode")
):
    """Variants without a barcode."""
    try:
        return get_catalog_service().find_missing(KeyField.BARCODE, search=search)
    except Exception as e:
        return handle_error(e)
