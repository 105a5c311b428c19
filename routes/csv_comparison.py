"""
CSV comparison route.

Upload an inventory export (SKU + GTIN), compare it against every store
variant. The file is parsed before the store is touched, so a bad file
fails fast.
"""

from fastapi import APIRouter, UploadFile, File
from fastapi.responses import JSONResponse
import structlog

from models.reference import CSVComparisonResponse
from models.variant import KeyField
from parsers import parse_reference_csv
from services.catalog_service import get_catalog_service
from services.reference_comparison_service import compare
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

@router.post("", response_model=CSVComparisonResponse)
def compare_csv(file: UploadFile = File(..., description="CSV with a SKU column and optional GTIN column")):
    """
    Compare an uploaded CSV with the store.

    Each row lands in exactly one bucket: key not found, GTIN mismatch,
    GTIN missing on one side, or matched.

    Raises:
        422: File could not be parsed or has no SKU column
        502: Catalog scan failed
    """
    try:
        content = file.file.read()
        parsed = parse_reference_csv(content, filename=file.filename)

        scan = get_catalog_service().scan_variants()
        comparison = compare(parsed.rows, scan.records, key=KeyField.SKU, secondary=KeyField.BARCODE)

        return CSVComparisonResponse(
            filename=file.filename,
            key_column=parsed.key_column,
            secondary_column=parsed.secondary_column,
            skipped_rows=parsed.skipped_rows,
            comparison=comparison,
        )

    except Exception as e:
        return handle_error(e)
