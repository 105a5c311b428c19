"""
Best seller routes.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.best_sellers import (
    BestSellersReport,
    CollectionSummary,
    CollectionAssignRequest,
    CollectionAssignResponse,
)
from services.best_sellers_service import get_best_sellers_service
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

@router.get("", response_model=BestSellersReport)
def get_best_sellers():
    """
    Top products by units sold over the trailing window.

    Raises:
        502: Orders or collections could not be read
    """
    try:
        return get_best_sellers_service().get_best_sellers()
    except Exception as e:
        return handle_error(e)


@router.get("/collections", response_model=list[CollectionSummary])
def list_collections():
    try:
        return get_best_sellers_service().list_collections()
    except Exception as e:
        return handle_error(e)


@router.post("/assign", response_model=CollectionAssignResponse)
def assign_to_collection(data: CollectionAssignRequest):
    """
    Add products to a collection (mode=add) or replace its members (mode=replace).

    Raises:
        422: The API rejected the change
    """
    try:
        return get_best_sellers_service().assign_to_collection(data)
    except Exception as e:
        return handle_error(e)
