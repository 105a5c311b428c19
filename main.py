"""
Catalog Reconciliation API

FastAPI application entry point.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import structlog
from datetime import datetime

from config import settings, check_connection

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO), format="%(message)s")

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer() if settings.is_production
            else structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: Check the Admin API connection
    Shutdown: Log only
    """
    logger.info(
        "application_starting",
        environment=settings.environment,
        debug=settings.debug
    )

    shop_status = check_connection()
    if shop_status["status"] == "healthy":
        logger.info(
            "shopify_connected",
            shop=shop_status.get("shop"),
            domain=shop_status.get("domain")
        )
    else:
        logger.error(
            "shopify_connection_failed",
            error=shop_status.get("error")
        )

    yield

    logger.info("application_shutting_down")


# Create FastAPI app
app = FastAPI(
    title="Catalog Reconciliation",
    description="Duplicate and missing SKU / barcode finder, bulk fixes and merchandising tools for a Shopify store",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# ROUTES
# ===================

@app.get("/health")
def health_check():
    """
    Health check endpoint.

    Returns:
        Basic health status and Admin API connection state
    """
    shop_status = check_connection()

    return {
        "status": "healthy" if shop_status["status"] == "healthy" else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
        "shopify": shop_status
    }


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns:
        API information and available endpoints
    """
    return {
        "name": "Catalog Reconciliation API",
        "version": "0.1.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
        "health": "/health",
        "endpoints": {
            "variants": "/api/variants",
            "bulk_actions": "/api/bulk-actions",
            "products": "/api/products",
            "csv_comparison": "/api/csv-comparison",
            "fulfil_from": "/api/fulfil-from",
            "best_sellers": "/api/best-sellers"
        }
    }


# ===================
# ERROR HANDLERS
# ===================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler.

    Catches unhandled exceptions and returns standard error format.
    """
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "details": str(exc) if settings.debug else None,
                "timestamp": datetime.utcnow().isoformat()
            }
        }
    )


# ===================
# INCLUDE ROUTERS
# ===================
from routes import (
    variants_router,
    bulk_actions_router,
    products_router,
    csv_comparison_router,
    fulfilment_router,
    best_sellers_router,
)

app.include_router(variants_router, prefix="/api/variants", tags=["Variants"])
app.include_router(bulk_actions_router, prefix="/api/bulk-actions", tags=["Bulk Actions"])
app.include_router(products_router, prefix="/api/products", tags=["Products"])
app.include_router(csv_comparison_router, prefix="/api/csv-comparison", tags=["CSV Comparison"])
app.include_router(fulfilment_router, prefix="/api/fulfil-from", tags=["Fulfil From"])
app.include_router(best_sellers_router, prefix="/api/best-sellers", tags=["Best Sellers"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )
