"""
API route modules.

Each module defines routes for one page of the admin tool.
"""

from routes.variants import router as variants_router
from routes.bulk_actions import router as bulk_actions_router
from routes.products import router as products_router
from routes.csv_comparison import router as csv_comparison_router
from routes.fulfilment import router as fulfilment_router
from routes.best_sellers import router as best_sellers_router

__all__ = [
    "variants_router",
    "bulk_actions_router",
    "products_router",
    "csv_comparison_router",
    "fulfilment_router",
    "best_sellers_router",
]
