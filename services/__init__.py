"""
Business logic services.

Each service handles one domain area. Pure passes (collector,
classification, comparison, planning) are plain modules; services that
talk to the store are classes with a get_x_service() singleton.
"""

from services.catalog_service import CatalogService, get_catalog_service
from services.bulk_action_service import (
    BulkActionService,
    BulkActionSession,
    get_bulk_action_service,
)
from services.best_sellers_service import BestSellersService, get_best_sellers_service
from services.fulfilment_service import FulfilmentService, get_fulfilment_service

__all__ = [
    "CatalogService",
    "get_catalog_service",
    "BulkActionService",
    "BulkActionSession",
    "get_bulk_action_service",
    "BestSellersService",
    "get_best_sellers_service",
    "FulfilmentService",
    "get_fulfilment_service",
]
