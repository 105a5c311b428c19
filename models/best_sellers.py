"""
Best seller ranking and collection assignment schemas.
"""

from pydantic import Field
from typing import Optional
from enum import Enum

from models.base import BaseSchema


class ProductSales(BaseSchema):
    """Units sold for one product (or one orphaned line item)."""

    id: str = Field(..., description="Product GID, or line-<line item GID> when the product is gone")
    title: str
    total_inventory: Optional[int] = None
    image_url: Optional[str] = None
    collections: list[str] = Field(default_factory=list)
    sold_units: int = 0
    rank: Optional[int] = None


class CollectionSummary(BaseSchema):
    id: str
    title: str


class BestSellersReport(BaseSchema):
    """Ranking response."""

    products: list[ProductSales] = Field(default_factory=list)
    collections: list[CollectionSummary] = Field(default_factory=list)
    collection_name: Optional[str] = None
    orders_scanned: int = 0
    months: int = 12
    error: Optional[str] = None


class CollectionAssignMode(str, Enum):
    """add keeps current members; replace removes them first."""
    ADD = "add"
    REPLACE = "replace"


class CollectionAssignRequest(BaseSchema):
    collection_id: str = Field(..., min_length=1)
    product_ids: list[str] = Field(..., min_length=1, max_length=250)
    mode: CollectionAssignMode = CollectionAssignMode.ADD


class CollectionAssignResponse(BaseSchema):
    success: bool = True
    added: int = 0
    removed: int = 0
    skipped: int = 0
    skipped_deleted: int = Field(0, description="Deleted products (line-<id> rows) left out")
    message: str
