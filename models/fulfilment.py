"""
Fulfil-from metafield schemas.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema, ScanStats
from models.variant import VariantRecord


class FulfilFromFailure(BaseSchema):
    variant: VariantRecord
    error: str


class FulfilFromNotFound(BaseSchema):
    sku: str
    product: Optional[str] = None
    row_number: Optional[int] = None


class FulfilFromAssignResult(BaseSchema):
    """Outcome of tagging every matched variant with a fulfil-from value."""

    success: bool = True
    fulfil_from: str
    succeeded: list[VariantRecord] = Field(default_factory=list)
    failed: list[FulfilFromFailure] = Field(default_factory=list)
    not_found: list[FulfilFromNotFound] = Field(default_factory=list)
    total_csv_rows: int = 0
    error: Optional[str] = Field(None, description="First failure message")


class FulfilFromReport(ScanStats):
    """Variants with a SKU, split by fulfil-from value."""

    buckets: dict[str, list[VariantRecord]] = Field(default_factory=dict)
    unassigned: list[VariantRecord] = Field(default_factory=list)
    search: Optional[str] = None
