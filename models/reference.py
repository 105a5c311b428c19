"""
Reference (uploaded CSV) schemas.

A ReferenceRow comes from an operator's spreadsheet export, never from
the store. Comparison buckets are defined in
services/reference_comparison_service.py.
"""

from pydantic import Field
from typing import Optional
from enum import Enum

from models.base import BaseSchema
from models.variant import VariantRecord


class ReferenceRow(BaseSchema):
    """One data row of an uploaded CSV."""

    row_number: int = Field(..., ge=2, description="Data row number; the header is row 1")
    key: str = Field(..., min_length=1, description="Key column value (SKU)")
    secondary_key: Optional[str] = Field(None, description="Secondary identifier (GTIN)")
    product: Optional[str] = Field(None, description="Product description from the file")
    quantity: Optional[str] = Field(None, description="Quantity as written in the file")
    raw: dict[str, str] = Field(default_factory=dict, description="All columns of the row")


class MissingSide(str, Enum):
    """Which side of a comparison lacks the secondary identifier."""
    REFERENCE = "reference"
    STORE = "store"
    BOTH = "both"


class ReferenceMatch(BaseSchema):
    """A reference row paired with its store variant (if any)."""

    reference: ReferenceRow
    variant: Optional[VariantRecord] = None
    reference_secondary: Optional[str] = None
    store_secondary: Optional[str] = None
    store_match_count: int = 0
    missing_side: Optional[MissingSide] = None
    note: Optional[str] = None


class ReferenceComparison(BaseSchema):
    """Result of comparing reference rows against store variants."""

    key_field: str
    secondary_field: str
    reference_key_not_found: list[ReferenceMatch] = Field(default_factory=list)
    reference_field_mismatch: list[ReferenceMatch] = Field(default_factory=list)
    reference_field_missing_on_one_side: list[ReferenceMatch] = Field(default_factory=list)
    reference_matched: list[ReferenceMatch] = Field(default_factory=list)
    total_reference_rows: int = 0
    total_store_variants: int = 0

    @property
    def bucket_total(self) -> int:
        return (
            len(self.reference_key_not_found)
            + len(self.reference_field_mismatch)
            + len(self.reference_field_missing_on_one_side)
            + len(self.reference_matched)
        )


class ReferenceParseResult(BaseSchema):
    """Parsed CSV plus the columns that were used."""

    rows: list[ReferenceRow] = Field(default_factory=list)
    headers: list[str] = Field(default_factory=list)
    key_column: str
    secondary_column: Optional[str] = None
    product_column: Optional[str] = None
    quantity_column: Optional[str] = None
    skipped_rows: int = 0


class CSVComparisonResponse(BaseSchema):
    """CSV comparison endpoint response."""

    success: bool = True
    filename: Optional[str] = None
    key_column: str
    secondary_column: Optional[str] = None
    skipped_rows: int = 0
    comparison: ReferenceComparison
