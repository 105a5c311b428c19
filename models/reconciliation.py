"""
Classification schemas.

See services/classification_service.py for how buckets are filled.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema, ScanStats
from models.variant import VariantRecord


class KeyGroup(BaseSchema):
    """Variants sharing one trimmed, non-empty key value."""

    key: str = Field(..., description="Shared key value")
    count: int = Field(..., ge=1, description="Number of variants in the group")
    variants: list[VariantRecord] = Field(default_factory=list)

    @property
    def is_duplicate(self) -> bool:
        return self.count > 1


class ClassificationResult(BaseSchema):
    """
    Output of one classification run.

    Every scanned variant lands in exactly one of duplicates,
    missing_key or unique_with_key.
    """

    key_field: str
    duplicates: list[KeyGroup] = Field(default_factory=list)
    missing_key: list[VariantRecord] = Field(default_factory=list)
    unique_with_key: list[VariantRecord] = Field(default_factory=list)

    total_parents_scanned: int = 0
    total_variants_scanned: int = 0
    total_unique_keys: int = 0

    duplicate_group_count: int = 0
    duplicate_variant_count: int = 0
    missing_key_count: int = 0
    unique_with_key_count: int = 0

    @property
    def variants_with_key(self) -> int:
        return self.duplicate_variant_count + self.unique_with_key_count


class ValuePartition(BaseSchema):
    """Variants bucketed by an exact key value, plus the leftovers."""

    key_field: str
    buckets: dict[str, list[VariantRecord]] = Field(default_factory=dict)
    unassigned: list[VariantRecord] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(len(v) for v in self.buckets.values()) + len(self.unassigned)


# ===================
# FINDER RESPONSES
# ===================

class DuplicateKeyReport(ScanStats):
    """Duplicate SKU / barcode finder response."""

    key_field: str
    duplicates: list[KeyGroup] = Field(default_factory=list)
    total_unique_keys: int = 0
    variants_with_key: int = 0
    variants_missing_key: int = 0


class MissingKeyReport(ScanStats):
    """Missing SKU / barcode finder response."""

    key_field: str
    missing: list[VariantRecord] = Field(default_factory=list)
    variants_with_key: int = 0
    search: Optional[str] = None
