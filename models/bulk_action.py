"""
Bulk action schemas.

Covers the operator flow: pick variants, preview the per-product batches,
confirm (or cancel), read the aggregated result.
"""

from pydantic import Field, field_validator, model_validator
from typing import Optional
from enum import Enum

from models.base import BaseSchema
from models.variant import KeyField
from models.reconciliation import DuplicateKeyReport


class BulkActionType(str, Enum):
    """What to do to every selected variant."""
    CLEAR_FIELD = "clear_field"
    REASSIGN_FIELD = "reassign_field"
    DELETE_VARIANT = "delete_variant"


class ActionState(str, Enum):
    """Operator session states."""
    IDLE = "idle"
    CONFIRMING = "confirming"
    EXECUTING = "executing"


WRITABLE_KEY_FIELDS = (KeyField.SKU, KeyField.BARCODE)


class BulkActionRequest(BaseSchema):
    """
    Start a bulk action.

    Provide either variant_ids (explicit selection) or key_value (every
    variant whose trimmed key equals it). Product ids are never accepted;
    they are looked up from the store.
    """

    action: BulkActionType = Field(..., description="Action to apply")
    field: KeyField = Field(KeyField.SKU, description="Key field to clear or reassign")
    variant_ids: list[str] = Field(
        default_factory=list,
        max_length=5000,
        description="Variant GIDs to act on"
    )
    key_value: Optional[str] = Field(
        None,
        description="Select every variant whose key equals this value"
    )

    @field_validator("field")
    @classmethod
    def field_is_writable(cls, v: KeyField) -> KeyField:
        """Only SKU and barcode can be bulk edited."""
        if v not in WRITABLE_KEY_FIELDS:
            raise ValueError("field must be sku or barcode")
        return v

    @field_validator("variant_ids")
    @classmethod
    def strip_variant_ids(cls, v: list[str]) -> list[str]:
        return [vid.strip() for vid in v if vid and vid.strip()]

    @model_validator(mode="after")
    def one_selection_mode(self) -> "BulkActionRequest":
        has_ids = bool(self.variant_ids)
        has_key = bool(self.key_value)
        if has_ids == has_key:
            raise ValueError("Provide exactly one of variant_ids or key_value")
        return self


class MutationBatch(BaseSchema):
    """Writes for the variants of one product."""

    product_id: str
    variant_ids: list[str] = Field(default_factory=list)
    new_values: dict[str, str] = Field(
        default_factory=dict,
        description="variant_id -> new key value ('' clears); empty for deletes"
    )

    @property
    def size(self) -> int:
        return len(self.variant_ids)


class FailedBatch(BaseSchema):
    """A product batch the API rejected."""

    product_id: str
    variant_count: int = 0
    error: str


class BulkActionResult(BaseSchema):
    """
    Aggregated outcome of a bulk action.

    Batches are independent: succeeded counts variants from every batch
    that went through even when others failed.
    """

    action: BulkActionType
    succeeded: int = 0
    failed_batches: list[FailedBatch] = Field(default_factory=list)
    batches_attempted: int = 0
    error: Optional[str] = Field(None, description="First failure message")

    @property
    def success(self) -> bool:
        return not self.failed_batches


class BulkActionPreview(BaseSchema):
    """Planned batches awaiting operator confirmation."""

    preview_id: str
    state: ActionState
    action: BulkActionType
    field: KeyField
    batches: list[MutationBatch] = Field(default_factory=list)
    variant_count: int = 0
    product_count: int = 0
    unknown_variant_ids: list[str] = Field(default_factory=list)
    expires_in_minutes: int = 30


class BulkActionStatus(BaseSchema):
    """Current session state, last result and last error."""

    preview_id: str
    state: ActionState
    action: Optional[BulkActionType] = None
    variant_count: int = 0
    error: Optional[str] = None
    last_result: Optional[BulkActionResult] = None
    refreshed_report: Optional[DuplicateKeyReport] = Field(
        None,
        description="Duplicate scan re-run after a successful action"
    )


class DeleteProductRequest(BaseSchema):
    """Delete a whole product."""

    product_id: str = Field(
        ...,
        min_length=1,
        description="Product GID",
        examples=["gid://shopify/Product/8123456789"]
    )


class DeleteProductResponse(BaseSchema):
    success: bool = True
    deleted_product_id: str
