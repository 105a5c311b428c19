"""
Bulk mutation planner.

Turns a selection of variants plus an action into one write batch per
product and runs those batches against the Admin API. Batches are
independent: a failed product does not stop the ones after it, and
products that already went through are not rolled back.
"""

from typing import Callable, Iterable, Optional
import time
import structlog

from exceptions import AppError, InvalidBulkActionError
from integrations.shopify_admin import ShopifyAdminClient, WriteOutcome
from models.bulk_action import (
    WRITABLE_KEY_FIELDS,
    BulkActionResult,
    BulkActionType,
    FailedBatch,
    MutationBatch,
)
from models.variant import KeyField, VariantRecord
from utils.text_utils import gid_numeric_id

logger = structlog.get_logger(__name__)

DEFAULT_REASSIGN_PREFIX = "IC-"


def derive_reassigned_value(variant_id: str, prefix: str = DEFAULT_REASSIGN_PREFIX) -> str:
    """
    New key value derived from the variant's own id.

    - "gid://shopify/ProductVariant/44012345678" -> "IC-44012345678"

    Depends only on the id, so reassigning twice gives the same value.
    """
    return f"{prefix}{gid_numeric_id(variant_id)}"


def plan(
    selection: Iterable[VariantRecord],
    action: BulkActionType,
    field: KeyField = KeyField.SKU,
    *,
    prefix: str = DEFAULT_REASSIGN_PREFIX,
) -> list[MutationBatch]:
    """
    Group the selection into per-product batches.

    Products keep the order in which they first appear in the selection;
    a variant selected twice is written once.

    Args:
        selection: Variant records to act on
        action: What to do with them
        field: Key field for clear / reassign
        prefix: Prefix for reassigned values

    Returns:
        One MutationBatch per product

    Raises:
        InvalidBulkActionError: If field cannot be written
    """
    if action != BulkActionType.DELETE_VARIANT and field not in WRITABLE_KEY_FIELDS:
        raise InvalidBulkActionError(
            f"Field cannot be bulk edited: {field}",
            details={"field": str(field)}
        )

    batches: dict[str, MutationBatch] = {}
    seen: set[str] = set()

    for record in selection:
        if record.variant_id in seen:
            continue
        seen.add(record.variant_id)

        batch = batches.setdefault(record.product_id, MutationBatch(product_id=record.product_id))
        batch.variant_ids.append(record.variant_id)

        if action == BulkActionType.CLEAR_FIELD:
            batch.new_values[record.variant_id] = ""
        elif action == BulkActionType.REASSIGN_FIELD:
            batch.new_values[record.variant_id] = derive_reassigned_value(record.variant_id, prefix)

    logger.debug(
        "bulk_action_planned",
        action=action.value,
        products=len(batches),
        variants=len(seen),
    )
    return list(batches.values())


def _write_batch(
    client: ShopifyAdminClient,
    batch: MutationBatch,
    action: BulkActionType,
    field: KeyField,
) -> WriteOutcome:
    if action == BulkActionType.DELETE_VARIANT:
        return client.bulk_delete_variants(batch.product_id, batch.variant_ids)
    values = [(vid, batch.new_values.get(vid, "")) for vid in batch.variant_ids]
    return client.bulk_update_variants(batch.product_id, field, values)


def execute(
    batches: list[MutationBatch],
    action: BulkActionType,
    field: KeyField,
    client: ShopifyAdminClient,
    *,
    call_delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> BulkActionResult:
    """
    Run batches one after another, one write call per product.

    userErrors and API failures are recorded per batch and the loop moves
    on. Nothing is retried.

    Args:
        batches: Output of plan()
        action: Action the batches were planned for
        field: Key field for clear / reassign
        client: Admin API client
        call_delay: Pause between write calls
        sleep: Injected for tests

    Returns:
        BulkActionResult with the first error message surfaced
    """
    result = BulkActionResult(action=action)

    for i, batch in enumerate(batches):
        if i > 0 and call_delay > 0:
            sleep(call_delay)

        result.batches_attempted += 1
        error: Optional[str] = None
        try:
            outcome = _write_batch(client, batch, action, field)
            if not outcome.ok:
                error = outcome.errors[0]
        except AppError as e:
            error = e.message

        if error is None:
            result.succeeded += batch.size
            continue

        logger.warning(
            "bulk_batch_failed",
            action=action.value,
            product_id=batch.product_id,
            variants=batch.size,
            error=error,
        )
        result.failed_batches.append(
            FailedBatch(product_id=batch.product_id, variant_count=batch.size, error=error)
        )
        if result.error is None:
            result.error = error

    logger.info(
        "bulk_action_executed",
        action=action.value,
        batches=result.batches_attempted,
        succeeded=result.succeeded,
        failed_batches=len(result.failed_batches),
    )
    return result
