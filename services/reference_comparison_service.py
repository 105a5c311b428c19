"""
Reference comparison.

Cross-checks rows of an uploaded reference file against store variants
by key (SKU) and then by secondary identifier (GTIN vs barcode).

Every reference row lands in exactly one bucket:
    reference_key_not_found              - no store variant has the key
    reference_field_mismatch             - both sides have a secondary value and they differ
    reference_field_missing_on_one_side  - only one side has a secondary value
    reference_matched                    - values agree (or both are empty)
"""

from typing import Iterable, Union
import structlog

from models.variant import KeyField, VariantRecord
from models.reference import (
    MissingSide,
    ReferenceComparison,
    ReferenceMatch,
    ReferenceRow,
)
from services.classification_service import KeyFn, group_by_key, resolve_key_fn, key_name
from utils.text_utils import normalize_secondary_key

logger = structlog.get_logger(__name__)


def compare(
    reference_rows: Iterable[ReferenceRow],
    store_records: Iterable[VariantRecord],
    *,
    key: Union[KeyField, str, KeyFn] = KeyField.SKU,
    secondary: Union[KeyField, str, KeyFn] = KeyField.BARCODE,
) -> ReferenceComparison:
    """
    Compare reference rows with store variants.

    When several store variants share a key, the last one collected is
    used and store_match_count reports how many there were.

    Args:
        reference_rows: Parsed CSV rows, in file order
        store_records: Collected store variants
        key: Store key extractor matched against ReferenceRow.key
        secondary: Store extractor compared with ReferenceRow.secondary_key

    Returns:
        ReferenceComparison with rows in file order inside each bucket
    """
    store_records = list(store_records)
    reference_rows = list(reference_rows)
    groups, _ = group_by_key(store_records, key)
    secondary_fn = resolve_key_fn(secondary)

    result = ReferenceComparison(
        key_field=key_name(key),
        secondary_field=key_name(secondary),
        total_reference_rows=len(reference_rows),
        total_store_variants=len(store_records),
    )

    for row in reference_rows:
        matches = groups.get(row.key.strip(), [])
        if not matches:
            result.reference_key_not_found.append(ReferenceMatch(reference=row))
            continue

        variant = matches[-1]
        ref_value = normalize_secondary_key(row.secondary_key)
        store_value = secondary_fn(variant)

        match = ReferenceMatch(
            reference=row,
            variant=variant,
            reference_secondary=ref_value,
            store_secondary=store_value,
            store_match_count=len(matches),
        )

        if ref_value and store_value:
            if ref_value == store_value:
                result.reference_matched.append(match)
            else:
                result.reference_field_mismatch.append(match)
        elif ref_value:
            match.missing_side = MissingSide.STORE
            match.note = "Missing in store"
            result.reference_field_missing_on_one_side.append(match)
        elif store_value:
            match.missing_side = MissingSide.REFERENCE
            match.note = "Missing in file"
            result.reference_field_missing_on_one_side.append(match)
        else:
            match.missing_side = MissingSide.BOTH
            match.note = "Missing on both sides"
            result.reference_matched.append(match)

    logger.info(
        "reference_comparison_complete",
        reference_rows=result.total_reference_rows,
        store_variants=result.total_store_variants,
        not_found=len(result.reference_key_not_found),
        mismatched=len(result.reference_field_mismatch),
        missing_one_side=len(result.reference_field_missing_on_one_side),
        matched=len(result.reference_matched),
    )
    return result
