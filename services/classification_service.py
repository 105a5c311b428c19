"""
Grouping and classification of variant records.

Pure functions over already-collected records: no API calls, no I/O,
no exceptions for well-formed input.
"""

from typing import Callable, Iterable, Optional, Union
import structlog

from models.variant import KeyField, VariantRecord
from models.reconciliation import ClassificationResult, KeyGroup, ValuePartition
from utils.text_utils import normalize_key, matches_search

logger = structlog.get_logger(__name__)

KeyFn = Callable[[VariantRecord], Optional[str]]


# ===================
# KEY EXTRACTORS
# ===================

def key_by_sku(record: VariantRecord) -> Optional[str]:
    return normalize_key(record.sku)


def key_by_barcode(record: VariantRecord) -> Optional[str]:
    return normalize_key(record.barcode)


def key_by_fulfil_from(record: VariantRecord) -> Optional[str]:
    return normalize_key(record.fulfil_from)


_KEY_FNS: dict[KeyField, KeyFn] = {
    KeyField.SKU: key_by_sku,
    KeyField.BARCODE: key_by_barcode,
    KeyField.FULFIL_FROM: key_by_fulfil_from,
}


def resolve_key_fn(key: Union[KeyField, str, KeyFn]) -> KeyFn:
    """
    Resolve a key field name or pass through a custom extractor.

    Custom extractors are wrapped so their output is trimmed too.
    """
    if callable(key):
        return lambda record: normalize_key(key(record))
    try:
        return _KEY_FNS[KeyField(key)]
    except ValueError:
        raise ValueError(f"Unsupported key field: {key}") from None


def key_name(key: Union[KeyField, str, KeyFn]) -> str:
    if isinstance(key, KeyField):
        return key.value
    if isinstance(key, str):
        return key
    return getattr(key, "__name__", "custom")


# ===================
# CLASSIFICATION
# ===================

def group_by_key(
    records: Iterable[VariantRecord],
    key: Union[KeyField, str, KeyFn] = KeyField.SKU,
) -> tuple[dict[str, list[VariantRecord]], list[VariantRecord]]:
    """
    Group records by trimmed key.

    Returns:
        (groups in first-seen key order, records without a key)
    """
    key_fn = resolve_key_fn(key)
    groups: dict[str, list[VariantRecord]] = {}
    missing: list[VariantRecord] = []

    for record in records:
        value = key_fn(record)
        if value is None:
            missing.append(record)
            continue
        groups.setdefault(value, []).append(record)

    return groups, missing


def classify(
    records: Iterable[VariantRecord],
    key: Union[KeyField, str, KeyFn] = KeyField.SKU,
    *,
    parents_scanned: Optional[int] = None,
) -> ClassificationResult:
    """
    Partition records into duplicates, missing_key and unique_with_key.

    Duplicate groups are ordered by descending size; groups of equal size
    keep the order in which their key was first seen.

    Args:
        records: Collected variant records, in delivery order
        key: Key field or extractor
        parents_scanned: Product count from the collector; defaults to
            the number of distinct product ids among the records

    Returns:
        ClassificationResult with run counters
    """
    records = list(records)
    groups, missing = group_by_key(records, key)

    duplicate_groups: list[KeyGroup] = []
    unique: list[VariantRecord] = []
    for value, members in groups.items():
        if len(members) > 1:
            duplicate_groups.append(KeyGroup(key=value, count=len(members), variants=members))
        else:
            unique.append(members[0])

    duplicates = sorted(duplicate_groups, key=lambda g: g.count, reverse=True)
    duplicate_variant_count = sum(g.count for g in duplicates)

    if parents_scanned is None:
        parents_scanned = len({r.product_id for r in records})

    result = ClassificationResult(
        key_field=key_name(key),
        duplicates=duplicates,
        missing_key=missing,
        unique_with_key=unique,
        total_parents_scanned=parents_scanned,
        total_variants_scanned=len(missing) + duplicate_variant_count + len(unique),
        total_unique_keys=len(groups),
        duplicate_group_count=len(duplicates),
        duplicate_variant_count=duplicate_variant_count,
        missing_key_count=len(missing),
        unique_with_key_count=len(unique),
    )

    logger.info(
        "classification_complete",
        key_field=result.key_field,
        variants=result.total_variants_scanned,
        duplicate_groups=result.duplicate_group_count,
        missing=result.missing_key_count,
        unique=result.unique_with_key_count,
    )
    return result


def partition_by_value(
    records: Iterable[VariantRecord],
    key: Union[KeyField, str, KeyFn],
    values: list[str],
) -> ValuePartition:
    """
    Bucket records whose key equals one of values; the rest are unassigned.

    Every value gets a bucket, even an empty one.
    """
    key_fn = resolve_key_fn(key)
    buckets: dict[str, list[VariantRecord]] = {v: [] for v in values}
    unassigned: list[VariantRecord] = []

    for record in records:
        value = key_fn(record)
        if value is not None and value in buckets:
            buckets[value].append(record)
        else:
            unassigned.append(record)

    return ValuePartition(key_field=key_name(key), buckets=buckets, unassigned=unassigned)


def filter_records(records: Iterable[VariantRecord], search: Optional[str]) -> list[VariantRecord]:
    """Keep records whose product title, variant title, SKU or barcode contains search."""
    return [
        r for r in records
        if matches_search(search, r.product_title, r.variant_title, r.sku, r.barcode)
    ]
