"""
Paginated collector.

Pages through a cursor-based connection until it is exhausted and
flattens every page record into zero or more output records. The run
is all-or-nothing: any page failure discards what was collected so far.
"""

from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, Optional, TypeVar
import time
import structlog

from exceptions import AppError, CollectionError
from integrations.shopify_admin import Page
from models.variant import VariantRecord
from utils.text_utils import normalize_key

logger = structlog.get_logger(__name__)

T = TypeVar("T")

FetchPage = Callable[[Optional[str]], Page]
Flatten = Callable[[dict], Iterable[T]]


@dataclass
class CollectionResult(Generic[T]):
    """Everything one collection run produced."""
    records: list[T] = field(default_factory=list)
    pages_fetched: int = 0
    parents_scanned: int = 0
    truncated: bool = False


def collect(
    fetch_page: FetchPage,
    flatten: Flatten,
    *,
    page_delay: float = 0.0,
    max_parents: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "records",
) -> CollectionResult:
    """
    Fetch every page and flatten its records.

    Stops when the page says there is no next page OR when it carries no
    cursor. Pages are fetched strictly one after another, with page_delay
    seconds between them.

    Args:
        fetch_page: cursor -> Page (None cursor for the first page)
        flatten: page record -> output records
        page_delay: Pause before each follow-up page
        max_parents: Stop once this many page records were seen
        sleep: Injected for tests
        label: Name used in log events

    Returns:
        CollectionResult in delivery order

    Raises:
        CollectionError: If any page call fails
    """
    result: CollectionResult = CollectionResult()
    cursor: Optional[str] = None

    logger.info("collection_started", label=label)

    while True:
        try:
            page = fetch_page(cursor)
        except AppError as e:
            logger.error(
                "collection_failed",
                label=label,
                pages_fetched=result.pages_fetched,
                error=e.message,
                code=e.code
            )
            raise CollectionError(e.message, pages_fetched=result.pages_fetched) from e
        except Exception as e:
            logger.error(
                "collection_failed",
                label=label,
                pages_fetched=result.pages_fetched,
                error=str(e),
                error_type=type(e).__name__
            )
            raise CollectionError(
                f"Error fetching {label}: {e}",
                pages_fetched=result.pages_fetched
            ) from e

        result.pages_fetched += 1

        for record in page.records:
            if max_parents is not None and result.parents_scanned >= max_parents:
                result.truncated = True
                break
            result.parents_scanned += 1
            result.records.extend(flatten(record))

        logger.debug(
            "collection_page_fetched",
            label=label,
            page=result.pages_fetched,
            page_records=len(page.records),
            parents_so_far=result.parents_scanned,
            has_next_page=page.has_next_page,
        )

        if result.truncated:
            break
        if not page.has_next_page or not page.next_cursor:
            break
        if max_parents is not None and result.parents_scanned >= max_parents:
            result.truncated = True
            break

        cursor = page.next_cursor
        if page_delay > 0:
            sleep(page_delay)

    logger.info(
        "collection_complete",
        label=label,
        pages=result.pages_fetched,
        parents=result.parents_scanned,
        records=len(result.records),
        truncated=result.truncated,
    )
    return result


# ===================
# FLATTENERS
# ===================

def _first_image_url(product: dict) -> Optional[str]:
    nodes = (product.get("images") or {}).get("nodes") or []
    return nodes[0].get("url") if nodes else None


def _variant_record(variant: dict, product: dict) -> VariantRecord:
    metafield = variant.get("metafield") or {}
    return VariantRecord(
        variant_id=variant["id"],
        product_id=product["id"],
        product_title=product.get("title") or "",
        product_image_url=_first_image_url(product),
        product_status=product.get("status"),
        total_inventory=product.get("totalInventory"),
        variant_title=variant.get("title") or "",
        sku=variant.get("sku"),
        barcode=variant.get("barcode"),
        inventory_quantity=variant.get("inventoryQuantity") or 0,
        price=None if variant.get("price") is None else str(variant.get("price")),
        fulfil_from=normalize_key(metafield.get("value")),
    )


def flatten_product(product: dict) -> list[VariantRecord]:
    """Product node (with variants connection) -> one record per variant."""
    edges = (product.get("variants") or {}).get("edges") or []
    return [_variant_record(edge["node"], product) for edge in edges if edge.get("node")]


def flatten_variant(variant: dict) -> list[VariantRecord]:
    """Variant node (with nested product) -> a single record."""
    product = variant.get("product")
    if not product or not product.get("id"):
        return []
    return [_variant_record(variant, product)]
