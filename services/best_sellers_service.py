"""
Best sellers by units sold, and collection assignment.

Units are summed from order line items over a trailing window. Line
items whose product has since been deleted are still counted, under a
line-<line item id> key.
"""

import calendar
from datetime import date
from typing import Optional
import structlog

from config import get_shopify_client, settings
from exceptions import BulkWriteError, ValidationError
from integrations.shopify_admin import ShopifyAdminClient
from models.best_sellers import (
    BestSellersReport,
    CollectionAssignMode,
    CollectionAssignRequest,
    CollectionAssignResponse,
    CollectionSummary,
    ProductSales,
)
from services.collector_service import collect

logger = structlog.get_logger(__name__)

NO_ORDERS_MESSAGE = (
    "No orders were found. Make sure your app has read_orders permission "
    "and your store has orders."
)
NO_LINE_ITEMS_MESSAGE = (
    "Orders were found, but no line items with quantity > 0 could be "
    "aggregated. This can happen if all items are non-product line items."
)

# Ranking key for line items whose product was deleted
ORPHAN_LINE_PREFIX = "line-"


def months_before(day: date, months: int) -> date:
    """Same day of month, months earlier (clamped to the month's last day)."""
    total = day.year * 12 + (day.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def line_items(order: dict) -> list[dict]:
    """Order node -> its line item nodes."""
    edges = (order.get("lineItems") or {}).get("edges") or []
    return [edge["node"] for edge in edges if edge.get("node")]


def aggregate_sales(items: list[dict]) -> dict[str, ProductSales]:
    """
    Sum quantities per product, in first-seen order.

    Non-positive quantities are ignored.
    """
    stats: dict[str, ProductSales] = {}

    for line in items:
        quantity = line.get("quantity") or 0
        if quantity <= 0:
            continue

        product = line.get("product")
        if product:
            key = product["id"]
            if key not in stats:
                images = (product.get("images") or {}).get("nodes") or []
                collection_edges = (product.get("collections") or {}).get("edges") or []
                stats[key] = ProductSales(
                    id=key,
                    title=product.get("title") or "",
                    total_inventory=product.get("totalInventory"),
                    image_url=images[0].get("url") if images else None,
                    collections=[e["node"]["title"] for e in collection_edges if e.get("node")],
                )
        else:
            key = f"{ORPHAN_LINE_PREFIX}{line['id']}"
            if key not in stats:
                stats[key] = ProductSales(
                    id=key,
                    title=line.get("name") or line.get("sku") or "Unknown product",
                )

        stats[key].sold_units += quantity

    return stats


def rank_products(stats: dict[str, ProductSales], limit: int) -> list[ProductSales]:
    """Top sellers by units, ties in first-seen order, ranked from 1."""
    selling = [p for p in stats.values() if p.sold_units > 0]
    ranked = sorted(selling, key=lambda p: p.sold_units, reverse=True)[:limit]
    for i, product in enumerate(ranked, start=1):
        product.rank = i
    return ranked


class BestSellersService:
    """
    Sales ranking over recent orders.
    """

    def __init__(self, client: Optional[ShopifyAdminClient] = None):
        self.client = client or get_shopify_client()

    def list_collections(self) -> list[CollectionSummary]:
        """Every collection in the store."""
        result = collect(
            self.client.fetch_collections_page,
            lambda node: [CollectionSummary(id=node["id"], title=node.get("title") or "")],
            page_delay=settings.page_delay_seconds,
            label="collections",
        )
        return result.records

    def get_best_sellers(self, today: Optional[date] = None) -> BestSellersReport:
        """
        Rank products by units sold over the last settings.best_sellers_months.

        Orders are read newest first and capped at
        settings.best_sellers_max_orders.

        Raises:
            CollectionError: If an orders or collections page fails
        """
        months = settings.best_sellers_months
        start = months_before(today or date.today(), months)
        search = f"processed_at:>='{start.isoformat()}'"

        logger.info("computing_best_sellers", since=start.isoformat(), months=months)

        collections = self.list_collections()
        orders = collect(
            lambda cursor: self.client.fetch_orders_page(cursor, search),
            line_items,
            page_delay=settings.page_delay_seconds,
            max_parents=settings.best_sellers_max_orders,
            label="orders",
        )

        products = rank_products(aggregate_sales(orders.records), settings.best_sellers_limit)

        error = None
        collection_name = f"All orders - Last {months} months (top sellers by units sold)"
        if orders.parents_scanned == 0:
            error = NO_ORDERS_MESSAGE
            collection_name = None
        elif not products:
            error = NO_LINE_ITEMS_MESSAGE

        logger.info(
            "best_sellers_computed",
            orders=orders.parents_scanned,
            truncated=orders.truncated,
            products=len(products),
        )

        return BestSellersReport(
            products=products,
            collections=collections,
            collection_name=collection_name,
            orders_scanned=orders.parents_scanned,
            months=months,
            error=error,
        )

    def assign_to_collection(self, request: CollectionAssignRequest) -> CollectionAssignResponse:
        """
        Put products into a collection.

        ADD skips products already in the collection. REPLACE removes
        every current member first, then adds the selection. Ranking rows
        of deleted products (line-<id>) cannot be added and are dropped.

        Raises:
            ValidationError: If no real product ids remain
            BulkWriteError: If the API rejects a remove or add
            CollectionError: If current members cannot be read
        """
        requested = list(dict.fromkeys(request.product_ids))
        product_ids = [pid for pid in requested if not pid.startswith(ORPHAN_LINE_PREFIX)]
        dropped = len(requested) - len(product_ids)
        if not product_ids:
            raise ValidationError(
                "Selected products no longer exist in the store",
                code="NO_ASSIGNABLE_PRODUCTS",
                details={"deleted_products": dropped}
            )

        existing = collect(
            lambda cursor: self.client.fetch_collection_products_page(request.collection_id, cursor),
            lambda node: [node["id"]],
            page_delay=settings.page_delay_seconds,
            label="collection_products",
        ).records

        logger.info(
            "assigning_collection",
            collection_id=request.collection_id,
            mode=request.mode.value,
            products=len(product_ids),
            deleted_products=dropped,
            existing=len(existing),
        )

        if request.mode == CollectionAssignMode.REPLACE:
            if existing:
                outcome = self.client.collection_remove_products(request.collection_id, existing)
                if not outcome.ok:
                    raise BulkWriteError(outcome.errors[0], details={"step": "remove"})

            outcome = self.client.collection_add_products(request.collection_id, product_ids)
            if not outcome.ok:
                raise BulkWriteError(outcome.errors[0], details={"step": "add"})

            return CollectionAssignResponse(
                added=len(product_ids),
                removed=len(existing),
                skipped_deleted=dropped,
                message=(
                    f"Successfully replaced collection with {len(product_ids)} product(s) "
                    f"(removed {len(existing)} existing)"
                ),
            )

        existing_set = set(existing)
        to_add = [pid for pid in product_ids if pid not in existing_set]
        skipped = len(product_ids) - len(to_add)

        if not to_add:
            return CollectionAssignResponse(
                skipped=skipped,
                skipped_deleted=dropped,
                message=f"All {len(product_ids)} product(s) are already in this collection",
            )

        outcome = self.client.collection_add_products(request.collection_id, to_add)
        if not outcome.ok:
            raise BulkWriteError(outcome.errors[0], details={"step": "add"})

        message = f"Successfully added {len(to_add)} product(s) to collection"
        if skipped:
            message += f" ({skipped} already in collection)"
        return CollectionAssignResponse(
            added=len(to_add),
            skipped=skipped,
            skipped_deleted=dropped,
            message=message,
        )


# Singleton instance for convenience
_best_sellers_service: Optional[BestSellersService] = None

def get_best_sellers_service() -> BestSellersService:
    """Get or create BestSellersService instance."""
    global _best_sellers_service
    if _best_sellers_service is None:
        _best_sellers_service = BestSellersService()
    return _best_sellers_service
