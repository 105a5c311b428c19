"""
Shared test fixtures.

FakeShopifyClient stands in for ShopifyAdminClient: same methods, store
state kept in memory, writes applied so a re-scan sees them.
"""

import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import re
import pytest
from unittest.mock import patch
from typing import Optional

from config import settings
from exceptions import BulkWriteError, ShopifyAPIError
from integrations.shopify_admin import Page, WriteOutcome
from models.variant import KeyField
from services import preview_cache_service


# ===================
# FAKE ADMIN API CLIENT
# ===================

class FakeShopifyClient:
    """
    In-memory Admin API.

    Usage:
        client = FakeShopifyClient(products=[ProductNodeFactory.create(...)])
        client.fail_writes["gid://shopify/Product/1"] = "Variant is locked"
    """

    def __init__(
        self,
        products: Optional[list] = None,
        orders: Optional[list] = None,
        collections: Optional[list] = None,
        page_size: int = 2,
    ):
        self.products = products or []
        self.orders = orders or []
        self.collections = collections or []
        self.collection_members: dict[str, list[str]] = {}
        self.page_size = page_size

        # product_id / owner_id -> userError message
        self.fail_writes: dict[str, str] = {}
        # product_id / owner_id whose write raises
        self.raise_writes: set[str] = set()
        # 1-based page number that raises
        self.fail_on_page: Optional[int] = None

        self.calls: list[tuple] = []
        self.page_calls = 0

    # ----- paging -----

    def _page(self, records: list, cursor: Optional[str]) -> Page:
        self.page_calls += 1
        if self.fail_on_page is not None and self.page_calls == self.fail_on_page:
            raise ShopifyAPIError("Throttled")
        start = int(cursor) if cursor else 0
        end = start + self.page_size
        has_next = end < len(records)
        return Page(
            records=records[start:end],
            next_cursor=str(end) if has_next else None,
            has_next_page=has_next,
        )

    def _variant_nodes(self) -> list[dict]:
        nodes = []
        for product in self.products:
            for edge in product["variants"]["edges"]:
                node = dict(edge["node"])
                node["product"] = {k: v for k, v in product.items() if k != "variants"}
                nodes.append(node)
        return nodes

    def _find_variant(self, variant_id: str) -> Optional[dict]:
        for product in self.products:
            for edge in product["variants"]["edges"]:
                if edge["node"]["id"] == variant_id:
                    return edge["node"]
        return None

    # ----- reads -----

    def fetch_products_page(self, cursor=None, *, with_fulfil_from=False, namespace="custom", key="fulfil_from"):
        self.calls.append(("fetch_products_page", cursor, with_fulfil_from))
        return self._page(self.products, cursor)

    def search_variants_page(self, search, cursor=None):
        self.calls.append(("search_variants_page", search, cursor))
        match = re.match(r'^(\w+):"(.*)"$', search)
        field, value = match.group(1), match.group(2)
        # Substring match, like the API's fuzzy search
        found = [n for n in self._variant_nodes() if value in (n.get(field) or "")]
        return self._page(found, cursor)

    def fetch_variants_by_ids(self, variant_ids):
        self.calls.append(("fetch_variants_by_ids", list(variant_ids)))
        wanted = set(variant_ids)
        return [n for n in self._variant_nodes() if n["id"] in wanted]

    def fetch_orders_page(self, cursor=None, search=None):
        self.calls.append(("fetch_orders_page", cursor, search))
        return self._page(self.orders, cursor)

    def fetch_collections_page(self, cursor=None):
        return self._page(self.collections, cursor)

    def fetch_collection_products_page(self, collection_id, cursor=None):
        members = [{"id": pid} for pid in self.collection_members.get(collection_id, [])]
        return self._page(members, cursor)

    def shop_info(self):
        return {"name": "Test Store", "myshopifyDomain": "test-store.myshopify.com"}

    # ----- writes -----

    def _check_write(self, target_id: str) -> Optional[str]:
        if target_id in self.raise_writes:
            raise ShopifyAPIError("Admin API returned HTTP 500", details={"status": 500})
        return self.fail_writes.get(target_id)

    def bulk_update_variants(self, product_id, field_name, values):
        self.calls.append(("bulk_update_variants", product_id, field_name, list(values)))
        error = self._check_write(product_id)
        if error:
            return WriteOutcome(errors=[error])
        attr = "sku" if field_name == KeyField.SKU else "barcode"
        for variant_id, value in values:
            node = self._find_variant(variant_id)
            if node is None:
                return WriteOutcome(errors=[f"Variant does not exist: {variant_id}"])
            node[attr] = value
        return WriteOutcome(updated_count=len(values))

    def bulk_delete_variants(self, product_id, variant_ids):
        self.calls.append(("bulk_delete_variants", product_id, list(variant_ids)))
        error = self._check_write(product_id)
        if error:
            return WriteOutcome(errors=[error])
        for variant_id in variant_ids:
            if self._find_variant(variant_id) is None:
                return WriteOutcome(errors=[f"Variant does not exist: {variant_id}"])
        for product in self.products:
            if product["id"] == product_id:
                product["variants"]["edges"] = [
                    e for e in product["variants"]["edges"] if e["node"]["id"] not in variant_ids
                ]
        return WriteOutcome(updated_count=len(variant_ids))

    def delete_product(self, product_id):
        self.calls.append(("delete_product", product_id))
        if not any(p["id"] == product_id for p in self.products):
            raise BulkWriteError("Product does not exist", details={"product_id": product_id})
        self.products = [p for p in self.products if p["id"] != product_id]
        return product_id

    def set_metafield(self, owner_id, namespace, key, value, type_="single_line_text_field"):
        self.calls.append(("set_metafield", owner_id, namespace, key, value))
        error = self._check_write(owner_id)
        if error:
            return WriteOutcome(errors=[error])
        node = self._find_variant(owner_id)
        node["metafield"] = {"value": value}
        return WriteOutcome(updated_count=1)

    def collection_add_products(self, collection_id, product_ids):
        self.calls.append(("collection_add_products", collection_id, list(product_ids)))
        error = self._check_write(collection_id)
        if error:
            return WriteOutcome(errors=[error])
        self.collection_members.setdefault(collection_id, []).extend(product_ids)
        return WriteOutcome(updated_count=len(product_ids))

    def collection_remove_products(self, collection_id, product_ids):
        self.calls.append(("collection_remove_products", collection_id, list(product_ids)))
        members = self.collection_members.get(collection_id, [])
        self.collection_members[collection_id] = [p for p in members if p not in product_ids]
        return WriteOutcome(updated_count=len(product_ids))

    def write_calls(self) -> list[tuple]:
        """Calls that change store state, in order."""
        return [c for c in self.calls if not c[0].startswith(("fetch", "search"))]


# ===================
# FIXTURES
# ===================

@pytest.fixture(autouse=True)
def no_delays(monkeypatch):
    """Pages and writes run without courtesy pauses in tests."""
    monkeypatch.setattr(settings, "page_delay_seconds", 0.0)
    monkeypatch.setattr(settings, "mutation_delay_seconds", 0.0)


@pytest.fixture(autouse=True)
def clean_preview_cache():
    preview_cache_service.clear_previews()
    yield
    preview_cache_service.clear_previews()


@pytest.fixture
def fake_shopify() -> FakeShopifyClient:
    """
    Empty fake store.

    Usage:
        def test_something(fake_shopify):
            fake_shopify.products = [ProductNodeFactory.create(...)]
    """
    return FakeShopifyClient()


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_fake_store(fake_shopify):
    """
    FastAPI test client whose services talk to fake_shopify.

    Usage:
        def test_endpoint(test_client_with_fake_store, fake_shopify):
            fake_shopify.products = [...]
            response = test_client_with_fake_store.get("/api/variants/duplicate-skus")
    """
    from fastapi.testclient import TestClient
    from main import app
    from services.catalog_service import CatalogService
    from services.bulk_action_service import BulkActionService
    from services.best_sellers_service import BestSellersService
    from services.fulfilment_service import FulfilmentService

    catalog = CatalogService(fake_shopify)
    with patch("routes.variants.get_catalog_service", return_value=catalog), \
            patch("routes.products.get_catalog_service", return_value=catalog), \
            patch("routes.csv_comparison.get_catalog_service", return_value=catalog), \
            patch("routes.bulk_actions.get_bulk_action_service",
                  return_value=BulkActionService(fake_shopify)), \
            patch("routes.fulfilment.get_fulfilment_service",
                  return_value=FulfilmentService(fake_shopify, sleep=lambda s: None)), \
            patch("routes.best_sellers.get_best_sellers_service",
                  return_value=BestSellersService(fake_shopify)):
        yield TestClient(app)
