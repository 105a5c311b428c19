"""
Unit tests for the paginated collector.

Run: pytest tests/unit/test_collector_service.py -v
"""

import pytest

from services.collector_service import collect, flatten_product, flatten_variant
from integrations.shopify_admin import Page
from exceptions import CollectionError, ShopifyAPIError

from tests.factories import ProductNodeFactory


def pages_from(*pages):
    """fetch_page that serves the given pages in order and records cursors."""
    served = list(pages)
    cursors = []

    def fetch(cursor):
        cursors.append(cursor)
        return served.pop(0)

    fetch.cursors = cursors
    return fetch


class TestCollectTermination:
    """Tests for when collect() stops paging."""

    def test_stops_when_no_next_page(self):
        """Should fetch exactly once when has_next_page is false."""
        # Arrange
        fetch = pages_from(Page(records=[1, 2], next_cursor="c1", has_next_page=False))

        # Act
        result = collect(fetch, lambda r: [r])

        # Assert
        assert result.records == [1, 2]
        assert result.pages_fetched == 1
        assert fetch.cursors == [None]

    def test_stops_when_cursor_missing_even_if_next_page_claimed(self):
        """Should stop when the page has no cursor to continue from."""
        fetch = pages_from(Page(records=[1], next_cursor=None, has_next_page=True))

        result = collect(fetch, lambda r: [r])

        assert result.records == [1]
        assert result.pages_fetched == 1

    def test_follows_cursors_in_order(self):
        """Should pass each page's cursor to the next fetch and keep order."""
        fetch = pages_from(
            Page(records=["a"], next_cursor="c1", has_next_page=True),
            Page(records=["b"], next_cursor="c2", has_next_page=True),
            Page(records=["c"], next_cursor=None, has_next_page=False),
        )

        result = collect(fetch, lambda r: [r])

        assert result.records == ["a", "b", "c"]
        assert fetch.cursors == [None, "c1", "c2"]
        assert result.parents_scanned == 3

    def test_empty_first_page(self):
        fetch = pages_from(Page(records=[], next_cursor=None, has_next_page=False))

        result = collect(fetch, lambda r: [r])

        assert result.records == []
        assert result.pages_fetched == 1


class TestCollectDelay:
    """Tests for the courtesy pause between pages."""

    def test_sleeps_between_pages_only(self):
        """Two pages -> one pause; never after the last page."""
        sleeps = []
        fetch = pages_from(
            Page(records=[1], next_cursor="c1", has_next_page=True),
            Page(records=[2], next_cursor=None, has_next_page=False),
        )

        collect(fetch, lambda r: [r], page_delay=0.1, sleep=sleeps.append)

        assert sleeps == [0.1]

    def test_no_sleep_when_delay_is_zero(self):
        sleeps = []
        fetch = pages_from(
            Page(records=[1], next_cursor="c1", has_next_page=True),
            Page(records=[2], next_cursor=None, has_next_page=False),
        )

        collect(fetch, lambda r: [r], page_delay=0, sleep=sleeps.append)

        assert sleeps == []


class TestCollectFailure:
    """Tests for all-or-nothing failure."""

    def test_page_failure_raises_collection_error(self):
        """A failing second page discards the first page's records."""
        # Arrange
        calls = []

        def fetch(cursor):
            calls.append(cursor)
            if cursor is None:
                return Page(records=[1], next_cursor="c1", has_next_page=True)
            raise ShopifyAPIError("Throttled")

        # Act / Assert
        with pytest.raises(CollectionError) as exc_info:
            collect(fetch, lambda r: [r])

        assert exc_info.value.message == "Throttled"
        assert exc_info.value.details["pages_fetched"] == 1
        assert calls == [None, "c1"]

    def test_unexpected_exception_is_wrapped(self):
        def fetch(cursor):
            raise KeyError("data")

        with pytest.raises(CollectionError) as exc_info:
            collect(fetch, lambda r: [r], label="products")

        assert "products" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, KeyError)


class TestCollectCap:
    """Tests for max_parents."""

    def test_cap_stops_mid_page(self):
        fetch = pages_from(
            Page(records=[1, 2, 3], next_cursor="c1", has_next_page=True),
            Page(records=[4, 5, 6], next_cursor=None, has_next_page=False),
        )

        result = collect(fetch, lambda r: [r], max_parents=2)

        assert result.records == [1, 2]
        assert result.truncated is True
        assert fetch.cursors == [None]

    def test_cap_at_page_boundary_does_not_fetch_more(self):
        fetch = pages_from(
            Page(records=[1, 2], next_cursor="c1", has_next_page=True),
            Page(records=[3], next_cursor=None, has_next_page=False),
        )

        result = collect(fetch, lambda r: [r], max_parents=2)

        assert result.records == [1, 2]
        assert result.truncated is True
        assert result.pages_fetched == 1

    def test_cap_not_reached(self):
        fetch = pages_from(Page(records=[1], next_cursor=None, has_next_page=False))

        result = collect(fetch, lambda r: [r], max_parents=5)

        assert result.truncated is False


class TestFlatteners:
    """Tests for product / variant node flattening."""

    def test_flatten_product_one_record_per_variant(self):
        # Arrange
        product = ProductNodeFactory.create(
            title="Oak Plank",
            variants=[{"sku": "OAK-1", "barcode": "111"}, {"sku": None}],
        )

        # Act
        records = flatten_product(product)

        # Assert
        assert len(records) == 2
        assert records[0].product_id == product["id"]
        assert records[0].product_title == "Oak Plank"
        assert records[0].sku == "OAK-1"
        assert records[0].barcode == "111"
        assert records[0].product_image_url.endswith(".jpg")
        assert records[0].price == "19.99"
        assert records[1].sku is None

    def test_flatten_product_reads_fulfil_from_metafield(self):
        product = ProductNodeFactory.create(variants=[{"sku": "A", "fulfil_from": " US "}])

        records = flatten_product(product)

        assert records[0].fulfil_from == "US"

    def test_flatten_product_without_variants(self):
        product = ProductNodeFactory.create()
        product["variants"] = {"edges": []}

        assert flatten_product(product) == []

    def test_flatten_variant_uses_nested_product(self):
        node = ProductNodeFactory.variant_node(sku="X")
        node["product"] = {"id": "gid://shopify/Product/9", "title": "Slate"}

        records = flatten_variant(node)

        assert len(records) == 1
        assert records[0].product_id == "gid://shopify/Product/9"

    def test_flatten_variant_without_product_is_dropped(self):
        node = ProductNodeFactory.variant_node(sku="X")

        assert flatten_variant(node) == []
