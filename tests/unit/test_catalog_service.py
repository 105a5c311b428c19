"""
Unit tests for CatalogService finders.

Run: pytest tests/unit/test_catalog_service.py -v
"""

import pytest
from unittest.mock import patch

from services.catalog_service import CatalogService, NO_PRODUCTS_MESSAGE
from models.variant import KeyField
from exceptions import BulkWriteError, CollectionError, ShopifyNotConfiguredError

from tests.factories import ProductNodeFactory


@pytest.fixture
def catalog_store(fake_shopify):
    fake_shopify.products = [
        ProductNodeFactory.create(title="Oak", variants=[
            {"sku": "A", "barcode": "111"},
            {"sku": "B", "barcode": None},
        ]),
        ProductNodeFactory.create(title="Slate", variants=[
            {"sku": "A", "barcode": "111"},
            {"sku": None, "barcode": "222"},
        ]),
        ProductNodeFactory.create(title="Marble", variants=[{"sku": "", "title": "Polished"}]),
    ]
    return fake_shopify


class TestFindDuplicates:

    def test_duplicate_skus(self, catalog_store):
        # Arrange
        service = CatalogService(catalog_store)

        # Act
        report = service.find_duplicates(KeyField.SKU)

        # Assert
        assert report.key_field == "sku"
        assert len(report.duplicates) == 1
        assert report.duplicates[0].key == "A"
        assert report.total_products_scanned == 3
        assert report.total_variants_scanned == 5
        assert report.total_unique_keys == 2
        assert report.variants_with_key == 3
        assert report.variants_missing_key == 2
        assert report.error is None

    def test_duplicate_barcodes(self, catalog_store):
        report = CatalogService(catalog_store).find_duplicates(KeyField.BARCODE)

        assert report.duplicates[0].key == "111"
        assert report.duplicates[0].count == 2

    def test_pages_through_whole_catalog(self, catalog_store):
        CatalogService(catalog_store).find_duplicates()

        cursors = [c[1] for c in catalog_store.calls if c[0] == "fetch_products_page"]
        assert cursors == [None, "2"]

    def test_empty_store_sets_error(self, fake_shopify):
        report = CatalogService(fake_shopify).find_duplicates()

        assert report.error == NO_PRODUCTS_MESSAGE
        assert report.duplicates == []

    def test_page_failure_raises(self, catalog_store):
        catalog_store.fail_on_page = 2

        with pytest.raises(CollectionError):
            CatalogService(catalog_store).find_duplicates()


class TestFindMissing:

    def test_missing_skus(self, catalog_store):
        report = CatalogService(catalog_store).find_missing(KeyField.SKU)

        assert [v.product_title for v in report.missing] == ["Slate", "Marble"]
        assert report.variants_with_key == 3
        assert report.search is None

    def test_missing_with_search(self, catalog_store):
        report = CatalogService(catalog_store).find_missing(KeyField.SKU, search=" polish ")

        assert [v.variant_title for v in report.missing] == ["Polished"]
        assert report.search == "polish"
        assert report.total_variants_scanned == 5

    def test_missing_barcodes(self, catalog_store):
        report = CatalogService(catalog_store).find_missing(KeyField.BARCODE)

        assert [v.sku for v in report.missing] == ["B", ""]


class TestDeleteProduct:

    def test_delete_product(self, catalog_store):
        product_id = catalog_store.products[0]["id"]

        response = CatalogService(catalog_store).delete_product(product_id)

        assert response.success is True
        assert response.deleted_product_id == product_id
        assert len(catalog_store.products) == 2

    def test_delete_twice_reports_failure(self, catalog_store):
        service = CatalogService(catalog_store)
        product_id = catalog_store.products[0]["id"]
        service.delete_product(product_id)

        with pytest.raises(BulkWriteError):
            service.delete_product(product_id)


class TestClientFactory:

    def test_unconfigured_store_raises(self):
        from config.shopify import get_shopify_client

        get_shopify_client.cache_clear()
        with patch("config.shopify.settings") as mock_settings:
            mock_settings.shopify_configured = False
            with pytest.raises(ShopifyNotConfiguredError):
                get_shopify_client()
        get_shopify_client.cache_clear()
