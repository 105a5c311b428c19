"""
Catalog finders.

Each finder is one collection run over every product followed by one
classification pass, keyed on SKU or barcode.
"""

from typing import Optional
import structlog

from config import get_shopify_client, settings
from integrations.shopify_admin import ShopifyAdminClient
from models.bulk_action import DeleteProductResponse
from models.reconciliation import ClassificationResult, DuplicateKeyReport, MissingKeyReport
from models.variant import KeyField
from services.classification_service import classify, filter_records
from services.collector_service import CollectionResult, collect, flatten_product

logger = structlog.get_logger(__name__)

NO_PRODUCTS_MESSAGE = "No products were found. Make sure your app has read_products permission."


class CatalogService:
    """
    Scans the store catalog and reports duplicate or missing keys.
    """

    def __init__(self, client: Optional[ShopifyAdminClient] = None):
        self.client = client or get_shopify_client()

    # ===================
    # SCANS
    # ===================

    def scan_variants(self, with_fulfil_from: bool = False) -> CollectionResult:
        """
        Collect every variant of every product.

        Raises:
            CollectionError: If any page fails
        """
        return collect(
            lambda cursor: self.client.fetch_products_page(
                cursor,
                with_fulfil_from=with_fulfil_from,
                namespace=settings.fulfil_from_namespace,
                key=settings.fulfil_from_key,
            ),
            flatten_product,
            page_delay=settings.page_delay_seconds,
            label="products",
        )

    def classify_catalog(self, field: KeyField) -> ClassificationResult:
        """Scan the catalog and classify it on field."""
        scan = self.scan_variants()
        return classify(scan.records, field, parents_scanned=scan.parents_scanned)

    # ===================
    # FINDERS
    # ===================

    def find_duplicates(self, field: KeyField = KeyField.SKU) -> DuplicateKeyReport:
        """
        Variants sharing a key value, largest groups first.

        Args:
            field: KeyField.SKU or KeyField.BARCODE

        Returns:
            DuplicateKeyReport; error is set when the scan saw no products
        """
        logger.info("finding_duplicates", field=field.value)

        result = self.classify_catalog(field)
        return DuplicateKeyReport(
            key_field=result.key_field,
            duplicates=result.duplicates,
            total_products_scanned=result.total_parents_scanned,
            total_variants_scanned=result.total_variants_scanned,
            total_unique_keys=result.total_unique_keys,
            variants_with_key=result.variants_with_key,
            variants_missing_key=result.missing_key_count,
            error=NO_PRODUCTS_MESSAGE if result.total_parents_scanned == 0 else None,
        )

    def find_missing(
        self,
        field: KeyField = KeyField.SKU,
        search: Optional[str] = None,
    ) -> MissingKeyReport:
        """
        Variants with no key value, optionally filtered by search.

        The search matches product title, variant title, SKU or barcode,
        case-insensitively. Counters always describe the whole catalog.
        """
        logger.info("finding_missing", field=field.value, search=search)

        result = self.classify_catalog(field)
        missing = filter_records(result.missing_key, search)
        return MissingKeyReport(
            key_field=result.key_field,
            missing=missing,
            total_products_scanned=result.total_parents_scanned,
            total_variants_scanned=result.total_variants_scanned,
            variants_with_key=result.variants_with_key,
            search=search.strip() if search and search.strip() else None,
            error=NO_PRODUCTS_MESSAGE if result.total_parents_scanned == 0 else None,
        )

    # ===================
    # WRITE OPERATIONS
    # ===================

    def delete_product(self, product_id: str) -> DeleteProductResponse:
        """
        Delete a product with all of its variants.

        Raises:
            BulkWriteError: If the API refuses the delete
            ShopifyAPIError: If the call fails
        """
        logger.info("deleting_product", product_id=product_id)

        deleted_id = self.client.delete_product(product_id)

        logger.info("product_deleted", product_id=deleted_id)
        return DeleteProductResponse(deleted_product_id=deleted_id)


# Singleton instance for convenience
_catalog_service: Optional[CatalogService] = None

def get_catalog_service() -> CatalogService:
    """Get or create CatalogService instance."""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = CatalogService()
    return _catalog_service
