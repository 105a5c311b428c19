"""
Fulfil-from tagging.

Variants carry a custom single-line-text metafield saying which
warehouse ships them (US or CN by default). This service tags variants
listed in an uploaded CSV and reports the current split.
"""

from typing import Callable, Optional, Union
import time
import structlog

from config import get_shopify_client, settings
from exceptions import AppError, ValidationError
from integrations.shopify_admin import ShopifyAdminClient
from models.fulfilment import (
    FulfilFromAssignResult,
    FulfilFromFailure,
    FulfilFromNotFound,
    FulfilFromReport,
)
from models.variant import KeyField, VariantRecord
from parsers import parse_reference_csv
from services.catalog_service import CatalogService, NO_PRODUCTS_MESSAGE
from services.classification_service import filter_records, group_by_key, partition_by_value

logger = structlog.get_logger(__name__)


class FulfilmentService:
    """
    Reads and writes the fulfil-from metafield.
    """

    def __init__(
        self,
        client: Optional[ShopifyAdminClient] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client or get_shopify_client()
        self.catalog = CatalogService(self.client)
        self.sleep = sleep

    def _validate_value(self, fulfil_from: str) -> str:
        value = (fulfil_from or "").strip().upper()
        allowed = settings.allowed_fulfil_from
        if value not in allowed:
            raise ValidationError(
                f"Please select Fulfil From value ({' or '.join(allowed)})",
                code="INVALID_FULFIL_FROM",
                details={"value": fulfil_from, "allowed": allowed}
            )
        return value

    # ===================
    # ASSIGN
    # ===================

    def assign_from_csv(
        self,
        content: Union[str, bytes],
        fulfil_from: str,
        filename: Optional[str] = None,
    ) -> FulfilFromAssignResult:
        """
        Tag every variant whose SKU appears in the CSV.

        When several store variants share a SKU, the last one collected is
        tagged. Writes are one call per variant with the mutation delay
        between them; a failed variant does not stop the rest.

        Raises:
            ValidationError: If fulfil_from is not an allowed value
            ReferenceCSVParseError: If the file cannot be parsed
            CollectionError: If the store scan fails
        """
        value = self._validate_value(fulfil_from)
        parsed = parse_reference_csv(content, filename=filename)

        scan = self.catalog.scan_variants()
        groups, _ = group_by_key(scan.records, KeyField.SKU)

        matched: list[VariantRecord] = []
        not_found: list[FulfilFromNotFound] = []
        for row in parsed.rows:
            variants = groups.get(row.key)
            if not variants:
                not_found.append(
                    FulfilFromNotFound(sku=row.key, product=row.product, row_number=row.row_number)
                )
            else:
                matched.append(variants[-1])

        logger.info(
            "fulfil_from_assign_started",
            fulfil_from=value,
            csv_rows=len(parsed.rows),
            matched=len(matched),
            not_found=len(not_found),
        )

        result = FulfilFromAssignResult(
            fulfil_from=value,
            not_found=not_found,
            total_csv_rows=len(parsed.rows) + parsed.skipped_rows,
        )

        for i, variant in enumerate(matched):
            if i > 0 and settings.mutation_delay_seconds > 0:
                self.sleep(settings.mutation_delay_seconds)

            error: Optional[str] = None
            try:
                outcome = self.client.set_metafield(
                    variant.variant_id,
                    settings.fulfil_from_namespace,
                    settings.fulfil_from_key,
                    value,
                )
                if not outcome.ok:
                    error = outcome.errors[0]
            except AppError as e:
                error = e.message

            if error is None:
                result.succeeded.append(variant)
                continue

            logger.warning("fulfil_from_write_failed", variant_id=variant.variant_id, error=error)
            result.failed.append(FulfilFromFailure(variant=variant, error=error))
            if result.error is None:
                result.error = error

        logger.info(
            "fulfil_from_assign_complete",
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        return result

    # ===================
    # VIEW
    # ===================

    def get_report(self, search: Optional[str] = None) -> FulfilFromReport:
        """
        Variants with a SKU, split by fulfil-from value.

        Variants without a SKU are left out. The search matches product
        title, variant title, SKU or barcode.

        Raises:
            CollectionError: If the store scan fails
        """
        scan = self.catalog.scan_variants(with_fulfil_from=True)
        with_sku = [r for r in scan.records if r.sku and r.sku.strip()]
        visible = filter_records(with_sku, search)

        partition = partition_by_value(visible, KeyField.FULFIL_FROM, settings.allowed_fulfil_from)

        logger.info(
            "fulfil_from_report",
            variants=len(with_sku),
            shown=partition.total,
            unassigned=len(partition.unassigned),
        )

        return FulfilFromReport(
            buckets=partition.buckets,
            unassigned=partition.unassigned,
            total_products_scanned=scan.parents_scanned,
            total_variants_scanned=len(scan.records),
            search=search.strip() if search and search.strip() else None,
            error=NO_PRODUCTS_MESSAGE if scan.parents_scanned == 0 else None,
        )


# Singleton instance for convenience
_fulfilment_service: Optional[FulfilmentService] = None

def get_fulfilment_service() -> FulfilmentService:
    """Get or create FulfilmentService instance."""
    global _fulfilment_service
    if _fulfilment_service is None:
        _fulfilment_service = FulfilmentService()
    return _fulfilment_service
