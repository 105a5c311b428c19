"""
Bulk action sessions.

An operator picks variants, reviews the planned per-product batches and
then confirms or cancels. Each session is an explicit state machine:

    IDLE --begin--> CONFIRMING --confirm--> EXECUTING --> IDLE
                    CONFIRMING --cancel---> IDLE
    IDLE (after a failed run) --retry--> CONFIRMING

A failed run keeps the error and the records of the products whose batch
failed, so a retry only resends those batches. A successful run clears
the selection and triggers a fresh duplicate scan.
"""

from typing import Any, Callable, Optional
import time
import structlog

from config import get_shopify_client, settings
from exceptions import (
    AppError,
    EmptySelectionError,
    InvalidActionStateError,
    PreviewNotFoundError,
)
from integrations.shopify_admin import ShopifyAdminClient
from models.bulk_action import (
    ActionState,
    BulkActionPreview,
    BulkActionRequest,
    BulkActionResult,
    BulkActionStatus,
    BulkActionType,
    MutationBatch,
)
from models.variant import KeyField, VariantRecord
from services import preview_cache_service
from services.catalog_service import CatalogService
from services.classification_service import resolve_key_fn
from services.collector_service import collect, flatten_variant
from services.mutation_planner_service import execute, plan, DEFAULT_REASSIGN_PREFIX

logger = structlog.get_logger(__name__)


class BulkActionSession:
    """One operator-initiated bulk action."""

    def __init__(self, on_success: Optional[Callable[["BulkActionSession"], Any]] = None):
        self.state = ActionState.IDLE
        self.selection: list[VariantRecord] = []
        self.action: Optional[BulkActionType] = None
        self.field: KeyField = KeyField.SKU
        self.prefix: str = DEFAULT_REASSIGN_PREFIX
        self.batches: list[MutationBatch] = []
        self.last_result: Optional[BulkActionResult] = None
        self.error: Optional[str] = None
        self.refreshed_report: Any = None
        self.on_success = on_success

    def _require(self, expected: ActionState, operation: str) -> None:
        if self.state != expected:
            raise InvalidActionStateError(self.state.value, operation)

    def begin(
        self,
        selection: list[VariantRecord],
        action: BulkActionType,
        field: KeyField = KeyField.SKU,
        prefix: str = DEFAULT_REASSIGN_PREFIX,
    ) -> list[MutationBatch]:
        """IDLE -> CONFIRMING with the planned batches."""
        self._require(ActionState.IDLE, "begin")
        if not selection:
            raise EmptySelectionError()

        self.batches = plan(selection, action, field, prefix=prefix)
        self.selection = list(selection)
        self.action = action
        self.field = field
        self.prefix = prefix
        self.error = None
        self.state = ActionState.CONFIRMING
        return self.batches

    def cancel(self) -> None:
        """CONFIRMING -> IDLE, dropping the selection."""
        self._require(ActionState.CONFIRMING, "cancel")
        self.selection = []
        self.batches = []
        self.error = None
        self.state = ActionState.IDLE

    def confirm(
        self,
        client: ShopifyAdminClient,
        *,
        call_delay: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> BulkActionResult:
        """
        CONFIRMING -> EXECUTING -> IDLE.

        Batch failures do not raise; they leave the session IDLE with
        error set and the selection narrowed to the failed products.
        """
        self._require(ActionState.CONFIRMING, "confirm")
        self.state = ActionState.EXECUTING

        try:
            result = execute(
                self.batches,
                self.action,
                self.field,
                client,
                call_delay=call_delay,
                sleep=sleep,
            )
        except Exception as e:
            self.state = ActionState.IDLE
            self.error = str(e)
            raise

        self.last_result = result
        self.state = ActionState.IDLE

        if result.failed_batches:
            failed_products = {f.product_id for f in result.failed_batches}
            self.selection = [r for r in self.selection if r.product_id in failed_products]
            self.error = result.error
            return result

        self.error = None
        self.selection = []
        self.batches = []
        if self.on_success is not None:
            self.on_success(self)
        return result

    def retry(self) -> list[MutationBatch]:
        """IDLE after a failure -> CONFIRMING with the failed products only."""
        self._require(ActionState.IDLE, "retry")
        if self.error is None or not self.selection:
            raise InvalidActionStateError("idle without a failed action", "retry")

        self.batches = plan(self.selection, self.action, self.field, prefix=self.prefix)
        self.error = None
        self.state = ActionState.CONFIRMING
        return self.batches


class BulkActionService:
    """
    Resolves selections from the store and drives sessions kept in the
    preview cache.
    """

    def __init__(self, client: Optional[ShopifyAdminClient] = None):
        self.client = client or get_shopify_client()

    # ===================
    # SELECTION
    # ===================

    def _select_by_ids(self, variant_ids: list[str]) -> tuple[list[VariantRecord], list[str]]:
        """Look up variants by id; product ids always come from the store."""
        unique_ids = list(dict.fromkeys(variant_ids))
        nodes = self.client.fetch_variants_by_ids(unique_ids)

        by_id: dict[str, VariantRecord] = {}
        for node in nodes:
            for record in flatten_variant(node):
                by_id[record.variant_id] = record

        records = [by_id[vid] for vid in unique_ids if vid in by_id]
        unknown = [vid for vid in unique_ids if vid not in by_id]
        return records, unknown

    def _select_by_key(self, field: KeyField, value: str) -> list[VariantRecord]:
        """Every variant whose trimmed key equals value."""
        wanted = value.strip()
        escaped = wanted.replace("\\", "\\\\").replace('"', '\\"')
        search = f'{field.value}:"{escaped}"'

        scan = collect(
            lambda cursor: self.client.search_variants_page(search, cursor),
            flatten_variant,
            page_delay=settings.page_delay_seconds,
            label="variants",
        )
        key_fn = resolve_key_fn(field)
        # The API search is fuzzy; keep exact matches only
        return [r for r in scan.records if key_fn(r) == wanted]

    # ===================
    # SESSION OPERATIONS
    # ===================

    def preview(self, request: BulkActionRequest) -> BulkActionPreview:
        """
        Resolve the selection, plan batches and open a session.

        Raises:
            EmptySelectionError: If nothing in the store matched
            CollectionError: If a key_value search fails
        """
        logger.info(
            "bulk_action_preview",
            action=request.action.value,
            field=request.field.value,
            variant_ids=len(request.variant_ids),
            key_value=request.key_value,
        )

        unknown: list[str] = []
        if request.variant_ids:
            selection, unknown = self._select_by_ids(request.variant_ids)
        else:
            selection = self._select_by_key(request.field, request.key_value)

        if not selection:
            raise EmptySelectionError(details={"unknown_variant_ids": unknown})

        session = BulkActionSession(on_success=self._refresh_scan)
        batches = session.begin(
            selection,
            request.action,
            request.field,
            prefix=settings.reassign_sku_prefix,
        )
        preview_id = preview_cache_service.store_preview(session)

        if unknown:
            logger.warning("bulk_action_unknown_variants", preview_id=preview_id, count=len(unknown))

        return BulkActionPreview(
            preview_id=preview_id,
            state=session.state,
            action=request.action,
            field=request.field,
            batches=batches,
            variant_count=sum(b.size for b in batches),
            product_count=len(batches),
            unknown_variant_ids=unknown,
            expires_in_minutes=settings.preview_ttl_minutes,
        )

    def confirm(self, preview_id: str) -> BulkActionStatus:
        """
        Execute a confirmed session.

        Raises:
            PreviewNotFoundError: If the session expired or never existed
            InvalidActionStateError: If the session is not awaiting confirmation
        """
        session = self._get(preview_id)
        logger.info("bulk_action_confirmed", preview_id=preview_id, batches=len(session.batches))

        session.confirm(self.client, call_delay=settings.mutation_delay_seconds)
        preview_cache_service.refresh_preview(preview_id)
        return self.status(preview_id)

    def cancel(self, preview_id: str) -> None:
        """Cancel a session awaiting confirmation and discard it."""
        session = self._get(preview_id)
        session.cancel()
        preview_cache_service.delete_preview(preview_id)
        logger.info("bulk_action_cancelled", preview_id=preview_id)

    def retry(self, preview_id: str) -> BulkActionPreview:
        """Re-open a failed session for confirmation with the variants of the failed products."""
        session = self._get(preview_id)
        batches = session.retry()
        preview_cache_service.refresh_preview(preview_id)
        logger.info("bulk_action_retry", preview_id=preview_id, batches=len(batches))

        return BulkActionPreview(
            preview_id=preview_id,
            state=session.state,
            action=session.action,
            field=session.field,
            batches=batches,
            variant_count=sum(b.size for b in batches),
            product_count=len(batches),
            expires_in_minutes=settings.preview_ttl_minutes,
        )

    def status(self, preview_id: str) -> BulkActionStatus:
        session = self._get(preview_id)
        return BulkActionStatus(
            preview_id=preview_id,
            state=session.state,
            action=session.action,
            variant_count=len(session.selection),
            error=session.error,
            last_result=session.last_result,
            refreshed_report=session.refreshed_report,
        )

    # ===================
    # HELPERS
    # ===================

    def _get(self, preview_id: str) -> BulkActionSession:
        session = preview_cache_service.retrieve_preview(preview_id)
        if session is None:
            raise PreviewNotFoundError(preview_id)
        return session

    def _refresh_scan(self, session: BulkActionSession) -> None:
        """Re-run the duplicate finder so the operator sees the new store state."""
        try:
            session.refreshed_report = CatalogService(self.client).find_duplicates(session.field)
        except AppError as e:
            logger.warning("refresh_scan_failed", error=e.message, code=e.code)
            session.refreshed_report = None


# Singleton instance for convenience
_bulk_action_service: Optional[BulkActionService] = None

def get_bulk_action_service() -> BulkActionService:
    """Get or create BulkActionService instance."""
    global _bulk_action_service
    if _bulk_action_service is None:
        _bulk_action_service = BulkActionService()
    return _bulk_action_service
