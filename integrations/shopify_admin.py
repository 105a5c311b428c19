"""
Shopify Admin GraphQL client.

Thin wrapper over requests: one method per query or mutation the app
uses. Read methods return raw nodes plus page info; write methods return
a WriteOutcome with the API's userErrors so callers decide what a failure
means. Transport, HTTP and top-level GraphQL errors raise ShopifyAPIError.
"""

from dataclasses import dataclass, field
from typing import Any, Optional
import requests
import structlog

from exceptions import ShopifyAPIError, BulkWriteError
from models.variant import KeyField
from integrations import shopify_queries as q

logger = structlog.get_logger(__name__)


@dataclass
class Page:
    """One page of a cursor-paginated connection."""
    records: list[dict] = field(default_factory=list)
    next_cursor: Optional[str] = None
    has_next_page: bool = False


@dataclass
class WriteOutcome:
    """Result of one write call."""
    updated_count: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _connection_page(connection: Optional[dict]) -> Page:
    """Turn a GraphQL connection ({edges, pageInfo}) into a Page."""
    if not connection:
        return Page()
    page_info = connection.get("pageInfo") or {}
    return Page(
        records=[edge["node"] for edge in connection.get("edges") or [] if edge.get("node")],
        next_cursor=page_info.get("endCursor"),
        has_next_page=bool(page_info.get("hasNextPage")),
    )


def _user_errors(payload: Optional[dict]) -> list[str]:
    return [e.get("message", "Unknown error") for e in (payload or {}).get("userErrors") or []]


class ShopifyAdminClient:
    """
    Admin API client bound to one store.

    Usage:
        client = ShopifyAdminClient(graphql_url, token)
        page = client.fetch_products_page(cursor=None)
    """

    def __init__(
        self,
        graphql_url: str,
        access_token: str,
        timeout: float = 30.0,
        products_page_size: int = 250,
        variants_per_product: int = 100,
        orders_page_size: int = 100,
        session: Optional[requests.Session] = None,
    ):
        self.graphql_url = graphql_url
        self.timeout = timeout
        self.products_page_size = products_page_size
        self.variants_per_product = variants_per_product
        self.orders_page_size = orders_page_size
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "X-Shopify-Access-Token": access_token,
                "Content-Type": "application/json",
            }
        )

    # ===================
    # TRANSPORT
    # ===================

    def graphql(self, query: str, variables: Optional[dict[str, Any]] = None) -> dict:
        """
        Execute one GraphQL document.

        Returns:
            The "data" object of the response

        Raises:
            ShopifyAPIError: On network, HTTP or GraphQL-level errors
        """
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        try:
            response = self.session.post(self.graphql_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.error("shopify_http_error", status=status, error=str(e))
            raise ShopifyAPIError(
                f"Admin API returned HTTP {status}",
                details={"status": status}
            ) from e
        except requests.exceptions.RequestException as e:
            logger.error("shopify_request_failed", error=str(e))
            raise ShopifyAPIError(f"Admin API request failed: {e}") from e
        except ValueError as e:
            logger.error("shopify_invalid_json", error=str(e))
            raise ShopifyAPIError("Admin API returned a non-JSON response") from e

        if body.get("errors"):
            errors = body["errors"]
            message = errors[0].get("message", "Unknown error") if isinstance(errors, list) else str(errors)
            logger.error("shopify_graphql_errors", first_error=message, count=len(errors))
            raise ShopifyAPIError(f"GraphQL error: {message}", details={"errors": errors})

        data = body.get("data")
        if data is None:
            raise ShopifyAPIError("Admin API returned no data")
        return data

    # ===================
    # READ OPERATIONS
    # ===================

    def fetch_products_page(
        self,
        cursor: Optional[str] = None,
        *,
        with_fulfil_from: bool = False,
        namespace: str = "custom",
        key: str = "fulfil_from",
    ) -> Page:
        """Products with their variants, one page."""
        data = self.graphql(
            q.PRODUCTS_WITH_VARIANTS_QUERY,
            {
                "cursor": cursor,
                "first": self.products_page_size,
                "variantsFirst": self.variants_per_product,
                "withFulfilFrom": with_fulfil_from,
                "namespace": namespace,
                "key": key,
            },
        )
        if data.get("products") is None:
            raise ShopifyAPIError("Failed to fetch products. Check app scopes (read_products).")
        return _connection_page(data["products"])

    def search_variants_page(self, search: str, cursor: Optional[str] = None) -> Page:
        """Variants matching an Admin API search string (e.g. 'sku:ABC'), one page."""
        data = self.graphql(
            q.VARIANTS_SEARCH_QUERY,
            {"query": search, "cursor": cursor, "first": self.variants_per_product},
        )
        return _connection_page(data.get("productVariants"))

    def fetch_variants_by_ids(self, variant_ids: list[str]) -> list[dict]:
        """
        Look up variants by GID.

        Ids that do not resolve to a variant are left out of the result.
        """
        nodes: list[dict] = []
        for start in range(0, len(variant_ids), 250):
            chunk = variant_ids[start:start + 250]
            data = self.graphql(q.VARIANTS_BY_ID_QUERY, {"ids": chunk})
            nodes.extend(n for n in data.get("nodes") or [] if n and n.get("id"))
        return nodes

    def fetch_orders_page(self, cursor: Optional[str] = None, search: Optional[str] = None) -> Page:
        """Orders (newest first) with line items, one page."""
        data = self.graphql(
            q.ORDERS_QUERY,
            {"cursor": cursor, "query": search, "first": self.orders_page_size},
        )
        if data.get("orders") is None:
            raise ShopifyAPIError(
                "Failed to fetch orders. Check app scopes (read_orders / read_all_orders)."
            )
        return _connection_page(data["orders"])

    def fetch_collections_page(self, cursor: Optional[str] = None) -> Page:
        data = self.graphql(q.COLLECTIONS_QUERY, {"cursor": cursor})
        return _connection_page(data.get("collections"))

    def fetch_collection_products_page(self, collection_id: str, cursor: Optional[str] = None) -> Page:
        data = self.graphql(q.COLLECTION_PRODUCTS_QUERY, {"id": collection_id, "cursor": cursor})
        collection = data.get("collection")
        if collection is None:
            raise ShopifyAPIError(f"Collection not found: {collection_id}")
        return _connection_page(collection.get("products"))

    def shop_info(self) -> dict:
        return self.graphql(q.SHOP_QUERY).get("shop") or {}

    # ===================
    # WRITE OPERATIONS
    # ===================

    def bulk_update_variants(
        self,
        product_id: str,
        field_name: KeyField,
        values: list[tuple[str, str]],
    ) -> WriteOutcome:
        """
        Set one key field on several variants of a product in a single call.

        Args:
            product_id: Owning product GID
            field_name: KeyField.SKU or KeyField.BARCODE
            values: (variant_id, new_value) pairs; "" clears the field
        """
        if field_name == KeyField.SKU:
            variants = [{"id": vid, "inventoryItem": {"sku": value}} for vid, value in values]
        elif field_name == KeyField.BARCODE:
            variants = [{"id": vid, "barcode": value} for vid, value in values]
        else:
            raise ValueError(f"Field cannot be bulk updated: {field_name}")

        data = self.graphql(
            q.VARIANTS_BULK_UPDATE_MUTATION,
            {"productId": product_id, "variants": variants},
        )
        payload = data.get("productVariantsBulkUpdate") or {}
        return WriteOutcome(
            updated_count=len(payload.get("productVariants") or []),
            errors=_user_errors(payload),
        )

    def bulk_delete_variants(self, product_id: str, variant_ids: list[str]) -> WriteOutcome:
        """Delete several variants of one product in a single call."""
        data = self.graphql(
            q.VARIANTS_BULK_DELETE_MUTATION,
            {"productId": product_id, "variantsIds": variant_ids},
        )
        payload = data.get("productVariantsBulkDelete") or {}
        errors = _user_errors(payload)
        return WriteOutcome(
            updated_count=0 if errors else len(variant_ids),
            errors=errors,
        )

    def delete_product(self, product_id: str) -> str:
        """
        Delete a product and all its variants.

        Returns:
            The deleted product GID

        Raises:
            BulkWriteError: If the API refuses the delete
        """
        data = self.graphql(q.PRODUCT_DELETE_MUTATION, {"input": {"id": product_id}})
        payload = data.get("productDelete") or {}
        errors = _user_errors(payload)
        if errors:
            raise BulkWriteError(errors[0], details={"product_id": product_id})
        deleted = payload.get("deletedProductId")
        if not deleted:
            raise BulkWriteError(
                "Unknown error occurred while deleting product",
                details={"product_id": product_id}
            )
        return deleted

    def set_metafield(
        self,
        owner_id: str,
        namespace: str,
        key: str,
        value: str,
        type_: str = "single_line_text_field",
    ) -> WriteOutcome:
        data = self.graphql(
            q.METAFIELDS_SET_MUTATION,
            {
                "metafields": [
                    {
                        "ownerId": owner_id,
                        "namespace": namespace,
                        "key": key,
                        "value": value,
                        "type": type_,
                    }
                ]
            },
        )
        payload = data.get("metafieldsSet") or {}
        return WriteOutcome(
            updated_count=len(payload.get("metafields") or []),
            errors=_user_errors(payload),
        )

    def collection_add_products(self, collection_id: str, product_ids: list[str]) -> WriteOutcome:
        data = self.graphql(
            q.COLLECTION_ADD_PRODUCTS_MUTATION,
            {"id": collection_id, "productIds": product_ids},
        )
        errors = _user_errors(data.get("collectionAddProducts"))
        return WriteOutcome(updated_count=0 if errors else len(product_ids), errors=errors)

    def collection_remove_products(self, collection_id: str, product_ids: list[str]) -> WriteOutcome:
        data = self.graphql(
            q.COLLECTION_REMOVE_PRODUCTS_MUTATION,
            {"id": collection_id, "productIds": product_ids},
        )
        errors = _user_errors(data.get("collectionRemoveProducts"))
        return WriteOutcome(updated_count=0 if errors else len(product_ids), errors=errors)
