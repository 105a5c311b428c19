"""
Test data factories.

Uses factory pattern to generate consistent test data: VariantRecord
objects for pure services, and Admin API node dicts for the fake client.
"""

from typing import Optional

from models.variant import VariantRecord
from models.reference import ReferenceRow


class VariantFactory:
    """
    Factory for VariantRecord objects.

    Usage:
        # Create with defaults
        variant = VariantFactory.create()

        # Create with overrides
        variant = VariantFactory.create(sku="TILE-1", product_id="gid://shopify/Product/7")

        # Create from a list of keys, one product each
        variants = VariantFactory.create_from_skus(["A", "B", "A"])
    """

    _counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def create(
        cls,
        variant_id: Optional[str] = None,
        product_id: Optional[str] = None,
        sku: Optional[str] = None,
        barcode: Optional[str] = None,
        product_title: Optional[str] = None,
        variant_title: str = "Default Title",
        fulfil_from: Optional[str] = None,
        inventory_quantity: int = 0,
    ) -> VariantRecord:
        counter = cls._next_counter()
        return VariantRecord(
            variant_id=variant_id or f"gid://shopify/ProductVariant/{1000 + counter}",
            product_id=product_id or f"gid://shopify/Product/{counter}",
            product_title=product_title or f"Test Product {counter}",
            variant_title=variant_title,
            sku=sku,
            barcode=barcode,
            fulfil_from=fulfil_from,
            inventory_quantity=inventory_quantity,
        )

    @classmethod
    def create_from_skus(cls, skus: list, **overrides) -> list:
        """One variant per SKU, in order."""
        return [cls.create(sku=sku, **overrides) for sku in skus]

    @classmethod
    def create_batch(cls, count: int, **overrides) -> list:
        return [cls.create(**overrides) for _ in range(count)]


class ProductNodeFactory:
    """
    Factory for Admin API product nodes (products query shape).

    Usage:
        product = ProductNodeFactory.create(
            title="Oak Plank",
            variants=[{"sku": "OAK-1", "barcode": "123"}, {"sku": "OAK-2"}],
        )
    """

    _counter = 0
    _variant_counter = 0

    @classmethod
    def _next_counter(cls) -> int:
        cls._counter += 1
        return cls._counter

    @classmethod
    def variant_node(
        cls,
        sku: Optional[str] = None,
        barcode: Optional[str] = None,
        title: Optional[str] = None,
        variant_id: Optional[str] = None,
        fulfil_from: Optional[str] = None,
    ) -> dict:
        cls._variant_counter += 1
        return {
            "id": variant_id or f"gid://shopify/ProductVariant/{5000 + cls._variant_counter}",
            "title": title or f"Variant {cls._variant_counter}",
            "sku": sku,
            "barcode": barcode,
            "inventoryQuantity": 3,
            "price": "19.99",
            "metafield": {"value": fulfil_from} if fulfil_from else None,
        }

    @classmethod
    def create(
        cls,
        title: Optional[str] = None,
        variants: Optional[list] = None,
        product_id: Optional[str] = None,
        total_inventory: int = 10,
    ) -> dict:
        counter = cls._next_counter()
        return {
            "id": product_id or f"gid://shopify/Product/{counter}",
            "title": title or f"Product {counter}",
            "status": "ACTIVE",
            "totalInventory": total_inventory,
            "images": {"nodes": [{"url": f"https://cdn.example.com/{counter}.jpg"}]},
            "variants": {
                "edges": [{"node": cls.variant_node(**v)} for v in (variants or [{}])]
            },
        }


class OrderNodeFactory:
    """
    Factory for Admin API order nodes.

    Usage:
        order = OrderNodeFactory.create([(product_node, 2), (None, 1)])
    """

    _counter = 0

    @classmethod
    def create(cls, lines: list) -> dict:
        cls._counter += 1
        edges = []
        for i, (product, quantity) in enumerate(lines):
            node = {
                "id": f"gid://shopify/LineItem/{cls._counter * 100 + i}",
                "quantity": quantity,
                "name": f"Line {i}",
                "sku": None,
                "product": None,
            }
            if product is not None:
                node["product"] = {
                    "id": product["id"],
                    "title": product["title"],
                    "totalInventory": product.get("totalInventory"),
                    "images": product.get("images"),
                    "collections": {"edges": [{"node": {"title": "Floors"}}]},
                }
            edges.append({"node": node})
        return {
            "id": f"gid://shopify/Order/{cls._counter}",
            "name": f"#{1000 + cls._counter}",
            "processedAt": "2026-01-15T10:00:00Z",
            "lineItems": {"edges": edges},
        }


class ReferenceRowFactory:
    """Factory for parsed reference CSV rows."""

    _counter = 0

    @classmethod
    def create(
        cls,
        key: str,
        secondary_key: Optional[str] = None,
        product: Optional[str] = None,
        row_number: Optional[int] = None,
    ) -> ReferenceRow:
        cls._counter += 1
        return ReferenceRow(
            row_number=row_number or cls._counter + 1,
            key=key,
            secondary_key=secondary_key,
            product=product,
        )
