"""
Variant schemas.

A VariantRecord is one flattened product variant as seen by a single
catalog scan. It is rebuilt on every scan and never stored.
"""

from pydantic import Field
from typing import Optional
from enum import Enum

from models.base import BaseSchema


class KeyField(str, Enum):
    """Variant attributes that can be reconciled."""
    SKU = "sku"
    BARCODE = "barcode"
    FULFIL_FROM = "fulfil_from"


class VariantRecord(BaseSchema):
    """
    Flat view of one variant and its owning product.

    Only the key field chosen for a scan drives classification; the other
    attributes are carried for display.
    """

    variant_id: str = Field(
        ...,
        min_length=1,
        description="Variant GID",
        examples=["gid://shopify/ProductVariant/44012345678"]
    )
    product_id: str = Field(
        ...,
        min_length=1,
        description="Owning product GID",
        examples=["gid://shopify/Product/8123456789"]
    )
    product_title: str = Field("", description="Owning product title")
    product_image_url: Optional[str] = Field(None, description="First product image")
    product_status: Optional[str] = Field(None, description="ACTIVE, DRAFT or ARCHIVED")
    total_inventory: Optional[int] = Field(None, description="Product-level inventory")
    variant_title: str = Field("", description="Variant title")
    sku: Optional[str] = Field(None, description="Variant SKU")
    barcode: Optional[str] = Field(None, description="Variant barcode (GTIN/UPC/EAN)")
    inventory_quantity: int = Field(0, description="Variant inventory quantity")
    price: Optional[str] = Field(None, description="Variant price as returned by the API")
    fulfil_from: Optional[str] = Field(None, description="fulfil_from metafield value")
