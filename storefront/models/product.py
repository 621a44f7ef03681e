# storefront/models/product.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Catalog entry, owned by the admin panel / catalog service.

    Read-only for the cart and order core: only the pricing columns
    (price, mrp) and the display title are consumed here.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    title: str = Field(
        max_length=255,
        index=True,
        description="Display name of the product",
    )

    # Selling price; may be missing for products sold only by variant
    price: float | None = Field(
        default=None,
        description="Base selling price",
    )

    # Reference price (MRP) used for discount display
    mrp: float | None = Field(
        default=None,
        description="Maximum retail price, shown struck through",
    )

    availability: bool = Field(
        default=True,
        index=True,
        description="Whether this product is visible on the storefront",
    )

    deleted_at: datetime | None = Field(
        default=None,
        description="Soft-delete marker; deleted products cannot be added to carts",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class ProductVariant(SQLModel, table=True):
    """
    A purchasable configuration (SKU) of a product, e.g. a pack size.

    When a cart line names a variant, the variant's unit_price overrides
    the product's base price.
    """

    __tablename__ = "product_variants"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    sku_label: str = Field(
        description="Human label, e.g. '500 ml' or '1 kg'",
    )

    unit_price: float | None = Field(
        default=None,
        description="Override selling price for this variant",
    )

    unit_mrp: float | None = Field(
        default=None,
        description="Override reference price for this variant",
    )

    stock: int = Field(
        default=0,
        ge=0,
        description="Units on hand (display only)",
    )

    is_default: bool = Field(default=False)
