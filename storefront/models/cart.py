# storefront/models/cart.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field


class Cart(SQLModel, table=True):
    """
    One cart per shopper identity (anonymous or authenticated).

    Created lazily on first access and never deleted, only emptied.
    `version` is bumped by every mutation of the cart or its lines and is
    the optimistic lock that serializes concurrent writers.
    """

    __tablename__ = "carts"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    owner_identity: str = Field(
        unique=True,
        index=True,
        description="Shopper identity (guest-* or auth user id)",
    )

    version: int = Field(default=1)

    # Set on an anonymous cart once its lines were merged into this identity
    merged_into: str | None = Field(default=None)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class CartLine(SQLModel, table=True):
    """
    Cart entry. At most one row per (cart, product, variant):
    repeated adds increment quantity instead of inserting.

    unit_price is a snapshot taken when the line was first added;
    total_price is always unit_price * quantity.
    """

    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint(
            "cart_id",
            "product_id",
            "variant_id",
            name="uq_cart_items_cart_product_variant",
            postgresql_nulls_not_distinct=True,
        ),
    )

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    cart_id: uuid.UUID = Field(
        foreign_key="carts.id",
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    variant_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="product_variants.id",
    )

    quantity: int = Field(
        ge=1,
        description="Must be >= 1; a line at 0 is deleted",
    )

    boxes: int = Field(default=0, ge=0)

    unit_price: float = Field(
        default=0.0,
        description="Price when added to cart",
    )

    total_price: float = Field(
        default=0.0,
        description="unit_price * quantity",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
