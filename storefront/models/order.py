# storefront/models/order.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order, created from a non-empty cart.

    Immutable after creation except for `status`, which only the
    payment ledger writes.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    owner_identity: str = Field(
        index=True,
        description="Shopper identity that placed the order",
    )

    # Sum of order_items.total_price at creation; never recomputed
    total_amount: float = Field(
        description="Final amount for this order",
    )

    # pending | paid | failed | cancelled | completed
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Snapshot of a cart line at checkout. Never mutated after insert.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
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
        gt=0,
        description="Quantity ordered (>=1)",
    )

    boxes: int = Field(default=0, ge=0)

    unit_price: float = Field(
        description="Unit price at time of order",
    )

    total_price: float = Field(
        description="unit_price * quantity at time of order",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
