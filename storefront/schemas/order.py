# storefront/schemas/order.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator

from storefront.schemas.common import ApiModel

OrderStatus = Literal["pending", "paid", "failed", "cancelled", "completed"]


class OrderCreate(ApiModel):
    """
    Payload for creating an order from the shopper's current cart.

    Backend derives:
      - status = 'pending'
      - total_amount from the cart lines
      - items from cart
    """

    model_config = ConfigDict(extra="forbid")

    identity: str

    @field_validator("identity")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("identity cannot be empty")
        return v


class OrderRead(ApiModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    owner_identity: str
    total_amount: float
    status: OrderStatus
    created_at: datetime


class OrderItemRead(ApiModel):
    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID
    variant_id: uuid.UUID | None = None
    quantity: int
    boxes: int
    unit_price: float
    total_price: float


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]


class OrderPayload(ApiModel):
    order: OrderWithItemsRead


class OrderListPayload(ApiModel):
    orders: list[OrderRead]


class OrderStatusUpdate(ApiModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
