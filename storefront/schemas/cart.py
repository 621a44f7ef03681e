# storefront/schemas/cart.py
import uuid
from datetime import datetime

from pydantic import Field, field_validator

from storefront.schemas.common import ApiModel


def _strip_identity(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("identity cannot be empty")
    return v


class CartItemAdd(ApiModel):
    """
    Payload for POST /cart/add.

    quantity below 1 is clamped to 1 by the service.
    """

    identity: str
    product_id: uuid.UUID
    variant_id: uuid.UUID | None = None
    quantity: int = 1
    boxes: int = Field(default=0, ge=0)

    check_identity = field_validator("identity")(_strip_identity)


class CartItemUpdate(ApiModel):
    """
    Payload for PATCH /cart/item. quantity <= 0 removes the line.
    """

    identity: str
    line_id: uuid.UUID
    quantity: int
    boxes: int | None = Field(default=None, ge=0)

    check_identity = field_validator("identity")(_strip_identity)


class CartItemRemove(ApiModel):
    identity: str
    line_id: uuid.UUID

    check_identity = field_validator("identity")(_strip_identity)


class CartMergeRequest(ApiModel):
    from_identity: str
    to_identity: str

    check_identities = field_validator("from_identity", "to_identity")(
        _strip_identity
    )


class CartRead(ApiModel):
    id: uuid.UUID
    owner_identity: str
    created_at: datetime


class CartLineRead(ApiModel):
    """
    Read model for a single cart line, enriched with catalog labels.
    """

    id: uuid.UUID
    cart_id: uuid.UUID
    product_id: uuid.UUID
    variant_id: uuid.UUID | None = None
    quantity: int
    boxes: int
    unit_price: float
    total_price: float
    product_title: str | None = None
    variant_label: str | None = None
    created_at: datetime


class CartSummary(ApiModel):
    """
    Full cart response: {cart, lines[]} plus totals.
    """

    cart: CartRead
    lines: list[CartLineRead]
    subtotal: float
    count: int
