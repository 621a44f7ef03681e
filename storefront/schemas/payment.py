# storefront/schemas/payment.py
import uuid
from datetime import datetime
from typing import Literal

from storefront.schemas.common import ApiModel

PaymentStatus = Literal["pending", "success", "failed"]
PaymentOutcome = Literal["success", "failed"]


class PaymentInitiate(ApiModel):
    order_id: uuid.UUID


class PaymentVerify(ApiModel):
    payment_id: uuid.UUID
    success: bool


class PaymentRead(ApiModel):
    id: uuid.UUID
    order_id: uuid.UUID
    amount: float
    status: PaymentStatus
    upi_url: str | None = None
    created_at: datetime
    updated_at: datetime


class PaymentPayload(ApiModel):
    payment: PaymentRead
