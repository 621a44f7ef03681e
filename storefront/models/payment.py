# storefront/models/payment.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Payment(SQLModel, table=True):
    """
    Payment attempt for an order.

    amount is copied from the order's total_amount at initiation.
    status moves pending -> success | failed exactly once.
    """

    __tablename__ = "payments"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    amount: float

    # pending | success | failed
    status: str = Field(
        default="pending",
        index=True,
    )

    upi_url: str | None = Field(
        default=None,
        description="upi://pay link rendered as a QR code by the client",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
