# storefront/services/payment_service.py
import logging
import time
import uuid
from datetime import datetime, timezone
from urllib.parse import urlencode

from sqlmodel import Session

from storefront.core.errors import (
    OrderNotFoundError,
    OrderStateError,
    PaymentNotFoundError,
)
from storefront.database import unit_of_work
from storefront.models.order import Order
from storefront.models.payment import Payment
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.payment_repo import PaymentRepository
from storefront.schemas.order import OrderRead, OrderStatus
from storefront.schemas.payment import PaymentOutcome, PaymentRead

logger = logging.getLogger(__name__)

# Allowed Order.status moves. Anything not listed is rejected.
ORDER_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"paid", "failed", "cancelled"},
    "failed": {"paid", "cancelled"},
    "paid": {"completed", "cancelled"},
    "cancelled": set(),
    "completed": set(),
}

# A new payment attempt may be started only from these order states
PAYABLE_STATUSES = {"pending", "failed"}

# Order status that follows each terminal payment outcome
OUTCOME_TO_ORDER_STATUS: dict[str, str] = {
    "success": "paid",
    "failed": "failed",
}


def can_transition(current: str, target: str) -> bool:
    return target in ORDER_TRANSITIONS.get(current, set())


def sources_for(target: str) -> list[str]:
    """Statuses an order may move to `target` from."""
    return sorted(s for s, targets in ORDER_TRANSITIONS.items() if target in targets)


def build_upi_url(
    amount: float,
    merchant_upi_id: str,
    merchant_name: str,
    note: str = "Payment for order",
) -> str:
    """
    upi://pay deep link that UPI apps open with the amount pre-filled.
    """
    params = {
        "pa": merchant_upi_id,
        "pn": merchant_name,
        "am": f"{amount:.2f}",
        "tr": f"TXN{int(time.time() * 1000)}",
        "tn": note,
    }
    return "upi://pay?" + urlencode(params)


class PaymentService:
    """
    Payment records and the order status they drive.

    Flow:
      - initiate: new 'pending' payment for the order's total
      - verify:   pending -> success | failed, exactly once; the order
                  follows (success -> paid, failed -> failed)

    A payment that already left 'pending' is never modified again.
    """

    def __init__(
        self,
        payment_repo: PaymentRepository,
        order_repo: OrderRepository,
        merchant_upi_id: str,
        merchant_name: str,
    ):
        self.payment_repo = payment_repo
        self.order_repo = order_repo
        self.merchant_upi_id = merchant_upi_id
        self.merchant_name = merchant_name

    def initiate(self, session: Session, order_id: uuid.UUID) -> PaymentRead:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise OrderNotFoundError()
        if order.status not in PAYABLE_STATUSES:
            raise OrderStateError(f"Cannot start a payment for a {order.status} order")

        with unit_of_work(session):
            payment = self.payment_repo.create(
                session,
                Payment(
                    order_id=order.id,
                    amount=order.total_amount,
                    status="pending",
                    upi_url=build_upi_url(
                        order.total_amount, self.merchant_upi_id, self.merchant_name
                    ),
                ),
            )

        session.refresh(payment)
        logger.info(
            "Payment %s initiated for order %s (%.2f)",
            payment.id,
            order_id,
            payment.amount,
        )
        return self._build_payment_dto(payment)

    def verify(
        self,
        session: Session,
        payment_id: uuid.UUID,
        outcome: PaymentOutcome,
    ) -> PaymentRead:
        """
        Record the gateway's verdict.

        Verifying a payment that is no longer pending is a no-op that
        returns it unchanged (duplicate webhook, double click).
        """
        payment = self.payment_repo.get_by_id(session, payment_id)
        if not payment:
            raise PaymentNotFoundError()

        # Conditional updates only: the order row's current status decides,
        # never a value read earlier in this request.
        order_moved = False
        with unit_of_work(session):
            moved = self.payment_repo.mark_terminal(
                session, payment.id, outcome, datetime.now(timezone.utc)
            )
            if moved:
                target = OUTCOME_TO_ORDER_STATUS[outcome]
                order_moved = self.order_repo.transition_status(
                    session, payment.order_id, target, sources_for(target)
                )

        session.refresh(payment)
        if moved and not order_moved:
            logger.warning(
                "Payment %s %s but order %s no longer accepts that; order left unchanged",
                payment.id,
                outcome,
                payment.order_id,
            )
        if moved:
            logger.info("Payment %s verified: %s", payment.id, outcome)
        else:
            logger.info("Payment %s already %s, ignoring verify", payment.id, payment.status)
        return self._build_payment_dto(payment)

    def latest_for_order(self, session: Session, order_id: uuid.UUID) -> PaymentRead:
        payment = self.payment_repo.latest_for_order(session, order_id)
        if not payment:
            raise PaymentNotFoundError()
        return self._build_payment_dto(payment)

    # -------- Admin --------

    def advance_order(
        self,
        session: Session,
        order_id: uuid.UUID,
        new_status: OrderStatus,
    ) -> OrderRead:
        """
        Admin status change, restricted to ORDER_TRANSITIONS.
        Setting the current status again is a no-op.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise OrderNotFoundError()

        if order.status != new_status:
            if not can_transition(order.status, new_status):
                raise OrderStateError(
                    f"Cannot change order status from {order.status} to {new_status}"
                )
            previous = order.status
            with unit_of_work(session):
                if not self.order_repo.transition_status(
                    session, order.id, new_status, [previous]
                ):
                    raise OrderStateError(
                        f"Order status changed from {previous} meanwhile, reload and retry"
                    )
            session.refresh(order)
            logger.info("Order %s: %s -> %s", order.id, previous, new_status)

        return self._build_order_dto(order)

    # -------- Helper DTO builders --------

    def _build_payment_dto(self, payment: Payment) -> PaymentRead:
        return PaymentRead(
            id=payment.id,
            order_id=payment.order_id,
            amount=payment.amount,
            status=payment.status,  # Literal
            upi_url=payment.upi_url,
            created_at=payment.created_at,
            updated_at=payment.updated_at,
        )

    def _build_order_dto(self, order: Order) -> OrderRead:
        return OrderRead(
            id=order.id,
            owner_identity=order.owner_identity,
            total_amount=order.total_amount,
            status=order.status,  # Literal
            created_at=order.created_at,
        )
