# storefront/repositories/payment_repo.py
import uuid
from datetime import datetime

from sqlalchemy import update
from sqlmodel import Session, select

from storefront.models.payment import Payment


class PaymentRepository:
    """
    Data access for payments. No commits; PaymentService owns the transaction.
    """

    def get_by_id(self, session: Session, payment_id: uuid.UUID) -> Payment | None:
        return session.get(Payment, payment_id)

    def latest_for_order(self, session: Session, order_id: uuid.UUID) -> Payment | None:
        stmt = (
            select(Payment)
            .where(Payment.order_id == order_id)
            .order_by(Payment.created_at.desc())
        )
        return session.exec(stmt).first()

    def create(self, session: Session, payment: Payment) -> Payment:
        session.add(payment)
        session.flush()
        return payment

    def mark_terminal(
        self,
        session: Session,
        payment_id: uuid.UUID,
        outcome: str,
        at: datetime,
    ) -> bool:
        """
        Move a payment out of 'pending'. Returns False if it already left
        'pending' (another verification won the race).
        """
        session.flush()
        stmt = (
            update(Payment)
            .where(Payment.id == payment_id, Payment.status == "pending")
            .values(status=outcome, updated_at=at)
        )
        result = session.connection().execute(stmt)
        return result.rowcount == 1
