# storefront/repositories/stats_repo.py
from sqlalchemy import func
from sqlmodel import Session, col, select

from storefront.models.order import Order
from storefront.models.payment import Payment

# Orders that never turned into money
NON_REVENUE_STATUSES = ("cancelled", "failed")


class StatsRepository:
    """
    Read-only aggregated queries for admin dashboard.
    """

    def orders_by_status(self, session: Session) -> dict[str, int]:
        stmt = select(Order.status, func.count()).group_by(Order.status)
        return {status: int(count or 0) for status, count in session.exec(stmt).all()}

    def revenue(self, session: Session) -> tuple[float, int]:
        """
        Sum and count of total_amount over orders that were not cancelled/failed.
        """
        stmt = select(
            func.coalesce(func.sum(Order.total_amount), 0.0),
            func.count(Order.id),
        ).where(col(Order.status).not_in(NON_REVENUE_STATUSES))
        total, count = session.exec(stmt).one()
        return float(total or 0.0), int(count or 0)

    def payments_by_status(self, session: Session) -> dict[str, tuple[int, float]]:
        stmt = select(
            Payment.status,
            func.count(),
            func.coalesce(func.sum(Payment.amount), 0.0),
        ).group_by(Payment.status)
        return {
            status: (int(count or 0), float(amount or 0.0))
            for status, count, amount in session.exec(stmt).all()
        }
