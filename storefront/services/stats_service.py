# storefront/services/stats_service.py
from sqlmodel import Session

from storefront.repositories.stats_repo import StatsRepository
from storefront.schemas.stats import AdminDashboardStats, OrderStats, PaymentStats


class StatsService:
    """
    Orchestrates aggregated admin dashboard statistics.
    """

    def __init__(self, repo: StatsRepository):
        self.repo = repo

    def get_admin_dashboard_stats(self, session: Session) -> AdminDashboardStats:
        orders_by_status = self.repo.orders_by_status(session)
        revenue, revenue_orders = self.repo.revenue(session)

        # Payments grouped by status: {status: (count, amount)}
        payment_rows = self.repo.payments_by_status(session)
        total_payments = sum(count for count, _ in payment_rows.values())
        total_amount = sum(amount for _, amount in payment_rows.values())
        successful, _ = payment_rows.get("success", (0, 0.0))
        failed, _ = payment_rows.get("failed", (0, 0.0))

        return AdminDashboardStats(
            orders=OrderStats(
                total_orders=sum(orders_by_status.values()),
                total_revenue=revenue,
                average_order_value=revenue / revenue_orders if revenue_orders else 0.0,
                orders_by_status=orders_by_status,
            ),
            payments=PaymentStats(
                total_payments=total_payments,
                successful_payments=successful,
                failed_payments=failed,
                total_amount=total_amount,
                success_rate=(
                    successful / total_payments * 100 if total_payments else 0.0
                ),
            ),
        )
