# storefront/schemas/stats.py
from pydantic import ConfigDict

from storefront.schemas.common import ApiModel


class OrderStats(ApiModel):
    model_config = ConfigDict(extra="forbid")

    total_orders: int
    total_revenue: float
    average_order_value: float
    orders_by_status: dict[str, int]


class PaymentStats(ApiModel):
    model_config = ConfigDict(extra="forbid")

    total_payments: int
    successful_payments: int
    failed_payments: int
    total_amount: float
    success_rate: float


class AdminDashboardStats(ApiModel):
    """
    Full payload for admin dashboard.
    """

    orders: OrderStats
    payments: PaymentStats
