# storefront/routers/admin.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_admin
from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.payment_repo import PaymentRepository
from storefront.repositories.stats_repo import StatsRepository
from storefront.schemas.common import ApiResponse
from storefront.schemas.order import OrderRead, OrderStatusUpdate
from storefront.schemas.stats import AdminDashboardStats
from storefront.services.payment_service import PaymentService
from storefront.services.stats_service import StatsService

settings = get_settings()

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_admin)],
)

stats_service = StatsService(StatsRepository())
payment_service = PaymentService(
    PaymentRepository(),
    OrderRepository(),
    merchant_upi_id=settings.MERCHANT_UPI_ID,
    merchant_name=settings.MERCHANT_NAME,
)


@router.get("/stats", response_model=ApiResponse[AdminDashboardStats])
def get_admin_stats(session: Session = Depends(get_session)):
    """
    Aggregated order and payment statistics for the admin dashboard.

    Revenue counts every order that is not cancelled or failed.
    """
    return ApiResponse(data=stats_service.get_admin_dashboard_stats(session))


@router.patch("/orders/{order_id}/status", response_model=ApiResponse[OrderRead])
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Move an order along its lifecycle (e.g. paid -> completed).
    Illegal transitions are rejected with 409.
    """
    return ApiResponse(
        data=payment_service.advance_order(session, order_id, payload.status)
    )
