# storefront/routers/payments.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.payment_repo import PaymentRepository
from storefront.schemas.common import ApiResponse
from storefront.schemas.payment import PaymentInitiate, PaymentPayload, PaymentVerify
from storefront.services.payment_service import PaymentService

settings = get_settings()

router = APIRouter(prefix="/payments", tags=["Payments"])

payment_repo = PaymentRepository()
order_repo = OrderRepository()
service = PaymentService(
    payment_repo,
    order_repo,
    merchant_upi_id=settings.MERCHANT_UPI_ID,
    merchant_name=settings.MERCHANT_NAME,
)


@router.post(
    "/initiate",
    response_model=ApiResponse[PaymentPayload],
    status_code=status.HTTP_201_CREATED,
)
def initiate_payment(
    payload: PaymentInitiate,
    session: Session = Depends(get_session),
):
    """
    Start a payment for an order: amount = order total, status = pending.
    The response carries a upi:// link for the client's QR code.
    """
    payment = service.initiate(session, payload.order_id)
    return ApiResponse(data=PaymentPayload(payment=payment))


@router.post("/verify", response_model=ApiResponse[PaymentPayload])
def verify_payment(
    payload: PaymentVerify,
    session: Session = Depends(get_session),
):
    """
    Record the payment outcome. Only the first verification counts.
    """
    outcome = "success" if payload.success else "failed"
    payment = service.verify(session, payload.payment_id, outcome)
    return ApiResponse(data=PaymentPayload(payment=payment))


@router.get("", response_model=ApiResponse[PaymentPayload])
def get_latest_payment(
    order_id: uuid.UUID = Query(..., alias="orderId"),
    session: Session = Depends(get_session),
):
    """
    Latest payment attempt for an order.
    """
    payment = service.latest_for_order(session, order_id)
    return ApiResponse(data=PaymentPayload(payment=payment))
