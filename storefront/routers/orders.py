# storefront/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from storefront.database import get_session
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.common import ApiResponse
from storefront.schemas.order import OrderCreate, OrderListPayload, OrderPayload
from storefront.services.cart_service import CartService
from storefront.services.order_service import OrderService
from storefront.services.price_resolver import PriceResolver

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
cart_repo = CartRepository()
product_repo = ProductRepository()
cart_service = CartService(cart_repo, product_repo, PriceResolver(product_repo))
service = OrderService(order_repo, cart_repo, cart_service)


@router.post(
    "",
    response_model=ApiResponse[OrderPayload],
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
):
    """
    Create an order from the shopper's cart. The cart is emptied.

    400 (code=empty_cart) if the cart has no lines.
    """
    order = service.create_order_from_cart(session, payload.identity)
    return ApiResponse(data=OrderPayload(order=order))


@router.get("", response_model=ApiResponse[OrderListPayload])
def list_orders(
    identity: str = Query(..., min_length=1),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    session: Session = Depends(get_session),
):
    """
    List the shopper's orders (without items), newest first.
    """
    orders = service.list_orders(session, identity.strip(), skip, limit)
    return ApiResponse(data=OrderListPayload(orders=orders))


@router.get("/{order_id}", response_model=ApiResponse[OrderPayload])
def get_order(
    order_id: uuid.UUID,
    identity: str | None = None,
    session: Session = Depends(get_session),
):
    """
    Get a single order with items.

    When identity is given, orders of other shoppers are reported as 404.
    """
    order = service.get_order(session, order_id, identity)
    return ApiResponse(data=OrderPayload(order=order))
