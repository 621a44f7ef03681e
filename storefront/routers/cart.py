# storefront/routers/cart.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import (
    CartItemAdd,
    CartItemRemove,
    CartItemUpdate,
    CartMergeRequest,
    CartSummary,
)
from storefront.schemas.common import ApiResponse
from storefront.services.cart_service import CartService
from storefront.services.identity_service import IdentityResolver
from storefront.services.merge_service import CartMergeService
from storefront.services.price_resolver import PriceResolver

settings = get_settings()

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo, PriceResolver(product_repo))
merge_service = CartMergeService(
    cart_repo,
    service,
    IdentityResolver(settings.identity_cookie_secret, settings.GUEST_PREFIX),
)


@router.get("", response_model=ApiResponse[CartSummary])
def get_cart(
    identity: str = Query(..., min_length=1),
    session: Session = Depends(get_session),
):
    """
    Get the cart for a shopper identity, creating an empty one on first access.
    """
    return ApiResponse(data=service.summary(session, identity))


@router.post("/add", response_model=ApiResponse[CartSummary])
def add_to_cart(
    payload: CartItemAdd,
    session: Session = Depends(get_session),
):
    """
    Add product (optionally a variant) to the cart.

    Returns the updated cart summary.
    """
    return ApiResponse(
        data=service.add_item(
            session,
            payload.identity,
            payload.product_id,
            payload.variant_id,
            payload.quantity,
            payload.boxes,
        )
    )


@router.patch("/item", response_model=ApiResponse[CartSummary])
def update_cart_item(
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
):
    """
    Set quantity of a cart line. quantity <= 0 removes it.
    """
    return ApiResponse(
        data=service.set_quantity(
            session,
            payload.identity,
            payload.line_id,
            payload.quantity,
            payload.boxes,
        )
    )


@router.delete("/item", response_model=ApiResponse[CartSummary])
def remove_cart_item(
    payload: CartItemRemove,
    session: Session = Depends(get_session),
):
    return ApiResponse(
        data=service.remove_item(session, payload.identity, payload.line_id)
    )


@router.delete("", response_model=ApiResponse[CartSummary])
def clear_cart(
    identity: str = Query(..., min_length=1),
    session: Session = Depends(get_session),
):
    """
    Clear the entire cart.

    Returns an empty cart summary.
    """
    return ApiResponse(data=service.clear(session, identity))


@router.post("/merge", response_model=ApiResponse[CartSummary])
def merge_carts(
    payload: CartMergeRequest,
    session: Session = Depends(get_session),
):
    """
    Fold a guest cart into an authenticated cart.

    Anything other than guest -> authenticated just returns the
    destination cart unchanged.
    """
    return ApiResponse(
        data=merge_service.merge_on_login(
            session, payload.from_identity, payload.to_identity
        )
    )
