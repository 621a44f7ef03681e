# storefront/routers/session.py
from fastapi import APIRouter, Depends, Request, Response
from sqlmodel import Session

from storefront.core.auth import require_authenticated_identity
from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.common import ApiResponse
from storefront.schemas.identity import IdentityState, LoginRead, SessionRead
from storefront.services.cart_service import CartService
from storefront.services.identity_service import IdentityResolver
from storefront.services.merge_service import CartMergeService
from storefront.services.price_resolver import PriceResolver

settings = get_settings()

router = APIRouter(prefix="/session", tags=["Session"])

identity_resolver = IdentityResolver(
    settings.identity_cookie_secret,
    settings.GUEST_PREFIX,
)
cart_repo = CartRepository()
product_repo = ProductRepository()
cart_service = CartService(cart_repo, product_repo, PriceResolver(product_repo))
merge_service = CartMergeService(cart_repo, cart_service, identity_resolver)


def _read_state(request: Request) -> IdentityState:
    return identity_resolver.resolve(request.cookies.get(settings.IDENTITY_COOKIE_NAME))


def _write_state(response: Response, state: IdentityState) -> None:
    response.set_cookie(
        key=settings.IDENTITY_COOKIE_NAME,
        value=identity_resolver.encode(state),
        max_age=settings.IDENTITY_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
    )


@router.get("", response_model=ApiResponse[SessionRead])
def get_current_session(request: Request, response: Response):
    """
    Current shopper identity. A first-time visitor gets a new guest
    identity, persisted in the cookie.
    """
    state = _read_state(request)
    _write_state(response, state)
    return ApiResponse(data=SessionRead(identity=state.current, kind=state.kind))


@router.post("/login", response_model=ApiResponse[LoginRead])
def login(
    request: Request,
    response: Response,
    authenticated_identity: str = Depends(require_authenticated_identity),
    session: Session = Depends(get_session),
):
    """
    Switch the shopper to their authenticated identity.

    If they were browsing as a guest, the guest cart is merged into the
    account cart exactly once; a repeated login finds nothing to merge.
    """
    state = identity_resolver.authenticate(_read_state(request), authenticated_identity)

    merged = False
    if state.pending_merge_from:
        cart = merge_service.merge_on_login(
            session, state.pending_merge_from, state.current
        )
        state = identity_resolver.merge_consumed(state)
        merged = True
    else:
        cart = cart_service.summary(session, state.current)

    _write_state(response, state)
    return ApiResponse(
        data=LoginRead(
            identity=state.current,
            kind=state.kind,
            merged=merged,
            cart=cart,
        )
    )


@router.post("/logout", response_model=ApiResponse[SessionRead])
def logout(response: Response):
    """
    Back to a fresh guest identity. Nothing is deleted; the account cart
    is there again on the next login.
    """
    state = identity_resolver.sign_out()
    _write_state(response, state)
    return ApiResponse(data=SessionRead(identity=state.current, kind=state.kind))
