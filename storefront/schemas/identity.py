# storefront/schemas/identity.py
from typing import Literal

from storefront.schemas.cart import CartSummary
from storefront.schemas.common import ApiModel

IdentityKind = Literal["anonymous", "authenticated"]


class IdentityState(ApiModel):
    """
    What the shopper identity cookie carries.

    pending_merge_from holds the guest identity that was current right
    before login, until its cart has been merged once.
    """

    current: str
    kind: IdentityKind
    pending_merge_from: str | None = None


class SessionRead(ApiModel):
    identity: str
    kind: IdentityKind


class LoginRead(SessionRead):
    merged: bool
    cart: CartSummary
