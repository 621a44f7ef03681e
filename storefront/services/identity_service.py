# storefront/services/identity_service.py
import uuid

from jose import JWTError, jwt

from storefront.core.errors import ValidationError
from storefront.schemas.identity import IdentityKind, IdentityState

COOKIE_ISSUER = "storefront-identity"


class IdentityResolver:
    """
    Tracks which shopper identity is current.

    Two kinds of identity:
      - anonymous: "<prefix>-<uuid4 hex>", generated on first visit
      - authenticated: the Supabase auth user id, after login

    The state is persisted client-side in a signed cookie (HS256 via
    python-jose), so no server memory is involved. Switching identity
    never deletes data, it only changes which cart is addressed.
    """

    def __init__(self, secret: str, guest_prefix: str = "guest", algorithm: str = "HS256"):
        self.secret = secret
        self.guest_prefix = guest_prefix
        self.algorithm = algorithm

    # ---- classification ----

    def new_guest(self) -> str:
        return f"{self.guest_prefix}-{uuid.uuid4().hex}"

    def kind_of(self, identity: str) -> IdentityKind:
        if identity.startswith(f"{self.guest_prefix}-"):
            return "anonymous"
        return "authenticated"

    def is_anonymous(self, identity: str) -> bool:
        return self.kind_of(identity) == "anonymous"

    # ---- state transitions ----

    def anonymous_state(self) -> IdentityState:
        return IdentityState(current=self.new_guest(), kind="anonymous")

    def authenticate(self, state: IdentityState, authenticated_identity: str) -> IdentityState:
        """
        Make the provider-issued identity current.

        If the shopper was browsing as a guest, that guest identity is kept
        as pending_merge_from until the merge has run once.
        """
        authenticated_identity = (authenticated_identity or "").strip()
        if not authenticated_identity or self.is_anonymous(authenticated_identity):
            raise ValidationError("Invalid authenticated identity")

        if state.kind == "authenticated" and state.current == authenticated_identity:
            return state

        pending = None
        if state.kind == "anonymous" and state.current != authenticated_identity:
            pending = state.current

        return IdentityState(
            current=authenticated_identity,
            kind="authenticated",
            pending_merge_from=pending,
        )

    def merge_consumed(self, state: IdentityState) -> IdentityState:
        return IdentityState(current=state.current, kind=state.kind)

    def sign_out(self) -> IdentityState:
        return self.anonymous_state()

    # ---- cookie codec ----

    def encode(self, state: IdentityState) -> str:
        claims = {
            "iss": COOKIE_ISSUER,
            "cur": state.current,
            "kind": state.kind,
        }
        if state.pending_merge_from:
            claims["pmf"] = state.pending_merge_from
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode(self, token: str) -> IdentityState | None:
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=COOKIE_ISSUER,
            )
        except JWTError:
            return None

        current = claims.get("cur")
        kind = claims.get("kind")
        if not current or kind != self.kind_of(current):
            return None

        pending = claims.get("pmf")
        if pending and (kind != "authenticated" or not self.is_anonymous(pending)):
            return None

        return IdentityState(current=current, kind=kind, pending_merge_from=pending)

    def resolve(self, token: str | None) -> IdentityState:
        """
        Current identity from the cookie, or a fresh guest when the cookie
        is missing, malformed or tampered with.
        """
        if token:
            state = self.decode(token)
            if state is not None:
                return state
        return self.anonymous_state()
