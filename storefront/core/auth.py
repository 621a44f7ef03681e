# storefront/core/auth.py
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from storefront.core.config import get_settings
from storefront.core.errors import AuthError, ForbiddenError

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so anonymous shoppers can use the cart and checkout endpoints.
bearer_scheme = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a Supabase access token (JWT).

    Verification:
      - signature (HS256 using SUPABASE_JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)

    Args:
        token: raw JWT from the Authorization header.

    Returns:
        Decoded JWT claims.

    Raises:
        AuthError(401): if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise AuthError("Invalid or expired token")


def get_token_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict[str, Any] | None:
    """
    Claims of the bearer token, or None for anonymous requests.
    """
    if credentials is None:
        return None
    claims = decode_access_token(credentials.credentials)
    if not claims.get("sub"):
        raise AuthError("Token missing sub")
    return claims


def get_authenticated_identity(
    claims: dict[str, Any] | None = Depends(get_token_claims),
) -> str | None:
    """
    The Supabase auth user id ('sub'), used directly as the shopper
    identity. None for guests.
    """
    if claims is None:
        return None
    return str(claims["sub"])


def require_authenticated_identity(
    identity: str | None = Depends(get_authenticated_identity),
) -> str:
    """
    Enforce authentication.

    Raises:
        AuthError(401): if no valid bearer token was sent.
    """
    if identity is None:
        raise AuthError()
    return identity


def require_admin(
    claims: dict[str, Any] | None = Depends(get_token_claims),
) -> str:
    """
    Enforce admin role.

    The role lives in the token's app_metadata (set server-side in
    Supabase, not editable by the user).

    Raises:
        AuthError(401): no token.
        ForbiddenError(403): token is valid but not an admin's.
    """
    if claims is None:
        raise AuthError()
    app_metadata = claims.get("app_metadata") or {}
    if app_metadata.get("role") != "admin":
        raise ForbiddenError()
    return str(claims["sub"])
