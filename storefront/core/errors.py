# storefront/core/errors.py
"""
Error taxonomy for the storefront core.

Services raise these directly (they are HTTPExceptions, so FastAPI knows
the status code); the handlers in main.py render them in the standard
envelope: {"success": false, "error": <detail>, "code": <code>}.
"""
from fastapi import HTTPException, status


class StorefrontError(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"
    default_detail: str = "Unexpected error"

    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
        )


class ValidationError(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"
    default_detail = "Invalid request"


class NotFoundError(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_detail = "Not found"


class CartLineNotFoundError(NotFoundError):
    default_detail = "Cart item not found"


class ProductNotFoundError(NotFoundError):
    default_detail = "Product not found"


class VariantNotFoundError(NotFoundError):
    default_detail = "Variant not found"


class OrderNotFoundError(NotFoundError):
    default_detail = "Order not found"


class PaymentNotFoundError(NotFoundError):
    default_detail = "Payment not found"


class EmptyCartError(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "empty_cart"
    default_detail = "Cart is empty"


class OrderStateError(StorefrontError):
    status_code = status.HTTP_409_CONFLICT
    code = "invalid_state"
    default_detail = "Order is not in a valid state for this operation"


class ConflictError(StorefrontError):
    """Concurrent modification detected. Retried by core.retry before surfacing."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_detail = "Cart was modified concurrently, please retry"


class StorageError(StorefrontError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "storage_unavailable"
    default_detail = "Storage backend unavailable"


class AuthError(StorefrontError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"
    default_detail = "Authentication required"


class ForbiddenError(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_detail = "Admin access required"
