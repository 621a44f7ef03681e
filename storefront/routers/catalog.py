# storefront/routers/catalog.py
import uuid

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from storefront.core.errors import ProductNotFoundError, VariantNotFoundError
from storefront.database import get_session
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.common import ApiResponse
from storefront.schemas.price import PriceQuote
from storefront.services.price_resolver import PriceResolver

router = APIRouter(prefix="/catalog", tags=["Catalog"])

product_repo = ProductRepository()
price_resolver = PriceResolver(product_repo)


@router.get(
    "/products/{product_id}/price",
    response_model=ApiResponse[PriceQuote],
)
def get_price(
    product_id: uuid.UUID,
    variant_id: uuid.UUID | None = Query(None, alias="variantId"),
    session: Session = Depends(get_session),
):
    """
    Current unit / reference price and discount for a product or variant.
    """
    product = product_repo.get_by_id(session, product_id)
    if not product or product.deleted_at is not None:
        raise ProductNotFoundError()

    if variant_id is not None:
        variant = product_repo.get_variant(session, variant_id)
        if not variant or variant.product_id != product.id:
            raise VariantNotFoundError()

    return ApiResponse(data=price_resolver.quote(session, product, variant_id))
