# storefront/services/price_resolver.py
import math
import uuid

from sqlmodel import Session

from storefront.models.product import Product, ProductVariant
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.price import PriceQuote, ResolvedPrice


def to_price(raw) -> float:
    """
    Coerce a catalog price column to a non-negative float.

    Catalog rows are loosely typed (nullable, sometimes strings);
    anything missing or unparseable resolves to 0.
    """
    if raw is None:
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def discount_percent(unit_price: float, reference_price: float) -> int:
    """
    (reference - unit) / reference * 100, halves rounded up, when
    reference > unit > 0; else 0.
    """
    if reference_price > unit_price > 0:
        return math.floor((reference_price - unit_price) / reference_price * 100 + 0.5)
    return 0


def price_for(product: Product, variant: ProductVariant | None = None) -> ResolvedPrice:
    """
    Variant price is authoritative when a variant of this product is
    given; otherwise the product's base price applies. A missing or zero
    reference price falls back to the unit price.
    """
    if variant is not None and variant.product_id == product.id:
        unit = to_price(variant.unit_price)
        reference = to_price(variant.unit_mrp)
    else:
        unit = to_price(product.price)
        reference = to_price(product.mrp)

    return ResolvedPrice(unit_price=unit, reference_price=reference or unit)


class PriceResolver:
    """
    Single entry point for "what does this product/variant cost right now".

    Never raises for pricing reasons; callers decide whether an unknown
    product or variant is an error.
    """

    def __init__(self, product_repo: ProductRepository):
        self.product_repo = product_repo

    def price_of(
        self, product: Product, variant: ProductVariant | None = None
    ) -> ResolvedPrice:
        """Price for catalog rows the caller has already loaded."""
        return price_for(product, variant)

    def resolve(
        self,
        session: Session,
        product: Product,
        variant_id: uuid.UUID | None = None,
    ) -> ResolvedPrice:
        variant = None
        if variant_id is not None:
            variant = self.product_repo.get_variant(session, variant_id)
        return self.price_of(product, variant)

    def quote(
        self,
        session: Session,
        product: Product,
        variant_id: uuid.UUID | None = None,
    ) -> PriceQuote:
        price = self.resolve(session, product, variant_id)
        return PriceQuote(
            unit_price=price.unit_price,
            reference_price=price.reference_price,
            discount_percent=discount_percent(price.unit_price, price.reference_price),
        )
