# storefront/schemas/price.py
from storefront.schemas.common import ApiModel


class ResolvedPrice(ApiModel):
    """
    Prices to snapshot into a cart/order line.

    reference_price is the struck-through MRP used for discount display.
    """

    unit_price: float
    reference_price: float


class PriceQuote(ResolvedPrice):
    discount_percent: int
