# storefront/services/cart_service.py
import logging
import math
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from storefront.core.errors import (
    CartLineNotFoundError,
    ConflictError,
    ProductNotFoundError,
    ValidationError,
    VariantNotFoundError,
)
from storefront.core.retry import conflict_retry
from storefront.database import unit_of_work
from storefront.models.cart import Cart, CartLine
from storefront.models.product import Product, ProductVariant
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import CartLineRead, CartRead, CartSummary
from storefront.services.price_resolver import PriceResolver

logger = logging.getLogger(__name__)


class CartService:
    """
    Business logic for cart operations, keyed by shopper identity.

    Responsibilities:
      - get-or-create exactly one cart per identity
      - validate product / variant existence
      - snapshot unit_price via PriceResolver when a line is first added
      - keep total_price == unit_price * quantity on every write
      - serialize writers on the same cart (carts.version) and retry
        transparently when a concurrent writer wins
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        price_resolver: PriceResolver,
    ):
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.price_resolver = price_resolver

    # ---- internal helpers ----

    @staticmethod
    def _require_identity(identity: str | None) -> str:
        identity = (identity or "").strip()
        if not identity:
            raise ValidationError("identity is required")
        return identity

    def _get_purchasable_product(
        self, session: Session, product_id: uuid.UUID
    ) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product or product.deleted_at is not None:
            raise ProductNotFoundError()
        if not product.availability:
            raise ValidationError("Product is unavailable")
        return product

    def _get_variant(
        self,
        session: Session,
        product: Product,
        variant_id: uuid.UUID | None,
    ) -> ProductVariant | None:
        if variant_id is None:
            return None
        variant = self.product_repo.get_variant(session, variant_id)
        if not variant or variant.product_id != product.id:
            raise VariantNotFoundError()
        return variant

    def lock(self, session: Session, cart: Cart) -> None:
        """
        Claim the cart for the current transaction.

        Raises ConflictError if another writer committed since `cart` was
        read; conflict_retry() then re-runs the whole operation.
        """
        if not self.cart_repo.bump_version(session, cart.id, cart.version):
            raise ConflictError()
        session.expire(cart, ["version"])

    # ---- public operations ----

    def get_or_create(self, session: Session, identity: str) -> Cart:
        """
        Return the cart for `identity`, creating it on first access.

        Two first requests racing on the same identity: the loser hits the
        unique owner_identity constraint and reads the winner's row.
        """
        identity = self._require_identity(identity)
        cart = self.cart_repo.get_by_owner(session, identity)
        if cart:
            return cart

        try:
            with unit_of_work(session):
                cart = self.cart_repo.create_cart(session, Cart(owner_identity=identity))
        except IntegrityError:
            cart = self.cart_repo.get_by_owner(session, identity)
            if cart is None:
                raise
            return cart

        logger.info("Created cart %s for %s", cart.id, identity)
        return cart

    def summary(self, session: Session, identity: str) -> CartSummary:
        """
        Return full cart summary:
          - cart row
          - lines (with product title / variant label when still in catalog)
          - subtotal = sum(total_price), count = sum(quantity)
        """
        cart = self.get_or_create(session, identity)
        lines = self.cart_repo.list_lines(session, cart.id)

        products = self.product_repo.get_many(
            session, list({line.product_id for line in lines})
        )
        variants = self.product_repo.get_variants(
            session,
            list({line.variant_id for line in lines if line.variant_id is not None}),
        )

        line_reads: list[CartLineRead] = []
        for line in lines:
            product = products.get(line.product_id)
            variant = variants.get(line.variant_id) if line.variant_id else None
            line_reads.append(
                CartLineRead(
                    id=line.id,
                    cart_id=line.cart_id,
                    product_id=line.product_id,
                    variant_id=line.variant_id,
                    quantity=line.quantity,
                    boxes=line.boxes,
                    unit_price=line.unit_price,
                    total_price=line.total_price,
                    product_title=product.title if product else None,
                    variant_label=variant.sku_label if variant else None,
                    created_at=line.created_at,
                )
            )

        return CartSummary(
            cart=CartRead(
                id=cart.id,
                owner_identity=cart.owner_identity,
                created_at=cart.created_at,
            ),
            lines=line_reads,
            subtotal=math.fsum(line.total_price for line in lines),
            count=sum(line.quantity for line in lines),
        )

    @conflict_retry()
    def add_item(
        self,
        session: Session,
        identity: str,
        product_id: uuid.UUID,
        variant_id: uuid.UUID | None = None,
        quantity: int = 1,
        boxes: int = 0,
    ) -> CartSummary:
        """
        Add a product (optionally a specific variant) to the cart.

        Rules:
          - quantity is clamped to >= 1, boxes to >= 0
          - an existing (product, variant) line is incremented, keeping its
            snapshotted unit_price
          - a new line snapshots the price resolved right now
        """
        quantity = max(1, quantity)
        boxes = max(0, boxes)
        cart = self.get_or_create(session, identity)

        with unit_of_work(session):
            product = self._get_purchasable_product(session, product_id)
            variant = self._get_variant(session, product, variant_id)
            self.lock(session, cart)

            existing = self.cart_repo.find_line(session, cart.id, product_id, variant_id)
            if existing:
                existing.quantity += quantity
                existing.boxes += boxes
                existing.total_price = existing.unit_price * existing.quantity
                self.cart_repo.save_line(session, existing)
            else:
                price = self.price_resolver.price_of(product, variant)
                line = CartLine(
                    cart_id=cart.id,
                    product_id=product_id,
                    variant_id=variant_id,
                    quantity=quantity,
                    boxes=boxes,
                    unit_price=price.unit_price,
                    total_price=price.unit_price * quantity,
                )
                try:
                    self.cart_repo.add_line(session, line)
                except IntegrityError as exc:
                    raise ConflictError() from exc

        return self.summary(session, identity)

    @conflict_retry()
    def set_quantity(
        self,
        session: Session,
        identity: str,
        line_id: uuid.UUID,
        quantity: int,
        boxes: int | None = None,
    ) -> CartSummary:
        """
        Set a line's quantity. quantity <= 0 removes the line.

        unit_price is not re-resolved, so the price shown stays stable
        for the whole session.
        """
        if quantity <= 0:
            return self.remove_item(session, identity, line_id)

        cart = self.get_or_create(session, identity)
        with unit_of_work(session):
            self.lock(session, cart)
            line = self.cart_repo.get_line(session, cart.id, line_id)
            if not line:
                raise CartLineNotFoundError()

            line.quantity = quantity
            if boxes is not None:
                line.boxes = max(0, boxes)
            line.total_price = line.unit_price * quantity
            self.cart_repo.save_line(session, line)

        return self.summary(session, identity)

    @conflict_retry()
    def remove_item(
        self,
        session: Session,
        identity: str,
        line_id: uuid.UUID,
    ) -> CartSummary:
        cart = self.get_or_create(session, identity)
        with unit_of_work(session):
            self.lock(session, cart)
            line = self.cart_repo.get_line(session, cart.id, line_id)
            if not line:
                raise CartLineNotFoundError()
            self.cart_repo.delete_line(session, line)

        return self.summary(session, identity)

    @conflict_retry()
    def clear(self, session: Session, identity: str) -> CartSummary:
        """
        Delete every line; the cart row itself persists.
        """
        cart = self.get_or_create(session, identity)
        with unit_of_work(session):
            self.lock(session, cart)
            removed = self.cart_repo.clear_lines(session, cart.id)

        logger.info("Cleared %d line(s) from cart %s", removed, cart.id)
        return self.summary(session, identity)
