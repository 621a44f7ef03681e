# storefront/services/merge_service.py
import logging

from sqlmodel import Session

from storefront.core.retry import conflict_retry
from storefront.database import unit_of_work
from storefront.models.cart import CartLine
from storefront.repositories.cart_repo import CartRepository
from storefront.schemas.cart import CartSummary
from storefront.services.cart_service import CartService
from storefront.services.identity_service import IdentityResolver

logger = logging.getLogger(__name__)


class CartMergeService:
    """
    Folds a guest cart into the shopper's authenticated cart on login.

    The whole merge is one unit of work holding the version lock of both
    carts, so a duplicate login event either waits and then finds an
    empty guest cart, or loses the race and is retried into a no-op.
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        cart_service: CartService,
        identity_resolver: IdentityResolver,
    ):
        self.cart_repo = cart_repo
        self.cart_service = cart_service
        self.identity_resolver = identity_resolver

    def should_merge(self, anonymous_identity: str, authenticated_identity: str) -> bool:
        return (
            self.identity_resolver.is_anonymous(anonymous_identity)
            and not self.identity_resolver.is_anonymous(authenticated_identity)
            and anonymous_identity != authenticated_identity
        )

    @conflict_retry()
    def merge_on_login(
        self,
        session: Session,
        anonymous_identity: str,
        authenticated_identity: str,
    ) -> CartSummary:
        """
        Move every guest line into the authenticated cart.

          - matching (product, variant) line: quantities and boxes are
            summed and total_price recomputed from the destination line's
            unit_price (destination price wins)
          - otherwise the guest line is copied as-is
          - guest lines are deleted; the guest cart row stays, empty,
            marked merged_into=<authenticated identity>
        """
        if not self.should_merge(anonymous_identity, authenticated_identity):
            logger.info(
                "Skipping cart merge %s -> %s", anonymous_identity, authenticated_identity
            )
            return self.cart_service.summary(session, authenticated_identity)

        source = self.cart_repo.get_by_owner(session, anonymous_identity)
        destination = self.cart_service.get_or_create(session, authenticated_identity)
        if source is None:
            return self.cart_service.summary(session, authenticated_identity)

        # Already folded and nothing added since: no locks needed
        if source.merged_into and not self.cart_repo.list_lines(session, source.id):
            logger.info(
                "Guest cart %s already merged into %s", source.id, source.merged_into
            )
            return self.cart_service.summary(session, authenticated_identity)

        merged = 0
        with unit_of_work(session):
            # Fixed lock order so two merges never wait on each other crosswise
            for cart in sorted((source, destination), key=lambda c: str(c.id)):
                self.cart_service.lock(session, cart)

            for line in self.cart_repo.list_lines(session, source.id):
                existing = self.cart_repo.find_line(
                    session, destination.id, line.product_id, line.variant_id
                )
                if existing:
                    existing.quantity += line.quantity
                    existing.boxes += line.boxes
                    existing.total_price = existing.unit_price * existing.quantity
                    self.cart_repo.save_line(session, existing)
                else:
                    self.cart_repo.add_line(
                        session,
                        CartLine(
                            cart_id=destination.id,
                            product_id=line.product_id,
                            variant_id=line.variant_id,
                            quantity=line.quantity,
                            boxes=line.boxes,
                            unit_price=line.unit_price,
                            total_price=line.total_price,
                        ),
                    )
                self.cart_repo.delete_line(session, line)
                merged += 1

            source.merged_into = authenticated_identity
            session.add(source)

        logger.info(
            "Merged %d line(s) from %s into %s",
            merged,
            anonymous_identity,
            authenticated_identity,
        )
        return self.cart_service.summary(session, authenticated_identity)
