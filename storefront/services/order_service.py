# storefront/services/order_service.py
import logging
import math
import uuid

from sqlmodel import Session

from storefront.core.errors import (
    EmptyCartError,
    OrderNotFoundError,
    ValidationError,
)
from storefront.core.retry import conflict_retry
from storefront.database import unit_of_work
from storefront.models.cart import CartLine
from storefront.models.order import Order, OrderItem
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.schemas.order import OrderItemRead, OrderRead, OrderWithItemsRead
from storefront.services.cart_service import CartService

logger = logging.getLogger(__name__)


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Create order from cart (order row + item snapshots + cart clear,
        all in one transaction)
      - Read a shopper's orders

    Order.status is written here only at creation ('pending');
    afterwards PaymentService owns it.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        cart_service: CartService,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo
        self.cart_service = cart_service

    # -------- User-facing operations --------

    @conflict_retry()
    def create_order_from_cart(
        self,
        session: Session,
        identity: str,
    ) -> OrderWithItemsRead:
        """
        Convert the shopper's cart into an Order.

        Steps:
          1. Lock the cart (no add/update can slip in during checkout).
          2. Load cart lines; EmptyCartError if there are none.
          3. total_amount = sum of line total_price.
          4. Create Order row (status='pending').
          5. Create one OrderItem per line, copied verbatim.
          6. Clear the cart.
          7. Commit. Any failure rolls back all of the above.
        """
        identity = (identity or "").strip()
        if not identity:
            raise ValidationError("identity is required")

        cart = self.cart_repo.get_by_owner(session, identity)
        if cart is None:
            raise EmptyCartError()

        with unit_of_work(session):
            self.cart_service.lock(session, cart)

            cart_lines: list[CartLine] = self.cart_repo.list_lines(session, cart.id)
            if not cart_lines:
                raise EmptyCartError()

            total_amount = math.fsum(line.total_price for line in cart_lines)

            order = self.order_repo.create_order(
                session,
                Order(
                    owner_identity=identity,
                    total_amount=total_amount,
                    status="pending",
                ),
            )

            order_items = self.order_repo.create_items(
                session,
                [
                    OrderItem(
                        order_id=order.id,
                        product_id=line.product_id,
                        variant_id=line.variant_id,
                        quantity=line.quantity,
                        boxes=line.boxes,
                        unit_price=line.unit_price,
                        total_price=line.total_price,
                    )
                    for line in cart_lines
                ],
            )

            self.cart_repo.clear_lines(session, cart.id)

        logger.info(
            "Order %s created from cart %s (%d item(s), total %.2f)",
            order.id,
            cart.id,
            len(order_items),
            order.total_amount,
        )
        return self._build_order_with_items_dto(order, order_items)

    def list_orders(
        self,
        session: Session,
        identity: str,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        """
        List orders for the given shopper (without items), newest first.
        """
        orders = self.order_repo.list_for_owner(session, identity, skip, limit)
        return [self._build_order_dto(o) for o in orders]

    def get_order(
        self,
        session: Session,
        order_id: uuid.UUID,
        identity: str | None = None,
    ) -> OrderWithItemsRead:
        """
        Get a single order including items.

        - 404 if order not found or (when identity is given) belongs to
          someone else.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or (identity and order.owner_identity != identity):
            raise OrderNotFoundError()

        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_with_items_dto(order, items)

    # -------- Helper DTO builders --------

    def _build_order_dto(self, order: Order) -> OrderRead:
        return OrderRead(
            id=order.id,
            owner_identity=order.owner_identity,
            total_amount=order.total_amount,
            status=order.status,  # Literal
            created_at=order.created_at,
        )

    def _build_order_with_items_dto(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        item_dtos = [
            OrderItemRead(
                id=it.id,
                order_id=it.order_id,
                product_id=it.product_id,
                variant_id=it.variant_id,
                quantity=it.quantity,
                boxes=it.boxes,
                unit_price=it.unit_price,
                total_price=it.total_price,
            )
            for it in items
        ]

        return OrderWithItemsRead(
            id=order.id,
            owner_identity=order.owner_identity,
            total_amount=order.total_amount,
            status=order.status,  # Literal
            created_at=order.created_at,
            items=item_dtos,
        )
