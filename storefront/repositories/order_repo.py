# storefront/repositories/order_repo.py
import uuid

from sqlalchemy import update
from sqlmodel import Session, col, select

from storefront.models.order import Order, OrderItem


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits here; order creation is a multi-step transaction.
        The service is responsible for calling session.commit().
    """

    # ---- Orders ----

    def list_for_owner(
        self,
        session: Session,
        owner_identity: str,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.owner_identity == owner_identity)
            .order_by(Order.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def get_by_id(self, session: Session, order_id: uuid.UUID) -> Order | None:
        return session.get(Order, order_id)

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()  # Assign PK
        return order

    def transition_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        new_status: str,
        from_statuses: list[str],
    ) -> bool:
        """
        Set status only if the row is still in one of `from_statuses`.
        Returns False when the order moved on in the meantime.
        """
        session.flush()
        stmt = (
            update(Order)
            .where(Order.id == order_id, col(Order.status).in_(from_statuses))
            .values(status=new_status)
        )
        result = session.connection().execute(stmt)
        return result.rowcount == 1

    # ---- Order items ----

    def list_items_for_order(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> list[OrderItem]:
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.created_at)
        )
        return list(session.exec(stmt).all())

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        return items
