# storefront/repositories/cart_repo.py
import uuid

from sqlalchemy import update
from sqlmodel import Session, col, select

from storefront.models.cart import Cart, CartLine


class CartRepository:
    """
    Data access for carts and cart_items.

    NOTE:
      - No commits here; every cart operation is one unit of work and
        the service owns the transaction (see database.unit_of_work).
    """

    # ---- Carts ----

    def get_by_owner(self, session: Session, owner_identity: str) -> Cart | None:
        stmt = select(Cart).where(Cart.owner_identity == owner_identity)
        return session.exec(stmt).first()

    def create_cart(self, session: Session, cart: Cart) -> Cart:
        session.add(cart)
        session.flush()
        return cart

    def bump_version(self, session: Session, cart_id: uuid.UUID, seen_version: int) -> bool:
        """
        Compare-and-set on carts.version.

        Returns False when another writer bumped the version since it was
        read; on Postgres the UPDATE also holds the row lock until commit.
        """
        session.flush()
        stmt = (
            update(Cart)
            .where(Cart.id == cart_id, Cart.version == seen_version)
            .values(version=seen_version + 1)
        )
        result = session.connection().execute(stmt)
        return result.rowcount == 1

    # ---- Lines ----

    def list_lines(self, session: Session, cart_id: uuid.UUID) -> list[CartLine]:
        stmt = (
            select(CartLine)
            .where(CartLine.cart_id == cart_id)
            .order_by(CartLine.created_at)
        )
        return list(session.exec(stmt).all())

    def get_line(
        self, session: Session, cart_id: uuid.UUID, line_id: uuid.UUID
    ) -> CartLine | None:
        stmt = select(CartLine).where(
            CartLine.id == line_id, CartLine.cart_id == cart_id
        )
        return session.exec(stmt).first()

    def find_line(
        self,
        session: Session,
        cart_id: uuid.UUID,
        product_id: uuid.UUID,
        variant_id: uuid.UUID | None,
    ) -> CartLine | None:
        stmt = select(CartLine).where(
            CartLine.cart_id == cart_id, CartLine.product_id == product_id
        )
        if variant_id is None:
            stmt = stmt.where(col(CartLine.variant_id).is_(None))
        else:
            stmt = stmt.where(CartLine.variant_id == variant_id)
        return session.exec(stmt).first()

    def add_line(self, session: Session, line: CartLine) -> CartLine:
        session.add(line)
        session.flush()
        return line

    def save_line(self, session: Session, line: CartLine) -> CartLine:
        session.add(line)
        session.flush()
        return line

    def delete_line(self, session: Session, line: CartLine) -> None:
        session.delete(line)
        session.flush()

    def clear_lines(self, session: Session, cart_id: uuid.UUID) -> int:
        rows = self.list_lines(session, cart_id)
        for row in rows:
            session.delete(row)
        session.flush()
        return len(rows)
