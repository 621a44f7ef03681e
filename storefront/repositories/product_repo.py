# storefront/repositories/product_repo.py
import uuid

from sqlmodel import Session, col, select

from storefront.models.product import Product, ProductVariant


class ProductRepository:
    """
    Read-only access to the catalog tables.

    - Pure DB operations (queries).
    - No FastAPI, no business logic.
    """

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_many(
        self, session: Session, product_ids: list[uuid.UUID]
    ) -> dict[uuid.UUID, Product]:
        if not product_ids:
            return {}
        stmt = select(Product).where(col(Product.id).in_(product_ids))
        return {p.id: p for p in session.exec(stmt).all()}

    # ----- Variants -----

    def get_variant(
        self, session: Session, variant_id: uuid.UUID
    ) -> ProductVariant | None:
        return session.get(ProductVariant, variant_id)

    def get_variants(
        self, session: Session, variant_ids: list[uuid.UUID]
    ) -> dict[uuid.UUID, ProductVariant]:
        if not variant_ids:
            return {}
        stmt = select(ProductVariant).where(col(ProductVariant.id).in_(variant_ids))
        return {v.id: v for v in session.exec(stmt).all()}
