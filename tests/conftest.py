import os

# Settings are read at import time; point them at an in-memory database first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-secret")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from storefront.core.config import get_settings  # noqa: E402
from storefront.database import build_engine, get_session  # noqa: E402
from storefront.main import app  # noqa: E402
from storefront.models.product import Product, ProductVariant  # noqa: E402
from storefront.repositories.cart_repo import CartRepository  # noqa: E402
from storefront.repositories.order_repo import OrderRepository  # noqa: E402
from storefront.repositories.payment_repo import PaymentRepository  # noqa: E402
from storefront.repositories.product_repo import ProductRepository  # noqa: E402
from storefront.services.cart_service import CartService  # noqa: E402
from storefront.services.identity_service import IdentityResolver  # noqa: E402
from storefront.services.merge_service import CartMergeService  # noqa: E402
from storefront.services.order_service import OrderService  # noqa: E402
from storefront.services.payment_service import PaymentService  # noqa: E402
from storefront.services.price_resolver import PriceResolver  # noqa: E402


@pytest.fixture()
def engine():
    engine = build_engine("sqlite://")
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def client(session):
    def _get_session_override():
        yield session

    app.dependency_overrides[get_session] = _get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---- catalog ----


@pytest.fixture()
def make_product(session):
    def _make(title="Chocolate Truffle", price=100.0, mrp=None, **kwargs):
        product = Product(title=title, price=price, mrp=mrp, **kwargs)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture()
def make_variant(session):
    def _make(product, label="1 kg", unit_price=180.0, unit_mrp=None):
        variant = ProductVariant(
            product_id=product.id,
            sku_label=label,
            unit_price=unit_price,
            unit_mrp=unit_mrp,
            stock=10,
        )
        session.add(variant)
        session.commit()
        session.refresh(variant)
        return variant

    return _make


@pytest.fixture()
def product(make_product):
    return make_product(title="Chocolate Truffle", price=100.0, mrp=125.0)


@pytest.fixture()
def other_product(make_product):
    return make_product(title="Red Velvet", price=50.0)


@pytest.fixture()
def variant(make_variant, product):
    return make_variant(product, label="1 kg", unit_price=180.0, unit_mrp=200.0)


# ---- services ----


@pytest.fixture()
def product_repo():
    return ProductRepository()


@pytest.fixture()
def cart_repo():
    return CartRepository()


@pytest.fixture()
def order_repo():
    return OrderRepository()


@pytest.fixture()
def payment_repo():
    return PaymentRepository()


@pytest.fixture()
def price_resolver(product_repo):
    return PriceResolver(product_repo)


@pytest.fixture()
def cart_service(cart_repo, product_repo, price_resolver):
    return CartService(cart_repo, product_repo, price_resolver)


@pytest.fixture()
def identity_resolver():
    return IdentityResolver("cookie-secret", guest_prefix="guest")


@pytest.fixture()
def merge_service(cart_repo, cart_service, identity_resolver):
    return CartMergeService(cart_repo, cart_service, identity_resolver)


@pytest.fixture()
def order_service(order_repo, cart_repo, cart_service):
    return OrderService(order_repo, cart_repo, cart_service)


@pytest.fixture()
def payment_service(payment_repo, order_repo):
    return PaymentService(
        payment_repo,
        order_repo,
        merchant_upi_id="cakes@upi",
        merchant_name="Cake Shop",
    )


# ---- auth ----


@pytest.fixture()
def auth_headers():
    """Bearer header carrying a Supabase-style access token."""

    def _headers(sub="user-123", role=None):
        claims = {"sub": sub, "email": f"{sub}@example.com"}
        if role:
            claims["app_metadata"] = {"role": role}
        settings = get_settings()
        token = jwt.encode(
            claims, settings.SUPABASE_JWT_SECRET, algorithm=settings.SUPABASE_JWT_ALG
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
