import uuid

import pytest
from sqlmodel import select

from storefront.core.errors import EmptyCartError, OrderNotFoundError
from storefront.models.order import Order, OrderItem

IDENTITY = "guest-orders"


@pytest.fixture()
def filled_cart(session, cart_service, product, other_product):
    """P1 x2 @ 100, P2 x1 @ 50."""
    cart_service.add_item(session, IDENTITY, product.id, quantity=2)
    return cart_service.add_item(session, IDENTITY, other_product.id, quantity=1)


class TestCreateFromCart:
    def test_order_total_and_lines(self, session, order_service, cart_service, filled_cart):
        order = order_service.create_order_from_cart(session, IDENTITY)

        assert order.total_amount == 250.0
        assert order.status == "pending"
        assert order.owner_identity == IDENTITY
        assert len(order.items) == 2
        assert order.total_amount == sum(item.total_price for item in order.items)

        snapshot = sorted((l.product_id, l.quantity, l.unit_price) for l in filled_cart.lines)
        copied = sorted((i.product_id, i.quantity, i.unit_price) for i in order.items)
        assert copied == snapshot

        assert cart_service.summary(session, IDENTITY).lines == []

    def test_order_is_immutable_after_cart_changes(
        self, session, order_service, cart_service, product, filled_cart
    ):
        created = order_service.create_order_from_cart(session, IDENTITY)

        cart_service.add_item(session, IDENTITY, product.id, quantity=5)

        reread = order_service.get_order(session, created.id)
        assert reread.total_amount == 250.0
        assert len(reread.items) == 2

    def test_empty_cart_is_rejected(self, session, order_service, cart_service):
        cart_service.get_or_create(session, IDENTITY)
        with pytest.raises(EmptyCartError):
            order_service.create_order_from_cart(session, IDENTITY)
        assert session.exec(select(Order)).all() == []

    def test_unknown_identity_is_an_empty_cart(self, session, order_service):
        with pytest.raises(EmptyCartError):
            order_service.create_order_from_cart(session, "guest-never-seen")

    def test_failure_leaves_no_partial_effect(
        self, session, order_service, order_repo, cart_service, filled_cart, monkeypatch
    ):
        def broken_create_items(session, items):
            raise RuntimeError("insert failed")

        monkeypatch.setattr(order_repo, "create_items", broken_create_items)

        with pytest.raises(RuntimeError):
            order_service.create_order_from_cart(session, IDENTITY)

        assert session.exec(select(Order)).all() == []
        assert session.exec(select(OrderItem)).all() == []
        assert len(cart_service.summary(session, IDENTITY).lines) == 2


class TestCheckoutLocking:
    def test_checkout_claims_the_cart_lock(
        self, session, order_service, cart_service, filled_cart, monkeypatch
    ):
        real_lock = cart_service.lock
        locked = []

        def recording_lock(session, cart):
            locked.append(cart.id)
            return real_lock(session, cart)

        monkeypatch.setattr(cart_service, "lock", recording_lock)

        order_service.create_order_from_cart(session, IDENTITY)

        assert locked == [filled_cart.cart.id]

    def test_concurrent_cart_change_is_retried(
        self, session, order_service, cart_repo, filled_cart, monkeypatch
    ):
        cart = cart_repo.get_by_owner(session, IDENTITY)
        before = cart.version

        real_bump = cart_repo.bump_version
        calls = {"n": 0}

        def flaky_bump(session, cart_id, seen_version):
            calls["n"] += 1
            if calls["n"] == 1:
                return False
            return real_bump(session, cart_id, seen_version)

        monkeypatch.setattr(cart_repo, "bump_version", flaky_bump)

        order = order_service.create_order_from_cart(session, IDENTITY)

        assert calls["n"] == 2
        assert order.total_amount == 250.0
        session.refresh(cart)
        assert cart.version == before + 1


class TestReadOrders:
    def test_list_newest_first_with_paging(self, session, order_service, cart_service, product):
        for quantity in (1, 2, 3):
            cart_service.add_item(session, IDENTITY, product.id, quantity=quantity)
            order_service.create_order_from_cart(session, IDENTITY)

        orders = order_service.list_orders(session, IDENTITY)
        assert [o.total_amount for o in orders] == [300.0, 200.0, 100.0]

        page = order_service.list_orders(session, IDENTITY, skip=1, limit=1)
        assert [o.total_amount for o in page] == [200.0]

    def test_list_only_own_orders(self, session, order_service, filled_cart):
        order_service.create_order_from_cart(session, IDENTITY)
        assert order_service.list_orders(session, "guest-someone-else") == []

    def test_get_order_of_other_identity_is_not_found(self, session, order_service, filled_cart):
        order = order_service.create_order_from_cart(session, IDENTITY)
        with pytest.raises(OrderNotFoundError):
            order_service.get_order(session, order.id, "guest-someone-else")

    def test_unknown_order(self, session, order_service):
        with pytest.raises(OrderNotFoundError):
            order_service.get_order(session, uuid.uuid4())
