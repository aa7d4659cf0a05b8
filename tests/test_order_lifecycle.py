import threading
from decimal import Decimal

import pytest

from app.errors import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from app.models import OrderStatus, PaymentStatus
from app.services import order_lifecycle
from fakes import InMemoryRecordStore


def _place(store, **overrides):
    fields = {
        "customer_email": "u@x.com",
        "meal_id": "m1",
        "meal_name": "Chicken Biryani",
        "chef_id": "c1",
        "chef_name": "Chef One",
        "price": 20,
    }
    fields.update(overrides)
    return order_lifecycle.place_order(store, **fields)


def test_place_order_starts_pending_and_unpaid():
    store = InMemoryRecordStore()
    order = _place(store)

    assert order.id == 1
    assert order.order_status == OrderStatus.PENDING.value
    assert order.payment_status == PaymentStatus.UNPAID.value
    assert order.price == Decimal("20")
    assert order.order_time is not None
    assert order.accepted_at is None and order.cancelled_at is None


@pytest.mark.parametrize("field", ["meal_id", "meal_name", "chef_id", "chef_name"])
def test_place_order_requires_fields(field):
    store = InMemoryRecordStore()
    with pytest.raises(ValidationError):
        _place(store, **{field: "  "})
    assert store.all_orders() == []


@pytest.mark.parametrize("price", [None, 0, -5, "abc"])
def test_place_order_rejects_bad_price(price):
    store = InMemoryRecordStore()
    with pytest.raises(ValidationError):
        _place(store, price=price)
    assert store.all_orders() == []


def test_accept_then_cancel_fails_with_invalid_state():
    store = InMemoryRecordStore()
    order = _place(store)

    assert order_lifecycle.accept_order(store, order.id, "c1") is True
    current = store.get_order(order.id)
    assert current.order_status == OrderStatus.ACCEPTED.value
    assert current.accepted_at is not None

    with pytest.raises(InvalidStateError):
        order_lifecycle.cancel_order(store, order.id, "u@x.com")
    assert store.get_order(order.id).cancelled_at is None


def test_reject_sets_timestamp():
    store = InMemoryRecordStore()
    order = _place(store)

    order_lifecycle.reject_order(store, order.id, "c1")

    current = store.get_order(order.id)
    assert current.order_status == OrderStatus.REJECTED.value
    assert current.rejected_at is not None


def test_cancel_by_other_customer_is_forbidden():
    store = InMemoryRecordStore()
    order = _place(store)

    with pytest.raises(ForbiddenError):
        order_lifecycle.cancel_order(store, order.id, "other@x.com")
    assert store.get_order(order.id).order_status == OrderStatus.PENDING.value


def test_accept_by_other_chef_is_forbidden():
    store = InMemoryRecordStore()
    order = _place(store)

    with pytest.raises(ForbiddenError):
        order_lifecycle.accept_order(store, order.id, "c2")
    with pytest.raises(ForbiddenError):
        order_lifecycle.reject_order(store, order.id, None)


def test_transition_on_missing_order_is_not_found():
    store = InMemoryRecordStore()
    with pytest.raises(NotFoundError):
        order_lifecycle.cancel_order(store, 404, "u@x.com")
    with pytest.raises(NotFoundError):
        order_lifecycle.accept_order(store, 404, "c1")


def test_rejected_order_cannot_be_accepted():
    store = InMemoryRecordStore()
    order = _place(store)
    order_lifecycle.reject_order(store, order.id, "c1")

    with pytest.raises(InvalidStateError):
        order_lifecycle.accept_order(store, order.id, "c1")
    assert store.get_order(order.id).accepted_at is None


def test_concurrent_transitions_have_exactly_one_winner():
    for _ in range(20):
        store = InMemoryRecordStore()
        order = _place(store)
        barrier = threading.Barrier(3)
        results = []

        def attempt(action, requester):
            barrier.wait()
            try:
                results.append(("ok", action(store, order.id, requester)))
            except (InvalidStateError, ForbiddenError) as exc:
                results.append(("lost", type(exc).__name__))

        threads = [
            threading.Thread(target=attempt, args=(order_lifecycle.cancel_order, "u@x.com")),
            threading.Thread(target=attempt, args=(order_lifecycle.accept_order, "c1")),
            threading.Thread(target=attempt, args=(order_lifecycle.reject_order, "c1")),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        winners = [r for r in results if r[0] == "ok"]
        losers = [r for r in results if r[0] == "lost"]
        assert len(winners) == 1
        assert len(losers) == 2
        assert all(name == "InvalidStateError" for _, name in losers)

        final = store.get_order(order.id)
        timestamps = [final.accepted_at, final.rejected_at, final.cancelled_at]
        assert final.order_status != OrderStatus.PENDING.value
        assert sum(ts is not None for ts in timestamps) == 1


def test_listing_by_owner():
    store = InMemoryRecordStore()
    _place(store)
    _place(store, customer_email="other@x.com", chef_id="c2")

    assert [o.customer_email for o in order_lifecycle.list_customer_orders(store, "u@x.com")] == ["u@x.com"]
    assert [o.chef_id for o in order_lifecycle.list_chef_orders(store, "c2")] == ["c2"]
    assert order_lifecycle.list_chef_orders(store, None) == []
    assert len(order_lifecycle.list_all_orders(store)) == 2


def test_order_stats_counts_revenue_from_paid_orders_only():
    store = InMemoryRecordStore()
    paid = _place(store, price=20)
    _place(store, price=7.5)
    store.update_order(paid.id, {}, {"payment_status": PaymentStatus.PAID.value})

    stats = order_lifecycle.order_stats(store)

    assert stats["total_orders"] == 2
    assert stats["paid_orders"] == 1
    assert stats["revenue"] == Decimal("20")
    assert stats["orders_by_status"]["pending"] == 2
    assert stats["orders_by_status"]["cancelled"] == 0
