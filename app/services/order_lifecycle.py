"""Order state machine: pending -> accepted | rejected | cancelled.

Transitions are single conditional updates on (id, owner, status == pending),
so when two conflicting requests race exactly one of them changes the row.
The loser re-reads the order only to report why it lost.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from app.errors import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from app.models import Order, OrderStatus, PaymentStatus
from app.services.money import parse_money
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _require_text(value: str | None, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def place_order(
    store: RecordStore,
    customer_email: str,
    meal_id: str | None,
    meal_name: str | None,
    chef_id: str | None,
    chef_name: str | None,
    price,
) -> Order:
    order = Order(
        meal_id=_require_text(meal_id, "mealId"),
        meal_name=_require_text(meal_name, "mealName"),
        chef_id=_require_text(chef_id, "chefId"),
        chef_name=_require_text(chef_name, "chefName"),
        price=parse_money(price, "price"),
        customer_email=_require_text(customer_email, "customerEmail"),
        order_status=OrderStatus.PENDING.value,
        payment_status=PaymentStatus.UNPAID.value,
        order_time=utcnow(),
    )
    order = store.add_order(order)
    logger.info("Order %s placed by %s for chef %s", order.id, order.customer_email, order.chef_id)
    return order


def _transition(
    store: RecordStore,
    order_id: int,
    owner_field: str,
    requester: str | None,
    target: OrderStatus,
    timestamp_field: str,
) -> bool:
    updated = store.update_order(
        order_id,
        {owner_field: requester, "order_status": OrderStatus.PENDING.value},
        {"order_status": target.value, timestamp_field: utcnow()},
    )
    if updated:
        logger.info("Order %s %s by %s", order_id, target.value, requester)
        return True

    order = store.get_order(order_id)
    if order is None:
        raise NotFoundError("Order not found")
    if requester is None or getattr(order, owner_field) != requester:
        raise ForbiddenError("You do not own this order")
    logger.info(
        "Order %s cannot become %s from %s (requested by %s)",
        order_id,
        target.value,
        order.order_status,
        requester,
    )
    raise InvalidStateError(f"Order is already {order.order_status}")


def cancel_order(store: RecordStore, order_id: int, requester_email: str) -> bool:
    return _transition(store, order_id, "customer_email", requester_email, OrderStatus.CANCELLED, "cancelled_at")


def accept_order(store: RecordStore, order_id: int, requester_chef_id: str | None) -> bool:
    return _transition(store, order_id, "chef_id", requester_chef_id, OrderStatus.ACCEPTED, "accepted_at")


def reject_order(store: RecordStore, order_id: int, requester_chef_id: str | None) -> bool:
    return _transition(store, order_id, "chef_id", requester_chef_id, OrderStatus.REJECTED, "rejected_at")


def list_customer_orders(store: RecordStore, customer_email: str) -> list[Order]:
    return store.orders_for_customer(customer_email)


def list_chef_orders(store: RecordStore, chef_id: str | None) -> list[Order]:
    if not chef_id:
        return []
    return store.orders_for_chef(chef_id)


def list_all_orders(store: RecordStore) -> list[Order]:
    return store.all_orders()


def order_stats(store: RecordStore) -> dict:
    by_status = {status_value.value: 0 for status_value in OrderStatus}
    by_status.update(store.count_orders_by_status())
    paid = store.paid_orders()
    revenue = sum((Decimal(str(order.price)) for order in paid), Decimal("0"))
    return {
        "total_orders": sum(by_status.values()),
        "paid_orders": len(paid),
        "revenue": revenue,
        "orders_by_status": by_status,
    }
