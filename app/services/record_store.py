"""Persistent record store for orders and payments.

Every mutation goes through ``update_order`` / ``update_payment``: a single
``UPDATE ... WHERE`` whose criteria act as the compare-and-swap condition.
The returned bool says whether this caller's update won.
"""

import logging
from datetime import datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import InvalidStateError, StoreError
from app.models import Order, Payment, PaymentStatus

logger = logging.getLogger(__name__)

Criteria = dict[str, Any]


def _db_datetime(db: Session, value: datetime) -> datetime:
    bind = db.get_bind()
    if bind and bind.dialect.name == "sqlite":
        return value.replace(tzinfo=None)
    return value


def _filters(model, criteria: Criteria) -> list:
    clauses = []
    for field, expected in criteria.items():
        column = getattr(model, field)
        if isinstance(expected, (list, tuple, set, frozenset)):
            clauses.append(column.in_(list(expected)))
        else:
            clauses.append(column == expected)
    return clauses


class RecordStore:
    def __init__(self, db: Session):
        self.db = db

    def _values(self, values: dict[str, Any]) -> dict[str, Any]:
        return {
            key: _db_datetime(self.db, value) if isinstance(value, datetime) else value
            for key, value in values.items()
        }

    def _fail(self, action: str, exc: SQLAlchemyError) -> StoreError:
        self.db.rollback()
        logger.error("Record store failure while %s: %s", action, exc)
        return StoreError(f"Record store unavailable while {action}")

    def _insert(self, record, action: str):
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as exc:
            raise self._fail(action, exc) from exc
        return record

    def _conditional_update(self, model, key: Criteria, criteria: Criteria, values: dict[str, Any], action: str) -> bool:
        try:
            updated = (
                self.db.query(model)
                .filter(*_filters(model, key), *_filters(model, criteria))
                .update(self._values(values), synchronize_session=False)
            )
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise InvalidStateError(f"Conflicting record state while {action}") from exc
        except SQLAlchemyError as exc:
            raise self._fail(action, exc) from exc
        return updated == 1

    def _query(self, action: str, build):
        try:
            return build()
        except SQLAlchemyError as exc:
            raise self._fail(action, exc) from exc

    # Orders

    def add_order(self, order: Order) -> Order:
        return self._insert(order, "creating order")

    def get_order(self, order_id: int) -> Order | None:
        return self._query(
            "loading order",
            lambda: self.db.query(Order).filter(Order.id == order_id).first(),
        )

    def orders_for_customer(self, customer_email: str) -> list[Order]:
        return self._query(
            "listing customer orders",
            lambda: self.db.query(Order)
            .filter(Order.customer_email == customer_email)
            .order_by(Order.order_time.desc(), Order.id.desc())
            .all(),
        )

    def orders_for_chef(self, chef_id: str) -> list[Order]:
        return self._query(
            "listing chef orders",
            lambda: self.db.query(Order)
            .filter(Order.chef_id == chef_id)
            .order_by(Order.order_time.desc(), Order.id.desc())
            .all(),
        )

    def all_orders(self) -> list[Order]:
        return self._query(
            "listing orders",
            lambda: self.db.query(Order).order_by(Order.order_time.desc(), Order.id.desc()).all(),
        )

    def count_orders_by_status(self) -> dict[str, int]:
        rows = self._query(
            "counting orders",
            lambda: self.db.query(Order.order_status, func.count(Order.id)).group_by(Order.order_status).all(),
        )
        return {status_value: count for status_value, count in rows}

    def paid_orders(self) -> list[Order]:
        return self._query(
            "listing paid orders",
            lambda: self.db.query(Order).filter(Order.payment_status == PaymentStatus.PAID.value).all(),
        )

    def update_order(self, order_id: int, criteria: Criteria, values: dict[str, Any]) -> bool:
        return self._conditional_update(Order, {"id": order_id}, criteria, values, "updating order")

    # Payments

    def add_payment(self, payment: Payment) -> Payment:
        return self._insert(payment, "recording payment")

    def get_payment_by_session(self, gateway_session_id: str) -> Payment | None:
        return self._query(
            "loading payment",
            lambda: self.db.query(Payment).filter(Payment.gateway_session_id == gateway_session_id).first(),
        )

    def update_payment(self, gateway_session_id: str, criteria: Criteria, values: dict[str, Any]) -> bool:
        return self._conditional_update(
            Payment,
            {"gateway_session_id": gateway_session_id},
            criteria,
            values,
            "updating payment",
        )
