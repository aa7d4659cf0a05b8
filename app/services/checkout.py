"""Hosted checkout creation for an order.

The gateway session is requested first; the pending Payment is written only
once the gateway has answered, so a failed gateway call leaves no record.
"""

import logging
import re
from dataclasses import dataclass
from decimal import Decimal

from app.authorization import Action, Identity, can
from app.config import settings
from app.errors import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from app.models import OrderStatus, Payment, PaymentRecordStatus, PaymentStatus
from app.services import stripe_service
from app.services.money import fits_currency, parse_money
from app.services.order_lifecycle import utcnow
from app.services.record_store import RecordStore
from app.services.url_utils import validate_checkout_redirect_url

logger = logging.getLogger(__name__)

CURRENCY_PATTERN = re.compile(r"^[a-z]{3}$")
CLOSED_ORDER_STATUSES = {OrderStatus.CANCELLED.value, OrderStatus.REJECTED.value}


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    redirect_url: str
    payment_id: int


def _parse_currency(currency: str | None) -> str:
    value = (currency or settings.DEFAULT_CURRENCY).strip().lower()
    if not CURRENCY_PATTERN.match(value):
        raise ValidationError("currency must be a 3-letter ISO code")
    return value


def create_checkout(
    store: RecordStore,
    order_id: int,
    identity: Identity,
    amount,
    currency: str | None = None,
    success_url: str | None = None,
    cancel_url: str | None = None,
) -> CheckoutSession:
    amount = parse_money(amount, "amount")
    currency = _parse_currency(currency)
    if not fits_currency(amount, currency):
        raise ValidationError(f"amount has too many decimal places for {currency.upper()}")
    success_url = validate_checkout_redirect_url(success_url, "successUrl") if success_url else settings.STRIPE_SUCCESS_URL
    cancel_url = validate_checkout_redirect_url(cancel_url, "cancelUrl") if cancel_url else settings.STRIPE_CANCEL_URL

    order = store.get_order(order_id)
    if order is None:
        raise NotFoundError("Order not found")
    if not can(identity, Action.CREATE_CHECKOUT, order):
        raise ForbiddenError("You do not own this order")
    if order.payment_status == PaymentStatus.PAID.value:
        raise InvalidStateError("Order is already paid")
    if order.order_status in CLOSED_ORDER_STATUSES:
        raise InvalidStateError(f"Order is already {order.order_status}")
    if amount != Decimal(str(order.price)):
        raise ValidationError("amount does not match the order price")

    checkout_url, session_id = stripe_service.create_checkout_session(
        order_id=order.id,
        amount=amount,
        currency=currency,
        meal_name=order.meal_name,
        success_url=success_url,
        cancel_url=cancel_url,
    )

    payment = store.add_payment(
        Payment(
            order_id=order.id,
            customer_email=identity.email,
            amount=amount,
            currency=currency,
            gateway_session_id=session_id,
            status=PaymentRecordStatus.PENDING.value,
            created_at=utcnow(),
        )
    )
    # No-op when an earlier checkout already moved the order to pending.
    store.update_order(
        order.id,
        {"payment_status": PaymentStatus.UNPAID.value},
        {"payment_status": PaymentStatus.PENDING.value},
    )
    logger.info("Checkout session %s created for order %s", session_id, order.id)
    return CheckoutSession(session_id=session_id, redirect_url=checkout_url, payment_id=payment.id)
