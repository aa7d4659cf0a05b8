"""Settlement of Stripe checkout sessions.

Reconciliation is two conditional writes:

1. Payment pending -> paid. The Payment row is the record of whether
   settlement happened.
2. Order payment_status -> paid, plus order_status -> accepted when the order
   is still pending. Orders already accepted, rejected or cancelled keep
   their order_status.

If step 2 keeps failing the StoreError propagates and the gateway redelivers
the event. A redelivery that finds the Payment paid but the Order unpaid
replays only step 2. Every other redelivery is a no-op.
"""

import logging
import time
from datetime import datetime
from enum import Enum

import stripe

from app.config import settings
from app.errors import InvalidStateError, SignatureError, StoreError
from app.models import OrderStatus, Payment, PaymentRecordStatus, PaymentStatus
from app.services.order_lifecycle import utcnow
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
UNSETTLED_PAYMENT_STATUSES = (PaymentStatus.UNPAID.value, PaymentStatus.PENDING.value)


def _field(obj, key: str):
    # Stripe objects raise KeyError for absent fields.
    try:
        return obj[key]
    except (KeyError, TypeError):
        return None


class ReconciliationOutcome(str, Enum):
    SETTLED = "settled"
    RECOVERED = "recovered"
    DUPLICATE = "duplicate"
    UNKNOWN_SESSION = "unknown_session"
    CONFLICTING_SETTLEMENT = "conflicting_settlement"
    IGNORED = "ignored"


def verify_notification(raw_payload: bytes, signature_header: str | None):
    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.error("STRIPE_WEBHOOK_SECRET is not set, refusing to process webhook")
        raise SignatureError("Webhook verification is not configured")
    if not signature_header:
        raise SignatureError("Missing webhook signature")
    try:
        return stripe.Webhook.construct_event(
            raw_payload, signature_header, settings.STRIPE_WEBHOOK_SECRET
        )
    except ValueError as e:
        logger.error(f"Invalid payload: {e}")
        raise SignatureError("Invalid payload") from e
    except stripe.SignatureVerificationError as e:
        logger.error(f"Invalid signature: {e}")
        raise SignatureError("Invalid signature") from e


def apply_settlement_to_order(store: RecordStore, order_id: int, paid_at: datetime) -> bool:
    """Write the payment axis of the order; auto-accept it if still pending."""
    if store.update_order(
        order_id,
        {
            "order_status": OrderStatus.PENDING.value,
            "payment_status": UNSETTLED_PAYMENT_STATUSES,
        },
        {
            "payment_status": PaymentStatus.PAID.value,
            "paid_at": paid_at,
            "order_status": OrderStatus.ACCEPTED.value,
            "accepted_at": paid_at,
        },
    ):
        return True
    return store.update_order(
        order_id,
        {"payment_status": UNSETTLED_PAYMENT_STATUSES},
        {"payment_status": PaymentStatus.PAID.value, "paid_at": paid_at},
    )


def _settle_order(store: RecordStore, order_id: int, paid_at: datetime) -> bool:
    attempts = max(1, settings.RECONCILE_ORDER_WRITE_ATTEMPTS)
    for attempt in range(1, attempts + 1):
        try:
            return apply_settlement_to_order(store, order_id, paid_at)
        except StoreError as exc:
            if attempt == attempts:
                logger.error(
                    f"Order {order_id} payment write failed after {attempts} attempts; "
                    f"awaiting gateway redelivery: {exc}"
                )
                raise
            logger.warning(f"Order {order_id} payment write failed (attempt {attempt}/{attempts}): {exc}")
            time.sleep(settings.RECONCILE_RETRY_DELAY_SECONDS)
    return False


def _replay_order_write(store: RecordStore, payment: Payment) -> ReconciliationOutcome:
    order = store.get_order(payment.order_id)
    if order is None:
        logger.error(f"Payment {payment.id} references missing order {payment.order_id}")
        return ReconciliationOutcome.DUPLICATE
    if order.payment_status == PaymentStatus.PAID.value:
        logger.info(f"Session {payment.gateway_session_id} already settled, skipping")
        return ReconciliationOutcome.DUPLICATE

    _settle_order(store, order.id, payment.paid_at or utcnow())
    logger.info(f"Order {order.id} payment write replayed for session {payment.gateway_session_id}")
    return ReconciliationOutcome.RECOVERED


def handle_notification(
    store: RecordStore,
    raw_payload: bytes,
    signature_header: str | None,
) -> ReconciliationOutcome:
    event = verify_notification(raw_payload, signature_header)

    if event["type"] != CHECKOUT_COMPLETED:
        logger.info(f"Ignoring Stripe event {event['type']}")
        return ReconciliationOutcome.IGNORED

    session = event["data"]["object"]
    session_id = _field(session, "id")
    if not session_id:
        logger.warning("Checkout event without session id")
        return ReconciliationOutcome.UNKNOWN_SESSION

    payment = store.get_payment_by_session(session_id)
    if payment is None:
        logger.warning(f"No payment recorded for session {session_id}, discarding event")
        return ReconciliationOutcome.UNKNOWN_SESSION

    metadata_order_id = _field(_field(session, "metadata"), "order_id")
    if metadata_order_id is not None and str(metadata_order_id) != str(payment.order_id):
        logger.warning(
            f"Session {session_id} metadata order_id={metadata_order_id} differs from "
            f"recorded order {payment.order_id}; using recorded order"
        )

    if payment.status == PaymentRecordStatus.PAID.value:
        return _replay_order_write(store, payment)

    paid_at = utcnow()
    try:
        settled = store.update_payment(
            session_id,
            {"status": PaymentRecordStatus.PENDING.value},
            {"status": PaymentRecordStatus.PAID.value, "paid_at": paid_at},
        )
    except InvalidStateError:
        logger.warning(
            f"Session {session_id} completed but order {payment.order_id} "
            "already has a settled payment; refund required"
        )
        return ReconciliationOutcome.CONFLICTING_SETTLEMENT

    if not settled:
        # A concurrent delivery won the payment write.
        return _replay_order_write(store, store.get_payment_by_session(session_id))

    _settle_order(store, payment.order_id, paid_at)
    logger.info(f"Payment for session {session_id} settled, order {payment.order_id} marked paid")
    return ReconciliationOutcome.SETTLED
