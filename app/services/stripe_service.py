import logging
import time
from decimal import Decimal

import stripe

from app.errors import GatewayError
from app.services.money import to_minor_units
from app.services.url_utils import append_query_param

logger = logging.getLogger(__name__)

RETRYABLE_STRIPE_ERRORS = (stripe.APIConnectionError, stripe.RateLimitError)


def _configure_stripe(settings) -> None:
    if not settings.STRIPE_SECRET_KEY:
        raise GatewayError("Payment gateway is not configured")
    stripe.api_key = settings.STRIPE_SECRET_KEY
    stripe.default_http_client = stripe.RequestsClient(timeout=settings.STRIPE_TIMEOUT_SECONDS)


def create_checkout_session(
    order_id: int,
    amount: Decimal,
    currency: str,
    meal_name: str,
    success_url: str,
    cancel_url: str,
) -> tuple[str, str]:
    """Create Stripe Checkout Session and return (checkout URL, session ID).

    Connection and rate-limit failures are retried up to STRIPE_MAX_ATTEMPTS times;
    any other Stripe error, or running out of attempts, raises GatewayError.
    """
    from app.config import settings

    _configure_stripe(settings)
    attempts = max(1, settings.STRIPE_MAX_ATTEMPTS)
    last_error = None
    for attempt in range(1, attempts + 1):
        try:
            session = stripe.checkout.Session.create(
                payment_method_types=["card"],
                line_items=[
                    {
                        "price_data": {
                            "currency": currency,
                            "product_data": {"name": meal_name},
                            "unit_amount": to_minor_units(amount, currency),
                        },
                        "quantity": 1,
                    }
                ],
                mode="payment",
                success_url=append_query_param(success_url, "order_id", order_id),
                cancel_url=cancel_url,
                metadata={"order_id": str(order_id)},
            )
        except RETRYABLE_STRIPE_ERRORS as exc:
            last_error = exc
            logger.warning(
                "Stripe unreachable for order %s (attempt %s/%s): %s",
                order_id,
                attempt,
                attempts,
                exc,
            )
            if attempt < attempts:
                time.sleep(settings.STRIPE_RETRY_DELAY_SECONDS)
        except stripe.StripeError as exc:
            logger.error("Stripe rejected checkout session for order %s: %s", order_id, exc)
            raise GatewayError("Payment gateway rejected the checkout request") from exc
        else:
            return session.url, session.id

    raise GatewayError(
        f"Payment gateway unreachable after {attempts} attempts"
    ) from last_error
