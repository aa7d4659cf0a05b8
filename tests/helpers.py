import hashlib
import hmac
import json
import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.orm import Session

from app.config import settings
from app.models import Order, OrderStatus, PaymentStatus, User

TEST_WEBHOOK_SECRET = "whsec_test_mock"


def make_token(user_id: int, expires_in: timedelta = timedelta(hours=1)) -> str:
    return jwt.encode(
        {"sub": str(user_id), "exp": datetime.now(timezone.utc) + expires_in},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user.id)}"}


def create_order(
    db: Session,
    customer_email: str = "u@x.com",
    chef_id: str = "c1",
    price: Decimal = Decimal("20"),
    order_status: OrderStatus = OrderStatus.PENDING,
    payment_status: PaymentStatus = PaymentStatus.UNPAID,
) -> Order:
    order = Order(
        meal_id="m1",
        meal_name="Chicken Biryani",
        price=price,
        customer_email=customer_email,
        chef_id=chef_id,
        chef_name="Chef One",
        order_status=order_status.value,
        payment_status=payment_status.value,
        order_time=datetime.now(timezone.utc),
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


def sign_payload(payload: bytes, secret: str = TEST_WEBHOOK_SECRET) -> str:
    """Build a Stripe-Signature header the way Stripe signs webhook deliveries."""
    timestamp = int(time.time())
    signed = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"


def checkout_completed_event(session_id: str, order_id: int | None = None, event_id: str = "evt_test") -> dict:
    metadata = {"order_id": str(order_id)} if order_id is not None else {}
    return {
        "id": event_id,
        "object": "event",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "metadata": metadata,
            }
        },
    }


def post_webhook(
    client: TestClient,
    event: dict,
    secret: str = TEST_WEBHOOK_SECRET,
    signature: str | None = None,
):
    payload = json.dumps(event).encode()
    headers = {
        "Content-Type": "application/json",
        "stripe-signature": signature or sign_payload(payload, secret),
    }
    return client.post("/payments/webhook", content=payload, headers=headers)
