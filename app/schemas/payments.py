from decimal import Decimal

from app.schemas.base import CamelModel


class CreatePaymentRequest(CamelModel):
    order_id: int
    amount: Decimal | None = None
    currency: str | None = None
    success_url: str | None = None
    cancel_url: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "orderId": 1,
                    "amount": 20,
                    "currency": "usd",
                }
            ]
        }
    }


class CreatePaymentResponse(CamelModel):
    session_id: str
    redirect_url: str


class WebhookAck(CamelModel):
    received: bool = True
