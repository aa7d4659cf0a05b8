from datetime import datetime
from decimal import Decimal

from pydantic import field_serializer

from app.models import OrderStatus, PaymentStatus
from app.schemas.base import CamelModel, serialize_money


class OrderCreateRequest(CamelModel):
    meal_id: str | None = None
    meal_name: str | None = None
    food_name: str | None = None
    chef_id: str | None = None
    chef_name: str | None = None
    price: Decimal | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "mealId": "m1",
                    "mealName": "Chicken Biryani",
                    "chefId": "chef-1a2b3c4d",
                    "chefName": "Rahima",
                    "price": 20,
                }
            ]
        }
    }


class OrderCreateResponse(CamelModel):
    id: int


class OrderResponse(CamelModel):
    id: int
    meal_id: str
    meal_name: str
    price: Decimal
    customer_email: str
    chef_id: str
    chef_name: str
    order_status: OrderStatus
    payment_status: PaymentStatus
    order_time: datetime
    accepted_at: datetime | None = None
    rejected_at: datetime | None = None
    cancelled_at: datetime | None = None
    paid_at: datetime | None = None

    @field_serializer("price")
    def serialize_price(self, value: Decimal) -> str:
        return serialize_money(value)


class OrderTransitionResponse(CamelModel):
    modified: bool
