from decimal import Decimal

from pydantic import field_serializer

from app.models import Role
from app.schemas.base import CamelModel, serialize_money


class OrderStatsResponse(CamelModel):
    total_orders: int
    paid_orders: int
    revenue: Decimal
    orders_by_status: dict[str, int]

    @field_serializer("revenue")
    def serialize_revenue(self, value: Decimal) -> str:
        return serialize_money(value)


class GrantRoleRequest(CamelModel):
    role: Role


class UserRoleResponse(CamelModel):
    id: int
    email: str
    role: Role
    chef_id: str | None = None
