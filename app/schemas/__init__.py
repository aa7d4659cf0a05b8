from app.schemas.admin import GrantRoleRequest, OrderStatsResponse, UserRoleResponse
from app.schemas.orders import OrderCreateRequest, OrderCreateResponse, OrderResponse, OrderTransitionResponse
from app.schemas.payments import CreatePaymentRequest, CreatePaymentResponse, WebhookAck

__all__ = [
    "GrantRoleRequest",
    "OrderStatsResponse",
    "UserRoleResponse",
    "OrderCreateRequest",
    "OrderCreateResponse",
    "OrderResponse",
    "OrderTransitionResponse",
    "CreatePaymentRequest",
    "CreatePaymentResponse",
    "WebhookAck",
]
