from app.models.database import Base, get_db
from app.models.user import Role, User
from app.models.order import Order, OrderStatus, PaymentStatus
from app.models.payment import Payment, PaymentRecordStatus

__all__ = [
    "Base",
    "get_db",
    "Role",
    "User",
    "Order",
    "OrderStatus",
    "PaymentStatus",
    "Payment",
    "PaymentRecordStatus",
]
