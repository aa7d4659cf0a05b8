from enum import Enum

from sqlalchemy import Column, DateTime, Integer, Numeric, String

from app.models.database import Base


class OrderStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    meal_id = Column(String(64), nullable=False)
    meal_name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    customer_email = Column(String(255), nullable=False, index=True)
    chef_id = Column(String(64), nullable=False, index=True)
    chef_name = Column(String(255), nullable=False)
    order_status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value)  # pending | accepted | rejected | cancelled
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.UNPAID.value)  # unpaid | pending | paid
    order_time = Column(DateTime(timezone=True), nullable=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
