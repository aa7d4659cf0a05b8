from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String, text

from app.models.database import Base


class PaymentRecordStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        # At most one settled payment per order.
        Index(
            "uq_payments_order_paid",
            "order_id",
            unique=True,
            sqlite_where=text("status = 'paid'"),
            postgresql_where=text("status = 'paid'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    customer_email = Column(String(255), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False)
    gateway_session_id = Column(String(255), unique=True, nullable=False, index=True)
    status = Column(String(20), nullable=False, default=PaymentRecordStatus.PENDING.value)  # pending | paid
    created_at = Column(DateTime(timezone=True), nullable=False)
    paid_at = Column(DateTime(timezone=True), nullable=True)
