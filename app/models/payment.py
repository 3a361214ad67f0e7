import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Float, Enum, JSON, Index
from sqlalchemy.orm import relationship
from app.core.base import Base


class PaymentStatusEnum(str, enum.Enum):
    pending = "pending"
    succeeded = "succeeded"
    failed = "failed"
    refunded = "refunded"


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_user_status", "user_id", "status"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    membership_id = Column(Integer, ForeignKey("memberships.id", ondelete="SET NULL"), nullable=True)
    provider = Column(String, nullable=False)
    provider_order_id = Column(String, nullable=False, unique=True, index=True)
    provider_payment_id = Column(String, nullable=True, index=True)
    provider_signature = Column(String, nullable=True)
    amount = Column(Float, nullable=False)
    currency = Column(String, nullable=False)
    status = Column(Enum(PaymentStatusEnum), nullable=False, default=PaymentStatusEnum.pending)
    description = Column(String, nullable=True)
    # "metadata" is reserved on declarative classes
    payment_metadata = Column("metadata", JSON, nullable=True)
    refunded_at = Column(DateTime, nullable=True)
    refund_reason = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    membership = relationship("Membership", lazy="joined")
