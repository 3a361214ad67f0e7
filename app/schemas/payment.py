from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import datetime

from app.models.payment import PaymentStatusEnum


class CreateIntentRequest(BaseModel):
    membership_id: int


class ConfirmPaymentRequest(BaseModel):
    """Regional processor sends order/payment/signature; the card processor sends the intent id."""

    order_id: Optional[str] = None
    payment_id: Optional[str] = None
    signature: Optional[str] = None
    payment_intent_id: Optional[str] = None


class PaymentIntentResponse(BaseModel):
    payment_id: int
    order_id: str
    amount: float
    currency: str
    provider: str
    client_data: Dict[str, Any] = {}


class PaymentResponse(BaseModel):
    id: int
    membership_id: Optional[int] = None
    provider: str
    provider_order_id: str
    provider_payment_id: Optional[str] = None
    amount: float
    currency: str
    status: PaymentStatusEnum
    description: Optional[str] = None
    refunded_at: Optional[datetime] = None
    refund_reason: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
