from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel


class ProviderIntent(BaseModel):
    order_id: str
    amount: float
    currency: str
    # Whatever the client needs to finish checkout (client secret, key id...)
    client_data: Dict[str, Any] = {}


class ProviderConfirmation(BaseModel):
    order_id: str
    payment_id: Optional[str] = None
    signature: Optional[str] = None
    succeeded: bool


class WebhookEvent(BaseModel):
    """Provider event normalized to succeeded / failed / refunded / ignored."""

    kind: str
    raw_type: str
    order_id: Optional[str] = None
    payment_id: Optional[str] = None


def to_minor_units(amount: float) -> int:
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentProvider(ABC):
    name: str

    @abstractmethod
    async def create_intent(self, amount: float, currency: Optional[str], metadata: Dict[str, Any]) -> ProviderIntent:
        ...

    @abstractmethod
    async def confirm(self, payload: Mapping[str, Any]) -> ProviderConfirmation:
        """Verify a client-reported payment; raises InvalidSignatureError when it cannot be trusted."""

    @abstractmethod
    def parse_webhook(self, raw_body: bytes, headers: Mapping[str, str]) -> WebhookEvent:
        """Verify and decode a webhook delivery from the raw request body."""
