import hashlib
import hmac
import json
import logging
import time
from typing import Any, Dict, Mapping, Optional

import httpx

from app.core.exceptions import InvalidSignatureError, ProviderError, ValidationError
from app.services.payments.base import (
    PaymentProvider, ProviderIntent, ProviderConfirmation, WebhookEvent, to_minor_units,
)

logger = logging.getLogger(__name__)

EVENT_KINDS = {
    "payment.captured": "succeeded",
    "payment.failed": "failed",
    "refund.processed": "refunded",
}


def sign(secret: str, message: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_payment_signature(key_secret: str, order_id: str, payment_id: str, signature: str) -> bool:
    expected = sign(key_secret, f"{order_id}|{payment_id}".encode("utf-8"))
    return hmac.compare_digest(expected, signature or "")


class RazorpayProvider(PaymentProvider):
    """Regional processor: orders over its REST API, HMAC-signed checkout results and webhooks."""

    name = "razorpay"

    def __init__(
            self,
            key_id: str,
            key_secret: str,
            webhook_secret: Optional[str] = None,
            currency: str = "INR",
            api_url: str = "https://api.razorpay.com/v1",
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.webhook_secret = webhook_secret or key_secret
        self.currency = currency
        self.api_url = api_url.rstrip("/")
        self.transport = transport

    async def create_intent(self, amount: float, currency: Optional[str], metadata: Dict[str, Any]) -> ProviderIntent:
        currency = (currency or self.currency).upper()
        body = {
            "amount": to_minor_units(amount),
            "currency": currency,
            "receipt": f"receipt_{int(time.time() * 1000)}",
            "notes": {key: str(value) for key, value in metadata.items()},
        }

        try:
            async with httpx.AsyncClient(
                    auth=(self.key_id, self.key_secret),
                    timeout=15.0,
                    transport=self.transport,
            ) as client:
                response = await client.post(f"{self.api_url}/orders", json=body)
                response.raise_for_status()
                order = response.json()
        except httpx.HTTPStatusError as e:
            logger.error("Razorpay order creation rejected: %s %s", e.response.status_code, e.response.text)
            raise ProviderError("Payment provider rejected the order")
        except httpx.HTTPError as e:
            logger.error("Razorpay order creation failed: %s", e)
            raise ProviderError()

        return ProviderIntent(
            order_id=order["id"],
            amount=amount,
            currency=currency,
            client_data={"key_id": self.key_id, "amount": order.get("amount", body["amount"])},
        )

    async def confirm(self, payload: Mapping[str, Any]) -> ProviderConfirmation:
        order_id = payload.get("order_id")
        payment_id = payload.get("payment_id")
        signature = payload.get("signature")
        if not order_id or not payment_id or not signature:
            raise ValidationError("order_id, payment_id and signature are required")

        if not verify_payment_signature(self.key_secret, order_id, payment_id, signature):
            logger.warning("Rejected checkout signature for order %s", order_id)
            raise InvalidSignatureError("Invalid payment signature")

        return ProviderConfirmation(
            order_id=order_id,
            payment_id=payment_id,
            signature=signature,
            succeeded=True,
        )

    def parse_webhook(self, raw_body: bytes, headers: Mapping[str, str]) -> WebhookEvent:
        signature = headers.get("x-razorpay-signature")
        if not signature or not hmac.compare_digest(sign(self.webhook_secret, raw_body), signature):
            raise InvalidSignatureError("Invalid webhook signature")

        try:
            event = json.loads(raw_body)
        except ValueError:
            raise InvalidSignatureError("Invalid payload")

        event_type = event.get("event", "")
        payload = event.get("payload", {})
        payment = payload.get("payment", {}).get("entity", {})
        refund = payload.get("refund", {}).get("entity", {})

        return WebhookEvent(
            kind=EVENT_KINDS.get(event_type, "ignored"),
            raw_type=event_type,
            order_id=payment.get("order_id"),
            payment_id=payment.get("id") or refund.get("payment_id"),
        )
