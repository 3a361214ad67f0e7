import logging
from typing import Any, Dict, Mapping, Optional

import stripe
from fastapi.concurrency import run_in_threadpool

from app.core.exceptions import InvalidSignatureError, ProviderError, ValidationError
from app.services.payments.base import (
    PaymentProvider, ProviderIntent, ProviderConfirmation, WebhookEvent, to_minor_units,
)

logger = logging.getLogger(__name__)

EVENT_KINDS = {
    "payment_intent.succeeded": "succeeded",
    "payment_intent.payment_failed": "failed",
    "charge.refunded": "refunded",
}


class StripeProvider(PaymentProvider):
    """International card processor: PaymentIntents plus signed webhooks."""

    name = "stripe"

    def __init__(self, secret_key: str, webhook_secret: Optional[str], currency: str = "usd"):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.currency = currency

    async def create_intent(self, amount: float, currency: Optional[str], metadata: Dict[str, Any]) -> ProviderIntent:
        currency = (currency or self.currency).lower()
        try:
            # The SDK is blocking
            intent = await run_in_threadpool(
                stripe.PaymentIntent.create,
                api_key=self.secret_key,
                amount=to_minor_units(amount),
                currency=currency,
                metadata={key: str(value) for key, value in metadata.items()},
                automatic_payment_methods={"enabled": True},
            )
        except stripe.StripeError as e:
            logger.error("Stripe PaymentIntent creation failed: %s", e)
            raise ProviderError(f"Payment setup failed: {e.user_message or 'provider error'}")

        return ProviderIntent(
            order_id=intent.id,
            amount=amount,
            currency=currency,
            client_data={"client_secret": intent.client_secret},
        )

    async def confirm(self, payload: Mapping[str, Any]) -> ProviderConfirmation:
        intent_id = payload.get("payment_intent_id") or payload.get("order_id")
        if not intent_id:
            raise ValidationError("payment_intent_id is required")

        try:
            # Only the provider's own view of the intent is trusted
            intent = await run_in_threadpool(stripe.PaymentIntent.retrieve, intent_id, api_key=self.secret_key)
        except stripe.InvalidRequestError:
            raise InvalidSignatureError("Unknown payment intent")
        except stripe.StripeError as e:
            logger.error("Stripe PaymentIntent retrieval failed: %s", e)
            raise ProviderError()

        latest_charge = getattr(intent, "latest_charge", None)
        return ProviderConfirmation(
            order_id=intent.id,
            payment_id=latest_charge if isinstance(latest_charge, str) else intent.id,
            succeeded=intent.status == "succeeded",
        )

    def parse_webhook(self, raw_body: bytes, headers: Mapping[str, str]) -> WebhookEvent:
        signature = headers.get("stripe-signature")
        if not signature or not self.webhook_secret:
            raise InvalidSignatureError("Invalid webhook signature")

        try:
            event = stripe.Webhook.construct_event(raw_body, signature, self.webhook_secret)
        except ValueError:
            raise InvalidSignatureError("Invalid payload")
        except stripe.SignatureVerificationError:
            raise InvalidSignatureError("Invalid webhook signature")

        obj = event.data.object
        if event.type == "charge.refunded":
            order_id = getattr(obj, "payment_intent", None)
            payment_id = getattr(obj, "id", None)
        else:
            order_id = getattr(obj, "id", None)
            payment_id = getattr(obj, "latest_charge", None)

        return WebhookEvent(
            kind=EVENT_KINDS.get(event.type, "ignored"),
            raw_type=event.type,
            order_id=order_id,
            payment_id=payment_id if isinstance(payment_id, str) else None,
        )
