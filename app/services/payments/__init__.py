import logging

from app.core.config import settings
from app.core.exceptions import PaymentNotConfiguredError
from app.services.payments.base import PaymentProvider, ProviderIntent, ProviderConfirmation, WebhookEvent
from app.services.payments.razorpay_provider import RazorpayProvider
from app.services.payments.service import PaymentService, add_months
from app.services.payments.stripe_provider import StripeProvider

logger = logging.getLogger(__name__)

_warned = set()


def is_configured(value) -> bool:
    """Placeholder values from example env files count as missing."""
    return bool(value) and not str(value).startswith("your_")


def get_payment_provider() -> PaymentProvider:
    """Adapter selected by PAYMENT_PROVIDER; missing credentials are a 503, never a crash."""
    provider = settings.PAYMENT_PROVIDER.lower()

    if provider == "stripe":
        if is_configured(settings.STRIPE_SECRET_KEY):
            return StripeProvider(
                settings.STRIPE_SECRET_KEY,
                settings.STRIPE_WEBHOOK_SECRET,
                settings.STRIPE_CURRENCY,
            )
    elif provider == "razorpay":
        if is_configured(settings.RAZORPAY_KEY_ID) and is_configured(settings.RAZORPAY_KEY_SECRET):
            return RazorpayProvider(
                settings.RAZORPAY_KEY_ID,
                settings.RAZORPAY_KEY_SECRET,
                settings.RAZORPAY_WEBHOOK_SECRET,
                settings.RAZORPAY_CURRENCY,
                settings.RAZORPAY_API_URL,
            )
    else:
        logger.warning("Unknown PAYMENT_PROVIDER %r", settings.PAYMENT_PROVIDER)
        raise PaymentNotConfiguredError()

    if provider not in _warned:
        _warned.add(provider)
        logger.warning("Payment provider %s selected but credentials are missing", provider)
    raise PaymentNotConfiguredError()


__all__ = [
    "PaymentProvider",
    "ProviderIntent",
    "ProviderConfirmation",
    "WebhookEvent",
    "StripeProvider",
    "RazorpayProvider",
    "PaymentService",
    "add_months",
    "get_payment_provider",
]
