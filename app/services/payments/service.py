import calendar
import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ValidationError, PaymentNotConfiguredError
from app.models.membership import Membership
from app.models.payment import Payment, PaymentStatusEnum
from app.models.user import User, MembershipStatusEnum
from app.services.notification_service import NotificationService
from app.services.payments.base import PaymentProvider, ProviderConfirmation

logger = logging.getLogger(__name__)


def add_months(start: datetime, months: int) -> datetime:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


class PaymentService:
    def __init__(
            self,
            db: AsyncSession,
            notifier: NotificationService,
            provider: Optional[PaymentProvider] = None,
    ):
        self.db = db
        self.notifier = notifier
        self.provider = provider

    def _require_provider(self) -> PaymentProvider:
        if self.provider is None:
            raise PaymentNotConfiguredError()
        return self.provider

    async def _find_payment(
            self,
            order_id: Optional[str] = None,
            payment_id: Optional[str] = None,
    ) -> Optional[Payment]:
        if order_id:
            query = select(Payment).where(Payment.provider_order_id == order_id)
        elif payment_id:
            query = select(Payment).where(Payment.provider_payment_id == payment_id)
        else:
            return None
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def create_payment_intent(self, user_id: int, membership_id: int) -> Dict[str, Any]:
        provider = self._require_provider()
        membership = await self.db.get(Membership, membership_id)
        if membership is None or not membership.is_active:
            raise NotFoundError("Membership plan not found")

        intent = await provider.create_intent(
            membership.price,
            None,
            {"user_id": user_id, "membership_id": membership.id, "membership_name": membership.name},
        )

        payment = Payment(
            user_id=user_id,
            membership_id=membership.id,
            provider=provider.name,
            provider_order_id=intent.order_id,
            amount=membership.price,
            currency=intent.currency,
            status=PaymentStatusEnum.pending,
            description=f"{membership.name} Membership",
            payment_metadata={"membership_type": membership.type.value, "duration": membership.duration},
        )
        self.db.add(payment)
        await self.db.commit()
        logger.info("Created %s order %s for user %s", provider.name, intent.order_id, user_id)

        return {
            "payment_id": payment.id,
            "order_id": intent.order_id,
            "amount": intent.amount,
            "currency": intent.currency,
            "provider": provider.name,
            "client_data": intent.client_data,
        }

    async def _activate_membership(self, user_id: int, membership: Optional[Membership]) -> None:
        if membership is None:
            return
        user = await self.db.get(User, user_id)
        if user is None:
            return

        now = datetime.utcnow()
        user.membership_type = membership.type.value
        user.membership_status = MembershipStatusEnum.active
        user.membership_start_date = now
        user.membership_end_date = add_months(now, membership.duration)

    async def _mark_succeeded(self, payment: Payment, confirmation: ProviderConfirmation) -> bool:
        """pending -> succeeded exactly once; only the winning call extends the membership."""
        result = await self.db.execute(
            update(Payment)
            .where(Payment.id == payment.id, Payment.status == PaymentStatusEnum.pending)
            .values(
                status=PaymentStatusEnum.succeeded,
                provider_payment_id=confirmation.payment_id,
                provider_signature=confirmation.signature,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            return False

        user_id, payment_id = payment.user_id, payment.id
        await self._activate_membership(user_id, payment.membership)
        await self.db.commit()
        logger.info("Payment %s succeeded, membership activated for user %s", payment_id, user_id)

        await self.notifier.create(
            user_id,
            "payment",
            "✅ Payment Successful",
            f"Your payment for {payment.description or 'your membership'} was received.",
            {"payment_id": payment_id},
        )
        return True

    async def confirm_payment(self, user_id: int, payload: Mapping[str, Any]) -> Payment:
        provider = self._require_provider()
        confirmation = await provider.confirm(payload)

        payment = await self._find_payment(order_id=confirmation.order_id)
        if payment is None or payment.user_id != user_id:
            raise NotFoundError("Payment not found")

        if not confirmation.succeeded:
            raise ValidationError("Payment has not succeeded yet")

        payment_id = payment.id
        await self._mark_succeeded(payment, confirmation)
        return await self._reload(payment_id)

    async def _set_status(self, payment: Payment, status: PaymentStatusEnum, **values) -> bool:
        allowed_from = {
            PaymentStatusEnum.failed: [PaymentStatusEnum.pending],
            PaymentStatusEnum.refunded: [PaymentStatusEnum.succeeded, PaymentStatusEnum.pending],
        }[status]
        result = await self.db.execute(
            update(Payment)
            .where(Payment.id == payment.id, Payment.status.in_(allowed_from))
            .values(status=status, updated_at=datetime.utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount == 1

    async def handle_webhook(self, raw_body: bytes, headers: Mapping[str, str]) -> Dict[str, Any]:
        provider = self._require_provider()
        # Verification happens before anything is read or written
        event = provider.parse_webhook(raw_body, headers)

        if event.kind == "ignored":
            logger.info("Ignoring %s webhook event %s", provider.name, event.raw_type)
            return {"received": True}

        payment = await self._find_payment(order_id=event.order_id, payment_id=event.payment_id)
        if payment is None:
            logger.warning("Webhook %s for unknown order %s", event.raw_type, event.order_id)
            return {"received": True}

        if event.kind == "succeeded":
            await self._mark_succeeded(
                payment,
                ProviderConfirmation(order_id=payment.provider_order_id, payment_id=event.payment_id, succeeded=True),
            )
        elif event.kind == "failed":
            if await self._set_status(payment, PaymentStatusEnum.failed, provider_payment_id=event.payment_id):
                logger.info("Payment %s failed", payment.id)
        elif event.kind == "refunded":
            if await self._set_status(
                    payment,
                    PaymentStatusEnum.refunded,
                    refunded_at=datetime.utcnow(),
                    refund_reason="Refunded by provider",
            ):
                logger.info("Payment %s refunded", payment.id)

        return {"received": True}

    async def _reload(self, payment_id: int) -> Payment:
        result = await self.db.execute(
            select(Payment).where(Payment.id == payment_id).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def payment_history(self, user_id: int) -> List[Payment]:
        result = await self.db.execute(
            select(Payment)
            .where(Payment.user_id == user_id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
        )
        return result.scalars().all()
