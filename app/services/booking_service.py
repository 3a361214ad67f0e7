import logging
from datetime import date, datetime
from typing import Optional, List, Tuple

from sqlalchemy import select, update, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, AuthorizationError, ConflictError, CapacityError, ValidationError
from app.models.booking import Booking, BookingStatusEnum, BookingPaymentStatusEnum
from app.models.fitness_class import FitnessClass
from app.models.user import User, RoleEnum
from app.schemas.booking import BookingCreate
from app.services.gamification_service import GamificationService
from app.services.notification_service import NotificationService
from app.services.side_effects import run_post_commit

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(self, db: AsyncSession, notifier: NotificationService):
        self.db = db
        self.notifier = notifier

    async def _load(self, booking_id: int) -> Optional[Booking]:
        result = await self.db.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_booking(self, booking_id: int, user: User) -> Booking:
        booking = await self._load(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        if booking.user_id != user.id and user.role not in (RoleEnum.trainer, RoleEnum.admin):
            raise AuthorizationError("Not authorized to access this booking")
        return booking

    async def create_booking(self, user_id: int, data: BookingCreate) -> Booking:
        fitness_class = await self.db.get(FitnessClass, data.class_id, populate_existing=True)
        if fitness_class is None:
            raise NotFoundError("Class not found")
        if not fitness_class.is_active:
            raise ValidationError("Class is not available for booking")
        if data.booking_date < datetime.utcnow().date():
            raise ValidationError("Cannot book a class in the past")
        if fitness_class.current_enrollment >= fitness_class.max_capacity:
            raise CapacityError("Class is fully booked")

        existing = await self.db.execute(
            select(Booking.id).where(
                Booking.user_id == user_id,
                Booking.class_id == data.class_id,
                Booking.booking_date == data.booking_date,
                Booking.status.in_([BookingStatusEnum.confirmed, BookingStatusEnum.completed]),
            )
        )
        if existing.first() is not None:
            raise ConflictError("You have already booked this class for this date")

        # Conditional increment: concurrent bookings cannot push enrollment past capacity
        reserved = await self.db.execute(
            update(FitnessClass)
            .where(
                FitnessClass.id == data.class_id,
                FitnessClass.current_enrollment < FitnessClass.max_capacity,
            )
            .values(current_enrollment=FitnessClass.current_enrollment + 1)
            .execution_options(synchronize_session=False)
        )
        if reserved.rowcount != 1:
            await self.db.rollback()
            raise CapacityError("Class is fully booked")

        price = fitness_class.price or 0
        class_name = fitness_class.name
        booking = Booking(
            user_id=user_id,
            class_id=data.class_id,
            booking_date=data.booking_date,
            time_slot_start=data.time_slot.start if data.time_slot else None,
            time_slot_end=data.time_slot.end if data.time_slot else None,
            notes=data.notes,
            status=BookingStatusEnum.confirmed,
            payment_amount=price,
            payment_status=BookingPaymentStatusEnum.paid if price == 0 else BookingPaymentStatusEnum.pending,
        )
        self.db.add(booking)
        await self.db.commit()
        booking_id = booking.id
        logger.info("User %s booked class %s for %s", user_id, data.class_id, data.booking_date)

        await run_post_commit(self.db, [(
            "notification",
            lambda: self.notifier.create(
                user_id,
                "booking",
                "📅 Booking Confirmed",
                f'You are booked into "{class_name}" on {data.booking_date.isoformat()}.',
                {"booking_id": booking_id, "class_id": data.class_id},
            ),
        )])
        return await self._load(booking_id)

    async def cancel_booking(self, booking_id: int, user: User, reason: Optional[str] = None) -> Booking:
        booking = await self._load(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        if booking.user_id != user.id and user.role != RoleEnum.admin:
            raise AuthorizationError("Not authorized to cancel this booking")

        cancelled = await self.db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status != BookingStatusEnum.cancelled)
            .values(
                status=BookingStatusEnum.cancelled,
                cancellation_reason=reason or "",
                cancelled_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        if cancelled.rowcount != 1:
            await self.db.rollback()
            raise ConflictError("Booking already cancelled")

        await self.db.execute(
            update(FitnessClass)
            .where(FitnessClass.id == booking.class_id)
            .values(
                current_enrollment=case(
                    (FitnessClass.current_enrollment > 0, FitnessClass.current_enrollment - 1),
                    else_=0,
                )
            )
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        logger.info("Booking %s cancelled", booking_id)
        return await self._load(booking_id)

    async def complete_booking(self, booking_id: int) -> Booking:
        """Mark attendance; attended classes count towards class achievements."""
        booking = await self._load(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")

        completed = await self.db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status == BookingStatusEnum.confirmed)
            .values(status=BookingStatusEnum.completed, attended_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if completed.rowcount != 1:
            await self.db.rollback()
            raise ValidationError("Only confirmed bookings can be marked as attended")
        await self.db.commit()

        member_id = booking.user_id
        gamification = GamificationService(self.db, self.notifier)
        await run_post_commit(self.db, [
            ("achievements", lambda: gamification.check_achievements(member_id)),
        ])
        return await self._load(booking_id)

    async def list_bookings(
            self,
            user_id: int,
            status: Optional[str] = None,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            page: int = 1,
            limit: int = 20,
    ) -> Tuple[List[Booking], int]:
        query = select(Booking).where(Booking.user_id == user_id)
        if status:
            query = query.where(Booking.status == status)
        if start_date:
            query = query.where(Booking.booking_date >= start_date)
        if end_date:
            query = query.where(Booking.booking_date <= end_date)

        count = await self.db.execute(select(func.count()).select_from(query.subquery()))
        total = count.scalar_one()

        result = await self.db.execute(
            query.order_by(Booking.booking_date.desc(), Booking.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return result.scalars().all(), total

    async def booking_stats(self, user_id: int) -> dict:
        result = await self.db.execute(
            select(Booking.status, func.count(Booking.id))
            .where(Booking.user_id == user_id)
            .group_by(Booking.status)
        )
        by_status = {
            (status.value if hasattr(status, "value") else status): count
            for status, count in result.all()
        }

        upcoming = await self.db.execute(
            select(func.count(Booking.id)).where(
                Booking.user_id == user_id,
                Booking.status == BookingStatusEnum.confirmed,
                Booking.booking_date >= datetime.utcnow().date(),
            )
        )
        return {
            "total": sum(by_status.values()),
            "upcoming": upcoming.scalar_one(),
            "by_status": by_status,
        }
