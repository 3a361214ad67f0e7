import logging
from datetime import date, datetime, timedelta
from typing import Optional, List, Dict, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.initial_achievements import INITIAL_ACHIEVEMENTS
from app.models.achievement import Achievement, UserAchievement, CriteriaTypeEnum, TIER_ORDER
from app.models.booking import Booking, BookingStatusEnum
from app.models.leaderboard import LeaderboardEntry, LeaderboardPeriodEnum
from app.models.workout import Workout
from app.services.notification_service import NotificationService
from app.services.side_effects import run_post_commit

logger = logging.getLogger(__name__)

POINTS_PER_LEVEL = 100


def level_for_points(points: int) -> int:
    return max(points, 0) // POINTS_PER_LEVEL + 1


def next_streak(
        current: int,
        longest: int,
        last_workout: Optional[date],
        workout_day: date,
) -> Tuple[int, int]:
    """
    Streak after logging a workout on ``workout_day``.

    Consecutive day extends the streak, the same day (or a backdated log)
    leaves it alone, a gap of two or more days restarts it at 1.

    Days are counted from the workout's own date, not from the time it was
    logged, so a workout entered the next morning still extends the streak.
    """
    if last_workout is None:
        return 1, max(longest, 1)

    diff = (workout_day - last_workout).days
    if diff == 1:
        current += 1
    elif diff > 1:
        current = 1
    elif current == 0:
        current = 1
    return current, max(longest, current)


def period_start(period: LeaderboardPeriodEnum, today: Optional[date] = None) -> Optional[date]:
    today = today or datetime.utcnow().date()
    if period == LeaderboardPeriodEnum.weekly:
        return today - timedelta(days=today.weekday())
    if period == LeaderboardPeriodEnum.monthly:
        return today.replace(day=1)
    return None


class GamificationService:
    def __init__(self, db: AsyncSession, notifier: NotificationService):
        self.db = db
        self.notifier = notifier

    # ------------------------------------------------------------------
    # Achievement catalog
    # ------------------------------------------------------------------

    async def list_achievements(self, category: Optional[str] = None) -> List[Achievement]:
        query = select(Achievement).where(Achievement.is_active.is_(True))
        if category:
            query = query.where(Achievement.category == category)
        result = await self.db.execute(query)
        achievements = result.scalars().all()
        return sorted(achievements, key=lambda a: (TIER_ORDER[a.tier], a.points, a.id))

    async def my_achievements(self, user_id: int) -> Tuple[List[UserAchievement], int]:
        result = await self.db.execute(
            select(UserAchievement)
            .where(UserAchievement.user_id == user_id)
            .order_by(UserAchievement.unlocked_at.desc())
        )
        unlocked = result.scalars().all()
        total_points = sum(ua.achievement.points for ua in unlocked if ua.achievement)
        return unlocked, total_points

    async def seed_achievements(self) -> int:
        """Insert or refresh the default catalog by name; user unlocks are kept."""
        result = await self.db.execute(select(Achievement))
        existing = {a.name: a for a in result.scalars().all()}

        for data in INITIAL_ACHIEVEMENTS:
            achievement = existing.get(data["name"])
            if achievement is None:
                self.db.add(Achievement(**data, is_active=True))
            else:
                for field, value in data.items():
                    setattr(achievement, field, value)
                achievement.is_active = True

        await self.db.commit()
        logger.info("Seeded %d achievements", len(INITIAL_ACHIEVEMENTS))
        return len(INITIAL_ACHIEVEMENTS)

    # ------------------------------------------------------------------
    # Leaderboard
    # ------------------------------------------------------------------

    async def _get_entry(self, user_id: int, period: LeaderboardPeriodEnum) -> Optional[LeaderboardEntry]:
        result = await self.db.execute(
            select(LeaderboardEntry)
            .where(LeaderboardEntry.user_id == user_id, LeaderboardEntry.period == period)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def ensure_entry(self, user_id: int, period: LeaderboardPeriodEnum) -> LeaderboardEntry:
        """Get-or-create the entry; weekly/monthly counters restart when their period rolls over."""
        start = period_start(period)
        entry = await self._get_entry(user_id, period)

        if entry is None:
            self.db.add(LeaderboardEntry(user_id=user_id, period=period, period_start=start))
            try:
                await self.db.commit()
            except IntegrityError:
                # Created concurrently by another request
                await self.db.rollback()
            return await self._get_entry(user_id, period)

        if start is not None and entry.period_start != start:
            await self.db.execute(
                update(LeaderboardEntry)
                .where(
                    LeaderboardEntry.id == entry.id,
                    LeaderboardEntry.period_start == entry.period_start,
                )
                .values(
                    period_start=start,
                    total_points=0,
                    total_workouts=0,
                    total_calories=0,
                    total_duration=0,
                    level=1,
                )
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            entry = await self._get_entry(user_id, period)
        return entry

    async def update_leaderboard_points(self, user_id: int, delta: int) -> LeaderboardEntry:
        """Atomically add points to every period entry; level follows in the same statement."""
        for period in LeaderboardPeriodEnum:
            entry = await self.ensure_entry(user_id, period)
            new_total = LeaderboardEntry.total_points + delta
            await self.db.execute(
                update(LeaderboardEntry)
                .where(LeaderboardEntry.id == entry.id)
                .values(
                    total_points=new_total,
                    level=new_total // POINTS_PER_LEVEL + 1,
                )
                .execution_options(synchronize_session=False)
            )
        await self.db.commit()
        return await self._get_entry(user_id, LeaderboardPeriodEnum.all_time)

    async def record_workout(
            self,
            user_id: int,
            workout_date: datetime,
            duration: int,
            calories: float,
    ) -> List[Achievement]:
        for period in LeaderboardPeriodEnum:
            entry = await self.ensure_entry(user_id, period)
            values = {
                "total_workouts": LeaderboardEntry.total_workouts + 1,
                "total_calories": LeaderboardEntry.total_calories + (calories or 0),
                "total_duration": LeaderboardEntry.total_duration + (duration or 0),
            }

            if period == LeaderboardPeriodEnum.all_time:
                last = entry.last_workout_date.date() if entry.last_workout_date else None
                current, longest = next_streak(
                    entry.current_streak or 0,
                    entry.longest_streak or 0,
                    last,
                    workout_date.date(),
                )
                values["current_streak"] = current
                values["longest_streak"] = longest

            if entry.last_workout_date is None or workout_date > entry.last_workout_date:
                values["last_workout_date"] = workout_date

            await self.db.execute(
                update(LeaderboardEntry)
                .where(LeaderboardEntry.id == entry.id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        await self.db.commit()

        await self.update_leaderboard_points(user_id, settings.WORKOUT_POINTS)
        return await self.check_achievements(user_id)

    async def get_leaderboard(
            self,
            period: LeaderboardPeriodEnum = LeaderboardPeriodEnum.all_time,
            limit: int = 50,
            caller_id: Optional[int] = None,
    ) -> Tuple[List[Tuple[int, LeaderboardEntry]], Optional[Tuple[int, LeaderboardEntry]]]:
        base = select(LeaderboardEntry).where(LeaderboardEntry.period == period)
        start = period_start(period)
        if start is not None:
            base = base.where(LeaderboardEntry.period_start == start)

        result = await self.db.execute(
            base.order_by(LeaderboardEntry.total_points.desc(), LeaderboardEntry.id.asc()).limit(limit)
            .execution_options(populate_existing=True)
        )
        ranked = [(index + 1, entry) for index, entry in enumerate(result.scalars().all())]

        caller = None
        if caller_id is not None:
            result = await self.db.execute(
                base.where(LeaderboardEntry.user_id == caller_id).execution_options(populate_existing=True)
            )
            entry = result.scalar_one_or_none()
            if entry is not None:
                higher = await self.db.execute(
                    select(func.count(LeaderboardEntry.id)).where(
                        LeaderboardEntry.period == period,
                        LeaderboardEntry.total_points > entry.total_points,
                        *([LeaderboardEntry.period_start == start] if start is not None else []),
                    )
                )
                caller = (higher.scalar_one() + 1, entry)
        return ranked, caller

    # ------------------------------------------------------------------
    # Achievement evaluation
    # ------------------------------------------------------------------

    async def _criteria_value(self, user_id: int, criteria: CriteriaTypeEnum, cache: Dict) -> float:
        if criteria in cache:
            return cache[criteria]

        if criteria == CriteriaTypeEnum.workout_count:
            query = select(func.count(Workout.id)).where(Workout.user_id == user_id)
        elif criteria == CriteriaTypeEnum.calories_burned:
            query = select(func.coalesce(func.sum(Workout.total_calories), 0)).where(Workout.user_id == user_id)
        elif criteria == CriteriaTypeEnum.duration:
            query = select(func.coalesce(func.sum(Workout.duration), 0)).where(Workout.user_id == user_id)
        elif criteria == CriteriaTypeEnum.class_attendance:
            query = select(func.count(Booking.id)).where(
                Booking.user_id == user_id,
                Booking.status == BookingStatusEnum.completed,
            )
        else:
            query = select(LeaderboardEntry.current_streak).where(
                LeaderboardEntry.user_id == user_id,
                LeaderboardEntry.period == LeaderboardPeriodEnum.all_time,
            )

        result = await self.db.execute(query)
        value = float(result.scalar() or 0)
        cache[criteria] = value
        return value

    async def check_achievements(self, user_id: int) -> List[Achievement]:
        """Unlock every active rule the user now satisfies; each unlock happens once."""
        already_unlocked = select(UserAchievement.achievement_id).where(UserAchievement.user_id == user_id)
        result = await self.db.execute(
            select(Achievement).where(
                Achievement.is_active.is_(True),
                Achievement.id.not_in(already_unlocked),
            ).order_by(Achievement.id)
        )
        # Plain tuples: a rollback below expires ORM instances
        candidates = [
            (a.id, a.name, a.points, a.criteria_type, a.criteria_target)
            for a in result.scalars().all()
        ]

        cache: Dict = {}
        unlocked_ids = []
        for achievement_id, name, points, criteria_type, target in candidates:
            value = await self._criteria_value(user_id, criteria_type, cache)
            if value < target:
                continue

            self.db.add(UserAchievement(
                user_id=user_id,
                achievement_id=achievement_id,
                progress=target,
            ))
            try:
                await self.db.commit()
            except IntegrityError:
                # Unlocked by a concurrent check
                await self.db.rollback()
                continue

            unlocked_ids.append(achievement_id)
            logger.info("User %s unlocked achievement %s", user_id, name)

            # Points before the notification: the unlock row is already final
            await self.update_leaderboard_points(user_id, points)
            await run_post_commit(self.db, [(
                "achievement notification",
                lambda: self.notifier.create(
                    user_id,
                    "achievement",
                    "🏆 Achievement Unlocked!",
                    f'Congratulations! You\'ve earned the "{name}" badge!',
                    {"achievement_id": achievement_id, "points": points},
                ),
            )])

        if not unlocked_ids:
            return []
        result = await self.db.execute(
            select(Achievement)
            .where(Achievement.id.in_(unlocked_ids))
            .order_by(Achievement.id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().all()
