import math
from collections import Counter, OrderedDict
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.booking import Booking
from app.models.workout import Workout
from app.schemas.booking import BookingResponse

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def current_streak(workout_days: Iterable[date], today: Optional[date] = None) -> int:
    """Consecutive workout days ending today or yesterday."""
    days = sorted(set(workout_days), reverse=True)
    cursor = today or datetime.utcnow().date()
    streak = 0
    for day in days:
        gap = (cursor - day).days
        if gap in (0, 1):
            streak += 1
            cursor = day
        elif gap > 1:
            break
    return streak


def longest_streak(workout_days: Iterable[date]) -> int:
    days = sorted(set(workout_days))
    if not days:
        return 0

    longest = current = 1
    for previous, day in zip(days, days[1:]):
        if (day - previous).days == 1:
            current += 1
            longest = max(longest, current)
        else:
            current = 1
    return longest


def _type_value(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


class AnalyticsService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _workout_days(self, user_id: int) -> List[date]:
        result = await self.db.execute(select(Workout.date).where(Workout.user_id == user_id))
        return [value.date() for value in result.scalars().all()]

    async def workout_analytics(self, user_id: int, period_days: int = 30) -> dict:
        start = datetime.utcnow() - timedelta(days=period_days)
        result = await self.db.execute(
            select(Workout)
            .where(Workout.user_id == user_id, Workout.date >= start)
            .order_by(Workout.date.asc())
        )
        workouts = result.scalars().all()

        daily: "OrderedDict[str, dict]" = OrderedDict()
        for workout in workouts:
            key = workout.date.date().isoformat()
            day = daily.setdefault(key, {"date": key, "workouts": 0, "duration": 0, "calories": 0.0, "types": set()})
            day["workouts"] += 1
            day["duration"] += workout.duration or 0
            day["calories"] += workout.total_calories or 0
            day["types"].add(_type_value(workout.type))

        time_series = [
            {
                "date": day["date"],
                "workouts": day["workouts"],
                "duration": day["duration"],
                "calories": day["calories"],
                "variety": len(day["types"]),
            }
            for day in daily.values()
        ]

        type_distribution = dict(Counter(_type_value(w.type) for w in workouts))

        weekly = []
        for index in range(math.ceil(period_days / 7)):
            week_start = start + timedelta(days=index * 7)
            week_end = week_start + timedelta(days=7)
            in_week = [w for w in workouts if week_start <= w.date < week_end]
            weekly.append({
                "week": index + 1,
                "workouts": len(in_week),
                "total_duration": sum(w.duration or 0 for w in in_week),
                "total_calories": sum(w.total_calories or 0 for w in in_week),
            })

        days = await self._workout_days(user_id)
        summary = {
            "total_workouts": len(workouts),
            "total_duration": sum(w.duration or 0 for w in workouts),
            "total_calories": sum(w.total_calories or 0 for w in workouts),
            "avg_workouts_per_week": round(len(workouts) / (period_days / 7), 1) if period_days else 0,
            "most_common_type": max(type_distribution, key=type_distribution.get) if type_distribution else None,
            "current_streak": current_streak(days),
            "longest_streak": longest_streak(days),
        }

        return {
            "summary": summary,
            "time_series": time_series,
            "weekly": weekly,
            "type_distribution": type_distribution,
            "period": period_days,
        }

    async def class_analytics(self, user_id: int, period_days: int = 30) -> dict:
        start = datetime.utcnow() - timedelta(days=period_days)
        result = await self.db.execute(
            select(Booking)
            .where(Booking.user_id == user_id, Booking.created_at >= start)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        bookings = result.scalars().all()

        by_category: dict = {}
        by_weekday = {day: 0 for day in WEEKDAYS}
        for booking in bookings:
            category = _type_value(booking.fitness_class.category) if booking.fitness_class else "other"
            by_category[category] = by_category.get(category, 0) + 1
            by_weekday[WEEKDAYS[booking.booking_date.weekday()]] += 1

        return {
            "total_classes": len(bookings),
            "by_category": by_category,
            "by_weekday": by_weekday,
            "recent": [BookingResponse.model_validate(b) for b in bookings[:5]],
        }

    async def personal_records(self, user_id: int) -> dict:
        result = await self.db.execute(
            select(
                func.count(Workout.id),
                func.coalesce(func.max(Workout.duration), 0),
                func.coalesce(func.max(Workout.total_calories), 0),
                func.coalesce(func.sum(Workout.duration), 0),
                func.coalesce(func.sum(Workout.total_calories), 0),
            ).where(Workout.user_id == user_id)
        )
        total, longest, most_calories, total_duration, total_calories = result.one()
        days = await self._workout_days(user_id)

        return {
            "longest_workout": int(longest),
            "most_calories": float(most_calories),
            "total_workouts": total,
            "total_duration": int(total_duration),
            "total_calories": float(total_calories),
            "current_streak": current_streak(days),
            "longest_streak": longest_streak(days),
        }
