import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional, List, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, AuthorizationError
from app.models.workout import Workout, WorkoutExercise
from app.schemas.workout import WorkoutCreate, WorkoutUpdate, ExerciseInput
from app.services.challenge_service import ChallengeService
from app.services.gamification_service import GamificationService
from app.services.notification_service import NotificationService
from app.services.side_effects import run_post_commit
from app.services.social_service import SocialService, is_significant_workout

logger = logging.getLogger(__name__)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Columns store naive UTC; aware input is converted first."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def date_range_filters(column, start: Optional[date], end: Optional[date]) -> list:
    """Inclusive [start, end] calendar-day filter on a datetime column."""
    filters = []
    if start is not None:
        filters.append(column >= datetime.combine(start, datetime.min.time()))
    if end is not None:
        filters.append(column < datetime.combine(end + timedelta(days=1), datetime.min.time()))
    return filters


def build_exercises(items: List[ExerciseInput]) -> List[WorkoutExercise]:
    return [WorkoutExercise(**item.model_dump()) for item in items]


def sum_exercise_calories(items: List[ExerciseInput]) -> float:
    return float(sum(item.calories or 0 for item in items))


class WorkoutService:
    def __init__(self, db: AsyncSession, notifier: NotificationService):
        self.db = db
        self.notifier = notifier

    async def _load(self, workout_id: int) -> Optional[Workout]:
        result = await self.db.execute(
            select(Workout)
            .where(Workout.id == workout_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_owned(self, workout_id: int, user_id: int) -> Workout:
        workout = await self._load(workout_id)
        if workout is None:
            raise NotFoundError("Workout not found")
        if workout.user_id != user_id:
            raise AuthorizationError("Not authorized to access this workout")
        return workout

    async def create_workout(self, user_id: int, data: WorkoutCreate) -> Workout:
        total_calories = data.total_calories
        if total_calories is None:
            total_calories = sum_exercise_calories(data.exercises)

        workout = Workout(
            user_id=user_id,
            title=data.title,
            type=data.type,
            duration=data.duration,
            date=to_naive_utc(data.date) or datetime.utcnow(),
            total_calories=total_calories,
            feeling=data.feeling,
            notes=data.notes,
            is_completed=data.is_completed,
            exercises=build_exercises(data.exercises),
        )
        self.db.add(workout)
        await self.db.commit()

        # Snapshot: the side effects may roll the session back and expire instances
        workout_id, title = workout.id, workout.title
        workout_date, duration = workout.date, workout.duration
        logger.info("User %s logged workout %s", user_id, workout_id)

        gamification = GamificationService(self.db, self.notifier)
        challenges = ChallengeService(self.db, self.notifier)
        social = SocialService(self.db, self.notifier)

        tasks = [
            ("leaderboard", lambda: gamification.record_workout(user_id, workout_date, duration, total_calories)),
            ("challenges", lambda: challenges.refresh_progress_for_workout(user_id)),
        ]
        if data.share_workout and is_significant_workout(duration, total_calories):
            tasks.append(("social post", lambda: social.create_workout_post(user_id, workout_id, title)))
        tasks.append((
            "notification",
            lambda: self.notifier.create(
                user_id,
                "workout_milestone",
                "💪 Workout Completed!",
                f'Great job! You completed "{title}" and burned {total_calories:g} calories.',
                {"workout_id": workout_id},
            ),
        ))
        await run_post_commit(self.db, tasks)

        return await self._load(workout_id)

    async def list_workouts(
            self,
            user_id: int,
            type: Optional[str] = None,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            page: int = 1,
            limit: int = 20,
    ) -> Tuple[List[Workout], int]:
        query = select(Workout).where(Workout.user_id == user_id, *date_range_filters(Workout.date, start_date, end_date))
        if type:
            query = query.where(Workout.type == type)

        count = await self.db.execute(select(func.count()).select_from(query.subquery()))
        total = count.scalar_one()

        result = await self.db.execute(
            query.order_by(Workout.date.desc(), Workout.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return result.scalars().all(), total

    async def update_workout(self, workout_id: int, user_id: int, data: WorkoutUpdate) -> Workout:
        workout = await self.get_owned(workout_id, user_id)
        updates = data.model_dump(exclude_unset=True, exclude={"exercises"})

        if "date" in updates:
            updates["date"] = to_naive_utc(updates["date"]) or workout.date
        for field, value in updates.items():
            if value is None and field in ("title", "type", "duration", "total_calories", "is_completed"):
                continue
            setattr(workout, field, value)

        if data.exercises is not None:
            workout.exercises = build_exercises(data.exercises)
            if data.total_calories is None:
                workout.total_calories = sum_exercise_calories(data.exercises)

        await self.db.commit()
        return await self._load(workout_id)

    async def delete_workout(self, workout_id: int, user_id: int) -> None:
        workout = await self.get_owned(workout_id, user_id)
        await self.db.delete(workout)
        await self.db.commit()

    async def workout_stats(
            self,
            user_id: int,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
    ) -> dict:
        filters = [Workout.user_id == user_id, *date_range_filters(Workout.date, start_date, end_date)]

        result = await self.db.execute(
            select(
                Workout.type,
                func.count(Workout.id),
                func.coalesce(func.sum(Workout.duration), 0),
                func.coalesce(func.sum(Workout.total_calories), 0),
            )
            .where(*filters)
            .group_by(Workout.type)
        )
        by_type = [
            {
                "type": row[0].value if hasattr(row[0], "value") else row[0],
                "count": row[1],
                "total_duration": int(row[2]),
                "total_calories": float(row[3]),
            }
            for row in result.all()
        ]

        result = await self.db.execute(
            select(
                func.count(Workout.id),
                func.coalesce(func.sum(Workout.duration), 0),
                func.coalesce(func.sum(Workout.total_calories), 0),
                func.avg(Workout.duration),
            ).where(*filters)
        )
        total, total_duration, total_calories, avg_duration = result.one()

        return {
            "total_workouts": total,
            "by_type": by_type,
            "overall": {
                "total_duration": int(total_duration or 0),
                "total_calories": float(total_calories or 0),
                "avg_duration": round(float(avg_duration or 0), 1),
            },
        }
