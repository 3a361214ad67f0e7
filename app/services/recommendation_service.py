import logging
import random
from collections import Counter
from typing import Optional, List

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError
from app.core.initial_exercises import INITIAL_EXERCISES
from app.models.exercise_library import ExerciseLibrary
from app.models.user import User, RoleEnum
from app.models.workout import Workout
from app.schemas.exercise import ExerciseCreate

logger = logging.getLogger(__name__)

# Fitness goal -> exercise category it favours, checked in this order
GOAL_CATEGORIES = [
    ("weight-loss", "cardio"),
    ("muscle-gain", "strength"),
    ("flexibility", "flexibility"),
]

CANDIDATE_LIMIT = 10
RECOMMENDATION_COUNT = 5
HISTORY_SIZE = 20


def _value(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


def goal_category(goals: List[str]) -> Optional[str]:
    for goal, category in GOAL_CATEGORIES:
        if goal in goals:
            return category
    return None


def score_exercise(
        exercise: ExerciseLibrary,
        goals: List[str],
        level: str,
        recent_names: set,
        rng: random.Random,
) -> float:
    score = 0.0
    category = _value(exercise.category)
    if any(goal in goals and category == goal_cat for goal, goal_cat in GOAL_CATEGORIES):
        score += 30
    if _value(exercise.difficulty) == level:
        score += 20
    if exercise.name not in recent_names:
        score += 20
    # Jitter keeps repeated requests from always returning the same list
    score += rng.random() * 10
    return score


def recommendation_reason(exercise: ExerciseLibrary, goals: List[str], level: str) -> str:
    reasons = []
    category = _value(exercise.category)
    if _value(exercise.difficulty) == level:
        reasons.append("Matches your fitness level")
    if "weight-loss" in goals and category == "cardio":
        reasons.append("Great for burning calories")
    if "muscle-gain" in goals and category == "strength":
        reasons.append("Perfect for building muscle")
    if "flexibility" in goals and category == "flexibility":
        reasons.append("Improves your flexibility")
    if "none" in (exercise.equipment or []):
        reasons.append("No equipment needed")
    return ", ".join(reasons) if reasons else "Recommended for variety"


class RecommendationService:
    def __init__(self, db: AsyncSession, rng: Optional[random.Random] = None):
        self.db = db
        self.rng = rng or random.Random()

    async def list_exercises(
            self,
            category: Optional[str] = None,
            difficulty: Optional[str] = None,
            muscle_group: Optional[str] = None,
            equipment: Optional[str] = None,
    ) -> List[ExerciseLibrary]:
        query = select(ExerciseLibrary).where(ExerciseLibrary.is_approved.is_(True))
        if category:
            query = query.where(ExerciseLibrary.category == category)
        if difficulty:
            query = query.where(ExerciseLibrary.difficulty == difficulty)

        result = await self.db.execute(query.order_by(ExerciseLibrary.name))
        exercises = result.scalars().all()

        # JSON list membership is filtered in Python to stay portable across backends
        if muscle_group:
            exercises = [e for e in exercises if muscle_group in (e.muscle_groups or [])]
        if equipment:
            exercises = [e for e in exercises if equipment in (e.equipment or [])]
        return exercises

    async def create_exercise(self, data: ExerciseCreate) -> ExerciseLibrary:
        exercise = ExerciseLibrary(**data.model_dump(), is_approved=True)
        self.db.add(exercise)
        await self.db.commit()
        return exercise

    async def seed_exercises(self, user: User) -> int:
        """Replace the library with the starter set. Only admins may re-seed a non-empty library."""
        count = await self.db.execute(select(func.count(ExerciseLibrary.id)))
        if count.scalar_one() > 0 and user.role != RoleEnum.admin:
            raise AuthorizationError("Exercise library already seeded. Admin access required to re-seed.")

        await self.db.execute(delete(ExerciseLibrary))
        self.db.add_all([ExerciseLibrary(**data, is_approved=True) for data in INITIAL_EXERCISES])
        await self.db.commit()
        logger.info("Seeded %d exercises", len(INITIAL_EXERCISES))
        return len(INITIAL_EXERCISES)

    async def recommend(self, user: User) -> dict:
        level = _value(user.fitness_level) if user.fitness_level else "beginner"
        goals = list(user.fitness_goals or [])

        result = await self.db.execute(
            select(Workout)
            .where(Workout.user_id == user.id)
            .order_by(Workout.date.desc())
            .limit(HISTORY_SIZE)
        )
        history = result.scalars().all()
        recent_names = {exercise.name for workout in history for exercise in workout.exercises}
        type_counts = Counter(_value(w.type) for w in history)
        preferred_type = type_counts.most_common(1)[0][0] if type_counts else "strength"

        base = select(ExerciseLibrary).where(
            ExerciseLibrary.is_approved.is_(True),
            ExerciseLibrary.difficulty == level,
        )
        candidates = []
        category = goal_category(goals)
        if category:
            result = await self.db.execute(
                base.where(ExerciseLibrary.category == category).order_by(ExerciseLibrary.id).limit(CANDIDATE_LIMIT)
            )
            candidates = list(result.scalars().all())

        if len(candidates) < RECOMMENDATION_COUNT:
            seen = {e.id for e in candidates}
            result = await self.db.execute(base.order_by(ExerciseLibrary.id).limit(CANDIDATE_LIMIT))
            candidates += [e for e in result.scalars().all() if e.id not in seen]
            candidates = candidates[:CANDIDATE_LIMIT]

        scored = [
            {
                "exercise": exercise,
                "score": round(score_exercise(exercise, goals, level, recent_names, self.rng), 2),
                "reason": recommendation_reason(exercise, goals, level),
            }
            for exercise in candidates
        ]
        scored.sort(key=lambda item: item["score"], reverse=True)

        return {
            "recommendations": scored[:RECOMMENDATION_COUNT],
            "user_profile": {"level": level, "goals": goals, "preferred_type": preferred_type},
        }
