from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.dependencies import get_current_user, get_recommendation_service
from app.core.rbac import require_staff
from app.models.exercise_library import ExerciseCategoryEnum
from app.models.fitness_class import DifficultyEnum
from app.models.user import User
from app.schemas.exercise import ExerciseCreate, ExerciseLibraryResponse, Recommendation
from app.services.recommendation_service import RecommendationService

router = APIRouter(tags=["ai"])


@router.get("/recommendations")
async def recommendations(
    current_user: User = Depends(get_current_user),
    service: RecommendationService = Depends(get_recommendation_service),
):
    """Top exercises for the caller's goals, level and recent history."""
    result = await service.recommend(current_user)
    return {
        "success": True,
        "data": {
            "recommendations": [
                Recommendation(
                    exercise=ExerciseLibraryResponse.model_validate(item["exercise"]),
                    score=item["score"],
                    reason=item["reason"],
                )
                for item in result["recommendations"]
            ],
            "user_profile": result["user_profile"],
        },
    }


@router.get("/exercises")
async def list_exercises(
    category: Optional[ExerciseCategoryEnum] = Query(None),
    difficulty: Optional[DifficultyEnum] = Query(None),
    muscle_group: Optional[str] = Query(None),
    equipment: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: RecommendationService = Depends(get_recommendation_service),
):
    exercises = await service.list_exercises(category, difficulty, muscle_group, equipment)
    return {
        "success": True,
        "data": {
            "exercises": [ExerciseLibraryResponse.model_validate(e) for e in exercises],
            "count": len(exercises),
        },
    }


@router.post("/exercises", status_code=status.HTTP_201_CREATED)
async def create_exercise(
    data: ExerciseCreate,
    current_user: User = Depends(require_staff),
    service: RecommendationService = Depends(get_recommendation_service),
):
    exercise = await service.create_exercise(data)
    return {
        "success": True,
        "message": "Exercise added to library",
        "data": {"exercise": ExerciseLibraryResponse.model_validate(exercise)},
    }


@router.post("/exercises/seed")
async def seed_exercises(
    current_user: User = Depends(get_current_user),
    service: RecommendationService = Depends(get_recommendation_service),
):
    count = await service.seed_exercises(current_user)
    return {"success": True, "message": f"Seeded {count} exercises", "data": {"count": count}}
