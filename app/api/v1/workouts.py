from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.dependencies import get_current_user, get_workout_service
from app.models.user import User
from app.models.workout import WorkoutTypeEnum
from app.schemas.common import paginate
from app.schemas.workout import WorkoutCreate, WorkoutUpdate, WorkoutResponse
from app.services.workout_service import WorkoutService

router = APIRouter(tags=["workouts"])


@router.get("")
async def list_workouts(
    type: Optional[WorkoutTypeEnum] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None, description="Inclusive"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    service: WorkoutService = Depends(get_workout_service),
):
    workouts, total = await service.list_workouts(current_user.id, type, start_date, end_date, page, limit)
    return {
        "success": True,
        "data": {
            "workouts": [WorkoutResponse.model_validate(w) for w in workouts],
            "pagination": paginate(total, page, limit),
        },
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_workout(
    data: WorkoutCreate,
    current_user: User = Depends(get_current_user),
    service: WorkoutService = Depends(get_workout_service),
):
    """Log a workout; gamification, challenges, feed and notifications follow best-effort."""
    workout = await service.create_workout(current_user.id, data)
    return {
        "success": True,
        "message": "Workout logged successfully",
        "data": {"workout": WorkoutResponse.model_validate(workout)},
    }


@router.get("/stats")
async def workout_stats(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    current_user: User = Depends(get_current_user),
    service: WorkoutService = Depends(get_workout_service),
):
    stats = await service.workout_stats(current_user.id, start_date, end_date)
    return {"success": True, "data": stats}


@router.get("/{workout_id}")
async def get_workout(
    workout_id: int,
    current_user: User = Depends(get_current_user),
    service: WorkoutService = Depends(get_workout_service),
):
    workout = await service.get_owned(workout_id, current_user.id)
    return {"success": True, "data": {"workout": WorkoutResponse.model_validate(workout)}}


@router.put("/{workout_id}")
async def update_workout(
    workout_id: int,
    data: WorkoutUpdate,
    current_user: User = Depends(get_current_user),
    service: WorkoutService = Depends(get_workout_service),
):
    workout = await service.update_workout(workout_id, current_user.id, data)
    return {
        "success": True,
        "message": "Workout updated successfully",
        "data": {"workout": WorkoutResponse.model_validate(workout)},
    }


@router.delete("/{workout_id}")
async def delete_workout(
    workout_id: int,
    current_user: User = Depends(get_current_user),
    service: WorkoutService = Depends(get_workout_service),
):
    await service.delete_workout(workout_id, current_user.id)
    return {"success": True, "message": "Workout deleted successfully"}
