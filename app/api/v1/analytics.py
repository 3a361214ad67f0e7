from fastapi import APIRouter, Depends, Query

from app.core.dependencies import get_current_user, get_analytics_service
from app.models.user import User
from app.services.analytics_service import AnalyticsService

router = APIRouter(tags=["analytics"])


@router.get("/workouts")
async def workout_analytics(
    period: int = Query(30, ge=1, le=365, description="Window in days"),
    current_user: User = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return {"success": True, "data": await service.workout_analytics(current_user.id, period)}


@router.get("/classes")
async def class_analytics(
    period: int = Query(30, ge=1, le=365, description="Window in days"),
    current_user: User = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return {"success": True, "data": await service.class_analytics(current_user.id, period)}


@router.get("/records")
async def personal_records(
    current_user: User = Depends(get_current_user),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return {"success": True, "data": await service.personal_records(current_user.id)}
