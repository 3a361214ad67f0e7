from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.dependencies import get_current_user, get_gamification_service
from app.core.rbac import require_admin
from app.models.achievement import AchievementCategoryEnum
from app.models.leaderboard import LeaderboardEntry, LeaderboardPeriodEnum
from app.models.user import User
from app.schemas.gamification import AchievementResponse, UserAchievementResponse, LeaderboardEntryResponse
from app.schemas.user import UserSummary
from app.services.gamification_service import GamificationService

router = APIRouter(tags=["gamification"])


def _entry_response(rank: int, entry: LeaderboardEntry) -> LeaderboardEntryResponse:
    return LeaderboardEntryResponse(
        rank=rank,
        user=UserSummary.model_validate(entry.user),
        period=entry.period,
        total_points=entry.total_points,
        total_workouts=entry.total_workouts,
        total_calories=entry.total_calories,
        total_duration=entry.total_duration,
        current_streak=entry.current_streak,
        longest_streak=entry.longest_streak,
        level=entry.level,
        last_workout_date=entry.last_workout_date,
    )


@router.get("/achievements")
async def list_achievements(
    category: Optional[AchievementCategoryEnum] = Query(None),
    current_user: User = Depends(get_current_user),
    service: GamificationService = Depends(get_gamification_service),
):
    achievements = await service.list_achievements(category)
    return {"success": True, "data": {"achievements": [AchievementResponse.model_validate(a) for a in achievements]}}


@router.get("/achievements/me")
async def my_achievements(
    current_user: User = Depends(get_current_user),
    service: GamificationService = Depends(get_gamification_service),
):
    unlocked, total_points = await service.my_achievements(current_user.id)
    return {
        "success": True,
        "data": {
            "achievements": [UserAchievementResponse.model_validate(ua) for ua in unlocked],
            "total_points": total_points,
            "count": len(unlocked),
        },
    }


@router.post("/achievements/seed")
async def seed_achievements(
    current_user: User = Depends(require_admin),
    service: GamificationService = Depends(get_gamification_service),
):
    count = await service.seed_achievements()
    return {"success": True, "message": f"Seeded {count} achievements", "data": {"count": count}}


@router.get("/leaderboard")
async def leaderboard(
    period: LeaderboardPeriodEnum = Query(LeaderboardPeriodEnum.all_time),
    limit: int = Query(50, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    service: GamificationService = Depends(get_gamification_service),
):
    """Top entries for the period, plus the caller's own position when ranked."""
    ranked, caller = await service.get_leaderboard(period, limit, caller_id=current_user.id)
    return {
        "success": True,
        "data": {
            "period": period,
            "leaderboard": [_entry_response(rank, entry) for rank, entry in ranked],
            "user_rank": _entry_response(*caller) if caller else None,
        },
    }
