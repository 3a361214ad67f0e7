from fastapi import APIRouter
from app.api.v1.auth import router as auth_router
from app.api.v1.users import router as users_router
from app.api.v1.workouts import router as workouts_router
from app.api.v1.classes import router as classes_router
from app.api.v1.bookings import router as bookings_router
from app.api.v1.memberships import router as memberships_router
from app.api.v1.payments import router as payments_router
from app.api.v1.gamification import router as gamification_router
from app.api.v1.challenges import router as challenges_router
from app.api.v1.social import router as social_router
from app.api.v1.notifications import router as notifications_router
from app.api.v1.analytics import router as analytics_router
from app.api.v1.ai import router as ai_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(users_router, prefix="/users", tags=["users"])
api_router.include_router(workouts_router, prefix="/workouts", tags=["workouts"])
api_router.include_router(classes_router, prefix="/classes", tags=["classes"])
api_router.include_router(bookings_router, prefix="/bookings", tags=["bookings"])
api_router.include_router(memberships_router, prefix="/memberships", tags=["memberships"])
api_router.include_router(payments_router, prefix="/payments", tags=["payments"])
api_router.include_router(gamification_router, prefix="/gamification", tags=["gamification"])
api_router.include_router(challenges_router, prefix="/challenges", tags=["challenges"])
api_router.include_router(social_router, prefix="/social", tags=["social"])
api_router.include_router(notifications_router, prefix="/notifications", tags=["notifications"])
api_router.include_router(analytics_router, prefix="/analytics", tags=["analytics"])
api_router.include_router(ai_router, prefix="/ai", tags=["ai"])
