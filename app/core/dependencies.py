from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import HTTPConnection

from app.core.db import get_db
from app.core.config import settings
from app.core.exceptions import AuthenticationError
from app.core.realtime import ConnectionManager
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.analytics_service import AnalyticsService
from app.services.booking_service import BookingService
from app.services.challenge_service import ChallengeService
from app.services.class_service import ClassService
from app.services.gamification_service import GamificationService
from app.services.notification_service import NotificationService
from app.services.payments import PaymentProvider, PaymentService, get_payment_provider
from app.services.recommendation_service import RecommendationService
from app.services.social_service import SocialService
from app.services.workout_service import WorkoutService


# auto_error=False: a missing header must be a 401, not FastAPI's default 403
security = HTTPBearer(auto_error=False)


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    """Repository factory, injected into endpoints through Depends."""
    return UserRepository(db)


async def resolve_user_from_token(token: Optional[str], repo: UserRepository) -> User:
    """Decode an access token and load its active user, or raise AuthenticationError."""
    if not token:
        raise AuthenticationError("Not authorized, no token")

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        user_id = payload.get("sub")
        if user_id is None:
            raise AuthenticationError("Not authorized, token invalid")
        user_id = int(user_id)
    except (JWTError, ValueError):
        raise AuthenticationError("Not authorized, token invalid")

    user = await repo.get_by_id(user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("Not authorized, user not found")

    return user


async def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
        repo: UserRepository = Depends(get_user_repository),
) -> User:
    return await resolve_user_from_token(credentials.credentials if credentials else None, repo)


def get_connection_manager(connection: HTTPConnection) -> ConnectionManager:
    return connection.app.state.connection_manager


def get_notification_service(
        db: AsyncSession = Depends(get_db),
        manager: ConnectionManager = Depends(get_connection_manager),
) -> NotificationService:
    return NotificationService(db, manager)


def get_workout_service(
        db: AsyncSession = Depends(get_db),
        notifier: NotificationService = Depends(get_notification_service),
) -> WorkoutService:
    return WorkoutService(db, notifier)


def get_class_service(db: AsyncSession = Depends(get_db)) -> ClassService:
    return ClassService(db)


def get_booking_service(
        db: AsyncSession = Depends(get_db),
        notifier: NotificationService = Depends(get_notification_service),
) -> BookingService:
    return BookingService(db, notifier)


def get_gamification_service(
        db: AsyncSession = Depends(get_db),
        notifier: NotificationService = Depends(get_notification_service),
) -> GamificationService:
    return GamificationService(db, notifier)


def get_challenge_service(
        db: AsyncSession = Depends(get_db),
        notifier: NotificationService = Depends(get_notification_service),
) -> ChallengeService:
    return ChallengeService(db, notifier)


def get_social_service(
        db: AsyncSession = Depends(get_db),
        notifier: NotificationService = Depends(get_notification_service),
) -> SocialService:
    return SocialService(db, notifier)


def get_analytics_service(db: AsyncSession = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)


def get_recommendation_service(db: AsyncSession = Depends(get_db)) -> RecommendationService:
    return RecommendationService(db)


def get_payment_service(
        db: AsyncSession = Depends(get_db),
        notifier: NotificationService = Depends(get_notification_service),
) -> PaymentService:
    """Payment service without a provider, for read-only routes."""
    return PaymentService(db, notifier)


def get_checkout_service(
        db: AsyncSession = Depends(get_db),
        notifier: NotificationService = Depends(get_notification_service),
        provider: PaymentProvider = Depends(get_payment_provider),
) -> PaymentService:
    return PaymentService(db, notifier, provider)
