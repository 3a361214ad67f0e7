import logging
from datetime import datetime
from typing import Optional, List, Tuple

from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError, ConflictError, CapacityError, ValidationError
from app.models.challenge import Challenge, ChallengeParticipant, ChallengeCategoryEnum
from app.models.workout import Workout
from app.schemas.challenge import ChallengeCreate
from app.services.gamification_service import GamificationService
from app.services.notification_service import NotificationService
from app.services.side_effects import run_post_commit

logger = logging.getLogger(__name__)

CHALLENGE_STATUSES = ("active", "upcoming", "completed", "all")


def completion_percentage(progress: float, target: float) -> float:
    if not target:
        return 0.0
    return round(min(progress / target * 100, 100.0), 1)


class ChallengeService:
    def __init__(self, db: AsyncSession, notifier: NotificationService):
        self.db = db
        self.notifier = notifier
        self.gamification = GamificationService(db, notifier)

    async def _participant_counts(self, challenge_ids: List[int]) -> dict:
        if not challenge_ids:
            return {}
        result = await self.db.execute(
            select(ChallengeParticipant.challenge_id, func.count(ChallengeParticipant.id))
            .where(ChallengeParticipant.challenge_id.in_(challenge_ids))
            .group_by(ChallengeParticipant.challenge_id)
        )
        return dict(result.all())

    async def list_challenges(
            self,
            status: str = "active",
            type: Optional[str] = None,
    ) -> List[Tuple[Challenge, int]]:
        if status not in CHALLENGE_STATUSES:
            raise ValidationError(f"Invalid status: {status}")

        now = datetime.utcnow()
        query = select(Challenge).where(Challenge.is_active.is_(True))
        if status == "active":
            query = query.where(Challenge.start_date <= now, Challenge.end_date >= now)
        elif status == "upcoming":
            query = query.where(Challenge.start_date > now)
        elif status == "completed":
            query = query.where(Challenge.end_date < now)
        if type:
            query = query.where(Challenge.type == type)

        result = await self.db.execute(query.order_by(Challenge.start_date.desc(), Challenge.id.desc()))
        challenges = result.scalars().all()
        counts = await self._participant_counts([c.id for c in challenges])
        return [(c, counts.get(c.id, 0)) for c in challenges]

    async def get_challenge(self, challenge_id: int) -> Challenge:
        result = await self.db.execute(
            select(Challenge)
            .where(Challenge.id == challenge_id)
            .execution_options(populate_existing=True)
        )
        challenge = result.scalar_one_or_none()
        if challenge is None:
            raise NotFoundError("Challenge not found")
        return challenge

    async def create_challenge(self, user_id: int, data: ChallengeCreate) -> Challenge:
        challenge = Challenge(
            **data.model_dump(),
            created_by=user_id,
            is_active=True,
        )
        self.db.add(challenge)
        await self.db.commit()
        logger.info("User %s created challenge %s", user_id, challenge.id)
        return await self.get_challenge(challenge.id)

    async def join_challenge(self, challenge_id: int, user_id: int) -> ChallengeParticipant:
        challenge = await self.get_challenge(challenge_id)
        if not challenge.is_active or challenge.end_date < datetime.utcnow():
            raise ValidationError("Challenge has ended")

        existing = await self.db.execute(
            select(ChallengeParticipant.id).where(
                ChallengeParticipant.challenge_id == challenge_id,
                ChallengeParticipant.user_id == user_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("Already joined this challenge")

        if challenge.max_participants:
            count = await self.db.execute(
                select(func.count(ChallengeParticipant.id)).where(
                    ChallengeParticipant.challenge_id == challenge_id
                )
            )
            if count.scalar_one() >= challenge.max_participants:
                raise CapacityError("Challenge is full")

        name = challenge.name
        participant = ChallengeParticipant(challenge_id=challenge_id, user_id=user_id, progress=0)
        self.db.add(participant)
        try:
            await self.db.flush()
            await self._rerank(challenge_id)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Already joined this challenge")

        await self.notifier.create(
            user_id,
            "challenge",
            "🎯 Challenge Joined!",
            f'You\'ve joined "{name}". Good luck!',
            {"challenge_id": challenge_id},
        )
        return participant

    async def _rerank(self, challenge_id: int) -> None:
        result = await self.db.execute(
            select(ChallengeParticipant)
            .where(ChallengeParticipant.challenge_id == challenge_id)
            .order_by(
                ChallengeParticipant.progress.desc(),
                ChallengeParticipant.joined_at.asc(),
                ChallengeParticipant.id.asc(),
            )
        )
        for index, participant in enumerate(result.scalars().all()):
            participant.rank = index + 1

    async def update_progress(self, challenge_id: int, user_id: int, progress: float) -> ChallengeParticipant:
        """
        Set a participant's progress and re-rank the challenge.

        Reaching the goal stamps ``completed_at`` through a conditional update,
        so the reward and notification happen exactly once per participant.
        """
        challenge = await self.get_challenge(challenge_id)
        name, target, reward = challenge.name, challenge.goal_target, challenge.reward_points

        result = await self.db.execute(
            select(ChallengeParticipant).where(
                ChallengeParticipant.challenge_id == challenge_id,
                ChallengeParticipant.user_id == user_id,
            )
        )
        participant = result.scalar_one_or_none()
        if participant is None:
            raise NotFoundError("Not participating in this challenge")

        participant_id = participant.id
        participant.progress = progress
        await self.db.flush()
        await self._rerank(challenge_id)
        await self.db.commit()

        if progress >= target:
            stamped = await self.db.execute(
                update(ChallengeParticipant)
                .where(
                    ChallengeParticipant.id == participant_id,
                    ChallengeParticipant.completed_at.is_(None),
                )
                .values(completed_at=datetime.utcnow())
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()

            if stamped.rowcount == 1:
                logger.info("User %s completed challenge %s", user_id, challenge_id)
                # Reward first: completed_at is already final
                if reward:
                    await self.gamification.update_leaderboard_points(user_id, reward)
                await run_post_commit(self.db, [(
                    "challenge completion notification",
                    lambda: self.notifier.create(
                        user_id,
                        "challenge",
                        "🎉 Challenge Complete!",
                        f'Congratulations! You\'ve completed "{name}"!',
                        {"challenge_id": challenge_id, "points": reward},
                    ),
                )])

        result = await self.db.execute(
            select(ChallengeParticipant)
            .where(ChallengeParticipant.id == participant_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def _window_progress(self, user_id: int, challenge: Challenge, now: datetime) -> Optional[float]:
        window = (
            Workout.user_id == user_id,
            Workout.date >= challenge.start_date,
            Workout.date <= now,
        )
        if challenge.category == ChallengeCategoryEnum.calories:
            query = select(func.coalesce(func.sum(Workout.total_calories), 0)).where(*window)
        elif challenge.category == ChallengeCategoryEnum.workouts:
            query = select(func.count(Workout.id)).where(*window)
        elif challenge.category == ChallengeCategoryEnum.duration:
            query = select(func.coalesce(func.sum(Workout.duration), 0)).where(*window)
        else:
            # steps, distance and custom are reported by the client
            return None
        result = await self.db.execute(query)
        return float(result.scalar() or 0)

    async def refresh_progress_for_workout(self, user_id: int) -> int:
        """Recompute progress of every running challenge the user takes part in."""
        now = datetime.utcnow()
        result = await self.db.execute(
            select(Challenge)
            .join(ChallengeParticipant, ChallengeParticipant.challenge_id == Challenge.id)
            .where(
                ChallengeParticipant.user_id == user_id,
                Challenge.is_active.is_(True),
                Challenge.start_date <= now,
                Challenge.end_date >= now,
            )
        )
        challenges = [(c.id, c) for c in result.scalars().all()]

        updated = 0
        for challenge_id, challenge in challenges:
            progress = await self._window_progress(user_id, challenge, now)
            if progress is None:
                continue
            await self.update_progress(challenge_id, user_id, progress)
            updated += 1
        return updated

    async def my_challenges(self, user_id: int) -> List[Tuple[Challenge, ChallengeParticipant, int]]:
        result = await self.db.execute(
            select(ChallengeParticipant)
            .where(ChallengeParticipant.user_id == user_id)
            .order_by(ChallengeParticipant.joined_at.desc())
        )
        participations = result.scalars().all()
        if not participations:
            return []

        ids = [p.challenge_id for p in participations]
        result = await self.db.execute(select(Challenge).where(Challenge.id.in_(ids)))
        challenges = {c.id: c for c in result.scalars().all()}
        counts = await self._participant_counts(ids)
        return [(challenges[p.challenge_id], p, counts.get(p.challenge_id, 0)) for p in participations]

    async def challenge_leaderboard(self, challenge_id: int) -> Tuple[Challenge, List[dict]]:
        challenge = await self.get_challenge(challenge_id)
        result = await self.db.execute(
            select(ChallengeParticipant)
            .where(ChallengeParticipant.challenge_id == challenge_id)
            .order_by(
                ChallengeParticipant.progress.desc(),
                ChallengeParticipant.joined_at.asc(),
                ChallengeParticipant.id.asc(),
            )
        )
        standings = [
            {
                "rank": participant.rank or index + 1,
                "user": {
                    "id": participant.user.id,
                    "name": participant.user.name,
                    "avatar": participant.user.avatar,
                },
                "progress": participant.progress,
                "percentage": completion_percentage(participant.progress, challenge.goal_target),
            }
            for index, participant in enumerate(result.scalars().all())
        ]
        return challenge, standings
