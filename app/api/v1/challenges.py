from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.dependencies import get_current_user, get_challenge_service
from app.models.challenge import Challenge, ChallengeTypeEnum
from app.models.user import User
from app.schemas.challenge import (
    ChallengeCreate,
    ProgressUpdate,
    ChallengeResponse,
    ParticipantResponse,
    MyChallengeResponse,
    ChallengeStanding,
)
from app.services.challenge_service import ChallengeService, completion_percentage

router = APIRouter(tags=["challenges"])


def _challenge_response(challenge: Challenge, participant_count: int) -> ChallengeResponse:
    response = ChallengeResponse.model_validate(challenge)
    response.participant_count = participant_count
    return response


@router.get("")
async def list_challenges(
    status: str = Query("active", pattern="^(active|upcoming|completed|all)$"),
    type: Optional[ChallengeTypeEnum] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ChallengeService = Depends(get_challenge_service),
):
    challenges = await service.list_challenges(status, type)
    return {
        "success": True,
        "data": {"challenges": [_challenge_response(c, count) for c, count in challenges]},
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_challenge(
    data: ChallengeCreate,
    current_user: User = Depends(get_current_user),
    service: ChallengeService = Depends(get_challenge_service),
):
    challenge = await service.create_challenge(current_user.id, data)
    return {
        "success": True,
        "message": "Challenge created successfully",
        "data": {"challenge": _challenge_response(challenge, 0)},
    }


@router.get("/my")
async def my_challenges(
    current_user: User = Depends(get_current_user),
    service: ChallengeService = Depends(get_challenge_service),
):
    joined = await service.my_challenges(current_user.id)
    items = [
        MyChallengeResponse(
            challenge=_challenge_response(challenge, count),
            progress=participant.progress,
            rank=participant.rank,
            percentage=completion_percentage(participant.progress, challenge.goal_target),
            completed=participant.completed_at is not None,
            joined_at=participant.joined_at,
        )
        for challenge, participant, count in joined
    ]
    return {"success": True, "data": {"challenges": items}}


@router.get("/{challenge_id}")
async def get_challenge(
    challenge_id: int,
    current_user: User = Depends(get_current_user),
    service: ChallengeService = Depends(get_challenge_service),
):
    challenge = await service.get_challenge(challenge_id)
    return {
        "success": True,
        "data": {"challenge": _challenge_response(challenge, len(challenge.participants))},
    }


@router.post("/{challenge_id}/join")
async def join_challenge(
    challenge_id: int,
    current_user: User = Depends(get_current_user),
    service: ChallengeService = Depends(get_challenge_service),
):
    participant = await service.join_challenge(challenge_id, current_user.id)
    return {
        "success": True,
        "message": "Joined challenge successfully",
        "data": {"participant": ParticipantResponse.model_validate(participant)},
    }


@router.put("/{challenge_id}/progress")
async def update_progress(
    challenge_id: int,
    data: ProgressUpdate,
    current_user: User = Depends(get_current_user),
    service: ChallengeService = Depends(get_challenge_service),
):
    participant = await service.update_progress(challenge_id, current_user.id, data.progress)
    return {
        "success": True,
        "message": "Progress updated",
        "data": {"participant": ParticipantResponse.model_validate(participant)},
    }


@router.get("/{challenge_id}/leaderboard")
async def challenge_leaderboard(
    challenge_id: int,
    current_user: User = Depends(get_current_user),
    service: ChallengeService = Depends(get_challenge_service),
):
    challenge, standings = await service.challenge_leaderboard(challenge_id)
    return {
        "success": True,
        "data": {
            "challenge": {"id": challenge.id, "name": challenge.name, "goal_target": challenge.goal_target},
            "leaderboard": [ChallengeStanding(**s) for s in standings],
        },
    }
