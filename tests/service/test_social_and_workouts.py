"""
Social feed and workout logging against an in-memory database.

Covered:
- like toggling and the author notification
- comments, follows and feed visibility
- workout ownership and the best-effort follow-ups of a logged workout
"""

import pytest
from datetime import datetime
from sqlalchemy import select, func

from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.models.leaderboard import LeaderboardEntry, LeaderboardPeriodEnum
from app.models.notification import Notification
from app.models.social import SocialPost, PostTypeEnum, VisibilityEnum
from app.models.workout import WorkoutTypeEnum
from app.schemas.social import PostCreate
from app.schemas.workout import WorkoutCreate, ExerciseInput, WorkoutUpdate
from app.services.social_service import SocialService, serialize_post
from app.services.workout_service import WorkoutService

pytestmark = pytest.mark.service


@pytest.fixture
def social(db_session, notifier) -> SocialService:
    return SocialService(db_session, notifier)


@pytest.fixture
def workouts(db_session, notifier) -> WorkoutService:
    return WorkoutService(db_session, notifier)


async def _notifications(db_session, user_id: int) -> list:
    result = await db_session.execute(
        select(Notification.title).where(Notification.user_id == user_id).order_by(Notification.id)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Social
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_like_toggles_and_notifies_author_once(social, db_session, db_member, db_trainer):
    author_id, fan_id = db_trainer.id, db_member.id
    post = await social.create_post(author_id, PostCreate(text="New PR today"))
    post_id = post.id

    liked = await social.toggle_like(post_id, db_member)
    unliked = await social.toggle_like(post_id, db_member)

    assert liked == {"likes": 1, "liked": True}
    assert unliked == {"likes": 0, "liked": False}
    assert await _notifications(db_session, author_id) == ["❤️ New Like"]
    assert await _notifications(db_session, fan_id) == []


@pytest.mark.asyncio
async def test_own_like_does_not_notify(social, db_session, db_member):
    member_id = db_member.id
    post = await social.create_post(member_id, PostCreate(text="Morning run"))

    await social.toggle_like(post.id, db_member)
    assert await _notifications(db_session, member_id) == []


@pytest.mark.asyncio
async def test_empty_post_and_comment_are_rejected(social, db_member):
    member_id = db_member.id
    with pytest.raises(ValidationError):
        await social.create_post(member_id, PostCreate(text="   "))

    post = await social.create_post(member_id, PostCreate(text="Leg day"))
    with pytest.raises(ValidationError):
        await social.add_comment(post.id, db_member, "  ")


@pytest.mark.asyncio
async def test_comment_is_returned_with_author(social, db_member, db_trainer):
    trainer_id = db_trainer.id
    post = await social.create_post(trainer_id, PostCreate(text="Class at 6"))

    comments = await social.add_comment(post.id, db_member, " See you there ")
    assert [(c.text, c.user.name) for c in comments] == [("See you there", "Mia Member")]


@pytest.mark.asyncio
async def test_only_author_can_delete_post(social, db_member, db_trainer):
    post = await social.create_post(db_trainer.id, PostCreate(text="Mine"))

    with pytest.raises(AuthorizationError):
        await social.delete_post(post.id, db_member.id)


@pytest.mark.asyncio
async def test_follow_rules_and_following_feed(social, db_session, db_member, db_trainer, db_admin):
    member_id, trainer_id, admin_id = db_member.id, db_trainer.id, db_admin.id

    with pytest.raises(ValidationError):
        await social.toggle_follow(db_member, member_id)
    with pytest.raises(NotFoundError):
        await social.toggle_follow(db_member, 9999)

    assert await social.toggle_follow(db_member, trainer_id) is True
    await social.create_post(trainer_id, PostCreate(text="Followed trainer"))
    await social.create_post(admin_id, PostCreate(text="Stranger"))
    await social.create_post(trainer_id, PostCreate(text="Secret", visibility=VisibilityEnum.private))

    posts, total = await social.feed(member_id, "following")
    assert total == 1
    assert [p.text for p in posts] == ["Followed trainer"]

    followers = await social.connections(trainer_id, "followers")
    assert [u.id for u in followers] == [member_id]

    assert await social.toggle_follow(db_member, trainer_id) is False


@pytest.mark.asyncio
async def test_serialize_post_marks_viewer_like(social, db_member, db_trainer):
    member_id = db_member.id
    post = await social.create_post(db_trainer.id, PostCreate(text="Like me"))
    await social.toggle_like(post.id, db_member)

    posts, _ = await social.feed(member_id, "all")
    response = serialize_post(posts[0], member_id)
    assert response.likes == 1
    assert response.liked_by_me is True


# ---------------------------------------------------------------------------
# Workouts
# ---------------------------------------------------------------------------

def _workout(**extra) -> WorkoutCreate:
    values = dict(
        title="Evening lift",
        type=WorkoutTypeEnum.strength,
        duration=70,
        exercises=[
            ExerciseInput(name="Squat", sets=5, reps=5, weight=100, calories=250),
            ExerciseInput(name="Bench", sets=5, reps=5, weight=80, calories=200),
        ],
    )
    values.update(extra)
    return WorkoutCreate(**values)


@pytest.mark.asyncio
async def test_create_workout_runs_follow_ups(workouts, db_session, db_member):
    member_id = db_member.id

    workout = await workouts.create_workout(member_id, _workout(share_workout=True))

    assert workout.total_calories == 450
    assert [e.name for e in workout.exercises] == ["Squat", "Bench"]

    entry = await db_session.execute(
        select(LeaderboardEntry).where(
            LeaderboardEntry.user_id == member_id,
            LeaderboardEntry.period == LeaderboardPeriodEnum.all_time,
        ).execution_options(populate_existing=True)
    )
    entry = entry.scalar_one()
    assert entry.total_workouts == 1
    assert entry.current_streak == 1

    posts = await db_session.execute(select(SocialPost).where(SocialPost.user_id == member_id))
    shared = posts.scalars().all()
    assert len(shared) == 1
    assert shared[0].type == PostTypeEnum.workout

    assert "💪 Workout Completed!" in await _notifications(db_session, member_id)


@pytest.mark.asyncio
async def test_short_workout_is_not_shared(workouts, db_session, db_member):
    member_id = db_member.id
    await workouts.create_workout(
        member_id, _workout(duration=20, exercises=[], total_calories=100, share_workout=True)
    )

    count = await db_session.execute(select(func.count(SocialPost.id)))
    assert count.scalar_one() == 0


@pytest.mark.asyncio
async def test_workout_owned_by_someone_else_is_forbidden(workouts, db_member, db_trainer):
    member_id, trainer_id = db_member.id, db_trainer.id
    workout = await workouts.create_workout(member_id, _workout())
    workout_id = workout.id

    with pytest.raises(AuthorizationError):
        await workouts.get_owned(workout_id, trainer_id)
    with pytest.raises(NotFoundError):
        await workouts.get_owned(9999, member_id)


@pytest.mark.asyncio
async def test_update_replaces_exercises(workouts, db_member):
    member_id = db_member.id
    workout = await workouts.create_workout(member_id, _workout())

    updated = await workouts.update_workout(
        workout.id, member_id, WorkoutUpdate(title="Renamed", exercises=[ExerciseInput(name="Deadlift", sets=3)])
    )

    assert updated.title == "Renamed"
    assert [e.name for e in updated.exercises] == ["Deadlift"]


@pytest.mark.asyncio
async def test_list_and_stats(workouts, db_member):
    member_id = db_member.id
    await workouts.create_workout(member_id, _workout())
    await workouts.create_workout(
        member_id, _workout(title="Run", type=WorkoutTypeEnum.cardio, duration=30, exercises=[], total_calories=300)
    )

    items, total = await workouts.list_workouts(member_id, WorkoutTypeEnum.cardio, None, None, 1, 20)
    assert total == 1
    assert items[0].title == "Run"

    stats = await workouts.workout_stats(member_id)
    assert stats["total_workouts"] == 2
    assert stats["overall"]["total_duration"] == 100
