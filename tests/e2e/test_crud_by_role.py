"""
End-to-end checks of who may do what.

Scenarios:
- trainer creates a class, member may not; only admin deletes
- member books it, sees the booking, trainer marks it completed
- member logs a workout and shows up on the leaderboard and in the feed
- another member cannot read or cancel someone else's booking
- notifications reach their owner and can be marked read

Strategy: real users in the in-memory database, real JWTs from make_auth_headers.
"""

import pytest
from datetime import date, timedelta
from httpx import AsyncClient, ASGITransport

from app.core.db import get_db
from app.models.user import User, RoleEnum
from app.services.auth_service import auth_service
from tests.conftest import create_test_app, make_auth_headers

pytestmark = pytest.mark.e2e

YOGA = {
    "name": "Morning Yoga",
    "description": "Gentle flow",
    "category": "yoga",
    "duration": 60,
    "max_capacity": 10,
    "schedule": [{"day_of_week": "monday", "start_time": "07:00", "end_time": "08:00"}],
}


@pytest.fixture
async def api(db_session):
    app = create_test_app()
    app.dependency_overrides[get_db] = lambda: db_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def other_member(db_session) -> User:
    user = User(
        name="Otto Other",
        email="other@example.com",
        password=auth_service.hash_password("password123"),
        role=RoleEnum.member,
    )
    db_session.add(user)
    await db_session.commit()
    return user


async def _create_class(api, trainer) -> dict:
    response = await api.post("/api/v1/classes", json=YOGA, headers=make_auth_headers(trainer))
    assert response.status_code == 201
    return response.json()["data"]["class"]


# ---------------------------------------------------------------------------
# Classes
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_class_lifecycle_by_role(api, db_member, db_trainer, db_admin):
    member_denied = await api.post("/api/v1/classes", json=YOGA, headers=make_auth_headers(db_member))
    assert member_denied.status_code == 403

    created = await _create_class(api, db_trainer)
    assert created["trainer"]["name"] == "Tom Trainer"
    assert created["current_enrollment"] == 0

    listed = await api.get("/api/v1/classes", params={"category": "yoga"})
    assert listed.json()["data"]["count"] == 1

    trainer_delete = await api.delete(f"/api/v1/classes/{created['id']}", headers=make_auth_headers(db_trainer))
    assert trainer_delete.status_code == 403

    admin_delete = await api.delete(f"/api/v1/classes/{created['id']}", headers=make_auth_headers(db_admin))
    assert admin_delete.status_code == 200

    gone = await api.get(f"/api/v1/classes/{created['id']}")
    assert gone.status_code == 404


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_booking_flow_by_role(api, db_member, db_trainer, other_member):
    fitness_class = await _create_class(api, db_trainer)
    member_headers = make_auth_headers(db_member)

    booked = await api.post(
        "/api/v1/bookings",
        json={"class_id": fitness_class["id"], "booking_date": str(date.today() + timedelta(days=2))},
        headers=member_headers,
    )
    assert booked.status_code == 201
    booking = booked.json()["data"]["booking"]
    assert booking["status"] == "confirmed"
    assert booking["fitness_class"]["name"] == "Morning Yoga"

    enrolled = await api.get(f"/api/v1/classes/{fitness_class['id']}")
    assert enrolled.json()["data"]["class"]["current_enrollment"] == 1

    stranger = await api.get(f"/api/v1/bookings/{booking['id']}", headers=make_auth_headers(other_member))
    assert stranger.status_code in (403, 404)

    member_complete = await api.put(f"/api/v1/bookings/{booking['id']}/complete", headers=member_headers)
    assert member_complete.status_code == 403

    completed = await api.put(f"/api/v1/bookings/{booking['id']}/complete", headers=make_auth_headers(db_trainer))
    assert completed.status_code == 200
    assert completed.json()["data"]["booking"]["status"] == "completed"

    mine = await api.get("/api/v1/bookings", headers=member_headers)
    assert mine.json()["data"]["pagination"]["total"] == 1


# ---------------------------------------------------------------------------
# Workouts -> leaderboard, feed, notifications
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_workout_feeds_leaderboard_feed_and_notifications(api, db_member):
    headers = make_auth_headers(db_member)

    logged = await api.post("/api/v1/workouts", json={
        "title": "Leg day",
        "type": "strength",
        "duration": 60,
        "share_workout": True,
        "exercises": [{"name": "Squat", "sets": 5, "reps": 5, "weight": 100, "calories": 150}],
    }, headers=headers)
    assert logged.status_code == 201
    assert logged.json()["data"]["workout"]["total_calories"] == 150

    board = (await api.get("/api/v1/gamification/leaderboard", headers=headers)).json()["data"]
    assert board["period"] == "all_time"
    assert board["leaderboard"][0]["user"]["name"] == "Mia Member"
    assert board["user_rank"]["rank"] == 1
    assert board["user_rank"]["total_workouts"] == 1

    feed = (await api.get("/api/v1/social/feed", params={"filter": "my-posts"}, headers=headers)).json()["data"]
    assert len(feed["posts"]) == 1

    notifications = (await api.get("/api/v1/notifications", headers=headers)).json()["data"]
    assert notifications["unread_count"] >= 1
    titles = [n["title"] for n in notifications["notifications"]]
    assert "💪 Workout Completed!" in titles

    marked = await api.put("/api/v1/notifications/read-all", headers=headers)
    assert marked.status_code == 200
    after = (await api.get("/api/v1/notifications", headers=headers)).json()["data"]
    assert after["unread_count"] == 0


@pytest.mark.asyncio
async def test_members_cannot_touch_each_others_workouts(api, db_member, other_member):
    logged = await api.post("/api/v1/workouts", json={
        "title": "Run",
        "type": "cardio",
        "duration": 30,
    }, headers=make_auth_headers(db_member))
    workout_id = logged.json()["data"]["workout"]["id"]

    response = await api.delete(f"/api/v1/workouts/{workout_id}", headers=make_auth_headers(other_member))

    assert response.status_code in (403, 404)
    still_there = await api.get(f"/api/v1/workouts/{workout_id}", headers=make_auth_headers(db_member))
    assert still_there.status_code == 200
