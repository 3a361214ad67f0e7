"""
Integration tests for /api/v1/auth/*.

Covered:
- POST /auth/register: success, duplicate email, invalid email, weak password, admin role
- POST /auth/login: success, wrong password, unknown user
- POST /auth/refresh: rotation, invalid token, reuse detection
- POST /auth/logout: 204
- GET /auth/me: valid token, missing token, inactive user

Strategy: UserRepository is replaced by an AsyncMock through conftest.client.
"""

import pytest
from datetime import datetime, timedelta

from app.models.user import RoleEnum
from app.services.auth_service import auth_service
from tests.conftest import make_auth_headers, make_user

pytestmark = pytest.mark.integration


# ---------------------------------------------------------------------------
# POST /auth/register
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register_success_returns_token_and_user(client, mock_repo):
    """A unique email yields 201 with a token pair and the new member."""
    mock_repo.get_by_email.return_value = None
    mock_repo.create_user.side_effect = lambda user: make_user(
        10, user.role, email=user.email, name=user.name
    )

    response = await client.post("/api/v1/auth/register", json={
        "name": "New Member",
        "email": "New@Example.com",
        "password": "pass123",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    assert body["data"]["token"]
    assert body["data"]["refresh_token"]
    assert body["data"]["user"]["email"] == "new@example.com"
    assert body["data"]["user"]["role"] == "member"
    assert "password" not in body["data"]["user"]
    mock_repo.save_refresh_token.assert_awaited_once()


@pytest.mark.asyncio
async def test_register_duplicate_email_returns_400(client, mock_repo):
    mock_repo.get_by_email.return_value = make_user(1, RoleEnum.member, email="exists@example.com")

    response = await client.post("/api/v1/auth/register", json={
        "name": "Someone",
        "email": "exists@example.com",
        "password": "pass123",
    })

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "User already exists with this email"}
    mock_repo.create_user.assert_not_called()


@pytest.mark.asyncio
async def test_register_invalid_email_is_a_validation_error(client, mock_repo):
    """Body validation failures use the envelope and status 400."""
    response = await client.post("/api/v1/auth/register", json={
        "name": "x",
        "email": "not-an-email",
        "password": "pass123",
    })

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert any(err["field"] == "email" for err in body["errors"])


@pytest.mark.asyncio
async def test_register_short_password_rejected(client, mock_repo):
    response = await client.post("/api/v1/auth/register", json={
        "name": "x",
        "email": "short@example.com",
        "password": "123",
    })
    assert response.status_code == 400
    assert any(err["field"] == "password" for err in response.json()["errors"])


@pytest.mark.asyncio
async def test_register_cannot_self_assign_admin(client, mock_repo):
    response = await client.post("/api/v1/auth/register", json={
        "name": "Sneaky",
        "email": "sneaky@example.com",
        "password": "pass123",
        "role": "admin",
    })
    assert response.status_code == 400
    mock_repo.create_user.assert_not_called()


# ---------------------------------------------------------------------------
# POST /auth/login
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_login_success(client, mock_repo, member_fixture):
    mock_repo.get_by_email.return_value = member_fixture

    response = await client.post("/api/v1/auth/login", json={
        "email": "member@example.com",
        "password": "password123",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Login successful"
    assert body["data"]["user"]["id"] == member_fixture.id
    assert body["data"]["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_login_wrong_password_returns_401(client, mock_repo, member_fixture):
    mock_repo.get_by_email.return_value = member_fixture

    response = await client.post("/api/v1/auth/login", json={
        "email": "member@example.com",
        "password": "wrong-password",
    })

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid email or password"


@pytest.mark.asyncio
async def test_login_unknown_user_returns_401(client, mock_repo):
    mock_repo.get_by_email.return_value = None

    response = await client.post("/api/v1/auth/login", json={
        "email": "ghost@example.com",
        "password": "password123",
    })

    assert response.status_code == 401
    mock_repo.save_refresh_token.assert_not_called()


# ---------------------------------------------------------------------------
# POST /auth/refresh
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_refresh_rotates_token(client, mock_repo, member_fixture):
    refresh_token = auth_service.create_refresh_token({"sub": str(member_fixture.id)})
    member_fixture.refresh_token = refresh_token
    member_fixture.refresh_token_expires = datetime.utcnow() + timedelta(days=1)
    mock_repo.get_by_refresh_token.return_value = member_fixture

    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["refresh_token"] != refresh_token
    mock_repo.save_refresh_token.assert_awaited_once()


@pytest.mark.asyncio
async def test_refresh_garbage_token_returns_401(client, mock_repo):
    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": "not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired refresh token"


@pytest.mark.asyncio
async def test_refresh_reuse_revokes_session(client, mock_repo, member_fixture):
    """A signed token that is no longer stored revokes the owner's current token."""
    stale = auth_service.create_refresh_token({"sub": str(member_fixture.id)})
    mock_repo.get_by_refresh_token.return_value = None
    mock_repo.get_by_id.return_value = member_fixture

    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": stale})

    assert response.status_code == 401
    mock_repo.revoke_refresh_token.assert_awaited_once_with(member_fixture)


# ---------------------------------------------------------------------------
# POST /auth/logout, GET /auth/me
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_logout_returns_204(client, mock_repo, member_fixture):
    mock_repo.get_by_id.return_value = member_fixture
    token = auth_service.create_refresh_token({"sub": str(member_fixture.id)})

    response = await client.post("/api/v1/auth/logout", json={"refresh_token": token})

    assert response.status_code == 204
    assert response.content == b""
    mock_repo.revoke_refresh_token.assert_awaited_once_with(member_fixture)


@pytest.mark.asyncio
async def test_me_with_valid_token(client, mock_repo, member_fixture):
    mock_repo.get_by_id.return_value = member_fixture

    response = await client.get("/api/v1/auth/me", headers=make_auth_headers(member_fixture))

    assert response.status_code == 200
    assert response.json()["data"]["user"]["email"] == "member@example.com"


@pytest.mark.asyncio
async def test_me_without_token_returns_401(client):
    response = await client.get("/api/v1/auth/me")

    assert response.status_code == 401
    assert response.json()["success"] is False
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_me_inactive_user_returns_401(client, mock_repo, member_fixture):
    member_fixture.is_active = False
    mock_repo.get_by_id.return_value = member_fixture

    response = await client.get("/api/v1/auth/me", headers=make_auth_headers(member_fixture))

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_change_password_wrong_current_returns_401(member_client, mock_repo):
    response = await member_client.put("/api/v1/auth/password", json={
        "current_password": "nope",
        "new_password": "newpass123",
    })

    assert response.status_code == 401
    assert response.json()["message"] == "Current password is incorrect"
    mock_repo.save.assert_not_called()
