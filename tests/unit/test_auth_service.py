"""
Unit tests for AuthService.

Covered:
- hash_password / verify_password
- create_access_token / create_refresh_token
- authenticate_user, register_user
- rotate_refresh_token (including reuse detection)
- logout_user, change_password, update_profile
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock
from jose import jwt

from app.core.config import settings
from app.core.exceptions import AuthenticationError, ConflictError
from app.models.user import User, RoleEnum
from app.repositories.user_repository import UserRepository
from app.schemas.auth import UserLogin, UserRegister
from app.schemas.user import ProfileUpdate
from app.services.auth_service import auth_service

pytestmark = pytest.mark.unit


def _user(**extra) -> User:
    values = dict(
        id=1,
        name="Mia",
        email="mia@test.com",
        password=auth_service.hash_password("pass123"),
        role=RoleEnum.member,
        is_active=True,
    )
    values.update(extra)
    return User(**values)


# ---------------------------------------------------------------------------
# hash_password / verify_password
# ---------------------------------------------------------------------------

def test_hash_password_creates_bcrypt_hash():
    hashed = auth_service.hash_password("secret")
    assert isinstance(hashed, str)
    assert hashed.startswith("$2b$")


def test_hash_password_uses_unique_salts():
    """Two hashes of the same password differ."""
    assert auth_service.hash_password("same") != auth_service.hash_password("same")


def test_verify_password_valid_and_invalid():
    hashed = auth_service.hash_password("correct_password")
    assert auth_service.verify_password("correct_password", hashed) is True
    assert auth_service.verify_password("wrong_password", hashed) is False


def test_verify_password_empty_or_garbage_hash_returns_false():
    assert auth_service.verify_password("password", "") is False
    assert auth_service.verify_password("password", None) is False
    assert auth_service.verify_password("password", "not-a-bcrypt-hash") is False


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

def test_access_token_contains_sub_and_role():
    token = auth_service.create_access_token(data={"sub": "42", "role": "trainer"})
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert payload["sub"] == "42"
    assert payload["role"] == "trainer"


def test_access_token_custom_expiry():
    token = auth_service.create_access_token(data={"sub": "1"}, expires_delta=timedelta(seconds=10))
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    exp = datetime.utcfromtimestamp(payload["exp"])
    assert exp < datetime.utcnow() + timedelta(seconds=20)


def test_refresh_token_signed_with_refresh_secret_and_unique():
    first = auth_service.create_refresh_token(data={"sub": "7"})
    second = auth_service.create_refresh_token(data={"sub": "7"})
    payload = jwt.decode(first, settings.refresh_secret, algorithms=[settings.ALGORITHM])
    assert payload["sub"] == "7"
    assert first != second


def test_refresh_token_is_not_an_access_token():
    """A refresh token does not verify against the access secret."""
    token = auth_service.create_refresh_token(data={"sub": "7"})
    with pytest.raises(Exception):
        jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])


# ---------------------------------------------------------------------------
# authenticate_user
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_authenticate_user_success():
    user = _user()
    repo = AsyncMock(spec=UserRepository)
    repo.get_by_email.return_value = user

    result = await auth_service.authenticate_user(repo, UserLogin(email="mia@test.com", password="pass123"))
    assert result is user


@pytest.mark.asyncio
async def test_authenticate_user_unknown_or_wrong_password_returns_none():
    repo = AsyncMock(spec=UserRepository)
    repo.get_by_email.return_value = None
    assert await auth_service.authenticate_user(repo, UserLogin(email="x@test.com", password="any")) is None

    repo.get_by_email.return_value = _user()
    assert await auth_service.authenticate_user(repo, UserLogin(email="mia@test.com", password="bad")) is None


@pytest.mark.asyncio
async def test_authenticate_user_inactive_returns_none():
    repo = AsyncMock(spec=UserRepository)
    repo.get_by_email.return_value = _user(is_active=False)

    assert await auth_service.authenticate_user(repo, UserLogin(email="mia@test.com", password="pass123")) is None


# ---------------------------------------------------------------------------
# register_user
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register_user_hashes_password_and_lowercases_email():
    repo = AsyncMock(spec=UserRepository)
    repo.get_by_email.return_value = None
    repo.create_user.side_effect = lambda user: user

    user = await auth_service.register_user(
        repo, UserRegister(name="Neo", email="Neo@Test.com", password="pass123")
    )

    assert user.email == "neo@test.com"
    assert user.role == RoleEnum.member
    assert user.password != "pass123"
    assert auth_service.verify_password("pass123", user.password)


@pytest.mark.asyncio
async def test_register_user_duplicate_email_raises_conflict():
    repo = AsyncMock(spec=UserRepository)
    repo.get_by_email.return_value = _user()

    with pytest.raises(ConflictError) as exc_info:
        await auth_service.register_user(repo, UserRegister(name="Mia", email="mia@test.com", password="pass123"))
    assert exc_info.value.status_code == 400


def test_register_schema_rejects_admin_role_and_short_password():
    with pytest.raises(ValueError):
        UserRegister(name="Eve", email="eve@test.com", password="pass123", role="admin")
    with pytest.raises(ValueError):
        UserRegister(name="Eve", email="eve@test.com", password="123")


# ---------------------------------------------------------------------------
# rotate_refresh_token / logout_user
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_rotate_refresh_token_success_issues_new_pair():
    token = auth_service.create_refresh_token(data={"sub": "1"})
    user = _user(refresh_token=token, refresh_token_expires=datetime.utcnow() + timedelta(days=1))
    repo = AsyncMock(spec=UserRepository)
    repo.get_by_refresh_token.return_value = user

    rotated = await auth_service.rotate_refresh_token(repo, token)

    assert rotated is not None
    rotated_user, access_token, new_refresh = rotated
    assert rotated_user is user
    assert new_refresh != token
    repo.save_refresh_token.assert_awaited_once()


@pytest.mark.asyncio
async def test_rotate_refresh_token_reuse_revokes_owner_session():
    """A valid but no longer stored token revokes the owner's current token."""
    token = auth_service.create_refresh_token(data={"sub": "1"})
    victim = _user()
    repo = AsyncMock(spec=UserRepository)
    repo.get_by_refresh_token.return_value = None
    repo.get_by_id.return_value = victim

    assert await auth_service.rotate_refresh_token(repo, token) is None
    repo.revoke_refresh_token.assert_awaited_once_with(victim)


@pytest.mark.asyncio
async def test_rotate_refresh_token_expired_or_invalid_returns_none():
    repo = AsyncMock(spec=UserRepository)
    assert await auth_service.rotate_refresh_token(repo, "garbage") is None

    token = auth_service.create_refresh_token(data={"sub": "1"})
    repo.get_by_refresh_token.return_value = _user(
        refresh_token=token,
        refresh_token_expires=datetime.utcnow() - timedelta(seconds=1),
    )
    assert await auth_service.rotate_refresh_token(repo, token) is None


@pytest.mark.asyncio
async def test_logout_revokes_refresh_token():
    token = auth_service.create_refresh_token(data={"sub": "1"})
    user = _user()
    repo = AsyncMock(spec=UserRepository)
    repo.get_by_id.return_value = user

    assert await auth_service.logout_user(repo, token) is True
    repo.revoke_refresh_token.assert_awaited_once_with(user)


# ---------------------------------------------------------------------------
# change_password / update_profile
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_change_password_requires_current_password():
    user = _user()
    repo = AsyncMock(spec=UserRepository)

    with pytest.raises(AuthenticationError):
        await auth_service.change_password(repo, user, "wrong", "newpass1")

    await auth_service.change_password(repo, user, "pass123", "newpass1")
    assert auth_service.verify_password("newpass1", user.password)
    repo.save.assert_awaited_once_with(user)


@pytest.mark.asyncio
async def test_update_profile_rejects_taken_email():
    user = _user()
    repo = AsyncMock(spec=UserRepository)
    repo.get_by_email.return_value = _user(id=9, email="taken@test.com")

    with pytest.raises(ConflictError):
        await auth_service.update_profile(repo, user, ProfileUpdate(email="taken@test.com"))


@pytest.mark.asyncio
async def test_update_profile_sets_fields():
    user = _user()
    repo = AsyncMock(spec=UserRepository)
    repo.save.side_effect = lambda u: u

    updated = await auth_service.update_profile(repo, user, ProfileUpdate(weight=72.5, fitness_goals=["strength"]))
    assert updated.weight == 72.5
    assert updated.fitness_goals == ["strength"]
