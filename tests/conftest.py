"""
Shared fixtures for the FitLife backend tests.

Strategy:
- The test FastAPI app is built without the lifespan hook (no database, no sockets).
- UserRepository is replaced by an AsyncMock (mock_repo) for the auth endpoints.
- Endpoints that talk to the database directly get get_db -> mock_db and
  get_current_user -> a lambda returning the wanted user.
- Service tests run against an in-memory SQLite database (db_session).
- JWTs are minted with auth_service.create_access_token() to exercise the real auth dependency.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from httpx import AsyncClient, ASGITransport
from fastapi import FastAPI
from datetime import datetime
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.api.router import api_router
from app.core.base import Base
from app.core.db import get_db
from app.core.dependencies import get_current_user, get_user_repository
from app.core.exceptions import register_exception_handlers
from app.core.realtime import ConnectionManager
from app.models.user import User, RoleEnum, MembershipStatusEnum
from app.repositories.user_repository import UserRepository
from app.services.auth_service import auth_service
from app.services.notification_service import NotificationService


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def create_test_app() -> FastAPI:
    """Test FastAPI app without the lifespan hook."""
    test_app = FastAPI(title="FitLife Test App")
    register_exception_handlers(test_app)
    test_app.state.connection_manager = ConnectionManager()
    test_app.include_router(api_router, prefix="/api/v1")
    return test_app


def make_auth_headers(user: User) -> dict:
    """Authorization header carrying a valid access token for ``user``."""
    access_token = auth_service.create_access_token(
        data={"sub": str(user.id), "role": user.role.value}
    )
    return {"Authorization": f"Bearer {access_token}"}


def make_user(user_id: int, role: RoleEnum, password: str = "password123", **extra) -> User:
    values = dict(
        id=user_id,
        name=f"{role.value.title()} {user_id}",
        email=f"{role.value}{user_id}@example.com",
        password=auth_service.hash_password(password),
        role=role,
        is_active=True,
        membership_status=MembershipStatusEnum.inactive,
        created_at=datetime.utcnow(),
    )
    values.update(extra)
    return User(**values)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@pytest.fixture
def member_fixture() -> User:
    """Regular gym member."""
    return make_user(1, RoleEnum.member, email="member@example.com", name="Mia Member")


@pytest.fixture
def admin_fixture() -> User:
    return make_user(2, RoleEnum.admin, password="admin123", email="admin@example.com", name="Ada Admin")


@pytest.fixture
def trainer_fixture() -> User:
    return make_user(3, RoleEnum.trainer, password="trainer123", email="trainer@example.com", name="Tom Trainer")


# ---------------------------------------------------------------------------
# Dependency doubles
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_repo() -> AsyncMock:
    """UserRepository double for the auth endpoints."""
    return AsyncMock(spec=UserRepository)


@pytest.fixture
def mock_db() -> MagicMock:
    """
    Session double for endpoints that use get_db directly.
    execute() returns a MagicMock with the usual accessors preset.
    """
    session = AsyncMock()
    default_result = MagicMock()
    default_result.scalar_one_or_none.return_value = None
    default_result.scalar_one.return_value = 0
    default_result.scalars.return_value.all.return_value = []
    session.execute.return_value = default_result
    session.get.return_value = None
    session.add = MagicMock()
    return session


# ---------------------------------------------------------------------------
# HTTP clients
# ---------------------------------------------------------------------------

async def _client_for(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def client(mock_repo, mock_db) -> AsyncGenerator[AsyncClient, None]:
    """
    Anonymous client: get_user_repository -> mock_repo, get_db -> mock_db.
    Used for register, login, refresh, logout and the real token check.
    """
    app = create_test_app()
    app.dependency_overrides[get_user_repository] = lambda: mock_repo
    app.dependency_overrides[get_db] = lambda: mock_db
    async for ac in _client_for(app):
        yield ac


def _authenticated_app(user: User, mock_repo, mock_db) -> FastAPI:
    app = create_test_app()
    app.dependency_overrides[get_user_repository] = lambda: mock_repo
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_db] = lambda: mock_db
    return app


@pytest.fixture
async def member_client(member_fixture, mock_repo, mock_db) -> AsyncGenerator[AsyncClient, None]:
    """Client authenticated as a member; get_db -> mock_db."""
    async for ac in _client_for(_authenticated_app(member_fixture, mock_repo, mock_db)):
        yield ac


@pytest.fixture
async def trainer_client(trainer_fixture, mock_repo, mock_db) -> AsyncGenerator[AsyncClient, None]:
    async for ac in _client_for(_authenticated_app(trainer_fixture, mock_repo, mock_db)):
        yield ac


@pytest.fixture
async def admin_client(admin_fixture, mock_repo, mock_db) -> AsyncGenerator[AsyncClient, None]:
    async for ac in _client_for(_authenticated_app(admin_fixture, mock_repo, mock_db)):
        yield ac


# ---------------------------------------------------------------------------
# In-memory database for service tests
# ---------------------------------------------------------------------------

@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def connection_manager() -> ConnectionManager:
    return ConnectionManager()


@pytest.fixture
def notifier(db_session, connection_manager) -> NotificationService:
    return NotificationService(db_session, connection_manager)


@pytest.fixture
async def db_member(db_session) -> User:
    """Persisted member row."""
    user = User(
        name="Mia Member",
        email="member@example.com",
        password=auth_service.hash_password("password123"),
        role=RoleEnum.member,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def db_trainer(db_session) -> User:
    user = User(
        name="Tom Trainer",
        email="trainer@example.com",
        password=auth_service.hash_password("trainer123"),
        role=RoleEnum.trainer,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest.fixture
async def db_admin(db_session) -> User:
    user = User(
        name="Ada Admin",
        email="admin@example.com",
        password=auth_service.hash_password("admin123"),
        role=RoleEnum.admin,
    )
    db_session.add(user)
    await db_session.commit()
    return user
