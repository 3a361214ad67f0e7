import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional, Tuple

import bcrypt
from jose import jwt, JWTError

from app.core.config import settings
from app.core.exceptions import AuthenticationError, ConflictError
from app.models.user import User, RoleEnum
from app.repositories.user_repository import UserRepository
from app.schemas.auth import UserLogin, UserRegister
from app.schemas.user import ProfileUpdate

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self):
        self.SECRET_KEY = settings.SECRET_KEY
        self.REFRESH_SECRET_KEY = settings.refresh_secret
        self.ALGORITHM = settings.ALGORITHM
        self.ACCESS_TOKEN_EXPIRE_MINUTES = settings.ACCESS_TOKEN_EXPIRE_MINUTES
        self.REFRESH_TOKEN_EXPIRE_DAYS = settings.REFRESH_TOKEN_EXPIRE_DAYS

    def hash_password(self, password: str) -> str:
        hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt())
        return hashed.decode('utf-8')

    def verify_password(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        if not hashed_password:
            return False
        try:
            return bcrypt.checkpw(
                plain_password.encode('utf-8'),
                hashed_password.encode('utf-8')
            )
        except ValueError:
            # Stored value is not a bcrypt hash
            return False

    def create_access_token(self, data: dict, expires_delta: Optional[timedelta] = None) -> str:
        to_encode = data.copy()
        if expires_delta:
            expire = datetime.utcnow() + expires_delta
        else:
            expire = datetime.utcnow() + timedelta(minutes=self.ACCESS_TOKEN_EXPIRE_MINUTES)
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, self.SECRET_KEY, algorithm=self.ALGORITHM)

    def create_refresh_token(self, data: dict) -> str:
        to_encode = data.copy()
        expire = datetime.utcnow() + timedelta(days=self.REFRESH_TOKEN_EXPIRE_DAYS)
        # jti keeps two tokens minted in the same second distinct
        to_encode.update({"exp": expire, "jti": uuid.uuid4().hex})
        return jwt.encode(to_encode, self.REFRESH_SECRET_KEY, algorithm=self.ALGORITHM)

    def _decode_refresh_subject(self, refresh_token: str) -> Optional[int]:
        try:
            payload = jwt.decode(refresh_token, self.REFRESH_SECRET_KEY, algorithms=[self.ALGORITHM])
            user_id = payload.get("sub")
            return int(user_id) if user_id is not None else None
        except (JWTError, ValueError):
            return None

    async def issue_tokens(self, repo: UserRepository, user: User) -> Tuple[str, str]:
        """Mint an access/refresh pair and store the refresh token on the user."""
        access_token = self.create_access_token(data={"sub": str(user.id), "role": user.role.value})
        refresh_token = self.create_refresh_token(data={"sub": str(user.id)})
        await repo.save_refresh_token(
            user,
            refresh_token,
            datetime.utcnow() + timedelta(days=self.REFRESH_TOKEN_EXPIRE_DAYS),
        )
        return access_token, refresh_token

    async def authenticate_user(self, repo: UserRepository, login_data: UserLogin) -> Optional[User]:
        user = await repo.get_by_email(login_data.email)
        if not user or not self.verify_password(login_data.password, user.password):
            return None
        if not user.is_active:
            return None
        return user

    async def register_user(self, repo: UserRepository, user_data: UserRegister) -> User:
        email = user_data.email.lower()
        if await repo.get_by_email(email):
            raise ConflictError("User already exists with this email")

        new_user = User(
            name=user_data.name,
            email=email,
            password=self.hash_password(user_data.password),
            role=user_data.role or RoleEnum.member,
            phone=user_data.phone,
            is_active=True,
            created_at=datetime.utcnow(),
        )
        user = await repo.create_user(new_user)
        logger.info("Registered user %s with role %s", user.id, user.role.value)
        return user

    async def rotate_refresh_token(
            self, repo: UserRepository, refresh_token: str
    ) -> Optional[Tuple[User, str, str]]:
        """
        Exchange a refresh token for a new pair.

        A correctly signed token that is no longer stored means it was already
        used: the owner's current token is revoked so both parties must log in again.
        """
        user_id = self._decode_refresh_subject(refresh_token)
        if user_id is None:
            return None

        user = await repo.get_by_refresh_token(refresh_token)
        if user is None:
            victim = await repo.get_by_id(user_id)
            if victim is not None:
                logger.warning("Refresh token reuse detected for user %s", user_id)
                await repo.revoke_refresh_token(victim)
            return None

        if user.refresh_token_expires is None or user.refresh_token_expires < datetime.utcnow():
            return None
        if not user.is_active:
            return None

        access_token, new_refresh_token = await self.issue_tokens(repo, user)
        return user, access_token, new_refresh_token

    async def logout_user(self, repo: UserRepository, refresh_token: str) -> bool:
        user_id = self._decode_refresh_subject(refresh_token)
        if user_id is None:
            return False

        user = await repo.get_by_id(user_id)
        if user is None:
            return False

        await repo.revoke_refresh_token(user)
        return True

    async def change_password(
            self, repo: UserRepository, user: User, current_password: str, new_password: str
    ) -> None:
        if not self.verify_password(current_password, user.password):
            raise AuthenticationError("Current password is incorrect")
        user.password = self.hash_password(new_password)
        await repo.save(user)

    async def update_profile(self, repo: UserRepository, user: User, data: ProfileUpdate) -> User:
        updates = data.model_dump(exclude_unset=True)

        email = updates.pop("email", None)
        if email is not None:
            email = email.lower()
            if email != user.email:
                existing = await repo.get_by_email(email)
                if existing is not None and existing.id != user.id:
                    raise ConflictError("Email already in use")
                user.email = email

        for field, value in updates.items():
            if value is None and field == "name":
                continue
            setattr(user, field, value)

        return await repo.save(user)


auth_service = AuthService()
