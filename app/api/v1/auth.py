from fastapi import APIRouter, Depends, Response, status

from app.core.dependencies import get_current_user, get_user_repository
from app.core.exceptions import AuthenticationError
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.auth import UserLogin, UserRegister, AuthResponse, RefreshTokenRequest, ChangePasswordRequest
from app.schemas.user import UserResponse, ProfileUpdate
from app.services.auth_service import auth_service

router = APIRouter(tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(user_data: UserRegister, repo: UserRepository = Depends(get_user_repository)):
    """Create an account and return a token pair."""
    user = await auth_service.register_user(repo, user_data)
    access_token, refresh_token = await auth_service.issue_tokens(repo, user)
    return {
        "success": True,
        "message": "User registered successfully",
        "data": AuthResponse(token=access_token, refresh_token=refresh_token, user=UserResponse.model_validate(user)),
    }


@router.post("/login")
async def login(credentials: UserLogin, repo: UserRepository = Depends(get_user_repository)):
    user = await auth_service.authenticate_user(repo, credentials)
    if not user:
        raise AuthenticationError("Invalid email or password")

    access_token, refresh_token = await auth_service.issue_tokens(repo, user)
    return {
        "success": True,
        "message": "Login successful",
        "data": AuthResponse(token=access_token, refresh_token=refresh_token, user=UserResponse.model_validate(user)),
    }


@router.post("/refresh")
async def refresh(request: RefreshTokenRequest, repo: UserRepository = Depends(get_user_repository)):
    """Rotate the refresh token; a reused token revokes the session."""
    rotated = await auth_service.rotate_refresh_token(repo, request.refresh_token)
    if rotated is None:
        raise AuthenticationError("Invalid or expired refresh token")

    user, access_token, refresh_token = rotated
    return {
        "success": True,
        "data": AuthResponse(token=access_token, refresh_token=refresh_token, user=UserResponse.model_validate(user)),
    }


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(request: RefreshTokenRequest, repo: UserRepository = Depends(get_user_repository)):
    await auth_service.logout_user(repo, request.refresh_token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me")
async def me(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": {"user": UserResponse.model_validate(current_user)}}


@router.put("/me")
async def update_profile(
    data: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repository),
):
    user = await auth_service.update_profile(repo, current_user, data)
    return {
        "success": True,
        "message": "Profile updated successfully",
        "data": {"user": UserResponse.model_validate(user)},
    }


@router.put("/password")
async def change_password(
    data: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    repo: UserRepository = Depends(get_user_repository),
):
    await auth_service.change_password(repo, current_user, data.current_password, data.new_password)
    return {"success": True, "message": "Password updated successfully"}
