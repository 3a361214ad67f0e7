from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.exceptions import NotFoundError, ValidationError, ConflictError
from app.core.dependencies import get_user_repository
from app.core.rbac import require_admin
from app.models.user import User, RoleEnum
from app.repositories.user_repository import UserRepository
from app.schemas.common import paginate
from app.schemas.user import UserResponse, UserAdminUpdate

router = APIRouter(tags=["users"])


@router.get("")
async def list_users(
    search: Optional[str] = Query(None, description="Search by name or email"),
    role: Optional[RoleEnum] = Query(None),
    is_active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repository),
):
    users, total = await repo.list_users(search=search, role=role, is_active=is_active, page=page, limit=limit)
    return {
        "success": True,
        "data": {
            "users": [UserResponse.model_validate(u) for u in users],
            "pagination": paginate(total, page, limit),
        },
    }


@router.get("/{user_id}")
async def get_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repository),
):
    user = await repo.get_by_id(user_id)
    if not user:
        raise NotFoundError("User not found")
    return {"success": True, "data": {"user": UserResponse.model_validate(user)}}


@router.put("/{user_id}")
async def update_user(
    user_id: int,
    data: UserAdminUpdate,
    current_user: User = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repository),
):
    user = await repo.get_by_id(user_id)
    if not user:
        raise NotFoundError("User not found")

    updates = data.model_dump(exclude_unset=True)
    email = updates.pop("email", None)
    if email is not None and email.lower() != user.email:
        existing = await repo.get_by_email(email)
        if existing is not None and existing.id != user.id:
            raise ConflictError("Email already in use")
        user.email = email.lower()

    for field, value in updates.items():
        if value is not None:
            setattr(user, field, value)

    user = await repo.save(user)
    return {
        "success": True,
        "message": "User updated successfully",
        "data": {"user": UserResponse.model_validate(user)},
    }


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    repo: UserRepository = Depends(get_user_repository),
):
    if user_id == current_user.id:
        raise ValidationError("You cannot delete your own account")

    user = await repo.get_by_id(user_id)
    if not user:
        raise NotFoundError("User not found")

    await repo.delete(user)
    return {"success": True, "message": "User deleted successfully"}
