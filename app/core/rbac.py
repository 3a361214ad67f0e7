from fastapi import Depends

from app.core.dependencies import get_current_user
from app.core.exceptions import AuthorizationError
from app.models.user import User, RoleEnum


def require_role(*allowed_roles: RoleEnum):
    """Dependency factory that lets only the given roles through."""
    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            raise AuthorizationError(
                f"User role {current_user.role.value} is not authorized to access this route"
            )
        return current_user
    return role_checker


def is_staff(user: User) -> bool:
    return user.role in (RoleEnum.trainer, RoleEnum.admin)


require_admin = require_role(RoleEnum.admin)
require_staff = require_role(RoleEnum.trainer, RoleEnum.admin)
