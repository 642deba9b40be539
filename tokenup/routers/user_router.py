from fastapi import APIRouter, Depends, Path

from tokenup.core.auth_middleware import get_current_user, require_admin
from tokenup.deps import get_user_service
from tokenup.schemas.user import AvatarUpdate, User as UserSchema
from tokenup.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserSchema)
def get_me(current_user: UserSchema = Depends(get_current_user)) -> UserSchema:
    return current_user


@router.put("/me/avatar", response_model=UserSchema)
def update_my_avatar(
    body: AvatarUpdate,
    current_user: UserSchema = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> UserSchema:
    return user_service.update_avatar(current_user.id, body.avatar)


@router.get("/{user_id}", response_model=UserSchema)
def get_user(
    user_id: int = Path(..., ge=1),
    user_service: UserService = Depends(get_user_service),
) -> UserSchema:
    return user_service.get_user(user_id)


@router.post("/{user_id}/admin", response_model=UserSchema)
def promote_user(
    user_id: int = Path(..., ge=1),
    admin_user: UserSchema = Depends(require_admin),
    user_service: UserService = Depends(get_user_service),
) -> UserSchema:
    """Grant admin rights to another user. Admin only."""
    return user_service.promote_to_admin(user_id, admin_user)
