# src/identity/api/routes/users.py

from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from src.identity.api.dependencies.auth import CurrentUser, get_user_service, require_roles
from src.identity.api.schemas.user_schemas import (
    UpdateProfileRequest,
    UpdateStatusRequest,
    UserProfileResponse,
    UserResponse,
)
from src.identity.application.services.user_service import UserService
from src.identity.domain.entities.user import User, UserStatus
from src.shared.http.responses import ok
from src.shared.roles import Role

router = APIRouter(prefix="/api/users", tags=["Users"])

UserServiceDep = Annotated[UserService, Depends(get_user_service)]
AdminUser = Annotated[User, Depends(require_roles(Role.ADMIN, Role.SUPER_ADMIN))]


@router.get("/me")
async def get_me(current_user: CurrentUser):
    return ok(UserProfileResponse.from_entity(current_user))


@router.put("/me")
async def update_me(payload: UpdateProfileRequest, current_user: CurrentUser, service: UserServiceDep):
    user = await service.update_profile(current_user, payload.model_dump(exclude_unset=True))
    return ok(UserProfileResponse.from_entity(user), message="Profile updated successfully")


@router.get("")
async def list_users(
    admin: AdminUser,
    service: UserServiceDep,
    role: Optional[Role] = None,
    status: Optional[UserStatus] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    users = await service.list_users(admin, role=role, status=status, limit=limit, offset=offset)
    return ok([UserResponse.from_entity(u) for u in users])


@router.get("/{user_id}")
async def get_user(user_id: UUID, admin: AdminUser, service: UserServiceDep):
    return ok(UserProfileResponse.from_entity(await service.get_user(user_id)))


@router.patch("/{user_id}/status")
async def change_status(user_id: UUID, payload: UpdateStatusRequest, admin: AdminUser, service: UserServiceDep):
    user = await service.change_status(admin, user_id, payload.status)
    return ok(UserResponse.from_entity(user), message=f"User status changed to {user.status.value}")
