"""
User Service
Profile management and admin user administration
"""
from __future__ import annotations

from typing import Any, List, Optional
from uuid import UUID

from src.identity.domain.entities.user import User, UserStatus
from src.identity.infrastructure.persistence.repositories.user_repository import UserRepository
from src.shared.application.service import ApplicationService
from src.shared.exceptions import AuthorizationError, NotFoundError
from src.shared.logging import get_logger, log_security_event
from src.shared.roles import Role, can_manage

logger = get_logger(__name__)


class UserService(ApplicationService):

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.users = UserRepository(self.session)

    async def get_user(self, user_id: UUID) -> User:
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, actor: User, changes: dict[str, Any]) -> User:
        async with self.uow:
            user = await self.get_user(actor.id)
            user.update_profile(**changes)
            user = await self.users.update(user)
            await self.uow.commit()
        logger.info("user.profile_updated", user_id=str(user.id), fields=sorted(changes))
        return user

    async def list_users(
        self,
        actor: User,
        role: Optional[Role] = None,
        status: Optional[UserStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[User]:
        self.access.check(actor, "user", "list")
        return await self.users.list_users(role=role, status=status, limit=limit, offset=offset)

    async def change_status(self, actor: User, user_id: UUID, status: UserStatus) -> User:
        """Soft status change (activate / deactivate / suspend); accounts are never deleted."""
        self.access.check(actor, "user", "change_status")
        async with self.uow:
            user = await self.get_user(user_id)
            if user.id == actor.id:
                raise AuthorizationError("You cannot change your own account status")
            if not can_manage(actor.role, user.role):
                raise AuthorizationError(f"{actor.role.value} cannot manage {user.role.value} accounts")
            user.change_status(status)
            user = await self.users.update(user)
            await self.uow.commit()
        log_security_event(
            "user_status_changed",
            user_id=str(user.id),
            details={"status": user.status.value, "changed_by": str(actor.id)},
        )
        return user
