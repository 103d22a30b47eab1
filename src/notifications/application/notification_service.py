"""
Notification inbox service
"""
from __future__ import annotations

from typing import List
from uuid import UUID

from src.identity.domain.entities.user import User
from src.notifications.domain.notification import Notification
from src.notifications.infrastructure.notification_repository import NotificationRepository
from src.shared.application.service import ApplicationService
from src.shared.exceptions import NotFoundError


class NotificationService(ApplicationService):
    """A user only ever sees and changes their own notifications."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.notifications = NotificationRepository(self.session)

    async def list_for(self, user: User, unread_only: bool = False, limit: int = 50, offset: int = 0) -> List[Notification]:
        return await self.notifications.list_for_user(user.id, unread_only=unread_only, limit=limit, offset=offset)

    async def unread_count(self, user: User) -> int:
        return await self.notifications.unread_count(user.id)

    async def mark_read(self, user: User, notification_id: UUID) -> Notification:
        async with self.uow:
            notification = await self.notifications.get_by_id(notification_id)
            if notification is None or notification.user_id != user.id:
                raise NotFoundError("Notification not found")
            notification.mark_read()
            notification = await self.notifications.update(notification)
            await self.uow.commit()
        return notification

    async def mark_all_read(self, user: User) -> int:
        async with self.uow:
            updated = await self.notifications.mark_all_read(user.id)
            await self.uow.commit()
        return updated
