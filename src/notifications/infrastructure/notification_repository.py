# src/notifications/infrastructure/notification_repository.py
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import func, or_, select, update

from src.notifications.domain.notification import Notification, NotificationType
from src.notifications.infrastructure.models import NotificationModel
from src.shared.infrastructure.database.sqlalchemy_repository import SQLAlchemyRepository
from src.shared.utils import utcnow


class NotificationRepository(SQLAlchemyRepository[Notification, NotificationModel]):
    """Inbox queries never return expired rows."""

    model_class = NotificationModel

    def _to_entity(self, model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            title=model.title,
            message=model.message,
            type=NotificationType(model.type),
            is_read=model.is_read,
            action_url=model.action_url,
            metadata=dict(model.metadata_ or {}),
            expires_at=model.expires_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Notification) -> NotificationModel:
        return NotificationModel(
            id=entity.id,
            user_id=entity.user_id,
            title=entity.title,
            message=entity.message,
            type=entity.type.value,
            is_read=entity.is_read,
            action_url=entity.action_url,
            metadata_=dict(entity.metadata),
            expires_at=entity.expires_at,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    @staticmethod
    def _live(stmt: Any, user_id: UUID, now: Optional[datetime]) -> Any:
        return stmt.where(
            NotificationModel.user_id == user_id,
            or_(NotificationModel.expires_at.is_(None), NotificationModel.expires_at > (now or utcnow())),
        )

    async def add_many(self, notifications: List[Notification]) -> None:
        self.session.add_all([self._to_model(n) for n in notifications])
        await self._flush("add_many")

    async def list_for_user(
        self,
        user_id: UUID,
        unread_only: bool = False,
        limit: int = 50,
        offset: int = 0,
        now: Optional[datetime] = None,
    ) -> List[Notification]:
        stmt = self._live(select(NotificationModel), user_id, now)
        if unread_only:
            stmt = stmt.where(NotificationModel.is_read.is_(False))
        stmt = stmt.order_by(NotificationModel.created_at.desc()).limit(limit).offset(offset)
        return [self._to_entity(m) for m in await self._scalars(stmt)]

    async def unread_count(self, user_id: UUID, now: Optional[datetime] = None) -> int:
        stmt = self._live(select(func.count()).select_from(NotificationModel), user_id, now)
        stmt = stmt.where(NotificationModel.is_read.is_(False))
        result = await self._execute(stmt, "unread_count")
        return int(result.scalar_one())

    async def mark_all_read(self, user_id: UUID) -> int:
        stmt = (
            update(NotificationModel)
            .where(NotificationModel.user_id == user_id, NotificationModel.is_read.is_(False))
            .values(is_read=True, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt, "mark_all_read")
        return result.rowcount
