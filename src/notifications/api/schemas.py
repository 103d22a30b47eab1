from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel

from src.notifications.domain.notification import Notification, NotificationType


class NotificationResponse(BaseModel):
    id: UUID
    title: str
    message: str
    type: NotificationType
    is_read: bool
    action_url: Optional[str] = None
    metadata: Dict[str, Any] = {}
    expires_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationResponse":
        return cls(
            id=notification.id,
            title=notification.title,
            message=notification.message,
            type=notification.type,
            is_read=notification.is_read,
            action_url=notification.action_url,
            metadata=notification.metadata,
            expires_at=notification.expires_at,
            created_at=notification.created_at,
        )
