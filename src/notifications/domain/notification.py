"""
Notification Entity - user-scoped in-app message
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from src.shared.domain.base_entity import BaseEntity
from src.shared.utils import utcnow


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    SESSION = "session"
    PAYMENT = "payment"
    ANNOUNCEMENT = "announcement"


class Notification(BaseEntity):
    """Only ``is_read`` changes after creation."""

    def __init__(
        self,
        user_id: UUID,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        is_read: bool = False,
        action_url: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
        expires_at: Optional[datetime] = None,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        super().__init__(id, created_at=created_at, updated_at=updated_at)
        self.user_id = user_id
        self.title = title
        self.message = message
        self.type = NotificationType(type)
        self.is_read = is_read
        self.action_url = action_url
        self.metadata = dict(metadata or {})
        self.expires_at = expires_at

    def mark_read(self) -> None:
        if not self.is_read:
            self.is_read = True
            self._touch()

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires_at is not None and (now or utcnow()) > self.expires_at
