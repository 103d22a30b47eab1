# src/notifications/infrastructure/models.py
"""
Notification system models.
Contains:
- NotificationModel (in-app inbox rows)
Important:
- Rows are created inside the unit of work of the mutation they describe
- Only is_read is updated afterwards
"""
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON, Boolean, CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.infrastructure.database.base_model import Base


class NotificationModel(Base):
    """In-app notification for one user."""
    __tablename__ = "notifications"

    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="info")
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    action_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    metadata_: Mapped[dict[str, Any]] = mapped_column("metadata", JSON, nullable=False, default=dict)
    expires_at: Mapped[Optional[datetime]] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint(
            "type IN ('info', 'success', 'warning', 'error', 'session', 'payment', 'announcement')",
            name="ck_notifications_type",
        ),
        Index("ix_notifications_user_read", "user_id", "is_read"),
    )
