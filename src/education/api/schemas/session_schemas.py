"""
Session API Schemas
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.education.api.schemas.common import UtcDateTime
from src.education.domain.entities.teaching_session import (
    RecurringPattern,
    SessionStatus,
    SessionType,
    TeachingSession,
)


class CreateSessionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: str = Field(..., min_length=3, max_length=255)
    topic: str = Field(..., min_length=1, max_length=255)
    start_time: UtcDateTime
    end_time: UtcDateTime
    duration: Optional[int] = Field(default=None, ge=15, le=480, description="Minutes; derived from the window when omitted")
    description: Optional[str] = None
    session_type: SessionType = SessionType.ONE_ON_ONE
    max_students: int = Field(default=1, ge=1, le=50)
    location: Optional[str] = Field(default=None, max_length=255)
    meeting_link: Optional[str] = Field(default=None, max_length=500)
    materials: list[Any] = Field(default_factory=list)
    notes: Optional[str] = None
    price: Decimal = Field(default=Decimal("0.00"), ge=0, max_digits=10, decimal_places=2)
    currency: Optional[str] = Field(default=None, pattern=r"^[A-Z]{3}$")
    is_recurring: bool = False
    recurring_pattern: Optional[RecurringPattern] = None
    recurring_end_date: Optional[UtcDateTime] = None
    tags: list[Any] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    tutor_id: Optional[UUID] = Field(default=None, description="Admins only; tutors always own their sessions")


class UpdateSessionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=3, max_length=255)
    topic: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    session_type: Optional[SessionType] = None
    max_students: Optional[int] = Field(default=None, ge=1, le=50)
    location: Optional[str] = Field(default=None, max_length=255)
    meeting_link: Optional[str] = Field(default=None, max_length=500)
    materials: Optional[list[Any]] = None
    notes: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    currency: Optional[str] = Field(default=None, pattern=r"^[A-Z]{3}$")
    is_recurring: Optional[bool] = None
    recurring_pattern: Optional[RecurringPattern] = None
    recurring_end_date: Optional[UtcDateTime] = None
    tags: Optional[list[Any]] = None
    metadata: Optional[dict[str, Any]] = None


class RescheduleRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start_time: UtcDateTime
    end_time: UtcDateTime


class CancelSessionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    reason: Optional[str] = Field(default=None, max_length=500)


class SessionResponse(BaseModel):
    id: UUID
    tutor_id: UUID
    title: str
    description: Optional[str] = None
    topic: str
    start_time: datetime
    end_time: datetime
    duration: int
    status: SessionStatus
    session_type: SessionType
    max_students: int
    current_students: int
    can_join: bool
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    materials: list[Any] = []
    notes: Optional[str] = None
    price: Decimal
    currency: str
    is_recurring: bool
    recurring_pattern: Optional[RecurringPattern] = None
    recurring_end_date: Optional[datetime] = None
    tags: list[Any] = []
    metadata: dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, session: TeachingSession) -> "SessionResponse":
        return cls(
            id=session.id,
            tutor_id=session.tutor_id,
            title=session.title,
            description=session.description,
            topic=session.topic,
            start_time=session.start_time,
            end_time=session.end_time,
            duration=session.duration,
            status=session.status,
            session_type=session.session_type,
            max_students=session.max_students,
            current_students=session.current_students,
            can_join=session.can_join(),
            location=session.location,
            meeting_link=session.meeting_link,
            materials=session.materials,
            notes=session.notes,
            price=session.price,
            currency=session.currency,
            is_recurring=session.is_recurring,
            recurring_pattern=session.recurring_pattern,
            recurring_end_date=session.recurring_end_date,
            tags=session.tags,
            metadata=session.metadata,
            created_at=session.created_at,
            updated_at=session.updated_at,
        )
