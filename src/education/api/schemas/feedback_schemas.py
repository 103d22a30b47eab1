"""
Feedback API Schemas
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.education.domain.entities.feedback import Feedback, FeedbackCategory, FeedbackStatus


class SubmitFeedbackRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    session_id: UUID
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=2000)
    category: FeedbackCategory = FeedbackCategory.OVERALL
    is_anonymous: bool = False


class ModerateFeedbackRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    approve: bool


class FeedbackResponse(BaseModel):
    id: UUID
    session_id: UUID
    tutor_id: UUID
    student_id: Optional[UUID] = Field(default=None, description="Hidden for anonymous feedback")
    rating: int
    comment: Optional[str] = None
    category: FeedbackCategory
    is_anonymous: bool
    status: FeedbackStatus
    created_at: datetime

    @classmethod
    def from_entity(cls, feedback: Feedback, reveal_author: bool = False) -> "FeedbackResponse":
        return cls(
            id=feedback.id,
            session_id=feedback.session_id,
            tutor_id=feedback.tutor_id,
            student_id=feedback.student_id if reveal_author or not feedback.is_anonymous else None,
            rating=feedback.rating,
            comment=feedback.comment,
            category=feedback.category,
            is_anonymous=feedback.is_anonymous,
            status=feedback.status,
            created_at=feedback.created_at,
        )
