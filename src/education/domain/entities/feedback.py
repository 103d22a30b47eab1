"""
Feedback Entity - a student's rating of a completed session
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from src.education.domain.errors import InvalidTransitionError
from src.shared.domain.base_entity import BaseAggregateRoot
from src.shared.exceptions import ValidationError


class FeedbackCategory(str, Enum):
    TEACHING_QUALITY = "teaching_quality"
    COMMUNICATION = "communication"
    PUNCTUALITY = "punctuality"
    MATERIALS = "materials"
    OVERALL = "overall"


class FeedbackStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Feedback(BaseAggregateRoot):
    MIN_RATING = 1
    MAX_RATING = 5

    def __init__(
        self,
        session_id: UUID,
        student_id: UUID,
        tutor_id: UUID,
        rating: int,
        comment: Optional[str] = None,
        category: FeedbackCategory = FeedbackCategory.OVERALL,
        is_anonymous: bool = False,
        status: FeedbackStatus = FeedbackStatus.PENDING,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        super().__init__(id, created_at=created_at, updated_at=updated_at)
        self.session_id = session_id
        self.student_id = student_id
        self.tutor_id = tutor_id
        self.rating = rating
        self.comment = comment
        self.category = FeedbackCategory(category)
        self.is_anonymous = is_anonymous
        self.status = FeedbackStatus(status)

    @classmethod
    def create(cls, session_id: UUID, student_id: UUID, tutor_id: UUID, rating: int, **fields) -> Feedback:
        if not cls.MIN_RATING <= rating <= cls.MAX_RATING:
            raise ValidationError.for_field(
                "rating", f"Rating must be between {cls.MIN_RATING} and {cls.MAX_RATING}", rating
            )
        return cls(session_id=session_id, student_id=student_id, tutor_id=tutor_id, rating=rating, **fields)

    def _moderate(self, status: FeedbackStatus, operation: str) -> None:
        if self.status != FeedbackStatus.PENDING:
            raise InvalidTransitionError("feedback", self.status.value, operation)
        self.status = status
        self._touch()

    def approve(self) -> None:
        self._moderate(FeedbackStatus.APPROVED, "approve")

    def reject(self) -> None:
        self._moderate(FeedbackStatus.REJECTED, "reject")
