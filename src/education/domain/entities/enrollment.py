"""
Enrollment Entity - a student's seat in a session
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from src.shared.domain.base_entity import BaseEntity
from src.shared.utils import utcnow


class EnrollmentStatus(str, Enum):
    ENROLLED = "enrolled"
    ATTENDED = "attended"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"


class Enrollment(BaseEntity):
    def __init__(
        self,
        session_id: UUID,
        student_id: UUID,
        status: EnrollmentStatus = EnrollmentStatus.ENROLLED,
        enrollment_date: Optional[datetime] = None,
        notes: Optional[str] = None,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        super().__init__(id, created_at=created_at, updated_at=updated_at)
        self.session_id = session_id
        self.student_id = student_id
        self.status = EnrollmentStatus(status)
        self.enrollment_date = enrollment_date or utcnow()
        self.notes = notes
