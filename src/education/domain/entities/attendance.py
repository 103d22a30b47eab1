"""
Attendance Entity - one row per (session, student)
"""
from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from src.shared.domain.base_entity import BaseAggregateRoot
from src.shared.exceptions import ValidationError
from src.shared.utils import utcnow


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"
    PENDING = "pending"


class Attendance(BaseAggregateRoot):
    """
    Attendance of one student at one session.

    Every mark stamps ``marked_by``/``marked_at``; present and late also
    stamp the check-in time. Marks may be repeated to correct a mistake.
    ``calculate_duration`` is never called implicitly.
    """

    def __init__(
        self,
        session_id: UUID,
        student_id: UUID,
        status: AttendanceStatus = AttendanceStatus.PENDING,
        check_in_time: Optional[datetime] = None,
        check_out_time: Optional[datetime] = None,
        duration: Optional[int] = None,
        notes: Optional[str] = None,
        marked_by: Optional[UUID] = None,
        marked_at: Optional[datetime] = None,
        reason: Optional[str] = None,
        evidence: Optional[dict[str, Any]] = None,
        metadata: Optional[dict[str, Any]] = None,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        super().__init__(id, created_at=created_at, updated_at=updated_at)
        self.session_id = session_id
        self.student_id = student_id
        self.status = AttendanceStatus(status)
        self.check_in_time = check_in_time
        self.check_out_time = check_out_time
        self.duration = duration
        self.notes = notes
        self.marked_by = marked_by
        self.marked_at = marked_at
        self.reason = reason
        self.evidence = evidence
        self.metadata = dict(metadata or {})

    def is_present(self) -> bool:
        return self.status == AttendanceStatus.PRESENT

    def is_absent(self) -> bool:
        return self.status == AttendanceStatus.ABSENT

    def is_late(self) -> bool:
        return self.status == AttendanceStatus.LATE

    def _stamp(self, status: AttendanceStatus, marked_by: UUID, now: datetime) -> None:
        self.status = status
        self.marked_by = marked_by
        self.marked_at = now
        self._touch()

    def mark_present(self, marked_by: UUID, now: Optional[datetime] = None) -> None:
        now = now or utcnow()
        self.check_in_time = now
        self._stamp(AttendanceStatus.PRESENT, marked_by, now)

    def mark_late(self, marked_by: UUID, now: Optional[datetime] = None) -> None:
        now = now or utcnow()
        self.check_in_time = now
        self._stamp(AttendanceStatus.LATE, marked_by, now)

    def mark_absent(self, marked_by: UUID, reason: Optional[str] = None, now: Optional[datetime] = None) -> None:
        self.reason = reason
        self._stamp(AttendanceStatus.ABSENT, marked_by, now or utcnow())

    def mark_excused(
        self,
        marked_by: UUID,
        reason: Optional[str] = None,
        evidence: Optional[dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> None:
        self.reason = reason
        if evidence is not None:
            self.evidence = evidence
        self._stamp(AttendanceStatus.EXCUSED, marked_by, now or utcnow())

    def mark(
        self,
        status: AttendanceStatus,
        marked_by: UUID,
        reason: Optional[str] = None,
        evidence: Optional[dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> None:
        status = AttendanceStatus(status)
        if status == AttendanceStatus.PRESENT:
            self.mark_present(marked_by, now)
        elif status == AttendanceStatus.LATE:
            self.mark_late(marked_by, now)
        elif status == AttendanceStatus.ABSENT:
            self.mark_absent(marked_by, reason, now)
        elif status == AttendanceStatus.EXCUSED:
            self.mark_excused(marked_by, reason, evidence, now)
        else:
            raise ValidationError.for_field("status", "Attendance can only be marked present, late, absent or excused", status.value)

    def check_out(self, now: Optional[datetime] = None) -> None:
        now = now or utcnow()
        if self.check_in_time is None:
            raise ValidationError.for_field("check_out_time", "Student has not checked in")
        if now < self.check_in_time:
            raise ValidationError.for_field("check_out_time", "Check-out cannot be before check-in", now.isoformat())
        self.check_out_time = now
        self._touch()

    def calculate_duration(self) -> int:
        """Minutes between check-in and check-out, written back to ``duration``; 0 when either is missing."""
        if self.check_in_time is None or self.check_out_time is None:
            return 0
        self.duration = round((self.check_out_time - self.check_in_time) / timedelta(minutes=1))
        self._touch()
        return self.duration
