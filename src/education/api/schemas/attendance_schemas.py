"""
Attendance API Schemas
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.education.domain.entities.attendance import Attendance, AttendanceStatus


class CreateAttendanceRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    session_id: UUID
    student_id: UUID
    status: AttendanceStatus = AttendanceStatus.PENDING
    reason: Optional[str] = None
    notes: Optional[str] = None
    evidence: Optional[dict[str, Any]] = None


class MarkAttendanceRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    status: AttendanceStatus
    reason: Optional[str] = None
    notes: Optional[str] = None
    evidence: Optional[dict[str, Any]] = None


class AttendanceResponse(BaseModel):
    id: UUID
    session_id: UUID
    student_id: UUID
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    duration: Optional[int] = Field(default=None, description="Minutes")
    notes: Optional[str] = None
    marked_by: Optional[UUID] = None
    marked_at: Optional[datetime] = None
    reason: Optional[str] = None
    evidence: Optional[dict[str, Any]] = None
    created_at: datetime
    student: Optional[dict[str, Any]] = None
    session: Optional[dict[str, Any]] = None

    @classmethod
    def from_entity(
        cls,
        record: Attendance,
        student: Optional[dict[str, Any]] = None,
        session: Optional[dict[str, Any]] = None,
    ) -> "AttendanceResponse":
        return cls(
            id=record.id,
            session_id=record.session_id,
            student_id=record.student_id,
            status=record.status,
            check_in_time=record.check_in_time,
            check_out_time=record.check_out_time,
            duration=record.duration,
            notes=record.notes,
            marked_by=record.marked_by,
            marked_at=record.marked_at,
            reason=record.reason,
            evidence=record.evidence,
            created_at=record.created_at,
            student=student,
            session=session,
        )
