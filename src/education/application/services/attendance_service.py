"""
Attendance Service
Roster pre-marking, marking, check-out and attendance reports
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from src.education.domain.entities.attendance import Attendance, AttendanceStatus
from src.education.domain.entities.teaching_session import TeachingSession
from src.education.domain.errors import SessionNotFoundError
from src.education.infrastructure.repositories import (
    AttendanceRepository,
    EnrollmentRepository,
    SessionRepository,
)
from src.identity.domain.entities.user import User
from src.shared.application.service import ApplicationService
from src.shared.exceptions import NotFoundError, ValidationError
from src.shared.logging import get_logger

logger = get_logger(__name__)


class AttendanceService(ApplicationService):
    """Only the session's tutor (or an admin) writes attendance."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.attendance = AttendanceRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.enrollments = EnrollmentRepository(self.session)

    async def _session_for(self, actor: User, session_id: UUID, action: str) -> TeachingSession:
        session = await self.sessions.get_by_id(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        self.access.check(actor, "attendance", action, [session.tutor_id])
        return session

    async def _load(self, actor: User, attendance_id: UUID, action: str) -> Attendance:
        record = await self.attendance.get_by_id(attendance_id)
        if record is None:
            raise NotFoundError("Attendance record not found")
        await self._session_for(actor, record.session_id, action)
        return record

    # -------- Writes ---------------------------------------------------------

    async def premark_roster(self, actor: User, session_id: UUID) -> List[Attendance]:
        """Create pending rows for enrolled students that have none yet."""
        async with self.uow:
            await self._session_for(actor, session_id, "mark")
            created = []
            for student_id in await self.attendance.unmarked_student_ids(session_id):
                created.append(await self.attendance.add(Attendance(session_id=session_id, student_id=student_id)))
            await self.uow.commit()
        logger.info("attendance.roster_premarked", session_id=str(session_id), created=len(created))
        return created

    async def create_attendance(
        self,
        actor: User,
        session_id: UUID,
        student_id: UUID,
        status: AttendanceStatus = AttendanceStatus.PENDING,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        evidence: Optional[dict[str, Any]] = None,
    ) -> Attendance:
        """
        Raises:
            ValidationError: Student not enrolled in the session
            DuplicateConstraintError: A row for this student already exists (409)
        """
        async with self.uow:
            await self._session_for(actor, session_id, "mark")
            if await self.enrollments.find_for(session_id, student_id) is None:
                raise ValidationError.for_field("student_id", "Student is not enrolled in this session", str(student_id))
            record = Attendance(session_id=session_id, student_id=student_id, notes=notes)
            if AttendanceStatus(status) != AttendanceStatus.PENDING:
                record.mark(status, actor.id, reason=reason, evidence=evidence)
            record = await self.attendance.add(record)
            await self.uow.commit()
        logger.info("attendance.created", attendance_id=str(record.id), status=record.status.value)
        return record

    async def mark(
        self,
        actor: User,
        attendance_id: UUID,
        status: AttendanceStatus,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
        evidence: Optional[dict[str, Any]] = None,
    ) -> Attendance:
        async with self.uow:
            record = await self._load(actor, attendance_id, "mark")
            record.mark(status, actor.id, reason=reason, evidence=evidence)
            if notes is not None:
                record.notes = notes
            record = await self.attendance.update(record)
            await self.uow.commit()
        logger.info("attendance.marked", attendance_id=str(attendance_id), status=record.status.value)
        return record

    async def check_out(self, actor: User, attendance_id: UUID) -> Attendance:
        async with self.uow:
            record = await self._load(actor, attendance_id, "mark")
            record.check_out()
            record = await self.attendance.update(record)
            await self.uow.commit()
        return record

    async def calculate_duration(self, actor: User, attendance_id: UUID) -> Attendance:
        async with self.uow:
            record = await self._load(actor, attendance_id, "mark")
            record.calculate_duration()
            record = await self.attendance.update(record)
            await self.uow.commit()
        return record

    # -------- Reads ----------------------------------------------------------

    async def get_attendance(self, actor: User, attendance_id: UUID) -> Attendance:
        record = await self.attendance.get_by_id(attendance_id)
        if record is None:
            raise NotFoundError("Attendance record not found")
        session = await self.sessions.get_by_id(record.session_id)
        self.access.check(actor, "attendance", "read", [record.student_id, session.tutor_id if session else None])
        return record

    async def list_by_session(self, actor: User, session_id: UUID) -> List[tuple[Attendance, Optional[dict[str, Any]]]]:
        await self._session_for(actor, session_id, "read")
        return await self.attendance.find_by_session(session_id)

    async def list_by_student(
        self,
        actor: User,
        student_id: UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[tuple[Attendance, Optional[dict[str, Any]]]]:
        self.access.check(actor, "attendance", "read", [student_id])
        return await self.attendance.find_by_student(student_id, start=start, end=end)

    async def stats(
        self, actor: User, session_id: Optional[UUID] = None, student_id: Optional[UUID] = None
    ) -> dict[str, int]:
        if session_id is not None:
            await self._session_for(actor, session_id, "read")
        if student_id is not None:
            self.access.check(actor, "attendance", "read", [student_id])
        if session_id is None and student_id is None:
            self.access.check(actor, "attendance", "stats")
        return await self.attendance.stats(session_id=session_id, student_id=student_id)
