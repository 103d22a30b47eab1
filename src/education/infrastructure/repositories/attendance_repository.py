# src/education/infrastructure/repositories/attendance_repository.py
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select

from src.education.domain.entities.attendance import Attendance, AttendanceStatus
from src.education.infrastructure.models import AttendanceModel, SessionModel, SessionStudentModel
from src.education.infrastructure.repositories.projections import session_view, student_view
from src.identity.infrastructure.persistence.models.user_model import UserModel
from src.shared.infrastructure.database.sqlalchemy_repository import SQLAlchemyRepository


class AttendanceRepository(SQLAlchemyRepository[Attendance, AttendanceModel]):
    """
    Attendance rows, unique per (session, student).

    A second insert for the same pair surfaces as DuplicateConstraintError
    through the base class error translation.
    """

    model_class = AttendanceModel

    def _to_entity(self, model: AttendanceModel) -> Attendance:
        return Attendance(
            id=model.id,
            session_id=model.session_id,
            student_id=model.student_id,
            status=AttendanceStatus(model.status),
            check_in_time=model.check_in_time,
            check_out_time=model.check_out_time,
            duration=model.duration,
            notes=model.notes,
            marked_by=model.marked_by,
            marked_at=model.marked_at,
            reason=model.reason,
            evidence=model.evidence,
            metadata=dict(model.metadata_ or {}),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Attendance) -> AttendanceModel:
        return AttendanceModel(
            id=entity.id,
            session_id=entity.session_id,
            student_id=entity.student_id,
            status=entity.status.value,
            check_in_time=entity.check_in_time,
            check_out_time=entity.check_out_time,
            duration=entity.duration,
            notes=entity.notes,
            marked_by=entity.marked_by,
            marked_at=entity.marked_at,
            reason=entity.reason,
            evidence=entity.evidence,
            metadata_=dict(entity.metadata),
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def find_for(self, session_id: UUID, student_id: UUID) -> Optional[Attendance]:
        return await self.find_one(session_id=session_id, student_id=student_id)

    async def delete_pending(self, session_id: UUID, student_id: UUID) -> bool:
        stmt = delete(AttendanceModel).where(
            AttendanceModel.session_id == session_id,
            AttendanceModel.student_id == student_id,
            AttendanceModel.status == AttendanceStatus.PENDING.value,
        )
        result = await self._execute(stmt, "delete_pending")
        return result.rowcount > 0

    async def unmarked_student_ids(self, session_id: UUID) -> List[UUID]:
        """Enrolled students of the session that have no attendance row yet."""
        has_row = select(AttendanceModel.id).where(
            AttendanceModel.session_id == session_id,
            AttendanceModel.student_id == SessionStudentModel.student_id,
        )
        stmt = select(SessionStudentModel.student_id).where(
            SessionStudentModel.session_id == session_id,
            ~has_row.exists(),
        )
        result = await self._execute(stmt, "unmarked_student_ids")
        return list(result.scalars().all())

    async def find_by_session(self, session_id: UUID) -> List[tuple[Attendance, Optional[dict[str, Any]]]]:
        stmt = (
            select(AttendanceModel, UserModel)
            .join(UserModel, UserModel.id == AttendanceModel.student_id)
            .where(AttendanceModel.session_id == session_id)
            .order_by(AttendanceModel.created_at.asc())
        )
        result = await self._execute(stmt, "find_by_session")
        return [(self._to_entity(a), student_view(u)) for a, u in result.all()]

    async def find_by_student(
        self,
        student_id: UUID,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[tuple[Attendance, Optional[dict[str, Any]]]]:
        """Most recent session first; the date range applies to the session start."""
        stmt = (
            select(AttendanceModel, SessionModel)
            .join(SessionModel, SessionModel.id == AttendanceModel.session_id)
            .where(AttendanceModel.student_id == student_id)
        )
        if start is not None:
            stmt = stmt.where(SessionModel.start_time >= start)
        if end is not None:
            stmt = stmt.where(SessionModel.start_time <= end)
        stmt = stmt.order_by(SessionModel.start_time.desc())
        result = await self._execute(stmt, "find_by_student")
        return [(self._to_entity(a), session_view(s)) for a, s in result.all()]

    async def stats(self, session_id: Optional[UUID] = None, student_id: Optional[UUID] = None) -> dict[str, int]:
        stmt = select(AttendanceModel.status, func.count()).group_by(AttendanceModel.status)
        if session_id is not None:
            stmt = stmt.where(AttendanceModel.session_id == session_id)
        if student_id is not None:
            stmt = stmt.where(AttendanceModel.student_id == student_id)
        result = await self._execute(stmt, "stats")
        counts = {s.value: 0 for s in AttendanceStatus}
        for status, count in result.all():
            counts[status] = int(count)
        return counts
