# src/education/infrastructure/repositories/enrollment_repository.py
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select

from src.education.domain.entities.enrollment import Enrollment, EnrollmentStatus
from src.education.infrastructure.models import SessionStudentModel
from src.shared.infrastructure.database.sqlalchemy_repository import SQLAlchemyRepository


class EnrollmentRepository(SQLAlchemyRepository[Enrollment, SessionStudentModel]):
    model_class = SessionStudentModel

    def _to_entity(self, model: SessionStudentModel) -> Enrollment:
        return Enrollment(
            id=model.id,
            session_id=model.session_id,
            student_id=model.student_id,
            status=EnrollmentStatus(model.status),
            enrollment_date=model.enrollment_date,
            notes=model.notes,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Enrollment) -> SessionStudentModel:
        return SessionStudentModel(
            id=entity.id,
            session_id=entity.session_id,
            student_id=entity.student_id,
            status=entity.status.value,
            enrollment_date=entity.enrollment_date,
            notes=entity.notes,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def find_for(self, session_id: UUID, student_id: UUID) -> Optional[Enrollment]:
        return await self.find_one(session_id=session_id, student_id=student_id)

    async def student_ids(self, session_id: UUID) -> List[UUID]:
        stmt = select(SessionStudentModel.student_id).where(SessionStudentModel.session_id == session_id)
        result = await self._execute(stmt, "select")
        return list(result.scalars().all())

    async def remove(self, session_id: UUID, student_id: UUID) -> bool:
        stmt = delete(SessionStudentModel).where(
            SessionStudentModel.session_id == session_id,
            SessionStudentModel.student_id == student_id,
        )
        result = await self._execute(stmt, "delete")
        return result.rowcount > 0
