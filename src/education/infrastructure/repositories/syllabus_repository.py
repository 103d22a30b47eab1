# src/education/infrastructure/repositories/syllabus_repository.py
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, select

from src.education.domain.entities.syllabus import Syllabus
from src.education.infrastructure.models import SyllabusModel
from src.shared.infrastructure.database.sqlalchemy_repository import SQLAlchemyRepository


class SyllabusRepository(SQLAlchemyRepository[Syllabus, SyllabusModel]):
    model_class = SyllabusModel

    def _to_entity(self, model: SyllabusModel) -> Syllabus:
        return Syllabus(
            id=model.id,
            title=model.title,
            subject=model.subject,
            grade_level=model.grade_level,
            description=model.description,
            topics=list(model.topics or []),
            total_hours=model.total_hours,
            is_active=model.is_active,
            created_by=model.created_by,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Syllabus) -> SyllabusModel:
        return SyllabusModel(
            id=entity.id,
            title=entity.title,
            subject=entity.subject,
            grade_level=entity.grade_level,
            description=entity.description,
            topics=list(entity.topics),
            total_hours=entity.total_hours,
            is_active=entity.is_active,
            created_by=entity.created_by,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def list_syllabi(
        self,
        subject: Optional[str] = None,
        is_active: Optional[bool] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Syllabus]:
        stmt = select(SyllabusModel)
        if subject:
            stmt = stmt.where(func.lower(SyllabusModel.subject) == subject.strip().lower())
        if is_active is not None:
            stmt = stmt.where(SyllabusModel.is_active.is_(is_active))
        stmt = stmt.order_by(SyllabusModel.subject.asc(), SyllabusModel.title.asc()).limit(limit).offset(offset)
        return [self._to_entity(m) for m in await self._scalars(stmt)]
