# src/education/infrastructure/repositories/feedback_repository.py
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select

from src.education.domain.entities.feedback import Feedback, FeedbackCategory, FeedbackStatus
from src.education.infrastructure.models import FeedbackModel
from src.shared.infrastructure.database.sqlalchemy_repository import SQLAlchemyRepository


class FeedbackRepository(SQLAlchemyRepository[Feedback, FeedbackModel]):
    model_class = FeedbackModel

    def _to_entity(self, model: FeedbackModel) -> Feedback:
        return Feedback(
            id=model.id,
            session_id=model.session_id,
            student_id=model.student_id,
            tutor_id=model.tutor_id,
            rating=model.rating,
            comment=model.comment,
            category=FeedbackCategory(model.category),
            is_anonymous=model.is_anonymous,
            status=FeedbackStatus(model.status),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Feedback) -> FeedbackModel:
        return FeedbackModel(
            id=entity.id,
            session_id=entity.session_id,
            student_id=entity.student_id,
            tutor_id=entity.tutor_id,
            rating=entity.rating,
            comment=entity.comment,
            category=entity.category.value,
            is_anonymous=entity.is_anonymous,
            status=entity.status.value,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def find_by_session(self, session_id: UUID) -> List[Feedback]:
        stmt = select(FeedbackModel).where(FeedbackModel.session_id == session_id).order_by(FeedbackModel.created_at.desc())
        return [self._to_entity(m) for m in await self._scalars(stmt)]

    async def find_by_tutor(self, tutor_id: UUID, status: Optional[FeedbackStatus] = None) -> List[Feedback]:
        stmt = select(FeedbackModel).where(FeedbackModel.tutor_id == tutor_id)
        if status is not None:
            stmt = stmt.where(FeedbackModel.status == FeedbackStatus(status).value)
        stmt = stmt.order_by(FeedbackModel.created_at.desc())
        return [self._to_entity(m) for m in await self._scalars(stmt)]

    async def average_rating(self, tutor_id: UUID) -> Optional[float]:
        """Mean over feedback that was not rejected; None when there is none."""
        stmt = select(func.avg(FeedbackModel.rating)).where(
            FeedbackModel.tutor_id == tutor_id,
            FeedbackModel.status != FeedbackStatus.REJECTED.value,
        )
        result = await self._execute(stmt, "average_rating")
        value = result.scalar_one_or_none()
        return round(float(value), 2) if value is not None else None
