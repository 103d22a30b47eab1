# src/education/infrastructure/repositories/session_repository.py
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import select, update

from src.education.domain.entities.teaching_session import SessionStatus, SessionType, TeachingSession
from src.education.infrastructure.models import SessionModel, SessionStudentModel
from src.education.infrastructure.repositories.projections import student_view
from src.identity.infrastructure.persistence.models.user_model import UserModel
from src.shared.infrastructure.database.sqlalchemy_repository import SQLAlchemyRepository
from src.shared.logging import get_logger
from src.shared.utils import utcnow

logger = get_logger(__name__)

# Owned by try_join/try_leave or immutable; never written back from an entity.
_PROTECTED_COLUMNS = ("id", "current_students", "created_at")


class SessionRepository(SQLAlchemyRepository[TeachingSession, SessionModel]):
    """
    Teaching sessions.

    Seat counting goes through ``try_join``/``try_leave``: one conditional
    UPDATE each, so concurrent joins can never push ``current_students``
    past ``max_students``.
    """

    model_class = SessionModel

    def _to_entity(self, model: SessionModel) -> TeachingSession:
        return TeachingSession(
            id=model.id,
            tutor_id=model.tutor_id,
            title=model.title,
            description=model.description,
            topic=model.topic,
            start_time=model.start_time,
            end_time=model.end_time,
            duration=model.duration,
            status=SessionStatus(model.status),
            session_type=SessionType(model.session_type),
            max_students=model.max_students,
            current_students=model.current_students,
            location=model.location,
            meeting_link=model.meeting_link,
            materials=list(model.materials or []),
            notes=model.notes,
            price=model.price,
            currency=model.currency,
            is_recurring=model.is_recurring,
            recurring_pattern=model.recurring_pattern,
            recurring_end_date=model.recurring_end_date,
            tags=list(model.tags or []),
            metadata=dict(model.metadata_ or {}),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: TeachingSession) -> SessionModel:
        return SessionModel(
            id=entity.id,
            tutor_id=entity.tutor_id,
            title=entity.title,
            description=entity.description,
            topic=entity.topic,
            start_time=entity.start_time,
            end_time=entity.end_time,
            duration=entity.duration,
            status=entity.status.value,
            session_type=entity.session_type.value,
            max_students=entity.max_students,
            current_students=entity.current_students,
            location=entity.location,
            meeting_link=entity.meeting_link,
            materials=list(entity.materials),
            notes=entity.notes,
            price=entity.price,
            currency=entity.currency,
            is_recurring=entity.is_recurring,
            recurring_pattern=entity.recurring_pattern.value if entity.recurring_pattern else None,
            recurring_end_date=entity.recurring_end_date,
            tags=list(entity.tags),
            metadata_=dict(entity.metadata),
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def reload(self, session_id: UUID) -> Optional[TeachingSession]:
        """Fresh read that overwrites whatever the identity map holds."""
        stmt = (
            select(SessionModel)
            .where(SessionModel.id == session_id)
            .execution_options(populate_existing=True)
        )
        models = await self._scalars(stmt)
        return self._to_entity(models[0]) if models else None

    async def update(self, entity: TeachingSession) -> TeachingSession:
        model = self._to_model(entity)
        values = {
            getattr(SessionModel, attr.key): getattr(model, attr.key)
            for attr in sa_inspect(SessionModel).column_attrs
            if attr.key not in _PROTECTED_COLUMNS
        }
        stmt = (
            update(SessionModel)
            .where(SessionModel.id == entity.id)
            .values(values)
            .execution_options(synchronize_session=False)
        )
        await self._execute(stmt, "update")
        return await self.reload(entity.id)

    # -------- Seat counting --------------------------------------------------

    async def try_join(self, session_id: UUID) -> bool:
        """Take one seat if the session is scheduled and not full. False when nothing matched."""
        stmt = (
            update(SessionModel)
            .where(
                SessionModel.id == session_id,
                SessionModel.status == SessionStatus.SCHEDULED.value,
                SessionModel.current_students < SessionModel.max_students,
            )
            .values(current_students=SessionModel.current_students + 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt, "join")
        if result.rowcount != 1:
            logger.debug("Conditional join matched no row", session_id=str(session_id))
        return result.rowcount == 1

    async def try_leave(self, session_id: UUID) -> bool:
        stmt = (
            update(SessionModel)
            .where(SessionModel.id == session_id, SessionModel.current_students > 0)
            .values(current_students=SessionModel.current_students - 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt, "leave")
        return result.rowcount == 1

    # -------- Finders --------------------------------------------------------

    @staticmethod
    def _in_window(stmt: Any, start: Optional[datetime], end: Optional[datetime]) -> Any:
        if start is not None:
            stmt = stmt.where(SessionModel.start_time >= start)
        if end is not None:
            stmt = stmt.where(SessionModel.start_time <= end)
        return stmt

    async def find_upcoming(
        self,
        now: Optional[datetime] = None,
        tutor_id: Optional[UUID] = None,
        limit: int = 50,
    ) -> List[TeachingSession]:
        stmt = select(SessionModel).where(
            SessionModel.start_time > (now or utcnow()),
            SessionModel.status.in_([SessionStatus.SCHEDULED.value, SessionStatus.RESCHEDULED.value]),
        )
        if tutor_id is not None:
            stmt = stmt.where(SessionModel.tutor_id == tutor_id)
        stmt = stmt.order_by(SessionModel.start_time.asc()).limit(limit)
        return [self._to_entity(m) for m in await self._scalars(stmt)]

    async def find_by_tutor(
        self,
        tutor_id: UUID,
        status: Optional[SessionStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[TeachingSession]:
        stmt = select(SessionModel).where(SessionModel.tutor_id == tutor_id)
        if status is not None:
            stmt = stmt.where(SessionModel.status == SessionStatus(status).value)
        stmt = self._in_window(stmt, start, end).order_by(SessionModel.start_time.asc())
        return [self._to_entity(m) for m in await self._scalars(stmt)]

    async def find_by_student(
        self,
        student_id: UUID,
        status: Optional[SessionStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[TeachingSession]:
        stmt = (
            select(SessionModel)
            .join(SessionStudentModel, SessionStudentModel.session_id == SessionModel.id)
            .where(SessionStudentModel.student_id == student_id)
        )
        if status is not None:
            stmt = stmt.where(SessionModel.status == SessionStatus(status).value)
        stmt = self._in_window(stmt, start, end).order_by(SessionModel.start_time.asc())
        return [self._to_entity(m) for m in await self._scalars(stmt)]

    async def list_sessions(
        self,
        status: Optional[SessionStatus] = None,
        session_type: Optional[SessionType] = None,
        tutor_id: Optional[UUID] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[TeachingSession]:
        stmt = select(SessionModel)
        if status is not None:
            stmt = stmt.where(SessionModel.status == SessionStatus(status).value)
        if session_type is not None:
            stmt = stmt.where(SessionModel.session_type == SessionType(session_type).value)
        if tutor_id is not None:
            stmt = stmt.where(SessionModel.tutor_id == tutor_id)
        stmt = self._in_window(stmt, start, end)
        stmt = stmt.order_by(SessionModel.start_time.asc()).limit(limit).offset(offset)
        return [self._to_entity(m) for m in await self._scalars(stmt)]

    async def roster(self, session_id: UUID) -> List[dict[str, Any]]:
        """Enrolled students with their enrollment state, in enrollment order."""
        stmt = (
            select(SessionStudentModel, UserModel)
            .join(UserModel, UserModel.id == SessionStudentModel.student_id)
            .where(SessionStudentModel.session_id == session_id)
            .order_by(SessionStudentModel.enrollment_date.asc())
        )
        result = await self._execute(stmt, "roster")
        return [
            {
                **student_view(user),
                "enrollment_status": enrollment.status,
                "enrollment_date": enrollment.enrollment_date,
            }
            for enrollment, user in result.all()
        ]
