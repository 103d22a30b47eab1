"""
Feedback Service
"""
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from src.education.domain.entities.feedback import Feedback, FeedbackCategory
from src.education.domain.entities.teaching_session import SessionStatus
from src.education.domain.errors import InvalidTransitionError, SessionNotFoundError
from src.education.infrastructure.repositories import (
    EnrollmentRepository,
    FeedbackRepository,
    SessionRepository,
)
from src.identity.domain.entities.user import User
from src.shared.application.service import ApplicationService
from src.shared.exceptions import AuthorizationError, NotFoundError
from src.shared.logging import get_logger

logger = get_logger(__name__)


class FeedbackService(ApplicationService):

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.feedback = FeedbackRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.enrollments = EnrollmentRepository(self.session)

    async def submit(
        self,
        actor: User,
        session_id: UUID,
        rating: int,
        comment: Optional[str] = None,
        category: FeedbackCategory = FeedbackCategory.OVERALL,
        is_anonymous: bool = False,
    ) -> Feedback:
        """
        Raises:
            InvalidTransitionError: Session not completed yet
            AuthorizationError: Student was not enrolled
            DuplicateConstraintError: Feedback already given for this session (409)
        """
        self.access.check(actor, "feedback", "create")
        async with self.uow:
            session = await self.sessions.get_by_id(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            if session.status != SessionStatus.COMPLETED:
                raise InvalidTransitionError("session", session.status.value, "review")
            if await self.enrollments.find_for(session_id, actor.id) is None:
                raise AuthorizationError("Only enrolled students can review a session")
            feedback = Feedback.create(
                session_id=session_id,
                student_id=actor.id,
                tutor_id=session.tutor_id,
                rating=rating,
                comment=comment,
                category=category,
                is_anonymous=is_anonymous,
            )
            feedback = await self.feedback.add(feedback)
            await self.uow.commit()
        logger.info("feedback.submitted", feedback_id=str(feedback.id), rating=rating)
        return feedback

    async def list_for_session(self, actor: User, session_id: UUID) -> List[Feedback]:
        self.access.check(actor, "feedback", "read")
        return await self.feedback.find_by_session(session_id)

    async def list_for_tutor(self, actor: User, tutor_id: UUID) -> tuple[List[Feedback], Optional[float]]:
        self.access.check(actor, "feedback", "read")
        return await self.feedback.find_by_tutor(tutor_id), await self.feedback.average_rating(tutor_id)

    async def moderate(self, actor: User, feedback_id: UUID, approve: bool) -> Feedback:
        async with self.uow:
            feedback = await self.feedback.get_by_id(feedback_id)
            if feedback is None:
                raise NotFoundError("Feedback not found")
            self.access.check(actor, "feedback", "moderate", [feedback.tutor_id])
            if approve:
                feedback.approve()
            else:
                feedback.reject()
            feedback = await self.feedback.update(feedback)
            await self.uow.commit()
        logger.info("feedback.moderated", feedback_id=str(feedback_id), status=feedback.status.value)
        return feedback
