"""
Session Service
Scheduling, enrollment and lifecycle of teaching sessions
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from src.education.domain.entities.attendance import Attendance
from src.education.domain.entities.enrollment import Enrollment
from src.education.domain.entities.teaching_session import SessionStatus, SessionType, TeachingSession
from src.education.domain.errors import InvalidTransitionError, SessionFullError, SessionNotFoundError
from src.education.domain.events import (
    SessionCancelled,
    SessionReminder,
    SessionRescheduled,
    StudentJoinedSession,
)
from src.education.infrastructure.repositories import (
    AttendanceRepository,
    EnrollmentRepository,
    SessionRepository,
)
from src.identity.domain.entities.user import User
from src.identity.infrastructure.persistence.repositories.user_repository import UserRepository
from src.notifications.domain.notification import Notification, NotificationType
from src.notifications.infrastructure.notification_repository import NotificationRepository
from src.shared.application.service import ApplicationService
from src.shared.config import get_settings
from src.shared.exceptions import DuplicateConstraintError, NotFoundError, ValidationError
from src.shared.logging import get_logger
from src.shared.roles import Role

logger = get_logger(__name__)


class SessionService(ApplicationService):
    """
    Teaching session use cases.

    ``join`` and ``leave`` are single units of work: the seat counter, the
    enrollment row and the attendance row commit together or not at all.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.sessions = SessionRepository(self.session)
        self.enrollments = EnrollmentRepository(self.session)
        self.attendance = AttendanceRepository(self.session)
        self.users = UserRepository(self.session)
        self.notifications = NotificationRepository(self.session)

    async def get_session(self, session_id: UUID) -> TeachingSession:
        session = await self.sessions.get_by_id(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    async def _enrolled_students(self, session_id: UUID) -> List[User]:
        return await self.users.find_many(await self.enrollments.student_ids(session_id))

    async def _notify_in_app(self, users: List[User], title: str, message: str, session_id: UUID) -> None:
        if not users:
            return
        await self.notifications.add_many(
            [
                Notification(
                    user_id=u.id,
                    title=title,
                    message=message,
                    type=NotificationType.SESSION,
                    action_url=f"/sessions/{session_id}",
                    metadata={"session_id": str(session_id)},
                )
                for u in users
            ]
        )

    # -------- Create / update ------------------------------------------------

    async def create_session(self, actor: User, data: dict[str, Any]) -> TeachingSession:
        """
        Tutors always own what they create; admins may schedule for a tutor.

        Raises:
            ValidationError: Invalid fields or an unknown tutor
        """
        self.access.check(actor, "session", "create")
        data = dict(data)
        tutor_id: Optional[UUID] = data.pop("tutor_id", None)
        if actor.role == Role.TUTOR or tutor_id is None:
            tutor_id = actor.id
        data.setdefault("currency", get_settings().default_currency)

        async with self.uow:
            if tutor_id != actor.id:
                tutor = await self.users.get_by_id(tutor_id)
                if tutor is None or not tutor.is_tutor:
                    raise ValidationError.for_field("tutor_id", "Tutor not found", str(tutor_id))
            session = TeachingSession.create(tutor_id=tutor_id, **data)
            session = await self.sessions.add(session)
            await self.uow.commit()

        logger.info("session.created", session_id=str(session.id), tutor_id=str(tutor_id))
        return session

    async def update_session(self, actor: User, session_id: UUID, changes: dict[str, Any]) -> TeachingSession:
        async with self.uow:
            session = await self.get_session(session_id)
            self.access.check(actor, "session", "update", [session.tutor_id])
            session.update_details(**changes)
            session = await self.sessions.update(session)
            await self.uow.commit()
        logger.info("session.updated", session_id=str(session_id), fields=sorted(changes))
        return session

    # -------- Enrollment -----------------------------------------------------

    async def join(self, actor: User, session_id: UUID) -> TeachingSession:
        """
        Take a seat with one conditional UPDATE, then record the enrollment
        and a pending attendance row in the same transaction.

        Raises:
            SessionNotFoundError: Unknown session (404)
            InvalidTransitionError: Session is not scheduled (409)
            SessionFullError: No seat left (409)
            DuplicateConstraintError: Already enrolled (409)
        """
        self.access.check(actor, "session", "join")
        async with self.uow:
            if await self.enrollments.find_for(session_id, actor.id):
                raise DuplicateConstraintError("You are already enrolled in this session")

            if not await self.sessions.try_join(session_id):
                session = await self.sessions.reload(session_id)
                if session is None:
                    raise SessionNotFoundError(session_id)
                if session.status != SessionStatus.SCHEDULED:
                    raise InvalidTransitionError("session", session.status.value, "join")
                raise SessionFullError(session_id)

            session = await self.sessions.reload(session_id)
            await self.enrollments.add(Enrollment(session_id=session_id, student_id=actor.id))
            if await self.attendance.find_for(session_id, actor.id) is None:
                await self.attendance.add(Attendance(session_id=session_id, student_id=actor.id))
            await self._notify_in_app(
                [actor], "Session joined", f"You are enrolled in {session.title}.", session_id
            )
            session.raise_event(
                StudentJoinedSession(
                    recipient=actor.as_recipient(),
                    session_title=session.title,
                    start_time=session.start_time,
                    meeting_link=session.meeting_link,
                    location=session.location,
                )
            )
            self.uow.track(session)
            await self.uow.commit()

        logger.info(
            "session.joined",
            session_id=str(session_id),
            student_id=str(actor.id),
            seats=f"{session.current_students}/{session.max_students}",
        )
        self._publish_committed()
        return session

    async def leave(self, actor: User, session_id: UUID) -> TeachingSession:
        """Give the seat back; a still-pending attendance row goes with it."""
        self.access.check(actor, "session", "leave")
        async with self.uow:
            session = await self.get_session(session_id)
            if session.status not in (SessionStatus.SCHEDULED, SessionStatus.RESCHEDULED):
                raise InvalidTransitionError("session", session.status.value, "leave")
            if not await self.enrollments.remove(session_id, actor.id):
                raise NotFoundError("You are not enrolled in this session")
            await self.sessions.try_leave(session_id)
            await self.attendance.delete_pending(session_id, actor.id)
            session = await self.sessions.reload(session_id)
            await self.uow.commit()

        logger.info("session.left", session_id=str(session_id), student_id=str(actor.id))
        return session

    async def roster(self, actor: User, session_id: UUID) -> List[dict[str, Any]]:
        session = await self.get_session(session_id)
        self.access.check(actor, "session", "roster", [session.tutor_id])
        return await self.sessions.roster(session_id)

    # -------- Lifecycle ------------------------------------------------------

    async def cancel(self, actor: User, session_id: UUID, reason: Optional[str] = None) -> TeachingSession:
        """Cancel and tell every enrolled student: in-app now, email/WhatsApp after commit."""
        async with self.uow:
            session = await self.get_session(session_id)
            self.access.check(actor, "session", "cancel", [session.tutor_id])
            session.cancel()
            students = await self._enrolled_students(session_id)
            await self._notify_in_app(
                students,
                "Session cancelled",
                f"{session.title} has been cancelled." + (f" Reason: {reason}" if reason else ""),
                session_id,
            )
            if students:
                session.raise_event(
                    SessionCancelled(
                        recipients=tuple(s.as_recipient() for s in students),
                        session_title=session.title,
                        start_time=session.start_time,
                        reason=reason,
                    )
                )
            self.uow.track(session)
            updated = await self.sessions.update(session)
            await self.uow.commit()

        logger.info("session.cancelled", session_id=str(session_id), notified=len(students))
        self._publish_committed()
        return updated

    async def start(self, actor: User, session_id: UUID) -> TeachingSession:
        async with self.uow:
            session = await self.get_session(session_id)
            self.access.check(actor, "session", "start", [session.tutor_id])
            session.start()
            session = await self.sessions.update(session)
            await self.uow.commit()
        logger.info("session.started", session_id=str(session_id))
        return session

    async def complete(self, actor: User, session_id: UUID) -> TeachingSession:
        """Attendance is left exactly as marked."""
        async with self.uow:
            session = await self.get_session(session_id)
            self.access.check(actor, "session", "complete", [session.tutor_id])
            session.complete()
            session = await self.sessions.update(session)
            await self.uow.commit()
        logger.info("session.completed", session_id=str(session_id))
        return session

    async def reschedule(
        self, actor: User, session_id: UUID, start_time: datetime, end_time: datetime
    ) -> TeachingSession:
        async with self.uow:
            session = await self.get_session(session_id)
            self.access.check(actor, "session", "reschedule", [session.tutor_id])
            session.reschedule(start_time, end_time)
            students = await self._enrolled_students(session_id)
            await self._notify_in_app(
                students, "Session rescheduled", f"{session.title} has a new time.", session_id
            )
            if students:
                session.raise_event(
                    SessionRescheduled(
                        recipients=tuple(s.as_recipient() for s in students),
                        session_title=session.title,
                        start_time=session.start_time,
                        end_time=session.end_time,
                    )
                )
            self.uow.track(session)
            updated = await self.sessions.update(session)
            await self.uow.commit()

        logger.info("session.rescheduled", session_id=str(session_id), start_time=start_time.isoformat())
        self._publish_committed()
        return updated

    async def send_reminder(self, actor: User, session_id: UUID) -> int:
        """Email/WhatsApp reminder to enrolled students; returns how many were addressed."""
        session = await self.get_session(session_id)
        self.access.check(actor, "session", "remind", [session.tutor_id])
        if session.status not in (SessionStatus.SCHEDULED, SessionStatus.RESCHEDULED):
            raise InvalidTransitionError("session", session.status.value, "remind")
        students = await self._enrolled_students(session_id)
        if students:
            self._record(
                SessionReminder(
                    aggregate_id=session.id,
                    aggregate_type="TeachingSession",
                    recipients=tuple(s.as_recipient() for s in students),
                    session_title=session.title,
                    start_time=session.start_time,
                    meeting_link=session.meeting_link,
                )
            )
        self._publish_committed()
        return len(students)

    # -------- Finders --------------------------------------------------------

    async def list_sessions(
        self,
        actor: User,
        status: Optional[SessionStatus] = None,
        session_type: Optional[SessionType] = None,
        tutor_id: Optional[UUID] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[TeachingSession]:
        self.access.check(actor, "session", "read")
        return await self.sessions.list_sessions(
            status=status, session_type=session_type, tutor_id=tutor_id, start=start, end=end, limit=limit, offset=offset
        )

    async def upcoming(self, actor: User, limit: int = 50) -> List[TeachingSession]:
        self.access.check(actor, "session", "read")
        return await self.sessions.find_upcoming(limit=limit)

    async def my_sessions(
        self,
        actor: User,
        status: Optional[SessionStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[TeachingSession]:
        """Sessions taught by a tutor, or joined by a student. Admins see what they teach."""
        if actor.is_student:
            return await self.sessions.find_by_student(actor.id, status=status, start=start, end=end)
        return await self.sessions.find_by_tutor(actor.id, status=status, start=start, end=end)
