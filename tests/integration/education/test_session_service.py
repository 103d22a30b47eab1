import pytest

from src.education.application.services import AttendanceService, SessionService
from src.education.domain.entities import AttendanceStatus, SessionStatus
from src.education.domain.errors import InvalidTransitionError, SessionFullError, SessionNotFoundError
from src.education.domain.events import SessionCancelled, StudentJoinedSession
from src.education.infrastructure.repositories import AttendanceRepository, EnrollmentRepository
from src.notifications.infrastructure.notification_repository import NotificationRepository
from src.shared.exceptions import DuplicateConstraintError, NotFoundError
from src.shared.roles import Role


async def test_join_takes_a_seat_and_premarks_attendance(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    student = await make_user("sam@std.com")
    session = await make_session(tutor)
    events = []

    joined = await SessionService(db_session, events.extend).join(student, session.id)

    assert joined.current_students == 1
    assert await EnrollmentRepository(db_session).student_ids(session.id) == [student.id]
    record = await AttendanceRepository(db_session).find_for(session.id, student.id)
    assert record.status == AttendanceStatus.PENDING
    assert await NotificationRepository(db_session).unread_count(student.id) == 1
    assert [type(e) for e in events] == [StudentJoinedSession]
    assert events[0].recipient.email == "sam@std.com"


async def test_capacity_is_enforced(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    first = await make_user("a@std.com")
    second = await make_user("b@std.com")
    session = await make_session(tutor, max_students=1)
    service = SessionService(db_session)

    await service.join(first, session.id)
    with pytest.raises(SessionFullError):
        await service.join(second, session.id)

    current = await service.get_session(session.id)
    assert current.current_students == 1
    assert current.status == SessionStatus.SCHEDULED
    assert await EnrollmentRepository(db_session).student_ids(session.id) == [first.id]


async def test_joining_twice_conflicts(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    student = await make_user("sam@std.com")
    session = await make_session(tutor)
    service = SessionService(db_session)
    await service.join(student, session.id)
    with pytest.raises(DuplicateConstraintError):
        await service.join(student, session.id)
    assert (await service.get_session(session.id)).current_students == 1


async def test_join_unknown_session(db_session, make_user):
    from uuid import uuid4

    student = await make_user("sam@std.com")
    with pytest.raises(SessionNotFoundError):
        await SessionService(db_session).join(student, uuid4())


async def test_cannot_join_cancelled_session(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    student = await make_user("sam@std.com")
    session = await make_session(tutor)
    service = SessionService(db_session)
    await service.cancel(tutor, session.id, reason="Holiday")
    with pytest.raises(InvalidTransitionError):
        await service.join(student, session.id)


async def test_leave_frees_the_seat(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    student = await make_user("sam@std.com")
    session = await make_session(tutor)
    service = SessionService(db_session)
    await service.join(student, session.id)

    left = await service.leave(student, session.id)

    assert left.current_students == 0
    assert await EnrollmentRepository(db_session).student_ids(session.id) == []
    assert await AttendanceRepository(db_session).find_for(session.id, student.id) is None
    with pytest.raises(NotFoundError):
        await service.leave(student, session.id)


async def test_leave_keeps_marked_attendance(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    student = await make_user("sam@std.com")
    session = await make_session(tutor)
    service = SessionService(db_session)
    await service.join(student, session.id)
    record = await AttendanceRepository(db_session).find_for(session.id, student.id)
    await AttendanceService(db_session).mark(tutor, record.id, AttendanceStatus.EXCUSED, reason="Exam")

    await service.leave(student, session.id)

    kept = await AttendanceRepository(db_session).find_for(session.id, student.id)
    assert kept.status == AttendanceStatus.EXCUSED


async def test_cancel_notifies_enrolled_students(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    students = [await make_user(f"s{i}@std.com") for i in range(2)]
    session = await make_session(tutor)
    service = SessionService(db_session)
    for student in students:
        await service.join(student, session.id)

    events = []
    cancelled = await SessionService(db_session, events.extend).cancel(tutor, session.id, reason="Tutor ill")

    assert cancelled.status == SessionStatus.CANCELLED
    (event,) = events
    assert isinstance(event, SessionCancelled)
    assert sorted(r.email for r in event.recipients) == ["s0@std.com", "s1@std.com"]
    assert event.reason == "Tutor ill"


async def test_reminder_reaches_every_enrolled_student(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    student = await make_user("sam@std.com")
    session = await make_session(tutor)
    await SessionService(db_session).join(student, session.id)

    events = []
    notified = await SessionService(db_session, events.extend).send_reminder(tutor, session.id)

    assert notified == 1
    assert len(events) == 1
