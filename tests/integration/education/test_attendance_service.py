import pytest

from src.education.application.services import AttendanceService, SessionService
from src.education.domain.entities import AttendanceStatus
from src.education.infrastructure.repositories import AttendanceRepository, EnrollmentRepository
from src.education.domain.entities import Enrollment
from src.shared.exceptions import AuthorizationError, DuplicateConstraintError, ValidationError
from src.shared.roles import Role


async def test_duplicate_attendance_conflicts(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    student = await make_user("sam@std.com")
    session = await make_session(tutor)
    await SessionService(db_session).join(student, session.id)

    # join already created the row
    with pytest.raises(DuplicateConstraintError):
        await AttendanceService(db_session).create_attendance(tutor, session.id, student.id, AttendanceStatus.PRESENT)


async def test_attendance_requires_enrollment(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    student = await make_user("sam@std.com")
    session = await make_session(tutor)
    with pytest.raises(ValidationError):
        await AttendanceService(db_session).create_attendance(tutor, session.id, student.id)


async def test_only_the_sessions_tutor_marks(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    other = await make_user("otto@tut.com", Role.TUTOR)
    student = await make_user("sam@std.com")
    session = await make_session(tutor)
    await SessionService(db_session).join(student, session.id)
    record = await AttendanceRepository(db_session).find_for(session.id, student.id)

    with pytest.raises(AuthorizationError):
        await AttendanceService(db_session).mark(other, record.id, AttendanceStatus.PRESENT)
    with pytest.raises(AuthorizationError):
        await AttendanceService(db_session).mark(student, record.id, AttendanceStatus.PRESENT)


async def test_premark_roster_fills_gaps(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    student = await make_user("sam@std.com")
    session = await make_session(tutor)
    # Enrolled without going through join, so no attendance row exists yet.
    await EnrollmentRepository(db_session).add(Enrollment(session_id=session.id, student_id=student.id))
    await db_session.commit()

    service = AttendanceService(db_session)
    created = await service.premark_roster(tutor, session.id)
    assert [r.student_id for r in created] == [student.id]
    assert await service.premark_roster(tutor, session.id) == []


async def test_mark_check_out_and_stats(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    student = await make_user("sam@std.com")
    session = await make_session(tutor)
    await SessionService(db_session).join(student, session.id)
    record = await AttendanceRepository(db_session).find_for(session.id, student.id)
    service = AttendanceService(db_session)

    marked = await service.mark(tutor, record.id, AttendanceStatus.PRESENT, notes="On time")
    assert marked.check_in_time is not None
    assert marked.marked_by == tutor.id
    checked_out = await service.check_out(tutor, record.id)
    assert checked_out.check_out_time >= checked_out.check_in_time
    done = await service.calculate_duration(tutor, record.id)
    assert done.duration == 0

    stats = await service.stats(tutor, session_id=session.id)
    assert stats["present"] == 1
