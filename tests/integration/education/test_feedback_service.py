import pytest

from src.education.application.services import FeedbackService, SessionService
from src.education.domain.entities import FeedbackStatus
from src.education.domain.errors import InvalidTransitionError
from src.shared.exceptions import AuthorizationError, DuplicateConstraintError
from src.shared.roles import Role


async def test_feedback_after_completion(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    student = await make_user("sam@std.com")
    outsider = await make_user("out@std.com")
    session = await make_session(tutor)
    sessions = SessionService(db_session)
    await sessions.join(student, session.id)
    service = FeedbackService(db_session)

    with pytest.raises(InvalidTransitionError):
        await service.submit(student, session.id, rating=5)

    await sessions.complete(tutor, session.id)
    with pytest.raises(AuthorizationError):
        await service.submit(outsider, session.id, rating=5)

    feedback = await service.submit(student, session.id, rating=4, comment="Clear explanations")
    assert feedback.tutor_id == tutor.id
    with pytest.raises(DuplicateConstraintError):
        await service.submit(student, session.id, rating=3)

    items, average = await service.list_for_tutor(tutor, tutor.id)
    assert [f.id for f in items] == [feedback.id]
    assert average == 4.0


async def test_rejected_feedback_leaves_the_average(db_session, make_user, make_session):
    tutor = await make_user("tina@tut.com", Role.TUTOR)
    students = [await make_user(f"s{i}@std.com") for i in range(2)]
    session = await make_session(tutor)
    sessions = SessionService(db_session)
    for student in students:
        await sessions.join(student, session.id)
    await sessions.complete(tutor, session.id)
    service = FeedbackService(db_session)
    await service.submit(students[0], session.id, rating=5)
    low = await service.submit(students[1], session.id, rating=1)

    rejected = await service.moderate(tutor, low.id, approve=False)

    assert rejected.status == FeedbackStatus.REJECTED
    _, average = await service.list_for_tutor(tutor, tutor.id)
    assert average == 5.0
