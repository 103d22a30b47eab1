from datetime import timedelta
from uuid import uuid4

import pytest

from src.education.domain.entities import SessionStatus, TeachingSession
from src.education.domain.errors import InvalidTransitionError, SessionFullError
from src.shared.exceptions import ValidationError
from src.shared.utils import utcnow


def make_session(**overrides):
    start = utcnow() + timedelta(days=1)
    fields = dict(
        tutor_id=uuid4(),
        title="Geometry",
        topic="Triangles",
        start_time=start,
        end_time=start + timedelta(minutes=90),
        max_students=2,
    )
    fields.update(overrides)
    return TeachingSession.create(**fields)


def test_create_derives_duration_from_window():
    session = make_session()
    assert session.duration == 90
    assert session.status == SessionStatus.SCHEDULED
    assert session.current_students == 0


def test_create_rejects_past_start():
    start = utcnow() - timedelta(hours=1)
    with pytest.raises(ValidationError):
        make_session(start_time=start, end_time=start + timedelta(hours=2))


def test_create_rejects_inverted_window():
    start = utcnow() + timedelta(days=1)
    with pytest.raises(ValidationError) as info:
        make_session(start_time=start, end_time=start - timedelta(minutes=30))
    assert info.value.errors[0]["field"] == "end_time"


@pytest.mark.parametrize("max_students", [0, 51])
def test_create_rejects_capacity_out_of_range(max_students):
    with pytest.raises(ValidationError):
        make_session(max_students=max_students)


def test_join_until_full():
    session = make_session(max_students=1)
    session.join()
    assert session.current_students == 1
    assert session.is_full()
    assert not session.can_join()
    # A full session stays scheduled.
    assert session.status == SessionStatus.SCHEDULED
    with pytest.raises(SessionFullError):
        session.join()


def test_join_requires_scheduled():
    session = make_session()
    session.cancel()
    with pytest.raises(InvalidTransitionError):
        session.join()


def test_leave_never_goes_negative():
    session = make_session()
    session.leave()
    assert session.current_students == 0


def test_start_and_complete():
    session = make_session()
    session.start()
    assert session.status == SessionStatus.ONGOING
    session.complete()
    assert session.status == SessionStatus.COMPLETED
    with pytest.raises(InvalidTransitionError):
        session.complete()


def test_cancelled_session_cannot_complete():
    session = make_session()
    session.cancel()
    with pytest.raises(InvalidTransitionError):
        session.complete()


def test_reschedule_moves_window_and_keeps_session_joinable():
    session = make_session(max_students=5)
    starts = [utcnow() + timedelta(days=d) for d in (3, 4)]
    for start in starts:
        session.reschedule(start, start + timedelta(hours=2))
    assert session.status == SessionStatus.SCHEDULED
    assert session.duration == 120
    assert session.metadata["reschedule_count"] == 2
    assert session.metadata["rescheduled_from"] == starts[0].isoformat()
    assert session.can_join()
    session.join()
    assert session.current_students == 1


def test_reschedule_reopens_a_session_stored_as_rescheduled():
    session = make_session()
    session.status = SessionStatus.RESCHEDULED
    assert not session.can_join()
    start = utcnow() + timedelta(days=2)
    session.reschedule(start, start + timedelta(hours=1))
    assert session.can_join()


def test_update_details_cannot_drop_capacity_below_enrolment():
    session = make_session(max_students=3)
    session.join()
    session.join()
    with pytest.raises(ValidationError):
        session.update_details(max_students=1)


def test_duration_hours():
    assert make_session().duration_hours == 1.5


def test_recurring_active_until_end_date():
    now = utcnow()
    assert not make_session().is_recurring_active(now)
    recurring = make_session(is_recurring=True, recurring_end_date=now + timedelta(days=30))
    assert recurring.is_recurring_active(now)
    assert not recurring.is_recurring_active(now + timedelta(days=31))
    assert not make_session(is_recurring=True).is_recurring_active(now)
