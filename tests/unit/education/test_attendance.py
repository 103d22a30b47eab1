from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from src.education.domain.entities import Attendance, AttendanceStatus
from src.shared.exceptions import ValidationError


def make_record():
    return Attendance(session_id=uuid4(), student_id=uuid4())


def test_new_record_is_pending():
    assert make_record().status == AttendanceStatus.PENDING


def test_present_checks_in_and_stamps_marker():
    record = make_record()
    tutor_id = uuid4()
    now = datetime(2024, 5, 1, 10, 0)
    record.mark_present(tutor_id, now)
    assert record.is_present()
    assert record.check_in_time == now
    assert record.marked_by == tutor_id
    assert record.marked_at == now


def test_duration_after_an_hour():
    record = make_record()
    start = datetime(2024, 5, 1, 10, 0)
    record.mark_present(uuid4(), start)
    record.check_out(start + timedelta(minutes=60))
    assert record.calculate_duration() == 60
    assert record.duration == 60


def test_duration_is_zero_without_check_out():
    record = make_record()
    record.mark_late(uuid4())
    assert record.calculate_duration() == 0


def test_check_out_requires_check_in():
    with pytest.raises(ValidationError):
        make_record().check_out()


def test_check_out_cannot_precede_check_in():
    record = make_record()
    start = datetime(2024, 5, 1, 10, 0)
    record.mark_present(uuid4(), start)
    with pytest.raises(ValidationError):
        record.check_out(start - timedelta(minutes=1))


def test_excused_keeps_reason_and_evidence():
    record = make_record()
    record.mark(AttendanceStatus.EXCUSED, uuid4(), reason="Doctor", evidence={"file": "note.pdf"})
    assert record.status == AttendanceStatus.EXCUSED
    assert record.reason == "Doctor"
    assert record.evidence == {"file": "note.pdf"}


def test_remarking_overwrites_status():
    record = make_record()
    record.mark(AttendanceStatus.ABSENT, uuid4(), reason="No show")
    record.mark(AttendanceStatus.LATE, uuid4())
    assert record.is_late()


def test_cannot_mark_back_to_pending():
    with pytest.raises(ValidationError):
        make_record().mark(AttendanceStatus.PENDING, uuid4())
