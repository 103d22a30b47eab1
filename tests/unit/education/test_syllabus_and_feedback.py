from uuid import uuid4

import pytest

from src.education.domain.entities import Feedback, FeedbackStatus, Syllabus
from src.education.domain.errors import InvalidTransitionError
from src.shared.exceptions import ValidationError


def test_total_hours_is_sum_of_topics():
    syllabus = Syllabus.create(
        title="Intro to Python",
        subject="Programming",
        topics=[
            {"name": "Variables", "duration": 1.5},
            {"name": "Loops", "duration": 2},
            {"name": "Functions", "duration": 2.5},
        ],
        created_by=uuid4(),
    )
    assert syllabus.total_hours == 6
    assert [t["order"] for t in syllabus.topics] == [1, 2, 3]


def test_topics_sorted_by_explicit_order():
    syllabus = Syllabus.create(
        title="Chemistry",
        subject="Science",
        topics=[{"name": "Bonds", "duration": 1, "order": 2}, {"name": "Atoms", "duration": 1, "order": 1}],
        created_by=uuid4(),
    )
    assert [t["name"] for t in syllabus.topics] == ["Atoms", "Bonds"]


def test_topic_requires_name():
    with pytest.raises(ValidationError):
        Syllabus.create(title="Chemistry", subject="Science", topics=[{"duration": 1}], created_by=uuid4())


@pytest.mark.parametrize("rating", [0, 6])
def test_feedback_rating_range(rating):
    with pytest.raises(ValidationError):
        Feedback.create(session_id=uuid4(), student_id=uuid4(), tutor_id=uuid4(), rating=rating)


def test_feedback_moderation_is_one_way():
    feedback = Feedback.create(session_id=uuid4(), student_id=uuid4(), tutor_id=uuid4(), rating=4)
    assert feedback.status == FeedbackStatus.PENDING
    feedback.approve()
    assert feedback.status == FeedbackStatus.APPROVED
    with pytest.raises(InvalidTransitionError):
        feedback.reject()
