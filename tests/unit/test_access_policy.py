from dataclasses import dataclass
from uuid import UUID, uuid4

import pytest

from src.shared.exceptions import AuthorizationError
from src.shared.roles import AccessPolicy, Role, role_for_email


@dataclass
class Actor:
    id: UUID
    role: Role


policy = AccessPolicy()


def test_admin_can_do_anything():
    assert policy.is_allowed(Actor(uuid4(), Role.ADMIN), "payment", "refund")


def test_tutor_owns_their_sessions():
    tutor = Actor(uuid4(), Role.TUTOR)
    assert policy.is_allowed(tutor, "session", "cancel", [tutor.id])
    assert not policy.is_allowed(tutor, "session", "cancel", [uuid4()])


def test_student_cannot_create_sessions():
    with pytest.raises(AuthorizationError):
        policy.check(Actor(uuid4(), Role.STUDENT), "session", "create")


def test_resource_wildcard_applies():
    tutor = Actor(uuid4(), Role.TUTOR)
    assert policy.is_allowed(tutor, "attendance", "mark", [tutor.id])


@pytest.mark.parametrize(
    "email, role",
    [("a@std.com", Role.STUDENT), ("b@TUT.com", Role.TUTOR), ("c@adm.com", Role.ADMIN), ("d@example.com", Role.STUDENT)],
)
def test_role_from_email_domain(email, role):
    assert role_for_email(email) == role
