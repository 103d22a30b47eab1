# src/shared/roles.py

from enum import Enum
from typing import Dict, Iterable, Mapping, Optional, Protocol, Tuple
from uuid import UUID

from src.shared.exceptions import AuthorizationError


class Role(str, Enum):
    """
    User roles in the system.

    - SUPER_ADMIN: Platform owner, can do everything (never self-registered)
    - ADMIN: Manages users, payments and every session
    - TUTOR: Owns and teaches sessions, marks attendance
    - STUDENT: Joins sessions, pays, leaves feedback
    """
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    TUTOR = "tutor"
    STUDENT = "student"


# Registration assigns a role from the email domain; anything else is a student.
_EMAIL_DOMAIN_ROLES = {
    "std.com": Role.STUDENT,
    "tut.com": Role.TUTOR,
    "adm.com": Role.ADMIN,
}


def role_for_email(email: str) -> Role:
    domain = email.rsplit("@", 1)[-1].strip().lower()
    return _EMAIL_DOMAIN_ROLES.get(domain, Role.STUDENT)


def can_manage(actor_role: Role, target_role: Role) -> bool:
    """
    Check if actor can change the account status of users with target_role.

    - SUPER_ADMIN can manage all roles
    - ADMIN can manage tutors and students
    - TUTOR and STUDENT cannot manage anyone
    """
    if actor_role == Role.SUPER_ADMIN:
        return True
    if actor_role == Role.ADMIN:
        return target_role in (Role.TUTOR, Role.STUDENT)
    return False


# ---------------------------------------------------------------------
# Access policy
# ---------------------------------------------------------------------

class Grant(str, Enum):
    ALLOW = "allow"
    OWN = "own"      # allowed only when the actor owns the resource
    DENY = "deny"


class Actor(Protocol):
    id: UUID
    role: Role


RuleKey = Tuple[Role, str, str]

DEFAULT_RULES: Dict[RuleKey, Grant] = {
    (Role.SUPER_ADMIN, "*", "*"): Grant.ALLOW,
    (Role.ADMIN, "*", "*"): Grant.ALLOW,

    (Role.TUTOR, "session", "create"): Grant.ALLOW,
    (Role.TUTOR, "session", "read"): Grant.ALLOW,
    (Role.TUTOR, "session", "update"): Grant.OWN,
    (Role.TUTOR, "session", "cancel"): Grant.OWN,
    (Role.TUTOR, "session", "start"): Grant.OWN,
    (Role.TUTOR, "session", "complete"): Grant.OWN,
    (Role.TUTOR, "session", "reschedule"): Grant.OWN,
    (Role.TUTOR, "session", "roster"): Grant.OWN,
    (Role.TUTOR, "session", "remind"): Grant.OWN,
    (Role.TUTOR, "attendance", "*"): Grant.OWN,
    (Role.TUTOR, "payment", "create"): Grant.ALLOW,
    (Role.TUTOR, "payment", "read"): Grant.OWN,
    (Role.TUTOR, "feedback", "read"): Grant.ALLOW,
    (Role.TUTOR, "feedback", "moderate"): Grant.OWN,
    (Role.TUTOR, "syllabus", "create"): Grant.ALLOW,
    (Role.TUTOR, "syllabus", "read"): Grant.ALLOW,
    (Role.TUTOR, "syllabus", "update"): Grant.OWN,

    (Role.STUDENT, "session", "read"): Grant.ALLOW,
    (Role.STUDENT, "session", "join"): Grant.ALLOW,
    (Role.STUDENT, "session", "leave"): Grant.ALLOW,
    (Role.STUDENT, "attendance", "read"): Grant.OWN,
    (Role.STUDENT, "payment", "create"): Grant.OWN,
    (Role.STUDENT, "payment", "read"): Grant.OWN,
    (Role.STUDENT, "payment", "process"): Grant.OWN,
    (Role.STUDENT, "payment", "cancel"): Grant.OWN,
    (Role.STUDENT, "feedback", "create"): Grant.ALLOW,
    (Role.STUDENT, "feedback", "read"): Grant.ALLOW,
    (Role.STUDENT, "syllabus", "read"): Grant.ALLOW,
}


class AccessPolicy:
    """
    Capability table keyed by (role, resource, action).

    Lookup falls back from the exact action to ``(resource, "*")`` and then
    ``("*", "*")``; anything unmatched is denied.
    """

    def __init__(self, rules: Optional[Mapping[RuleKey, Grant]] = None) -> None:
        self._rules: Dict[RuleKey, Grant] = dict(DEFAULT_RULES if rules is None else rules)

    def grant_for(self, role: Role, resource: str, action: str) -> Grant:
        for key in ((role, resource, action), (role, resource, "*"), (role, "*", "*")):
            if key in self._rules:
                return self._rules[key]
        return Grant.DENY

    def is_allowed(
        self,
        actor: Actor,
        resource: str,
        action: str,
        owner_ids: Iterable[Optional[UUID]] = (),
    ) -> bool:
        grant = self.grant_for(Role(actor.role), resource, action)
        if grant is Grant.ALLOW:
            return True
        if grant is Grant.OWN:
            return actor.id in {o for o in owner_ids if o is not None}
        return False

    def check(
        self,
        actor: Actor,
        resource: str,
        action: str,
        owner_ids: Iterable[Optional[UUID]] = (),
    ) -> None:
        """Raise AuthorizationError unless the actor may perform the action."""
        if not self.is_allowed(actor, resource, action, owner_ids):
            raise AuthorizationError(
                f"Access denied: {Role(actor.role).value} cannot {action} this {resource}",
                details={"resource": resource, "action": action},
            )


policy = AccessPolicy()
