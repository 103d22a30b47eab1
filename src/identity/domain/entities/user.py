"""
User Entity - Identity, role and account status
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from src.shared.domain.base_entity import BaseAggregateRoot
from src.shared.domain.domain_event import Recipient
from src.shared.exceptions import ValidationError
from src.shared.roles import Role
from src.shared.utils import utcnow


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class User(BaseAggregateRoot):
    """
    User aggregate root.

    Users are never hard-deleted: deactivation and suspension only flip
    ``status``. The pending password-reset token lives in ``preferences``
    next to the user's UI preferences.

    Attributes:
        email: Login address (unique, lower-cased)
        password_hash: Argon2id (or legacy bcrypt) hash
        first_name / last_name: Display name parts
        role: student, tutor, admin or super_admin
        status: active, inactive or suspended
        last_login_at: Last successful login timestamp
        preferences: Free-form JSON settings
    """

    PROFILE_FIELDS = frozenset({
        "first_name",
        "last_name",
        "phone",
        "profile_picture",
        "date_of_birth",
        "gender",
        "address",
        "city",
        "state",
        "country",
        "postal_code",
        "preferences",
    })

    RESET_TOKEN_KEY = "reset_token"
    RESET_EXPIRES_KEY = "reset_token_expires"
    _RESET_KEYS = (RESET_TOKEN_KEY, RESET_EXPIRES_KEY)

    def __init__(
        self,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: Role = Role.STUDENT,
        status: UserStatus = UserStatus.ACTIVE,
        phone: Optional[str] = None,
        profile_picture: Optional[str] = None,
        date_of_birth: Optional[date] = None,
        gender: Optional[str] = None,
        address: Optional[str] = None,
        city: Optional[str] = None,
        state: Optional[str] = None,
        country: Optional[str] = None,
        postal_code: Optional[str] = None,
        email_verified: bool = False,
        phone_verified: bool = False,
        last_login_at: Optional[datetime] = None,
        preferences: Optional[dict[str, Any]] = None,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        super().__init__(id, created_at=created_at, updated_at=updated_at)
        self.email = email.strip().lower()
        self.password_hash = password_hash
        self.first_name = first_name
        self.last_name = last_name
        self.role = Role(role)
        self.status = UserStatus(status)
        self.phone = phone
        self.profile_picture = profile_picture
        self.date_of_birth = date_of_birth
        self.gender = gender
        self.address = address
        self.city = city
        self.state = state
        self.country = country
        self.postal_code = postal_code
        self.email_verified = email_verified
        self.phone_verified = phone_verified
        self.last_login_at = last_login_at
        self.preferences: dict[str, Any] = dict(preferences or {})

    # ---- role helpers ------------------------------------------------------

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT

    @property
    def is_tutor(self) -> bool:
        return self.role == Role.TUTOR

    @property
    def is_admin(self) -> bool:
        """Admins and super admins share every admin capability."""
        return self.role in (Role.ADMIN, Role.SUPER_ADMIN)

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def as_recipient(self) -> Recipient:
        return Recipient(user_id=self.id, first_name=self.first_name, email=self.email, phone=self.phone)

    # ---- mutators ----------------------------------------------------------

    def record_login(self, now: Optional[datetime] = None) -> None:
        self.last_login_at = now or utcnow()
        self._touch()

    def change_password(self, new_password_hash: str) -> None:
        self.password_hash = new_password_hash
        self._touch()

    def update_profile(self, **fields: Any) -> None:
        """Apply profile changes; role, status and credentials are not profile fields."""
        unknown = set(fields) - self.PROFILE_FIELDS
        if unknown:
            field = sorted(unknown)[0]
            raise ValidationError.for_field(field, f"{field} cannot be changed through the profile")
        if "preferences" in fields:
            # The reset token is kept out of user control.
            prefs = {k: v for k, v in (fields.pop("preferences") or {}).items() if k not in self._RESET_KEYS}
            prefs.update({k: v for k, v in self.preferences.items() if k in self._RESET_KEYS})
            self.preferences = prefs
        for name, value in fields.items():
            setattr(self, name, value)
        self._touch()

    def activate(self) -> None:
        self.status = UserStatus.ACTIVE
        self._touch()

    def deactivate(self) -> None:
        self.status = UserStatus.INACTIVE
        self._touch()

    def suspend(self) -> None:
        self.status = UserStatus.SUSPENDED
        self._touch()

    def change_status(self, status: UserStatus) -> None:
        {
            UserStatus.ACTIVE: self.activate,
            UserStatus.INACTIVE: self.deactivate,
            UserStatus.SUSPENDED: self.suspend,
        }[UserStatus(status)]()

    # ---- password reset ----------------------------------------------------

    def store_reset_token(self, token: str, lifetime: timedelta, now: Optional[datetime] = None) -> None:
        expires = (now or utcnow()) + lifetime
        self.preferences = {
            **self.preferences,
            self.RESET_TOKEN_KEY: token,
            self.RESET_EXPIRES_KEY: expires.isoformat(),
        }
        self._touch()

    def clear_reset_token(self) -> None:
        self.preferences = {
            **self.preferences,
            self.RESET_TOKEN_KEY: None,
            self.RESET_EXPIRES_KEY: None,
        }
        self._touch()

    def reset_token_matches(self, token: str, now: Optional[datetime] = None) -> bool:
        stored = self.preferences.get(self.RESET_TOKEN_KEY)
        expires = self.preferences.get(self.RESET_EXPIRES_KEY)
        if not stored or stored != token or not expires:
            return False
        return datetime.fromisoformat(expires) >= (now or utcnow())
