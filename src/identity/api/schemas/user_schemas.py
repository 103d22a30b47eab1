"""
User API Schemas
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.identity.domain.entities.user import User, UserStatus
from src.shared.roles import Role

PHONE_PATTERN = r"^\+?[\d\s\-\(\)]+$"


class UserResponse(BaseModel):
    """Compact user view returned by auth endpoints and admin listings"""

    id: UUID
    email: str
    first_name: str
    last_name: str
    role: Role
    status: UserStatus
    phone: Optional[str] = None
    profile_picture: Optional[str] = None

    @classmethod
    def from_entity(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            status=user.status,
            phone=user.phone,
            profile_picture=user.profile_picture,
        )


class UserProfileResponse(UserResponse):
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    last_login_at: Optional[datetime] = None
    email_verified: bool = False
    phone_verified: bool = False
    preferences: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, user: User) -> "UserProfileResponse":
        base = UserResponse.from_entity(user).model_dump()
        return cls(
            **base,
            date_of_birth=user.date_of_birth,
            gender=user.gender,
            address=user.address,
            city=user.city,
            state=user.state,
            country=user.country,
            postal_code=user.postal_code,
            last_login_at=user.last_login_at,
            email_verified=user.email_verified,
            phone_verified=user.phone_verified,
            preferences={k: v for k, v in user.preferences.items() if k not in User._RESET_KEYS},
            created_at=user.created_at,
        )


class UpdateProfileRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    first_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN, max_length=20)
    profile_picture: Optional[str] = Field(default=None, max_length=500)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(default=None, pattern=r"^(male|female|other|prefer_not_to_say)$")
    address: Optional[str] = None
    city: Optional[str] = Field(default=None, max_length=100)
    state: Optional[str] = Field(default=None, max_length=100)
    country: Optional[str] = Field(default=None, max_length=100)
    postal_code: Optional[str] = Field(default=None, max_length=20)
    preferences: Optional[dict[str, Any]] = None


class UpdateStatusRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: UserStatus
