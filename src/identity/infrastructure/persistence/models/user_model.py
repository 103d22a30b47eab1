"""
User ORM Model
Maps to the users table
"""
from datetime import date, datetime
from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, Date, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.infrastructure.database.base_model import Base


class UserModel(Base):
    """SQLAlchemy model for the users table. Rows are never hard-deleted."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('student', 'tutor', 'admin', 'super_admin')", name="ck_users_role"),
        CheckConstraint("status IN ('active', 'inactive', 'suspended')", name="ck_users_status"),
    )

    # Core Fields
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="student", index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active", index=True)

    # Profile
    profile_picture: Mapped[str | None] = mapped_column(String(500), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Status Flags
    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    phone_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    last_login_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # JSON Fields
    preferences: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
