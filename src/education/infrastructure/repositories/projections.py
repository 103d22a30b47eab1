"""Minimal views of related rows returned by the finders."""
from __future__ import annotations

from typing import Any, Optional

from src.education.infrastructure.models import SessionModel
from src.identity.infrastructure.persistence.models.user_model import UserModel


def student_view(user: Optional[UserModel]) -> Optional[dict[str, Any]]:
    if user is None:
        return None
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "profile_picture": user.profile_picture,
    }


def session_view(session: Optional[SessionModel]) -> Optional[dict[str, Any]]:
    if session is None:
        return None
    return {
        "id": session.id,
        "title": session.title,
        "topic": session.topic,
        "start_time": session.start_time,
        "end_time": session.end_time,
        "status": session.status,
        "tutor_id": session.tutor_id,
    }
