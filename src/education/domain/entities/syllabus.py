"""
Syllabus Entity - ordered list of topics for a subject
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from src.shared.domain.base_entity import BaseAggregateRoot
from src.shared.exceptions import ValidationError

UPDATABLE_FIELDS = ("title", "subject", "grade_level", "description", "topics", "is_active")


def _normalise_topics(topics: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Each topic is ``{name, description, duration, order}`` with ``duration`` in hours."""
    normalised = []
    for index, raw in enumerate(topics or []):
        name = str(raw.get("name") or "").strip()
        if not name:
            raise ValidationError.for_field(f"topics.{index}.name", "Topic name is required")
        try:
            duration = float(raw.get("duration") or 0)
        except (TypeError, ValueError):
            raise ValidationError.for_field(
                f"topics.{index}.duration", "Topic duration must be a number", raw.get("duration")
            ) from None
        if duration < 0:
            raise ValidationError.for_field(f"topics.{index}.duration", "Topic duration cannot be negative", duration)
        normalised.append(
            {
                "name": name,
                "description": raw.get("description"),
                "duration": duration,
                "order": index + 1 if raw.get("order") is None else int(raw["order"]),
            }
        )
    return sorted(normalised, key=lambda t: t["order"])


class Syllabus(BaseAggregateRoot):
    """``total_hours`` always equals the rounded sum of topic durations."""

    def __init__(
        self,
        title: str,
        subject: str,
        created_by: Optional[UUID] = None,
        grade_level: Optional[str] = None,
        description: Optional[str] = None,
        topics: Optional[list[dict[str, Any]]] = None,
        total_hours: int = 0,
        is_active: bool = True,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        super().__init__(id, created_at=created_at, updated_at=updated_at)
        self.title = title
        self.subject = subject
        self.created_by = created_by
        self.grade_level = grade_level
        self.description = description
        self.topics = list(topics or [])
        self.total_hours = total_hours
        self.is_active = is_active

    @classmethod
    def create(cls, title: str, subject: str, topics: Optional[list[dict[str, Any]]] = None, **fields) -> Syllabus:
        syllabus = cls(title=title, subject=subject, **fields)
        syllabus.set_topics(topics or [])
        syllabus.validate()
        return syllabus

    def validate(self) -> None:
        if not 3 <= len((self.title or "").strip()) <= 255:
            raise ValidationError.for_field("title", "Title must be between 3 and 255 characters", self.title)
        if not (self.subject or "").strip():
            raise ValidationError.for_field("subject", "Subject is required", self.subject)

    def set_topics(self, topics: list[dict[str, Any]]) -> None:
        self.topics = _normalise_topics(topics)
        self.total_hours = round(sum(t["duration"] for t in self.topics))
        self._touch()

    def update(self, **fields: Any) -> None:
        for name, value in fields.items():
            if name not in UPDATABLE_FIELDS:
                raise ValidationError.for_field(name, "Field cannot be updated")
            if name == "topics":
                self.set_topics(value)
            else:
                setattr(self, name, value)
        self.validate()
        self._touch()
