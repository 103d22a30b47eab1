"""
Syllabus API Schemas
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.education.domain.entities.syllabus import Syllabus


class TopicSchema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    duration: float = Field(default=0, ge=0, description="Hours")
    order: Optional[int] = Field(default=None, ge=0)


class CreateSyllabusRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: str = Field(..., min_length=3, max_length=255)
    subject: str = Field(..., min_length=1, max_length=100)
    grade_level: Optional[str] = Field(default=None, max_length=50)
    description: Optional[str] = None
    topics: list[TopicSchema] = Field(default_factory=list)
    is_active: bool = True


class UpdateSyllabusRequest(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=3, max_length=255)
    subject: Optional[str] = Field(default=None, min_length=1, max_length=100)
    grade_level: Optional[str] = Field(default=None, max_length=50)
    description: Optional[str] = None
    topics: Optional[list[TopicSchema]] = None
    is_active: Optional[bool] = None


class SyllabusResponse(BaseModel):
    id: UUID
    title: str
    subject: str
    grade_level: Optional[str] = None
    description: Optional[str] = None
    topics: list[dict[str, Any]] = []
    total_hours: int
    is_active: bool
    created_by: Optional[UUID] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, syllabus: Syllabus) -> "SyllabusResponse":
        return cls(
            id=syllabus.id,
            title=syllabus.title,
            subject=syllabus.subject,
            grade_level=syllabus.grade_level,
            description=syllabus.description,
            topics=syllabus.topics,
            total_hours=syllabus.total_hours,
            is_active=syllabus.is_active,
            created_by=syllabus.created_by,
            created_at=syllabus.created_at,
        )
