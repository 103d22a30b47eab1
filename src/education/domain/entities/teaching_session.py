"""
TeachingSession Entity - scheduled teaching event and its lifecycle
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from src.education.domain.errors import InvalidTransitionError, SessionFullError
from src.shared.domain.base_entity import BaseAggregateRoot
from src.shared.exceptions import ValidationError
from src.shared.utils import money, utcnow


class SessionStatus(str, Enum):
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


class SessionType(str, Enum):
    ONE_ON_ONE = "one_on_one"
    GROUP = "group"
    WORKSHOP = "workshop"
    ASSESSMENT = "assessment"


class RecurringPattern(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class TeachingSession(BaseAggregateRoot):
    """
    A scheduled teaching event owned by one tutor.

    Invariants:
        - current_students <= max_students
        - end_time > start_time
        - start_time in the future when created (``create``)

    ``join`` never changes ``status``: a full session stays ``scheduled``
    and ``can_join`` reports the capacity.
    """

    MIN_DURATION = 15
    MAX_DURATION = 480
    MAX_CAPACITY = 50

    def __init__(
        self,
        tutor_id: UUID,
        title: str,
        topic: str,
        start_time: datetime,
        end_time: datetime,
        duration: int,
        status: SessionStatus = SessionStatus.SCHEDULED,
        session_type: SessionType = SessionType.ONE_ON_ONE,
        max_students: int = 1,
        current_students: int = 0,
        description: Optional[str] = None,
        location: Optional[str] = None,
        meeting_link: Optional[str] = None,
        materials: Optional[list[Any]] = None,
        notes: Optional[str] = None,
        price: Decimal | int | str = Decimal("0.00"),
        currency: str = "USD",
        is_recurring: bool = False,
        recurring_pattern: Optional[RecurringPattern] = None,
        recurring_end_date: Optional[datetime] = None,
        tags: Optional[list[Any]] = None,
        metadata: Optional[dict[str, Any]] = None,
        id: Optional[UUID] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ) -> None:
        super().__init__(id, created_at=created_at, updated_at=updated_at)
        self.tutor_id = tutor_id
        self.title = title
        self.topic = topic
        self.start_time = start_time
        self.end_time = end_time
        self.duration = duration
        self.status = SessionStatus(status)
        self.session_type = SessionType(session_type)
        self.max_students = max_students
        self.current_students = current_students
        self.description = description
        self.location = location
        self.meeting_link = meeting_link
        self.materials = list(materials or [])
        self.notes = notes
        self.price = money(price)
        self.currency = currency
        self.is_recurring = is_recurring
        self.recurring_pattern = RecurringPattern(recurring_pattern) if recurring_pattern else None
        self.recurring_end_date = recurring_end_date
        self.tags = list(tags or [])
        self.metadata = dict(metadata or {})

    @classmethod
    def create(
        cls,
        tutor_id: UUID,
        title: str,
        topic: str,
        start_time: datetime,
        end_time: datetime,
        duration: Optional[int] = None,
        now: Optional[datetime] = None,
        **fields: Any,
    ) -> TeachingSession:
        """
        Factory for a new session; validates the creation-time invariants.

        ``duration`` defaults to the length of the time window in minutes.

        Raises:
            ValidationError: Any field out of range
        """
        now = now or utcnow()
        if start_time <= now:
            raise ValidationError.for_field("start_time", "Start time must be in the future", start_time.isoformat())
        if end_time <= start_time:
            raise ValidationError.for_field("end_time", "End time must be after start time", end_time.isoformat())
        if duration is None:
            duration = int((end_time - start_time) / timedelta(minutes=1))

        session = cls(
            tutor_id=tutor_id,
            title=title,
            topic=topic,
            start_time=start_time,
            end_time=end_time,
            duration=duration,
            status=SessionStatus.SCHEDULED,
            **fields,
        )
        session.validate()
        return session

    def validate(self) -> None:
        """Field-level constraints shared by create and update."""
        title = (self.title or "").strip()
        if not 3 <= len(title) <= 255:
            raise ValidationError.for_field("title", "Title must be between 3 and 255 characters", self.title)
        if not (self.topic or "").strip():
            raise ValidationError.for_field("topic", "Topic is required", self.topic)
        if self.end_time <= self.start_time:
            raise ValidationError.for_field("end_time", "End time must be after start time", self.end_time.isoformat())
        if not self.MIN_DURATION <= self.duration <= self.MAX_DURATION:
            raise ValidationError.for_field(
                "duration", f"Duration must be between {self.MIN_DURATION} and {self.MAX_DURATION} minutes", self.duration
            )
        if not 1 <= self.max_students <= self.MAX_CAPACITY:
            raise ValidationError.for_field(
                "max_students", f"Max students must be between 1 and {self.MAX_CAPACITY}", self.max_students
            )
        if self.current_students < 0:
            raise ValidationError.for_field("current_students", "Current students cannot be negative", self.current_students)
        if self.current_students > self.max_students:
            raise ValidationError.for_field(
                "max_students", "Max students cannot be lower than the number of enrolled students", self.max_students
            )
        if self.price < 0:
            raise ValidationError.for_field("price", "Price cannot be negative", str(self.price))
        if not re.fullmatch(r"[A-Z]{3}", self.currency or ""):
            raise ValidationError.for_field("currency", "Currency must be a 3-letter ISO code", self.currency)

    # ---- queries ------------------------------------------------------------

    def is_full(self) -> bool:
        return self.current_students >= self.max_students

    def can_join(self) -> bool:
        return self.status == SessionStatus.SCHEDULED and not self.is_full()

    @property
    def duration_hours(self) -> float:
        return self.duration / 60

    def is_recurring_active(self, now: Optional[datetime] = None) -> bool:
        if not self.is_recurring or not self.recurring_end_date:
            return False
        return (now or utcnow()) <= self.recurring_end_date

    # ---- lifecycle ----------------------------------------------------------

    def join(self) -> None:
        """
        Raises:
            InvalidTransitionError: Session is not scheduled
            SessionFullError: No seat left
        """
        if self.status != SessionStatus.SCHEDULED:
            raise InvalidTransitionError("session", self.status.value, "join")
        if self.is_full():
            raise SessionFullError(self.id)
        self.current_students += 1
        self._touch()

    def leave(self) -> None:
        if self.current_students > 0:
            self.current_students -= 1
        self._touch()

    def cancel(self) -> None:
        """Unconditional; notifying enrolled students is the caller's job."""
        self.status = SessionStatus.CANCELLED
        self._touch()

    def start(self) -> None:
        if self.status not in (SessionStatus.SCHEDULED, SessionStatus.RESCHEDULED):
            raise InvalidTransitionError("session", self.status.value, "start")
        self.status = SessionStatus.ONGOING
        self._touch()

    def complete(self) -> None:
        """Attendance rows are left exactly as marked."""
        if self.status in (SessionStatus.CANCELLED, SessionStatus.COMPLETED):
            raise InvalidTransitionError("session", self.status.value, "complete")
        self.status = SessionStatus.COMPLETED
        self._touch()

    def reschedule(self, start_time: datetime, end_time: datetime, now: Optional[datetime] = None) -> None:
        """
        Move the time window. The session stays joinable; the move is kept in
        ``metadata`` (``rescheduled_from``, ``reschedule_count``).
        """
        if self.status not in (SessionStatus.SCHEDULED, SessionStatus.RESCHEDULED):
            raise InvalidTransitionError("session", self.status.value, "reschedule")
        if start_time <= (now or utcnow()):
            raise ValidationError.for_field("start_time", "Start time must be in the future", start_time.isoformat())
        if end_time <= start_time:
            raise ValidationError.for_field("end_time", "End time must be after start time", end_time.isoformat())
        previous_start = self.start_time
        self.start_time = start_time
        self.end_time = end_time
        self.duration = int((end_time - start_time) / timedelta(minutes=1))
        self.validate()
        self.metadata = {
            **self.metadata,
            "rescheduled_from": previous_start.isoformat(),
            "reschedule_count": int(self.metadata.get("reschedule_count", 0)) + 1,
        }
        # Rows stored as 'rescheduled' become joinable again on their next move.
        self.status = SessionStatus.SCHEDULED
        self._touch()

    def update_details(self, **fields: Any) -> None:
        """Edit descriptive fields and capacity; the time window changes through ``reschedule``."""
        if self.status in (SessionStatus.CANCELLED, SessionStatus.COMPLETED):
            raise InvalidTransitionError("session", self.status.value, "update")
        for name, value in fields.items():
            if name == "price":
                value = money(value)
            elif name == "session_type":
                value = SessionType(value)
            elif name == "recurring_pattern" and value is not None:
                value = RecurringPattern(value)
            setattr(self, name, value)
        self.validate()
        self._touch()
