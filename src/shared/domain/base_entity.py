"""
Base Entity Contract for Domain Layer
Provides UUID-based identity, equality, audit fields and domain events
"""
from __future__ import annotations

from abc import ABC
from datetime import datetime
from uuid import UUID, uuid4

from src.shared.domain.domain_event import DomainEvent
from src.shared.utils import utcnow


class BaseEntity(ABC):
    """
    Abstract base class for all domain entities.

    Entities are defined by their identity (id), not their attributes.
    Two entities are equal if they have the same id, regardless of other attributes.
    """

    def __init__(
        self,
        id: UUID | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> None:
        self.id: UUID = id or uuid4()
        self.created_at: datetime = created_at or utcnow()
        self.updated_at: datetime = updated_at or utcnow()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.id})"

    def _touch(self) -> None:
        self.updated_at = utcnow()


class BaseAggregateRoot(BaseEntity):
    """
    Base class for aggregate roots.

    Keeps the list of domain events raised by mutators. Services collect them
    after commit and hand them to the notification dispatcher.
    """

    def __init__(self, id: UUID | None = None, **kwargs) -> None:
        super().__init__(id=id, **kwargs)
        self._domain_events: list[DomainEvent] = []

    def raise_event(self, event: DomainEvent) -> None:
        """Record a domain event, enriching it with aggregate context."""
        if event.aggregate_id is None:
            object.__setattr__(event, "aggregate_id", self.id)
        if not event.aggregate_type:
            object.__setattr__(event, "aggregate_type", self.__class__.__name__)
        self._domain_events.append(event)

    def collect_domain_events(self) -> list[DomainEvent]:
        events = self._domain_events.copy()
        self._domain_events.clear()
        return events

    @property
    def has_domain_events(self) -> bool:
        return len(self._domain_events) > 0
