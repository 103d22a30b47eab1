"""
Application Service Base Class
Owns the unit of work and hands committed domain events to a publisher
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from src.shared.domain.domain_event import DomainEvent
from src.shared.infrastructure.database.sqlalchemy_unit_of_work import SQLAlchemyUnitOfWork
from src.shared.logging import get_logger
from src.shared.roles import AccessPolicy, policy as default_policy

logger = get_logger(__name__)

EventPublisher = Callable[[Sequence[DomainEvent]], None]


class ApplicationService:
    """
    Base for services orchestrating a request.

    Mutations run inside ``self.uow``. Events recorded on tracked aggregates
    (or passed to ``_record``) reach the publisher only after commit, so a
    rolled back mutation never notifies anyone.
    """

    def __init__(
        self,
        session: AsyncSession,
        publish: Optional[EventPublisher] = None,
        access: Optional[AccessPolicy] = None,
    ) -> None:
        self.session = session
        self.uow = SQLAlchemyUnitOfWork(session)
        self.access = access or default_policy
        self._publish = publish
        self._extra_events: list[DomainEvent] = []

    def _record(self, *events: DomainEvent) -> None:
        self._extra_events.extend(events)

    def _publish_committed(self) -> None:
        events = [*self.uow.committed_events, *self._extra_events]
        self.uow.committed_events.clear()
        self._extra_events.clear()
        if not events or self._publish is None:
            return
        logger.debug("Publishing domain events", events=[e.event_type for e in events])
        self._publish(events)
