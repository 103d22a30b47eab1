"""
SQLAlchemy Implementation of Unit of Work
Wraps composite mutations in one database transaction
"""
from __future__ import annotations

from typing import Any

from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession

from src.shared.domain.base_entity import BaseAggregateRoot
from src.shared.domain.domain_event import DomainEvent
from src.shared.exceptions import STORAGE_UNAVAILABLE_ERRORS, translate_storage_error
from src.shared.logging import get_logger

logger = get_logger(__name__)


class SQLAlchemyUnitOfWork:
    """
    Unit of Work over an AsyncSession.

    Everything done inside ``async with uow:`` succeeds or fails as one
    transaction. Leaving the block without ``commit()`` rolls back.
    Aggregates registered with ``track()`` have their domain events collected
    after a successful commit (see ``committed_events``).
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self._committed = False
        self._tracked: list[BaseAggregateRoot] = []
        self.committed_events: list[DomainEvent] = []

    async def __aenter__(self) -> SQLAlchemyUnitOfWork:
        self._committed = False
        self._tracked = []
        if not self.session.in_transaction():
            await self.session.begin()
        logger.debug("UnitOfWork transaction started")
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if exc_type is not None:
            await self.rollback()
            logger.debug("UnitOfWork rolled back due to exception", exception=exc_type.__name__)
        elif not self._committed:
            await self.rollback()
            logger.warning("UnitOfWork rolled back (not committed)")

    def track(self, *aggregates: BaseAggregateRoot) -> None:
        self._tracked.extend(aggregates)

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except (sa_exc.IntegrityError, *STORAGE_UNAVAILABLE_ERRORS) as exc:
            await self.rollback()
            logger.error("UnitOfWork commit failed", error=str(exc))
            raise translate_storage_error(exc) from exc
        self._committed = True
        for aggregate in self._tracked:
            self.committed_events.extend(aggregate.collect_domain_events())
        logger.debug("UnitOfWork transaction committed", events=len(self.committed_events))

    async def rollback(self) -> None:
        await self.session.rollback()
        self._committed = False
