# src/dependencies.py
"""
Cross-module FastAPI dependencies: database session, event publishing.
"""
from __future__ import annotations

from typing import Sequence

from fastapi import BackgroundTasks

from src.notifications.application.dispatcher import get_dispatcher
from src.shared.application.service import EventPublisher
from src.shared.domain.domain_event import DomainEvent
from src.shared.infrastructure.database.session import get_db_session

__all__ = ["get_db_session", "get_event_publisher"]


def get_event_publisher(background_tasks: BackgroundTasks) -> EventPublisher:
    """
    Committed domain events are handed to the notification dispatcher as a
    background task, after the response is sent. Delivery is best-effort.
    """
    dispatcher = get_dispatcher()

    def publish(events: Sequence[DomainEvent]) -> None:
        background_tasks.add_task(dispatcher.dispatch, list(events))

    return publish
