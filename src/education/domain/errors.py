"""
Education domain errors.

Thin subclasses of the shared taxonomy so callers can catch lifecycle
failures specifically while the HTTP layer keeps rendering them by code.
"""
from __future__ import annotations

from src.shared.exceptions import CapacityError, InvalidStateError, NotFoundError


class SessionFullError(CapacityError):
    def __init__(self, session_id=None) -> None:
        super().__init__("Session is full", details={"session_id": str(session_id)} if session_id else None)


class InvalidTransitionError(InvalidStateError):
    """A lifecycle operation was requested from a state that does not allow it."""

    def __init__(self, entity: str, current: str, operation: str) -> None:
        self.entity = entity
        self.current = current
        self.operation = operation
        super().__init__(
            f"Cannot {operation} a {entity} that is {current}",
            details={"entity": entity, "status": current, "operation": operation},
        )


class SessionNotFoundError(NotFoundError):
    def __init__(self, session_id=None) -> None:
        super().__init__("Session not found", details={"session_id": str(session_id)} if session_id else None)
