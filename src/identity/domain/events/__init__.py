from src.identity.domain.events.user_events import (
    PasswordResetCompleted,
    PasswordResetRequested,
    UserRegistered,
)

__all__ = ["UserRegistered", "PasswordResetRequested", "PasswordResetCompleted"]
