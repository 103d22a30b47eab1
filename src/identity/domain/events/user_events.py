"""
User Domain Events
"""
from __future__ import annotations

from dataclasses import dataclass

from src.shared.domain.domain_event import DomainEvent, Recipient


@dataclass(frozen=True, kw_only=True)
class UserRegistered(DomainEvent):
    """Raised when a new account is created through self-registration"""

    recipient: Recipient
    role: str


@dataclass(frozen=True, kw_only=True)
class PasswordResetRequested(DomainEvent):
    """Raised when a reset link was issued; carries the link for the email"""

    recipient: Recipient
    reset_url: str


@dataclass(frozen=True, kw_only=True)
class PasswordResetCompleted(DomainEvent):
    recipient: Recipient
