"""
Education Domain Events
Carry plain contact views so the dispatcher never reads the database.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from src.shared.domain.domain_event import DomainEvent, Recipient


@dataclass(frozen=True, kw_only=True)
class StudentJoinedSession(DomainEvent):
    """Invitation sent to the student that just took a seat"""

    recipient: Recipient
    session_title: str
    start_time: datetime
    meeting_link: Optional[str] = None
    location: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class SessionCancelled(DomainEvent):
    recipients: tuple[Recipient, ...]
    session_title: str
    start_time: datetime
    reason: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class SessionRescheduled(DomainEvent):
    recipients: tuple[Recipient, ...]
    session_title: str
    start_time: datetime
    end_time: datetime


@dataclass(frozen=True, kw_only=True)
class SessionReminder(DomainEvent):
    recipients: tuple[Recipient, ...]
    session_title: str
    start_time: datetime
    meeting_link: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class PaymentCompleted(DomainEvent):
    """Payment confirmation for the payer"""

    recipient: Recipient
    amount: Decimal
    currency: str
    invoice_number: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class PaymentReminder(DomainEvent):
    recipient: Recipient
    amount: Decimal
    currency: str
    invoice_number: Optional[str]
    due_date: Optional[datetime]
    days_overdue: int
