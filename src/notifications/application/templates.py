"""
Message templates for outbound email and WhatsApp.

Every builder returns a ``Message``; ``text`` doubles as the WhatsApp body.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from html import escape
from typing import Optional

APP_NAME = "EduManage"


@dataclass(frozen=True)
class Message:
    subject: str
    html: str
    text: str


def _when(value: datetime) -> str:
    return value.strftime("%A, %d %B %Y at %H:%M UTC")


def _page(greeting: str, *paragraphs: str) -> str:
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    return f"<html><body><p>{greeting}</p>{body}<p>The {APP_NAME} team</p></body></html>"


def welcome(first_name: str, role: str) -> Message:
    return Message(
        subject=f"Welcome to {APP_NAME}",
        html=_page(
            f"Hi {escape(first_name)},",
            f"Your {escape(role)} account is ready. You can sign in any time.",
        ),
        text=f"Hi {first_name}, welcome to {APP_NAME}! Your {role} account is ready.",
    )


def password_reset(first_name: str, reset_url: str, valid_minutes: int) -> Message:
    return Message(
        subject="Reset your password",
        html=_page(
            f"Hi {escape(first_name)},",
            f'Follow <a href="{escape(reset_url, quote=True)}">this link</a> to choose a new password.',
            f"The link expires in {valid_minutes} minutes. Ignore this email if you did not ask for it.",
        ),
        text=f"Hi {first_name}, reset your password here: {reset_url} (valid {valid_minutes} minutes).",
    )


def password_changed(first_name: str) -> Message:
    return Message(
        subject="Your password was changed",
        html=_page(
            f"Hi {escape(first_name)},",
            "Your password was just changed. Contact support if this was not you.",
        ),
        text=f"Hi {first_name}, your {APP_NAME} password was just changed.",
    )


def session_invitation(
    first_name: str,
    title: str,
    start_time: datetime,
    meeting_link: Optional[str] = None,
    location: Optional[str] = None,
) -> Message:
    where = meeting_link or location
    lines = [f"You are enrolled in <strong>{escape(title)}</strong> on {_when(start_time)}."]
    if where:
        lines.append(f"Join at: {escape(where)}")
    text = f"Hi {first_name}, you are enrolled in {title} on {_when(start_time)}."
    return Message(
        subject=f"Session confirmed: {title}",
        html=_page(f"Hi {escape(first_name)},", *lines),
        text=f"{text} Join at: {where}" if where else text,
    )


def session_cancelled(first_name: str, title: str, start_time: datetime, reason: Optional[str] = None) -> Message:
    lines = [f"<strong>{escape(title)}</strong> planned for {_when(start_time)} has been cancelled."]
    if reason:
        lines.append(f"Reason: {escape(reason)}")
    return Message(
        subject=f"Session cancelled: {title}",
        html=_page(f"Hi {escape(first_name)},", *lines),
        text=f"Hi {first_name}, {title} on {_when(start_time)} has been cancelled."
        + (f" Reason: {reason}" if reason else ""),
    )


def session_rescheduled(first_name: str, title: str, start_time: datetime, end_time: datetime) -> Message:
    return Message(
        subject=f"Session rescheduled: {title}",
        html=_page(
            f"Hi {escape(first_name)},",
            f"<strong>{escape(title)}</strong> now takes place on {_when(start_time)}"
            f" until {end_time.strftime('%H:%M UTC')}.",
        ),
        text=f"Hi {first_name}, {title} has moved to {_when(start_time)}.",
    )


def session_reminder(first_name: str, title: str, start_time: datetime, meeting_link: Optional[str] = None) -> Message:
    lines = [f"Reminder: <strong>{escape(title)}</strong> starts on {_when(start_time)}."]
    if meeting_link:
        lines.append(f"Join at: {escape(meeting_link)}")
    return Message(
        subject=f"Reminder: {title}",
        html=_page(f"Hi {escape(first_name)},", *lines),
        text=f"Hi {first_name}, reminder: {title} starts on {_when(start_time)}."
        + (f" Join at: {meeting_link}" if meeting_link else ""),
    )


def payment_confirmation(first_name: str, amount: Decimal, currency: str, invoice_number: Optional[str]) -> Message:
    ref = f" (invoice {invoice_number})" if invoice_number else ""
    return Message(
        subject=f"Payment received{ref}",
        html=_page(f"Hi {escape(first_name)},", f"We received your payment of {amount} {escape(currency)}{escape(ref)}."),
        text=f"Hi {first_name}, we received your payment of {amount} {currency}{ref}. Thank you!",
    )


def payment_reminder(
    first_name: str,
    amount: Decimal,
    currency: str,
    invoice_number: Optional[str],
    due_date: Optional[datetime],
    days_overdue: int,
) -> Message:
    ref = invoice_number or "your invoice"
    due = f" was due on {due_date.strftime('%d %B %Y')}" if due_date else " is outstanding"
    return Message(
        subject=f"Payment reminder: {ref}",
        html=_page(
            f"Hi {escape(first_name)},",
            f"{escape(ref)} for {amount} {escape(currency)}{due} ({days_overdue} days overdue).",
            "Please settle it at your earliest convenience.",
        ),
        text=f"Hi {first_name}, {ref} for {amount} {currency}{due} ({days_overdue} days overdue).",
    )
