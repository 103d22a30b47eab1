"""
Education service dependencies
"""
from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.dependencies import get_db_session, get_event_publisher
from src.education.application.services import (
    AttendanceService,
    FeedbackService,
    PaymentService,
    SessionService,
    SyllabusService,
)
from src.shared.application.service import EventPublisher

DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Publisher = Annotated[EventPublisher, Depends(get_event_publisher)]


def get_session_service(db: DbSession, publish: Publisher) -> SessionService:
    return SessionService(db, publish)


def get_payment_service(db: DbSession, publish: Publisher) -> PaymentService:
    return PaymentService(db, publish)


def get_attendance_service(db: DbSession) -> AttendanceService:
    return AttendanceService(db)


def get_feedback_service(db: DbSession) -> FeedbackService:
    return FeedbackService(db)


def get_syllabus_service(db: DbSession) -> SyllabusService:
    return SyllabusService(db)


SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
PaymentServiceDep = Annotated[PaymentService, Depends(get_payment_service)]
AttendanceServiceDep = Annotated[AttendanceService, Depends(get_attendance_service)]
FeedbackServiceDep = Annotated[FeedbackService, Depends(get_feedback_service)]
SyllabusServiceDep = Annotated[SyllabusService, Depends(get_syllabus_service)]
