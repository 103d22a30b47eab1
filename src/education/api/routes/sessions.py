# src/education/api/routes/sessions.py

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.education.api.dependencies import SessionServiceDep
from src.education.api.schemas.common import UtcDateTime
from src.education.api.schemas.session_schemas import (
    CancelSessionRequest,
    CreateSessionRequest,
    RescheduleRequest,
    SessionResponse,
    UpdateSessionRequest,
)
from src.education.domain.entities.teaching_session import SessionStatus, SessionType
from src.identity.api.dependencies.auth import CurrentUser
from src.shared.http.responses import created, ok

router = APIRouter(prefix="/api/sessions", tags=["Sessions"])


@router.get("")
async def list_sessions(
    current_user: CurrentUser,
    service: SessionServiceDep,
    status_: Optional[SessionStatus] = Query(default=None, alias="status"),
    session_type: Optional[SessionType] = None,
    tutor_id: Optional[UUID] = None,
    start_date: Optional[UtcDateTime] = None,
    end_date: Optional[UtcDateTime] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    sessions = await service.list_sessions(
        current_user,
        status=status_,
        session_type=session_type,
        tutor_id=tutor_id,
        start=start_date,
        end=end_date,
        limit=limit,
        offset=offset,
    )
    return ok([SessionResponse.from_entity(s) for s in sessions])


@router.get("/upcoming")
async def upcoming_sessions(current_user: CurrentUser, service: SessionServiceDep, limit: int = Query(50, ge=1, le=200)):
    return ok([SessionResponse.from_entity(s) for s in await service.upcoming(current_user, limit=limit)])


@router.get("/mine")
async def my_sessions(
    current_user: CurrentUser,
    service: SessionServiceDep,
    status_: Optional[SessionStatus] = Query(default=None, alias="status"),
    start_date: Optional[UtcDateTime] = None,
    end_date: Optional[UtcDateTime] = None,
):
    sessions = await service.my_sessions(current_user, status=status_, start=start_date, end=end_date)
    return ok([SessionResponse.from_entity(s) for s in sessions])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_session(payload: CreateSessionRequest, current_user: CurrentUser, service: SessionServiceDep):
    """
    Raises:
        400: Invalid window, duration, capacity or price
        403: Students cannot create sessions
    """
    session = await service.create_session(current_user, payload.model_dump(exclude_none=True))
    return created(
        SessionResponse.from_entity(session),
        message="Session created successfully",
        location=f"/api/sessions/{session.id}",
    )


@router.get("/{session_id}")
async def get_session(session_id: UUID, current_user: CurrentUser, service: SessionServiceDep):
    return ok(SessionResponse.from_entity(await service.get_session(session_id)))


@router.put("/{session_id}")
async def update_session(
    session_id: UUID, payload: UpdateSessionRequest, current_user: CurrentUser, service: SessionServiceDep
):
    session = await service.update_session(current_user, session_id, payload.model_dump(exclude_unset=True))
    return ok(SessionResponse.from_entity(session), message="Session updated successfully")


@router.get("/{session_id}/students")
async def session_roster(session_id: UUID, current_user: CurrentUser, service: SessionServiceDep):
    return ok(await service.roster(current_user, session_id))


@router.post("/{session_id}/join")
async def join_session(session_id: UUID, current_user: CurrentUser, service: SessionServiceDep):
    """
    Raises:
        404: Unknown session
        409: Session full, not scheduled, or already joined
    """
    session = await service.join(current_user, session_id)
    return ok(SessionResponse.from_entity(session), message="Joined session successfully")


@router.post("/{session_id}/leave")
async def leave_session(session_id: UUID, current_user: CurrentUser, service: SessionServiceDep):
    session = await service.leave(current_user, session_id)
    return ok(SessionResponse.from_entity(session), message="Left session successfully")


@router.post("/{session_id}/cancel")
async def cancel_session(
    session_id: UUID,
    current_user: CurrentUser,
    service: SessionServiceDep,
    payload: Optional[CancelSessionRequest] = None,
):
    session = await service.cancel(current_user, session_id, reason=payload.reason if payload else None)
    return ok(SessionResponse.from_entity(session), message="Session cancelled successfully")


@router.post("/{session_id}/start")
async def start_session(session_id: UUID, current_user: CurrentUser, service: SessionServiceDep):
    return ok(SessionResponse.from_entity(await service.start(current_user, session_id)), message="Session started")


@router.post("/{session_id}/complete")
async def complete_session(session_id: UUID, current_user: CurrentUser, service: SessionServiceDep):
    session = await service.complete(current_user, session_id)
    return ok(SessionResponse.from_entity(session), message="Session completed")


@router.post("/{session_id}/reschedule")
async def reschedule_session(
    session_id: UUID, payload: RescheduleRequest, current_user: CurrentUser, service: SessionServiceDep
):
    session = await service.reschedule(current_user, session_id, payload.start_time, payload.end_time)
    return ok(SessionResponse.from_entity(session), message="Session rescheduled")


@router.post("/{session_id}/remind")
async def remind_session(session_id: UUID, current_user: CurrentUser, service: SessionServiceDep):
    notified = await service.send_reminder(current_user, session_id)
    return ok({"notified": notified}, message="Reminders queued")
