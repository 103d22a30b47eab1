# src/education/api/routes/attendance.py

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, status

from src.education.api.dependencies import AttendanceServiceDep
from src.education.api.schemas.attendance_schemas import (
    AttendanceResponse,
    CreateAttendanceRequest,
    MarkAttendanceRequest,
)
from src.education.api.schemas.common import UtcDateTime
from src.identity.api.dependencies.auth import CurrentUser
from src.shared.http.responses import created, ok

router = APIRouter(prefix="/api/attendance", tags=["Attendance"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_attendance(payload: CreateAttendanceRequest, current_user: CurrentUser, service: AttendanceServiceDep):
    """
    Raises:
        409: The student already has an attendance row for this session
    """
    record = await service.create_attendance(current_user, **payload.model_dump())
    return created(AttendanceResponse.from_entity(record), message="Attendance recorded")


@router.get("/stats")
async def attendance_stats(
    current_user: CurrentUser,
    service: AttendanceServiceDep,
    session_id: Optional[UUID] = None,
    student_id: Optional[UUID] = None,
):
    return ok(await service.stats(current_user, session_id=session_id, student_id=student_id))


@router.post("/sessions/{session_id}/roster")
async def premark_roster(session_id: UUID, current_user: CurrentUser, service: AttendanceServiceDep):
    records = await service.premark_roster(current_user, session_id)
    return ok([AttendanceResponse.from_entity(r) for r in records], message=f"{len(records)} attendance rows created")


@router.get("/sessions/{session_id}")
async def session_attendance(session_id: UUID, current_user: CurrentUser, service: AttendanceServiceDep):
    rows = await service.list_by_session(current_user, session_id)
    return ok([AttendanceResponse.from_entity(a, student=student) for a, student in rows])


@router.get("/students/{student_id}")
async def student_attendance(
    student_id: UUID,
    current_user: CurrentUser,
    service: AttendanceServiceDep,
    start_date: Optional[UtcDateTime] = None,
    end_date: Optional[UtcDateTime] = None,
):
    rows = await service.list_by_student(current_user, student_id, start=start_date, end=end_date)
    return ok([AttendanceResponse.from_entity(a, session=session) for a, session in rows])


@router.get("/{attendance_id}")
async def get_attendance(attendance_id: UUID, current_user: CurrentUser, service: AttendanceServiceDep):
    return ok(AttendanceResponse.from_entity(await service.get_attendance(current_user, attendance_id)))


@router.patch("/{attendance_id}/mark")
async def mark_attendance(
    attendance_id: UUID, payload: MarkAttendanceRequest, current_user: CurrentUser, service: AttendanceServiceDep
):
    record = await service.mark(current_user, attendance_id, **payload.model_dump())
    return ok(AttendanceResponse.from_entity(record), message=f"Marked {record.status.value}")


@router.post("/{attendance_id}/check-out")
async def check_out(attendance_id: UUID, current_user: CurrentUser, service: AttendanceServiceDep):
    return ok(AttendanceResponse.from_entity(await service.check_out(current_user, attendance_id)))


@router.post("/{attendance_id}/duration")
async def calculate_duration(attendance_id: UUID, current_user: CurrentUser, service: AttendanceServiceDep):
    return ok(AttendanceResponse.from_entity(await service.calculate_duration(current_user, attendance_id)))
