# src/education/api/routes/syllabus.py

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.education.api.dependencies import SyllabusServiceDep
from src.education.api.schemas.syllabus_schemas import (
    CreateSyllabusRequest,
    SyllabusResponse,
    UpdateSyllabusRequest,
)
from src.identity.api.dependencies.auth import CurrentUser
from src.shared.http.responses import created, ok

router = APIRouter(prefix="/api/syllabus", tags=["Syllabus"])


@router.get("")
async def list_syllabi(
    current_user: CurrentUser,
    service: SyllabusServiceDep,
    subject: Optional[str] = None,
    is_active: Optional[bool] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    items = await service.list_syllabi(current_user, subject=subject, is_active=is_active, limit=limit, offset=offset)
    return ok([SyllabusResponse.from_entity(s) for s in items])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_syllabus(payload: CreateSyllabusRequest, current_user: CurrentUser, service: SyllabusServiceDep):
    syllabus = await service.create_syllabus(current_user, payload.model_dump())
    return created(SyllabusResponse.from_entity(syllabus), message="Syllabus created successfully")


@router.get("/{syllabus_id}")
async def get_syllabus(syllabus_id: UUID, current_user: CurrentUser, service: SyllabusServiceDep):
    return ok(SyllabusResponse.from_entity(await service.get_syllabus(current_user, syllabus_id)))


@router.put("/{syllabus_id}")
async def update_syllabus(
    syllabus_id: UUID, payload: UpdateSyllabusRequest, current_user: CurrentUser, service: SyllabusServiceDep
):
    syllabus = await service.update_syllabus(current_user, syllabus_id, payload.model_dump(exclude_unset=True))
    return ok(SyllabusResponse.from_entity(syllabus), message="Syllabus updated successfully")
