# src/notifications/api/routes.py

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.dependencies import get_db_session
from src.identity.api.dependencies.auth import CurrentUser
from src.notifications.api.schemas import NotificationResponse
from src.notifications.application.notification_service import NotificationService
from src.shared.http.responses import ok

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


def get_notification_service(db: Annotated[AsyncSession, Depends(get_db_session)]) -> NotificationService:
    return NotificationService(db)


NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]


@router.get("")
async def list_notifications(
    current_user: CurrentUser,
    service: NotificationServiceDep,
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
):
    notifications = await service.list_for(current_user, unread_only=unread_only, limit=limit, offset=offset)
    return ok([NotificationResponse.from_entity(n) for n in notifications])


@router.get("/unread-count")
async def unread_count(current_user: CurrentUser, service: NotificationServiceDep):
    return ok({"count": await service.unread_count(current_user)})


@router.patch("/{notification_id}/read")
async def mark_read(notification_id: UUID, current_user: CurrentUser, service: NotificationServiceDep):
    notification = await service.mark_read(current_user, notification_id)
    return ok(NotificationResponse.from_entity(notification), message="Notification marked as read")


@router.patch("/read-all")
async def mark_all_read(current_user: CurrentUser, service: NotificationServiceDep):
    updated = await service.mark_all_read(current_user)
    return ok({"updated": updated}, message="All notifications marked as read")
