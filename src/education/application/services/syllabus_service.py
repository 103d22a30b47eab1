"""
Syllabus Service
"""
from __future__ import annotations

from typing import Any, List, Optional
from uuid import UUID

from src.education.domain.entities.syllabus import Syllabus
from src.education.infrastructure.repositories import SyllabusRepository
from src.identity.domain.entities.user import User
from src.shared.application.service import ApplicationService
from src.shared.exceptions import NotFoundError
from src.shared.logging import get_logger

logger = get_logger(__name__)


class SyllabusService(ApplicationService):

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.syllabi = SyllabusRepository(self.session)

    async def get_syllabus(self, actor: User, syllabus_id: UUID) -> Syllabus:
        self.access.check(actor, "syllabus", "read")
        syllabus = await self.syllabi.get_by_id(syllabus_id)
        if syllabus is None:
            raise NotFoundError("Syllabus not found")
        return syllabus

    async def list_syllabi(
        self,
        actor: User,
        subject: Optional[str] = None,
        is_active: Optional[bool] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Syllabus]:
        self.access.check(actor, "syllabus", "read")
        return await self.syllabi.list_syllabi(subject=subject, is_active=is_active, limit=limit, offset=offset)

    async def create_syllabus(self, actor: User, data: dict[str, Any]) -> Syllabus:
        self.access.check(actor, "syllabus", "create")
        async with self.uow:
            syllabus = Syllabus.create(created_by=actor.id, **data)
            syllabus = await self.syllabi.add(syllabus)
            await self.uow.commit()
        logger.info("syllabus.created", syllabus_id=str(syllabus.id), total_hours=syllabus.total_hours)
        return syllabus

    async def update_syllabus(self, actor: User, syllabus_id: UUID, changes: dict[str, Any]) -> Syllabus:
        async with self.uow:
            syllabus = await self.syllabi.get_by_id(syllabus_id)
            if syllabus is None:
                raise NotFoundError("Syllabus not found")
            self.access.check(actor, "syllabus", "update", [syllabus.created_by])
            syllabus.update(**changes)
            syllabus = await self.syllabi.update(syllabus)
            await self.uow.commit()
        return syllabus
