"""
Generic SQLAlchemy Repository
Maps between domain entities and ORM models; subclasses supply the mapping.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Sequence, Type, TypeVar
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession

from src.shared.domain.base_entity import BaseEntity
from src.shared.exceptions import STORAGE_UNAVAILABLE_ERRORS, translate_storage_error
from src.shared.infrastructure.database.base_model import Base
from src.shared.logging import get_logger

logger = get_logger(__name__)

TEntity = TypeVar("TEntity", bound=BaseEntity)
TModel = TypeVar("TModel", bound=Base)


class SQLAlchemyRepository(ABC, Generic[TEntity, TModel]):
    """
    Base repository with CRUD operations.

    Storage failures leave this class as domain errors through
    ``translate_storage_error``: constraint violations map onto
    ``DuplicateConstraintError``/``ReferentialError``/``ValidationError`` and
    anything else becomes ``StorageUnavailable``.
    """

    model_class: Type[TModel]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @abstractmethod
    def _to_entity(self, model: TModel) -> TEntity:
        """Convert ORM model to domain entity."""

    @abstractmethod
    def _to_model(self, entity: TEntity) -> TModel:
        """Convert domain entity to ORM model."""

    # ---- execution helpers -------------------------------------------------

    def _storage_error(self, exc: Exception, action: str) -> Exception:
        logger.error(
            "Repository operation failed",
            repository=self.__class__.__name__,
            action=action,
            error_type=exc.__class__.__name__,
            error=str(exc),
        )
        return translate_storage_error(exc)

    async def _execute(self, stmt: Any, action: str = "execute") -> Any:
        try:
            return await self.session.execute(stmt)
        except (sa_exc.IntegrityError, *STORAGE_UNAVAILABLE_ERRORS) as exc:
            raise self._storage_error(exc, action) from exc

    async def _flush(self, action: str = "flush") -> None:
        try:
            await self.session.flush()
        except (sa_exc.IntegrityError, *STORAGE_UNAVAILABLE_ERRORS) as exc:
            raise self._storage_error(exc, action) from exc

    async def _scalars(self, stmt: Any) -> Sequence[TModel]:
        result = await self._execute(stmt, "select")
        return result.scalars().all()

    # ---- CRUD ---------------------------------------------------------------

    async def add(self, entity: TEntity) -> TEntity:
        model = self._to_model(entity)
        self.session.add(model)
        await self._flush("add")
        logger.debug("Entity added", model=self.model_class.__name__, entity_id=str(model.id))
        return self._to_entity(model)

    async def get_by_id(self, entity_id: UUID) -> TEntity | None:
        model = await self._get_model(entity_id)
        return self._to_entity(model) if model else None

    async def _get_model(self, entity_id: UUID) -> TModel | None:
        try:
            return await self.session.get(self.model_class, entity_id)
        except STORAGE_UNAVAILABLE_ERRORS as exc:
            raise self._storage_error(exc, "get") from exc

    async def update(self, entity: TEntity) -> TEntity:
        """Write back every mapped field of an already persisted entity."""
        model = self._to_model(entity)
        merged = await self.session.merge(model)
        await self._flush("update")
        return self._to_entity(merged)

    async def delete(self, entity_id: UUID) -> bool:
        result = await self._execute(
            delete(self.model_class).where(self.model_class.id == entity_id), "delete"
        )
        return result.rowcount > 0

    async def find(self, **filters: Any) -> list[TEntity]:
        stmt = select(self.model_class)
        for key, value in filters.items():
            stmt = stmt.where(getattr(self.model_class, key) == value)
        return [self._to_entity(m) for m in await self._scalars(stmt)]

    async def find_one(self, **filters: Any) -> TEntity | None:
        found = await self.find(**filters)
        return found[0] if found else None

    async def count(self, **filters: Any) -> int:
        stmt = select(func.count()).select_from(self.model_class)
        for key, value in filters.items():
            stmt = stmt.where(getattr(self.model_class, key) == value)
        result = await self._execute(stmt, "count")
        return int(result.scalar_one())

    async def exists(self, **filters: Any) -> bool:
        return await self.count(**filters) > 0
