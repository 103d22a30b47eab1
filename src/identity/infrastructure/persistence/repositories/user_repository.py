# src/identity/infrastructure/persistence/repositories/user_repository.py
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select

from src.identity.domain.entities.user import User, UserStatus
from src.identity.infrastructure.persistence.models.user_model import UserModel
from src.shared.infrastructure.database.sqlalchemy_repository import SQLAlchemyRepository
from src.shared.roles import Role


class UserRepository(SQLAlchemyRepository[User, UserModel]):
    """
    SQLAlchemy repository for users.
    - No commits here; services own the transaction through the unit of work.
    """

    model_class = UserModel

    def _to_entity(self, model: UserModel) -> User:
        return User(
            id=model.id,
            email=model.email,
            password_hash=model.password_hash,
            first_name=model.first_name,
            last_name=model.last_name,
            phone=model.phone,
            role=Role(model.role),
            status=UserStatus(model.status),
            profile_picture=model.profile_picture,
            date_of_birth=model.date_of_birth,
            gender=model.gender,
            address=model.address,
            city=model.city,
            state=model.state,
            country=model.country,
            postal_code=model.postal_code,
            email_verified=model.email_verified,
            phone_verified=model.phone_verified,
            last_login_at=model.last_login_at,
            preferences=dict(model.preferences or {}),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: User) -> UserModel:
        return UserModel(
            id=entity.id,
            email=entity.email,
            password_hash=entity.password_hash,
            first_name=entity.first_name,
            last_name=entity.last_name,
            phone=entity.phone,
            role=entity.role.value,
            status=entity.status.value,
            profile_picture=entity.profile_picture,
            date_of_birth=entity.date_of_birth,
            gender=entity.gender,
            address=entity.address,
            city=entity.city,
            state=entity.state,
            country=entity.country,
            postal_code=entity.postal_code,
            email_verified=entity.email_verified,
            phone_verified=entity.phone_verified,
            last_login_at=entity.last_login_at,
            preferences=dict(entity.preferences),
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    # -------- Lookup methods -------------------------------------------------

    async def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(UserModel).where(func.lower(UserModel.email) == email.strip().lower())
        models = await self._scalars(stmt)
        return self._to_entity(models[0]) if models else None

    async def find_many(self, user_ids: List[UUID]) -> List[User]:
        if not user_ids:
            return []
        stmt = select(UserModel).where(UserModel.id.in_(user_ids))
        return [self._to_entity(m) for m in await self._scalars(stmt)]

    # -------- Listing --------------------------------------------------------

    async def list_users(
        self,
        role: Optional[Role] = None,
        status: Optional[UserStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[User]:
        stmt = select(UserModel)
        if role is not None:
            stmt = stmt.where(UserModel.role == Role(role).value)
        if status is not None:
            stmt = stmt.where(UserModel.status == UserStatus(status).value)
        stmt = stmt.order_by(UserModel.created_at.desc()).limit(limit).offset(offset)
        return [self._to_entity(m) for m in await self._scalars(stmt)]
