"""
Shared Database Infrastructure
Declarative base, engine/session lifecycle, generic repository and UoW
"""
from src.shared.infrastructure.database.base_model import Base
from src.shared.infrastructure.database.sqlalchemy_repository import SQLAlchemyRepository
from src.shared.infrastructure.database.sqlalchemy_unit_of_work import SQLAlchemyUnitOfWork

__all__ = [
    "Base",
    "SQLAlchemyRepository",
    "SQLAlchemyUnitOfWork",
]
