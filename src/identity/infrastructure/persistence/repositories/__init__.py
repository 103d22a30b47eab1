from src.identity.infrastructure.persistence.repositories.user_repository import UserRepository

__all__ = ["UserRepository"]
