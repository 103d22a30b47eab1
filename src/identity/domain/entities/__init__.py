from src.identity.domain.entities.user import User, UserStatus

__all__ = ["User", "UserStatus"]
