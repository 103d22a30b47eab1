from src.identity.application.services.auth_service import AuthService, TokenPair
from src.identity.application.services.user_service import UserService

__all__ = ["AuthService", "TokenPair", "UserService"]
