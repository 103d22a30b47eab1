from src.identity.api.dependencies.auth import (
    CurrentUser,
    get_auth_service,
    get_current_user,
    get_user_service,
    require_roles,
)

__all__ = ["CurrentUser", "get_current_user", "require_roles", "get_auth_service", "get_user_service"]
