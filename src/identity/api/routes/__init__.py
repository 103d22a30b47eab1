from src.identity.api.routes.auth import router as auth_router
from src.identity.api.routes.users import router as users_router

__all__ = ["auth_router", "users_router"]
