"""
Authentication Dependencies
"""
from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.dependencies import get_db_session, get_event_publisher
from src.identity.application.services.auth_service import AuthService
from src.identity.application.services.user_service import UserService
from src.identity.domain.entities.user import User
from src.identity.infrastructure.persistence.repositories.user_repository import UserRepository
from src.shared.application.service import EventPublisher
from src.shared.exceptions import AuthenticationError, AuthorizationError
from src.shared.logging import bind_request_context, get_logger
from src.shared.roles import Role
from src.shared.security import decode_token, extract_user_id

logger = get_logger(__name__)

# HTTP Bearer token scheme; missing credentials are reported through our own envelope
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> User:
    """
    Resolve the bearer token to a stored, active user.

    Raises:
        AuthenticationError: 401 if token missing, invalid or expired, or the user is gone
        AuthorizationError: 403 if the account is not active
    """
    if credentials is None:
        raise AuthenticationError("Access token required")

    payload = decode_token(credentials.credentials)
    user = await UserRepository(db).get_by_id(extract_user_id(payload))
    if user is None:
        raise AuthenticationError("User not found", code="invalid_token")
    if not user.is_active:
        logger.warning("Inactive account rejected", user_id=str(user.id), status=user.status.value)
        raise AuthorizationError("Account is not active. Please contact support.", code="account_inactive")

    bind_request_context(user_id=str(user.id), role=user.role.value)
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_roles(*allowed_roles: Role):
    """
    Dependency factory to require specific roles.

    Usage:
        @router.get("/admin", dependencies=[Depends(require_roles(Role.ADMIN))])
    """
    async def check_roles(current_user: CurrentUser) -> User:
        if current_user.role not in allowed_roles:
            logger.warning(
                "Access denied - insufficient permissions",
                user_id=str(current_user.id),
                user_role=current_user.role.value,
                required_roles=[r.value for r in allowed_roles],
            )
            raise AuthorizationError("Insufficient permissions")
        return current_user

    return check_roles


def get_auth_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    publish: Annotated[EventPublisher, Depends(get_event_publisher)],
) -> AuthService:
    return AuthService(db, publish)


def get_user_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    publish: Annotated[EventPublisher, Depends(get_event_publisher)],
) -> UserService:
    return UserService(db, publish)
