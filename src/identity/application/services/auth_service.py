"""
Authentication Service
Registration, login, token refresh and password reset
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional
from uuid import UUID

from src.identity.domain.entities.user import User, UserStatus
from src.identity.domain.events.user_events import (
    PasswordResetCompleted,
    PasswordResetRequested,
    UserRegistered,
)
from src.identity.infrastructure.persistence.repositories.user_repository import UserRepository
from src.shared.application.service import ApplicationService
from src.shared.config import get_settings
from src.shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateConstraintError,
    ValidationError,
)
from src.shared.logging import get_logger, log_security_event
from src.shared.roles import Role, role_for_email
from src.shared.security import (
    PASSWORD_RESET,
    REFRESH,
    create_access_token,
    create_password_reset_token,
    create_refresh_token,
    decode_token,
    extract_user_id,
    hash_password,
    verify_password,
)

logger = get_logger(__name__)

# Roles a visitor may ask for explicitly; admins come from the email domain only.
SELF_SERVICE_ROLES = (Role.STUDENT, Role.TUTOR)


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "bearer"


class AuthService(ApplicationService):
    """
    Authentication service for registration, login and token management.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.users = UserRepository(self.session)

    @staticmethod
    def issue_tokens(user: User) -> TokenPair:
        settings = get_settings()
        return TokenPair(
            access_token=create_access_token(user.id, user.email, user.role.value),
            refresh_token=create_refresh_token(user.id),
            expires_in=settings.access_token_exp_minutes * 60,
        )

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
        role: Optional[Role] = None,
    ) -> tuple[User, TokenPair]:
        """
        Create an active account and return it with a fresh token pair.

        Without an explicit role the email domain decides
        (@std.com student, @tut.com tutor, @adm.com admin, otherwise student).

        Raises:
            DuplicateConstraintError: Email already registered
            ValidationError: Requested role cannot be self-assigned
        """
        if role is not None and Role(role) not in SELF_SERVICE_ROLES:
            raise ValidationError.for_field("role", "This role cannot be self-assigned", Role(role).value)

        async with self.uow:
            if await self.users.find_by_email(email):
                raise DuplicateConstraintError(
                    "User with this email already exists",
                    errors=[{"field": "email", "message": "email must be unique", "value": email}],
                )
            user = User(
                email=email,
                password_hash=hash_password(password),
                first_name=first_name.strip(),
                last_name=last_name.strip(),
                phone=phone,
                role=Role(role) if role is not None else role_for_email(email),
                status=UserStatus.ACTIVE,
            )
            user = await self.users.add(user)
            user.raise_event(UserRegistered(recipient=user.as_recipient(), role=user.role.value))
            self.uow.track(user)
            await self.uow.commit()

        logger.info("user.registered", user_id=str(user.id), role=user.role.value)
        self._publish_committed()
        return user, self.issue_tokens(user)

    async def login(self, email: str, password: str) -> tuple[User, TokenPair]:
        """
        Raises:
            AuthenticationError: Unknown email or wrong password (401)
            AuthorizationError: Account not active (403)
        """
        async with self.uow:
            user = await self.users.find_by_email(email)
            if user is None:
                log_security_event("login_failed", details={"reason": "unknown_email"})
                raise AuthenticationError("Invalid credentials", code="invalid_credentials")
            if not user.is_active:
                log_security_event("login_blocked", user_id=str(user.id), details={"status": user.status.value})
                raise AuthorizationError(
                    "Account is not active. Please contact support.", code="account_inactive"
                )
            if not verify_password(password, user.password_hash):
                log_security_event("login_failed", user_id=str(user.id), details={"reason": "bad_password"})
                raise AuthenticationError("Invalid credentials", code="invalid_credentials")

            user.record_login()
            await self.users.update(user)
            await self.uow.commit()

        log_security_event("login_succeeded", user_id=str(user.id))
        return user, self.issue_tokens(user)

    async def refresh(self, refresh_token: str) -> TokenPair:
        payload = decode_token(refresh_token, expected_type=REFRESH)
        user = await self.users.get_by_id(extract_user_id(payload))
        if user is None or not user.is_active:
            raise AuthenticationError("User not found or inactive", code="invalid_token")
        return self.issue_tokens(user)

    async def forgot_password(self, email: str) -> None:
        """Issue a reset link when the account exists. Callers never learn whether it did."""
        settings = get_settings()
        user = await self.users.find_by_email(email)
        if user is None:
            logger.info("password_reset.unknown_email")
            return

        async with self.uow:
            token = create_password_reset_token(user.id)
            user.store_reset_token(token, timedelta(minutes=settings.password_reset_exp_minutes))
            await self.users.update(user)
            user.raise_event(
                PasswordResetRequested(
                    recipient=user.as_recipient(),
                    reset_url=f"{settings.frontend_url}/reset-password?token={token}",
                )
            )
            self.uow.track(user)
            await self.uow.commit()

        log_security_event("password_reset_requested", user_id=str(user.id))
        self._publish_committed()

    async def reset_password(self, token: str, new_password: str) -> None:
        """
        Raises:
            ValidationError: Token invalid, expired, superseded or already used (400)
        """
        invalid = ValidationError.for_field("token", "Invalid or expired reset token")
        try:
            user_id: UUID = extract_user_id(decode_token(token, expected_type=PASSWORD_RESET))
        except AuthenticationError:
            raise invalid from None

        async with self.uow:
            user = await self.users.get_by_id(user_id)
            if user is None or not user.reset_token_matches(token):
                raise invalid
            user.change_password(hash_password(new_password))
            user.clear_reset_token()
            await self.users.update(user)
            user.raise_event(PasswordResetCompleted(recipient=user.as_recipient()))
            self.uow.track(user)
            await self.uow.commit()

        log_security_event("password_reset_completed", user_id=str(user.id))
        self._publish_committed()
