# src/identity/api/routes/auth.py

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.identity.api.dependencies.auth import CurrentUser, get_auth_service
from src.identity.api.schemas.auth_schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
)
from src.identity.api.schemas.user_schemas import UserProfileResponse, UserResponse
from src.identity.application.services.auth_service import AuthService
from src.shared.http.responses import created, ok
from src.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset link has been sent."


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, auth_service: AuthServiceDep):
    """
    Create an account and sign it in.

    Raises:
        400: Invalid input or a role that cannot be self-assigned
        409: Email already registered
    """
    user, tokens = await auth_service.register(
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone,
        role=payload.role,
    )
    return created(
        {"user": UserResponse.from_entity(user), **TokenResponse.from_pair(tokens).model_dump()},
        message="User registered successfully",
    )


@router.post("/login")
async def login(payload: LoginRequest, auth_service: AuthServiceDep):
    """
    Raises:
        401: Invalid credentials
        403: Account inactive or suspended
    """
    user, tokens = await auth_service.login(payload.email, payload.password)
    return ok(
        {"user": UserResponse.from_entity(user), **TokenResponse.from_pair(tokens).model_dump()},
        message="Login successful",
    )


@router.post("/refresh-token")
async def refresh(payload: RefreshTokenRequest, auth_service: AuthServiceDep):
    tokens = await auth_service.refresh(payload.refresh_token)
    return ok(TokenResponse.from_pair(tokens), message="Token refreshed successfully")


@router.post("/forgot-password")
async def forgot_password(payload: ForgotPasswordRequest, auth_service: AuthServiceDep):
    await auth_service.forgot_password(payload.email)
    return ok(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password")
async def reset_password(payload: ResetPasswordRequest, auth_service: AuthServiceDep):
    await auth_service.reset_password(payload.token, payload.password)
    return ok(message="Password reset successful")


@router.post("/logout")
async def logout(current_user: CurrentUser):
    """Tokens are stateless; logout is recorded for the audit trail only."""
    logger.info("User logged out", user_id=str(current_user.id))
    return ok(message="Logout successful")


@router.get("/profile")
async def profile(current_user: CurrentUser):
    return ok({"user": UserProfileResponse.from_entity(current_user)})
