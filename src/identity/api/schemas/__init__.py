from src.identity.api.schemas.auth_schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
)
from src.identity.api.schemas.user_schemas import (
    UpdateProfileRequest,
    UpdateStatusRequest,
    UserProfileResponse,
    UserResponse,
)

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "RefreshTokenRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "TokenResponse",
    "UserResponse",
    "UserProfileResponse",
    "UpdateProfileRequest",
    "UpdateStatusRequest",
]
