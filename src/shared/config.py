"""
Centralized configuration for the education management backend.

- Pure Python (dataclasses + stdlib), loaded from OS env.
- Optionally parses a .env file when python-dotenv finds one.
- Strong typing & validation in __post_init__.
- Immutable singleton via functools.lru_cache.
- Secrets never logged (masked).
"""

from __future__ import annotations

import functools
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional, cast
from urllib.parse import urlparse

from dotenv import load_dotenv


# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------
def _mask_secret(value: Optional[str]) -> str:
    if not value:
        return "<unset>"
    if len(value) <= 8:
        return "***"
    return value[:2] + "…" + value[-2:]


def _get_env_str(key: str, default: Optional[str] = None, required: bool = False) -> Optional[str]:
    v = os.getenv(key, default)
    if required and (v is None or str(v).strip() == ""):
        raise ValueError(f"Missing required env var: {key}")
    return v


def _get_env_bool(key: str, default: bool = False) -> bool:
    v = os.getenv(key)
    if v is None:
        return default
    v = v.strip().lower()
    return v in {"1", "true", "t", "yes", "y", "on"}


def _get_env_int(key: str, default: int) -> int:
    v = os.getenv(key)
    if v is None or v.strip() == "":
        return default
    try:
        return int(v)
    except ValueError:
        raise ValueError(f"Env var {key} must be an integer")


def _get_env_list(key: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(key, default) or ""
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _validate_choice(value: str, *, choices: tuple[str, ...], key: str) -> str:
    if value not in choices:
        raise ValueError(f"{key} must be one of {choices}, got {value!r}")
    return value


def _validate_url(value: Optional[str], *, key: str, allowed_schemes: tuple[str, ...]) -> Optional[str]:
    if value in (None, ""):
        return None
    parsed = urlparse(value)
    if parsed.scheme not in allowed_schemes or not parsed.netloc:
        raise ValueError(f"{key} must be a valid URL with scheme in {allowed_schemes}")
    return value


_DSN_PREFIXES = ("postgresql+asyncpg://", "sqlite+aiosqlite://")


def _validate_database_dsn(value: str, *, key: str) -> str:
    if not value.startswith(_DSN_PREFIXES):
        raise ValueError(f"{key} must start with one of {_DSN_PREFIXES}")
    return value


# ------------------------------------------------------------------------------
# Settings dataclass (immutable)
# ------------------------------------------------------------------------------
EnvName = Literal["local", "dev", "staging", "prod"]
GatewayName = Literal["auto_complete", "real"]


@dataclass(frozen=True)
class Settings:
    # Environment
    environment: EnvName = "local"
    debug: bool = False
    is_testing: bool = False

    # Database
    database_url: str = field(default="")
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Security / JWT
    jwt_secret: str = field(default="")
    jwt_refresh_secret: str = field(default="")
    jwt_algorithm: str = "HS256"
    access_token_exp_minutes: int = 60 * 24
    refresh_token_exp_minutes: int = 60 * 24 * 7
    password_reset_exp_minutes: int = 60

    # HTTP
    frontend_url: str = "http://localhost:3000"
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)

    # Payments
    payment_gateway: GatewayName = "real"
    default_currency: str = "USD"

    # Outbound email (SMTP)
    email_host: str = "smtp.gmail.com"
    email_port: int = 587
    email_user: Optional[str] = None
    email_password: Optional[str] = None
    email_from: Optional[str] = None

    # Outbound WhatsApp (Twilio)
    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_whatsapp_from: Optional[str] = None
    twilio_api_base_url: str = "https://api.twilio.com/2010-04-01"
    notification_timeout_seconds: int = 10

    # Observability
    log_level: str = "INFO"
    log_format: Optional[str] = None

    # Paths
    base_dir: Path = field(default_factory=lambda: Path(__file__).resolve().parent.parent)

    # Derived/computed flags (filled in __post_init__)
    is_prod: bool = field(init=False)
    is_staging: bool = field(init=False)
    is_dev: bool = field(init=False)
    is_local: bool = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "environment",
            _validate_choice(self.environment, choices=("local", "dev", "staging", "prod"), key="ENVIRONMENT"),
        )
        object.__setattr__(
            self, "payment_gateway",
            _validate_choice(self.payment_gateway, choices=("auto_complete", "real"), key="PAYMENT_GATEWAY"),
        )
        object.__setattr__(self, "database_url", _validate_database_dsn(self.database_url, key="DATABASE_URL"))
        _validate_url(self.frontend_url, key="FRONTEND_URL", allowed_schemes=("http", "https"))
        _validate_url(self.twilio_api_base_url, key="TWILIO_API_BASE_URL", allowed_schemes=("http", "https"))

        if not self.jwt_secret or not self.jwt_secret.strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        if not self.jwt_refresh_secret:
            object.__setattr__(self, "jwt_refresh_secret", self.jwt_secret + ".refresh")

        if self.access_token_exp_minutes <= 0:
            raise ValueError("ACCESS_TOKEN_EXP_MINUTES must be > 0")
        if self.refresh_token_exp_minutes <= self.access_token_exp_minutes:
            raise ValueError("REFRESH_TOKEN_EXP_MINUTES must be > ACCESS_TOKEN_EXP_MINUTES")
        if self.password_reset_exp_minutes <= 0:
            raise ValueError("PASSWORD_RESET_EXP_MINUTES must be > 0")

        if not re.fullmatch(r"[A-Z]{3}", self.default_currency):
            raise ValueError("DEFAULT_CURRENCY must be a 3-letter ISO code")
        if self.notification_timeout_seconds <= 0:
            raise ValueError("NOTIFICATION_TIMEOUT_SECONDS must be > 0")

        if not re.fullmatch(r"(?i)DEBUG|INFO|WARNING|ERROR|CRITICAL", self.log_level.strip()):
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        if self.log_format not in (None, "json", "console"):
            raise ValueError("LOG_FORMAT must be 'json' or 'console'")

        env = self.environment
        object.__setattr__(self, "is_prod", env == "prod")
        object.__setattr__(self, "is_staging", env == "staging")
        object.__setattr__(self, "is_dev", env == "dev")
        object.__setattr__(self, "is_local", env == "local")

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def expose_error_details(self) -> bool:
        """Stack traces and raw details only leave the process outside prod-like envs."""
        return not (self.is_prod or self.is_staging)

    @property
    def email_configured(self) -> bool:
        return bool(self.email_user and self.email_password)

    @property
    def whatsapp_configured(self) -> bool:
        return bool(self.twilio_account_sid and self.twilio_auth_token and self.twilio_whatsapp_from)

    # Safe dict (for debug prints without secrets)
    def safe_dict(self) -> dict:
        return {
            "environment": self.environment,
            "debug": self.debug,
            "is_testing": self.is_testing,
            "database_url": "<masked>" if self.database_url else "<unset>",
            "jwt_secret": _mask_secret(self.jwt_secret),
            "jwt_refresh_secret": _mask_secret(self.jwt_refresh_secret),
            "jwt_algorithm": self.jwt_algorithm,
            "access_token_exp_minutes": self.access_token_exp_minutes,
            "refresh_token_exp_minutes": self.refresh_token_exp_minutes,
            "frontend_url": self.frontend_url,
            "cors_origins": list(self.cors_origins),
            "payment_gateway": self.payment_gateway,
            "email_host": self.email_host,
            "email_user": self.email_user or "<unset>",
            "email_password": _mask_secret(self.email_password),
            "twilio_account_sid": _mask_secret(self.twilio_account_sid),
            "twilio_auth_token": _mask_secret(self.twilio_auth_token),
            "log_level": self.log_level,
            "database_pool_size": self.database_pool_size,
            "database_max_overflow": self.database_max_overflow,
            "base_dir": str(self.base_dir),
        }


# ------------------------------------------------------------------------------
# Loader (singleton)
# ------------------------------------------------------------------------------
_logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    # .env at the repo root (../.env relative to src/)
    env_file = Path(__file__).resolve().parent.parent.parent / ".env"
    if env_file.exists():
        load_dotenv(dotenv_path=str(env_file), override=False)

    environment = cast(EnvName, _get_env_str("ENVIRONMENT", "local") or "local")
    default_gateway = "auto_complete" if environment == "dev" else "real"

    settings = Settings(
        environment=environment,
        debug=_get_env_bool("DEBUG", False),
        is_testing=_get_env_bool("IS_TESTING", False),
        database_url=_get_env_str("DATABASE_URL", required=True) or "",
        database_pool_size=_get_env_int("DATABASE_POOL_SIZE", 5),
        database_max_overflow=_get_env_int("DATABASE_MAX_OVERFLOW", 10),
        jwt_secret=_get_env_str("JWT_SECRET", required=True) or "",
        jwt_refresh_secret=_get_env_str("JWT_REFRESH_SECRET", "") or "",
        jwt_algorithm=_get_env_str("JWT_ALGORITHM", "HS256") or "HS256",
        access_token_exp_minutes=_get_env_int("ACCESS_TOKEN_EXP_MINUTES", 60 * 24),
        refresh_token_exp_minutes=_get_env_int("REFRESH_TOKEN_EXP_MINUTES", 60 * 24 * 7),
        password_reset_exp_minutes=_get_env_int("PASSWORD_RESET_EXP_MINUTES", 60),
        frontend_url=_get_env_str("FRONTEND_URL", "http://localhost:3000") or "http://localhost:3000",
        cors_origins=_get_env_list("CORS_ORIGINS", "http://localhost:3000"),
        payment_gateway=cast(GatewayName, _get_env_str("PAYMENT_GATEWAY", default_gateway) or default_gateway),
        default_currency=_get_env_str("DEFAULT_CURRENCY", "USD") or "USD",
        email_host=_get_env_str("EMAIL_HOST", "smtp.gmail.com") or "smtp.gmail.com",
        email_port=_get_env_int("EMAIL_PORT", 587),
        email_user=_get_env_str("EMAIL_USER", None),
        email_password=_get_env_str("EMAIL_PASSWORD", None),
        email_from=_get_env_str("EMAIL_FROM", None),
        twilio_account_sid=_get_env_str("TWILIO_ACCOUNT_SID", None),
        twilio_auth_token=_get_env_str("TWILIO_AUTH_TOKEN", None),
        twilio_whatsapp_from=_get_env_str("TWILIO_WHATSAPP_FROM", None),
        twilio_api_base_url=_get_env_str("TWILIO_API_BASE_URL", "https://api.twilio.com/2010-04-01")
        or "https://api.twilio.com/2010-04-01",
        notification_timeout_seconds=_get_env_int("NOTIFICATION_TIMEOUT_SECONDS", 10),
        log_level=_get_env_str("LOG_LEVEL", "INFO") or "INFO",
        log_format=_get_env_str("LOG_FORMAT", None),
    )

    _logger.info("Settings loaded", extra={"settings": settings.safe_dict()})
    return settings
