from __future__ import annotations

import re
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import jwt
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy import exc as sa_exc
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.shared.config import get_settings
from src.shared.error_codes import ERROR_CODES
from src.shared.logging import get_logger

logger = get_logger(__name__)

FieldError = Dict[str, Any]


# ───────────────────────── Base & Domain Exceptions ─────────────────────────
class DomainError(Exception):
    """Base class for domain-level errors. Services raise these, never HTTPException."""
    code: str = "domain_error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str
    errors: Optional[List[FieldError]]
    details: Optional[Dict[str, Any]]

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        errors: Optional[List[FieldError]] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.message = message or ERROR_CODES.get(self.code, {}).get("message") or self.__class__.__name__
        super().__init__(self.message)
        self.errors = errors
        self.details = details


class ValidationError(DomainError):
    code, status_code = "validation_error", status.HTTP_400_BAD_REQUEST

    @classmethod
    def for_field(cls, field: str, message: str, value: Any = None) -> "ValidationError":
        return cls(
            f"Validation Error: {message}",
            errors=[{"field": field, "message": message, "value": value}],
        )


class DuplicateConstraintError(DomainError):
    code, status_code = "duplicate", status.HTTP_409_CONFLICT


class ReferentialError(DomainError):
    code, status_code = "referential_error", status.HTTP_400_BAD_REQUEST


class AuthenticationError(DomainError):
    code, status_code = "unauthorized", status.HTTP_401_UNAUTHORIZED


class AuthorizationError(DomainError):
    code, status_code = "forbidden", status.HTTP_403_FORBIDDEN


class NotFoundError(DomainError):
    # generic; set a specific code via constructor if needed (e.g., "user_not_found")
    code, status_code = "not_found", status.HTTP_404_NOT_FOUND


class CapacityError(DomainError):
    code, status_code = "session_full", status.HTTP_409_CONFLICT


class InvalidStateError(DomainError):
    code, status_code = "invalid_state", status.HTTP_409_CONFLICT


class StorageUnavailable(DomainError):
    code, status_code = "storage_unavailable", status.HTTP_503_SERVICE_UNAVAILABLE


class ExternalServiceError(DomainError):
    """Notification dispatch failures. Logged and swallowed by the dispatcher."""
    code, status_code = "external_service_error", status.HTTP_502_BAD_GATEWAY

    def __init__(self, service: str, message: str = "", **kwargs: Any) -> None:
        self.service = service
        super().__init__(message or f"{service} temporarily unavailable", **kwargs)


# ───────────────────────── Storage error translation ─────────────────────────

_SQLITE_FIELDS = re.compile(r"constraint failed: (?P<cols>[\w.,\s]+)", re.IGNORECASE)
_PG_FIELDS = re.compile(r"Key \((?P<cols>[^)]+)\)=", re.IGNORECASE)

STORAGE_UNAVAILABLE_ERRORS = (
    sa_exc.OperationalError,
    sa_exc.InterfaceError,
    sa_exc.TimeoutError,
    sa_exc.DisconnectionError,
    ConnectionError,
    TimeoutError,
)


def _constraint_fields(msg: str) -> List[str]:
    m = _PG_FIELDS.search(msg) or _SQLITE_FIELDS.search(msg)
    if not m:
        return []
    return [c.strip().split(".")[-1] for c in m.group("cols").split(",") if c.strip()]


def translate_integrity_error(exc: sa_exc.IntegrityError) -> DomainError:
    """Map a driver constraint violation onto the domain taxonomy."""
    msg = str(exc.orig) if exc.orig is not None else str(exc)
    lowered = msg.lower()
    fields = _constraint_fields(msg)

    if "unique" in lowered or "duplicate key" in lowered:
        label = ", ".join(fields) or "value"
        return DuplicateConstraintError(
            f"Duplicate Error: {label} must be unique",
            errors=[{"field": f, "message": f"{f} must be unique", "value": None} for f in fields] or None,
        )
    if "foreign key" in lowered:
        return ReferentialError(
            ERROR_CODES["referential_error"]["message"],
            details={"field": fields[0] if fields else "unknown"},
        )
    return ValidationError(
        "Validation Error: constraint violated",
        errors=[{"field": f, "message": f"{f} violates a constraint", "value": None} for f in fields] or None,
    )


def translate_storage_error(exc: Exception) -> DomainError:
    if isinstance(exc, sa_exc.IntegrityError):
        return translate_integrity_error(exc)
    return StorageUnavailable(details={"type": exc.__class__.__name__})


# ───────────────────────────── Helpers ──────────────────────────────────────

def _envelope(
    req: Request,
    *,
    code: str,
    message: str,
    errors: Optional[List[FieldError]] = None,
    details: Optional[Dict[str, Any]] = None,
    exc: Optional[BaseException] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "code": code, "message": message}
    if errors:
        body["errors"] = errors
    if details:
        body["details"] = details
    body["path"] = req.url.path
    body["method"] = req.method
    body["timestamp"] = datetime.now(timezone.utc).isoformat()
    correlation_id = getattr(getattr(req, "state", None), "correlation_id", None)
    if correlation_id:
        body["correlation_id"] = correlation_id
    if exc is not None and get_settings().expose_error_details:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


def _json(status_code: int, payload: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def _http_for(code: str) -> int:
    return int(ERROR_CODES.get(code, {}).get("http", status.HTTP_500_INTERNAL_SERVER_ERROR))


def _msg_for(code: str) -> str:
    return str(ERROR_CODES.get(code, {}).get("message", code))


def _request_errors(exc: RequestValidationError) -> List[FieldError]:
    out: List[FieldError] = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        out.append({"field": ".".join(loc) or None, "message": err.get("msg"), "value": err.get("input")})
    return out


# ─────────────────────────── Registration ───────────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def handle_domain_error(req: Request, exc: DomainError):
        log = logger.warning if exc.status_code < 500 else logger.error
        log("Request failed", code=exc.code, status_code=exc.status_code, error=exc.message)
        return _json(
            exc.status_code,
            _envelope(
                req,
                code=exc.code,
                message=exc.message,
                errors=exc.errors,
                details=exc.details,
                exc=exc if exc.status_code >= 500 else None,
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(req: Request, exc: RequestValidationError):
        errors = _request_errors(exc)
        summary = ", ".join(f"{e['field']}: {e['message']}" for e in errors)
        return _json(
            _http_for("validation_error"),
            _envelope(req, code="validation_error", message=f"Validation Error: {summary}", errors=errors),
        )

    @app.exception_handler(sa_exc.IntegrityError)
    async def handle_integrity_error(req: Request, exc: sa_exc.IntegrityError):
        return await handle_domain_error(req, translate_integrity_error(exc))

    @app.exception_handler(sa_exc.SQLAlchemyError)
    async def handle_storage_error(req: Request, exc: sa_exc.SQLAlchemyError):
        if isinstance(exc, STORAGE_UNAVAILABLE_ERRORS):
            logger.error("Database unavailable", error=str(exc))
            return _json(
                _http_for("storage_unavailable"),
                _envelope(req, code="storage_unavailable", message=_msg_for("storage_unavailable"), exc=exc),
            )
        return await handle_unhandled(req, exc)

    @app.exception_handler(jwt.ExpiredSignatureError)
    async def handle_expired_jwt(req: Request, exc: jwt.ExpiredSignatureError):
        return _json(401, _envelope(req, code="expired_token", message=_msg_for("expired_token")))

    @app.exception_handler(jwt.InvalidTokenError)
    async def handle_invalid_jwt(req: Request, exc: jwt.InvalidTokenError):
        return _json(401, _envelope(req, code="invalid_token", message=_msg_for("invalid_token")))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(req: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
            code = "route_not_found"
        else:
            reverse_map = {v["http"]: k for k, v in reversed(list(ERROR_CODES.items()))}
            code = reverse_map.get(exc.status_code, "internal_error")
        message = exc.detail if isinstance(exc.detail, str) else _msg_for(code)
        return _json(exc.status_code, _envelope(req, code=code, message=message))

    @app.exception_handler(Exception)
    async def handle_unhandled(req: Request, exc: Exception):
        logger.exception("Unhandled error", error_type=exc.__class__.__name__)
        return _json(
            _http_for("internal_error"),
            _envelope(
                req,
                code="internal_error",
                message=str(exc) if get_settings().expose_error_details else _msg_for("internal_error"),
                exc=exc,
            ),
        )
