from __future__ import annotations

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.shared.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
    set_correlation_id,
)

REQUEST_ID_HEADER = "X-Request-ID"

logger = get_logger("http")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Binds request-scoped context for structured logs:
      - correlation_id (incoming X-Request-ID or a fresh uuid4), echoed back
      - method, path, client ip
    and logs one line per request with status and duration.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER)
        correlation_id = set_correlation_id(incoming or str(uuid.uuid4()))
        request.state.correlation_id = correlation_id
        bind_request_context(
            path=request.url.path,
            method=request.method,
            client_ip=request.client.host if request.client else None,
        )
        started = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            log = logger.warning if response.status_code >= 500 else logger.info
            log("request.completed", status_code=response.status_code, duration_ms=duration_ms)
            response.headers[REQUEST_ID_HEADER] = correlation_id
            return response
        finally:
            clear_request_context()
