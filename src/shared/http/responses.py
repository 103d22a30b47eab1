# /src/shared/http/responses.py
"""
HTTP response helpers (success envelopes).

- ok(data, message=None, status=200)
- created(data, message=None, location=None)

Error envelopes are produced by the handlers in ``src.shared.exceptions``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder
from starlette.responses import JSONResponse


def envelope(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    body["data"] = data
    return jsonable_encoder(body)


def ok(data: Any = None, message: Optional[str] = None, status: int = 200) -> JSONResponse:
    return JSONResponse(envelope(data, message), status_code=status)


def created(data: Any, message: Optional[str] = None, location: Optional[str] = None) -> JSONResponse:
    headers = {"Location": location} if location else {}
    return JSONResponse(envelope(data, message), status_code=201, headers=headers)
