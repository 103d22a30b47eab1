from time import perf_counter

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from src.shared.exceptions import STORAGE_UNAVAILABLE_ERRORS
from src.shared.infrastructure.database.session import ping
from src.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health():
    t0 = perf_counter()
    try:
        await ping()
    except STORAGE_UNAVAILABLE_ERRORS as e:
        logger.error("Health check failed", error_type=type(e).__name__)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"success": False, "status": "unavailable", "checks": {"db": "SELECT 1 failed"}},
        )
    dt_ms = int((perf_counter() - t0) * 1000)
    return {"success": True, "status": "ok", "checks": {"db_select_1_ms": dt_ms}}
