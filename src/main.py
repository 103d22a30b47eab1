from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi

from src.education.api.routes import (
    attendance_router,
    feedback_router,
    payments_router,
    sessions_router,
    syllabus_router,
)
from src.identity.api.routes import auth_router, users_router
from src.notifications.api import notifications_router
from src.shared.config import get_settings
from src.shared.exceptions import register_exception_handlers  # central mapping
from src.shared.health import router as health_router
from src.shared.http.middleware.context_middleware import RequestContextMiddleware
from src.shared.infrastructure.database.session import dispose_engine, init_models
from src.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    settings = get_settings()
    # Schema management outside local/dev/test is an operational concern.
    if settings.is_local or settings.is_dev or settings.is_testing:
        await init_models()
    logger.info("Application started", environment=settings.environment, gateway=settings.payment_gateway)
    yield
    await dispose_engine()
    logger.info("Application stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Education Management Platform API",
        version="1.0.0",
        lifespan=lifespan,
        swagger_ui_parameters={"persistAuthorization": True},
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )

    # Correlation id + request log line
    app.add_middleware(RequestContextMiddleware)

    # Routers
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(sessions_router)
    app.include_router(payments_router)
    app.include_router(attendance_router)
    app.include_router(feedback_router)
    app.include_router(syllabus_router)
    app.include_router(notifications_router)

    # Centralized error handling → {success: false, code, message, errors?, details?}
    register_exception_handlers(app)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint."""
        return {
            "message": "Education Management Platform API",
            "docs": "/docs",
            "health": "/health",
        }

    # ---- Custom OpenAPI to add Bearer auth ----
    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            routes=app.routes,
        )
        schema.setdefault("components", {}).setdefault("securitySchemes", {})["bearerAuth"] = {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
        schema["security"] = [{"bearerAuth": []}]
        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi

    return app


app = create_app()
