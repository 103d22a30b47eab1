from src.notifications.api.routes import router as notifications_router

__all__ = ["notifications_router"]
