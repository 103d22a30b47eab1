from src.education.api.routes.attendance import router as attendance_router
from src.education.api.routes.feedback import router as feedback_router
from src.education.api.routes.payments import router as payments_router
from src.education.api.routes.sessions import router as sessions_router
from src.education.api.routes.syllabus import router as syllabus_router

__all__ = [
    "attendance_router",
    "feedback_router",
    "payments_router",
    "sessions_router",
    "syllabus_router",
]
