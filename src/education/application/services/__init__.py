from src.education.application.services.attendance_service import AttendanceService
from src.education.application.services.feedback_service import FeedbackService
from src.education.application.services.payment_service import PaymentService, get_gateway
from src.education.application.services.session_service import SessionService
from src.education.application.services.syllabus_service import SyllabusService

__all__ = [
    "AttendanceService",
    "FeedbackService",
    "PaymentService",
    "get_gateway",
    "SessionService",
    "SyllabusService",
]
