from src.education.infrastructure.repositories.attendance_repository import AttendanceRepository
from src.education.infrastructure.repositories.enrollment_repository import EnrollmentRepository
from src.education.infrastructure.repositories.feedback_repository import FeedbackRepository
from src.education.infrastructure.repositories.payment_repository import PaymentRepository
from src.education.infrastructure.repositories.session_repository import SessionRepository
from src.education.infrastructure.repositories.syllabus_repository import SyllabusRepository

__all__ = [
    "AttendanceRepository",
    "EnrollmentRepository",
    "FeedbackRepository",
    "PaymentRepository",
    "SessionRepository",
    "SyllabusRepository",
]
