from src.education.domain.entities.attendance import Attendance, AttendanceStatus
from src.education.domain.entities.enrollment import Enrollment, EnrollmentStatus
from src.education.domain.entities.feedback import Feedback, FeedbackCategory, FeedbackStatus
from src.education.domain.entities.payment import (
    Payment,
    PaymentEnvironment,
    PaymentMethod,
    PaymentStatus,
    format_invoice_number,
    invoice_prefix,
    invoice_sequence,
)
from src.education.domain.entities.syllabus import Syllabus
from src.education.domain.entities.teaching_session import (
    RecurringPattern,
    SessionStatus,
    SessionType,
    TeachingSession,
)

__all__ = [
    "Attendance",
    "AttendanceStatus",
    "Enrollment",
    "EnrollmentStatus",
    "Feedback",
    "FeedbackCategory",
    "FeedbackStatus",
    "Payment",
    "PaymentEnvironment",
    "PaymentMethod",
    "PaymentStatus",
    "format_invoice_number",
    "invoice_prefix",
    "invoice_sequence",
    "Syllabus",
    "RecurringPattern",
    "SessionStatus",
    "SessionType",
    "TeachingSession",
]
