from src.education.api.schemas.attendance_schemas import (
    AttendanceResponse,
    CreateAttendanceRequest,
    MarkAttendanceRequest,
)
from src.education.api.schemas.feedback_schemas import (
    FeedbackResponse,
    ModerateFeedbackRequest,
    SubmitFeedbackRequest,
)
from src.education.api.schemas.payment_schemas import (
    CreatePaymentRequest,
    PaymentCallbackRequest,
    PaymentResponse,
    RefundRequest,
)
from src.education.api.schemas.session_schemas import (
    CancelSessionRequest,
    CreateSessionRequest,
    RescheduleRequest,
    SessionResponse,
    UpdateSessionRequest,
)
from src.education.api.schemas.syllabus_schemas import (
    CreateSyllabusRequest,
    SyllabusResponse,
    UpdateSyllabusRequest,
)

__all__ = [
    "AttendanceResponse",
    "CreateAttendanceRequest",
    "MarkAttendanceRequest",
    "FeedbackResponse",
    "ModerateFeedbackRequest",
    "SubmitFeedbackRequest",
    "CreatePaymentRequest",
    "PaymentCallbackRequest",
    "PaymentResponse",
    "RefundRequest",
    "CancelSessionRequest",
    "CreateSessionRequest",
    "RescheduleRequest",
    "SessionResponse",
    "UpdateSessionRequest",
    "CreateSyllabusRequest",
    "SyllabusResponse",
    "UpdateSyllabusRequest",
]
