# src/education/api/routes/feedback.py

from uuid import UUID

from fastapi import APIRouter, status

from src.education.api.dependencies import FeedbackServiceDep
from src.education.api.schemas.feedback_schemas import (
    FeedbackResponse,
    ModerateFeedbackRequest,
    SubmitFeedbackRequest,
)
from src.identity.api.dependencies.auth import CurrentUser
from src.shared.http.responses import created, ok

router = APIRouter(prefix="/api/feedback", tags=["Feedback"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_feedback(payload: SubmitFeedbackRequest, current_user: CurrentUser, service: FeedbackServiceDep):
    """
    Raises:
        403: Caller was not enrolled in the session
        409: Session not completed, or feedback already submitted
    """
    feedback = await service.submit(current_user, **payload.model_dump())
    return created(FeedbackResponse.from_entity(feedback, reveal_author=True), message="Thank you for your feedback")


@router.get("/sessions/{session_id}")
async def session_feedback(session_id: UUID, current_user: CurrentUser, service: FeedbackServiceDep):
    items = await service.list_for_session(current_user, session_id)
    return ok([FeedbackResponse.from_entity(f, reveal_author=current_user.is_admin) for f in items])


@router.get("/tutors/{tutor_id}")
async def tutor_feedback(tutor_id: UUID, current_user: CurrentUser, service: FeedbackServiceDep):
    items, average = await service.list_for_tutor(current_user, tutor_id)
    return ok(
        {
            "average_rating": average,
            "count": len(items),
            "feedback": [FeedbackResponse.from_entity(f, reveal_author=current_user.is_admin) for f in items],
        }
    )


@router.patch("/{feedback_id}/moderate")
async def moderate_feedback(
    feedback_id: UUID, payload: ModerateFeedbackRequest, current_user: CurrentUser, service: FeedbackServiceDep
):
    feedback = await service.moderate(current_user, feedback_id, payload.approve)
    return ok(FeedbackResponse.from_entity(feedback, reveal_author=current_user.is_admin), message=f"Feedback {feedback.status.value}")
