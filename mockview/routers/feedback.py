import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from mockview.database import get_db
from mockview.dependencies import CurrentUser, get_current_user
from mockview.models.interview import UserFeedbackRating
from mockview.responses import ApiError, success
from mockview.schemas.interview import FeedbackRequest, UserFeedbackRequest, UserFeedbackResponse
from mockview.services import feedback as feedback_service
from mockview.services.interviews import get_user_interview
from mockview.services.llm import LLMError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["feedback"])


@router.post("/api/interviews/{interview_id}/feedback")
async def create_feedback(
    interview_id: str,
    payload: FeedbackRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Score the interview from the call transcript."""
    attempt_number = payload.attempt_number or feedback_service.next_attempt_number(
        db, current_user.id, interview_id
    )

    interview = get_user_interview(db, interview_id, current_user.id)
    if not interview or not interview.kv:
        raise ApiError.not_found("Interview not found")

    try:
        result = await feedback_service.evaluate(interview.kv.value or {}, payload.transcript)
    except LLMError as e:
        logger.error("Error generating feedback for %s: %s", interview_id, e)
        raise ApiError("Failed to generate feedback", "SERVER_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR)

    feedback = feedback_service.save_feedback(db, interview, current_user.id, attempt_number, result)
    return success(feedback_service.to_response(feedback))


@router.get("/api/interviews/{interview_id}/feedback")
async def get_feedback(
    interview_id: str,
    attempt_number: Optional[int] = Query(default=None, alias="attemptNumber", ge=1),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Feedback for a given attempt, or the latest one."""
    feedback = feedback_service.get_feedback(db, current_user.id, interview_id, attempt_number)
    if not feedback:
        raise ApiError.not_found("Feedback not found")

    call_id = feedback_service.latest_call_id(db, current_user.id, interview_id)
    return success(feedback_service.to_response(feedback, call_id))


@router.post("/api/user_feedback")
async def submit_user_feedback(
    payload: UserFeedbackRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Store the user's rating of an interview experience."""
    rating = UserFeedbackRating(
        user_id=current_user.id,
        user_email=current_user.email,
        interview_id=payload.interview_id,
        rating=payload.rating,
        feedback=payload.feedback or None,
    )
    db.add(rating)
    db.commit()
    db.refresh(rating)
    return success(UserFeedbackResponse.model_validate(rating))
