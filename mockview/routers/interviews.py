import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mockview.database import get_db
from mockview.dependencies import CurrentUser, get_current_user
from mockview.models.interview import InterviewSession
from mockview.models.interviewer import CustomInterviewer
from mockview.responses import ApiError, success
from mockview.schemas.interview import (
    CreateInterviewRequest,
    QuickCreateRequest,
    SessionCreateRequest,
)
from mockview.services import interviews as interview_service
from mockview.services import vapi
from mockview.services.interviews import QuestionParseError
from mockview.services.llm import LLMError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interviews", tags=["interviews"])


@router.get("")
async def list_interviews(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the user's interviews, newest first, with their latest score."""
    return success(interview_service.list_interview_cards(db, current_user.id))


@router.post("/generate")
async def generate_interview(
    payload: CreateInterviewRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Generate (or reuse cached) questions and create an interview for the user."""
    try:
        kv = await interview_service.get_or_create_kv(
            db,
            job_title=payload.job_title,
            job_description=payload.job_description,
            interview_type=payload.interview_type,
            experience_level=payload.experience_level,
        )
    except QuestionParseError as e:
        raise ApiError(str(e), "PARSE_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR)
    except LLMError as e:
        logger.error("Interview generation error: %s", e)
        raise ApiError(str(e), "SERVER_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR)

    user_interview = interview_service.link_user(db, current_user.id, kv.key)
    return success(interview_service.to_generated_interview(user_interview, kv, payload.duration))


@router.post("/generate-quick")
async def generate_quick_interview(
    payload: QuickCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create an interview from a free-text description."""
    try:
        details = await interview_service.extract_details(payload.description)
        questions = await interview_service.generate_questions(
            details.job_title,
            details.experience_level,
            details.job_description,
            details.interview_type,
        )
        user_interview = interview_service.store_quick_interview(db, current_user.id, details, questions)
    except (LLMError, QuestionParseError, SQLAlchemyError) as e:
        logger.error("Generate quick interview error: %s", e)
        raise ApiError(str(e), "SERVER_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR)

    return success(interview_service.to_generated_interview(user_interview, user_interview.kv))


@router.get("/{interview_id}")
async def get_interview(
    interview_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user_interview = interview_service.get_user_interview(db, interview_id, current_user.id)
    if not user_interview:
        raise ApiError.not_found("Interview not found")

    kv = user_interview.kv
    if not kv or not kv.value:
        raise ApiError("Interview Error", "DATA_ERROR", status.HTTP_500_INTERNAL_SERVER_ERROR)

    return success(interview_service.to_generated_interview(user_interview, kv))


@router.delete("/{interview_id}")
async def delete_interview(
    interview_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete the user's interview with its feedback and call sessions.

    The shared question set stays cached.
    """
    user_interview = interview_service.get_user_interview(db, interview_id, current_user.id)
    if not user_interview:
        raise ApiError.not_found("Interview not found")

    db.delete(user_interview)
    db.commit()
    return success({"message": "Interview deleted", "interviewId": interview_id})


@router.post("/{interview_id}/session")
async def create_session(
    interview_id: str,
    payload: SessionCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Record the Vapi call started for an interview."""
    if not payload.call_id:
        raise ApiError("Missing call ID")

    if not interview_service.get_user_interview(db, interview_id, current_user.id):
        raise ApiError.not_found("Interview not found")

    db.add(
        InterviewSession(
            interview_id=interview_id,
            user_id=current_user.id,
            email=current_user.email,
            vapi_call_id=payload.call_id,
        )
    )
    db.commit()

    return success(
        {"message": "Interview session created", "interviewId": interview_id, "callId": payload.call_id},
        status.HTTP_201_CREATED,
    )


@router.get("/{interview_id}/assistant")
async def get_assistant(
    interview_id: str,
    interviewer: Optional[str] = "lulu",
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Vapi assistant configuration for the interview's call."""
    user_interview = interview_service.get_user_interview(db, interview_id, current_user.id)
    if not user_interview or not user_interview.kv:
        raise ApiError.not_found("Interview not found")

    questions = (user_interview.kv.value or {}).get("questions") or []
    key = (interviewer or "lulu").lower()

    if key in vapi.DEFAULT_INTERVIEWERS:
        preset = vapi.DEFAULT_INTERVIEWERS[key]
        return success(vapi.build_assistant(preset["name"], preset["voice"], questions))

    custom = db.query(CustomInterviewer).filter(
        CustomInterviewer.id == interviewer,
        CustomInterviewer.user_id == current_user.id,
    ).first()
    if not custom:
        raise ApiError.not_found("Interviewer not found")

    return success(vapi.build_assistant(custom.name, vapi.custom_voice(custom.voice_id), questions))
