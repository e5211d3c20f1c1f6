import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from pydantic import BaseModel, Field, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mockview.config import MAX_CUSTOM_INTERVIEWERS, REQUIRED_VOICE_PROMPTS
from mockview.database import get_db
from mockview.dependencies import CurrentUser, get_current_user
from mockview.models.interviewer import CustomInterviewer
from mockview.responses import ApiError, success
from mockview.schemas.interviewer import (
    CustomInterviewerResponse,
    DefaultInterviewerResponse,
    InterviewerUpdateRequest,
)
from mockview.services import elevenlabs
from mockview.services.elevenlabs import VoiceServiceError
from mockview.services.vapi import DEFAULT_INTERVIEWERS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interviewers", tags=["interviewers"])


class CreateInterviewerForm(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    title: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    specialties: str  # JSON string array
    experience: str = Field(min_length=1)


def _parse_specialties(raw: str) -> list[str]:
    try:
        specialties = json.loads(raw)
    except (TypeError, ValueError):
        raise ApiError("Invalid specialties format", "VALIDATION_ERROR", status.HTTP_400_BAD_REQUEST)
    if not isinstance(specialties, list) or not all(isinstance(s, str) for s in specialties):
        raise ApiError("Invalid specialties format", "VALIDATION_ERROR", status.HTTP_400_BAD_REQUEST)
    return specialties


def _get_owned(db: Session, interviewer_id: str, user_id: str) -> CustomInterviewer:
    interviewer = db.query(CustomInterviewer).filter(
        CustomInterviewer.id == interviewer_id,
        CustomInterviewer.user_id == user_id,
    ).first()
    if not interviewer:
        raise ApiError.not_found("Interviewer not found")
    return interviewer


@router.get("")
async def list_interviewers(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    interviewers = (
        db.query(CustomInterviewer)
        .filter(CustomInterviewer.user_id == current_user.id)
        .order_by(CustomInterviewer.created_at.desc())
        .all()
    )
    return success([CustomInterviewerResponse.model_validate(i) for i in interviewers])


@router.get("/defaults")
async def list_default_interviewers():
    """Built-in interviewers available to everyone."""
    return success([
        DefaultInterviewerResponse(**{k: v for k, v in preset.items() if k != "voice"})
        for preset in DEFAULT_INTERVIEWERS.values()
    ])


@router.post("")
async def create_interviewer(
    name: Optional[str] = Form(None),
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    specialties: Optional[str] = Form(None),
    experience: Optional[str] = Form(None),
    voice_prompt_0: Optional[UploadFile] = File(None, alias="voicePrompt0"),
    voice_prompt_1: Optional[UploadFile] = File(None, alias="voicePrompt1"),
    voice_prompt_2: Optional[UploadFile] = File(None, alias="voicePrompt2"),
    voice_prompt_3: Optional[UploadFile] = File(None, alias="voicePrompt3"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a custom interviewer with a cloned voice."""
    existing = db.query(CustomInterviewer).filter(CustomInterviewer.user_id == current_user.id).count()
    if existing >= MAX_CUSTOM_INTERVIEWERS:
        raise ApiError(
            f"You can only create a maximum of {MAX_CUSTOM_INTERVIEWERS} custom interviewers",
            "LIMIT_REACHED",
            status.HTTP_400_BAD_REQUEST,
        )

    try:
        form = CreateInterviewerForm(
            name=name,
            title=title,
            description=description,
            specialties=specialties,
            experience=experience,
        )
    except ValidationError as e:
        raise ApiError("Invalid form data", "VALIDATION_ERROR", status.HTTP_400_BAD_REQUEST, e.errors())

    specialty_list = _parse_specialties(form.specialties)

    uploads = [f for f in (voice_prompt_0, voice_prompt_1, voice_prompt_2, voice_prompt_3) if f is not None]
    if len(uploads) != REQUIRED_VOICE_PROMPTS:
        raise ApiError(
            f"All {REQUIRED_VOICE_PROMPTS} voice prompts are required",
            "VALIDATION_ERROR",
            status.HTTP_400_BAD_REQUEST,
        )

    samples = [(upload.filename or "", await upload.read(), upload.content_type) for upload in uploads]

    try:
        voice_id = await elevenlabs.create_voice(form.name, samples)
    except VoiceServiceError as e:
        logger.error("Voice creation failed for %s: %s", current_user.id, e)
        raise ApiError.server_error("Failed to create voice with ElevenLabs. Please try again.")

    interviewer = CustomInterviewer(
        user_id=current_user.id,
        name=form.name,
        title=form.title,
        description=form.description or None,
        specialties=specialty_list,
        experience=form.experience,
        voice_id=voice_id,
    )
    try:
        db.add(interviewer)
        db.commit()
        db.refresh(interviewer)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Database error saving interviewer: %s", e)
        if not await elevenlabs.delete_voice(voice_id):
            logger.error("Failed to clean up voice %s after database error", voice_id)
        raise ApiError.server_error("Failed to save interviewer")

    return success(CustomInterviewerResponse.model_validate(interviewer))


@router.get("/{interviewer_id}")
async def get_interviewer(
    interviewer_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    interviewer = _get_owned(db, interviewer_id, current_user.id)
    return success(CustomInterviewerResponse.model_validate(interviewer))


@router.put("/{interviewer_id}")
async def update_interviewer(
    interviewer_id: str,
    payload: InterviewerUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    interviewer = _get_owned(db, interviewer_id, current_user.id)

    if payload.name:
        interviewer.name = payload.name
    if payload.title:
        interviewer.title = payload.title
    if "description" in payload.model_fields_set:
        interviewer.description = payload.description or None
    if payload.experience:
        interviewer.experience = payload.experience
    if payload.specialties:
        interviewer.specialties = _parse_specialties(payload.specialties)

    db.commit()
    db.refresh(interviewer)
    return success(CustomInterviewerResponse.model_validate(interviewer))


@router.delete("/{interviewer_id}")
async def delete_interviewer(
    interviewer_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete the interviewer, then its ElevenLabs voice."""
    interviewer = _get_owned(db, interviewer_id, current_user.id)
    voice_id = interviewer.voice_id

    db.delete(interviewer)
    db.commit()

    if voice_id and not await elevenlabs.delete_voice(voice_id):
        logger.warning("Failed to delete voice %s from ElevenLabs", voice_id)

    return {"success": True, "message": "Interviewer deleted successfully!"}
