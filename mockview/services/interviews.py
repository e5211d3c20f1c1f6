"""Interview generation and the shared question cache (``interviews_kv``)."""

import hashlib
import json
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mockview.models.interview import Feedback, InterviewKV, UserInterview
from mockview.schemas.interview import (
    ExtractedInterviewDetails,
    GeneratedInterview,
    InterviewCard,
    InterviewQuestion,
)
from mockview.services import llm

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 30
QUESTION_COUNT = 10


class QuestionParseError(Exception):
    """The model's question list could not be parsed."""


def content_hash(**fields) -> str:
    """First 16 hex chars of the SHA-256 of the fields as compact JSON, in call order."""
    payload = json.dumps(fields, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]


def build_kv_key(job_title: str, interview_type: str, experience_level: str) -> str:
    digest = content_hash(
        jobTitle=job_title,
        interviewType=interview_type,
        experienceLevel=experience_level,
    )
    return f"interview:{job_title}:{interview_type}:{digest}"


def build_quick_kv_key(details: ExtractedInterviewDetails) -> str:
    digest = content_hash(
        jobTitle=details.job_title,
        interviewType=details.interview_type,
        experienceLevel=details.experience_level,
        companyName=details.company_name,
    )
    return f"interview:{details.job_title}:{details.interview_type}:{details.company_name}:{digest}"


def questions_prompt(job_title: str, experience_level: str, job_description: Optional[str],
                     interview_type: str) -> str:
    return f"""Prepare questions for a job interview.
The job role is {job_title}.
The job experience level is {experience_level}.
The job description is: {job_description or "not provided"}.
The interview type is: {interview_type}.
Return {QUESTION_COUNT} questions.
The first question should ask the candidate to introduce themselves.
Please return only the questions, without any additional text.
The questions are going to be read by a voice assistant so do not use "/" or "*" or any other special characters which might break the voice assistant.
Return the questions formatted like this:
["Question 1", "Question 2", "Question 3"]"""


async def generate_questions(job_title: str, experience_level: str, job_description: Optional[str],
                             interview_type: str) -> list[str]:
    text = await llm.generate_text(
        questions_prompt(job_title, experience_level, job_description, interview_type)
    )
    try:
        questions = llm.parse_string_list(text)
    except ValueError as e:
        logger.error("Failed to parse AI response: %s", e)
        raise QuestionParseError("Failed to generate interview questions") from e
    if not questions:
        raise QuestionParseError("Failed to generate interview questions")
    return questions


def get_kv(db: Session, key: str) -> Optional[InterviewKV]:
    return db.query(InterviewKV).filter(InterviewKV.key == key).first()


async def get_or_create_kv(db: Session, job_title: str, job_description: str, interview_type: str,
                           experience_level: str) -> InterviewKV:
    """Return the cached question set for these job parameters, generating it on a miss."""
    key = build_kv_key(job_title, interview_type, experience_level)
    kv = get_kv(db, key)
    if kv:
        logger.info("Interview cache hit for %s", key)
        return kv

    questions = await generate_questions(job_title, experience_level, job_description, interview_type)
    kv = InterviewKV(
        key=key,
        value={
            "jobTitle": job_title,
            "jobDescription": job_description,
            "type": interview_type,
            "experienceLevel": experience_level,
            "questions": questions,
        },
    )
    db.add(kv)
    try:
        db.commit()
    except IntegrityError:
        # Another request stored the same key first
        db.rollback()
        kv = get_kv(db, key)
        if kv is None:
            raise
        return kv
    db.refresh(kv)
    return kv


def link_user(db: Session, user_id: str, kv_key: str) -> UserInterview:
    user_interview = UserInterview(user_id=user_id, interview_kv_key=kv_key, status="generated")
    db.add(user_interview)
    db.commit()
    db.refresh(user_interview)
    return user_interview


def extraction_prompt(description: str) -> str:
    return f"""Extract interview details from this description:

"{description}"

Analyze the description and extract/infer:
- jobTitle: The job position being interviewed for
- companyName: The company name if mentioned, otherwise use "Company"
- interviewType: Classify as technical, behavioral, problem-solving, case-study, situational, or live-coding
- experienceLevel: Classify as junior, mid, or senior based on context
- jobDescription: A short description of the role, if one can be inferred

Be intelligent about inference. Make reasonable assumptions based on context."""


async def extract_details(description: str) -> ExtractedInterviewDetails:
    return await llm.generate_object(extraction_prompt(description), ExtractedInterviewDetails)


def store_quick_interview(db: Session, user_id: str, details: ExtractedInterviewDetails,
                          questions: list[str]) -> UserInterview:
    """Store the question set and the user's link to it in one transaction."""
    key = build_quick_kv_key(details)
    value = {
        "jobTitle": details.job_title,
        "jobDescription": details.job_description,
        "type": details.interview_type,
        "experienceLevel": details.experience_level,
        "companyName": details.company_name,
        "questions": questions,
    }
    try:
        kv = get_kv(db, key)
        if kv:
            kv.value = value
        else:
            db.add(InterviewKV(key=key, value=value))
        user_interview = UserInterview(user_id=user_id, interview_kv_key=key, status="generated")
        db.add(user_interview)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(user_interview)
    return user_interview


def to_generated_interview(user_interview: UserInterview, kv: InterviewKV,
                           duration: Optional[int] = None) -> GeneratedInterview:
    value = kv.value or {}
    questions = [
        InterviewQuestion(
            id=f"{user_interview.id}-q{index + 1}",
            question=text,
            category=value.get("type", ""),
        )
        for index, text in enumerate(value.get("questions") or [])
    ]
    return GeneratedInterview(
        id=user_interview.id,
        job_title=value.get("jobTitle", ""),
        job_description=value.get("jobDescription") or "",
        duration=duration if duration is not None else value.get("duration"),
        type=value.get("type", ""),
        questions=questions,
        created_at=user_interview.created_at,
    )


def get_user_interview(db: Session, interview_id: str, user_id: str) -> Optional[UserInterview]:
    return db.query(UserInterview).filter(
        UserInterview.id == interview_id,
        UserInterview.user_id == user_id,
    ).first()


def list_interview_cards(db: Session, user_id: str) -> list[InterviewCard]:
    interviews = (
        db.query(UserInterview)
        .filter(UserInterview.user_id == user_id)
        .order_by(UserInterview.created_at.desc())
        .all()
    )

    # Latest attempt's score per interview
    scores: dict[str, int] = {}
    if interviews:
        rows = (
            db.query(Feedback.interview_id, Feedback.total_score)
            .filter(Feedback.interview_id.in_([i.id for i in interviews]))
            .order_by(Feedback.attempt_number.asc())
            .all()
        )
        for interview_id, total_score in rows:
            scores[interview_id] = total_score

    cards = []
    for interview in interviews:
        value = (interview.kv.value if interview.kv else None) or {}
        cards.append(
            InterviewCard(
                id=interview.id,
                title=value.get("jobTitle") or "Untitled Interview",
                description=value.get("jobDescription") or "No description available",
                duration=value.get("duration") or DEFAULT_DURATION_MINUTES,
                type=value.get("type") or "",
                completed_at=interview.created_at,
                score=scores.get(interview.id),
            )
        )
    return cards
