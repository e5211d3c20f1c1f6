"""Scoring a finished interview from its call transcript."""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from mockview.models.interview import Feedback, InterviewSession, UserInterview
from mockview.schemas.interview import FeedbackResponse, FeedbackResult, QuestionAnalysis, TranscriptMessage
from mockview.services import llm

logger = logging.getLogger(__name__)


def next_attempt_number(db: Session, user_id: str, interview_id: str) -> int:
    latest = (
        db.query(func.max(Feedback.attempt_number))
        .filter(Feedback.user_id == user_id, Feedback.interview_id == interview_id)
        .scalar()
    )
    return (latest or 0) + 1


def format_transcript(transcript: list[TranscriptMessage]) -> str:
    return "".join(f"- {message.role}: {message.content}\n" for message in transcript)


def feedback_prompt(details: dict, transcript: list[TranscriptMessage]) -> str:
    questions = "\n".join(
        f"{index + 1}. {question}" for index, question in enumerate(details.get("questions") or [])
    )
    return f"""Analyze this job interview performance and provide detailed feedback.

Job Details:
- Position: {details.get("jobTitle", "")}
- Type: {details.get("type", "")}
- Job Description: {details.get("jobDescription") or ""}

Interview Questions:
{questions}

Interview Transcript:
{format_transcript(transcript)}

Please provide:
1. A total score out of 100
2. Question by question analysis, returning each interview question, the user's response to the question, your feedback for the question and a suggested improved response. Skip questions where no response was provided
3. Key strengths demonstrated
4. Areas for improvement with specific suggestions
5. A comprehensive final assessment, do not address the user by name or gender, just say the candidate

Base your evaluation on:
- Relevance and depth of answers
- Communication clarity and professionalism
- Technical accuracy (if applicable)
- Problem-solving approach
- Cultural fit indicators
- Overall interview performance"""


async def evaluate(details: dict, transcript: list[TranscriptMessage]) -> FeedbackResult:
    return await llm.generate_object(feedback_prompt(details, transcript), FeedbackResult)


def save_feedback(db: Session, interview: UserInterview, user_id: str, attempt_number: int,
                  result: FeedbackResult) -> Feedback:
    """Persist the evaluation and mark the interview completed."""
    details = interview.kv.value if interview.kv else {}
    score = int(round(result.total_score))
    now = datetime.utcnow()

    feedback = Feedback(
        interview_id=interview.id,
        user_id=user_id,
        interview_kv_key=interview.interview_kv_key,
        attempt_number=attempt_number,
        total_score=score,
        question_analysis=[item.model_dump(by_alias=True) for item in result.question_analysis],
        strengths=result.strengths,
        areas_for_improvement=result.areas_for_improvement,
        final_assessment=result.final_assessment,
        interview_title=details.get("jobTitle"),
        type=details.get("type"),
        created_at=now,
    )
    db.add(feedback)

    interview.status = "completed"
    interview.completed_at = now
    interview.score = score

    db.commit()
    db.refresh(feedback)
    return feedback


def get_feedback(db: Session, user_id: str, interview_id: str,
                 attempt_number: Optional[int] = None) -> Optional[Feedback]:
    query = db.query(Feedback).filter(
        Feedback.interview_id == interview_id,
        Feedback.user_id == user_id,
    )
    if attempt_number is not None:
        return query.filter(Feedback.attempt_number == attempt_number).first()
    return query.order_by(Feedback.attempt_number.desc()).first()


def latest_call_id(db: Session, user_id: str, interview_id: str) -> Optional[str]:
    session = (
        db.query(InterviewSession)
        .filter(InterviewSession.interview_id == interview_id, InterviewSession.user_id == user_id)
        .order_by(InterviewSession.started_at.desc(), InterviewSession.id.desc())
        .first()
    )
    return session.vapi_call_id if session else None


def to_response(feedback: Feedback, call_id: Optional[str] = None) -> FeedbackResponse:
    return FeedbackResponse(
        interview_id=feedback.interview_id,
        user_id=feedback.user_id,
        attempt_number=feedback.attempt_number,
        total_score=feedback.total_score,
        question_analysis=[QuestionAnalysis.model_validate(item) for item in feedback.question_analysis or []],
        strengths=feedback.strengths or [],
        areas_for_improvement=feedback.areas_for_improvement or [],
        final_assessment=feedback.final_assessment or "",
        created_at=feedback.created_at,
        interview_title=feedback.interview_title,
        type=feedback.type,
        call_id=call_id,
    )
