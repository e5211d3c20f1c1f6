from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from mockview.schemas.base import CamelModel

InterviewType = Literal[
    "technical",
    "behavioral",
    "problem-solving",
    "case-study",
    "situational",
    "live-coding",
]

ExperienceLevel = Literal["entry-level", "junior", "mid-level", "senior", "lead"]


class CreateInterviewRequest(CamelModel):
    job_title: str = Field(min_length=2, max_length=100)
    job_description: str = Field(min_length=10, max_length=2000)
    interview_type: InterviewType
    experience_level: ExperienceLevel
    duration: Optional[int] = Field(default=None, gt=0)


class QuickCreateRequest(CamelModel):
    description: str = Field(min_length=10, max_length=500)


class ExtractedInterviewDetails(CamelModel):
    """What the model infers from a one-line interview description."""
    job_title: str
    company_name: str = "Company"
    interview_type: InterviewType
    experience_level: Literal["junior", "mid", "senior"]
    job_description: Optional[str] = None

    @field_validator("company_name", mode="before")
    @classmethod
    def default_company(cls, value):
        return value or "Company"


class InterviewQuestion(CamelModel):
    id: str
    question: str
    category: str


class GeneratedInterview(CamelModel):
    id: str
    job_title: str
    job_description: str
    duration: Optional[int] = None
    type: str
    questions: list[InterviewQuestion]
    created_at: datetime


class InterviewCard(CamelModel):
    id: str
    title: str
    description: str
    duration: int
    type: str
    completed_at: datetime
    score: Optional[int] = None


class SessionCreateRequest(CamelModel):
    call_id: Optional[str] = None


class TranscriptMessage(CamelModel):
    role: str
    content: str


class FeedbackRequest(CamelModel):
    transcript: list[TranscriptMessage] = Field(min_length=1)
    attempt_number: Optional[int] = Field(default=None, ge=1)


class QuestionAnalysis(CamelModel):
    question: str
    user_response: str
    feedback: str
    suggested_improvement: str


class FeedbackResult(CamelModel):
    """Structured evaluation returned by the model."""
    total_score: float = Field(ge=0, le=100)
    question_analysis: list[QuestionAnalysis]
    strengths: list[str]
    areas_for_improvement: list[str]
    final_assessment: str


class FeedbackResponse(CamelModel):
    interview_id: str
    user_id: str
    attempt_number: int
    total_score: int
    question_analysis: list[QuestionAnalysis]
    strengths: list[str]
    areas_for_improvement: list[str]
    final_assessment: str
    created_at: datetime
    interview_title: Optional[str] = None
    type: Optional[str] = None
    call_id: Optional[str] = None


class UserFeedbackRequest(CamelModel):
    interview_id: str = Field(min_length=1)
    rating: int = Field(ge=1, le=5)
    feedback: Optional[str] = None


class UserFeedbackResponse(CamelModel):
    id: int
    user_id: str
    user_email: Optional[str]
    interview_id: str
    rating: int
    feedback: Optional[str]
    created_at: datetime
